import os

class Config:
    # --- Your env vars ---
    SECRET_KEY = os.environ.get("SECRET_KEY")
    DATABASE_URL = os.environ.get("DATABASE_URL")
    REDIS_URL = os.environ.get("REDIS_URL")

    # --- Delivery ---
    LOCAL_TIMEZONE = os.environ.get("LOCAL_TIMEZONE", "Asia/Kolkata")
    # "True" makes every slot bookable and lifts the daily order limit (testing/admin override)
    ENABLE_ALL_SLOTS = os.environ.get("ENABLE_ALL_SLOTS") == "True"
    MAX_ORDERS_PER_DAY = int(os.environ.get("MAX_ORDERS_PER_DAY", "10"))

    # --- Socket.IO ---
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "eventlet")

    # --- Sessions  ---
    SESSION_TYPE = "redis"
    SESSION_PERMANENT = True
    SESSION_USE_SIGNER = False
    SESSION_KEY_PREFIX = "sess:"

    # --- Cookie hardening ---
    SESSION_COOKIE_HTTPONLY = True
    # "True" in production behind HTTPS
    SESSION_COOKIE_SECURE = os.environ.get("SESSION_COOKIE_SECURE") == "True"
    SESSION_COOKIE_SAMESITE = "Lax"

    # --- CORS ---
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")
