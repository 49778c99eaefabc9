from flask_cors import CORS
from flask_session import Session
from flask_socketio import SocketIO
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy import create_engine

# Flask extensions
socketio = SocketIO()
session_ext = Session()
cors = CORS()

# SQLAlchemy
engine = None
# Bound in init_db; modules can import it before the engine exists.
db_session = scoped_session(sessionmaker(autoflush=False))

def init_db(uri):
    global engine
    if uri.startswith("sqlite"):
        # Local runs and tests: one shared in-memory connection
        engine = create_engine(
            uri,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(
        uri,
        pool_size=10,
        max_overflow=5,
        pool_pre_ping=True,        # ping before checkout; auto-dispose dead conns
        pool_recycle=300,          # recycle connections before pgbouncer idles them
        pool_timeout=30,
        connect_args={
            "sslmode": "require",
            "keepalives": 1,
            "keepalives_idle": 30,
            "keepalives_interval": 10,
            "keepalives_count": 5,
            "options": "-c statement_timeout=30000 -c idle_in_transaction_session_timeout=15000",
        },)

    db_session.remove()
    db_session.configure(bind=engine)
    return engine, db_session
