from flask import Flask
import click
import redis

from hostelbite.extensions import socketio, cors, session_ext, init_db
import hostelbite.extensions as ext

def create_app(config_class='hostelbite.config.Config'):
    app = Flask(__name__)
    app.config.from_object(config_class)

    if app.config.get("REDIS_URL"):
        # Flask-Session expects a Redis *client*, not a URL string
        app.config["SESSION_TYPE"] = "redis"
        app.config["SESSION_REDIS"] = redis.Redis.from_url(app.config["REDIS_URL"])
    else:
        app.config["SESSION_TYPE"] = "filesystem"

    # Flask extensions
    cors.init_app(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})
    session_ext.init_app(app)     # Server-side sessions
    socketio.init_app(app, async_mode=app.config.get("SOCKETIO_ASYNC_MODE"))

    # DB session (SQLAlchemy core)
    init_db(app.config['DATABASE_URL'])

    # Teardown: remove scoped_session at end of request/app context
    @app.teardown_request
    def end_txn_on_request(exc):
        sess = ext.db_session
        try:
            if exc is not None:
                sess.rollback()
            else:
                sess.commit()
        finally:
            sess.remove()

    import time
    import logging
    from flask import g, request

    log = logging.getLogger("perf")
    if not log.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        log.addHandler(h)
        log.setLevel(logging.INFO)
        log.propagate = False

    @app.before_request
    def _start_timer():
        g._t0 = time.perf_counter()

    @app.after_request
    def _log_slow(resp):
        t0 = getattr(g, "_t0", None)
        if t0 is not None:
            dt_ms = (time.perf_counter() - t0) * 1000
            if dt_ms > 250:
                log.warning("SLOW %s %s %.0f ms status=%s",
                            request.method, request.path, dt_ms, resp.status_code)
        return resp

    # Blueprints
    from hostelbite.auth.routes import bp_auth
    from hostelbite.consumer.api import bp_consumer_api
    from hostelbite.staff.api import bp_staff_api
    app.register_blueprint(bp_auth)
    app.register_blueprint(bp_consumer_api)
    app.register_blueprint(bp_staff_api)

    # Jinja filters (also used by the JSON serializers)
    from .jinjafilters.filters import register_filters
    register_filters(app)

    # Socket.IO event handlers (IMPORT so decorators bind)
    from hostelbite.staff import events as _

    @app.cli.command("init-db")
    def init_db_command():
        """Create all tables."""
        from models import Base
        Base.metadata.create_all(ext.engine)
        click.echo("Database tables created.")

    @app.cli.command("seed-menu")
    def seed_menu_command():
        """Insert or refresh the standard menu."""
        from hostelbite.utils.menu import seed_menu
        created, updated = seed_menu(ext.db_session)
        ext.db_session.commit()
        click.echo(f"Menu seeded: {created} created, {updated} updated.")

    return app
