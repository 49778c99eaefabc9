from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from hostelbite.config import Config

IST = ZoneInfo("Asia/Kolkata")


class TestConfig(Config):
    __test__ = False

    TESTING = True
    SECRET_KEY = "test-secret"
    DATABASE_URL = "sqlite://"
    REDIS_URL = None
    LOCAL_TIMEZONE = "Asia/Kolkata"
    ENABLE_ALL_SLOTS = False
    MAX_ORDERS_PER_DAY = 10
    SOCKETIO_ASYNC_MODE = "threading"


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    from hostelbite import create_app
    import hostelbite.extensions as ext
    from models import Base

    TestConfig.SESSION_FILE_DIR = str(tmp_path_factory.mktemp("sessions"))
    app = create_app(TestConfig)
    Base.metadata.create_all(ext.engine)
    yield app


@pytest.fixture(autouse=True)
def clean_db(request):
    yield
    if "app" not in request.fixturenames:
        return
    import hostelbite.extensions as ext
    from models import Base

    ext.db_session.remove()
    with ext.engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    import hostelbite.extensions as ext
    yield ext.db_session
    ext.db_session.remove()


@pytest.fixture
def menu(db):
    from hostelbite.utils.menu import seed_menu
    seed_menu(db)
    db.commit()


@pytest.fixture
def freeze_now(monkeypatch):
    """Pin the request clock, e.g. freeze_now(2025, 1, 10, 22, 0)."""
    def _freeze(*args):
        now = datetime(*args, tzinfo=IST)
        monkeypatch.setattr("hostelbite.consumer.api.now_local", lambda: now)
        monkeypatch.setattr("hostelbite.staff.api.now_local", lambda: now)
        return now
    return _freeze


def register(client, phone="9876543210", password="secret1", name="Asha", **details):
    body = {"name": name, "phone": phone, "password": password}
    if details:
        body["hostel_details"] = details
    return client.post("/auth/register", json=body)


@pytest.fixture
def register_user(client):
    def _register(**kwargs):
        return register(client, **kwargs)
    return _register


@pytest.fixture
def student(client):
    resp = register(client)
    assert resp.status_code == 201
    return resp.get_json()["user"]


@pytest.fixture
def admin_client(app, db):
    from models import Users

    staff = app.test_client()
    resp = register(staff, phone="9000000001", name="Night Staff")
    assert resp.status_code == 201

    user = db.query(Users).filter_by(phone="9000000001").one()
    user.role = "ADMIN"
    db.commit()

    # New session picks up the role
    resp = staff.post("/auth/login", json={"phone": "9000000001", "password": "secret1"})
    assert resp.get_json()["user"]["role"] == "ADMIN"
    return staff
