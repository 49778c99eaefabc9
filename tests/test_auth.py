from conftest import register


def test_register_logs_in(client):
    resp = register(client, block="kpc-girls", room="214")
    assert resp.status_code == 201
    user = resp.get_json()["user"]
    assert user["role"] == "USER"
    assert user["hostel_details"]["block"] == "kpc-girls"
    assert user["hostel_details"]["block_name"] == "KPC girls hostel"
    assert user["hostel_details"]["room"] == "214"
    assert "password_hash" not in user

    me = client.get("/auth/me")
    assert me.status_code == 200
    assert me.get_json()["user"]["phone"] == "9876543210"


def test_register_validation(client):
    assert register(client, name="  ").status_code == 400
    assert register(client, phone="12345").status_code == 400
    assert register(client, password="abc").status_code == 400
    assert register(client, block="library").status_code == 400


def test_duplicate_phone(client, app):
    assert register(client).status_code == 201
    other = app.test_client()
    resp = register(other, name="Someone Else")
    assert resp.status_code == 409


def test_login_and_logout(client, app):
    register(app.test_client())

    bad = client.post("/auth/login", json={"phone": "9876543210", "password": "wrong-pass"})
    assert bad.status_code == 401

    good = client.post("/auth/login", json={"phone": "9876543210", "password": "secret1"})
    assert good.status_code == 200
    assert good.get_json()["user"]["name"] == "Asha"

    assert client.post("/auth/logout").status_code == 200
    assert client.get("/auth/me").status_code == 401


def test_login_requires_fields(client):
    assert client.post("/auth/login", json={"phone": "9876543210"}).status_code == 400
