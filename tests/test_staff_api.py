import pytest

from test_orders_api import place


@pytest.fixture
def tonight(client, menu, student, freeze_now):
    """Three orders for the 10 Jan night, placed at 22:00."""
    freeze_now(2025, 1, 10, 22, 0)
    ids = [
        place(client, slot_time="2025-01-10T23:30:00+05:30", block="new-block").get_json()["order_id"],
        place(client, slot_time="2025-01-10T23:30:00+05:30", block="kpc-boys").get_json()["order_id"],
        place(client, slot_time="2025-01-11T05:00:00+05:30", block="kpc-boys",
              items=[{"item_id": "maggi-fish", "quantity": 1}]).get_json()["order_id"],
    ]
    return ids


def deliver(admin_client, order_id):
    for status in ("ACKNOWLEDGED", "DELIVERED"):
        resp = admin_client.patch(f"/staff/orders/{order_id}/status", json={"status": status})
        assert resp.status_code == 200


def test_students_are_forbidden(client, student):
    assert client.get("/staff/working_day").status_code == 403
    assert client.get("/staff/feed").status_code == 403


def test_anonymous_is_unauthorized(app):
    assert app.test_client().get("/staff/feed").status_code == 401


def test_working_day(admin_client, freeze_now):
    freeze_now(2025, 1, 11, 3, 0)
    data = admin_client.get("/staff/working_day").get_json()["working_day"]
    assert data["label"] == "Jan 10, 11pm - Jan 11, 5am"
    assert data["date"] == "2025-01-10"

    picked = admin_client.get("/staff/working_day?date=2025-01-05").get_json()["working_day"]
    assert picked["start"] == "2025-01-05T23:00:00+05:30"

    assert admin_client.get("/staff/working_day?date=05/01/2025").status_code == 400


def test_orders_json_incremental(admin_client, tonight, freeze_now):
    freeze_now(2025, 1, 10, 23, 45)
    everything = admin_client.post("/staff/orders_json", json={}).get_json()
    # 5:00 AM slot belongs to the night
    assert [o["id"] for o in everything["orders"]] == tonight
    assert everything["max_id"] == tonight[-1]
    assert everything["orders"][0]["user"]["name"] == "Asha"

    newer = admin_client.post("/staff/orders_json", json={"since_id": tonight[0]}).get_json()
    assert [o["id"] for o in newer["orders"]] == tonight[1:]

    nothing = admin_client.post("/staff/orders_json", json={"since_id": tonight[-1]}).get_json()
    assert nothing["orders"] == []
    assert nothing["max_id"] == tonight[-1]


def test_orders_json_status_filter(admin_client, tonight, freeze_now):
    freeze_now(2025, 1, 10, 23, 45)
    deliver(admin_client, tonight[0])
    delivered = admin_client.get("/staff/orders_json?status=DELIVERED").get_json()
    assert [o["id"] for o in delivered] == [tonight[0]]
    assert admin_client.get("/staff/orders_json?status=LOST").status_code == 400


def test_orders_json_other_night_is_empty(admin_client, tonight, freeze_now):
    freeze_now(2025, 1, 10, 23, 45)
    assert admin_client.get("/staff/orders_json?date=2025-01-09").get_json() == []


def test_feed_groups_orders(admin_client, tonight, freeze_now):
    freeze_now(2025, 1, 11, 0, 10)
    data = admin_client.get("/staff/feed").get_json()
    assert data["total_orders"] == 3
    assert len(data["slots"]) == 13

    # Upcoming first
    assert data["slots"][0]["slot"]["display"] == "12:30 AM"
    by_time = {s["slot_time"]: s for s in data["slots"]}
    cell = by_time["2025-01-10T23:30:00+05:30"]
    assert cell["slot"]["is_past"]
    assert [o["id"] for o in cell["blocks"]["new-block"]] == [tonight[0]]
    assert [o["id"] for o in cell["blocks"]["kpc-boys"]] == [tonight[1]]
    assert cell["blocks"]["kpc-girls"] == []
    assert cell["blocks"]["kpc-boys"][0]["slot_time"] == "2025-01-10T23:30:00+05:30"


def test_feed_for_picked_date(admin_client, tonight, freeze_now):
    freeze_now(2025, 1, 12, 12, 0)
    assert admin_client.get("/staff/feed").get_json()["total_orders"] == 0
    data = admin_client.get("/staff/feed?date=2025-01-10").get_json()
    assert data["total_orders"] == 3
    assert data["working_day"]["date"] == "2025-01-10"
    assert admin_client.get("/staff/feed?date=yesterday").status_code == 400


def test_order_details(admin_client, tonight, freeze_now):
    freeze_now(2025, 1, 10, 23, 45)
    resp = admin_client.get(
        "/staff/orders/details",
        query_string={"slot_time": "2025-01-10T23:30:00+05:30", "hostel_block": "kpc-boys"},
    )
    assert resp.status_code == 200
    data = resp.get_json()
    assert [o["id"] for o in data["orders"]] == [tonight[1]]
    assert data["hostel_block_name"] == "KPC boys hostel"

    missing = admin_client.get("/staff/orders/details", query_string={"slot_time": "2025-01-10T23:30:00"})
    assert missing.status_code == 400


def test_status_transitions(admin_client, tonight):
    order_id = tonight[0]
    url = f"/staff/orders/{order_id}/status"

    assert admin_client.patch(url, json={"status": "DELIVERED"}).status_code == 400
    assert admin_client.patch(url, json={"status": "COOKING"}).status_code == 400

    resp = admin_client.patch(url, json={"status": "ACKNOWLEDGED"})
    assert resp.status_code == 200
    assert resp.get_json()["order"]["status"] == "ACKNOWLEDGED"

    assert admin_client.patch(url, json={"status": "REJECTED"}).status_code == 200
    # Terminal
    assert admin_client.patch(url, json={"status": "ACKNOWLEDGED"}).status_code == 400

    assert admin_client.patch("/staff/orders/99999/status", json={"status": "REJECTED"}).status_code == 404


def test_analytics(admin_client, tonight, freeze_now):
    deliver(admin_client, tonight[0])
    deliver(admin_client, tonight[2])
    admin_client.patch(f"/staff/orders/{tonight[1]}/status", json={"status": "REJECTED"})

    freeze_now(2025, 1, 11, 5, 30)

    day = admin_client.get("/staff/analytics?type=working-day-revenue").get_json()
    assert day["revenue"] == 20 + 119
    assert day["working_day"]["date"] == "2025-01-10"

    assert admin_client.get("/staff/analytics?type=total-revenue").get_json()["revenue"] == 139

    counts = admin_client.get("/staff/analytics?type=status-counts").get_json()["counts"]
    assert counts == {"ACCEPTED": 0, "ACKNOWLEDGED": 0, "DELIVERED": 2, "REJECTED": 1}

    groups = admin_client.get("/staff/analytics?type=slot-block-groups").get_json()["groups"]
    assert groups[0] == {
        "slot_time": "2025-01-11T05:00:00+05:30",
        "target_hostel_block": "kpc-boys",
        "count": 1,
        "total_amount": 119,
    }
    assert len(groups) == 3

    top = admin_client.get("/staff/analytics?type=top-blocks&limit=1").get_json()
    assert top["blocks"] == [{
        "target_hostel_block": "kpc-boys",
        "hostel_block_name": "KPC boys hostel",
        "total_revenue": 119,
        "order_count": 1,
    }]

    other_night = admin_client.get("/staff/analytics?type=working-day-revenue&date=2025-01-09")
    assert other_night.get_json()["revenue"] == 0


def test_analytics_rejects_bad_input(admin_client):
    assert admin_client.get("/staff/analytics?type=daily").status_code == 400
    assert admin_client.get("/staff/analytics?type=status-counts&date=nope").status_code == 400
    assert admin_client.get("/staff/analytics?type=top-blocks&limit=0").status_code == 400


def test_menu_availability(admin_client, client, menu):
    url = "/staff/menu/maggi-fish/availability"
    assert admin_client.post(url).get_json()["is_available"] is False
    menu_ids = [i["id"] for c in client.get("/api/menu").get_json() for i in c["items"]]
    assert "maggi-fish" not in menu_ids

    assert admin_client.post(url, json={"is_available": True}).get_json()["is_available"] is True
    assert admin_client.post(url, json={"is_available": "yes"}).status_code == 400
    assert admin_client.post("/staff/menu/caviar/availability").status_code == 404
