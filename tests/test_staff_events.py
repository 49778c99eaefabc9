from hostelbite.extensions import socketio
from hostelbite.staff.events import NAMESPACE, STAFF_ROOM, notify_staff


def test_join_staff_ignores_requested_room(app, admin_client):
    sio = socketio.test_client(app, namespace=NAMESPACE, flask_test_client=admin_client)
    assert sio.is_connected(NAMESPACE)

    ack = sio.emit("join_staff", {"room": "somewhere-else"}, namespace=NAMESPACE, callback=True)
    assert ack == {"ok": True, "room": STAFF_ROOM}

    with app.app_context():
        notify_staff("new_order", order_id=1)
    received = sio.get_received(NAMESPACE)
    assert [(r["name"], r["args"][0]["order_id"]) for r in received] == [("order_update", 1)]
    sio.disconnect(namespace=NAMESPACE)
