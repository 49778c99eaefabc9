# staff/events.py
from flask import current_app
from flask_socketio import join_room

from hostelbite.extensions import socketio
from hostelbite.wrappers.wrappers import socket_login_required, socket_role_required

NAMESPACE = "/staff"
STAFF_ROOM = "staff_updates"

@socketio.on("connect", namespace=NAMESPACE)
@socket_login_required
@socket_role_required("ADMIN")
def staff_connect():
    pass

@socketio.on("join_staff", namespace=NAMESPACE)
@socket_login_required
@socket_role_required("ADMIN")
def handle_join_staff(payload=None, *args, **kwargs):
    # Staff always share one room; a client-supplied room name is ignored
    join_room(STAFF_ROOM)
    return {"ok": True, "room": STAFF_ROOM}

def notify_staff(event_type, **data):
    """Push a small order_update to the staff room. Never fails the request."""
    try:
        socketio.emit(
            "order_update",
            {"type": event_type, **data},
            namespace=NAMESPACE,
            to=STAFF_ROOM,
        )
    except Exception:
        current_app.logger.exception("Failed to notify staff of %s", event_type)
