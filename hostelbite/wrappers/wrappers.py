from functools import wraps
from flask import session, jsonify
from flask_socketio import disconnect


def login_required(func):
    @wraps(func)
    def decorated_function(*args, **kwargs):
        if 'user_id' not in session:
            return jsonify({"error": "You must be logged in to do that."}), 401
        return func(*args, **kwargs)
    return decorated_function

def role_required(role):
    # Only allow users with a specific role
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if session.get('role', 'USER') != role:
                return jsonify({"error": "Forbidden", "message": "Admin access required"}), 403
            return func(*args, **kwargs)
        return wrapper
    return decorator

def socket_login_required(func):
    """
    Guard for Socket.IO events: requires 'user_id' in session.
    Disconnects the socket if unauthenticated.
    """
    @wraps(func)
    def wrapped(*args, **kwargs):
        if 'user_id' not in session:
            disconnect()
            return
        return func(*args, **kwargs)
    return wrapped


def socket_role_required(role: str):
    """
    Guard for Socket.IO events: requires matching role in session.
    Usage:
        @socketio.on("join_staff", namespace="/staff")
        @socket_role_required("ADMIN")
        def handle_join_staff(data): ...
    """
    def decorator(func):
        @wraps(func)
        def wrapped(*args, **kwargs):
            user_role = session.get('role', 'USER')
            if user_role != role:
                disconnect()
                return
            return func(*args, **kwargs)
        return wrapped
    return decorator
