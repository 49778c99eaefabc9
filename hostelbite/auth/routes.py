from flask import Blueprint, request, session, current_app, jsonify
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from models import Users
from hostelbite.extensions import db_session
from hostelbite.jinjafilters.filters import hostel_block_name
from hostelbite.utils.grouping import HOSTEL_BLOCKS
from hostelbite.utils.validation import validate_password, validate_phone, validate_required
from hostelbite.wrappers.wrappers import login_required

bp_auth = Blueprint("auth", __name__, url_prefix="/auth")

HOSTEL_DETAIL_FIELDS = {
    "block": "default_hostel_block",
    "floor": "hostel_floor",
    "room": "hostel_room",
    "year": "hostel_year",
    "department": "hostel_department",
}


def serialize_user(user):
    # Never includes the password hash
    return {
        "id": user.id,
        "name": user.name,
        "phone": user.phone,
        "role": user.role,
        "hostel_details": {
            "block": user.default_hostel_block,
            "block_name": hostel_block_name(user.default_hostel_block),
            "floor": user.hostel_floor,
            "room": user.hostel_room,
            "year": user.hostel_year,
            "department": user.hostel_department,
        },
    }


def _login(user):
    session.clear()
    session["user_id"] = user.id
    session["role"] = user.role


@bp_auth.route("/register", methods=["POST"])
def register():
    data = request.get_json(silent=True) or {}
    name = data.get("name")
    phone = data.get("phone")
    password = data.get("password")

    if not validate_required(name or "") or not phone or not password:
        return jsonify({"error": "Name, phone, and password are required"}), 400
    if not validate_phone(phone):
        return jsonify({"error": "Invalid phone number format"}), 400
    if not validate_password(password):
        return jsonify({"error": "Password must be at least 6 characters"}), 400

    details = data.get("hostel_details") or {}
    if not isinstance(details, dict):
        return jsonify({"error": "Invalid hostel details"}), 400
    block = details.get("block")
    if block and block not in HOSTEL_BLOCKS:
        return jsonify({"error": f"Unknown hostel block '{block}'"}), 400

    if db_session.query(Users.id).filter_by(phone=phone).first():
        return jsonify({"error": "Phone number is already registered"}), 409

    user = Users(
        name=name.strip(),
        phone=phone,
        password_hash=generate_password_hash(password),
        role="USER",
    )
    for key, column in HOSTEL_DETAIL_FIELDS.items():
        value = details.get(key)
        setattr(user, column, str(value).strip() if value else None)

    try:
        db_session.add(user)
        db_session.commit()
    except IntegrityError:
        # Lost a race with another registration for the same phone
        db_session.rollback()
        return jsonify({"error": "Phone number is already registered"}), 409

    _login(user)
    current_app.logger.info("Registered user %s", user.id)
    return jsonify({"user": serialize_user(user)}), 201


@bp_auth.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    phone = data.get("phone")
    password = data.get("password")

    if not phone or not password:
        return jsonify({"error": "Phone and password are required"}), 400
    if not validate_phone(phone):
        return jsonify({"error": "Invalid phone number format"}), 400

    user = db_session.query(Users).filter_by(phone=phone).one_or_none()
    if not user or not check_password_hash(user.password_hash, password):
        return jsonify({"error": "Phone number or password is incorrect"}), 401

    _login(user)
    return jsonify({"user": serialize_user(user)})


@bp_auth.route("/logout", methods=["POST"])
@login_required
def logout():
    session.clear()
    return jsonify({"ok": True})


@bp_auth.route("/me")
@login_required
def me():
    user = db_session.get(Users, session["user_id"])
    if not user:
        session.clear()
        return jsonify({"error": "User not found"}), 404
    return jsonify({"user": serialize_user(user)})
