from flask import Blueprint, request, session, jsonify, current_app
from sqlalchemy.orm import selectinload
from sqlalchemy.exc import SQLAlchemyError

from models import MenuItems, Orders, OrderItems
from hostelbite.extensions import db_session
from hostelbite.staff.events import notify_staff
from hostelbite.utils.calculation import paginate
from hostelbite.utils.grouping import HOSTEL_BLOCKS
from hostelbite.utils.menu import menu_by_category
from hostelbite.utils.serializers import serialize_order
from hostelbite.utils.slots import delivery_window_state, booking_window, enumerate_slots
from hostelbite.utils.time import now_local, to_utc
from hostelbite.utils.validation import OrderValidationError, validate_order, within_order_limit
from hostelbite.wrappers.wrappers import login_required

MAX_PAGE_SIZE = 50

bp_consumer_api = Blueprint("consumer_api", __name__, url_prefix="/api")


@bp_consumer_api.route("/hostel_blocks")
def hostel_blocks():
    return jsonify([{"id": slug, "name": name} for slug, name in HOSTEL_BLOCKS.items()])


@bp_consumer_api.route("/menu")
def menu():
    items = (
        db_session.query(MenuItems)
        .filter(MenuItems.is_available.is_(True))
        .all()
    )
    return jsonify(menu_by_category(items))


@bp_consumer_api.route("/slots")
def slots():
    now = now_local()
    bypass = current_app.config.get("ENABLE_ALL_SLOTS", False)
    window = booking_window(now)
    return jsonify({
        "now": now.isoformat(),
        "state": delivery_window_state(now).value,
        "working_day": window.to_dict(),
        "slots": [slot.to_dict() for slot in enumerate_slots(now, bypass)],
    })


@bp_consumer_api.route("/orders", methods=["POST"])
@login_required
def place_order():
    user_id = session.get("user_id")
    payload = request.get_json(silent=True) or {}

    # One clock reading for the whole request
    now = now_local()
    bypass = current_app.config.get("ENABLE_ALL_SLOTS", False)

    try:
        cleaned = validate_order(payload, now, bypass_availability=bypass)
    except OrderValidationError as e:
        return jsonify({"error": str(e), "kind": type(e).__name__}), e.status_code

    limit = current_app.config.get("MAX_ORDERS_PER_DAY", 10)
    if not bypass and not within_order_limit(user_id, now, limit):
        return jsonify({"error": "You have reached the order limit for today"}), 429

    slot = cleaned["slot"]
    try:
        order = Orders(
            user_id=user_id,
            target_hostel_block=cleaned["target_hostel_block"],
            slot_time=to_utc(slot.start_time),
            status="ACCEPTED",
            total_amount=cleaned["total_amount"],
            created_at=to_utc(now),
            updated_at=to_utc(now),
        )
        db_session.add(order)
        db_session.flush()

        # Snapshot names and prices
        for menu_item, quantity in cleaned["lines"]:
            db_session.add(OrderItems(
                order_id=order.id,
                menu_item_id=menu_item.id,
                menu_item_name=menu_item.name,
                price_at_order=menu_item.price,
                quantity=quantity,
            ))
        db_session.commit()
    except SQLAlchemyError:
        db_session.rollback()
        current_app.logger.exception("Order placement failed for user %s", user_id)
        return jsonify({"error": "Failed to place order"}), 500

    notify_staff(
        "new_order",
        order_id=order.id,
        slot_time=slot.start_time.isoformat(),
        target_hostel_block=order.target_hostel_block,
    )

    return jsonify({
        "success": True,
        "order_id": order.id,
        "slot": slot.to_dict(),
        "total_amount": order.total_amount,
        "message": "Order placed successfully",
    }), 201


@bp_consumer_api.route("/orders/history")
@login_required
def order_history():
    user_id = session["user_id"]

    try:
        page = int(request.args.get("page", 1))
        limit = int(request.args.get("limit", 10))
    except ValueError:
        return jsonify({"error": "Page and limit must be positive integers"}), 400
    if page < 1 or limit < 1:
        return jsonify({"error": "Page and limit must be positive integers"}), 400
    limit = min(limit, MAX_PAGE_SIZE)

    query = db_session.query(Orders).filter_by(user_id=user_id)
    total = query.count()
    orders = (
        query.options(selectinload(Orders.order_items))
        .order_by(Orders.created_at.desc(), Orders.id.desc())
        .limit(limit)
        .offset((page - 1) * limit)
        .all()
    )

    return jsonify({
        "orders": [serialize_order(o) for o in orders],
        "pagination": paginate(total, page, limit),
    })
