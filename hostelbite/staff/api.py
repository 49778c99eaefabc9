from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.orm import selectinload
from sqlalchemy import func, true as sa_true
from sqlalchemy.exc import SQLAlchemyError

from models import ORDER_STATUSES, MenuItems, Orders
from hostelbite.extensions import db_session
from hostelbite.staff.events import notify_staff
from hostelbite.utils.grouping import (
    HOSTEL_BLOCKS, count_orders_in_groups, group_orders_by_slot_and_block
)
from hostelbite.utils.serializers import isoformat_slot_time, serialize_order
from hostelbite.utils.slots import booking_window
from hostelbite.utils.time import (
    SLOT_LENGTH, InvalidInput, date_input_to_working_day, normalize_to_slot,
    now_local, parse_timestamp, to_local, to_utc, window_for_date, working_day_for_request,
)
from hostelbite.wrappers.wrappers import login_required, role_required

bp_staff_api = Blueprint('staff_api', __name__, url_prefix="/staff")

# Terminal states have no entry
VALID_TRANSITIONS = {
    "ACCEPTED": ("ACKNOWLEDGED", "REJECTED"),
    "ACKNOWLEDGED": ("DELIVERED", "REJECTED"),
}

ANALYTICS_TYPES = (
    "working-day-revenue", "total-revenue", "status-counts", "slot-block-groups", "top-blocks",
)


def in_window(window):
    # Inclusive end so the 5:00 AM slot belongs to its night
    return (
        Orders.slot_time >= to_utc(window.start),
        Orders.slot_time <= to_utc(window.end),
    )


def _orders_query():
    return db_session.query(Orders).options(
        selectinload(Orders.user),
        selectinload(Orders.order_items),
    )


@bp_staff_api.route('/working_day')
@login_required
@role_required('ADMIN')
def working_day():
    now = now_local()
    try:
        window = working_day_for_request(request.args.get('date'), now)
    except InvalidInput as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"working_day": window.to_dict(), "now": now.isoformat()})


@bp_staff_api.route("/orders_json", methods=["POST", "GET"])
@login_required
@role_required("ADMIN")
def orders_json():
    # Payload for incremental fetches
    payload = request.get_json(silent=True) or {}

    try:
        since_id = int(payload.get("since_id", request.args.get("since_id", 0)) or 0)
        if since_id < 0:
            since_id = 0
    except (TypeError, ValueError):
        since_id = 0

    status = payload.get("status") or request.args.get("status")
    if status and status not in ORDER_STATUSES:
        return jsonify({"error": f"Invalid status '{status}'"}), 400

    now = now_local()
    try:
        window = working_day_for_request(payload.get("date") or request.args.get("date"), now)
    except InvalidInput as e:
        return jsonify({"error": str(e)}), 400

    delta_filter = (Orders.id > since_id) if since_id else sa_true()
    status_filter = (Orders.status == status) if status else sa_true()

    orders = (
        _orders_query()
        .filter(*in_window(window), delta_filter, status_filter)
        .order_by(Orders.id.asc())
        .all()
    )

    orders_list = [serialize_order(o, include_user=True) for o in orders]
    max_id = orders[-1].id if orders else since_id

    # POST returns wrapper with max_id; GET can return just the list
    if request.method == "POST":
        return jsonify({"orders": orders_list, "max_id": max_id, "working_day": window.to_dict()})
    return jsonify(orders_list)


@bp_staff_api.route('/feed')
@login_required
@role_required('ADMIN')
def feed():
    """Tonight's orders laid out on the slot x hostel-block grid."""
    now = now_local()
    date_param = request.args.get('date')

    explicit = None
    if date_param:
        try:
            explicit = window_for_date(date_input_to_working_day(date_param), now.tzinfo)
        except InvalidInput as e:
            return jsonify({"error": str(e)}), 400
    window = explicit or booking_window(now)

    orders = _orders_query().filter(*in_window(window)).order_by(Orders.id.asc()).all()
    serialized = [serialize_order(o, include_user=True, iso=False) for o in orders]

    bypass = current_app.config.get("ENABLE_ALL_SLOTS", False)
    grouped = group_orders_by_slot_and_block(serialized, now, window=explicit, bypass_availability=bypass)

    return jsonify({
        "working_day": window.to_dict(),
        "total_orders": count_orders_in_groups(grouped),
        "slots": [g.to_dict(isoformat_slot_time) for g in grouped],
    })


@bp_staff_api.route('/orders/details')
@login_required
@role_required('ADMIN')
def order_details():
    now = now_local()
    raw_slot = request.args.get('slot_time')
    block = request.args.get('hostel_block')
    if not raw_slot or not block:
        return jsonify({"error": "slot_time and hostel_block are required"}), 400
    if block not in HOSTEL_BLOCKS:
        return jsonify({"error": f"Unknown hostel block '{block}'"}), 400
    try:
        slot_start = normalize_to_slot(parse_timestamp(raw_slot, now.tzinfo))
    except InvalidInput as e:
        return jsonify({"error": str(e)}), 400

    orders = (
        _orders_query()
        .filter(
            Orders.target_hostel_block == block,
            Orders.slot_time >= to_utc(slot_start),
            Orders.slot_time < to_utc(slot_start + SLOT_LENGTH),
        )
        .order_by(Orders.created_at.asc(), Orders.id.asc())
        .all()
    )

    return jsonify({
        "slot_time": slot_start.isoformat(),
        "hostel_block": block,
        "hostel_block_name": HOSTEL_BLOCKS[block],
        "orders": [serialize_order(o, include_user=True) for o in orders],
    })


@bp_staff_api.route('/orders/<int:order_id>/status', methods=['PATCH'])
@login_required
@role_required('ADMIN')
def update_order_status(order_id):
    data = request.get_json(silent=True) or {}
    new_status = data.get('status')

    # Validate input
    if new_status not in ORDER_STATUSES:
        return jsonify({"error": "Invalid status", "allowed": list(ORDER_STATUSES)}), 400

    order = db_session.get(Orders, order_id)
    if not order:
        return jsonify({"error": "Order not found"}), 404

    old_status = order.status
    if new_status not in VALID_TRANSITIONS.get(old_status, ()):
        return jsonify({
            "error": f"Cannot change an order from {old_status} to {new_status}",
            "allowed": list(VALID_TRANSITIONS.get(old_status, ())),
        }), 400

    try:
        order.status = new_status
        order.updated_at = to_utc(now_local())
        db_session.commit()
    except SQLAlchemyError:
        db_session.rollback()
        current_app.logger.exception("Failed to update status of order %s", order_id)
        return jsonify({"error": "Failed to update order status"}), 500

    notify_staff("status_change", order_id=order.id, old_status=old_status, status=new_status)
    return jsonify({"success": True, "order": serialize_order(order, include_user=True)})


def _status_counts(filters):
    rows = (
        db_session.query(Orders.status, func.count(Orders.id))
        .filter(*filters)
        .group_by(Orders.status)
        .all()
    )
    counts = {status: 0 for status in ORDER_STATUSES}
    counts.update({status: count for status, count in rows})
    return counts


def _revenue(filters):
    total = (
        db_session.query(func.coalesce(func.sum(Orders.total_amount), 0))
        .filter(Orders.status == "DELIVERED", *filters)
        .scalar()
    )
    return int(total or 0)


def _slot_block_groups(filters):
    rows = (
        db_session.query(
            Orders.slot_time,
            Orders.target_hostel_block,
            func.count(Orders.id),
            func.coalesce(func.sum(Orders.total_amount), 0),
        )
        .filter(*filters)
        .group_by(Orders.slot_time, Orders.target_hostel_block)
        .order_by(Orders.slot_time.desc(), Orders.target_hostel_block)
        .all()
    )
    return [
        {
            "slot_time": to_local(slot_time).isoformat(),
            "target_hostel_block": block,
            "count": count,
            "total_amount": int(amount),
        }
        for slot_time, block, count, amount in rows
    ]


def _top_blocks(limit):
    revenue = func.sum(Orders.total_amount)
    rows = (
        db_session.query(Orders.target_hostel_block, revenue, func.count(Orders.id))
        .filter(Orders.status == "DELIVERED")
        .group_by(Orders.target_hostel_block)
        .order_by(revenue.desc())
        .limit(limit)
        .all()
    )
    return [
        {
            "target_hostel_block": block,
            "hostel_block_name": HOSTEL_BLOCKS.get(block, block),
            "total_revenue": int(total or 0),
            "order_count": count,
        }
        for block, total, count in rows
    ]


@bp_staff_api.route('/analytics')
@login_required
@role_required('ADMIN')
def analytics():
    kind = request.args.get('type')
    if kind not in ANALYTICS_TYPES:
        return jsonify({"error": f"Invalid type parameter. Must be one of: {', '.join(ANALYTICS_TYPES)}"}), 400

    now = now_local()
    try:
        window = working_day_for_request(request.args.get('date'), now)
    except InvalidInput as e:
        return jsonify({"error": str(e)}), 400
    scoped = in_window(window)

    try:
        if kind == "working-day-revenue":
            return jsonify({"revenue": _revenue(scoped), "working_day": window.to_dict()})
        if kind == "total-revenue":
            return jsonify({"revenue": _revenue(())})
        if kind == "status-counts":
            return jsonify({"counts": _status_counts(scoped), "working_day": window.to_dict()})
        if kind == "slot-block-groups":
            return jsonify({"groups": _slot_block_groups(scoped), "working_day": window.to_dict()})

        try:
            limit = int(request.args.get('limit', 10))
        except ValueError:
            return jsonify({"error": "limit must be a positive integer"}), 400
        if limit < 1:
            return jsonify({"error": "limit must be a positive integer"}), 400
        return jsonify({"blocks": _top_blocks(limit), "limit": limit})
    except SQLAlchemyError:
        db_session.rollback()
        current_app.logger.exception("Analytics query %s failed", kind)
        return jsonify({"error": "Failed to fetch analytics data"}), 500


@bp_staff_api.route('/menu/<item_id>/availability', methods=['POST'])
@login_required
@role_required('ADMIN')
def set_menu_availability(item_id):
    item = db_session.get(MenuItems, item_id)
    if not item:
        return jsonify({"error": "Menu item not found"}), 404

    data = request.get_json(silent=True) or {}
    wanted = data.get("is_available")
    if wanted is not None and not isinstance(wanted, bool):
        return jsonify({"error": "is_available must be true or false"}), 400

    try:
        # Toggle when no explicit value is sent
        item.is_available = (not item.is_available) if wanted is None else wanted
        item.updated_at = to_utc(now_local())
        db_session.commit()
    except SQLAlchemyError:
        db_session.rollback()
        current_app.logger.exception("Failed to update availability of %s", item_id)
        return jsonify({"error": "Failed to update menu item"}), 500

    return jsonify({"id": item.id, "name": item.name, "is_available": item.is_available})
