import re
from datetime import timedelta

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from models import MenuItems, Orders
from hostelbite.extensions import db_session
from hostelbite.utils.calculation import calculate_order_total
from hostelbite.utils.grouping import HOSTEL_BLOCKS
from hostelbite.utils.slots import enumerate_slots, find_slot
from hostelbite.utils.time import InvalidInput, parse_timestamp, to_utc

PHONE_RE = re.compile(r"^\d{10}$")
MIN_PASSWORD_LENGTH = 6
MAX_QUANTITY = 20
RATE_LIMIT_WINDOW = timedelta(hours=24)


class OrderValidationError(Exception):
    status_code = 400


class SlotNoLongerAvailable(OrderValidationError):
    status_code = 409


def validate_phone(phone):
    return isinstance(phone, str) and bool(PHONE_RE.match(phone))

def validate_password(password):
    return isinstance(password, str) and len(password) >= MIN_PASSWORD_LENGTH

def validate_required(value):
    return isinstance(value, str) and bool(value.strip())


def validate_order(payload, now, *, bypass_availability=False):
    """
    Validate an order placement payload against the menu and the slot calendar at `now`.

    Checks, in order:
      - hostel block is one of the four delivery destinations
      - slot time parses and is one of tonight's slots
      - that slot is still bookable at `now` (re-derived, never trusted from the client)
      - items exist, are available, and have sane quantities
      - the client's total (if sent) matches the stored prices
    Returns a dict with the cleaned values. Raises OrderValidationError
    (or SlotNoLongerAvailable) otherwise.
    """
    # 1) Destination
    block = payload.get("target_hostel_block")
    if not block:
        raise OrderValidationError("Target hostel block is required.")
    if block not in HOSTEL_BLOCKS:
        raise OrderValidationError(f"Unknown hostel block '{block}'.")

    # 2) Slot
    raw_slot = payload.get("slot_time")
    if not raw_slot:
        raise OrderValidationError("Delivery slot time is required.")
    try:
        requested = parse_timestamp(raw_slot, now.tzinfo)
    except InvalidInput as e:
        raise OrderValidationError(str(e))

    slots = enumerate_slots(now, bypass_availability)
    slot = find_slot(slots, requested)
    if slot is None:
        raise OrderValidationError("That delivery slot is not offered tonight.")

    # 3) Submit-time availability
    if not slot.is_bookable:
        raise SlotNoLongerAvailable(
            f"The {slot.display} slot is no longer available. Please pick another slot."
        )

    # 4) Items
    raw_items = payload.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        raise OrderValidationError("Order must contain at least one item.")

    quantities = {}
    for entry in raw_items:
        if not isinstance(entry, dict):
            raise OrderValidationError("Invalid item format.")
        item_id = entry.get("item_id")
        quantity = entry.get("quantity")
        if not item_id or not isinstance(item_id, str):
            raise OrderValidationError("Item ID is missing or invalid.")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise OrderValidationError("Quantity must be a positive whole number.")
        quantities[item_id] = quantities.get(item_id, 0) + quantity
        if quantities[item_id] > MAX_QUANTITY:
            raise OrderValidationError(f"At most {MAX_QUANTITY} of one item per order.")

    menu_items = (
        db_session.query(MenuItems)
        .filter(MenuItems.id.in_(list(quantities)))
        .all()
    )
    by_id = {item.id: item for item in menu_items}

    missing = [item_id for item_id in quantities if item_id not in by_id]
    if missing:
        raise OrderValidationError(f"Item not found: {', '.join(missing)}")

    unavailable = [by_id[item_id].name for item_id in quantities if not by_id[item_id].is_available]
    if unavailable:
        raise OrderValidationError(f"Currently unavailable: {', '.join(unavailable)}")

    lines = [(by_id[item_id], qty) for item_id, qty in quantities.items()]
    total = calculate_order_total(lines)

    # 5) Stale cart total
    client_total = payload.get("total_amount")
    if client_total is not None and client_total != total:
        raise OrderValidationError("Your cart total is out of date. Please review your cart.")

    return {
        "target_hostel_block": block,
        "slot": slot,
        "lines": lines,
        "total_amount": total,
    }


def count_orders_since(user_id, since):
    return (
        db_session.query(func.count(Orders.id))
        .filter(Orders.user_id == user_id, Orders.created_at >= to_utc(since))
        .scalar()
    ) or 0


def within_order_limit(user_id, now, limit):
    """
    True if the user may place another order: fewer than `limit` orders in
    the last 24 hours. Fails open when the count cannot be read.
    """
    try:
        return count_orders_since(user_id, now - RATE_LIMIT_WINDOW) < limit
    except SQLAlchemyError:
        db_session.rollback()
        current_app.logger.exception("Order limit check failed for user %s", user_id)
        return True
