from hostelbite.jinjafilters.filters import format_local, format_price, format_slot, hostel_block_name
from hostelbite.utils.time import to_local


def serialize_order(order, *, include_user=False, iso=True):
    """
    JSON-ready view of an order. With iso=False, `slot_time` stays a local
    datetime so the result can be fed to the slot grouper first.
    """
    slot_time = to_local(order.slot_time)
    data = {
        "id": order.id,
        "target_hostel_block": order.target_hostel_block,
        "hostel_block_name": hostel_block_name(order.target_hostel_block),
        "slot_time": slot_time.isoformat() if iso else slot_time,
        "slot_display": format_slot(order.slot_time),
        "status": order.status,
        "total_amount": order.total_amount,
        "total_display": format_price(order.total_amount),
        "created_at": to_local(order.created_at).isoformat() if order.created_at else None,
        "placed_at": format_local(order.created_at),
        "items": [
            {
                "item_id": item.menu_item_id,
                "name": item.menu_item_name,
                "quantity": item.quantity,
                "price_at_order": item.price_at_order,
            }
            for item in order.order_items
        ],
    }
    if include_user:
        user = order.user
        data["user"] = {
            "id": order.user_id,
            "name": user.name if user else "Unknown",
            "phone": user.phone if user else "",
        }
    return data


def isoformat_slot_time(order_dict):
    slot_time = order_dict["slot_time"]
    if hasattr(slot_time, "isoformat"):
        return {**order_dict, "slot_time": slot_time.isoformat()}
    return order_dict
