from hostelbite.utils.grouping import HOSTEL_BLOCKS
from hostelbite.utils.slots import format_slot_display
from hostelbite.utils.time import to_local


def format_local(dt):
    """Convert a stored datetime to local time and format as 'YYYY-MM-DD HH:MM AM/PM'."""
    if not dt:
        return ""
    return to_local(dt).strftime("%Y-%m-%d %I:%M %p")

def format_slot(dt):
    """Slot start as shown to students, e.g. '11:30 PM'."""
    if not dt:
        return ""
    return format_slot_display(to_local(dt))

def format_price(rupees):
    """Whole rupees as a string like ₹40."""
    try:
        return f"₹{int(rupees):,}"
    except (TypeError, ValueError):
        return ""

def hostel_block_name(slug):
    return HOSTEL_BLOCKS.get(slug, slug or "")

def register_filters(app):
    app.jinja_env.filters["format_local"] = format_local
    app.jinja_env.filters["format_slot"] = format_slot
    app.jinja_env.filters["format_price"] = format_price
    app.jinja_env.filters["hostel_block_name"] = hostel_block_name
