def calculate_order_total(lines):
    """
    lines: [(menu_item, quantity), ...]
    Returns the total in rupees from the stored (current) prices.
    """
    total_price = 0
    for menu_item, quantity in lines:
        total_price += menu_item.price * quantity
    return total_price


def paginate(total, page, page_size):
    total_pages = -(-total // page_size) if page_size else 0
    return {
        "current_page": page,
        "page_size": page_size,
        "total_orders": total,
        "total_pages": total_pages,
        "has_next_page": page < total_pages,
        "has_previous_page": page > 1,
    }
