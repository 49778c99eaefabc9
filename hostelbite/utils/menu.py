from itertools import groupby

from models import MenuItems

# (id, name, category, price in rupees, order within category)
MENU_ITEMS = [
    ("chai-small", "Chai - Small", "Chai", 10, 1),
    ("chai-semi-medium", "Chai - Semi Medium", "Chai", 14, 2),
    ("chai-medium", "Chai - Medium", "Chai", 18, 3),
    ("chai-large", "Chai - Large", "Chai", 24, 4),
    ("handi-chai-small", "Handi Chai - Small", "Handi Chai", 20, 1),
    ("handi-chai-large", "Handi Chai - Large", "Handi Chai", 30, 2),
    ("liquor-chai-small", "Liquor Chai - Small", "Liquor Chai", 10, 1),
    ("liquor-chai-medium", "Liquor Chai - Medium", "Liquor Chai", 14, 2),
    ("coffee-black", "Coffee - Black", "Coffee", 15, 1),
    ("coffee-milk-small", "Coffee - Milk (Small)", "Coffee", 20, 2),
    ("coffee-milk-medium", "Coffee - Milk (Medium)", "Coffee", 30, 3),
    ("coffee-milk-large", "Coffee - Milk (Large)", "Coffee", 40, 4),
    ("coffee-cold", "Coffee - Cold", "Coffee", 49, 5),
    ("coffee-hot-chocolate", "Hot Chocolate", "Coffee", 30, 6),
    ("bun-makhan-grilled", "Grilled Bun Makhan", "Bun Makhan", 25, 1),
    ("bun-makhan-cheese", "Cheese Bun Makhan", "Bun Makhan", 35, 2),
    ("sandwich-grill", "Grill Sandwich", "Sandwich", 30, 1),
    ("sandwich-grill-cheese-corn", "Grill Sandwich with Cheese & Corn", "Sandwich", 40, 2),
    ("sandwich-grill-chicken-small", "Grill Chicken Sandwich (Small)", "Sandwich", 50, 3),
    ("sandwich-grill-chicken-large", "Grill Chicken Sandwich (Large)", "Sandwich", 60, 4),
    ("maggi-veg", "Veg Maggi", "Maggi", 40, 1),
    ("maggi-veg-butter", "Veg Maggi with Butter", "Maggi", 50, 2),
    ("maggi-veg-butter-cheese", "Veg Maggi with Butter and Cheese", "Maggi", 60, 3),
    ("maggi-egg", "Egg Maggi", "Maggi", 50, 4),
    ("maggi-egg-butter", "Egg Maggi with Butter", "Maggi", 60, 5),
    ("maggi-chocolate", "Chocolate Maggi", "Maggi", 70, 6),
    ("maggi-lays", "Lays Maggi", "Maggi", 69, 7),
    ("maggi-warehouse", "Maggi Warehouse", "Maggi", 89, 8),
    ("maggi-fish", "Fish Maggi", "Maggi", 119, 9),
    ("pasta-white-sauce", "PK White Sauce Pasta", "Pasta", 89, 1),
    ("pasta-red-sauce", "PK Red Sauce Pasta", "Pasta", 79, 2),
    ("pasta-addon-chicken", "Addon Chicken", "Pasta", 20, 3),
    ("french-fries", "French Fries", "French Fries", 60, 1),
    ("omelette-single", "Omelette - Single", "Omelette", 20, 1),
    ("omelette-double", "Omelette - Double", "Omelette", 30, 2),
    ("dim-toste-single", "Dim Toste - Single", "Dim Toste", 30, 1),
    ("dim-toste-double", "Dim Toste - Double", "Dim Toste", 40, 2),
]

CATEGORY_ORDER = list(dict.fromkeys(category for _, _, category, _, _ in MENU_ITEMS))


def seed_menu(db_session):
    """Insert missing menu items and refresh name/price of existing ones. Availability is left alone."""
    existing = {item.id: item for item in db_session.query(MenuItems).all()}
    created = updated = 0
    for item_id, name, category, price, order in MENU_ITEMS:
        item = existing.get(item_id)
        if item is None:
            db_session.add(MenuItems(
                id=item_id, name=name, category=category,
                price=price, category_order=order, is_available=True,
            ))
            created += 1
        else:
            item.name, item.category, item.price, item.category_order = name, category, price, order
            updated += 1
    db_session.flush()
    return created, updated


def _category_rank(category):
    try:
        return CATEGORY_ORDER.index(category)
    except ValueError:
        return len(CATEGORY_ORDER)


def menu_by_category(items):
    items = sorted(items, key=lambda i: (_category_rank(i.category), i.category, i.category_order))
    return [
        {
            "category": category,
            "items": [
                {"id": i.id, "name": i.name, "price": i.price, "is_available": i.is_available}
                for i in group
            ],
        }
        for category, group in groupby(items, key=lambda i: i.category)
    ]
