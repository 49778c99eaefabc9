from dataclasses import dataclass, field

from hostelbite.utils.slots import Slot, enumerate_slots, slots_for_window
from hostelbite.utils.time import normalize_to_slot, to_local

# Fixed delivery destinations, in display order.
HOSTEL_BLOCKS = {
    "jaadavpur-main": "Jaadavpur Main Hostel",
    "new-block": "New block hostel",
    "kpc-boys": "KPC boys hostel",
    "kpc-girls": "KPC girls hostel",
}


@dataclass
class GroupedSlot:
    slot_time: object
    slot: Slot
    blocks: dict = field(default_factory=dict)

    def to_dict(self, serialize_order=dict):
        return {
            "slot_time": self.slot_time.isoformat(),
            "slot": self.slot.to_dict(),
            "blocks": {
                block: [serialize_order(o) for o in orders]
                for block, orders in self.blocks.items()
            },
        }


def _slot_key(slot_time, tz):
    # Bring the order time onto the same footing as the slots
    if tz is None and slot_time.tzinfo is not None:
        slot_time = to_local(slot_time).replace(tzinfo=None)
    elif tz is not None and slot_time.tzinfo is None:
        slot_time = slot_time.replace(tzinfo=tz)
    elif tz is not None:
        slot_time = slot_time.astimezone(tz)
    return normalize_to_slot(slot_time)


def group_orders_by_slot_and_block(orders, now, window=None, bypass_availability=False):
    """
    Lay orders out on the full slot x hostel-block grid.

    Every slot of the window is present, and every slot carries all four
    blocks, even when empty. Orders for a block outside HOSTEL_BLOCKS are
    left out. Upcoming slots come first, then past ones, each in time order.

    `orders` are mappings with at least `slot_time` and `target_hostel_block`.
    Pass `window` to lay out an explicitly chosen working day instead of the
    one bookable at `now`.
    """
    if window is None:
        slots = enumerate_slots(now, bypass_availability)
    else:
        slots = slots_for_window(window, now, bypass_availability)

    by_slot = {}
    for order in orders:
        key = _slot_key(order["slot_time"], now.tzinfo)
        by_slot.setdefault(key, []).append(order)

    grouped = []
    for slot in slots:
        key = normalize_to_slot(slot.start_time)
        blocks = {block: [] for block in HOSTEL_BLOCKS}
        for order in by_slot.get(key, []):
            block = order.get("target_hostel_block")
            if block in blocks:
                blocks[block].append(order)
        grouped.append(GroupedSlot(slot_time=key, slot=slot, blocks=blocks))

    return sort_slots_by_status(grouped)


def sort_slots_by_status(grouped):
    upcoming = sorted((g for g in grouped if not g.slot.is_past), key=lambda g: g.slot_time)
    past = sorted((g for g in grouped if g.slot.is_past), key=lambda g: g.slot_time)
    return upcoming + past


def count_orders_in_groups(grouped):
    return sum(len(orders) for g in grouped for orders in g.blocks.values())
