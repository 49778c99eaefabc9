from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from hostelbite.utils.time import (
    SLOT_LENGTH, DeliveryWindow, normalize_to_slot, window_for_date
)

BOOKING_BUFFER = timedelta(minutes=30)


class WindowState(Enum):
    BEFORE_WINDOW = "BEFORE_WINDOW"   # 06:00-22:59, preparing for tonight
    ACTIVE_WINDOW = "ACTIVE_WINDOW"   # 23:00-04:59, delivering
    AFTER_WINDOW = "AFTER_WINDOW"     # 05:00-05:59, just finished


@dataclass(frozen=True)
class Slot:
    start_time: datetime
    display: str
    is_bookable: bool
    is_past: bool

    def to_dict(self):
        return {
            "time": self.start_time.isoformat(),
            "display": self.display,
            "is_bookable": self.is_bookable,
            "is_past": self.is_past,
        }


def delivery_window_state(now):
    hour = now.hour
    if hour == 23 or hour < 5:
        return WindowState.ACTIVE_WINDOW
    if hour == 5:
        return WindowState.AFTER_WINDOW
    return WindowState.BEFORE_WINDOW


def booking_window(now):
    """
    The window whose slots are offered for booking at `now`.

    Between midnight and 5 AM that is the window that started yesterday at
    11 PM. At every other hour it is tonight's window, including 5 AM, when
    the window that just ended is no longer bookable.
    """
    start_date = now.date()
    if now.hour < 5:
        start_date -= timedelta(days=1)
    return window_for_date(start_date, now.tzinfo)


def format_slot_display(dt):
    """12-hour clock without a leading zero, e.g. '11:00 PM', '2:30 AM'."""
    hour = dt.hour % 12 or 12
    return f"{hour}:{dt.minute:02d} {'PM' if dt.hour >= 12 else 'AM'}"


def is_slot_available(slot_start, now, state, bypass=False):
    if bypass:
        return True

    cutoff = now + BOOKING_BUFFER
    if state in (WindowState.BEFORE_WINDOW, WindowState.AFTER_WINDOW):
        return slot_start > cutoff

    # Active window: kitchen lead time and not-yet-started are separate rules.
    return slot_start > cutoff and slot_start > now


def slot_starts(window: DeliveryWindow) -> list:
    starts = []
    current = window.start
    while current <= window.end:
        starts.append(current)
        current += SLOT_LENGTH
    return starts


def slots_for_window(window, now, bypass=False):
    state = delivery_window_state(now)
    return [
        Slot(
            start_time=start,
            display=format_slot_display(start),
            is_bookable=is_slot_available(start, now, state, bypass),
            is_past=start <= now,
        )
        for start in slot_starts(window)
    ]


def enumerate_slots(now, bypass_availability=False):
    """All 13 slots of the booking window for `now`, classified against `now`."""
    return slots_for_window(booking_window(now), now, bypass_availability)


def find_slot(slots, slot_time):
    if slots and slot_time.tzinfo is not None and slots[0].start_time.tzinfo is not None:
        slot_time = slot_time.astimezone(slots[0].start_time.tzinfo)
    key = normalize_to_slot(slot_time)
    for slot in slots:
        if normalize_to_slot(slot.start_time) == key:
            return slot
    return None
