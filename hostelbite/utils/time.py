import re
from dataclasses import dataclass
from datetime import date, datetime, time as dtime, timedelta, timezone
from zoneinfo import ZoneInfo

from flask import current_app, has_app_context

DEFAULT_TZ_NAME = "Asia/Kolkata"

WINDOW_START = dtime(23, 0)
WINDOW_END = dtime(5, 0)
WINDOW_LENGTH = timedelta(hours=6)
SLOT_LENGTH = timedelta(minutes=30)
DATE_INPUT_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class InvalidInput(ValueError):
    pass


@dataclass(frozen=True)
class DeliveryWindow:
    """One night of operation, [start, end): 11 PM to 5 AM the next day."""
    start: datetime
    end: datetime

    @property
    def label(self):
        return working_day_label(self)

    @property
    def date_input(self):
        return working_day_to_date_input(self)

    def to_dict(self):
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "label": self.label,
            "date": self.date_input,
        }


# ---- clock adapter ---------------------------------------------------------

def local_tz():
    name = DEFAULT_TZ_NAME
    if has_app_context():
        name = current_app.config.get("LOCAL_TIMEZONE") or DEFAULT_TZ_NAME
    return ZoneInfo(name)


def now_local():
    """The only wall-clock read. Request handlers call it once and pass the result down."""
    return datetime.now(local_tz())


def to_local(dt, tz=None):
    """
    Convert a stored timestamp into the local zone.
    Naive values coming back from the database are UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz or local_tz())


def to_utc(dt):
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=local_tz())
    return dt.astimezone(timezone.utc)


def parse_timestamp(value, tz=None):
    """
    Parse an ISO 8601 timestamp sent by a client into the local zone.
    A value without an offset is taken as local wall-clock time.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            raise InvalidInput(f"Invalid timestamp '{value}'. Expected ISO 8601.")
    tz = tz or local_tz()
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=tz)
    return parsed.astimezone(tz)


# ---- slot boundaries -------------------------------------------------------

def normalize_to_slot(dt):
    """Round down to the 30-minute boundary (:00 or :30) with seconds zeroed."""
    return dt.replace(minute=0 if dt.minute < 30 else 30, second=0, microsecond=0)


# ---- working day -----------------------------------------------------------

def window_for_date(d, tz=None):
    """The working day that starts at 11 PM on calendar date `d`."""
    start = datetime.combine(d, WINDOW_START, tzinfo=tz)
    end = datetime.combine(d + timedelta(days=1), WINDOW_END, tzinfo=tz)
    return DeliveryWindow(start=start, end=end)


def current_working_day(now):
    """
    Map a clock time to the working day an admin should be looking at.

      23:00-23:59  tonight's window, just started
      00:00-04:59  last night's window, in progress
      05:00-05:59  last night's window, just completed (kept for review)
      06:00-22:59  tonight's window, upcoming
    """
    hour = now.hour
    if hour == 23:
        start_date = now.date()
    elif hour < 5:
        start_date = now.date() - timedelta(days=1)
    elif hour == 5:
        start_date = now.date() - timedelta(days=1)
    else:
        start_date = now.date()
    return window_for_date(start_date, now.tzinfo)


def working_day_label(window):
    start, end = window.start, window.end
    return f"{start:%b} {start.day}, 11pm - {end:%b} {end.day}, 5am"


def date_input_to_working_day(value):
    """
    Parse a date-picker value (YYYY-MM-DD) into the working day's start date.
    The value is read as a calendar date, so there is no UTC/local drift.
    """
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise InvalidInput("Date must be a string in YYYY-MM-DD format.")
    value = value.strip()
    if not DATE_INPUT_RE.match(value):
        raise InvalidInput(f"Invalid date '{value}'. Expected YYYY-MM-DD.")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidInput(f"Invalid date '{value}'. Expected YYYY-MM-DD.")


def working_day_to_date_input(d):
    if isinstance(d, DeliveryWindow):
        d = d.start
    if isinstance(d, datetime):
        d = d.date()
    return d.isoformat()


def working_day_for_request(date_param, now):
    """Working day picked by an optional `date` query value, else the current one."""
    if date_param:
        return window_for_date(date_input_to_working_day(date_param), now.tzinfo)
    return current_working_day(now)
