# careconnect/schedule.py
"""
Formateo de fechas y horarios de reservas ("Today • 9:00 AM - 5:00 PM • 8h").
"""
from typing import Any, Optional
import re
from datetime import date, datetime, timedelta

SEPARATOR = " • "

_ISO_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})")
_AMPM_RE = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*(AM|PM)$", re.IGNORECASE)


def parse_date(value: Any, today: Optional[date] = None) -> Optional[date]:
    """Acepta date/datetime, 'today'/'tomorrow' y strings ISO (con o sin hora)."""
    today = today or date.today()
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    s = value.strip()
    if s.lower() == "today":
        return today
    if s.lower() == "tomorrow":
        return today + timedelta(days=1)

    m = _ISO_DATE_RE.match(s)
    if not m:
        return None
    try:
        return date.fromisoformat(m.group(1))
    except ValueError:
        return None


def time_string_to_minutes(value: Any) -> Optional[int]:
    if not value or not isinstance(value, str):
        return None

    s = value.strip()
    m = _AMPM_RE.match(s)
    if m:
        h = int(m.group(1))
        minutes = int(m.group(2) or 0)
        meridian = m.group(3).upper()
        if meridian == "PM" and h != 12:
            h += 12
        if meridian == "AM" and h == 12:
            h = 0
        return h * 60 + minutes

    parts = s.split(":")
    try:
        h = int(parts[0])
        minutes = int(parts[1]) if len(parts) > 1 else 0
    except ValueError:
        return None
    if not (0 <= h < 24 and 0 <= minutes < 60):
        return None
    return h * 60 + minutes


def to_hhmm(value: Any) -> Optional[str]:
    minutes = time_string_to_minutes(value)
    if minutes is None or minutes >= 24 * 60:
        return None
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def to_12h(value: Any) -> str:
    if not value or not isinstance(value, str):
        return ""
    s = value.strip()
    if re.search(r"am|pm", s, re.IGNORECASE):
        return s.upper()

    minutes = time_string_to_minutes(s)
    if minutes is None:
        return s
    h, m = divmod(minutes, 60)
    period = "PM" if h >= 12 else "AM"
    return f"{h % 12 or 12}:{m:02d} {period}"


def format_time_range(start: Any, end: Any) -> str:
    s = to_12h(start)
    e = to_12h(end)
    if s and e:
        return f"{s} - {e}"
    return s or e or ""


def get_duration(start: Any, end: Any) -> str:
    """Duración entre dos horas del mismo día; vacío si end <= start."""
    sm = time_string_to_minutes(start)
    em = time_string_to_minutes(end)
    if sm is None or em is None or em <= sm:
        return ""

    h, m = divmod(em - sm, 60)
    if h and m:
        return f"{h}h {m}m"
    if h:
        return f"{h}h"
    return f"{m}m"


def format_date_friendly(value: Any, today: Optional[date] = None) -> str:
    today = today or date.today()
    d = parse_date(value, today)
    if d is None:
        return str(value or "")
    if d == today:
        return "Today"
    if d == today + timedelta(days=1):
        return "Tomorrow"
    return f"{d:%a}, {d:%b} {d.day}"


def build_schedule(date_value: Any, start: Any, end: Any, today: Optional[date] = None) -> str:
    parts = [format_date_friendly(date_value, today)]
    time_range = format_time_range(start, end)
    if time_range:
        parts.append(time_range)
    duration = get_duration(start, end)
    if duration:
        parts.append(duration)
    return SEPARATOR.join(p for p in parts if p)
