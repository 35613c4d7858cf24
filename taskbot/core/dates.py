from __future__ import annotations

import re
from datetime import date, datetime, timedelta

from dateutil import parser as date_parser

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}(?:$|[T ])")

_RELATIVE_DAYS = {
    "heute": 0,
    "today": 0,
    "morgen": 1,
    "tomorrow": 1,
    "übermorgen": 2,
    "uebermorgen": 2,
    "day after tomorrow": 2,
}

# Monday == 0, matching datetime.weekday()
_WEEKDAYS = {
    "montag": 0,
    "monday": 0,
    "dienstag": 1,
    "tuesday": 1,
    "mittwoch": 2,
    "wednesday": 2,
    "donnerstag": 3,
    "thursday": 3,
    "freitag": 4,
    "friday": 4,
    "samstag": 5,
    "sonnabend": 5,
    "saturday": 5,
    "sonntag": 6,
    "sunday": 6,
}


def _next_weekday(now: datetime, weekday: int) -> datetime:
    ahead = (weekday - now.weekday()) % 7
    return now + timedelta(days=ahead or 7)


def normalize_date(value: str | None, now: datetime) -> str:
    """Turn "morgen", "Freitag", "24.12." etc. into YYYY-MM-DD.

    Anything that cannot be parsed comes back unchanged.
    """
    raw = str(value or "").strip()
    if not raw:
        return ""
    key = " ".join(raw.lower().split())

    if key in _RELATIVE_DAYS:
        return (now + timedelta(days=_RELATIVE_DAYS[key])).date().isoformat()
    if key in _WEEKDAYS:
        return _next_weekday(now, _WEEKDAYS[key]).date().isoformat()

    # dayfirst would turn 2026-11-03 into March 11th
    if _ISO_DATE_RE.match(raw):
        try:
            return date.fromisoformat(raw[:10]).isoformat()
        except ValueError:
            return raw

    try:
        default = now.replace(hour=0, minute=0, second=0, microsecond=0, tzinfo=None)
        parsed = date_parser.parse(raw, dayfirst=True, default=default)
    except (ValueError, OverflowError):
        return raw
    return parsed.date().isoformat()
