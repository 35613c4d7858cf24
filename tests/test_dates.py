from datetime import datetime
from zoneinfo import ZoneInfo

from taskbot.core.dates import normalize_date

MONDAY = datetime(2026, 10, 19, 10, 0, tzinfo=ZoneInfo("Europe/Berlin"))


def test_relative_days_in_both_languages() -> None:
    assert normalize_date("heute", MONDAY) == "2026-10-19"
    assert normalize_date("Morgen", MONDAY) == "2026-10-20"
    assert normalize_date("tomorrow", MONDAY) == "2026-10-20"
    assert normalize_date("übermorgen", MONDAY) == "2026-10-21"


def test_same_weekday_means_next_week() -> None:
    assert normalize_date("Montag", MONDAY) == "2026-10-26"
    assert normalize_date("monday", MONDAY) == "2026-10-26"


def test_weekday_resolves_to_next_occurrence() -> None:
    assert normalize_date("Dienstag", MONDAY) == "2026-10-20"
    assert normalize_date("FREITAG", MONDAY) == "2026-10-23"
    assert normalize_date("Sonntag", MONDAY) == "2026-10-25"


def test_generic_dates_are_day_first() -> None:
    assert normalize_date("24.12.2026", MONDAY) == "2026-12-24"
    assert normalize_date("2026-11-03", MONDAY) == "2026-11-03"


def test_unparseable_input_passes_through() -> None:
    assert normalize_date("irgendwann nächste Woche", MONDAY) == "irgendwann nächste Woche"


def test_empty_input() -> None:
    assert normalize_date("", MONDAY) == ""
    assert normalize_date(None, MONDAY) == ""
    assert normalize_date("   ", MONDAY) == ""
