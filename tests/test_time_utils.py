from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from notion_quests.time_utils import days_since, local_day_start, parse_iso


def test_day_start_uses_configured_timezone() -> None:
    late_utc = datetime(2026, 10, 19, 23, 30, tzinfo=timezone.utc)  # 00:30 BST on the 20th
    start = local_day_start(late_utc, "Europe/London")
    assert start == datetime(2026, 10, 20, 0, 0, tzinfo=ZoneInfo("Europe/London"))


def test_days_since_counts_local_calendar_days() -> None:
    last = datetime(2026, 10, 16, 23, 30, tzinfo=timezone.utc)  # 00:30 on the 17th in London
    assert days_since(last, date(2026, 10, 19), "Europe/London") == 2


def test_parse_iso_accepts_zulu_and_rejects_garbage() -> None:
    assert parse_iso("2026-10-19T09:00:00.000Z") == datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)
    assert parse_iso("yesterday") is None
    assert parse_iso(None) is None
