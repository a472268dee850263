from datetime import UTC, datetime, timedelta, timezone

from backend.app.core.time import ensure_utc, utc_now, utc_today


def test_utc_now_is_timezone_aware_utc():
    value = utc_now()
    assert value.tzinfo is UTC


def test_ensure_utc_handles_naive_and_offset_datetimes():
    naive = datetime(2024, 6, 1, 12, 0)
    assert ensure_utc(naive) == datetime(2024, 6, 1, 12, 0, tzinfo=UTC)

    offset = datetime(2024, 6, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    converted = ensure_utc(offset)
    assert converted.hour == 12
    assert converted.utcoffset() == timedelta(0)


def test_utc_today_matches_utc_now():
    assert utc_today() == utc_now().date()
