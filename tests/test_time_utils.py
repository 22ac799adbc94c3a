from datetime import UTC, timedelta

from backend.invoicer.core.time import today, utc_now


def test_utc_now_is_timezone_aware_utc():
    value = utc_now()
    assert value.tzinfo is UTC


def test_today_is_the_utc_date():
    assert abs(today() - utc_now().date()) <= timedelta(days=1)
