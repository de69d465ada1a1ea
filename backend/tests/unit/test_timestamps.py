"""
Unit tests for timestamp helpers.
"""

from datetime import datetime, timedelta, timezone

from backend.src.utils import timestamps
from backend.src.utils.timestamps import next_updated_at, to_utc_naive, utc_now


def test_utc_now_is_naive_whole_seconds():
    now = utc_now()
    assert now.tzinfo is None
    assert now.microsecond == 0


def test_to_utc_naive_converts_aware():
    aware = datetime(2030, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=-5)))
    assert to_utc_naive(aware) == datetime(2030, 1, 1, 17, 0)


def test_to_utc_naive_passes_naive_and_none():
    naive = datetime(2030, 1, 1, 12, 0)
    assert to_utc_naive(naive) is naive
    assert to_utc_naive(None) is None


def test_next_updated_at_uses_now_when_ahead(mocker):
    mocker.patch.object(timestamps, "utc_now", return_value=datetime(2030, 1, 1, 12, 0, 5))
    assert next_updated_at(datetime(2030, 1, 1, 12, 0, 0)) == datetime(2030, 1, 1, 12, 0, 5)


def test_next_updated_at_bumps_within_same_second(mocker):
    mocker.patch.object(timestamps, "utc_now", return_value=datetime(2030, 1, 1, 12, 0, 0))
    assert next_updated_at(datetime(2030, 1, 1, 12, 0, 0)) == datetime(2030, 1, 1, 12, 0, 1)


def test_next_updated_at_bumps_past_future_value(mocker):
    mocker.patch.object(timestamps, "utc_now", return_value=datetime(2030, 1, 1, 12, 0, 0))
    assert next_updated_at(datetime(2030, 1, 1, 13, 0, 0)) == datetime(2030, 1, 1, 13, 0, 1)


def test_next_updated_at_without_previous(mocker):
    mocker.patch.object(timestamps, "utc_now", return_value=datetime(2030, 1, 1, 12, 0, 0))
    assert next_updated_at(None) == datetime(2030, 1, 1, 12, 0, 0)
