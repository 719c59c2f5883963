import math
from datetime import datetime, timedelta, timezone

import pytest

from timestamps import combine_start_time, generate_timestamps, parse_timestamp

ONE_KM_LAT = math.degrees(1 / 6371.0)


def seconds_between(a, b):
    return (datetime.fromisoformat(b) - datetime.fromisoformat(a)).total_seconds()


def test_one_km_at_six_minutes_takes_360_seconds():
    coords = [(0.0, 0.0), (ONE_KM_LAT, 0.0)]
    stamps = generate_timestamps(coords, 6.0, "2024-05-01T07:00:00Z")
    assert stamps[0] == "2024-05-01T07:00:00+00:00"
    assert seconds_between(stamps[0], stamps[1]) == pytest.approx(360, abs=0.01)


def test_one_timestamp_per_point_and_monotonic(long_route):
    stamps = generate_timestamps(long_route, 5.5, "2024-05-01T07:00:00+02:00")
    assert len(stamps) == len(long_route)
    parsed = [datetime.fromisoformat(s) for s in stamps]
    assert parsed == sorted(parsed)


def test_repeated_point_gives_equal_timestamps():
    stamps = generate_timestamps([(1.0, 1.0), (1.0, 1.0)], 5.0, "2024-05-01T07:00:00Z")
    assert stamps[0] == stamps[1]


def test_invalid_start_falls_back_to_now():
    before = datetime.now(timezone.utc)
    stamps = generate_timestamps([(0.0, 0.0)], 5.0, "not a date")
    after = datetime.now(timezone.utc)
    assert before - timedelta(seconds=1) <= datetime.fromisoformat(stamps[0]) <= after + timedelta(seconds=1)


def test_empty_route():
    assert generate_timestamps([], 5.0) == []


def test_parse_timestamp():
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None
    assert parse_timestamp("yesterday") is None

    aware = parse_timestamp("2024-05-01T07:00:00Z")
    assert aware == datetime(2024, 5, 1, 7, tzinfo=timezone.utc)

    naive = parse_timestamp(datetime(2024, 5, 1, 7))
    assert naive.tzinfo is not None


def test_combine_start_time():
    combined = combine_start_time("2024-05-01", "07:30")
    assert (combined.year, combined.month, combined.day) == (2024, 5, 1)
    assert (combined.hour, combined.minute) == (7, 30)
    assert combine_start_time("", "07:30") is None
