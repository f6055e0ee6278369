from __future__ import annotations

from pathlib import Path

import pytest

from datestamps import (
    IntervalFormatError, ReversedIntervalWarning, TimestampCandidate,
    load_intervals, mark_hits, parse_intervals,
)

YEAR_2024 = "2024 1 1 0  2024 12 31 23"


def test_parse_single_interval() -> None:
    intervals = parse_intervals(YEAR_2024)
    assert len(intervals) == 1
    low, high = intervals[0]
    assert low.key() == (2024, 1, 1, 0)
    assert high.key() == (2024, 12, 31, 23)


def test_parse_empty_input() -> None:
    assert parse_intervals("") == []
    assert parse_intervals("  \n ") == []


def test_parse_multiple_lines() -> None:
    text = YEAR_2024 + "\n2000 2 29 0 2000 2 29 23\n"
    intervals = parse_intervals(text)
    assert [low.key() for low, _ in intervals] == [(2024, 1, 1, 0), (2000, 2, 29, 0)]


def test_invalid_bound_reports_index() -> None:
    text = YEAR_2024 + "\n2023 2 29 0 2024 1 1 0"
    with pytest.raises(IntervalFormatError) as exc:
        parse_intervals(text)
    assert exc.value.index == 2
    assert "#2" in str(exc.value)


def test_invalid_high_bound_reports_index() -> None:
    with pytest.raises(IntervalFormatError) as exc:
        parse_intervals("2024 1 1 0 2024 13 1 0")
    assert exc.value.index == 1


@pytest.mark.parametrize("text, index", [
    ("2024 1 1 0 2024 12 31", 1),
    (YEAR_2024 + " 2024 1", 2),
    (YEAR_2024 + " 2024 1 1 0 2024 x 1 0", 2),
])
def test_truncated_or_malformed_input(text: str, index: int) -> None:
    with pytest.raises(IntervalFormatError) as exc:
        parse_intervals(text)
    assert exc.value.index == index


def test_reversed_interval_warns_and_is_kept() -> None:
    with pytest.warns(ReversedIntervalWarning, match="#1"):
        intervals = parse_intervals("2024 12 31 23 2024 1 1 0")
    assert len(intervals) == 1


def test_load_intervals(tmp_path: Path) -> None:
    p = tmp_path / "time_intervals.txt"
    p.write_text(YEAR_2024 + "\n")
    assert len(load_intervals(p)) == 1


def test_mark_hits_inclusive_bounds() -> None:
    intervals = parse_intervals(YEAR_2024 + "\n2024 7 15 13 2024 7 15 13")
    for ts, expected in [
        ((2024, 1, 1, 0), [True, False]),
        ((2024, 12, 31, 23), [True, False]),
        ((2024, 7, 15, 13), [True, True]),
        ((2023, 12, 31, 23), [False, False]),
        ((2025, 1, 1, 0), [False, False]),
    ]:
        flags = [False, False]
        mark_hits(TimestampCandidate.from_fields(*ts), intervals, flags)
        assert flags == expected, ts


def test_mark_hits_is_idempotent() -> None:
    intervals = parse_intervals(YEAR_2024)
    ts = TimestampCandidate.from_fields(2024, 6, 1, 12)
    flags = [False]
    mark_hits(ts, intervals, flags)
    mark_hits(ts, intervals, flags)
    assert flags == [True]


def test_reversed_interval_never_matches() -> None:
    with pytest.warns(ReversedIntervalWarning):
        intervals = parse_intervals("2024 12 31 23 2024 1 1 0")
    flags = [False]
    mark_hits(TimestampCandidate.from_fields(2024, 6, 1, 12), intervals, flags)
    assert flags == [False]
