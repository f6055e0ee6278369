"""
---
version: 0.2.0
created: 2026-10-14
updated: 2026-10-19
---

scan_message.py — List every timestamp reading of one message.

Encodes a plaintext with A1Z26 (or takes raw digits) and prints each
(start, end, field order, timestamp) the estimator would consider. With
--intervals, readings that fall inside a loaded interval are flagged.

Usage:
    python3 scan_message.py ONEDAYWILLREVEALALL
    python3 scan_message.py --digits 10101010150720241310 --intervals time_intervals.txt
"""

from __future__ import annotations

import argparse
import sys

from datestamps import (
    FIELD_ORDERS, Interval, IntervalFormatError, TimestampCandidate,
    encode_plaintext, find_timestamps, format_message, load_intervals,
)


def parse_digits(text: str) -> tuple[int, ...]:
    """
    Parse a raw digit string.

    Raises:
        ValueError: If the string contains anything but 0-9.
    """
    if not text.isdigit() or not text.isascii():
        raise ValueError(f"Not a digit string: '{text}'")
    return tuple(int(c) for c in text)


def containing_intervals(timestamp: tuple[int, int, int, int], intervals: list[Interval]) -> list[int]:
    """1-based indices of intervals containing `timestamp`."""
    ts = TimestampCandidate.from_fields(*timestamp)
    return [i + 1 for i, (low, high) in enumerate(intervals) if low <= ts <= high]


def print_readings(message: tuple[int, ...], readings: list[dict],
                   intervals: list[Interval], only_hits: bool = False) -> int:
    """Print a readings table. Returns the number of readings in an interval."""
    digits = format_message(message)
    print(f"Digits: {digits} ({len(message)})")
    print(f"\n{'Start':>5} {'End':>4}  {'Order':<5} {'Span':<10} {'Timestamp':<16} Intervals")
    print("-" * 60)

    n_hits = 0
    for r in readings:
        y, m, d, h = r["timestamp"]
        inside = containing_intervals(r["timestamp"], intervals) if intervals else []
        if inside:
            n_hits += 1
        elif only_hits:
            continue
        span = digits[r["start"]:r["end"]]
        marks = ",".join(f"#{i}" for i in inside)
        print(f"{r['start']:>5} {r['end']:>4}  {r['order']:<5} {span:<10} "
              f"{y:04d}-{m:02d}-{d:02d} {h:02d}h  {marks}")

    print(f"\n{len(readings)} readings across {len(FIELD_ORDERS)} field orders", end="")
    if intervals:
        print(f", {n_hits} inside an interval")
    else:
        print()
    return n_hits


def main() -> None:
    parser = argparse.ArgumentParser(description="List timestamp readings of one A1Z26 message")
    parser.add_argument("plaintext", nargs="?", default=None,
                        help="Letters to encode (non-letters ignored)")
    parser.add_argument("--digits", type=str, default=None,
                        help="Scan this raw digit string instead of a plaintext")
    parser.add_argument("--intervals", type=str, default=None,
                        help="Flag readings inside the intervals in this file")
    parser.add_argument("--include-1900s", action="store_true",
                        help="Also read two-digit years as 19xx")
    parser.add_argument("--only-hits", action="store_true",
                        help="Only show readings inside an interval")
    args = parser.parse_args()

    if (args.plaintext is None) == (args.digits is None):
        parser.print_help()
        sys.exit(1)

    if args.digits is not None:
        try:
            message = parse_digits(args.digits)
        except ValueError as e:
            print(str(e), file=sys.stderr)
            sys.exit(1)
    else:
        message = encode_plaintext(args.plaintext)
        if not message:
            print("Plaintext has no letters", file=sys.stderr)
            sys.exit(1)

    intervals: list[Interval] = []
    if args.intervals:
        try:
            intervals = load_intervals(args.intervals)
        except OSError as e:
            print(f"Cannot read intervals: {e}", file=sys.stderr)
            sys.exit(1)
        except IntervalFormatError as e:
            print(str(e), file=sys.stderr)
            sys.exit(1)

    readings = find_timestamps(message, include_1900s=args.include_1900s)
    print_readings(message, readings, intervals, only_hits=args.only_hits)


if __name__ == "__main__":
    main()
