"""
---
version: 0.3.0
created: 2026-10-12
updated: 2026-10-19
---

estimate.py — Monte Carlo estimate of chance timestamp readings.

Generates random A1Z26 messages with the given letter frequencies and checks
every way each one could spell out a (year, month, day, hour) timestamp.
For each interval in the intervals file, the running hit rate is the share
of messages containing at least one reading inside that interval.

Runs until interrupted (Ctrl-C), then prints a summary with exact binomial
confidence intervals.

Usage:
    python3 estimate.py [--freqs FILE | --english] [--intervals FILE]
                        [--seed N] [--length L] [--report-every SECS]
                        [--include-1900s] [--plot PATH]
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import Callable, TextIO

import numpy as np

from datestamps import (
    MSG_LENGTH_PLAIN, REPORT_INTERVAL,
    IntervalFormatError, Simulation,
    english_weights, format_interval, format_progress, format_summary,
    letter_probabilities, load_intervals, load_letter_frequencies,
    plot_convergence,
)


def run_forever(
    sim: Simulation,
    report_every: float = REPORT_INTERVAL,
    history: list[tuple[int, list[float]]] | None = None,
    clock: Callable[[], float] = time.monotonic,
    out: TextIO | None = None,
) -> None:
    """
    Run trials until interrupted, rewriting one progress line in place.

    A progress line is written whenever more than `report_every` seconds
    have passed since the previous one. Reports never skip or delay trials.
    Each report is also appended to `history` as (trials, percentages).
    """
    if out is None:
        out = sys.stderr
    start = clock()
    while True:
        sim.run_trial()

        now = clock()
        if now - start > report_every:
            pcts = sim.percentages()
            print("\r" + format_progress(sim.trials, pcts), end="", file=out, flush=True)
            if history is not None:
                history.append((sim.trials, pcts))
            start = now


def build_simulation(args: argparse.Namespace) -> Simulation:
    """Load inputs named on the command line. Exits on bad input."""
    try:
        intervals = load_intervals(args.intervals)
    except OSError as e:
        print(f"Cannot read intervals: {e}", file=sys.stderr)
        sys.exit(1)
    except IntervalFormatError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    try:
        weights = english_weights() if args.english else load_letter_frequencies(args.freqs)
        probs = letter_probabilities(weights)
    except OSError as e:
        print(f"Cannot read letter frequencies: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Bad letter frequencies: {e}", file=sys.stderr)
        sys.exit(1)

    rng = np.random.default_rng(args.seed)
    return Simulation(probs, intervals, rng=rng, length=args.length,
                      include_1900s=args.include_1900s)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Estimate how often random A1Z26 text contains a timestamp in given intervals")
    parser.add_argument("--freqs", type=str, default="letter_frequencies.txt",
                        help="File of 26 letter weights, a-z (default: letter_frequencies.txt)")
    parser.add_argument("--english", action="store_true",
                        help="Use built-in English letter frequencies instead of --freqs")
    parser.add_argument("--intervals", type=str, default="time_intervals.txt",
                        help="File of timestamp intervals (default: time_intervals.txt)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed (default: fresh OS entropy)")
    parser.add_argument("--length", type=int, default=MSG_LENGTH_PLAIN,
                        help=f"Plaintext letters per message (default: {MSG_LENGTH_PLAIN})")
    parser.add_argument("--report-every", type=float, default=REPORT_INTERVAL,
                        help=f"Seconds between progress lines (default: {REPORT_INTERVAL})")
    parser.add_argument("--include-1900s", action="store_true",
                        help="Also read two-digit years as 19xx")
    parser.add_argument("--plot", type=str, default=None,
                        help="Save a hit-rate convergence plot here on exit")
    args = parser.parse_args()

    if args.length < 1:
        parser.error("--length must be positive")

    sim = build_simulation(args)

    print("=" * 70)
    print("A1Z26 TIMESTAMP COINCIDENCE ESTIMATE")
    print(f"Message: {sim.length} letters ({sim.length * 2} digits)"
          f"{'   2-digit years: 19xx and 20xx' if sim.include_1900s else ''}")
    for i, interval in enumerate(sim.intervals):
        print(f"  #{i + 1}: {format_interval(interval)}")
    print("Press Ctrl-C to stop.")
    print("=" * 70)

    history: list[tuple[int, list[float]]] = []
    t0 = time.time()
    try:
        run_forever(sim, report_every=args.report_every, history=history)
    except KeyboardInterrupt:
        elapsed = time.time() - t0
        print("\n")
        print(format_summary(sim))
        rate = sim.trials / elapsed if elapsed > 0 else 0.0
        print(f"Elapsed: {elapsed:.1f}s ({rate:.0f} trials/s)")

        if args.plot:
            labels = [f"#{i + 1} {format_interval(iv)}" for i, iv in enumerate(sim.intervals)]
            plot_convergence(history, labels, args.plot)
        sys.exit(130)


if __name__ == "__main__":
    main()
