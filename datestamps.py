"""
---
version: 0.3.0
created: 2026-10-12
updated: 2026-10-19
---

datestamps.py — Shared module for A1Z26 timestamp coincidence estimates.

A random 19-letter message is written in A1Z26 (a=01 ... z=26), giving 38
digits. Somewhere in those digits there may be a run that reads as a
(year, month, day, hour) timestamp. This module holds everything needed to
measure how often that happens by chance.

Seven sections:
  1. Data constants (field widths, field orders, English letter frequencies)
  2. Message source (weighted random letters, A1Z26 digit encoding)
  3. Timestamp candidate (incrementally checked calendar fields)
  4. Search (backtracking over offsets, field orders and widths)
  5. Intervals (parsing, membership)
  6. Simulation context (per-interval counters across trials)
  7. Output utils (progress line, confidence intervals, plots)
"""

from __future__ import annotations

import calendar
import warnings
from enum import IntEnum
from pathlib import Path
from typing import Callable, Sequence

import numpy as np

# ============================================================================
# 1. DATA CONSTANTS
# ============================================================================

NUM_LETTERS: int = 26
MSG_LENGTH_PLAIN: int = 19
MSG_LENGTH_A1Z26: int = MSG_LENGTH_PLAIN * 2

# Seconds of wall clock between progress lines.
REPORT_INTERVAL: float = 2.0

# Short-width years are read as years of this century.
SHORT_YEAR_BASE: int = 2000
# Extra base tried only when 1900s readings are requested.
ALT_SHORT_YEAR_BASE: int = 1900


class Field(IntEnum):
    YEAR = 0
    MONTH = 1
    DAY = 2
    HOUR = 3


class Width(IntEnum):
    SHORT = 0
    LONG = 1


# Digits consumed per field, indexed by Width.
FIELD_WIDTHS: dict[Field, tuple[int, int]] = {
    Field.YEAR: (2, 4),
    Field.MONTH: (1, 2),
    Field.DAY: (1, 2),
    Field.HOUR: (1, 2),
}

MIN_TIMESTAMP_WIDTH: int = sum(w[Width.SHORT] for w in FIELD_WIDTHS.values())

FIELD_ORDERS: dict[str, tuple[Field, ...]] = {
    "DMYH": (Field.DAY, Field.MONTH, Field.YEAR, Field.HOUR),
    "MDYH": (Field.MONTH, Field.DAY, Field.YEAR, Field.HOUR),
    "YMDH": (Field.YEAR, Field.MONTH, Field.DAY, Field.HOUR),
}

# Longest day per month, ignoring the year. February is settled by the leap rule.
MONTH_MAX_DAY: dict[int, int] = {
    1: 31, 2: 29, 3: 31, 4: 30, 5: 31, 6: 30,
    7: 31, 8: 31, 9: 30, 10: 31, 11: 30, 12: 31,
}

# English letter frequencies (approximate, a-z).
ENGLISH_FREQ: dict[str, float] = {
    "a": 0.0817, "b": 0.0129, "c": 0.0278, "d": 0.0425, "e": 0.1270,
    "f": 0.0223, "g": 0.0202, "h": 0.0609, "i": 0.0697, "j": 0.0015,
    "k": 0.0077, "l": 0.0403, "m": 0.0241, "n": 0.0675, "o": 0.0751,
    "p": 0.0193, "q": 0.0010, "r": 0.0599, "s": 0.0633, "t": 0.0906,
    "u": 0.0276, "v": 0.0098, "w": 0.0236, "x": 0.0015, "y": 0.0197,
    "z": 0.0007,
}


# ============================================================================
# 2. MESSAGE SOURCE — Weighted random letters, A1Z26 digits
# ============================================================================

def parse_letter_frequencies(text: str) -> np.ndarray:
    """
    Parse 26 whitespace-separated letter weights (a-z order).

    Weights need not sum to 1. Reading stops at the first token that is not
    a number; any weight not supplied is 0. Tokens past the 26th are ignored.
    """
    weights = np.zeros(NUM_LETTERS, dtype=float)
    for i, token in enumerate(text.split()[:NUM_LETTERS]):
        try:
            weights[i] = float(token)
        except ValueError:
            break
    return weights


def load_letter_frequencies(filepath: str | Path) -> np.ndarray:
    """Load a letter-weight table from a text file."""
    return parse_letter_frequencies(Path(filepath).read_text(encoding="utf-8"))


def english_weights() -> np.ndarray:
    """Return ENGLISH_FREQ as a 26-entry weight vector."""
    return np.array([ENGLISH_FREQ[c] for c in sorted(ENGLISH_FREQ)], dtype=float)


def letter_probabilities(weights: Sequence[float] | np.ndarray) -> np.ndarray:
    """
    Normalise letter weights into a probability vector.

    Raises:
        ValueError: If there are not 26 weights, any is negative or
            non-finite, or they sum to zero.
    """
    probs = np.asarray(weights, dtype=float)
    if probs.shape != (NUM_LETTERS,):
        raise ValueError(f"Expected {NUM_LETTERS} letter weights, got {probs.size}")
    if not np.all(np.isfinite(probs)) or np.any(probs < 0):
        raise ValueError("Letter weights must be finite and non-negative")
    total = probs.sum()
    if total <= 0:
        raise ValueError("Letter weights sum to zero")
    return probs / total


def generate_message(
    rng: np.random.Generator,
    probs: np.ndarray,
    length: int = MSG_LENGTH_PLAIN,
) -> tuple[int, ...]:
    """
    Draw `length` random letters and return their A1Z26 digits.

    Each letter s in 1..26 contributes two digits, s // 10 then s % 10,
    so the result always has 2 * length digits.
    """
    letters = rng.choice(NUM_LETTERS, size=length, p=probs) + 1
    digits = np.column_stack((letters // 10, letters % 10)).ravel()
    return tuple(int(d) for d in digits)


def encode_plaintext(text: str) -> tuple[int, ...]:
    """
    A1Z26-encode a fixed plaintext. Non-letters are dropped.

    "ONEDAYWILLREVEALALL" -> (1, 5, 1, 4, 0, 5, ...)
    """
    digits: list[int] = []
    for c in text.lower():
        if "a" <= c <= "z":
            s = ord(c) - ord("a") + 1
            digits.append(s // 10)
            digits.append(s % 10)
    return tuple(digits)


def format_message(message: Sequence[int]) -> str:
    """Render a message as its digit string."""
    return "".join(str(d) for d in message)


def read_int(message: Sequence[int], pos: int, width: int) -> int | None:
    """
    Read `width` digits starting at `pos` as a base-10 integer.

    Returns None when the run would pass the end of the message.
    """
    if pos + width > len(message):
        return None
    val = 0
    for i in range(pos, pos + width):
        val = val * 10 + message[i]
    return val


# ============================================================================
# 3. TIMESTAMP CANDIDATE — Incrementally checked calendar fields
# ============================================================================

def is_leap_year(year: int) -> bool:
    return calendar.isleap(year)


def fits_month(day: int, month: int) -> bool:
    """True if `day` can occur in `month` in some year."""
    return day <= MONTH_MAX_DAY[month]


def fits_leap_rule(day: int, month: int, year: int) -> bool:
    """False only for February 29 of a common year."""
    return not (day == 29 and month == 2 and not is_leap_year(year))


class TimestampCandidate:
    """
    A (year, month, day, hour) value built up one field at a time.

    Every assignment is checked against the fields already known, so a
    candidate never holds a combination that no calendar date could have.
    Fields are set and unset in stack order by the search; a value left
    behind by unset() is stale and is never read.
    """

    __slots__ = ("fields", "known")

    def __init__(self) -> None:
        self.fields: list[int] = [0] * len(Field)
        self.known: list[bool] = [False] * len(Field)

    @classmethod
    def from_fields(cls, year: int, month: int, day: int, hour: int) -> TimestampCandidate:
        """
        Build a complete candidate, checking fields in (Y, M, D, H) order.

        Raises:
            ValueError: If any field fails calendar validation.
        """
        ts = cls()
        for field, value in zip(Field, (year, month, day, hour)):
            if not ts.try_set(field, value):
                raise ValueError(
                    f"Invalid {field.name.lower()} {value} for "
                    f"{year:04d}-{month:02d}-{day:02d} {hour:02d}h"
                )
        return ts

    def try_set(self, field: Field, value: int) -> bool:
        """
        Assign `field` if the value is consistent with the known siblings.

        Returns False and leaves the candidate untouched otherwise.
        """
        fields = self.fields
        known = self.known
        if field == Field.DAY:
            if value < 1 or value > 31:
                return False
            if known[Field.MONTH]:
                month = fields[Field.MONTH]
                if not fits_month(value, month):
                    return False
                if known[Field.YEAR] and not fits_leap_rule(value, month, fields[Field.YEAR]):
                    return False
        elif field == Field.MONTH:
            if value < 1 or value > 12:
                return False
            if known[Field.DAY]:
                day = fields[Field.DAY]
                if not fits_month(day, value):
                    return False
                if known[Field.YEAR] and not fits_leap_rule(day, value, fields[Field.YEAR]):
                    return False
        elif field == Field.YEAR:
            if value < 0:
                return False
            if known[Field.DAY] and known[Field.MONTH]:
                if not fits_leap_rule(fields[Field.DAY], fields[Field.MONTH], value):
                    return False
        elif field == Field.HOUR:
            if value < 0 or value > 23:
                return False
        else:
            raise ValueError(f"Unknown field {field!r}")

        fields[field] = value
        known[field] = True
        return True

    def unset(self, field: Field) -> None:
        self.known[field] = False

    def is_complete(self) -> bool:
        return all(self.known)

    def key(self) -> tuple[int, int, int, int]:
        """(year, month, day, hour) of a complete candidate."""
        if not self.is_complete():
            raise ValueError(f"Incomplete timestamp cannot be compared: {self!r}")
        return tuple(self.fields)  # type: ignore[return-value]

    def __le__(self, other: TimestampCandidate) -> bool:
        # Lexicographic over (Y, M, D, H); all-equal counts as <=.
        return self.key() <= other.key()

    def __str__(self) -> str:
        parts = []
        for field, width in zip(Field, (4, 2, 2, 2)):
            parts.append(f"{self.fields[field]:0{width}d}" if self.known[field] else "?" * width)
        return f"{parts[0]}-{parts[1]}-{parts[2]} {parts[3]}h"

    def __repr__(self) -> str:
        return f"TimestampCandidate({self})"


# ============================================================================
# 4. SEARCH — Backtracking over offsets, field orders and widths
# ============================================================================

def search_timestamps(
    message: Sequence[int],
    offset: int,
    order: Sequence[Field],
    candidate: TimestampCandidate,
    on_match: Callable[[TimestampCandidate, int], None],
    field_index: int = 0,
    include_1900s: bool = False,
) -> None:
    """
    Try every short/long width combination for `order` starting at `offset`.

    Each field is read from the digits, checked against the fields already
    set, and on success the next field is tried right after it. A field that
    would run past the message or breaks a calendar rule prunes that branch.
    When all four fields are set, on_match(candidate, end_offset) is called;
    the candidate is only valid for the duration of that call.
    """
    if field_index == len(order):
        on_match(candidate, offset)
        return

    field = order[field_index]
    for size_type, width in zip(Width, FIELD_WIDTHS[field]):
        val = read_int(message, offset, width)
        if val is None:
            continue

        if field == Field.YEAR and size_type == Width.SHORT:
            values = [SHORT_YEAR_BASE + val]
            if include_1900s:
                values.append(ALT_SHORT_YEAR_BASE + val)
        else:
            values = [val]

        for value in values:
            if candidate.try_set(field, value):
                search_timestamps(message, offset + width, order, candidate,
                                  on_match, field_index + 1, include_1900s)
                candidate.unset(field)


def scan_all_offsets(
    message: Sequence[int],
    on_match: Callable[[TimestampCandidate, int], None],
    include_1900s: bool = False,
) -> None:
    """Run the search from every start offset with every field order."""
    candidate = TimestampCandidate()
    orders = tuple(FIELD_ORDERS.values())
    for offset in range(len(message) - MIN_TIMESTAMP_WIDTH + 1):
        for order in orders:
            search_timestamps(message, offset, order, candidate, on_match,
                              include_1900s=include_1900s)


def find_timestamps(
    message: Sequence[int],
    include_1900s: bool = False,
) -> list[dict]:
    """
    List every complete timestamp reading of a message.

    Returns list of dicts with {start, end, order, timestamp}, where
    `timestamp` is (year, month, day, hour) and digits [start, end) were read.
    """
    readings: list[dict] = []
    candidate = TimestampCandidate()
    for offset in range(len(message) - MIN_TIMESTAMP_WIDTH + 1):
        for name, order in FIELD_ORDERS.items():
            def record(ts: TimestampCandidate, end: int, start=offset, name=name) -> None:
                readings.append({
                    "start": start,
                    "end": end,
                    "order": name,
                    "timestamp": ts.key(),
                })
            search_timestamps(message, offset, order, candidate, record,
                              include_1900s=include_1900s)
    return readings


# ============================================================================
# 5. INTERVALS — Parsing and membership
# ============================================================================

Interval = tuple[TimestampCandidate, TimestampCandidate]


class IntervalFormatError(ValueError):
    """An interval in the input could not be read. `index` is 1-based."""

    def __init__(self, index: int, reason: str) -> None:
        super().__init__(f"Interval #{index} is not valid: {reason}")
        self.index = index
        self.reason = reason


class ReversedIntervalWarning(UserWarning):
    pass


def parse_intervals(text: str) -> list[Interval]:
    """
    Parse inclusive timestamp intervals.

    The text is a stream of integers, eight per interval: the low bound's
    year, month, day, hour, then the high bound's. Values are fully written
    out (four-digit years).

    Raises:
        IntervalFormatError: On a non-integer token, a bound that fails
            calendar validation, or input ending mid-interval.
    """
    intervals: list[Interval] = []
    tokens = text.split()
    per_interval = 2 * len(Field)

    for start in range(0, len(tokens), per_interval):
        index = len(intervals) + 1
        chunk = tokens[start:start + per_interval]
        values: list[int] = []
        for token in chunk:
            try:
                values.append(int(token))
            except ValueError:
                raise IntervalFormatError(index, f"'{token}' is not an integer") from None
        if len(values) < per_interval:
            raise IntervalFormatError(index, "input ends mid-interval")

        try:
            low = TimestampCandidate.from_fields(*values[:4])
            high = TimestampCandidate.from_fields(*values[4:])
        except ValueError as e:
            raise IntervalFormatError(index, str(e)) from None

        if not low <= high:
            warnings.warn(f"Interval #{index} has reversed endpoints.",
                          ReversedIntervalWarning, stacklevel=2)
        intervals.append((low, high))

    return intervals


def load_intervals(filepath: str | Path) -> list[Interval]:
    """Load intervals from a text file (see parse_intervals)."""
    return parse_intervals(Path(filepath).read_text(encoding="utf-8"))


def mark_hits(
    candidate: TimestampCandidate,
    intervals: Sequence[Interval],
    hit_flags: list[bool],
) -> None:
    """Set hit_flags[i] for every interval containing the candidate."""
    for i, (low, high) in enumerate(intervals):
        if low <= candidate <= high:
            hit_flags[i] = True


def format_interval(interval: Interval) -> str:
    low, high = interval
    return f"[{low} .. {high}]"


# ============================================================================
# 6. SIMULATION CONTEXT — Counters across trials
# ============================================================================

class Simulation:
    """
    All mutable state of one estimate: random source, message length,
    intervals and the per-interval counters.

    Each run_trial() call is one complete trial. Counters are only updated
    once a trial's scan has finished.
    """

    def __init__(
        self,
        probs: np.ndarray,
        intervals: Sequence[Interval],
        rng: np.random.Generator | None = None,
        length: int = MSG_LENGTH_PLAIN,
        include_1900s: bool = False,
    ) -> None:
        if rng is None:
            rng = np.random.default_rng()
        self.rng = rng
        self.probs = probs
        self.intervals = list(intervals)
        self.length = length
        self.include_1900s = include_1900s
        self.trials = 0
        self.hits = [0] * len(self.intervals)
        self._hit_flags = [False] * len(self.intervals)

    def _on_match(self, candidate: TimestampCandidate, end: int) -> None:
        mark_hits(candidate, self.intervals, self._hit_flags)

    def run_trial(self) -> tuple[int, ...]:
        """Generate one message, scan it, and fold its hits into the counters."""
        message = generate_message(self.rng, self.probs, self.length)
        self.evaluate(message)
        return message

    def evaluate(self, message: Sequence[int]) -> list[bool]:
        """
        Count `message` as one trial.

        Returns the per-interval hit flags for this message.
        """
        # Flags left by an interrupted scan must not leak into this trial.
        self._hit_flags = [False] * len(self.intervals)
        scan_all_offsets(message, self._on_match, self.include_1900s)
        flags = self._hit_flags
        self._hit_flags = [False] * len(self.intervals)

        # hits never exceed trials, even if interrupted between these lines
        hits = [h + 1 if hit else h for h, hit in zip(self.hits, flags)]
        self.trials += 1
        self.hits = hits
        return flags

    def percentages(self) -> list[float]:
        """Hit rate per interval, in percent (0.0 before any trial)."""
        if self.trials == 0:
            return [0.0] * len(self.hits)
        return [h * 100.0 / self.trials for h in self.hits]


# ============================================================================
# 7. OUTPUT UTILS — Progress line, confidence intervals, plots
# ============================================================================

def format_progress(trials: int, percentages: Sequence[float]) -> str:
    """One progress line: trial count, then each interval's hit rate."""
    chances = " ".join(f"{p:.3f}%" for p in percentages)
    return f"Tests: {trials}. Chances: {chances} "


def hit_rate_summary(hits: int, trials: int, confidence: float = 0.95) -> dict:
    """
    Hit rate of one interval with an exact (Clopper-Pearson) interval.

    Returns dict with:
        hits, trials: raw counts
        pct: hit rate in percent
        ci_low, ci_high: confidence bounds in percent (None before any trial)
    """
    from scipy import stats as sp_stats

    if trials == 0:
        return {"hits": hits, "trials": 0, "pct": 0.0, "ci_low": None, "ci_high": None}

    ci = sp_stats.binomtest(hits, trials).proportion_ci(confidence_level=confidence)
    return {
        "hits": hits,
        "trials": trials,
        "pct": hits * 100.0 / trials,
        "ci_low": float(ci.low) * 100.0,
        "ci_high": float(ci.high) * 100.0,
    }


def format_summary(sim: Simulation) -> str:
    """Format a per-interval results table for a finished estimate."""
    lines: list[str] = []
    header = f"{'#':>3}  {'Interval':<42} {'Hits':>10} {'Rate':>9}  95% CI"
    lines.append(header)
    lines.append("-" * (len(header) + 20))
    for i, interval in enumerate(sim.intervals):
        s = hit_rate_summary(sim.hits[i], sim.trials)
        if s["ci_low"] is None:
            ci = "n/a"
        else:
            ci = f"{s['ci_low']:.3f}% - {s['ci_high']:.3f}%"
        lines.append(f"{i + 1:>3}  {format_interval(interval):<42} "
                     f"{s['hits']:>10} {s['pct']:>8.3f}%  {ci}")
    lines.append(f"\nTrials: {sim.trials}")
    return "\n".join(lines)


def plot_convergence(
    history: Sequence[tuple[int, Sequence[float]]],
    labels: Sequence[str],
    save_path: str | Path,
) -> None:
    """
    Plot reported hit rates against trial count.

    Requires matplotlib (optional dependency).
    """
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError:
        warnings.warn("matplotlib not available; skipping plot")
        return

    if not history:
        warnings.warn("No progress reports recorded; skipping plot")
        return

    trials = [t for t, _ in history]
    fig, ax = plt.subplots(figsize=(9, 4))
    for i, label in enumerate(labels):
        ax.plot(trials, [pcts[i] for _, pcts in history], label=label)
    ax.set_xlabel("Trials")
    ax.set_ylabel("Hit rate (%)")
    ax.set_title("Timestamp coincidence rate")
    if labels:
        ax.legend(fontsize=7)
    plt.tight_layout()
    plt.savefig(str(save_path), dpi=150, bbox_inches="tight")
    print(f"Saved: {save_path}")
    plt.close(fig)
