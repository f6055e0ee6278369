from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from datestamps import (
    MSG_LENGTH_A1Z26, MSG_LENGTH_PLAIN, NUM_LETTERS,
    encode_plaintext, english_weights, format_message, generate_message,
    letter_probabilities, load_letter_frequencies, parse_letter_frequencies,
    read_int,
)


def test_read_int_big_endian() -> None:
    message = (2, 0, 2, 4, 0, 7)
    assert read_int(message, 0, 4) == 2024
    assert read_int(message, 2, 2) == 24
    assert read_int(message, 4, 2) == 7
    assert read_int(message, 5, 1) == 7


def test_read_int_overrun() -> None:
    message = (1, 2, 3)
    assert read_int(message, 2, 1) == 3
    assert read_int(message, 2, 2) is None
    assert read_int(message, 0, 4) is None
    assert read_int(message, 3, 1) is None


def test_generate_message_is_a1z26() -> None:
    probs = letter_probabilities(np.ones(NUM_LETTERS))
    rng = np.random.default_rng(7)
    for _ in range(50):
        message = generate_message(rng, probs)
        assert len(message) == MSG_LENGTH_A1Z26
        assert all(0 <= d <= 9 for d in message)
        pairs = [message[i] * 10 + message[i + 1] for i in range(0, len(message), 2)]
        assert all(1 <= p <= 26 for p in pairs)


def test_generate_message_respects_weights() -> None:
    weights = np.zeros(NUM_LETTERS)
    weights[25] = 3.0  # z
    rng = np.random.default_rng(0)
    message = generate_message(rng, letter_probabilities(weights), length=4)
    assert message == (2, 6) * 4


def test_generate_message_reproducible_with_seed() -> None:
    probs = letter_probabilities(english_weights())
    a = generate_message(np.random.default_rng(42), probs)
    b = generate_message(np.random.default_rng(42), probs)
    assert a == b


def test_encode_plaintext() -> None:
    assert encode_plaintext("Az j") == (0, 1, 2, 6, 1, 0)
    message = encode_plaintext("ONEDAYWILLREVEALALL")
    assert len(message) == MSG_LENGTH_PLAIN * 2
    assert format_message(message).startswith("15140504")


def test_parse_letter_frequencies_short_input_zero_fills() -> None:
    weights = parse_letter_frequencies("1 2.5\n3")
    assert weights.shape == (NUM_LETTERS,)
    assert list(weights[:3]) == [1.0, 2.5, 3.0]
    assert not weights[3:].any()


def test_parse_letter_frequencies_stops_at_bad_token() -> None:
    weights = parse_letter_frequencies("1 2 x 4")
    assert list(weights[:4]) == [1.0, 2.0, 0.0, 0.0]


def test_parse_letter_frequencies_ignores_extra() -> None:
    weights = parse_letter_frequencies(" ".join(["1"] * 30))
    assert weights.sum() == NUM_LETTERS


def test_load_letter_frequencies(tmp_path: Path) -> None:
    p = tmp_path / "freqs.txt"
    p.write_text(" ".join(str(i) for i in range(1, 27)))
    weights = load_letter_frequencies(p)
    assert weights[0] == 1.0 and weights[25] == 26.0


def test_letter_probabilities_normalises() -> None:
    probs = letter_probabilities(english_weights())
    assert probs.sum() == pytest.approx(1.0)
    assert probs[4] == max(probs)  # e


@pytest.mark.parametrize("weights", [
    np.zeros(NUM_LETTERS),
    np.full(NUM_LETTERS, -1.0),
    np.ones(5),
])
def test_letter_probabilities_rejects_bad_tables(weights: np.ndarray) -> None:
    with pytest.raises(ValueError):
        letter_probabilities(weights)
