"""Difficulty figures and the hash-below-target check."""

from __future__ import annotations

import hashlib
from math import factorial

from .engine import PuzzleState

DIGEST_PREFIX_BYTES = 8
MAX_TARGET = 2 ** (8 * DIGEST_PREFIX_BYTES) - 1

# Known configuration counts for small cubes.
ENUMERATED_DIFFICULTY = {
    1: 1,
    2: 3_674_160,
    3: 43_252_003_274_489_856_000,
}


def _closed_form_state_count(size: int) -> int:
    """Reachable states of a fixed-orientation cube with identical center facelets."""
    n = size
    if n % 2 == 0:
        numerator = factorial(7) * 3**6 * factorial(24) ** ((n * n - 2 * n) // 4)
        return numerator // factorial(4) ** (6 * (n - 2) ** 2 // 4)
    numerator = (
        factorial(8) * 3**7 * 2**10 * factorial(12) * factorial(24) ** ((n * n - 2 * n - 3) // 4)
    )
    return numerator // factorial(4) ** (6 * (n - 3) * (n - 1) // 4)


def difficulty_is_enumerated(size: int) -> bool:
    return size in ENUMERATED_DIFFICULTY


def calculate_difficulty(size: int) -> int:
    """Configuration-space size of an n x n x n cube.

    Sizes 1-3 return the enumerated counts. Larger sizes return the closed
    form for a cube with indistinguishable centers, which is a formula
    result rather than an enumerated constant.
    """
    if isinstance(size, bool) or not isinstance(size, int) or size < 1:
        raise ValueError(f"Cube size must be a positive integer, got {size!r}")
    if size in ENUMERATED_DIFFICULTY:
        return ENUMERATED_DIFFICULTY[size]
    return _closed_form_state_count(size)


def state_digest(state: PuzzleState) -> bytes:
    return hashlib.sha3_256(state.canonical_serialize()).digest()


def digest_value(state: PuzzleState) -> int:
    """Big-endian integer of the first ``DIGEST_PREFIX_BYTES`` of the state digest."""
    return int.from_bytes(state_digest(state)[:DIGEST_PREFIX_BYTES], "big")


def meets_difficulty(state: PuzzleState, target: int) -> bool:
    """True iff the state's digest prefix is ``<= target``."""
    if target < 0:
        return False
    return digest_value(state) <= target


def target_for_difficulty(difficulty: int) -> int:
    """Target giving roughly one success per ``difficulty`` uniform digests."""
    if difficulty < 1:
        raise ValueError(f"Difficulty must be >= 1, got {difficulty}")
    return MAX_TARGET // difficulty
