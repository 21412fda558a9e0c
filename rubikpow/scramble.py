"""Deterministic scramble derivation from a block nonce and header.

Every verifier has to reproduce the same scramble bit for bit, so the
random stream is defined entirely in terms of SHA3-256:

* seed    = SHA3-256(nonce as u64 little-endian || header)
* block k = SHA3-256(seed || k as u64 little-endian), k = 0, 1, 2, ...
* a draw from [0, m) reads the next stream byte ``b``, skips it while
  ``b >= 256 - 256 % m`` and returns ``b % m``.

The scramble length is ``20 + draw(11)``. Each step draws a face from
``FACE_ORDER`` (redrawing while it equals the previous face) and then a
multiplicity ``1 + draw(3)``.
"""

from __future__ import annotations

import hashlib
import struct
from typing import Iterator

from .actions import FACE_ORDER, Move
from .engine import PuzzleState
from .state_codec import StateValidationError

MIN_SCRAMBLE_LENGTH = 20
MAX_SCRAMBLE_LENGTH = 30
MAX_NONCE = 2**64 - 1

_U64 = struct.Struct("<Q")


def _check_inputs(nonce: int, header: bytes) -> bytes:
    if isinstance(nonce, bool) or not isinstance(nonce, int):
        raise StateValidationError(f"Nonce must be an integer, got {type(nonce).__name__}")
    if not 0 <= nonce <= MAX_NONCE:
        raise StateValidationError(f"Nonce must fit in an unsigned 64-bit integer, got {nonce}")
    if not isinstance(header, (bytes, bytearray, memoryview)):
        raise StateValidationError(f"Header must be bytes, got {type(header).__name__}")
    return bytes(header)


def scramble_seed(nonce: int, header: bytes) -> bytes:
    header = _check_inputs(nonce, header)
    return hashlib.sha3_256(_U64.pack(nonce) + header).digest()


class DigestStream:
    """Byte stream of chained SHA3-256 blocks with unbiased bounded draws."""

    def __init__(self, seed: bytes):
        self._seed = bytes(seed)
        self._counter = 0
        self._buffer = b""
        self._pos = 0

    def next_byte(self) -> int:
        if self._pos >= len(self._buffer):
            self._buffer = hashlib.sha3_256(self._seed + _U64.pack(self._counter)).digest()
            self._counter += 1
            self._pos = 0
        b = self._buffer[self._pos]
        self._pos += 1
        return b

    def draw(self, bound: int) -> int:
        """Uniform integer in ``[0, bound)`` for ``1 <= bound <= 256``."""
        if not 1 <= bound <= 256:
            raise ValueError(f"Draw bound must be in 1..256, got {bound}")
        limit = 256 - (256 % bound)
        while True:
            b = self.next_byte()
            if b < limit:
                return b % bound


def iter_scramble(nonce: int, header: bytes) -> Iterator[Move]:
    """Yield the scramble moves for ``(nonce, header)`` in draw order."""
    stream = DigestStream(scramble_seed(nonce, header))
    length = MIN_SCRAMBLE_LENGTH + stream.draw(MAX_SCRAMBLE_LENGTH - MIN_SCRAMBLE_LENGTH + 1)

    prev_face = None
    for _ in range(length):
        face = FACE_ORDER[stream.draw(len(FACE_ORDER))]
        while face == prev_face:
            face = FACE_ORDER[stream.draw(len(FACE_ORDER))]
        yield Move(face, 1 + stream.draw(3))
        prev_face = face


def generate_scramble(nonce: int, header: bytes) -> list[Move]:
    """Scramble sequence for ``(nonce, header)`` without touching any state."""
    return list(iter_scramble(nonce, header))


def scramble_deterministic(state: PuzzleState, nonce: int, header: bytes) -> list[Move]:
    """Scramble ``state`` in place from ``(nonce, header)`` and return the moves."""
    moves: list[Move] = []
    for move in iter_scramble(nonce, header):
        state.apply_move(move)
        moves.append(move)
    return moves


def scrambled_state(size: int, nonce: int, header: bytes) -> tuple[PuzzleState, list[Move]]:
    state = PuzzleState(size)
    moves = scramble_deterministic(state, nonce, header)
    return state, moves
