"""Core n x n x n puzzle state."""

from __future__ import annotations

from typing import Any, Iterable

import numpy as np

from . import moves as move_engine
from .actions import FACE_MOVES, Move, solved_state
from .solved_check import faces_monochrome
from .state_codec import (
    deserialize_facelets,
    flat_to_faces,
    render_net,
    serialize_facelets,
    state_to_json,
    validate_size,
    validate_state,
)


class PuzzleState:
    """Facelet grid of an n x n x n cube.

    Each instance owns its facelets; ``clone()`` is the only way to branch
    a state. Moves mutate in place.
    """

    def __init__(self, size: int = 3, initial_state: Any = None):
        self.size = validate_size(size)
        if initial_state is None:
            self._facelets = solved_state(self.size)
        else:
            self._facelets = validate_state(initial_state, self.size)

    @classmethod
    def from_facelets(cls, size: int, facelets: Any) -> PuzzleState:
        return cls(size, initial_state=facelets)

    @classmethod
    def from_bytes(cls, data: bytes) -> PuzzleState:
        size, facelets = deserialize_facelets(data)
        state = cls(size)
        state._facelets = facelets
        return state

    def clone(self) -> PuzzleState:
        other = PuzzleState.__new__(PuzzleState)
        other.size = self.size
        other._facelets = self._facelets.copy()
        return other

    def get_state(self) -> np.ndarray:
        """Return a copy of the flat color-id state (length 6 * size**2)."""
        return self._facelets.copy()

    def faces(self) -> np.ndarray:
        """Return a copy shaped (6, size, size) in ``FACE_ORDER``."""
        return flat_to_faces(self._facelets, self.size).copy()

    def is_solved(self) -> bool:
        return faces_monochrome(self._facelets, self.size)

    def apply_move(self, move: Move) -> None:
        if not isinstance(move, Move):
            raise TypeError(f"apply_move expects a Move, got {type(move).__name__}")
        if move.turns == 0:
            return
        self._facelets = self._facelets[move_engine.move_permutation(move, self.size)]

    def apply_moves(self, moves: Iterable[Move]) -> None:
        for move in moves:
            self.apply_move(move)

    def scramble(self, steps: int, seed: int | None = None) -> list[Move]:
        """Random outer-face scramble with no two consecutive turns of one face.

        Not reproducible across implementations; block scrambles go through
        :func:`rubikpow.scramble.scramble_deterministic`.
        """
        if isinstance(steps, bool) or not isinstance(steps, int) or steps < 0:
            raise ValueError("Scramble steps must be a non-negative integer")

        rng = np.random.default_rng(seed)
        move_list: list[Move] = []
        prev_face: str | None = None
        for _ in range(steps):
            candidates = [face for face in FACE_MOVES if face != prev_face]
            face = candidates[int(rng.integers(len(candidates)))]
            move = Move(face, int(rng.integers(1, 4)))
            self.apply_move(move)
            move_list.append(move)
            prev_face = face
        return move_list

    def canonical_serialize(self) -> bytes:
        return serialize_facelets(self._facelets, self.size)

    def state_payload(self) -> dict[str, Any]:
        return {
            "size": self.size,
            "faces": state_to_json(self._facelets, self.size),
            "solved": self.is_solved(),
        }

    def render(self) -> str:
        return render_net(self._facelets, self.size)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PuzzleState):
            return NotImplemented
        return self.size == other.size and np.array_equal(self._facelets, other._facelets)

    __hash__ = None

    def __repr__(self) -> str:
        return f"PuzzleState(size={self.size}, solved={self.is_solved()})"
