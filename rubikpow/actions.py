"""Faces, colors and the move vocabulary for the n x n x n puzzle."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

import numpy as np

# Canonical face order; also the order used by the byte serialization.
FACE_ORDER = ("U", "D", "L", "R", "F", "B")
FACE_INDEX = {face: i for i, face in enumerate(FACE_ORDER)}
N_FACES = 6

COLOR_ORDER = ("W", "Y", "R", "O", "B", "G")
COLOR_INDEX = {color: i for i, color in enumerate(COLOR_ORDER)}

# Solved configuration: face -> color letter.
FACE_COLORS = {
    "U": "W",
    "D": "Y",
    "F": "R",
    "B": "O",
    "L": "B",
    "R": "G",
}

OPPOSITE_FACE = {"U": "D", "D": "U", "L": "R", "R": "L", "F": "B", "B": "F"}

FACE_MOVES = FACE_ORDER
WIDE_MOVES = tuple(f"{face}w" for face in FACE_ORDER)
CUBE_ROTATIONS = ("X", "Y", "Z")

# Tag index -> tag; the index is the binary wire tag.
MOVE_TAGS = FACE_MOVES + WIDE_MOVES + CUBE_ROTATIONS
MOVE_TAG_INDEX = {tag: i for i, tag in enumerate(MOVE_TAGS)}

# Whole-cube rotation -> face whose clockwise sense it follows.
ROTATION_AXIS_FACE = {"X": "R", "Y": "U", "Z": "F"}

DEFAULT_WIDE_LAYERS = 2


def solved_state(size: int) -> np.ndarray:
    """Return the flat solved state: each face monochrome in its default color."""
    colors = np.array([COLOR_INDEX[FACE_COLORS[face]] for face in FACE_ORDER], dtype=np.int8)
    return np.repeat(colors, size * size)


class MoveError(ValueError):
    """Raised when move notation or wire data cannot be decoded."""


@dataclass(frozen=True)
class Move:
    """A quarter-turn multiple of a face, wide block or whole cube.

    ``turns`` is always stored normalized into 0..3. ``layers`` is only
    meaningful for wide moves; face turns carry 1 and cube rotations 0.
    """

    kind: str
    turns: int = 1
    layers: int | None = None

    def __post_init__(self):
        if self.kind not in MOVE_TAG_INDEX:
            raise MoveError(f"Unknown move tag: {self.kind!r}")
        if isinstance(self.turns, bool) or not isinstance(self.turns, int):
            raise MoveError("Move multiplicity must be an integer")
        object.__setattr__(self, "turns", self.turns % 4)

        if self.kind in WIDE_MOVES:
            layers = DEFAULT_WIDE_LAYERS if self.layers is None else self.layers
            if isinstance(layers, bool) or not isinstance(layers, int) or layers < 2:
                raise MoveError("Wide moves need an integer layer count >= 2")
        elif self.layers not in (None, self.default_layers(self.kind)):
            raise MoveError(f"Layer count is only allowed on wide moves, got {self.kind}")
        else:
            layers = self.default_layers(self.kind)
        object.__setattr__(self, "layers", layers)

    @staticmethod
    def default_layers(kind: str) -> int:
        if kind in WIDE_MOVES:
            return DEFAULT_WIDE_LAYERS
        if kind in CUBE_ROTATIONS:
            return 0
        return 1

    @property
    def face(self) -> str:
        """Face whose clockwise sense the move follows."""
        if self.kind in CUBE_ROTATIONS:
            return ROTATION_AXIS_FACE[self.kind]
        return self.kind[0]

    @property
    def is_identity(self) -> bool:
        return self.turns == 0

    def inverse(self) -> Move:
        return Move(self.kind, (4 - self.turns) % 4, self.layers)

    def to_wire(self) -> tuple[str, int]:
        tag = self.kind
        if self.kind in WIDE_MOVES and self.layers != DEFAULT_WIDE_LAYERS:
            tag = f"{self.layers}{self.kind}"
        return tag, self.turns

    def notation(self) -> str:
        tag, _ = self.to_wire()
        if self.kind in CUBE_ROTATIONS:
            tag = tag.lower()
        return tag + {0: "0", 1: "", 2: "2", 3: "'"}[self.turns]

    def __str__(self) -> str:
        return self.notation()


_NOTATION_RE = re.compile(r"^(\d*)([UDLRFBudlrfbXYZxyz])(w?)(\d*)('?)$")


def parse_move(text: str) -> Move:
    """Parse standard notation: ``R``, ``R'``, ``R2``, ``Rw``, ``3Rw'``, ``x``."""
    if not isinstance(text, str):
        raise MoveError(f"Move notation must be a string, got {type(text).__name__}")
    match = _NOTATION_RE.match(text.strip())
    if match is None:
        raise MoveError(f"Invalid move notation: {text!r}")
    prefix, letter, wide, count, prime = match.groups()

    if letter in "xyzXYZ":
        if prefix or wide:
            raise MoveError(f"Cube rotations take no layer prefix: {text!r}")
        kind = letter.upper()
        layers = None
    elif wide:
        if letter.islower():
            raise MoveError(f"Invalid move notation: {text!r}")
        kind = f"{letter}w"
        layers = int(prefix) if prefix else None
    else:
        if letter.islower() or prefix:
            # slice and lowercase-wide forms are outside the vocabulary
            raise MoveError(f"Unsupported move notation: {text!r}")
        kind = letter
        layers = None

    turns = int(count) if count else 1
    if prime:
        turns = -turns
    return Move(kind, turns, layers)


def parse_moves(text: str) -> list[Move]:
    return [parse_move(token) for token in text.split()]


def format_moves(moves: Iterable[Move]) -> str:
    return " ".join(m.notation() for m in moves)


def invert_moves(moves: Iterable[Move]) -> list[Move]:
    """Reverse a sequence and invert every move; undoes the sequence."""
    return [m.inverse() for m in reversed(list(moves))]


def move_from_wire(item) -> Move:
    """Decode one ``(tag, multiplicity)`` pair or a notation string."""
    if isinstance(item, str):
        return parse_move(item)
    if isinstance(item, dict):
        item = (item.get("tag"), item.get("turns"))
    if not isinstance(item, (list, tuple)) or len(item) != 2:
        raise MoveError(f"Move must be a [tag, multiplicity] pair, got {item!r}")

    tag, turns = item
    if not isinstance(tag, str):
        raise MoveError(f"Move tag must be a string, got {tag!r}")
    if isinstance(turns, bool) or not isinstance(turns, int) or not 0 <= turns <= 3:
        raise MoveError(f"Move multiplicity must be an integer in 0..3, got {turns!r}")

    match = re.match(r"^(\d*)(.+)$", tag)
    if match is None:
        raise MoveError(f"Unknown move tag: {tag!r}")
    prefix, kind = match.groups()
    if kind not in MOVE_TAG_INDEX:
        raise MoveError(f"Unknown move tag: {tag!r}")
    if prefix and kind not in WIDE_MOVES:
        raise MoveError(f"Layer prefix only allowed on wide moves: {tag!r}")
    return Move(kind, turns, int(prefix) if prefix else None)


def moves_from_wire(items) -> list[Move]:
    if not isinstance(items, (list, tuple)):
        raise MoveError("Move sequence must be a list")
    return [move_from_wire(item) for item in items]


def moves_to_wire(moves: Iterable[Move]) -> list[list]:
    return [list(m.to_wire()) for m in moves]


def moves_to_bytes(moves: Iterable[Move]) -> bytes:
    """Two bytes per move: tag index then multiplicity."""
    out = bytearray()
    for m in moves:
        if m.kind in WIDE_MOVES and m.layers != DEFAULT_WIDE_LAYERS:
            raise MoveError(f"Binary encoding only carries {DEFAULT_WIDE_LAYERS}-layer wide moves: {m}")
        out.append(MOVE_TAG_INDEX[m.kind])
        out.append(m.turns)
    return bytes(out)


def moves_from_bytes(data: bytes) -> list[Move]:
    data = bytes(data)
    if len(data) % 2:
        raise MoveError("Binary move data must have an even length")
    moves: list[Move] = []
    for i in range(0, len(data), 2):
        tag_idx, turns = data[i], data[i + 1]
        if tag_idx >= len(MOVE_TAGS):
            raise MoveError(f"Unknown binary move tag: {tag_idx}")
        if turns > 3:
            raise MoveError(f"Move multiplicity must be in 0..3, got {turns}")
        moves.append(Move(MOVE_TAGS[tag_idx], turns))
    return moves
