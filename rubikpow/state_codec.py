"""State validation and codec helpers.

The canonical byte layout is the hashing input shared by every verifier::

    size          4 bytes, unsigned little-endian
    per face      1 byte face tag (U=0, D=1, L=2, R=3, F=4, B=5)
                  size*size color bytes, row-major (W=0, Y=1, R=2, O=3, B=4, G=5)

Faces appear in tag order, so the total length is ``4 + 6 * (1 + size**2)``.
"""

from __future__ import annotations

import struct

import numpy as np

from .actions import COLOR_INDEX, COLOR_ORDER, FACE_INDEX, FACE_ORDER, N_FACES

SIZE_HEADER = struct.Struct("<I")
MIN_SIZE = 2


class StateValidationError(ValueError):
    """Raised when an input state is invalid."""


class SizeError(StateValidationError):
    """Raised when a cube size is not an integer >= 2 or is outside configured bounds."""


def validate_size(size) -> int:
    if isinstance(size, bool) or not isinstance(size, (int, np.integer)):
        raise SizeError(f"Cube size must be an integer, got {type(size).__name__}")
    size = int(size)
    if size < MIN_SIZE:
        raise SizeError(f"Cube size must be >= {MIN_SIZE}, got {size}")
    return size


def state_length(size: int) -> int:
    return N_FACES * size * size


def serialized_length(size: int) -> int:
    return SIZE_HEADER.size + N_FACES * (1 + size * size)


def _validate_color_ids(arr: np.ndarray, size: int) -> np.ndarray:
    arr = np.asarray(arr, dtype=np.int16).reshape(-1)
    expected_len = state_length(size)
    if arr.size != expected_len:
        raise StateValidationError(f"State must have {expected_len} facelets, got {arr.size}")

    if np.any(arr < 0) or np.any(arr >= N_FACES):
        raise StateValidationError("State contains invalid color IDs; allowed values are 0..5")

    counts = np.bincount(arr, minlength=N_FACES)
    if not np.all(counts == size * size):
        raise StateValidationError(
            f"Invalid facelet counts; each color 0..5 must appear exactly {size * size} times"
        )

    return arr.astype(np.int8, copy=True)


def _letters_to_ids(rows) -> list[int]:
    ids: list[int] = []
    for row in rows:
        for letter in row:
            if letter not in COLOR_INDEX:
                raise StateValidationError(f"Unknown color letter: {letter!r}")
            ids.append(COLOR_INDEX[letter])
    return ids


def validate_state(state, size: int) -> np.ndarray:
    """Validate a state and return canonical flat color ids.

    Accepts a flat sequence of color ids, a ``(6, size, size)`` array, or a
    mapping of face letter to rows (strings or lists of color letters).
    """
    size = validate_size(size)

    if isinstance(state, dict):
        missing = [face for face in FACE_ORDER if face not in state]
        if missing:
            raise StateValidationError(f"State mapping is missing faces: {', '.join(missing)}")
        ids: list[int] = []
        for face in FACE_ORDER:
            rows = state[face]
            if len(rows) != size or any(len(row) != size for row in rows):
                raise StateValidationError(f"Face {face} must be a {size}x{size} grid")
            ids.extend(_letters_to_ids(rows))
        return _validate_color_ids(np.asarray(ids), size)

    arr = np.asarray(state)
    if arr.ndim == 3 and arr.shape != (N_FACES, size, size):
        raise StateValidationError(
            f"Faces array must have shape ({N_FACES}, {size}, {size}), got {arr.shape}"
        )
    if arr.ndim not in (1, 3):
        raise StateValidationError(
            f"State must be flat color IDs of length {state_length(size)} or shape (6, {size}, {size})"
        )
    return _validate_color_ids(arr, size)


def serialize_facelets(facelets: np.ndarray, size: int) -> bytes:
    faces = np.asarray(facelets, dtype=np.uint8).reshape(N_FACES, size * size)
    out = bytearray(SIZE_HEADER.pack(size))
    for face in FACE_ORDER:
        out.append(FACE_INDEX[face])
        out += faces[FACE_INDEX[face]].tobytes()
    return bytes(out)


def deserialize_facelets(data: bytes) -> tuple[int, np.ndarray]:
    """Inverse of :func:`serialize_facelets`; validates the whole layout."""
    data = bytes(data)
    if len(data) < SIZE_HEADER.size:
        raise StateValidationError("Serialized state is too short to hold a size header")
    (size,) = SIZE_HEADER.unpack_from(data)
    size = validate_size(size)
    if len(data) != serialized_length(size):
        raise StateValidationError(
            f"Serialized state for size {size} must be {serialized_length(size)} bytes, got {len(data)}"
        )

    stride = 1 + size * size
    colors = bytearray()
    for k, face in enumerate(FACE_ORDER):
        offset = SIZE_HEADER.size + k * stride
        if data[offset] != FACE_INDEX[face]:
            raise StateValidationError(f"Expected face tag {FACE_INDEX[face]} at offset {offset}")
        colors += data[offset + 1 : offset + stride]
    return size, _validate_color_ids(np.frombuffer(bytes(colors), dtype=np.uint8), size)


def flat_to_faces(facelets: np.ndarray, size: int) -> np.ndarray:
    return np.asarray(facelets).reshape(N_FACES, size, size)


def state_to_json(facelets: np.ndarray, size: int) -> dict[str, list[str]]:
    """Face letter -> rows of color letters, e.g. ``{"U": ["WWW", ...], ...}``."""
    faces = flat_to_faces(facelets, size)
    return {
        face: ["".join(COLOR_ORDER[int(c)] for c in row) for row in faces[FACE_INDEX[face]]]
        for face in FACE_ORDER
    }


def render_net(facelets: np.ndarray, size: int) -> str:
    """Unfolded text net: U on top, L F R B in the middle band, D below."""
    rows = state_to_json(facelets, size)
    pad = " " * (size + 1)
    lines = [pad + r for r in rows["U"]]
    for i in range(size):
        lines.append(" ".join(rows[face][i] for face in ("L", "F", "R", "B")))
    lines.extend(pad + r for r in rows["D"])
    return "\n".join(lines)
