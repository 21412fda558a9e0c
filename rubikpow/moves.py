"""Facelet permutations induced by every move, for any cube size.

A state is a flat array of ``6 * n * n`` color ids laid out face by face in
``FACE_ORDER`` and row-major inside each face. Every move is compiled once
per size into an index permutation ``perm`` so that applying it is
``state[perm]`` (``perm[new_idx] = old_idx``).
"""

from __future__ import annotations

from functools import lru_cache
from typing import Callable

import numpy as np

from .actions import (
    CUBE_ROTATIONS,
    FACE_INDEX,
    N_FACES,
    OPPOSITE_FACE,
    WIDE_MOVES,
    Move,
)

# (depth, i, n) -> (row, col) on the named face.
Selector = Callable[[int, np.ndarray, int], tuple[np.ndarray, np.ndarray]]


def _row(depth_fn):
    return lambda d, i, n: (np.full_like(i, depth_fn(d, n)), i)


def _row_rev(depth_fn):
    return lambda d, i, n: (np.full_like(i, depth_fn(d, n)), n - 1 - i)


def _col(depth_fn):
    return lambda d, i, n: (i, np.full_like(i, depth_fn(d, n)))


def _col_rev(depth_fn):
    return lambda d, i, n: (n - 1 - i, np.full_like(i, depth_fn(d, n)))


def _near(d, n):
    return d


def _far(d, n):
    return n - 1 - d


# Turning a face cycles four strips; strip k receives the facelets of
# strip k + 1 and the last strip receives the first one's.
ADJACENCY: dict[str, tuple[tuple[str, Selector], ...]] = {
    "U": (("F", _row(_near)), ("R", _row(_near)), ("B", _row(_near)), ("L", _row(_near))),
    "D": (("F", _row(_far)), ("L", _row(_far)), ("B", _row(_far)), ("R", _row(_far))),
    "L": (("U", _col(_near)), ("B", _col_rev(_far)), ("D", _col(_near)), ("F", _col(_near))),
    "R": (("U", _col(_far)), ("F", _col(_far)), ("D", _col(_far)), ("B", _col_rev(_near))),
    "F": (("U", _row(_far)), ("L", _col_rev(_far)), ("D", _row_rev(_near)), ("R", _col(_near))),
    "B": (("U", _row(_near)), ("R", _col(_far)), ("D", _row_rev(_far)), ("L", _col_rev(_near))),
}


def rotate_face_cw(grids: np.ndarray, face: str) -> None:
    """Rotate one face grid clockwise in place: new[i][j] = old[n-1-j][i]."""
    idx = FACE_INDEX[face]
    grids[idx] = np.rot90(grids[idx], k=-1).copy()


def rotate_face_ccw(grids: np.ndarray, face: str) -> None:
    idx = FACE_INDEX[face]
    grids[idx] = np.rot90(grids[idx], k=1).copy()


def cycle_layer(grids: np.ndarray, face: str, depth: int) -> None:
    """Cycle the four strips at ``depth`` around ``face`` by one quarter turn."""
    n = grids.shape[1]
    i = np.arange(n)
    strips = []
    for adj_face, selector in ADJACENCY[face]:
        rows, cols = selector(depth, i, n)
        strips.append((FACE_INDEX[adj_face], rows, cols))

    values = [grids[f, rows, cols].copy() for f, rows, cols in strips]
    for k, (f, rows, cols) in enumerate(strips):
        grids[f, rows, cols] = values[(k + 1) % 4]


def turned_depths(move: Move, size: int) -> range:
    """Layer depths, counted from the move's face, cycled by one quarter turn."""
    if move.kind in CUBE_ROTATIONS:
        return range(size)
    if move.kind in WIDE_MOVES and size > 3:
        return range(min(move.layers, size - 1))
    return range(1)


def quarter_turn(grids: np.ndarray, move: Move) -> None:
    """Apply a single clockwise quarter turn of ``move`` to face grids in place."""
    size = grids.shape[1]
    face = move.face
    rotate_face_cw(grids, face)
    if move.kind in CUBE_ROTATIONS:
        rotate_face_ccw(grids, OPPOSITE_FACE[face])
    for depth in turned_depths(move, size):
        cycle_layer(grids, face, depth)


def _effective_key(move: Move, size: int) -> tuple[str, int]:
    """Collapse moves that act identically at this size onto one cache key."""
    if move.kind in WIDE_MOVES:
        depth = len(turned_depths(move, size))
        if depth == 1:
            return move.face, 1
        return move.kind, depth
    return move.kind, move.default_layers(move.kind)


@lru_cache(maxsize=None)
def _quarter_permutation(size: int, kind: str, layers: int) -> np.ndarray:
    move = Move(kind, 1, layers if kind in WIDE_MOVES else None)
    grids = np.arange(N_FACES * size * size, dtype=np.int32).reshape(N_FACES, size, size)
    quarter_turn(grids, move)
    perm = grids.reshape(-1).copy()
    perm.setflags(write=False)
    return perm


@lru_cache(maxsize=None)
def _move_permutation(size: int, kind: str, layers: int, turns: int) -> np.ndarray:
    quarter = _quarter_permutation(size, kind, layers)
    perm = np.arange(quarter.size, dtype=np.int32)
    for _ in range(turns):
        perm = perm[quarter]
    perm.setflags(write=False)
    return perm


def move_permutation(move: Move, size: int) -> np.ndarray:
    """Return the read-only index permutation of ``move`` for cube ``size``."""
    kind, layers = _effective_key(move, size)
    return _move_permutation(size, kind, layers, move.turns)

