"""Solved-state checks for the puzzle."""

from __future__ import annotations

import numpy as np

from .actions import N_FACES


def faces_monochrome(facelets: np.ndarray, size: int) -> bool:
    """True iff every face shows a single color.

    Whole-cube rotations only relabel which face carries which color, so
    this predicate is orientation invariant without enumerating the 24
    orientations.
    """
    faces = np.asarray(facelets).reshape(N_FACES, size * size)
    return bool(np.all(faces == faces[:, :1]))

