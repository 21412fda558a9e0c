"""RubikPoW: n x n x n puzzle proof-of-work engine."""

from .actions import Move, MoveError, parse_move, parse_moves
from .difficulty import MAX_TARGET, calculate_difficulty, meets_difficulty
from .engine import PuzzleState
from .scramble import scramble_deterministic
from .state_codec import SizeError, StateValidationError
from .verify import verify_solution

__all__ = [
    "MAX_TARGET",
    "Move",
    "MoveError",
    "PuzzleState",
    "SizeError",
    "StateValidationError",
    "calculate_difficulty",
    "meets_difficulty",
    "parse_move",
    "parse_moves",
    "scramble_deterministic",
    "verify_solution",
]
