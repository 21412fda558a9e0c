"""Solution verification for scrambled puzzle states."""

from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from tqdm import tqdm

from .actions import Move, invert_moves, moves_from_wire, moves_to_wire
from .difficulty import MAX_TARGET, digest_value
from .engine import PuzzleState
from .scramble import scrambled_state
from .state_codec import StateValidationError


def verify_solution(reference_state: PuzzleState, candidate_moves: Iterable[Move]) -> bool:
    """Replay ``candidate_moves`` on a clone and report whether it ends solved."""
    cube = reference_state.clone()
    for move in candidate_moves:
        cube.apply_move(move)
    return cube.is_solved()


def solution_from_scramble(scramble_moves: Sequence[Move]) -> list[Move]:
    return invert_moves(scramble_moves)


@dataclass(frozen=True)
class BlockCandidate:
    """One submitted block: puzzle inputs, claimed solution and target."""

    size: int
    nonce: int
    header: bytes
    solution: tuple[Move, ...] = ()
    target: int = MAX_TARGET

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> BlockCandidate:
        for name in ("size", "nonce"):
            if name not in payload:
                raise StateValidationError(f"Missing required field: {name}")
        header = payload.get("header")
        if header is None and "header_hex" in payload:
            header = bytes.fromhex(payload["header_hex"])
        elif isinstance(header, str):
            header = header.encode("utf-8")
        return cls(
            size=payload["size"],
            nonce=payload["nonce"],
            header=header,
            solution=tuple(moves_from_wire(payload.get("solution", []))),
            target=payload.get("target", MAX_TARGET),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "size": self.size,
            "nonce": self.nonce,
            "header_hex": bytes(self.header).hex(),
            "solution": moves_to_wire(self.solution),
            "target": self.target,
        }


@dataclass
class VerificationResult:
    solved: bool
    meets_target: bool
    digest_value: int
    scramble: list[Move] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.solved and self.meets_target

    def to_dict(self) -> dict[str, Any]:
        return {
            "solved": self.solved,
            "meets_target": self.meets_target,
            "accepted": self.accepted,
            "digest_value": self.digest_value,
            "scramble": moves_to_wire(self.scramble),
        }


def check_candidate(candidate: BlockCandidate) -> VerificationResult:
    """Rebuild the scramble, replay the solution and test the scrambled state's digest."""
    state, scramble = scrambled_state(candidate.size, candidate.nonce, candidate.header)
    value = digest_value(state)
    return VerificationResult(
        solved=verify_solution(state, candidate.solution),
        meets_target=candidate.target >= 0 and value <= candidate.target,
        digest_value=value,
        scramble=scramble,
    )


def verify_batch(
    candidates: Sequence[BlockCandidate],
    max_workers: int | None = None,
    progress: bool = False,
) -> list[VerificationResult]:
    """Check independent candidates in a process pool; results keep input order."""
    if max_workers == 1 or len(candidates) <= 1:
        it = tqdm(candidates, desc="Verifying", unit="block", disable=not progress)
        return [check_candidate(c) for c in it]

    with ProcessPoolExecutor(max_workers=max_workers) as pool:
        results = pool.map(check_candidate, candidates)
        return list(tqdm(results, total=len(candidates), desc="Verifying", unit="block", disable=not progress))
