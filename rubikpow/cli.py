"""CLI entrypoint for RubikPoW."""

from __future__ import annotations

import argparse
import sys

import yaml

from .actions import format_moves, parse_moves
from .config import check_size, load_config
from .difficulty import calculate_difficulty, difficulty_is_enumerated, digest_value, target_for_difficulty
from .scramble import scrambled_state
from .server import RubikPowHTTPServer
from .verify import BlockCandidate, check_candidate, solution_from_scramble, verify_batch


def _header_bytes(args: argparse.Namespace) -> bytes:
    if args.header and args.header_hex:
        raise ValueError("Use only one of --header or --header-hex")
    if args.header_hex:
        return bytes.fromhex(args.header_hex)
    return (args.header or "").encode("utf-8")


def build_parser(cfg: dict | None = None) -> argparse.ArgumentParser:
    cfg = cfg or load_config()
    parser = argparse.ArgumentParser(description="RubikPoW puzzle engine")
    parser.add_argument("--config", type=str, default=None, help="Path to YAML config")
    sub = parser.add_subparsers(dest="mode", required=True)

    block = argparse.ArgumentParser(add_help=False)
    block.add_argument("--size", type=int, default=3)
    block.add_argument("--nonce", type=int, required=True)
    block.add_argument("--header", type=str, default=None, help="Block header as UTF-8 text")
    block.add_argument("--header-hex", type=str, default=None, help="Block header as hex")

    scramble = sub.add_parser("scramble", parents=[block], help="Derive and print a block scramble")
    scramble.add_argument("--show-solution", action="store_true")

    verify = sub.add_parser("verify", parents=[block], help="Verify a solution for a block")
    verify.add_argument("--solution", type=str, required=True, help="Moves in notation, e.g. \"R U' F2\"")
    verify.add_argument("--target", type=int, default=cfg["pow"]["target"])

    difficulty = sub.add_parser("difficulty", help="Print the difficulty figure for a size")
    difficulty.add_argument("--size", type=int, required=True)

    batch = sub.add_parser("batch", help="Verify a YAML/JSON list of candidates in parallel")
    batch.add_argument("--input", type=str, required=True)
    batch.add_argument("--max-workers", type=int, default=cfg["batch"]["max_workers"])
    batch.add_argument("--progress", default="on", choices=["on", "off"])

    serve = sub.add_parser("serve", help="Run the HTTP verification server")
    serve.add_argument("--host", default=cfg["server"]["host"])
    serve.add_argument("--port", type=int, default=cfg["server"]["port"])

    return parser


def run(args: argparse.Namespace, cfg: dict) -> int:
    if args.mode == "scramble":
        size = check_size(args.size, cfg)
        state, moves = scrambled_state(size, args.nonce, _header_bytes(args))
        print(f"scramble size={size} nonce={args.nonce} length={len(moves)}", flush=True)
        print(f"moves={format_moves(moves)}", flush=True)
        if args.show_solution:
            print(f"solution={format_moves(solution_from_scramble(moves))}", flush=True)
        print(f"digest_value={digest_value(state)}", flush=True)
        print(state.render(), flush=True)
        return 0

    if args.mode == "verify":
        size = check_size(args.size, cfg)
        candidate = BlockCandidate(
            size=size,
            nonce=args.nonce,
            header=_header_bytes(args),
            solution=tuple(parse_moves(args.solution)),
            target=args.target,
        )
        result = check_candidate(candidate)
        print(
            f"verify size={size} nonce={args.nonce} solved={result.solved} "
            f"meets_target={result.meets_target} accepted={result.accepted}",
            flush=True,
        )
        return 0 if result.accepted else 1

    if args.mode == "difficulty":
        size = check_size(args.size, cfg)
        value = calculate_difficulty(size)
        print(
            f"difficulty size={size} value={value} enumerated={difficulty_is_enumerated(size)} "
            f"target={target_for_difficulty(value)}",
            flush=True,
        )
        return 0

    if args.mode == "batch":
        with open(args.input, encoding="utf-8") as f:
            try:
                items = yaml.safe_load(f) or []
            except yaml.YAMLError as exc:
                raise ValueError(f"Batch input is not valid YAML: {exc}") from exc
        if not isinstance(items, list):
            raise ValueError("Batch input must be a list of candidates")
        candidates = []
        for item in items:
            if not isinstance(item, dict):
                raise ValueError(f"Batch entry must be a mapping, got {type(item).__name__}")
            item.setdefault("target", cfg["pow"]["target"])
            check_size(item.get("size"), cfg)
            candidates.append(BlockCandidate.from_dict(item))
        results = verify_batch(candidates, max_workers=args.max_workers, progress=args.progress == "on")
        for i, result in enumerate(results):
            print(
                f"block={i} solved={result.solved} meets_target={result.meets_target} accepted={result.accepted}",
                flush=True,
            )
        accepted = sum(r.accepted for r in results)
        print(f"batch_summary total={len(results)} accepted={accepted}", flush=True)
        return 0 if accepted == len(results) else 1

    if args.mode == "serve":
        server = RubikPowHTTPServer(host=args.host, port=args.port, config=cfg)
        print(f"RubikPoW server listening on http://{server.host}:{server.port}", flush=True)
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
        finally:
            server.shutdown()
        return 0

    raise ValueError(f"Unsupported mode: {args.mode}")


def main(argv: list[str] | None = None) -> int:
    # Pre-parse to get --config so it can supply defaults.
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", type=str, default=None)
    pre_args, _ = pre.parse_known_args(argv)
    cfg = load_config(pre_args.config)

    parser = build_parser(cfg)
    args = parser.parse_args(argv)
    try:
        return run(args, cfg)
    except ValueError as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    sys.exit(main())
