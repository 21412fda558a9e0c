"""HTTP API server for scramble and solution verification."""

from __future__ import annotations

import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import parse_qs, urlparse

from .actions import MoveError, moves_to_wire
from .config import DEFAULT_CONFIG, check_size
from .difficulty import calculate_difficulty, difficulty_is_enumerated, digest_value, target_for_difficulty
from .scramble import scrambled_state
from .state_codec import StateValidationError
from .verify import BlockCandidate, check_candidate


def _require(body: dict[str, Any], *fields: str) -> None:
    for name in fields:
        if name not in body:
            raise StateValidationError(f"Missing required field: {name}")


def _header_from_body(body: dict[str, Any]) -> bytes:
    if "header_hex" in body:
        try:
            return bytes.fromhex(body["header_hex"])
        except (TypeError, ValueError) as exc:
            raise StateValidationError(f"header_hex must be a hex string: {exc}") from exc
    if isinstance(body.get("header"), str):
        return body["header"].encode("utf-8")
    raise StateValidationError("Missing required field: header_hex")


class RubikPowHTTPServer:
    def __init__(self, host: str = "127.0.0.1", port: int = 8000, config: dict | None = None):
        self.config = config or DEFAULT_CONFIG
        handler_cls = self._build_handler()
        self.httpd = ThreadingHTTPServer((host, port), handler_cls)
        self.host, self.port = self.httpd.server_address

    def _default_target(self) -> int:
        return int(self.config["pow"]["target"])

    def _build_handler(self):
        parent = self

        class Handler(BaseHTTPRequestHandler):
            server_version = "RubikPoW/1.0"

            def log_message(self, fmt: str, *args):
                return

            def _send_json(self, code: int, payload: dict[str, Any]):
                body = json.dumps(payload).encode("utf-8")
                self.send_response(code)
                self.send_header("Content-Type", "application/json")
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)

            def _read_json(self) -> dict[str, Any]:
                try:
                    length = int(self.headers.get("Content-Length", "0"))
                except ValueError as exc:
                    raise StateValidationError("Content-Length must be an integer") from exc
                if length < 0:
                    raise StateValidationError("Content-Length must not be negative")
                if length == 0:
                    return {}
                data = self.rfile.read(length)
                try:
                    obj = json.loads(data.decode("utf-8"))
                except json.JSONDecodeError as exc:
                    raise StateValidationError(f"Invalid JSON body: {exc}") from exc
                if not isinstance(obj, dict):
                    raise StateValidationError("JSON body must be an object")
                return obj

            def do_GET(self):
                url = urlparse(self.path)
                try:
                    if url.path == "/health":
                        engine_cfg = parent.config["engine"]
                        self._send_json(
                            200,
                            {
                                "ready": True,
                                "min_size": engine_cfg["min_size"],
                                "max_size": engine_cfg["max_size"],
                                "target": parent._default_target(),
                            },
                        )
                        return

                    if url.path == "/difficulty":
                        query = parse_qs(url.query)
                        if "size" not in query:
                            raise StateValidationError("Missing required query parameter: size")
                        try:
                            size = int(query["size"][0])
                        except ValueError as exc:
                            raise StateValidationError("size must be an integer") from exc
                        size = check_size(size, parent.config)
                        difficulty = calculate_difficulty(size)
                        self._send_json(
                            200,
                            {
                                "size": size,
                                # exceeds JSON-safe integers for size >= 3
                                "difficulty": str(difficulty),
                                "enumerated": difficulty_is_enumerated(size),
                                "target": target_for_difficulty(difficulty),
                            },
                        )
                        return
                except ValueError as exc:
                    self._send_json(400, {"error": str(exc)})
                    return

                self._send_json(404, {"error": "Not Found"})

            def do_POST(self):
                try:
                    body = self._read_json()
                    if self.path == "/scramble":
                        _require(body, "size", "nonce")
                        size = check_size(body["size"], parent.config)
                        state, moves = scrambled_state(size, body["nonce"], _header_from_body(body))
                        self._send_json(
                            200,
                            {
                                "moves": moves_to_wire(moves),
                                "state": state.state_payload(),
                                "digest_value": digest_value(state),
                            },
                        )
                        return

                    if self.path == "/verify":
                        _require(body, "size", "nonce", "solution")
                        check_size(body["size"], parent.config)
                        candidate = BlockCandidate.from_dict(
                            {
                                "size": body["size"],
                                "nonce": body["nonce"],
                                "header": _header_from_body(body),
                                "solution": body["solution"],
                                "target": body.get("target", parent._default_target()),
                            }
                        )
                        if isinstance(candidate.target, bool) or not isinstance(candidate.target, int):
                            raise StateValidationError("target must be an integer")
                        result = check_candidate(candidate)
                        self._send_json(200, result.to_dict())
                        return

                except (StateValidationError, MoveError) as exc:
                    self._send_json(400, {"error": str(exc)})
                    return

                self._send_json(404, {"error": "Not Found"})

        return Handler

    def serve_forever(self):
        self.httpd.serve_forever()

    def start_background(self, daemon: bool = True) -> threading.Thread:
        thread = threading.Thread(target=self.serve_forever, daemon=daemon)
        thread.start()
        return thread

    def shutdown(self):
        self.httpd.shutdown()
        self.httpd.server_close()
