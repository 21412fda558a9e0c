"""HTTP client for the RubikPoW verification server."""

from __future__ import annotations

import json
from typing import Iterable
from urllib import request
from urllib.parse import urlencode

from .actions import Move, moves_from_wire, moves_to_wire


class RubikPowClient:
    def __init__(self, host: str = "127.0.0.1", port: int = 8000, timeout: float = 10.0):
        self.base = f"http://{host}:{port}"
        self.timeout = timeout

    def _call(self, method: str, path: str, payload: dict | None = None) -> dict:
        data = None
        headers = {}
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"
        req = request.Request(url=f"{self.base}{path}", method=method, data=data, headers=headers)
        with request.urlopen(req, timeout=self.timeout) as resp:
            return json.loads(resp.read().decode("utf-8"))

    def health(self) -> dict:
        return self._call("GET", "/health")

    def difficulty(self, size: int) -> int:
        out = self._call("GET", f"/difficulty?{urlencode({'size': int(size)})}")
        return int(out["difficulty"])

    def scramble(self, size: int, nonce: int, header: bytes) -> list[Move]:
        payload = {"size": int(size), "nonce": int(nonce), "header_hex": bytes(header).hex()}
        out = self._call("POST", "/scramble", payload)
        return moves_from_wire(out["moves"])

    def verify(
        self,
        size: int,
        nonce: int,
        header: bytes,
        solution: Iterable[Move],
        target: int | None = None,
    ) -> dict:
        payload = {
            "size": int(size),
            "nonce": int(nonce),
            "header_hex": bytes(header).hex(),
            "solution": moves_to_wire(solution),
        }
        if target is not None:
            payload["target"] = int(target)
        return self._call("POST", "/verify", payload)
