import http.client
import json
import threading
import time
import unittest
from urllib import error, request

from rubikpow.actions import moves_to_wire
from rubikpow.client import RubikPowClient
from rubikpow.config import load_config
from rubikpow.scramble import generate_scramble
from rubikpow.server import RubikPowHTTPServer
from rubikpow.verify import solution_from_scramble

HEADER = b"mock_block_header"


def http_json(method: str, url: str, payload: dict | None = None):
    data = None
    headers = {}
    if payload is not None:
        data = json.dumps(payload).encode("utf-8")
        headers["Content-Type"] = "application/json"
    req = request.Request(url=url, method=method, data=data, headers=headers)
    with request.urlopen(req, timeout=2.0) as resp:
        body = resp.read().decode("utf-8")
        return resp.status, json.loads(body)


class TestAPI(unittest.TestCase):
    def setUp(self):
        cfg = load_config()
        cfg["engine"]["max_size"] = 6
        self.server = RubikPowHTTPServer(host="127.0.0.1", port=0, config=cfg)
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.thread.start()
        time.sleep(0.05)
        self.base = f"http://{self.server.host}:{self.server.port}"
        self.client = RubikPowClient(host=self.server.host, port=self.server.port, timeout=5.0)

    def tearDown(self):
        self.server.shutdown()
        self.thread.join(timeout=1.0)

    def _expect_status(self, method: str, path: str, payload: dict | None, code: int):
        data = None if payload is None else json.dumps(payload).encode("utf-8")
        req = request.Request(
            url=f"{self.base}{path}",
            method=method,
            data=data,
            headers={"Content-Type": "application/json"},
        )
        with self.assertRaises(error.HTTPError) as ctx:
            request.urlopen(req, timeout=2.0)
        self.assertEqual(ctx.exception.code, code)
        return json.loads(ctx.exception.read().decode("utf-8"))

    def test_health(self):
        status, out = http_json("GET", f"{self.base}/health")
        self.assertEqual(status, 200)
        self.assertTrue(out["ready"])
        self.assertEqual(out["max_size"], 6)

    def test_difficulty(self):
        self.assertEqual(self.client.difficulty(3), 43252003274489856000)
        status, out = http_json("GET", f"{self.base}/difficulty?size=2")
        self.assertEqual(status, 200)
        self.assertEqual(out["difficulty"], "3674160")
        self.assertTrue(out["enumerated"])

    def test_scramble_matches_library(self):
        moves = self.client.scramble(3, 12345, HEADER)
        self.assertEqual(moves, generate_scramble(12345, HEADER))
        status, out = http_json(
            "POST", f"{self.base}/scramble", {"size": 3, "nonce": 12345, "header_hex": HEADER.hex()}
        )
        self.assertEqual(status, 200)
        self.assertFalse(out["state"]["solved"])
        self.assertEqual(len(out["state"]["faces"]["U"]), 3)

    def test_verify_accepts_inverse_scramble(self):
        solution = solution_from_scramble(generate_scramble(77, HEADER))
        out = self.client.verify(4, 77, HEADER, solution)
        self.assertTrue(out["solved"])
        self.assertTrue(out["accepted"])

    def test_verify_rejects_bad_solution_and_target(self):
        out = self.client.verify(3, 77, HEADER, [])
        self.assertFalse(out["solved"])
        self.assertFalse(out["accepted"])

        solution = solution_from_scramble(generate_scramble(77, HEADER))
        out = self.client.verify(3, 77, HEADER, solution, target=-1)
        self.assertTrue(out["solved"])
        self.assertFalse(out["meets_target"])

    def test_verify_accepts_notation_strings(self):
        solution = [m.notation() for m in solution_from_scramble(generate_scramble(5, HEADER))]
        status, out = http_json(
            "POST",
            f"{self.base}/verify",
            {"size": 2, "nonce": 5, "header": "mock_block_header", "solution": solution},
        )
        self.assertEqual(status, 200)
        self.assertTrue(out["accepted"])

    def test_invalid_requests_return_400(self):
        base = {"size": 3, "nonce": 1, "header_hex": "00"}
        self._expect_status("POST", "/scramble", {**base, "size": 1}, 400)
        self._expect_status("POST", "/scramble", {**base, "size": 7}, 400)
        self._expect_status("POST", "/scramble", {**base, "nonce": -1}, 400)
        self._expect_status("POST", "/scramble", {**base, "header_hex": "zz"}, 400)
        self._expect_status("POST", "/scramble", {"size": 3}, 400)
        out = self._expect_status("POST", "/verify", {**base, "solution": [["R", 9]]}, 400)
        self.assertIn("multiplicity", out["error"])
        self._expect_status("POST", "/verify", {**base, "solution": moves_to_wire([]), "target": "x"}, 400)
        self._expect_status("GET", "/difficulty", None, 400)
        self._expect_status("GET", "/difficulty?size=abc", None, 400)

    def _post_with_content_length(self, value: str):
        conn = http.client.HTTPConnection(self.server.host, self.server.port, timeout=2.0)
        try:
            conn.putrequest("POST", "/verify")
            conn.putheader("Content-Type", "application/json")
            conn.putheader("Content-Length", value)
            conn.endheaders()
            resp = conn.getresponse()
            return resp.status, json.loads(resp.read().decode("utf-8"))
        finally:
            conn.close()

    def test_bad_content_length_returns_400(self):
        status, out = self._post_with_content_length("abc")
        self.assertEqual(status, 400)
        self.assertIn("Content-Length", out["error"])
        status, out = self._post_with_content_length("-1")
        self.assertEqual(status, 400)
        self.assertIn("negative", out["error"])

    def test_concurrent_verifications(self):
        results = {}

        def submit(nonce: int):
            solution = solution_from_scramble(generate_scramble(nonce, HEADER))
            results[nonce] = self.client.verify(4, nonce, HEADER, solution)

        threads = [threading.Thread(target=submit, args=(nonce,)) for nonce in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)
        self.assertEqual(sorted(results), list(range(6)))
        self.assertTrue(all(out["accepted"] for out in results.values()))

    def test_unknown_path_returns_404(self):
        self._expect_status("GET", "/nope", None, 404)
        self._expect_status("POST", "/nope", {}, 404)


if __name__ == "__main__":
    unittest.main()
