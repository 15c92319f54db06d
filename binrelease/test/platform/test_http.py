"""Tests for binrelease.platform.http module."""

from __future__ import annotations

import json
import threading
from collections.abc import Iterator
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path

import pytest

from binrelease.core.result import Err, Ok
from binrelease.platform.http import HttpClient, HttpError, MockHttpClient, RealHttpClient


class _Handler(BaseHTTPRequestHandler):
    received: list[tuple[str, str, dict[str, str], bytes]] = []

    def log_message(self, format: str, *args: object) -> None:
        del format, args

    def _body(self) -> bytes:
        length = int(self.headers.get("Content-Length", "0"))
        return self.rfile.read(length)

    def _record(self, method: str, body: bytes) -> None:
        headers = {k.lower(): v for k, v in self.headers.items()}
        self.received.append((method, self.path, headers, body))

    def _reply(self, status: int, body: bytes) -> None:
        self.send_response(status)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_POST(self) -> None:
        body = self._body()
        self._record("POST", body)
        if self.path == "/broken":
            self._reply(200, b"not json")
        elif self.path == "/list":
            self._reply(200, b"[1, 2]")
        elif self.path == "/denied":
            self._reply(401, b"")
        else:
            self._reply(200, json.dumps({"ok": True, "echo": json.loads(body)}).encode())

    def do_PUT(self) -> None:
        body = self._body()
        self._record("PUT", body)
        self._reply(201, b"")


@pytest.fixture
def server(monkeypatch: pytest.MonkeyPatch) -> Iterator[str]:
    for var in ("http_proxy", "HTTP_PROXY", "all_proxy", "ALL_PROXY"):
        monkeypatch.delenv(var, raising=False)
    _Handler.received = []
    httpd = HTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{httpd.server_address[1]}"
    finally:
        httpd.shutdown()
        httpd.server_close()


class TestRealHttpClient:
    def test_post_json(self, server: str) -> None:
        client = RealHttpClient(timeout=5)
        result = client.post_json(
            f"{server}/twirp/Create", {"name": "a.tgz"}, headers={"Authorization": "Bearer t"}
        )
        assert result == Ok({"ok": True, "echo": {"name": "a.tgz"}})
        _, _, headers, _ = _Handler.received[0]
        assert headers["authorization"] == "Bearer t"
        assert headers["content-type"] == "application/json"

    def test_post_json_http_error(self, server: str) -> None:
        result = RealHttpClient(timeout=5).post_json(f"{server}/denied", {}, headers={})
        assert isinstance(result, Err)
        assert result.error.status == 401

    def test_post_json_rejects_non_object(self, server: str) -> None:
        client = RealHttpClient(timeout=5)
        assert isinstance(client.post_json(f"{server}/broken", {}, headers={}), Err)
        assert isinstance(client.post_json(f"{server}/list", {}, headers={}), Err)

    def test_put_file(self, server: str, tmp_path: Path) -> None:
        path = tmp_path / "a.zip"
        path.write_bytes(b"zipdata")
        result = RealHttpClient(timeout=5).put_file(
            f"{server}/blob?sig=1", path, headers={"x-ms-blob-type": "BlockBlob"}
        )
        assert result == Ok(None)
        method, url, headers, body = _Handler.received[0]
        assert (method, url, body) == ("PUT", "/blob?sig=1", b"zipdata")
        assert headers["x-ms-blob-type"] == "BlockBlob"

    def test_put_missing_file(self, tmp_path: Path) -> None:
        result = RealHttpClient().put_file("http://127.0.0.1:9/x", tmp_path / "nope", headers={})
        assert isinstance(result, Err)
        assert result.error.status == 0

    def test_connection_refused(self, server: str) -> None:
        del server
        result = RealHttpClient(timeout=2).post_json("http://127.0.0.1:9/x", {}, headers={})
        assert isinstance(result, Err)
        assert result.error.status == 0


class TestMockHttpClient:
    def test_unset_url_is_404(self) -> None:
        result = MockHttpClient().post_json("https://x", {}, headers={})
        assert isinstance(result, Err)
        assert result.error.status == 404

    def test_canned_responses(self, tmp_path: Path) -> None:
        client = MockHttpClient()
        client.set_json("https://x/a", {"ok": True})
        client.set_json("https://x/b", HttpError(url="https://x/b", status=500, message="boom"))
        client.fail_put("https://blob", HttpError(url="https://blob", status=403, message="no"))

        assert client.post_json("https://x/a", {"n": 1}, headers={}) == Ok({"ok": True})
        assert isinstance(client.post_json("https://x/b", {}, headers={}), Err)
        assert isinstance(client.put_file("https://blob", tmp_path / "f", headers={}), Err)
        assert client.calls[0] == ("post_json", "https://x/a", {"n": 1})
        assert client.calls[2] == ("put_file", "https://blob", "f")

    def test_satisfies_protocol(self) -> None:
        assert isinstance(MockHttpClient(), HttpClient)
        assert isinstance(RealHttpClient(), HttpClient)


def test_http_error_str() -> None:
    assert str(HttpError(url="u", status=404, message="Not Found")) == "HTTP 404: Not Found (u)"
    assert str(HttpError(url="u", status=0, message="refused")) == "refused (u)"
