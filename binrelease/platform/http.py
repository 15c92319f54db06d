"""HTTP client abstraction for the run artifact service.

- HttpClient: Protocol (injectable for tests)
- RealHttpClient: urllib implementation
- MockHttpClient: canned responses, records calls
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from binrelease.core.result import Err, Ok, Result
from binrelease.core.structured import StrDict, as_str_dict

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    def post_json(
        self, url: str, payload: StrDict, *, headers: dict[str, str]
    ) -> Result[StrDict, HttpError]:
        """POST a JSON body and parse a JSON object response."""
        ...

    def put_file(self, url: str, path: Path, *, headers: dict[str, str]) -> Result[None, HttpError]:
        """PUT the raw bytes of `path`."""
        ...


class RealHttpClient:
    """HTTP client using urllib with system certificates."""

    def __init__(self, timeout: float = 60.0, user_agent: str = "binrelease") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _send(self, req: urllib.request.Request) -> Result[bytes, HttpError]:
        url = req.full_url
        try:
            with urllib.request.urlopen(
                req, timeout=self.timeout, context=self._ssl_context
            ) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def post_json(
        self, url: str, payload: StrDict, *, headers: dict[str, str]
    ) -> Result[StrDict, HttpError]:
        req = urllib.request.Request(
            url,
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={
                "User-Agent": self.user_agent,
                "Content-Type": "application/json",
                "Accept": "application/json",
                **headers,
            },
        )
        result = self._send(req)
        if isinstance(result, Err):
            return result

        try:
            data_obj: object = json.loads(result.value.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))

        data = as_str_dict(data_obj)
        if data is None:
            return Err(HttpError(url=url, status=0, message="Expected JSON object"))
        return Ok(data)

    def put_file(self, url: str, path: Path, *, headers: dict[str, str]) -> Result[None, HttpError]:
        try:
            body = path.read_bytes()
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=f"cannot read {path}: {e}"))

        req = urllib.request.Request(
            url,
            data=body,
            method="PUT",
            headers={"User-Agent": self.user_agent, **headers},
        )
        result = self._send(req)
        if isinstance(result, Err):
            return result
        return Ok(None)


class MockHttpClient:
    """Mock HTTP client for testing.

    Usage:
        client = MockHttpClient()
        client.set_json("https://results/CreateArtifact", {"ok": True})
    """

    def __init__(self) -> None:
        self._json_responses: dict[str, StrDict | HttpError] = {}
        self._put_responses: dict[str, HttpError] = {}
        self.calls: list[tuple[str, str, object]] = []

    def set_json(self, url: str, response: StrDict | HttpError) -> None:
        self._json_responses[url] = response

    def fail_put(self, url: str, error: HttpError) -> None:
        self._put_responses[url] = error

    def post_json(
        self, url: str, payload: StrDict, *, headers: dict[str, str]
    ) -> Result[StrDict, HttpError]:
        self.calls.append(("post_json", url, payload))
        if url not in self._json_responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        response = self._json_responses[url]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def put_file(self, url: str, path: Path, *, headers: dict[str, str]) -> Result[None, HttpError]:
        self.calls.append(("put_file", url, path.name))
        if url in self._put_responses:
            return Err(self._put_responses[url])
        return Ok(None)
