"""HTTP client abstraction for remote release APIs.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from relkit.core.result import Err, Ok, Result
from relkit.core.structured import as_str_dict, get_str

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
        status: HTTP status code (0 for network errors and timeouts)
        message: Human-readable error message
        retryable: False when the failure is local (bad payload, unreadable
            file) and repeating the request cannot help
    """

    url: str
    status: int
    message: str
    retryable: bool = True

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations used by API clients."""

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: object | None = None,
    ) -> Result[object, HttpError]:
        """Send ``body`` as JSON and parse the JSON response (None when empty)."""
        ...

    def upload(
        self,
        url: str,
        path: Path,
        *,
        headers: Mapping[str, str] | None = None,
        content_type: str = "application/octet-stream",
    ) -> Result[object, HttpError]:
        """POST the raw bytes of ``path`` and parse the JSON response."""
        ...


def _error_message(raw: bytes, fallback: str) -> str:
    # GitHub and most JSON APIs put the reason in a top-level "message".
    try:
        data = as_str_dict(json.loads(raw.decode("utf-8")))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return fallback
    if data is None:
        return fallback
    return get_str(data, "message") or fallback


class RealHttpClient:
    """Real HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - Optional HTTP(S) proxy
    - JSON request/response bodies
    - Timeout handling
    """

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = "relkit",
        proxy: str | None = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        handlers: list[urllib.request.BaseHandler] = [
            urllib.request.HTTPSHandler(context=ssl.create_default_context())
        ]
        if proxy:
            handlers.append(urllib.request.ProxyHandler({"http": proxy, "https": proxy}))
        self._opener = urllib.request.build_opener(*handlers)

    def _request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None,
        data: bytes | None,
    ) -> Result[bytes, HttpError]:
        all_headers = {"User-Agent": self.user_agent, **(headers or {})}
        try:
            req = urllib.request.Request(url, data=data, headers=all_headers, method=method)
            with self._opener.open(req, timeout=self.timeout) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=_error_message(e.read(), e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e), retryable=False))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def _parse(self, url: str, raw: bytes) -> Result[object, HttpError]:
        if not raw.strip():
            return Ok(None)
        try:
            data: object = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}", retryable=False))
        return Ok(data)

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: object | None = None,
    ) -> Result[object, HttpError]:
        data = None
        all_headers = {"Accept": "application/json", **(headers or {})}
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            all_headers["Content-Type"] = "application/json"

        result = self._request(method, url, all_headers, data)
        if isinstance(result, Err):
            return result
        return self._parse(url, result.value)

    def upload(
        self,
        url: str,
        path: Path,
        *,
        headers: Mapping[str, str] | None = None,
        content_type: str = "application/octet-stream",
    ) -> Result[object, HttpError]:
        try:
            data = path.read_bytes()
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=f"cannot read {path}: {e}", retryable=False))

        all_headers = {
            "Accept": "application/json",
            **(headers or {}),
            "Content-Type": content_type,
            "Content-Length": str(len(data)),
        }
        result = self._request("POST", url, all_headers, data)
        if isinstance(result, Err):
            return result
        return self._parse(url, result.value)


@dataclass(frozen=True, slots=True)
class HttpCall:
    """A request recorded by MockHttpClient."""

    method: str
    url: str
    body: object | None = None


def _empty_calls() -> list[HttpCall]:
    return []


@dataclass
class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are keyed by ``(method, url)``. A list of responses is consumed
    in order, the last one repeating; unknown routes answer 404.

    Usage:
        client = MockHttpClient()
        client.set("GET", "https://api.github.com/user", {"login": "john"})
        result = client.request_json("GET", "https://api.github.com/user")
        assert result == Ok({"login": "john"})
    """

    calls: list[HttpCall] = field(default_factory=_empty_calls)
    _routes: dict[tuple[str, str], list[object | HttpError]] = field(default_factory=dict)

    def set(self, method: str, url: str, *responses: object | HttpError) -> None:
        self._routes[(method.upper(), url)] = list(responses)

    def _respond(self, method: str, url: str) -> Result[object, HttpError]:
        queue = self._routes.get((method.upper(), url))
        if not queue:
            return Err(HttpError(url=url, status=404, message="Not Found"))
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: object | None = None,
    ) -> Result[object, HttpError]:
        self.calls.append(HttpCall(method.upper(), url, body))
        return self._respond(method, url)

    def upload(
        self,
        url: str,
        path: Path,
        *,
        headers: Mapping[str, str] | None = None,
        content_type: str = "application/octet-stream",
    ) -> Result[object, HttpError]:
        self.calls.append(HttpCall("POST", url, path.name))
        return self._respond("POST", url)

    def count(self, method: str, url: str) -> int:
        return sum(1 for c in self.calls if c.method == method.upper() and c.url == url)
