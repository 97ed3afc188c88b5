"""HTTP client abstraction for the GitHub release API.

This module provides:
- HttpClient: Protocol for the two POST shapes the publisher needs
- RequestsHttpClient: Real implementation using requests
- MockHttpClient: Canned responses + call recording for tests

Any status code is returned as an HttpResponse; deciding what counts as
success is the caller's job. HttpError is reserved for requests that never
produced a response (DNS, refused connection, unreadable upload file).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

import requests

from greleaser.core.result import Err, Ok, Result

__all__ = [
    "HttpCall",
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RequestsHttpClient",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """Transport failure.

    Attributes:
        url: The URL that failed
        message: Human-readable error message
    """

    url: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} ({self.url})"


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Status and body of a completed request."""

    status: int
    text: str

    def json(self) -> object:
        """Decode the body.

        Raises:
            json.JSONDecodeError: If the body is not JSON.
        """
        return json.loads(self.text)


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations, injectable for tests."""

    def post_json(
        self, url: str, payload: dict[str, object], headers: dict[str, str]
    ) -> Result[HttpResponse, HttpError]:
        """POST a JSON document."""
        ...

    def post_file(
        self, url: str, path: Path, *, field_name: str, headers: dict[str, str]
    ) -> Result[HttpResponse, HttpError]:
        """POST a file as the single part of a multipart/form-data body."""
        ...


class RequestsHttpClient:
    """HTTP client using a requests Session.

    No timeout and no retry: a request blocks until the server answers or
    the connection fails.
    """

    def __init__(self, session: requests.Session | None = None) -> None:
        self._session = session or requests.Session()

    def post_json(
        self, url: str, payload: dict[str, object], headers: dict[str, str]
    ) -> Result[HttpResponse, HttpError]:
        try:
            resp = self._session.post(url, data=json.dumps(payload), headers=headers)
        except requests.RequestException as e:
            return Err(HttpError(url=url, message=str(e)))
        return Ok(HttpResponse(status=resp.status_code, text=resp.text))

    def post_file(
        self, url: str, path: Path, *, field_name: str, headers: dict[str, str]
    ) -> Result[HttpResponse, HttpError]:
        try:
            with path.open("rb") as fh:
                # requests sets the multipart Content-Type (with boundary) itself.
                resp = self._session.post(
                    url, headers=headers, files={field_name: (path.name, fh)}
                )
        except OSError as e:
            return Err(HttpError(url=url, message=f"cannot read {path}: {e}"))
        except requests.RequestException as e:
            return Err(HttpError(url=url, message=str(e)))
        return Ok(HttpResponse(status=resp.status_code, text=resp.text))


@dataclass(frozen=True, slots=True)
class HttpCall:
    """A request recorded by MockHttpClient."""

    method: str
    url: str
    headers: dict[str, str]
    payload: dict[str, object] | None = None
    file_name: str | None = None
    file_field: str | None = None
    file_content: bytes | None = None


def _empty_responses() -> dict[str, HttpResponse | HttpError]:
    return {}


def _empty_calls() -> list[HttpCall]:
    return []


@dataclass
class MockHttpClient:
    """Mock HTTP client for testing.

    Usage:
        client = MockHttpClient()
        client.set_response(
            "https://api.github.com/repos/o/r/releases",
            HttpResponse(201, '{"upload_url": "https://x/upload{?name}"}'),
        )
    """

    responses: dict[str, HttpResponse | HttpError] = field(default_factory=_empty_responses)
    calls: list[HttpCall] = field(default_factory=_empty_calls)

    def set_response(self, url: str, response: HttpResponse | HttpError) -> None:
        self.responses[url] = response

    def post_json(
        self, url: str, payload: dict[str, object], headers: dict[str, str]
    ) -> Result[HttpResponse, HttpError]:
        self.calls.append(HttpCall(method="POST", url=url, headers=dict(headers), payload=payload))
        return self._respond(url)

    def post_file(
        self, url: str, path: Path, *, field_name: str, headers: dict[str, str]
    ) -> Result[HttpResponse, HttpError]:
        try:
            content = path.read_bytes()
        except OSError as e:
            return Err(HttpError(url=url, message=f"cannot read {path}: {e}"))
        self.calls.append(
            HttpCall(
                method="POST",
                url=url,
                headers=dict(headers),
                file_name=path.name,
                file_field=field_name,
                file_content=content,
            )
        )
        return self._respond(url)

    def _respond(self, url: str) -> Result[HttpResponse, HttpError]:
        response = self.responses.get(url)
        if response is None:
            return Ok(HttpResponse(status=404, text='{"message": "Not Found (mock)"}'))
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)
