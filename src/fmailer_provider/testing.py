"""Test scaffolding for provider development.

Provides :class:`FakeApiBuilder`, a fluent factory for an ``httpx.MockTransport``
that plays the FMailer API, plus the :class:`RecordedRequest` records it keeps
so tests can assert on call counts, order and payloads.

No network access is ever made; unmatched routes answer 404.
"""

from __future__ import annotations

import json as jsonlib
from dataclasses import dataclass, field
from typing import Any

import httpx

from .client import FMailerClient


@dataclass(frozen=True)
class RecordedRequest:
    """One request as seen by the fake API."""

    method: str
    path: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def json(self) -> Any:
        """Decoded JSON body, or ``None`` when there was no body."""
        return jsonlib.loads(self.body) if self.body else None


class FakeApiBuilder:
    """Fluent builder for a fake FMailer API.

    Usage::

        api = (
            FakeApiBuilder()
            .with_response("POST", "/api/domains/templates/", 200, json={...})
            .with_response("GET", "/api/domains/templates/u-1/", 200, json={...})
        )
        client = api.build_client()
        ...
        assert [r.method for r in api.requests] == ["POST", "GET"]

    Routes are matched on method and path plus query string. Registering the
    same route more than once queues the responses: each request consumes the
    next one and the last keeps answering.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], list[dict[str, Any]]] = {}
        self.requests: list[RecordedRequest] = []

    def _add(self, method: str, path: str, route: dict[str, Any]) -> "FakeApiBuilder":
        self._routes.setdefault((method.upper(), path), []).append(route)
        return self

    def with_response(
        self,
        method: str,
        path: str,
        status: int,
        json: Any = None,
        text: str | None = None,
    ) -> "FakeApiBuilder":
        """Answer ``method path`` with ``status`` and a JSON or text body.

        Args:
            method: HTTP method (case-insensitive).
            path: Path plus query string, e.g. ``/api/domains/templates/?page=2``.
            status: Status code to return.
            json: JSON-serialisable body; wins over ``text``.
            text: Raw body text.

        Returns:
            ``self`` for method chaining.
        """
        return self._add(method, path, {"type": "response", "status": status, "json": json, "text": text})

    def with_error(self, method: str, path: str, exc: Exception) -> "FakeApiBuilder":
        """Make ``method path`` raise ``exc`` (e.g. ``httpx.ConnectError``) instead of answering."""
        return self._add(method, path, {"type": "error", "exc": exc})

    def calls(self, method: str | None = None) -> list[RecordedRequest]:
        """Recorded requests, optionally filtered by method."""
        if method is None:
            return list(self.requests)
        return [r for r in self.requests if r.method == method.upper()]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.raw_path.decode("ascii")
        self.requests.append(
            RecordedRequest(
                method=request.method,
                path=path,
                headers=dict(request.headers),
                body=request.content,
            )
        )
        queue = self._routes.get((request.method, path))
        if not queue:
            return httpx.Response(404, json={"detail": "Not found."})
        route = queue.pop(0) if len(queue) > 1 else queue[0]
        if route["type"] == "error":
            raise route["exc"]
        if route["json"] is not None:
            return httpx.Response(route["status"], json=route["json"])
        return httpx.Response(route["status"], text=route["text"] or "")

    def build_transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def build_client(self, endpoint: str = "https://api.fmailer.test", token: str = "test-token") -> FMailerClient:
        """Build an :class:`FMailerClient` wired to this fake API."""
        http = httpx.Client(transport=self.build_transport())
        return FMailerClient(endpoint, token, http_client=http)
