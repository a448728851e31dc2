"""HTTP client for the FMailer domain templates API."""

from __future__ import annotations

import hashlib
import json
import urllib.parse
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from .core.exceptions import (
    FMailerDecodingError,
    FMailerEncodingError,
    FMailerTimeoutError,
    FMailerTransportError,
    UnexpectedStatusError,
)
from .core.logging import get_logger
from .models import DomainTemplate, DuplicateDomainTemplateRequest, PaginatedDomainTemplateList

logger = get_logger(__name__)

# One overall limit per request; not configurable per call
DEFAULT_TIMEOUT = 60.0

TEMPLATES_PATH = "/api/domains/templates/"


def _token_hash(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:10]


class FMailerClient:
    """Client for the ``/api/domains/templates/`` collection.

    Every public method performs exactly one HTTP round trip. Nothing is
    retried, batched or cached: a failure surfaces immediately as one of the
    ``fmailer_provider.core.exceptions`` types and retry policy belongs to the
    caller.

    The only state held between calls is the immutable endpoint/token pair and
    the underlying ``httpx.Client``, which is safe to share across threads.
    """

    def __init__(
        self,
        endpoint: str,
        token: str,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialise the client.

        Args:
            endpoint:    API base URL, e.g. ``https://api.fmailer.com``.
            token:       Value sent verbatim in the ``Authorization`` header.
            http_client: Optional pre-built ``httpx.Client`` (tests pass one
                         wrapping ``httpx.MockTransport``). When given, the
                         caller owns its lifetime.
        """
        self._endpoint = endpoint.rstrip("/")
        self._token = token
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=DEFAULT_TIMEOUT)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "FMailerClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def _collection_url(self) -> str:
        return f"{self._endpoint}{TEMPLATES_PATH}"

    def _item_url(self, uuid: str) -> str:
        return f"{self._endpoint}{TEMPLATES_PATH}{urllib.parse.quote(uuid, safe='')}/"

    @staticmethod
    def _encode(model: BaseModel) -> bytes:
        try:
            payload = model.to_payload() if isinstance(model, DomainTemplate) else model.model_dump(mode="json")
            return json.dumps(payload).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise FMailerEncodingError(str(e), details={"model": type(model).__name__}) from e

    def _send(self, method: str, url: str, body: bytes | None = None) -> httpx.Response:
        headers = {"Authorization": self._token}
        if body is not None:
            headers["Content-Type"] = "application/json"

        logger.info(
            "fmailer.http.request",
            extra={"method": method, "url": url, "auth_hash": _token_hash(self._token)},
        )
        try:
            resp = self._http.request(method, url, content=body, headers=headers, timeout=DEFAULT_TIMEOUT)
        except httpx.TimeoutException as e:
            raise FMailerTimeoutError(method, url, DEFAULT_TIMEOUT) from e
        except httpx.HTTPError as e:
            raise FMailerTransportError(method, url, str(e) or type(e).__name__) from e
        return resp

    def _expect(self, resp: httpx.Response, method: str, url: str, expected: int, show_body: bool = False) -> None:
        if resp.status_code == expected:
            return
        logger.warning(
            "fmailer.http.error",
            extra={"method": method, "url": url, "status": resp.status_code, "expected": expected},
        )
        raise UnexpectedStatusError(resp.status_code, url, expected, body=resp.text, show_body=show_body)

    @staticmethod
    def _decode(resp: httpx.Response, url: str, model: type[BaseModel]) -> Any:
        try:
            payload = resp.json()
        except ValueError as e:
            raise FMailerDecodingError(url, f"invalid JSON: {e}", status_code=resp.status_code) from e
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise FMailerDecodingError(url, f"unexpected shape: {e}", status_code=resp.status_code) from e

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create_domain_template(self, template: DomainTemplate) -> DomainTemplate:
        """POST a new template; the response carries ``id``, ``uuid`` and timestamps."""
        url = self._collection_url()
        resp = self._send("POST", url, self._encode(template))
        self._expect(resp, "POST", url, 200)
        return self._decode(resp, url, DomainTemplate)

    def get_domain_template(self, uuid: str) -> DomainTemplate:
        """GET one template by uuid."""
        url = self._item_url(uuid)
        resp = self._send("GET", url)
        self._expect(resp, "GET", url, 200)
        return self._decode(resp, url, DomainTemplate)

    def update_domain_template(self, uuid: str, template: DomainTemplate) -> DomainTemplate:
        """PUT a full replacement of the template, nested ``langs`` included."""
        url = self._item_url(uuid)
        resp = self._send("PUT", url, self._encode(template))
        self._expect(resp, "PUT", url, 200)
        return self._decode(resp, url, DomainTemplate)

    def delete_domain_template(self, uuid: str) -> None:
        """DELETE a template. Anything but 204 is an error that quotes the body."""
        url = self._item_url(uuid)
        resp = self._send("DELETE", url)
        self._expect(resp, "DELETE", url, 204, show_body=True)

    def list_domain_templates(
        self,
        domain: int | None = None,
        search: str | None = None,
        page: int | None = None,
        ordering: str | None = None,
    ) -> PaginatedDomainTemplateList:
        """GET one page of templates.

        Filters are independent; the ones given are appended in the fixed
        order ``domain``, ``search``, ``page``, ``ordering``.
        """
        params: list[tuple[str, Any]] = []
        if domain is not None:
            params.append(("domain", domain))
        if search is not None:
            params.append(("search", search))
        if page is not None:
            params.append(("page", page))
        if ordering is not None:
            params.append(("ordering", ordering))

        url = self._collection_url()
        if params:
            url += "?" + urllib.parse.urlencode(params)
        resp = self._send("GET", url)
        self._expect(resp, "GET", url, 200)
        return self._decode(resp, url, PaginatedDomainTemplateList)

    def duplicate_domain_template(self, uuid: str, name: str, slug: str) -> None:
        """Copy a template under a new name and slug; the API returns no payload we use."""
        url = f"{self._item_url(uuid)}duplicate/"
        body = self._encode(DuplicateDomainTemplateRequest(name=name, slug=slug))
        resp = self._send("POST", url, body)
        self._expect(resp, "POST", url, 200)
