"""Custom exceptions for the FMailer provider.

Every failure the client or the reconciler can hit is one of these. None of
them is retried at this layer; the lifecycle functions turn them into error
diagnostics for the host.
"""

import json
from typing import Any


class FMailerError(Exception):
    """Base exception class for the FMailer provider."""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# Transport Exceptions
class FMailerTransportError(FMailerError):
    """Raised when the request never produced an HTTP response."""

    def __init__(self, method: str, url: str, reason: str, details: dict[str, Any] | None = None):
        self.method = method
        self.url = url
        super().__init__(
            message=f"{method} {url} failed: {reason}",
            error_code="TRANSPORT_ERROR",
            details=details or {"method": method, "url": url, "reason": reason},
        )


class FMailerTimeoutError(FMailerTransportError):
    """Raised when the request exceeded the client timeout."""

    def __init__(self, method: str, url: str, timeout: float):
        self.timeout = timeout
        super().__init__(
            method,
            url,
            f"timed out after {timeout:g}s",
            details={"method": method, "url": url, "timeout": timeout},
        )
        self.error_code = "TIMEOUT"


# Codec Exceptions
class FMailerEncodingError(FMailerError):
    """Raised when a request body cannot be serialised."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Failed to encode request body: {reason}",
            error_code="ENCODING_ERROR",
            details=details or {"reason": reason},
        )


class FMailerDecodingError(FMailerError):
    """Raised when a response body is not JSON or does not match the expected shape."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        self.url = url
        super().__init__(
            message=f"Failed to decode response from {url}: {reason}",
            error_code="DECODING_ERROR",
            status_code=status_code,
            details={"url": url, "reason": reason},
        )


# Status Exceptions
class UnexpectedStatusError(FMailerError):
    """Raised when a response status differs from the operation's success code.

    Attributes:
        status_code: int HTTP status actually returned
        expected: int success status for the operation
        url: str request URL
        body: str raw response text, or None when not captured

    ``show_body`` appends the raw body to the message (used by delete, where
    the API explains refusals in the body).
    """

    def __init__(
        self,
        status_code: int,
        url: str,
        expected: int,
        body: str | None = None,
        *,
        show_body: bool = False,
    ):
        self.url = str(url)
        self.expected = int(expected)
        self.body = body
        message = f"unexpected status code: {int(status_code)}"
        if show_body:
            message += f", body: {body}"
        super().__init__(
            message=message,
            error_code="UNEXPECTED_STATUS",
            status_code=int(status_code),
            details={"url": self.url, "expected": self.expected, "status_code": int(status_code)},
        )

    @property
    def error_category(self) -> str:
        """Semantic error category based on HTTP status code.

        Returns one of:
        - auth_error: 401 Unauthorized
        - forbidden: 403 Forbidden
        - not_found: 404 Not Found
        - gone: 410 Gone
        - rate_limited: 429 Too Many Requests
        - server_error: 5xx errors
        - client_error: everything else, including unexpected 2xx codes
        """
        status = self.status_code or 0
        if status == 401:
            return "auth_error"
        if status == 403:
            return "forbidden"
        if status == 404:
            return "not_found"
        if status == 410:
            return "gone"
        if status == 429:
            return "rate_limited"
        if status >= 500:
            return "server_error"
        return "client_error"

    @property
    def provider_message(self) -> str:
        """Best-effort extraction of the API's error message from the body."""
        if not self.body:
            return ""
        try:
            parsed = json.loads(self.body)
        except ValueError:
            return self.body[:500]
        if isinstance(parsed, dict):
            for key in ("detail", "message", "error", "non_field_errors"):
                val = parsed.get(key)
                if isinstance(val, str) and val:
                    return val
                if isinstance(val, list) and val:
                    return "; ".join(str(v) for v in val)
        return str(parsed)[:500]


# Precondition Exceptions
class MissingIdentityError(FMailerError):
    """Raised when an operation needs a resource uuid and none is set."""

    def __init__(self, operation: str):
        super().__init__(
            message=f"Cannot {operation} domain template: resource has no uuid",
            error_code="MISSING_IDENTITY",
            details={"operation": operation},
        )
