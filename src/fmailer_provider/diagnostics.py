"""Diagnostics returned to the host by lifecycle and lookup functions.

Every host-facing function returns ``list[Diagnostic]``; an empty list means
success. Typical usage::

    return []
    return [Diagnostic.error("Invalid slug", attribute="slug")]
    return from_exception(exc)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .core.exceptions import FMailerError, UnexpectedStatusError


class Severity(str, Enum):
    error = "error"
    warning = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """One host-visible message, optionally pinned to an attribute path."""

    severity: Severity
    summary: str
    detail: str = ""
    code: str = "provider_error"
    attribute: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def error(
        cls,
        summary: str,
        detail: str = "",
        code: str = "provider_error",
        attribute: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> "Diagnostic":
        return cls(Severity.error, summary, detail, code, attribute, details or {})

    @classmethod
    def warning(cls, summary: str, detail: str = "", attribute: str | None = None) -> "Diagnostic":
        return cls(Severity.warning, summary, detail, "provider_warning", attribute)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "severity": self.severity.value,
            "summary": self.summary,
            "detail": self.detail,
            "code": self.code,
        }
        if self.attribute is not None:
            d["attribute"] = self.attribute
        if self.details:
            d["details"] = self.details
        return d


def has_errors(diags: list[Diagnostic]) -> bool:
    """True when any diagnostic in ``diags`` is an error."""
    return any(d.severity is Severity.error for d in diags)


def from_exception(exc: Exception) -> list[Diagnostic]:
    """Map a failure into a single error diagnostic.

    Status errors are coded by their semantic category (``not_found``,
    ``auth_error``, ...); other provider errors by their error code; anything
    else is reported as-is.
    """
    if isinstance(exc, UnexpectedStatusError):
        detail = exc.provider_message or exc.message
        return [
            Diagnostic.error(
                exc.message,
                detail=detail,
                code=exc.error_category,
                details=dict(exc.details),
            )
        ]
    if isinstance(exc, FMailerError):
        return [
            Diagnostic.error(
                exc.message,
                code=exc.error_code.lower(),
                details=dict(exc.details),
            )
        ]
    return [Diagnostic.error(str(exc) or type(exc).__name__, code="provider_error")]
