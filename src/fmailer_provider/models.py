"""Wire models for the FMailer domain templates API.

Field names match the API's JSON keys one to one. Remote-assigned fields
(``id``, ``uuid``, timestamps) are optional so the same model carries both
request payloads and server representations.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DomainTemplateLang(BaseModel):
    """One localized subject/body variant of a template."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    uuid: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    subject: str
    body: str
    lang: str
    default: bool = False
    # Back-reference to the owning template's numeric id; set by the provider
    template: int | None = None


class DomainTemplate(BaseModel):
    """An email template owned by a domain."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    uuid: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    name: str
    slug: str
    allow_copy: bool = True
    editable: bool = True
    domain: int
    langs: list[DomainTemplateLang] | None = None

    def to_payload(self) -> dict[str, Any]:
        """Encode as a JSON-ready request body.

        Unset identity and timestamp fields are left out, as is ``langs`` when
        it was never set. An empty ``langs`` list is sent as ``[]`` so a full
        replacement can clear the collection.
        """
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_payload(cls, payload: Any) -> "DomainTemplate":
        """Decode a server representation; unknown keys are ignored."""
        return cls.model_validate(payload)


class PaginatedDomainTemplateList(BaseModel):
    """One page of the collection endpoint."""

    model_config = ConfigDict(extra="ignore")

    count: int
    next: str | None = None
    previous: str | None = None
    results: list[DomainTemplate] = Field(default_factory=list)


class DuplicateDomainTemplateRequest(BaseModel):
    """Body of the duplicate action."""

    name: str
    slug: str


def format_timestamp(value: datetime | None) -> str:
    """Format a timestamp as RFC 3339 text with second precision.

    Naive values are taken as UTC; ``None`` becomes an empty string.
    """
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    text = value.replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text
