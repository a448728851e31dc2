"""Pure conversions between host configuration/state dicts and wire models.

Nothing here touches the network or the host accessor, so the mapping rules
are testable on plain dicts.
"""

from __future__ import annotations

from typing import Any

from .models import DomainTemplate, DomainTemplateLang, format_timestamp

BASE_FIELDS = ("name", "slug", "domain", "allow_copy", "editable")

# Attributes whose change triggers an in-place update. ``domain`` is not here:
# changing it replaces the resource.
WATCHED_FIELDS = ("langs", "name", "slug", "allow_copy", "editable")


def langs_from_config(raw: list[dict[str, Any]] | None, template_id: int | None = None) -> list[DomainTemplateLang]:
    """Materialise configured ``langs`` entries, optionally stamping the owner id."""
    return [
        DomainTemplateLang(
            lang=item["lang"],
            subject=item["subject"],
            body=item["body"],
            default=bool(item.get("default", False)),
            template=template_id,
        )
        for item in raw or []
    ]


def template_from_config(config: dict[str, Any], *, include_langs: bool = False) -> DomainTemplate:
    """Build a request entity from configuration.

    ``langs`` is left unset unless ``include_langs`` is true, in which case the
    whole configured collection is attached (possibly empty).
    """
    template = DomainTemplate(
        name=config["name"],
        slug=config["slug"],
        domain=int(config["domain"]),
        allow_copy=bool(config.get("allow_copy", True)),
        editable=bool(config.get("editable", True)),
    )
    if include_langs:
        template.langs = langs_from_config(config.get("langs"))
    return template


def with_langs(created: DomainTemplate, raw_langs: list[dict[str, Any]]) -> DomainTemplate:
    """Second-phase create payload: the created record's base fields plus every lang.

    Each lang's ``template`` points at the created record's numeric id.
    """
    return DomainTemplate(
        name=created.name,
        slug=created.slug,
        domain=created.domain,
        allow_copy=created.allow_copy,
        editable=created.editable,
        langs=langs_from_config(raw_langs, template_id=created.id),
    )


def lang_to_state(lang: DomainTemplateLang) -> dict[str, Any]:
    return {
        "lang": lang.lang,
        "subject": lang.subject,
        "body": lang.body,
        "default": lang.default,
        "template": lang.template,
    }


def template_to_state(template: DomainTemplate) -> dict[str, Any]:
    """Flatten a server representation into host state attributes.

    ``langs`` is present only when the server returned a non-empty collection.
    """
    state: dict[str, Any] = {
        "uuid": template.uuid,
        "name": template.name,
        "slug": template.slug,
        "domain": template.domain,
        "allow_copy": template.allow_copy,
        "editable": template.editable,
        "created_at": format_timestamp(template.created_at),
        "updated_at": format_timestamp(template.updated_at),
    }
    if template.langs:
        state["langs"] = [lang_to_state(lang) for lang in template.langs]
    return state
