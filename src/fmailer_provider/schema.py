"""Schema descriptors for the provider block, resource and data source.

Each factory builds and returns a brand-new JSON Schema (draft 7) dict on
every call, so callers may mutate what they receive without affecting anyone
else. Provider-specific metadata rides on extension keywords that validators
ignore:

- ``readOnly``: computed by the remote API, never accepted from configuration
- ``x-force-new``: a change replaces the resource instead of updating it
- ``x-sensitive``: value must be redacted from host output
- ``x-env-default``: environment variable consulted when the value is unset
"""

from __future__ import annotations

import copy
from typing import Any

from jsonschema import Draft7Validator

from .core.config import DEFAULT_ENDPOINT
from .diagnostics import Diagnostic

SLUG_PATTERN = r"^[-a-zA-Z0-9_]+$"


def provider_schema() -> dict[str, Any]:
    """Schema for the provider configuration block.

    ``token`` is required, but may come from ``FMAILER_TOKEN``, so presence is
    checked when the provider is configured rather than here.
    """
    return {
        "type": "object",
        "properties": {
            "token": {
                "type": "string",
                "description": "Authentication token for the FMailer API",
                "x-sensitive": True,
                "x-env-default": "FMAILER_TOKEN",
            },
            "endpoint": {
                "type": "string",
                "description": "The FMailer API endpoint",
                "default": DEFAULT_ENDPOINT,
                "x-env-default": "FMAILER_ENDPOINT",
            },
        },
        "additionalProperties": False,
    }


def _lang_schema(*, computed: bool) -> dict[str, Any]:
    if computed:
        return {
            "type": "object",
            "properties": {
                "lang": {"type": "string", "readOnly": True},
                "subject": {"type": "string", "readOnly": True},
                "body": {"type": "string", "readOnly": True},
                "default": {"type": "boolean", "readOnly": True},
                "template": {"type": "integer", "readOnly": True},
            },
            "additionalProperties": False,
        }
    return {
        "type": "object",
        "properties": {
            "lang": {"type": "string", "description": "Language code, e.g. 'en'"},
            "subject": {"type": "string"},
            "body": {"type": "string"},
            "default": {"type": "boolean", "default": False},
            "template": {
                "type": "integer",
                "readOnly": True,
                "description": "Numeric id of the owning template",
            },
        },
        "required": ["lang", "subject", "body"],
        "additionalProperties": False,
    }


def domain_template_resource_schema() -> dict[str, Any]:
    """Schema for the ``fmailer_domain_template`` resource."""
    return {
        "type": "object",
        "properties": {
            "uuid": {"type": "string", "readOnly": True},
            "name": {"type": "string"},
            "slug": {
                "type": "string",
                "pattern": SLUG_PATTERN,
                "description": "must only contain alphanumeric characters, hyphens, and underscores",
            },
            "domain": {"type": "integer", "x-force-new": True},
            "allow_copy": {"type": "boolean", "default": True},
            "editable": {"type": "boolean", "default": True},
            "created_at": {"type": "string", "readOnly": True},
            "updated_at": {"type": "string", "readOnly": True},
            "langs": {
                "type": "array",
                "items": _lang_schema(computed=False),
                "description": "Whole collection; any change resubmits every entry",
            },
        },
        "required": ["name", "slug", "domain"],
        "additionalProperties": False,
    }


def domain_template_data_source_schema() -> dict[str, Any]:
    """Schema for the ``fmailer_domain_template`` data source."""
    return {
        "type": "object",
        "properties": {
            "uuid": {"type": "string"},
            "name": {"type": "string", "readOnly": True},
            "slug": {"type": "string", "readOnly": True},
            "domain": {"type": "integer", "readOnly": True},
            "allow_copy": {"type": "boolean", "readOnly": True},
            "editable": {"type": "boolean", "readOnly": True},
            "created_at": {"type": "string", "readOnly": True},
            "updated_at": {"type": "string", "readOnly": True},
            "langs": {"type": "array", "readOnly": True, "items": _lang_schema(computed=True)},
        },
        "required": ["uuid"],
        "additionalProperties": False,
    }


def force_new_attributes(schema: dict[str, Any]) -> list[str]:
    """Top-level attributes whose change forces replacement."""
    return [name for name, prop in schema.get("properties", {}).items() if prop.get("x-force-new")]


def _read_only_violations(schema: dict[str, Any], value: Any, path: str) -> list[Diagnostic]:
    diags: list[Diagnostic] = []
    if not isinstance(value, dict):
        return diags
    for name, prop in schema.get("properties", {}).items():
        if name not in value:
            continue
        attr = f"{path}.{name}" if path else name
        if prop.get("readOnly"):
            diags.append(
                Diagnostic.error(
                    f"Computed attribute '{attr}' cannot be set",
                    detail=f"'{attr}' is assigned by the FMailer API",
                    code="invalid_config",
                    attribute=attr,
                )
            )
            continue
        items = prop.get("items")
        if prop.get("type") == "array" and isinstance(items, dict) and isinstance(value[name], list):
            for i, item in enumerate(value[name]):
                diags.extend(_read_only_violations(items, item, f"{attr}.{i}"))
    return diags


def validate_config(schema: dict[str, Any], config: dict[str, Any]) -> list[Diagnostic]:
    """Validate user configuration against ``schema``.

    Returns one error diagnostic per violation, ordered by attribute path; an
    empty list means the configuration is valid.
    """
    # Hosts send null for unset optional attributes; treat those as absent
    config = {k: v for k, v in config.items() if v is not None}
    diags = _read_only_violations(schema, config, "")
    validator = Draft7Validator(schema)
    errors = sorted(validator.iter_errors(config), key=lambda e: [str(p) for p in e.absolute_path])
    for error in errors:
        path = [str(p) for p in error.absolute_path]
        if error.validator == "required" and "'" in error.message:
            # "'slug' is a required property" -> pin it to the missing attribute
            path.append(error.message.split("'")[1])
        attr = ".".join(path) or None
        diags.append(
            Diagnostic.error(
                f"Invalid value for '{attr}'" if attr else "Invalid configuration",
                detail=error.message,
                code="invalid_config",
                attribute=attr,
            )
        )
    return diags


def apply_defaults(schema: dict[str, Any], config: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``config`` with declared defaults filled in.

    Descends into arrays of objects so each ``langs`` entry gets its own
    defaults.
    """
    result = copy.deepcopy(config)
    for name, prop in schema.get("properties", {}).items():
        if prop.get("readOnly"):
            continue
        if name not in result or result[name] is None:
            if "default" in prop:
                result[name] = copy.deepcopy(prop["default"])
            continue
        items = prop.get("items")
        if prop.get("type") == "array" and isinstance(items, dict) and isinstance(result[name], list):
            result[name] = [apply_defaults(items, item) if isinstance(item, dict) else item for item in result[name]]
    return result
