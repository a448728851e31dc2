"""Provider entry points: configuration, client construction and registration.

The host calls :func:`configure` once with the provider block and passes the
returned client as ``meta`` to every lifecycle function it looks up in
:data:`RESOURCES` and :data:`DATA_SOURCES`.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from .base import DataSourceDefinition, ResourceDefinition
from .client import FMailerClient
from .core.config import ProviderConfig
from .core.logging import get_logger, setup_logging
from .data_sources.domain_template import DOMAIN_TEMPLATE_DATA_SOURCE
from .diagnostics import Diagnostic
from .resources.domain_template import DOMAIN_TEMPLATE_RESOURCE
from .schema import provider_schema, validate_config

logger = get_logger(__name__)

# Validation errors are located by env alias; report the attribute name
_ATTRIBUTE_BY_ENV = {"FMAILER_TOKEN": "token", "FMAILER_ENDPOINT": "endpoint"}

RESOURCES: dict[str, ResourceDefinition] = {
    DOMAIN_TEMPLATE_RESOURCE.type_name: DOMAIN_TEMPLATE_RESOURCE,
}

DATA_SOURCES: dict[str, DataSourceDefinition] = {
    DOMAIN_TEMPLATE_DATA_SOURCE.type_name: DOMAIN_TEMPLATE_DATA_SOURCE,
}


def configure(config: dict[str, Any] | None = None) -> tuple[FMailerClient | None, list[Diagnostic]]:
    """Build the shared API client from the provider block.

    Values given in ``config`` win; unset ones fall back to ``FMAILER_TOKEN``
    and ``FMAILER_ENDPOINT``. Returns ``(None, diagnostics)`` when the block is
    invalid or no token can be found.
    """
    setup_logging()
    config = config or {}
    if diags := validate_config(provider_schema(), config):
        return None, diags

    # Only explicit values, keyed by env alias so they override the environment;
    # passing None would mask the environment default
    explicit = {
        ProviderConfig.model_fields[k].alias or k: v for k, v in config.items() if v is not None
    }
    try:
        resolved = ProviderConfig(**explicit)
    except ValidationError as e:
        diags = []
        for err in e.errors():
            loc = [str(p) for p in err.get("loc", ())]
            attr = _ATTRIBUTE_BY_ENV.get(loc[0], loc[0]) if loc else None
            diags.append(
                Diagnostic.error(
                    f"Invalid value for '{attr}'" if attr else "Invalid provider configuration",
                    detail=err.get("msg", ""),
                    code="invalid_config",
                    attribute=attr,
                )
            )
        return None, diags

    if not resolved.token:
        return None, [
            Diagnostic.error(
                "Missing API token",
                detail="Set 'token' in the provider configuration or the FMAILER_TOKEN environment variable.",
                code="missing_token",
                attribute="token",
            )
        ]

    logger.info("Provider configured", extra={"endpoint": resolved.endpoint})
    return FMailerClient(resolved.endpoint, resolved.token), []


__all__ = ["DATA_SOURCES", "RESOURCES", "configure", "provider_schema"]
