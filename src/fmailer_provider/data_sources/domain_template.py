"""``fmailer_domain_template`` data source: look up an existing template by uuid."""

from __future__ import annotations

from typing import Any

import structlog

from ..base import DataSourceDefinition
from ..core.exceptions import FMailerError
from ..diagnostics import Diagnostic, from_exception
from ..mapping import template_to_state
from ..schema import domain_template_data_source_schema, validate_config
from ..state import ResourceData

logger = structlog.get_logger(__name__)

TYPE_NAME = "fmailer_domain_template"


def read(d: ResourceData, meta: Any) -> list[Diagnostic]:
    """Fill state from the template whose uuid is configured."""
    uuid = d.get("uuid")
    if diags := validate_config(domain_template_data_source_schema(), {"uuid": uuid}):
        return diags

    try:
        template = meta.get_domain_template(uuid)
    except FMailerError as exc:
        logger.warning("domain template lookup failed", uuid=uuid, error=exc.message)
        return from_exception(exc)

    d.set_id(template.uuid or uuid)
    for key, value in template_to_state(template).items():
        d.set(key, value)
    logger.debug("domain template looked up", uuid=uuid, langs=len(template.langs or []))
    return []


DOMAIN_TEMPLATE_DATA_SOURCE = DataSourceDefinition(
    type_name=TYPE_NAME,
    schema=domain_template_data_source_schema,
    read=read,
)
