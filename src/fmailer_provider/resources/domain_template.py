"""``fmailer_domain_template`` resource: create, read, update, delete, import.

Creation is two-phase. The create endpoint ignores nested ``langs``, so the
base record is POSTed first and, when langs are configured, the complete
collection is attached with a PUT. If the PUT fails the base record already
exists remotely without langs; the instance keeps its uuid so the next apply
can converge, and the failure is reported as an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from ..base import ResourceDefinition
from ..client import FMailerClient
from ..core.exceptions import FMailerDecodingError, FMailerError, MissingIdentityError
from ..diagnostics import Diagnostic, from_exception
from ..mapping import BASE_FIELDS, WATCHED_FIELDS, template_from_config, template_to_state, with_langs
from ..models import DomainTemplate
from ..schema import domain_template_resource_schema, validate_config
from ..state import ResourceData

logger = structlog.get_logger(__name__)

TYPE_NAME = "fmailer_domain_template"


@dataclass(frozen=True)
class CreateOutcome:
    """Result of the two create phases.

    Attributes:
        created:     Server representation returned by the POST.
        attached:    Server representation returned by the langs PUT, or
                     ``None`` when no langs were configured or the PUT failed.
        langs_error: Failure of the PUT; when set, the remote record exists
                     without its langs.
    """

    created: DomainTemplate
    attached: DomainTemplate | None = None
    langs_error: FMailerError | None = None

    @property
    def partial(self) -> bool:
        return self.langs_error is not None


def create_with_langs(client: FMailerClient, config: dict[str, Any]) -> CreateOutcome:
    """Run both create phases against the API.

    Raises whatever the POST raises. A failure of the langs PUT is captured in
    the outcome instead, because by then the record has an identity the caller
    must keep.
    """
    created = client.create_domain_template(template_from_config(config))
    if not created.uuid:
        raise FMailerDecodingError(client.endpoint, "create response carries no uuid")

    raw_langs = config.get("langs") or []
    if not raw_langs:
        return CreateOutcome(created=created)

    try:
        attached = client.update_domain_template(created.uuid, with_langs(created, raw_langs))
    except FMailerError as exc:
        return CreateOutcome(created=created, langs_error=exc)
    return CreateOutcome(created=created, attached=attached)


def _desired_config(d: ResourceData) -> dict[str, Any]:
    config = {key: d.get(key) for key in BASE_FIELDS}
    # langs is a whole collection: absent from configuration means none
    config["langs"] = [{k: v for k, v in item.items() if k != "template"} for item in d.get("langs") or []]
    return config


def _write_state(d: ResourceData, template: DomainTemplate) -> list[Diagnostic]:
    diags: list[Diagnostic] = []
    values = template_to_state(template)
    if "langs" not in values and d.get("langs"):
        # An empty remote collection never overwrites local langs
        logger.warning("domain template has no langs remotely; keeping local langs", uuid=template.uuid)
        diags.append(
            Diagnostic.warning(
                "Remote template has no langs",
                detail=(
                    f"Domain template {template.uuid} returned an empty langs collection; "
                    "the langs recorded in state were left unchanged and may have drifted."
                ),
                attribute="langs",
            )
        )
    for key, value in values.items():
        d.set(key, value)
    return diags


def read(d: ResourceData, meta: Any) -> list[Diagnostic]:
    """Refresh state from the API by the instance uuid."""
    uuid = d.id
    if not uuid:
        return from_exception(MissingIdentityError("read"))
    try:
        template = meta.get_domain_template(uuid)
    except FMailerError as exc:
        logger.warning("domain template read failed", uuid=uuid, error=exc.message)
        return from_exception(exc)
    return _write_state(d, template)


def create(d: ResourceData, meta: Any) -> list[Diagnostic]:
    """Create the template, attach its langs, then refresh state."""
    config = _desired_config(d)
    if diags := validate_config(domain_template_resource_schema(), config):
        return diags

    log = logger.bind(slug=config["slug"], domain=config["domain"])
    try:
        outcome = create_with_langs(meta, config)
    except FMailerError as exc:
        log.warning("domain template create failed", phase="create", error=exc.message)
        return from_exception(exc)

    d.set_id(outcome.created.uuid or "")
    log = log.bind(uuid=outcome.created.uuid)
    if outcome.partial:
        log.error("domain template created without langs", phase="attach_langs", error=outcome.langs_error.message)
        diags = from_exception(outcome.langs_error)
        diags.append(
            Diagnostic.warning(
                "Domain template was created without its langs",
                detail=(
                    f"Template {outcome.created.uuid} exists remotely but attaching langs failed; "
                    "the next apply will retry the update."
                ),
                attribute="langs",
            )
        )
        return diags

    log.info("domain template created", langs=len(config.get("langs") or []))
    return read(d, meta)


def update(d: ResourceData, meta: Any) -> list[Diagnostic]:
    """PUT the full template when a watched attribute changed.

    ``domain`` is not watched: changing it replaces the resource. With nothing
    watched changed there is no network call at all.
    """
    uuid = d.id
    if not uuid:
        return from_exception(MissingIdentityError("update"))

    config = _desired_config(d)
    if diags := validate_config(domain_template_resource_schema(), config):
        return diags

    changed = [key for key in WATCHED_FIELDS if d.has_change(key)]
    if not changed:
        logger.debug("domain template unchanged; skipping update", uuid=uuid)
        return []

    try:
        meta.update_domain_template(uuid, template_from_config(config, include_langs=True))
    except FMailerError as exc:
        logger.warning("domain template update failed", uuid=uuid, changed=changed, error=exc.message)
        return from_exception(exc)

    logger.info("domain template updated", uuid=uuid, changed=changed)
    return read(d, meta)


def delete(d: ResourceData, meta: Any) -> list[Diagnostic]:
    """Delete the template and clear the instance identity."""
    uuid = d.id
    if not uuid:
        return from_exception(MissingIdentityError("delete"))
    try:
        meta.delete_domain_template(uuid)
    except FMailerError as exc:
        logger.warning("domain template delete failed", uuid=uuid, error=exc.message)
        return from_exception(exc)
    d.set_id("")
    logger.info("domain template deleted", uuid=uuid)
    return []


def import_state(d: ResourceData, meta: Any) -> list[Diagnostic]:
    """Adopt an existing template: the imported id is its uuid.

    The host follows up with ``read``; this only checks an id was given.
    """
    if not d.id:
        return [Diagnostic.error("Import requires the template uuid", code="invalid_import")]
    d.set("uuid", d.id)
    return []


DOMAIN_TEMPLATE_RESOURCE = ResourceDefinition(
    type_name=TYPE_NAME,
    schema=domain_template_resource_schema,
    create=create,
    read=read,
    update=update,
    delete=delete,
    importer=import_state,
)
