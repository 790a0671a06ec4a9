"""Decode raw Linear webhook bodies into :class:`EventEnvelope` values.

Decoding happens in two phases. The envelope is decoded first with ``data``
and ``updatedFrom`` left as plain mappings, because the schema of those
mappings depends on the envelope's ``type``. The mappings are then converted
into the matching entity model.
"""

from __future__ import annotations

import datetime as dt
import re
import typing as typ

import msgspec

from herald.linear.errors import PayloadValidationError, ValidationIssue
from herald.linear.models import (
    Action,
    ActorRef,
    CommentData,
    CommentSnapshot,
    EntityData,
    EntitySnapshot,
    EntityType,
    EventEnvelope,
    GenericEntity,
    IssueData,
    IssueSnapshot,
)

__all__ = ["decode_envelope", "validation_issue_from"]

_ROOT_PATH = "$"
_PATH_SUFFIX = re.compile(r"^(?P<reason>.*?) - at `(?P<path>\$[^`]*)`$", re.DOTALL)


class _WireEnvelope(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Envelope as sent, before entity-specific decoding."""

    action: Action
    type: str
    data: dict[str, typ.Any]
    created_at: dt.datetime
    actor: ActorRef | None = None
    url: str | None = None
    updated_from: dict[str, typ.Any] | None = None
    webhook_timestamp: int | None = None
    webhook_id: str | None = None
    organization_id: str | None = None


_ModelPair = tuple[type[msgspec.Struct], type[msgspec.Struct]]

# Current-state model first, prior-state snapshot model second.
_ENTITY_MODELS: dict[EntityType, _ModelPair] = {
    EntityType.ISSUE: (IssueData, IssueSnapshot),
    EntityType.COMMENT: (CommentData, CommentSnapshot),
}


def validation_issue_from(
    exc: msgspec.ValidationError, *, prefix: str = _ROOT_PATH
) -> ValidationIssue:
    """Turn a msgspec validation error into a :class:`ValidationIssue`.

    Parameters
    ----------
    exc
        Error raised by ``msgspec`` while decoding or converting.
    prefix
        Path of the value that was being decoded, prepended to msgspec's
        own root-relative path.

    Returns
    -------
    ValidationIssue
        Issue with a ``$``-rooted path and the reason text.

    """
    message = str(exc)
    match = _PATH_SUFFIX.match(message)
    if match is None:
        return ValidationIssue(path=prefix, reason=message)
    relative = match.group("path")[len(_ROOT_PATH) :]
    return ValidationIssue(path=f"{prefix}{relative}", reason=match.group("reason"))


def _convert_entity(
    data: dict[str, typ.Any],
    entity_type: EntityType,
    *,
    snapshot: bool,
    path: str,
) -> EntityData | EntitySnapshot:
    """Convert an entity mapping into its typed model."""
    models = _ENTITY_MODELS.get(entity_type)
    if models is None:
        return GenericEntity(fields=dict(data))

    model = models[1] if snapshot else models[0]
    try:
        return typ.cast("EntityData | EntitySnapshot", msgspec.convert(data, model))
    except msgspec.ValidationError as exc:
        raise PayloadValidationError.schema(
            [validation_issue_from(exc, prefix=path)]
        ) from exc


def decode_envelope(
    raw: bytes | str, *, signature_header: str | None = None
) -> EventEnvelope:
    """Decode a webhook body into an :class:`EventEnvelope`.

    Parameters
    ----------
    raw
        Raw request body.
    signature_header
        Signature header that accompanied the body, kept for diagnostics.

    Returns
    -------
    EventEnvelope
        Decoded envelope. ``prior`` is only populated for updates.

    Raises
    ------
    PayloadValidationError
        ``MALFORMED`` when the body is not JSON, ``SCHEMA`` when it does not
        match the envelope or entity schema.

    """
    try:
        wire = msgspec.json.decode(raw, type=_WireEnvelope)
    except msgspec.ValidationError as exc:
        raise PayloadValidationError.schema([validation_issue_from(exc)]) from exc
    except msgspec.DecodeError as exc:
        raise PayloadValidationError.malformed(str(exc)) from exc

    entity_type = EntityType.from_name(wire.type)
    entity = typ.cast(
        "EntityData",
        _convert_entity(wire.data, entity_type, snapshot=False, path="$.data"),
    )

    prior: EntitySnapshot | None = None
    prior_keys: frozenset[str] = frozenset()
    if wire.action is Action.UPDATE and wire.updated_from is not None:
        prior = typ.cast(
            "EntitySnapshot",
            _convert_entity(
                wire.updated_from, entity_type, snapshot=True, path="$.updatedFrom"
            ),
        )
        prior_keys = frozenset(wire.updated_from)

    return EventEnvelope(
        action=wire.action,
        entity_type=entity_type,
        type_name=wire.type,
        entity=entity,
        occurred_at=wire.created_at,
        prior=prior,
        source_url=wire.url,
        webhook_id=wire.webhook_id,
        webhook_timestamp=wire.webhook_timestamp,
        organization_id=wire.organization_id,
        actor=wire.actor,
        signature_header=signature_header,
        prior_keys=prior_keys,
    )
