"""Deep links into Linear for events that arrive without a URL."""

from __future__ import annotations

import typing as typ

from herald.embeds.style import LINEAR_BASE_URL
from herald.linear.models import CommentData, EntityType, GenericEntity, IssueData

if typ.TYPE_CHECKING:
    from herald.linear.models import EventEnvelope

__all__ = ["fallback_url", "resolve_url"]

_UNKNOWN_ID = "unknown"


def fallback_url(envelope: EventEnvelope) -> str:
    """Derive a best-effort Linear URL from the entity's identifiers.

    Issues link by identifier, comments to their parent issue, teams by key,
    and everything else to ``/<type>/<id>``.
    """
    match envelope.entity:
        case IssueData(identifier=identifier, id=entity_id):
            return f"{LINEAR_BASE_URL}/issue/{identifier or entity_id}"
        case CommentData(issue=issue, issue_id=issue_id):
            if issue is not None and issue.url:
                return issue.url
            return f"{LINEAR_BASE_URL}/issue/{issue_id or _UNKNOWN_ID}"
        case GenericEntity() as entity:
            return _generic_url(envelope, entity)
        case _:
            typ.assert_never(envelope.entity)


def _generic_url(envelope: EventEnvelope, entity: GenericEntity) -> str:
    entity_id = entity.id or _UNKNOWN_ID
    match envelope.entity_type:
        case EntityType.PROJECT:
            return f"{LINEAR_BASE_URL}/project/{entity_id}"
        case EntityType.TEAM:
            return f"{LINEAR_BASE_URL}/team/{entity.text('key') or entity_id}"
        case EntityType.CYCLE:
            return f"{LINEAR_BASE_URL}/cycle/{entity_id}"
        case _:
            return f"{LINEAR_BASE_URL}/{envelope.type_name.lower()}/{entity_id}"


def resolve_url(envelope: EventEnvelope) -> str:
    """Return the envelope URL, the entity's own URL, or a derived link."""
    if envelope.source_url:
        return envelope.source_url
    match envelope.entity:
        case IssueData(url=str(url)) | CommentData(url=str(url)) if url:
            return url
        case GenericEntity() as entity if entity.text("url"):
            return typ.cast("str", entity.text("url"))
        case _:
            return fallback_url(envelope)
