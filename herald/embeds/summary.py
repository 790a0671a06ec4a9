"""One-line plain-text summaries placed in the message ``content``."""

from __future__ import annotations

import typing as typ

from herald.embeds.generic import entity_display_name
from herald.embeds.style import Placeholder, person, priority_name
from herald.linear.models import (
    Action,
    CommentData,
    EntityType,
    GenericEntity,
    IssueData,
)

if typ.TYPE_CHECKING:
    from herald.linear.models import EventEnvelope, UserRef

__all__ = ["summary_line"]

_VERBS = {
    Action.CREATE: "created",
    Action.UPDATE: "updated",
    Action.REMOVE: "deleted",
}


def _actor_name(envelope: EventEnvelope, *candidates: UserRef | None) -> str:
    """Return the first known name among ``candidates`` and the actor."""
    for user in candidates:
        if user is not None:
            return person(user)
    if envelope.actor is not None and envelope.actor.name:
        return envelope.actor.name
    return str(Placeholder.SOMEONE)


def _issue_summary(envelope: EventEnvelope, issue: IssueData) -> str:
    if envelope.action is Action.UPDATE:
        actor = _actor_name(envelope, issue.updater, issue.creator)
    else:
        actor = _actor_name(envelope, issue.creator, issue.updater)
    title = f"**{issue.title}**" if issue.title else "an issue"
    team = f" in **{issue.team.name}**" if issue.team else ""
    line = f"{actor} {_VERBS[envelope.action]} {title}{team}"
    if envelope.action is not Action.CREATE:
        return line

    priority = priority_name(issue)
    if priority:
        line = f"{line} with **{priority}** priority"
    if issue.assignee is not None:
        line = f"{line} and assigned to **{person(issue.assignee)}**"
    return line


def _comment_summary(envelope: EventEnvelope, comment: CommentData) -> str:
    actor = _actor_name(envelope, comment.user)
    issue = comment.issue
    if issue is not None and issue.title:
        where = f" on **{issue.title}**"
    elif comment.issue_id:
        where = f" on issue {comment.issue_id}"
    else:
        where = ""
    team = f" ({issue.team.name})" if issue is not None and issue.team else ""

    match envelope.action:
        case Action.CREATE:
            return f"{actor} added a comment{where}{team}"
        case Action.UPDATE:
            return f"{actor} edited their comment{where}{team}"
        case Action.REMOVE:
            return f"{actor}'s comment was deleted{where}{team}"


def _generic_summary(envelope: EventEnvelope, entity: GenericEntity) -> str:
    name = entity_display_name(envelope.type_name, entity)
    verb = _VERBS[envelope.action]
    actor = envelope.actor.name if envelope.actor is not None else None

    match envelope.entity_type, envelope.action:
        case (EntityType.PROJECT | EntityType.TEAM, Action.CREATE):
            noun = envelope.type_name.lower()
            return f"{actor or Placeholder.SOMEONE} created {noun} **{name}**"
        case (EntityType.CYCLE | EntityType.ISSUE_LABEL, Action.CREATE):
            is_label = envelope.entity_type is EntityType.ISSUE_LABEL
            noun = "label" if is_label else "cycle"
            return f"New {noun} **{name}** was created"
        case _:
            by = f" by {actor}" if actor else ""
            return f"{envelope.type_name} **{name}** was {verb} in Linear{by}"


def summary_line(envelope: EventEnvelope) -> str:
    """Describe the event in one sentence.

    Names the acting user where the payload identifies one and falls back to
    ``someone`` otherwise.

    Parameters
    ----------
    envelope
        Decoded event.

    Returns
    -------
    str
        Summary sentence with Discord markdown emphasis.

    """
    match envelope.entity:
        case IssueData() as issue:
            return _issue_summary(envelope, issue)
        case CommentData() as comment:
            return _comment_summary(envelope, comment)
        case GenericEntity() as entity:
            return _generic_summary(envelope, entity)
        case _:
            typ.assert_never(envelope.entity)
