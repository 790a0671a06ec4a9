"""Embeds for Linear comment events."""

from __future__ import annotations

import typing as typ

from herald.embeds.models import Embed, EmbedField
from herald.embeds.style import (
    EmbedColor,
    Placeholder,
    author_block,
    clip,
    issue_reference,
    linear_footer,
    person,
    priority_name,
)

if typ.TYPE_CHECKING:
    from herald.linear.models import CommentData, EventEnvelope

__all__ = ["comment_created", "comment_removed", "comment_updated"]

_BODY_PREVIEW = 1500
_ISSUE_CONTEXT_PREVIEW = 200
_FOOTER_LABEL = "Linear Comment"


def _body(comment: CommentData) -> str:
    if not comment.body:
        return str(Placeholder.NO_COMMENT)
    return clip(comment.body, _BODY_PREVIEW)


def _issue_context(comment: CommentData) -> str:
    issue = comment.issue
    if issue is None or not issue.description:
        return ""
    preview = clip(issue.description, _ISSUE_CONTEXT_PREVIEW)
    return f"\n\n**Issue Context:**\n*{preview}*"


def _issue_title(comment: CommentData) -> str:
    if comment.issue is not None and comment.issue.title:
        return comment.issue.title
    if comment.issue_id:
        return f"Issue {comment.issue_id}"
    return str(Placeholder.UNKNOWN)


def _issue_id(comment: CommentData) -> str:
    if comment.issue is not None:
        reference = issue_reference(comment.issue)
        if reference != Placeholder.UNKNOWN:
            return reference
    return comment.issue_id or str(Placeholder.UNKNOWN)


def _team(comment: CommentData) -> str:
    issue = comment.issue
    if issue is not None and issue.team is not None:
        return issue.team.name
    return str(Placeholder.UNKNOWN_TEAM)


def _issue_fields(comment: CommentData) -> list[EmbedField]:
    """Issue context fields; each falls back to a placeholder."""
    issue = comment.issue
    status = issue.state.name if issue and issue.state else None
    assignee = issue.assignee if issue else None
    priority = priority_name(issue) if issue else None
    return [
        EmbedField(name="Team", value=_team(comment), inline=True),
        EmbedField(
            name="Issue Status",
            value=status or str(Placeholder.NO_STATUS),
            inline=True,
        ),
        EmbedField(
            name="Issue Assignee",
            value=person(assignee, Placeholder.UNASSIGNED),
            inline=True,
        ),
        EmbedField(
            name="Priority",
            value=priority or str(Placeholder.NO_PRIORITY),
            inline=True,
        ),
    ]


def comment_created(
    envelope: EventEnvelope, comment: CommentData, url: str
) -> Embed:
    """Build the embed for a new comment."""
    fields = [
        EmbedField(name="Comment By", value=person(comment.user), inline=True),
        EmbedField(name="Issue", value=_issue_title(comment), inline=True),
        EmbedField(name="Issue ID", value=_issue_id(comment), inline=True),
        *_issue_fields(comment),
    ]
    created = comment.created_at or envelope.occurred_at.isoformat()
    return Embed(
        title="New Comment Added",
        url=url,
        description=_body(comment) + _issue_context(comment),
        color=int(EmbedColor.SUCCESS),
        fields=tuple(fields),
        footer=linear_footer(_FOOTER_LABEL, "Posted", created),
        author=author_block(comment.user),
        timestamp=created,
    )


def comment_updated(
    envelope: EventEnvelope, comment: CommentData, url: str
) -> Embed:
    """Build the embed for an edited comment, showing the current body."""
    fields = [
        EmbedField(name="Comment By", value=person(comment.user), inline=True),
        EmbedField(name="Issue", value=_issue_title(comment), inline=True),
        EmbedField(
            name="Edit Status",
            value="Edited" if comment.edited or comment.edited_at else "Updated",
            inline=True,
        ),
        EmbedField(name="Issue ID", value=_issue_id(comment), inline=True),
        *_issue_fields(comment),
    ]
    updated = comment.updated_at or envelope.occurred_at.isoformat()
    return Embed(
        title="Comment Updated",
        url=url,
        description=(
            f"Comment has been edited.\n\n{_body(comment)}{_issue_context(comment)}"
        ),
        color=int(EmbedColor.WARNING),
        fields=tuple(fields),
        footer=linear_footer(_FOOTER_LABEL, "Updated", updated),
        author=author_block(comment.user),
        timestamp=updated,
    )


def comment_removed(
    envelope: EventEnvelope, comment: CommentData, url: str
) -> Embed:
    """Build the embed for a deleted comment."""
    description = (
        f"Comment by **{person(comment.user)}** has been removed from issue "
        f"**{_issue_title(comment)}** in team **{_team(comment)}**."
    )
    fields = [
        EmbedField(name="Comment By", value=person(comment.user), inline=True),
        EmbedField(name="Issue", value=_issue_title(comment), inline=True),
        EmbedField(name="Issue ID", value=_issue_id(comment), inline=True),
        EmbedField(name="Team", value=_team(comment), inline=True),
    ]
    removed = envelope.occurred_at.isoformat()
    return Embed(
        title="Comment Deleted",
        url=url,
        description=description,
        color=int(EmbedColor.DANGER),
        fields=tuple(fields),
        footer=linear_footer(_FOOTER_LABEL, "Deleted", removed),
        timestamp=removed,
    )
