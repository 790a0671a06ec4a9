"""Embeds for Linear issue events."""

from __future__ import annotations

import typing as typ

from herald.common.time import format_day
from herald.embeds.diff import diff_issue
from herald.embeds.models import Embed, EmbedField
from herald.embeds.style import (
    EmbedColor,
    Placeholder,
    author_block,
    clip,
    format_estimate,
    issue_reference,
    linear_footer,
    person,
    priority_name,
)
from herald.linear.models import IssueSnapshot

if typ.TYPE_CHECKING:
    from herald.linear.models import EventEnvelope, IssueData

__all__ = ["issue_created", "issue_removed", "issue_updated"]

_DESCRIPTION_PREVIEW = 300
_FOOTER_LABEL = "Linear Issue Tracker"


def _team(issue: IssueData) -> str:
    return issue.team.name if issue.team else str(Placeholder.UNKNOWN_TEAM)


def _status(issue: IssueData, placeholder: Placeholder) -> str:
    return issue.state.name if issue.state else str(placeholder)


def _priority(issue: IssueData) -> str:
    return priority_name(issue) or str(Placeholder.NO_PRIORITY)


def _context_lines(issue: IssueData) -> list[str]:
    """Project, cycle, labels, estimate and due date, where set."""
    lines: list[str] = []
    if issue.project is not None:
        lines.append(f"**Project:** {issue.project.name}")
    if issue.cycle is not None:
        lines.append(f"**Cycle:** {issue.cycle.label}")
    if issue.labels:
        names = ", ".join(label.name for label in issue.labels if label.name)
        if names:
            lines.append(f"**Labels:** {names}")
    if issue.estimate:
        lines.append(f"**Estimate:** {format_estimate(issue.estimate)}")
    if issue.due_date:
        lines.append(f"**Due:** {format_day(issue.due_date)}")
    if issue.customer_ticket_count:
        lines.append(f"**Customer Requests:** {issue.customer_ticket_count}")
    return lines


def _cycle_timeline(issue: IssueData) -> EmbedField | None:
    cycle = issue.cycle
    if cycle is None or not (cycle.starts_at or cycle.ends_at):
        return None
    parts: list[str] = []
    if cycle.starts_at:
        parts.append(f"Starts: {format_day(cycle.starts_at)}")
    if cycle.ends_at:
        parts.append(f"Ends: {format_day(cycle.ends_at)}")
    return EmbedField(name="Cycle Timeline", value=" • ".join(parts))


def issue_created(envelope: EventEnvelope, issue: IssueData, url: str) -> Embed:
    """Build the embed for a newly created issue.

    The description previews the issue text followed by any planning
    context. Every reference field falls back to a placeholder.
    """
    description = (
        clip(issue.description, _DESCRIPTION_PREVIEW)
        if issue.description
        else str(Placeholder.NO_DESCRIPTION)
    )
    context = _context_lines(issue)
    if context:
        description = f"{description}\n\n" + "\n".join(context)

    fields = [
        EmbedField(name="Team", value=_team(issue), inline=True),
        EmbedField(
            name="Status", value=_status(issue, Placeholder.NO_STATUS), inline=True
        ),
        EmbedField(name="Priority", value=_priority(issue), inline=True),
        EmbedField(
            name="Assignee",
            value=person(issue.assignee, Placeholder.UNASSIGNED),
            inline=True,
        ),
        EmbedField(name="Created By", value=person(issue.creator), inline=True),
        EmbedField(name="Issue ID", value=issue_reference(issue), inline=True),
    ]
    timeline = _cycle_timeline(issue)
    if timeline is not None:
        fields.append(timeline)

    created = issue.created_at or envelope.occurred_at.isoformat()
    return Embed(
        title=f"Issue Created: {issue.title}",
        url=url,
        description=description,
        color=int(EmbedColor.SUCCESS),
        fields=tuple(fields),
        footer=linear_footer(_FOOTER_LABEL, "Created", created),
        author=author_block(issue.creator),
        timestamp=created,
    )


def issue_updated(envelope: EventEnvelope, issue: IssueData, url: str) -> Embed:
    """Build the embed for an issue update.

    The description lists one ``Attribute: old → new`` line per changed
    attribute, or a single generic line when nothing tracked changed.
    """
    prior = envelope.prior if isinstance(envelope.prior, IssueSnapshot) else None
    changes = (
        diff_issue(prior, issue, envelope.prior_keys) if prior is not None else []
    )
    description = (
        "\n".join(change.render() for change in changes)
        if changes
        else "Issue details updated."
    )

    fields = [
        EmbedField(name="Team", value=_team(issue), inline=True),
        EmbedField(
            name="Status", value=_status(issue, Placeholder.NO_STATUS), inline=True
        ),
        EmbedField(
            name="Assignee",
            value=person(issue.assignee, Placeholder.UNASSIGNED),
            inline=True,
        ),
        EmbedField(name="Priority", value=_priority(issue), inline=True),
        EmbedField(name="Updated By", value=person(issue.updater), inline=True),
        EmbedField(name="Issue ID", value=issue_reference(issue), inline=True),
    ]
    if issue.project is not None:
        fields.append(EmbedField(name="Project", value=issue.project.name, inline=True))
    if issue.cycle is not None:
        fields.append(EmbedField(name="Cycle", value=issue.cycle.label, inline=True))
    if issue.estimate:
        fields.append(
            EmbedField(
                name="Estimate", value=format_estimate(issue.estimate), inline=True
            )
        )

    updated = issue.updated_at or envelope.occurred_at.isoformat()
    return Embed(
        title=f"Issue Updated: {issue.title}",
        url=url,
        description=description,
        color=int(EmbedColor.WARNING),
        fields=tuple(fields),
        footer=linear_footer(_FOOTER_LABEL, "Updated", updated),
        author=author_block(issue.updater),
        timestamp=updated,
    )


def issue_removed(envelope: EventEnvelope, issue: IssueData, url: str) -> Embed:
    """Build the embed for a deleted issue; no diff is computed."""
    reference = issue_reference(issue)
    description = (
        f"The issue **{issue.title}** (`{reference}`) from team "
        f"**{_team(issue)}** has been deleted."
    )
    fields = [
        EmbedField(name="Team", value=_team(issue), inline=True),
        EmbedField(
            name="Last Status", value=_status(issue, Placeholder.UNKNOWN), inline=True
        ),
        EmbedField(
            name="Last Assignee",
            value=person(issue.assignee, Placeholder.UNASSIGNED),
            inline=True,
        ),
        EmbedField(name="Created By", value=person(issue.creator), inline=True),
        EmbedField(name="Priority", value=_priority(issue), inline=True),
        EmbedField(name="Issue ID", value=reference, inline=True),
    ]
    removed = envelope.occurred_at.isoformat()
    return Embed(
        title=f"Issue Deleted: {issue.title}",
        url=url,
        description=description,
        color=int(EmbedColor.DANGER),
        fields=tuple(fields),
        footer=linear_footer(_FOOTER_LABEL, "Deleted", removed),
        timestamp=removed,
    )
