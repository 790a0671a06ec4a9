"""Colours, placeholders and small rendering helpers shared by embed builders."""

from __future__ import annotations

import datetime as dt
import enum
import typing as typ

from herald.common.time import parse_iso_timestamp
from herald.embeds.models import EmbedAuthor, EmbedFooter
from herald.linear.models import Action, PriorityRef

if typ.TYPE_CHECKING:
    from herald.linear.models import ActorRef, IssueData, IssueSnapshot, UserRef

__all__ = [
    "ELLIPSIS",
    "LINEAR_BASE_URL",
    "LINEAR_LOGO_URL",
    "EmbedColor",
    "Placeholder",
    "action_color",
    "author_block",
    "clip",
    "format_estimate",
    "format_moment",
    "issue_reference",
    "linear_footer",
    "person",
    "priority_name",
]

LINEAR_BASE_URL = "https://linear.app"
LINEAR_LOGO_URL = "https://linear.app/static/linear-logo.png"
ELLIPSIS = "..."

# Linear's integer priority scale; 0 means "no priority".
_PRIORITY_NAMES = {1: "Urgent", 2: "High", 3: "Medium", 4: "Low"}


class EmbedColor(enum.IntEnum):
    """Embed colours keyed by what happened."""

    SUCCESS = 3066993
    WARNING = 16776960
    DANGER = 15158332
    NEUTRAL = 9807270


class Placeholder(enum.StrEnum):
    """Text shown in place of absent values."""

    UNKNOWN_TEAM = "Unknown Team"
    NO_STATUS = "No Status"
    NO_PRIORITY = "No Priority"
    UNASSIGNED = "Unassigned"
    UNKNOWN = "Unknown"
    NONE = "None"
    UNTITLED = "Untitled"
    NO_DESCRIPTION = "*No description provided*"
    NO_COMMENT = "*No comment content provided*"
    SOMEONE = "someone"


_ACTION_COLORS = {
    Action.CREATE: EmbedColor.SUCCESS,
    Action.UPDATE: EmbedColor.WARNING,
    Action.REMOVE: EmbedColor.DANGER,
}


def action_color(action: Action) -> int:
    """Return the embed colour for ``action``."""
    return int(_ACTION_COLORS.get(action, EmbedColor.NEUTRAL))


def clip(text: str, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}{ELLIPSIS}"


def person(
    user: UserRef | ActorRef | None, fallback: str = Placeholder.UNKNOWN
) -> str:
    """Return the best display name for ``user`` or ``fallback``."""
    if user is None:
        return str(fallback)
    display_name = getattr(user, "display_name", None)
    return display_name or user.name or str(fallback)


def priority_name(issue: IssueData | IssueSnapshot) -> str | None:
    """Return the issue's priority label, or ``None`` when it has none.

    Accepts both the object form and Linear's integer form, preferring
    ``priorityLabel`` for the latter.
    """
    match issue.priority:
        case PriorityRef(name=name):
            return name or None
        case int(level) if level > 0:
            return issue.priority_label or _PRIORITY_NAMES.get(level, str(level))
        case _:
            return None


def issue_reference(issue: IssueData | IssueSnapshot) -> str:
    """Return ``ENG-123``, ``#123`` or the raw id, whichever is available."""
    if issue.identifier:
        return issue.identifier
    if issue.number is not None:
        return f"#{issue.number}"
    return issue.id or str(Placeholder.UNKNOWN)


def format_estimate(estimate: float | None) -> str:
    """Render an estimate as ``3 pts``, or the ``None`` placeholder."""
    if estimate is None:
        return str(Placeholder.NONE)
    points = int(estimate) if float(estimate).is_integer() else estimate
    return f"{points} pts"


def format_moment(value: str | None, fallback: str = "just now") -> str:
    """Render an ISO timestamp as ``YYYY-MM-DD HH:MM UTC`` for footers."""
    parsed = parse_iso_timestamp(value)
    if parsed is None:
        return fallback
    return parsed.astimezone(dt.UTC).strftime("%Y-%m-%d %H:%M UTC")


def linear_footer(label: str, verb: str, moment: str | None) -> EmbedFooter:
    """Return a ``<label> • <verb> <when>`` footer with the Linear logo."""
    return EmbedFooter(
        text=f"{label} • {verb} {format_moment(moment)}",
        icon_url=LINEAR_LOGO_URL,
    )


def author_block(user: UserRef | None) -> EmbedAuthor | None:
    """Return an embed author line for ``user``, if known."""
    if user is None:
        return None
    return EmbedAuthor(name=person(user), url=user.url, icon_url=user.avatar_url)
