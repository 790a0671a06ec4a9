"""Typed models for Linear webhook envelopes.

Linear delivers every event as an envelope naming the ``action``, the entity
``type`` and the entity ``data``. Issues and comments get full schemas; every
other entity type decodes as a :class:`GenericEntity` holding an open mapping
so new Linear entity types never break the relay.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

import msgspec

if typ.TYPE_CHECKING:
    import datetime as dt

__all__ = [
    "Action",
    "ActorRef",
    "CommentData",
    "CommentSnapshot",
    "CycleRef",
    "EntityData",
    "EntitySnapshot",
    "EntityType",
    "EventEnvelope",
    "GenericEntity",
    "IssueData",
    "IssueSnapshot",
    "LabelRef",
    "PriorityRef",
    "ProjectRef",
    "StateRef",
    "TeamRef",
    "UserRef",
]


class Action(enum.StrEnum):
    """Lifecycle action carried by a webhook."""

    CREATE = "create"
    UPDATE = "update"
    REMOVE = "remove"

    @property
    def past_tense(self) -> str:
        """Return the capitalised past tense, e.g. ``Created``."""
        return f"{self.value.capitalize()}d"


class EntityType(enum.StrEnum):
    """Entity types Linear is known to send, plus an ``Other`` fallback."""

    ISSUE = "Issue"
    COMMENT = "Comment"
    PROJECT = "Project"
    CYCLE = "Cycle"
    USER = "User"
    TEAM = "Team"
    ISSUE_LABEL = "IssueLabel"
    REACTION = "Reaction"
    CUSTOM_VIEW = "CustomView"
    DOCUMENT = "Document"
    INITIATIVE = "Initiative"
    ROADMAP = "Roadmap"
    ATTACHMENT = "Attachment"
    OTHER = "Other"

    @classmethod
    def from_name(cls, name: str) -> EntityType:
        """Map a wire type name to a member, falling back to ``OTHER``."""
        try:
            return cls(name)
        except ValueError:
            return cls.OTHER


class _LinearStruct(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Base for wire structs: camelCase keys, unknown keys ignored."""


class UserRef(_LinearStruct):
    """A Linear user as embedded in issues and comments."""

    name: str
    id: str | None = None
    display_name: str | None = None
    email: str | None = None
    avatar_url: str | None = None
    url: str | None = None

    @property
    def label(self) -> str:
        """Preferred human-readable name."""
        return self.display_name or self.name


class ActorRef(_LinearStruct):
    """Whoever triggered the event; integrations may omit a name."""

    id: str | None = None
    name: str | None = None
    type: str | None = None
    url: str | None = None


class TeamRef(_LinearStruct):
    name: str
    id: str | None = None
    key: str | None = None
    description: str | None = None


class StateRef(_LinearStruct):
    name: str
    id: str | None = None
    color: str | None = None
    type: str | None = None


class PriorityRef(_LinearStruct):
    name: str
    priority: int | None = None


class LabelRef(_LinearStruct):
    name: str
    id: str | None = None
    color: str | None = None


class ProjectRef(_LinearStruct):
    name: str
    id: str | None = None
    description: str | None = None
    url: str | None = None
    state: str | None = None


class CycleRef(_LinearStruct):
    """A Linear cycle (sprint)."""

    name: str | None = None
    id: str | None = None
    number: int | None = None
    starts_at: str | None = None
    ends_at: str | None = None

    @property
    def label(self) -> str:
        """Cycle name, or ``Cycle <n>`` for unnamed cycles."""
        if self.name:
            return self.name
        if self.number is not None:
            return f"Cycle {self.number}"
        return "Unnamed cycle"


class _IssueAttributes(_LinearStruct, kw_only=True):
    """Issue attributes that are optional in both data and snapshots."""

    description: str | None = None
    state: StateRef | None = None
    assignee: UserRef | None = None
    creator: UserRef | None = None
    updater: UserRef | None = None
    team: TeamRef | None = None
    # Linear sends a 0-4 integer; older payloads carry an object.
    priority: PriorityRef | int | None = None
    priority_label: str | None = None
    project: ProjectRef | None = None
    cycle: CycleRef | None = None
    labels: tuple[LabelRef, ...] | None = None
    identifier: str | None = None
    number: int | None = None
    estimate: float | None = None
    url: str | None = None
    branch_name: str | None = None
    customer_ticket_count: int | None = None
    created_at: str | None = None
    updated_at: str | None = None
    archived_at: str | None = None
    started_at: str | None = None
    completed_at: str | None = None
    canceled_at: str | None = None
    due_date: str | None = None
    triaged_at: str | None = None
    auto_closed_at: str | None = None
    snoozed_until_at: str | None = None
    parent_id: str | None = None
    trashed: bool | None = None


class IssueData(_IssueAttributes, kw_only=True):
    """Current state of an issue."""

    id: str
    title: str


class IssueSnapshot(_IssueAttributes, kw_only=True):
    """Issue state as it was before an update; every field is optional."""

    id: str | None = None
    title: str | None = None


class _CommentAttributes(_LinearStruct, kw_only=True):
    user: UserRef | None = None
    issue: IssueSnapshot | None = None
    issue_id: str | None = None
    url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    edited_at: str | None = None
    edited: bool | None = None


class CommentData(_CommentAttributes, kw_only=True):
    """Current state of a comment."""

    id: str
    body: str


class CommentSnapshot(_CommentAttributes, kw_only=True):
    """Comment state as it was before an update."""

    id: str | None = None
    body: str | None = None


class GenericEntity(msgspec.Struct, frozen=True):
    """Any entity without a dedicated schema, kept as an open mapping."""

    fields: dict[str, typ.Any]

    def text(self, key: str) -> str | None:
        """Return ``fields[key]`` when it is a non-blank string."""
        value = self.fields.get(key)
        if isinstance(value, str) and value.strip():
            return value
        return None

    @property
    def id(self) -> str | None:
        """Entity identifier, if present."""
        return self.text("id")

    @property
    def name(self) -> str | None:
        """Best available display name."""
        return self.text("name") or self.text("title") or self.text("key")

    @property
    def description(self) -> str | None:
        """Entity description, if present."""
        return self.text("description")


type EntityData = IssueData | CommentData | GenericEntity
type EntitySnapshot = IssueSnapshot | CommentSnapshot | GenericEntity


@dc.dataclass(frozen=True, slots=True)
class EventEnvelope:
    """One decoded inbound event.

    Attributes
    ----------
    action
        Lifecycle action.
    entity_type
        Known entity type, ``EntityType.OTHER`` for unrecognised names.
    type_name
        Entity type exactly as sent, preserved for ``OTHER`` entities.
    entity
        Decoded entity payload.
    occurred_at
        When Linear recorded the event.
    prior
        Previous entity state, only ever set for updates.
    source_url
        Link supplied by Linear, if any.
    webhook_id
        Linear webhook identifier used as a delivery nonce.
    webhook_timestamp
        Linear's send time in Unix milliseconds.
    organization_id
        Linear workspace identifier.
    actor
        Who triggered the event.
    signature_header
        Raw signature header that accompanied the request.
    prior_keys
        Wire keys present in ``updatedFrom``; Linear only sends the keys
        whose values changed.

    """

    action: Action
    entity_type: EntityType
    type_name: str
    entity: EntityData
    occurred_at: dt.datetime
    prior: EntitySnapshot | None = None
    source_url: str | None = None
    webhook_id: str | None = None
    webhook_timestamp: int | None = None
    organization_id: str | None = None
    actor: ActorRef | None = None
    signature_header: str | None = None
    prior_keys: frozenset[str] = frozenset()
