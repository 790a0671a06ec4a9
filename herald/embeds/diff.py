"""Field-by-field change detection for issue updates.

Linear's ``updatedFrom`` only carries the attributes that changed, so the
rules differ per attribute:

* status, title and labels are compared only when both sides carry a value;
* assignee, priority, project, cycle, estimate, description presence and
  lifecycle timestamps are compared only when ``updatedFrom`` carried the key
  (or its ``...Id`` variant); an explicit ``null`` prior renders as the
  placeholder, so ``Unassigned → Alice`` is reported.

Each change renders as ``Attribute: old → new``.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from herald.common.time import format_day
from herald.embeds.style import Placeholder, format_estimate, person, priority_name

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from herald.linear.models import IssueData, IssueSnapshot, LabelRef

__all__ = ["ARROW", "FieldChange", "diff_issue"]

ARROW = "→"

_PROVIDED = "Provided"
_EDITED = "Edited"

# Snake-case attribute, wire key, display name.
_LIFECYCLE_FIELDS: tuple[tuple[str, str, str], ...] = (
    ("started_at", "startedAt", "Started"),
    ("completed_at", "completedAt", "Completed"),
    ("canceled_at", "canceledAt", "Canceled"),
    ("due_date", "dueDate", "Due Date"),
    ("archived_at", "archivedAt", "Archived"),
)


@dc.dataclass(frozen=True, slots=True)
class FieldChange:
    """One changed attribute."""

    attribute: str
    old: str
    new: str

    def render(self) -> str:
        """Return the ``Attribute: old → new`` line."""
        return f"{self.attribute}: {self.old} {ARROW} {self.new}"


def _label_names(labels: cabc.Sequence[LabelRef]) -> frozenset[str]:
    return frozenset(label.name for label in labels if label.name)


def _render_labels(names: frozenset[str]) -> str:
    return ", ".join(sorted(names)) if names else str(Placeholder.NONE)


def _name_or(value: str | None, placeholder: Placeholder) -> str:
    return value or str(placeholder)


def _compare(
    changes: list[FieldChange], attribute: str, old: str, new: str
) -> None:
    if old != new:
        changes.append(FieldChange(attribute=attribute, old=old, new=new))


def _status_change(
    prior: IssueSnapshot, current: IssueData, changes: list[FieldChange]
) -> None:
    if prior.state is not None and current.state is not None:
        _compare(changes, "Status", prior.state.name, current.state.name)


def _title_change(
    prior: IssueSnapshot, current: IssueData, changes: list[FieldChange]
) -> None:
    if prior.title:
        _compare(changes, "Title", prior.title, current.title)


def _sent(prior_keys: frozenset[str], *wire_keys: str) -> bool:
    return not prior_keys.isdisjoint(wire_keys)


def _assignee_change(
    prior: IssueSnapshot,
    current: IssueData,
    prior_keys: frozenset[str],
    changes: list[FieldChange],
) -> None:
    if not _sent(prior_keys, "assignee", "assigneeId"):
        return
    _compare(
        changes,
        "Assignee",
        person(prior.assignee, Placeholder.UNASSIGNED),
        person(current.assignee, Placeholder.UNASSIGNED),
    )


def _reference_changes(
    prior: IssueSnapshot,
    current: IssueData,
    prior_keys: frozenset[str],
    changes: list[FieldChange],
) -> None:
    if _sent(prior_keys, "priority", "priorityLabel"):
        _compare(
            changes,
            "Priority",
            _name_or(priority_name(prior), Placeholder.NO_PRIORITY),
            _name_or(priority_name(current), Placeholder.NO_PRIORITY),
        )
    if _sent(prior_keys, "project", "projectId"):
        _compare(
            changes,
            "Project",
            _name_or(prior.project.name if prior.project else None, Placeholder.NONE),
            _name_or(
                current.project.name if current.project else None, Placeholder.NONE
            ),
        )
    if _sent(prior_keys, "cycle", "cycleId"):
        _compare(
            changes,
            "Cycle",
            prior.cycle.label if prior.cycle else str(Placeholder.NONE),
            current.cycle.label if current.cycle else str(Placeholder.NONE),
        )
    if _sent(prior_keys, "estimate"):
        _compare(
            changes,
            "Estimate",
            format_estimate(prior.estimate),
            format_estimate(current.estimate),
        )


def _label_change(
    prior: IssueSnapshot, current: IssueData, changes: list[FieldChange]
) -> None:
    if prior.labels is None or current.labels is None:
        return
    old = _label_names(prior.labels)
    new = _label_names(current.labels)
    if old != new:
        changes.append(
            FieldChange(
                attribute="Labels", old=_render_labels(old), new=_render_labels(new)
            )
        )


def _description_change(
    prior: IssueSnapshot, current: IssueData, changes: list[FieldChange]
) -> None:
    had = bool(prior.description)
    has = bool(current.description)
    if had and has:
        if prior.description != current.description:
            changes.append(FieldChange("Description", _PROVIDED, _EDITED))
        return
    _compare(
        changes,
        "Description",
        _PROVIDED if had else str(Placeholder.NONE),
        _PROVIDED if has else str(Placeholder.NONE),
    )


def _lifecycle_changes(
    prior: IssueSnapshot,
    current: IssueData,
    prior_keys: frozenset[str],
    changes: list[FieldChange],
) -> None:
    for attribute, wire_key, label in _LIFECYCLE_FIELDS:
        if wire_key not in prior_keys:
            continue
        _compare(
            changes,
            label,
            format_day(getattr(prior, attribute)) or str(Placeholder.NONE),
            format_day(getattr(current, attribute)) or str(Placeholder.NONE),
        )


def diff_issue(
    prior: IssueSnapshot,
    current: IssueData,
    prior_keys: frozenset[str] = frozenset(),
) -> list[FieldChange]:
    """Return the tracked attributes that differ between two issue states.

    Parameters
    ----------
    prior
        Issue state before the update (Linear's ``updatedFrom``).
    current
        Issue state after the update.
    prior_keys
        Wire keys present in ``updatedFrom``.

    Returns
    -------
    list[FieldChange]
        Changes in a fixed order: status, assignee, title, priority, project,
        cycle, estimate, labels, description, lifecycle timestamps.

    """
    changes: list[FieldChange] = []
    _status_change(prior, current, changes)
    _assignee_change(prior, current, prior_keys, changes)
    _title_change(prior, current, changes)
    _reference_changes(prior, current, prior_keys, changes)
    _label_change(prior, current, changes)
    if "description" in prior_keys:
        _description_change(prior, current, changes)
    _lifecycle_changes(prior, current, prior_keys, changes)
    return changes
