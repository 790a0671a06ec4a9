"""Unit tests for generic embeds, summary lines and deep links."""

from __future__ import annotations

import pytest

from herald.embeds.links import fallback_url, resolve_url
from herald.embeds.style import ELLIPSIS, EmbedColor
from herald.embeds.summary import summary_line
from herald.embeds.transformer import build_embed
from herald.linear.decoder import decode_envelope
from herald.linear.models import EventEnvelope
from tests.helpers.linear_payloads import (
    comment_payload,
    encode,
    generic_payload,
    issue_payload,
    issue_update_payload,
)


def _envelope(payload: dict[str, object]) -> EventEnvelope:
    return decode_envelope(encode(payload))


class TestGenericEmbed:
    """Tests for entity types without a dedicated builder."""

    def test_project_created(self) -> None:
        """Titles read ``{Type} {Action}d`` with Name and Type fields."""
        embed = build_embed(_envelope(generic_payload("Project", name="Auth revamp")))

        assert embed.title == "Project Created", "wrong title"
        assert embed.color == EmbedColor.SUCCESS, "create should be green"
        assert embed.description == "Project was created in Linear.", (
            "expected fallback description"
        )
        assert embed.field_value("Name") == "Auth revamp", "wrong name"
        assert embed.field_value("Type") == "Project", "wrong type"

    def test_unknown_type_keeps_wire_name(self) -> None:
        """Entities Linear adds later still render with their own name."""
        envelope = _envelope(generic_payload("Initiative2", "remove"))
        embed = build_embed(envelope)

        assert embed.title == "Initiative2 Removed", "wire type should be kept"
        assert embed.color == EmbedColor.DANGER, "remove should be red"
        assert embed.field_value("Name") == "Initiative2 initiative2-0001", (
            "nameless entities fall back to type and id"
        )

    def test_description_is_used_when_present(self) -> None:
        """An entity description replaces the fallback sentence."""
        payload = generic_payload(
            "Document", "update", title="Runbook", description="v2"
        )
        embed = build_embed(_envelope(payload))
        assert embed.description == "v2", "entity description expected"
        assert embed.field_value("Name") == "Runbook", "title should act as name"

    def test_long_description_is_clipped_with_ellipsis(self) -> None:
        """Long descriptions are cut at 2000 characters and marked."""
        payload = generic_payload("Document", description="x" * 2500)
        embed = build_embed(_envelope(payload))
        assert embed.description == "x" * 2000 + ELLIPSIS, "expected a marked cut"


class TestSummaryLine:
    """Tests for the one-line message content."""

    def test_issue_create_with_priority_and_assignee(self) -> None:
        """Issue creation names the creator, team, priority and assignee."""
        payload = issue_payload(
            team={"name": "Platform"},
            priority=2,
            assignee={"name": "bob", "displayName": "Bob"},
            creator={"name": "alice", "displayName": "Alice"},
        )
        assert summary_line(_envelope(payload)) == (
            "Alice created **Fix login bug** in **Platform** with **High** "
            "priority and assigned to **Bob**"
        ), "unexpected issue summary"

    def test_issue_without_actor_uses_someone(self) -> None:
        """Unknown actors render as ``someone``."""
        assert summary_line(_envelope(issue_payload())) == (
            "someone created **Fix login bug**"
        ), "expected anonymous summary"

    def test_issue_update_prefers_updater(self) -> None:
        """Updates credit the updater over the creator."""
        payload = issue_update_payload(
            current={
                "creator": {"name": "alice"},
                "updater": {"name": "carol"},
                "state": {"name": "Done"},
            },
            prior={"state": {"name": "Todo"}},
        )
        assert summary_line(_envelope(payload)) == "carol updated **Fix login bug**", (
            "updater should be credited"
        )

    def test_envelope_actor_is_a_fallback(self) -> None:
        """The webhook actor names the user when the entity does not."""
        payload = issue_payload("remove")
        payload["actor"] = {"id": "user-1", "name": "Dana"}
        assert summary_line(_envelope(payload)) == "Dana deleted **Fix login bug**", (
            "actor should be used"
        )

    @pytest.mark.parametrize(
        ("action", "expected"),
        [
            ("create", "Alice added a comment on **Fix login bug** (Platform)"),
            ("update", "Alice edited their comment on **Fix login bug** (Platform)"),
            (
                "remove",
                "Alice's comment was deleted on **Fix login bug** (Platform)",
            ),
        ],
    )
    def test_comment_summaries(self, action: str, expected: str) -> None:
        """Comment summaries name the commenter, issue and team."""
        assert summary_line(_envelope(comment_payload(action))) == expected, (
            f"unexpected summary for comment {action}"
        )

    @pytest.mark.parametrize(
        ("type_name", "action", "expected"),
        [
            ("Project", "create", "someone created project **Alpha**"),
            ("Team", "create", "someone created team **Alpha**"),
            ("Cycle", "create", "New cycle **Alpha** was created"),
            ("IssueLabel", "create", "New label **Alpha** was created"),
            ("Project", "update", "Project **Alpha** was updated in Linear"),
            ("Reaction", "remove", "Reaction **Alpha** was deleted in Linear"),
        ],
    )
    def test_generic_summaries(
        self, type_name: str, action: str, expected: str
    ) -> None:
        """Generic entities get templated sentences by type and action."""
        payload = generic_payload(type_name, action, name="Alpha")
        assert summary_line(_envelope(payload)) == expected, "unexpected summary"

    def test_generic_summary_names_actor(self) -> None:
        """Generic sentences credit the actor when Linear names one."""
        payload = generic_payload("Document", "update", name="Runbook")
        payload["actor"] = {"name": "Erin"}
        assert summary_line(_envelope(payload)) == (
            "Document **Runbook** was updated in Linear by Erin"
        ), "actor should be credited"


class TestLinks:
    """Tests for URL resolution."""

    def test_source_url_wins(self) -> None:
        """The envelope URL is preferred over everything else."""
        payload = issue_payload(url="https://linear.app/acme/issue/ENG-123")
        payload["url"] = "https://linear.app/acme/issue/ENG-123#comment"
        assert resolve_url(_envelope(payload)) == (
            "https://linear.app/acme/issue/ENG-123#comment"
        ), "envelope URL should win"

    def test_entity_url_beats_fallback(self) -> None:
        """An entity's own URL is used before deriving one."""
        payload = issue_payload(url="https://linear.app/acme/issue/ENG-123")
        assert resolve_url(_envelope(payload)) == (
            "https://linear.app/acme/issue/ENG-123"
        ), "entity URL expected"

    @pytest.mark.parametrize(
        ("payload", "expected"),
        [
            (issue_payload(), "https://linear.app/issue/ENG-123"),
            (
                issue_payload(identifier=None),
                "https://linear.app/issue/9f1c2d3e-0000-4000-8000-000000000001",
            ),
            (generic_payload("Project"), "https://linear.app/project/project-0001"),
            (generic_payload("Team", key="PLA"), "https://linear.app/team/PLA"),
            (generic_payload("Cycle"), "https://linear.app/cycle/cycle-0001"),
            (generic_payload("Document"), "https://linear.app/document/document-0001"),
        ],
    )
    def test_fallback_urls(self, payload: dict[str, object], expected: str) -> None:
        """Derived URLs follow Linear's path conventions."""
        assert fallback_url(_envelope(payload)) == expected, "unexpected fallback URL"
