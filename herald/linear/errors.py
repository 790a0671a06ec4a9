"""Exceptions raised while authenticating and decoding Linear webhooks."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class LinearWebhookError(Exception):
    """Base exception for inbound Linear webhook failures."""


class WebhookAuthenticationError(LinearWebhookError):
    """Raised when a webhook signature is missing, invalid, or stale."""

    @classmethod
    def missing_signature(cls) -> WebhookAuthenticationError:
        """Create error for a request without a signature header."""
        return cls("Missing Linear-Signature header")

    @classmethod
    def invalid_signature(cls) -> WebhookAuthenticationError:
        """Create error for a signature that failed verification."""
        return cls("Invalid webhook signature")


class ValidationErrorKind(enum.StrEnum):
    """Why a payload was rejected."""

    MALFORMED = "malformed"
    SCHEMA = "schema"


@dc.dataclass(frozen=True, slots=True)
class ValidationIssue:
    """One problem found in a webhook payload.

    Attributes
    ----------
    path
        JSONPath-style location of the problem, e.g. ``$.data.title``.
    reason
        Human-readable explanation.

    """

    path: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        """Return a JSON-ready mapping."""
        return {"path": self.path, "reason": self.reason}


class PayloadValidationError(LinearWebhookError):
    """Raised when a webhook body is not valid JSON or fails the schema.

    Attributes
    ----------
    kind
        Whether the body failed to parse or failed structural validation.
    issues
        Path-to-problem list for operator diagnostics.

    """

    def __init__(
        self,
        message: str,
        *,
        kind: ValidationErrorKind,
        issues: cabc.Sequence[ValidationIssue] = (),
    ) -> None:
        """Initialise the error with its kind and issue list."""
        self.kind = kind
        self.issues = tuple(issues)
        super().__init__(message)

    @classmethod
    def malformed(cls, detail: str) -> PayloadValidationError:
        """Create error for a body that is not parseable JSON.

        Parameters
        ----------
        detail
            Parser message describing the failure.

        Returns
        -------
        PayloadValidationError
            Error of kind ``MALFORMED`` with a single root-level issue.

        """
        return cls(
            f"Webhook body is not valid JSON: {detail}",
            kind=ValidationErrorKind.MALFORMED,
            issues=(ValidationIssue(path="$", reason=detail),),
        )

    @classmethod
    def schema(
        cls, issues: cabc.Sequence[ValidationIssue]
    ) -> PayloadValidationError:
        """Create error for a body that does not match the envelope schema.

        Parameters
        ----------
        issues
            Problems found during validation.

        Returns
        -------
        PayloadValidationError
            Error of kind ``SCHEMA`` summarising the first issue.

        """
        summary = "; ".join(f"{issue.path}: {issue.reason}" for issue in issues)
        return cls(
            f"Webhook payload failed validation: {summary}",
            kind=ValidationErrorKind.SCHEMA,
            issues=issues,
        )


__all__ = [
    "LinearWebhookError",
    "PayloadValidationError",
    "ValidationErrorKind",
    "ValidationIssue",
    "WebhookAuthenticationError",
]
