"""Inbound side of the relay: Linear webhook authentication and decoding.

Public API
----------
SignatureVerifier
    Verifies ``Linear-Signature`` headers with replay protection.
decode_envelope
    Decodes a raw webhook body into an :class:`EventEnvelope`.
EventEnvelope
    Immutable decoded event.
PayloadValidationError
    Raised for malformed or schema-violating bodies.
WebhookAuthenticationError
    Raised for missing, invalid, or stale signatures.
"""

from __future__ import annotations

from herald.linear.decoder import decode_envelope
from herald.linear.errors import (
    LinearWebhookError,
    PayloadValidationError,
    ValidationErrorKind,
    ValidationIssue,
    WebhookAuthenticationError,
)
from herald.linear.models import (
    Action,
    CommentData,
    EntityType,
    EventEnvelope,
    GenericEntity,
    IssueData,
)
from herald.linear.signature import (
    SIGNATURE_HEADER,
    SignatureVerifier,
    parse_signature_header,
    sign_payload,
    verify_signature,
)

__all__ = [
    "SIGNATURE_HEADER",
    "Action",
    "CommentData",
    "EntityType",
    "EventEnvelope",
    "GenericEntity",
    "IssueData",
    "LinearWebhookError",
    "PayloadValidationError",
    "SignatureVerifier",
    "ValidationErrorKind",
    "ValidationIssue",
    "WebhookAuthenticationError",
    "decode_envelope",
    "parse_signature_header",
    "sign_payload",
    "verify_signature",
]
