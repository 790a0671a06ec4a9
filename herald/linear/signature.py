"""HMAC signature verification for inbound Linear webhooks.

Linear signs each delivery with a ``Linear-Signature`` header of the form
``t=<unix_ms>,v1=<hex_digest>``. The digest is HMAC-SHA256 over the exact
raw request bytes keyed by the shared webhook secret. The ``t`` component is
checked against a freshness window so a captured request cannot be replayed
indefinitely.

Usage
-----
Verify a request body with a configured verifier::

    verifier = SignatureVerifier("s3cret", time_window_s=60)
    verifier.require(raw_body, req.get_header(SIGNATURE_HEADER))

"""

from __future__ import annotations

import dataclasses as dc
import hashlib
import hmac
import time
import typing as typ

from herald.linear.errors import WebhookAuthenticationError
from herald.logging import get_logger, log_warning

if typ.TYPE_CHECKING:
    import collections.abc as cabc

__all__ = [
    "SIGNATURE_HEADER",
    "ParsedSignature",
    "SignatureVerifier",
    "compute_signature",
    "parse_signature_header",
    "sign_payload",
    "verify_signature",
]

logger = get_logger(__name__)

SIGNATURE_HEADER = "Linear-Signature"

_DEFAULT_TIME_WINDOW_S = 60.0
_MILLIS_PER_SECOND = 1000
_TIMESTAMP_KEY = "t"
_DIGEST_KEY = "v1"
_EXPECTED_PARTS = 2


@dc.dataclass(frozen=True, slots=True)
class ParsedSignature:
    """Components of a ``Linear-Signature`` header."""

    timestamp_ms: int
    digest: str


def parse_signature_header(header: str | None) -> ParsedSignature | None:
    """Split a signature header into its timestamp and digest.

    Parameters
    ----------
    header
        Raw header value, possibly ``None`` when the header was absent.

    Returns
    -------
    ParsedSignature | None
        Parsed components, or ``None`` when the header is missing or does not
        have exactly the ``t`` and ``v1`` fields with a numeric timestamp.

    """
    if not header:
        return None

    parts = header.split(",")
    if len(parts) != _EXPECTED_PARTS:
        return None

    fields: dict[str, str] = {}
    for part in parts:
        key, sep, value = part.strip().partition("=")
        if not sep or not value:
            return None
        fields[key.strip()] = value.strip()

    raw_timestamp = fields.get(_TIMESTAMP_KEY)
    digest = fields.get(_DIGEST_KEY)
    if raw_timestamp is None or digest is None:
        return None
    if not raw_timestamp.isascii() or not raw_timestamp.isdigit():
        return None

    return ParsedSignature(timestamp_ms=int(raw_timestamp), digest=digest.lower())


def compute_signature(raw_body: bytes, secret: str) -> str:
    """Return the hex HMAC-SHA256 digest of ``raw_body`` keyed by ``secret``."""
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def sign_payload(raw_body: bytes, secret: str, *, timestamp_ms: int) -> str:
    """Build a ``Linear-Signature`` header value for ``raw_body``.

    Parameters
    ----------
    raw_body
        Exact bytes that will be sent as the request body.
    secret
        Shared webhook secret.
    timestamp_ms
        Signing time in Unix milliseconds.

    Returns
    -------
    str
        Header value in ``t=<unix_ms>,v1=<hex_digest>`` form.

    """
    digest = compute_signature(raw_body, secret)
    return f"{_TIMESTAMP_KEY}={timestamp_ms},{_DIGEST_KEY}={digest}"


def verify_signature(  # noqa: PLR0913
    raw_body: bytes,
    signature_header: str | None,
    secret: str,
    claimed_timestamp_ms: int | None = None,
    *,
    time_window_s: float = _DEFAULT_TIME_WINDOW_S,
    now_ms: float | None = None,
) -> bool:
    """Check a webhook signature and its freshness.

    Parameters
    ----------
    raw_body
        Exact request bytes as received.
    signature_header
        Raw ``Linear-Signature`` header value.
    secret
        Shared webhook secret. An empty secret disables verification.
    claimed_timestamp_ms
        Timestamp asserted by the sender. Defaults to the header's ``t``.
    time_window_s
        Maximum tolerated distance between ``now`` and the claimed timestamp.
    now_ms
        Current time in Unix milliseconds; defaults to the wall clock.

    Returns
    -------
    bool
        ``True`` when the signature matches and is fresh, or when no secret
        is configured. Malformed headers yield ``False``.

    """
    if not secret:
        return True

    parsed = parse_signature_header(signature_header)
    if parsed is None:
        return False

    claimed = (
        parsed.timestamp_ms if claimed_timestamp_ms is None else claimed_timestamp_ms
    )
    current = time.time() * _MILLIS_PER_SECOND if now_ms is None else now_ms
    if abs(current - claimed) > time_window_s * _MILLIS_PER_SECOND:
        return False

    expected = compute_signature(raw_body, secret)
    # compare_digest on bytes tolerates non-ASCII input and length mismatch.
    return hmac.compare_digest(
        expected.encode("ascii"), parsed.digest.encode("utf-8")
    )


class SignatureVerifier:
    """Verify inbound webhook signatures with a fixed secret and window.

    When no secret is configured, or verification is switched off, every
    request is accepted and a warning is logged the first time that happens.
    The composition root creates one verifier per process.

    Parameters
    ----------
    secret
        Shared webhook secret; empty disables verification.
    enabled
        Administrative switch for verification.
    time_window_s
        Freshness window in seconds.
    clock
        Wall-clock source returning Unix seconds.

    """

    def __init__(
        self,
        secret: str,
        *,
        enabled: bool = True,
        time_window_s: float = _DEFAULT_TIME_WINDOW_S,
        clock: cabc.Callable[[], float] = time.time,
    ) -> None:
        """Initialise the verifier."""
        self._secret = secret
        self._enabled = enabled
        self._time_window_s = time_window_s
        self._clock = clock
        self._degraded_warned = False

    @property
    def degraded(self) -> bool:
        """Return ``True`` when requests are accepted without verification."""
        return not self._enabled or not self._secret

    @property
    def time_window_s(self) -> float:
        """Return the freshness window in seconds."""
        return self._time_window_s

    def _warn_degraded_once(self) -> None:
        if self._degraded_warned:
            return
        self._degraded_warned = True
        reason = "disabled" if not self._enabled else "missing a secret"
        log_warning(
            logger,
            "Webhook signature verification is %s; accepting unauthenticated requests",
            reason,
        )

    def verify(self, raw_body: bytes, signature_header: str | None) -> bool:
        """Return whether ``signature_header`` authenticates ``raw_body``."""
        if self.degraded:
            self._warn_degraded_once()
            return True

        return verify_signature(
            raw_body,
            signature_header,
            self._secret,
            time_window_s=self._time_window_s,
            now_ms=self._clock() * _MILLIS_PER_SECOND,
        )

    def require(self, raw_body: bytes, signature_header: str | None) -> None:
        """Verify the request or raise.

        Raises
        ------
        WebhookAuthenticationError
            If the header is absent, malformed, stale, or does not match.

        """
        if not self.degraded and not signature_header:
            raise WebhookAuthenticationError.missing_signature()
        if not self.verify(raw_body, signature_header):
            raise WebhookAuthenticationError.invalid_signature()
