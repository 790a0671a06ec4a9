"""Resilient delivery of notification messages to a Discord webhook.

Every send passes through three stages. Pacing waits for Discord's
remembered quota to reset, or spaces sends by the configured buffer when
quota remains. Sending posts the compacted message and classifies the
response itself rather than letting the transport raise. Retryable
failures (429, 5xx, network errors) back off and try again until the
attempt budget is spent; any other failure is raised at once.

The pacing state is shared by every concurrent delivery through one client,
so the composition root creates exactly one :class:`DeliveryClient` per
process. Pacing and quota updates run under one lock; the POST itself does
not, so a slow request never blocks the next send's pacing.
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import random
import time
import typing as typ

import httpx
import msgspec

from herald import __version__
from herald.discord.backoff import compute_backoff_delay
from herald.discord.compactor import MessageCompactor
from herald.discord.errors import (
    DeliveryError,
    DeliveryExhaustedError,
    RetryableDeliveryError,
)
from herald.discord.observability import DeliveryEventLogger
from herald.discord.ratelimit import (
    RateLimitSnapshot,
    pacing_delay,
    parse_rate_limit_headers,
    parse_retry_after,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from herald.discord.config import DeliveryConfig
    from herald.embeds.models import NotificationMessage

__all__ = ["DeliveryClient", "DeliveryReceipt"]

_HTTP_RATE_LIMITED = 429
_USER_AGENT = f"herald/{__version__}"


class _RateLimitBody(msgspec.Struct):
    """JSON body Discord sends with a 429 response."""

    retry_after: float | None = None


@dc.dataclass(frozen=True, slots=True)
class DeliveryReceipt:
    """Outcome of a successful delivery.

    Attributes
    ----------
    attempts
        Attempts made, including the successful one.
    status_code
        HTTP status of the successful response.
    elapsed_s
        Wall time spent in :meth:`DeliveryClient.send`, waits included.
    rate_limited
        Whether Discord answered any attempt with 429.

    """

    attempts: int
    status_code: int
    elapsed_s: float
    rate_limited: bool = False


def _retry_after(response: httpx.Response) -> float | None:
    """Return the wait Discord requested, preferring the header."""
    header = parse_retry_after(response.headers)
    if header is not None:
        return header
    try:
        body = msgspec.json.decode(response.content, type=_RateLimitBody)
    except (msgspec.DecodeError, msgspec.ValidationError):
        return None
    return body.retry_after


class DeliveryClient:
    """Send notification messages to Discord with retries and pacing.

    Parameters
    ----------
    config
        Delivery settings including the webhook URL and retry budget.
    http_client
        Optional ``httpx.AsyncClient``; when omitted the instance creates and
        owns its own client.
    compactor
        Compactor applied to every message before it is sent.
    event_logger
        Receiver of structured delivery events.
    sleep
        Awaitable sleep used for pacing and backoff; injectable for tests.
    clock
        Epoch clock in seconds, compared with Discord's reset times.
    monotonic
        Monotonic clock used to measure elapsed time.
    rng
        Uniform random source for backoff jitter.

    Examples
    --------
    >>> client = DeliveryClient(DeliveryConfig(webhook_url=url))
    >>> receipt = await client.send(message)
    >>> receipt.attempts
    1
    >>> await client.aclose()

    """

    def __init__(  # noqa: PLR0913
        self,
        config: DeliveryConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        compactor: MessageCompactor | None = None,
        event_logger: DeliveryEventLogger | None = None,
        sleep: typ.Callable[[float], cabc.Awaitable[None]] = asyncio.sleep,
        clock: typ.Callable[[], float] = time.time,
        monotonic: typ.Callable[[], float] = time.monotonic,
        rng: typ.Callable[[], float] = random.random,
    ) -> None:
        """Initialise the client with configuration and collaborators."""
        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)
        self._compactor = compactor or MessageCompactor()
        self._events = event_logger or DeliveryEventLogger()
        self._sleep = sleep
        self._clock = clock
        self._monotonic = monotonic
        self._rng = rng
        self._lock = asyncio.Lock()
        self._rate_limit = RateLimitSnapshot()
        self._last_send: float | None = None
        self._sequence = 0
        self._quota_sequence = 0

    @property
    def config(self) -> DeliveryConfig:
        """Read-only access to the delivery configuration."""
        return self._config

    def rate_limit_snapshot(self) -> RateLimitSnapshot:
        """Return the quota reported for the most recently paced send."""
        return self._rate_limit

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def send(
        self,
        message: NotificationMessage,
        *,
        destination: str | None = None,
    ) -> DeliveryReceipt:
        """Deliver ``message`` to Discord.

        Parameters
        ----------
        message
            Message to deliver. It is compacted before the first attempt and
            given the configured username and avatar when it has none.
        destination
            Webhook URL; defaults to the configured one.

        Returns
        -------
        DeliveryReceipt
            Attempt count, final status and elapsed time.

        Raises
        ------
        FatalDeliveryError
            If Discord rejected the message with a non-retryable status.
        DeliveryExhaustedError
            If every attempt failed with a retryable error.

        """
        url = destination or self._config.webhook_url
        body = msgspec.json.encode(self._prepare(message))
        max_attempts = self._config.max_attempts
        started = self._monotonic()
        last_error: DeliveryError | None = None
        rate_limited = False

        for attempt in range(1, max_attempts + 1):
            self._events.log_attempt_started(attempt=attempt, max_attempts=max_attempts)
            try:
                response = await self._post(url, body)
            except RetryableDeliveryError as exc:
                error: DeliveryError = exc
            else:
                if response.is_success:
                    receipt = DeliveryReceipt(
                        attempts=attempt,
                        status_code=response.status_code,
                        elapsed_s=self._monotonic() - started,
                        rate_limited=rate_limited,
                    )
                    self._events.log_succeeded(
                        attempt=attempt,
                        status_code=receipt.status_code,
                        elapsed_s=receipt.elapsed_s,
                    )
                    return receipt
                error = self._classify(response)

            last_error = error
            rate_limited = rate_limited or error.status_code == _HTTP_RATE_LIMITED
            if not error.retryable or attempt == max_attempts:
                self._events.log_attempt_failed(
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error=error,
                    delay_s=None,
                )
                if not error.retryable:
                    raise error
                break

            delay = compute_backoff_delay(
                attempt,
                base_s=self._config.retry_delay_s,
                retry_after_s=error.retry_after_s,
                buffer_s=self._config.rate_limit_buffer_s,
                rng=self._rng,
            )
            self._events.log_attempt_failed(
                attempt=attempt,
                max_attempts=max_attempts,
                error=error,
                delay_s=delay,
            )
            await self._sleep(delay)

        exhausted = DeliveryExhaustedError.after(
            max_attempts, typ.cast("DeliveryError", last_error)
        )
        self._events.log_exhausted(exhausted)
        raise exhausted

    def _prepare(self, message: NotificationMessage) -> NotificationMessage:
        compacted = self._compactor.compact(message)
        return msgspec.structs.replace(
            compacted,
            username=compacted.username or self._config.username,
            avatar_url=compacted.avatar_url or self._config.avatar_url,
        )

    async def _pace(self) -> int:
        """Wait as the remembered quota demands, then stamp the send.

        Returns the send's position in pacing order.
        """
        async with self._lock:
            delay = pacing_delay(
                self._rate_limit,
                now=self._clock(),
                last_send=self._last_send,
                buffer_s=self._config.rate_limit_buffer_s,
            )
            if delay > 0:
                self._events.log_paced(
                    delay_s=delay, remaining=self._rate_limit.remaining
                )
                await self._sleep(delay)
            self._last_send = self._clock()
            self._sequence += 1
            return self._sequence

    async def _post(self, url: str, body: bytes) -> httpx.Response:
        """Pace, then POST ``body`` and remember the reported quota.

        Raises
        ------
        RetryableDeliveryError
            If the request timed out or failed at the transport level.

        """
        sequence = await self._pace()
        try:
            response = await self._client.post(
                url,
                content=body,
                headers={
                    "Content-Type": "application/json",
                    "User-Agent": _USER_AGENT,
                },
                timeout=self._config.timeout_s,
            )
        except httpx.TimeoutException as exc:
            raise DeliveryError.timeout() from exc
        except httpx.RequestError as exc:
            raise DeliveryError.network_error(str(exc) or type(exc).__name__) from exc

        await self._remember_quota(sequence, response)
        return response

    async def _remember_quota(self, sequence: int, response: httpx.Response) -> None:
        """Store the quota from ``response`` unless a later send already did.

        Responses to concurrent sends can arrive out of order; the quota
        reported for the most recently paced send is kept.
        """
        async with self._lock:
            if sequence < self._quota_sequence:
                return
            self._quota_sequence = sequence
            self._rate_limit = parse_rate_limit_headers(response.headers)

    def _classify(self, response: httpx.Response) -> DeliveryError:
        if response.status_code == _HTTP_RATE_LIMITED:
            error = DeliveryError.rate_limited(_retry_after(response))
            self._events.log_rate_limited(
                retry_after_s=error.retry_after_s, snapshot=self._rate_limit
            )
            return error
        return DeliveryError.http_error(response.status_code, response.reason_phrase)
