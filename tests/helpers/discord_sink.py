"""Scripted Discord webhook sink for delivery tests.

The sink plugs into ``httpx.MockTransport`` and answers each request with
the next scripted response, recording every request it receives. Sleeps
are replaced by :class:`RecordedSleep`, which advances a fake clock instead
of waiting.

Examples
--------
>>> sink = DiscordSink([
...     SinkResponse(429, headers={"Retry-After": "2"}),
...     SinkResponse(204),
... ])
>>> http_client = httpx.AsyncClient(transport=sink.transport())

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import httpx
import msgspec

from herald.discord.client import DeliveryClient
from herald.discord.config import DeliveryConfig

if typ.TYPE_CHECKING:
    import collections.abc as cabc

__all__ = [
    "WEBHOOK_URL",
    "DiscordSink",
    "FakeClock",
    "RecordedSleep",
    "SinkResponse",
    "delivery_client_for",
]

WEBHOOK_URL = "https://discord.test/api/webhooks/1/token"


@dc.dataclass(frozen=True, slots=True)
class SinkResponse:
    """One scripted response, or a transport failure when ``error`` is set."""

    status_code: int = 204
    headers: dict[str, str] = dc.field(default_factory=dict)
    json: object | None = None
    error: type[httpx.RequestError] | None = None


class DiscordSink:
    """Answer requests from a script; repeat the last entry once exhausted."""

    def __init__(self, script: cabc.Sequence[SinkResponse] = ()) -> None:
        """Initialise the sink with the responses to replay in order."""
        self._script = list(script) or [SinkResponse()]
        self.requests: list[httpx.Request] = []

    def _handle(self, request: httpx.Request) -> httpx.Response:
        index = min(len(self.requests), len(self._script) - 1)
        self.requests.append(request)
        scripted = self._script[index]
        if scripted.error is not None:
            msg = "scripted transport failure"
            raise scripted.error(msg, request=request)
        if scripted.json is None:
            return httpx.Response(scripted.status_code, headers=scripted.headers)
        return httpx.Response(
            scripted.status_code, headers=scripted.headers, json=scripted.json
        )

    def transport(self) -> httpx.MockTransport:
        """Return a transport routing requests to this sink."""
        return httpx.MockTransport(self._handle)

    def payloads(self) -> list[dict[str, typ.Any]]:
        """Return the decoded JSON body of every request."""
        return [msgspec.json.decode(request.content) for request in self.requests]


class FakeClock:
    """Settable clock shared by the client and the recorded sleep."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        """Start the clock at ``start`` seconds."""
        self.now = start

    def __call__(self) -> float:
        """Return the current fake time."""
        return self.now


class RecordedSleep:
    """Awaitable sleep that records delays and advances ``clock``."""

    def __init__(self, clock: FakeClock | None = None) -> None:
        """Initialise with an optional clock to advance."""
        self.delays: list[float] = []
        self._clock = clock

    async def __call__(self, delay: float) -> None:
        """Record ``delay`` without waiting."""
        self.delays.append(delay)
        if self._clock is not None:
            self._clock.now += delay

    @property
    def total(self) -> float:
        """Sum of every recorded delay."""
        return sum(self.delays)


def delivery_client_for(
    sink: DiscordSink,
    *,
    clock: FakeClock,
    sleep: RecordedSleep,
    **overrides: typ.Any,  # noqa: ANN401 - DeliveryConfig fields
) -> DeliveryClient:
    """Build a client that talks to ``sink`` on fake time.

    Jitter is pinned to zero so backoff delays equal their exponential base.
    """
    settings: dict[str, typ.Any] = {"webhook_url": WEBHOOK_URL}
    settings.update(overrides)
    return DeliveryClient(
        DeliveryConfig(**settings),
        http_client=httpx.AsyncClient(transport=sink.transport()),
        sleep=sleep,
        clock=clock,
        monotonic=clock,
        rng=lambda: 0.5,
    )
