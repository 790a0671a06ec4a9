"""Sliding-window limiter for inbound webhook requests.

This bounds how often one client may call the webhook endpoint. It is
independent of Discord's rate limits, which the delivery client handles.

Usage
-----
Guard the webhook route with the middleware::

    limiter = IngressRateLimiter(max_requests=60)
    app = falcon.asgi.App(
        middleware=[IngressRateLimitMiddleware(limiter, paths={"/linear-webhook"})]
    )

"""

from __future__ import annotations

import collections
import dataclasses as dc
import math
import threading
import time
import typing as typ

import falcon

from herald.logging import get_logger, log_warning
from herald.relay.metrics import SecurityEvent

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from falcon.asgi import Request, Response

    from herald.relay.metrics import MetricsCollector

__all__ = [
    "IngressRateLimitMiddleware",
    "IngressRateLimiter",
    "RateLimitDecision",
    "client_identity",
]

logger = get_logger(__name__)

_WINDOW_S = 60.0
_CLEANUP_INTERVAL_S = 300.0
_MAX_IDENTITY_LENGTH = 200


@dc.dataclass(frozen=True, slots=True)
class RateLimitDecision:
    """Outcome of one limiter check.

    Attributes
    ----------
    allowed
        Whether the request may proceed.
    limit
        Requests allowed per window.
    remaining
        Requests left in the window after this one.
    reset
        Epoch second at which the client regains quota.
    retry_after
        Seconds to wait before retrying; zero when allowed.

    """

    allowed: bool
    limit: int
    remaining: int
    reset: int
    retry_after: int = 0

    def headers(self) -> dict[str, str]:
        """Return the quota headers describing this decision."""
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after)
        return headers


class IngressRateLimiter:
    """Thread-safe per-client sliding-window request counter.

    Parameters
    ----------
    max_requests
        Requests allowed per client in any window.
    window_s
        Window length in seconds.
    clock
        Epoch clock in seconds; injectable for tests.

    """

    def __init__(
        self,
        max_requests: int,
        *,
        window_s: float = _WINDOW_S,
        clock: typ.Callable[[], float] = time.time,
    ) -> None:
        """Initialise an empty limiter."""
        self._max_requests = max_requests
        self._window_s = window_s
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: dict[str, collections.deque[float]] = collections.defaultdict(
            collections.deque
        )
        self._last_cleanup = clock()

    @property
    def max_requests(self) -> int:
        """Requests allowed per client in any window."""
        return self._max_requests

    def check(self, client_id: str) -> RateLimitDecision:
        """Record a request from ``client_id`` unless it exceeds the limit.

        Rejected requests are not recorded, so a client that backs off
        regains quota as its earlier requests leave the window.
        """
        now = self._clock()
        cutoff = now - self._window_s
        if now - self._last_cleanup >= _CLEANUP_INTERVAL_S:
            self.cleanup()

        with self._lock:
            window = self._windows[client_id]
            while window and window[0] <= cutoff:
                window.popleft()

            if len(window) >= self._max_requests:
                reset_at = window[0] + self._window_s
                return RateLimitDecision(
                    allowed=False,
                    limit=self._max_requests,
                    remaining=0,
                    reset=math.ceil(reset_at),
                    retry_after=max(math.ceil(reset_at - now), 1),
                )

            window.append(now)
            return RateLimitDecision(
                allowed=True,
                limit=self._max_requests,
                remaining=self._max_requests - len(window),
                reset=math.ceil(now + self._window_s),
            )

    def cleanup(self) -> int:
        """Forget clients with no requests inside the window.

        Returns
        -------
        int
            Number of client entries removed.

        """
        now = self._clock()
        cutoff = now - self._window_s
        with self._lock:
            stale = [
                key
                for key, window in self._windows.items()
                if not window or window[-1] <= cutoff
            ]
            for key in stale:
                del self._windows[key]
            self._last_cleanup = now
        return len(stale)

    def stats(self) -> dict[str, int]:
        """Return the number of tracked clients and recorded requests."""
        with self._lock:
            return {
                "tracked_clients": len(self._windows),
                "total_requests": sum(len(w) for w in self._windows.values()),
                "max_requests_per_window": self._max_requests,
                "window_seconds": int(self._window_s),
            }


def client_identity(req: Request) -> str:
    """Derive the limiter key from the client address and user agent.

    The address is the first ``X-Forwarded-For`` entry, then ``X-Real-IP``,
    then the socket peer.
    """
    forwarded = req.get_header("X-Forwarded-For")
    if forwarded:
        address = forwarded.split(",")[0].strip()
    else:
        address = req.get_header("X-Real-IP") or req.remote_addr or "unknown"
    agent = req.user_agent or "unknown"
    return f"{address}:{agent}"[:_MAX_IDENTITY_LENGTH]


class IngressRateLimitMiddleware:
    """Falcon middleware applying :class:`IngressRateLimiter` to some paths.

    Parameters
    ----------
    limiter
        Shared limiter instance.
    paths
        Request paths the limiter guards.
    metrics
        Optional collector counting rejections.

    """

    def __init__(
        self,
        limiter: IngressRateLimiter,
        *,
        paths: cabc.Iterable[str],
        metrics: MetricsCollector | None = None,
    ) -> None:
        """Initialise the middleware."""
        self._limiter = limiter
        self._paths = frozenset(paths)
        self._metrics = metrics

    async def process_request(self, req: Request, _resp: Response) -> None:
        """Reject the request with 429 when the client is over its limit.

        Raises
        ------
        falcon.HTTPTooManyRequests
            With quota and ``Retry-After`` headers.

        """
        if req.path not in self._paths:
            return
        client_id = client_identity(req)
        decision = self._limiter.check(client_id)
        req.context.rate_limit = decision
        if decision.allowed:
            return

        if self._metrics is not None:
            self._metrics.record_security_event(SecurityEvent.RATE_LIMITED)
        log_warning(
            logger,
            "Ingress rate limit exceeded for client %s (limit=%d per window)",
            client_id,
            decision.limit,
        )
        raise falcon.HTTPTooManyRequests(
            title="Too Many Requests",
            description=(
                f"Rate limit exceeded. Maximum {decision.limit} requests "
                "per minute allowed."
            ),
            headers=decision.headers(),
        )

    async def process_response(
        self,
        req: Request,
        resp: Response,
        _resource: object,
        _req_succeeded: bool,  # noqa: FBT001 - Falcon middleware signature
    ) -> None:
        """Attach quota headers to accepted requests."""
        decision: RateLimitDecision | None = getattr(req.context, "rate_limit", None)
        if decision is not None and decision.allowed:
            resp.set_headers(decision.headers())
