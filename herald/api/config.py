"""Configuration for the inbound HTTP surface."""

from __future__ import annotations

import dataclasses as dc
import enum

from herald.common.env import env_bool, env_choice, env_int, env_str

__all__ = ["ApiConfig", "Environment"]

_MS_PER_SECOND = 1000.0


class Environment(enum.StrEnum):
    """Deployment environments accepted by ``HERALD_ENVIRONMENT``."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TEST = "test"


@dc.dataclass(frozen=True, slots=True)
class ApiConfig:
    """Settings for request authentication, limits and operational endpoints.

    Attributes
    ----------
    environment
        Deployment environment; production hides error details.
    webhook_secret
        Shared Linear webhook secret; empty runs in degraded mode.
    verify_signatures
        Administrative switch for signature verification.
    signature_window_s
        Accepted age of a signed request, in seconds.
    max_payload_bytes
        Largest accepted request body.
    rate_limiting
        Whether the ingress limiter guards the webhook endpoint.
    max_requests_per_minute
        Requests allowed per client identity per minute.
    request_timeout_s
        Processing budget for one webhook request, in seconds.
    detailed_health
        Register ``GET /health/detailed``.
    metrics_endpoints
        Register the ``/metrics`` endpoints.

    """

    environment: Environment = Environment.DEVELOPMENT
    webhook_secret: str = dc.field(default="", repr=False)
    verify_signatures: bool = True
    signature_window_s: int = 60
    max_payload_bytes: int = 1024 * 1024
    rate_limiting: bool = True
    max_requests_per_minute: int = 60
    request_timeout_s: float = 30.0
    detailed_health: bool = False
    metrics_endpoints: bool = False

    @property
    def is_production(self) -> bool:
        """Return ``True`` when running in production."""
        return self.environment is Environment.PRODUCTION

    @classmethod
    def from_env(cls) -> ApiConfig:
        """Build configuration from ``HERALD_*`` environment variables.

        Raises
        ------
        EnvConfigError
            If a variable holds an invalid value.

        """
        environment = env_choice(
            "HERALD_ENVIRONMENT",
            default=Environment.DEVELOPMENT.value,
            choices=frozenset(member.value for member in Environment),
        )
        timeout_ms = env_int(
            "HERALD_REQUEST_TIMEOUT_MS",
            default=30000,
            minimum=1000,
            maximum=120000,
        )
        return cls(
            environment=Environment(environment),
            webhook_secret=env_str("HERALD_LINEAR_WEBHOOK_SECRET", ""),
            verify_signatures=env_bool("HERALD_VERIFY_SIGNATURES", default=True),
            signature_window_s=env_int(
                "HERALD_SIGNATURE_WINDOW_S", default=60, minimum=30, maximum=600
            ),
            max_payload_bytes=env_int(
                "HERALD_MAX_PAYLOAD_BYTES",
                default=1024 * 1024,
                minimum=1024,
                maximum=10 * 1024 * 1024,
            ),
            rate_limiting=env_bool("HERALD_RATE_LIMITING", default=True),
            max_requests_per_minute=env_int(
                "HERALD_MAX_REQUESTS_PER_MINUTE", default=60, minimum=1, maximum=1000
            ),
            request_timeout_s=timeout_ms / _MS_PER_SECOND,
            detailed_health=env_bool("HERALD_DETAILED_HEALTH", default=False),
            metrics_endpoints=env_bool("HERALD_METRICS_ENDPOINTS", default=False),
        )

    def consistency_warnings(self) -> list[str]:
        """Return human-readable warnings about risky combinations.

        Warnings never stop the service; the runtime logs them at startup.
        """
        warnings: list[str] = []
        if not self.verify_signatures:
            warnings.append("Webhook signature verification is disabled")
        elif not self.webhook_secret:
            warnings.append(
                "Signature verification is enabled but "
                "HERALD_LINEAR_WEBHOOK_SECRET is empty; requests are not verified"
            )
        if not self.is_production:
            return warnings

        if not self.verify_signatures:
            warnings.append("Production is running without signature verification")
        if self.detailed_health or self.metrics_endpoints:
            warnings.append(
                "Production exposes detailed health or metrics endpoints"
            )
        if not self.rate_limiting:
            warnings.append("Production is running without ingress rate limiting")
        return warnings

    def summary(self) -> dict[str, object]:
        """Return a secret-free view of the configuration."""
        return {
            "environment": str(self.environment),
            "signature_verification": self.verify_signatures,
            "webhook_secret_configured": bool(self.webhook_secret),
            "signature_window_seconds": self.signature_window_s,
            "max_payload_bytes": self.max_payload_bytes,
            "rate_limiting": self.rate_limiting,
            "max_requests_per_minute": self.max_requests_per_minute,
            "request_timeout_seconds": self.request_timeout_s,
            "detailed_health": self.detailed_health,
            "metrics_endpoints": self.metrics_endpoints,
        }
