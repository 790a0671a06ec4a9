"""Herald runtime entrypoint for container deployments.

This module is the composition root. It reads configuration from the
environment, builds exactly one signature verifier, delivery client,
metrics collector and ingress limiter per process, and hands them to
:func:`herald.api.app.create_app`. The ``herald.runtime:create_app``
Granian entrypoint stays stable.

When ``HERALD_DISCORD_WEBHOOK_URL`` is set, the runtime builds full
``AppDependencies`` so the app relays Linear webhooks. Otherwise it
starts in health-only mode.

Configuration is driven by environment variables:

- ``HERALD_HOST``: Bind address (default ``0.0.0.0``)
- ``HERALD_PORT``: Listen port (default ``3000``)
- ``HERALD_LOG_LEVEL``: Log level (default ``INFO``)
- ``HERALD_DISCORD_WEBHOOK_URL``: Discord webhook (optional; enables the
  webhook endpoint when set)

Run the service directly with ``python -m herald.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from herald.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

    from herald.api.app import AppDependencies
    from herald.api.config import ApiConfig

__all__ = ["build_dependencies", "create_app", "main"]

logger = get_logger(__name__)

WEBHOOK_URL_ENV = "HERALD_DISCORD_WEBHOOK_URL"

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        # Use error() not exception() - validation failures need no traceback
        log_error(
            logger,
            "Invalid HERALD_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def build_dependencies(api_config: ApiConfig) -> AppDependencies:
    """Wire the relay pipeline from environment configuration.

    Parameters
    ----------
    api_config
        Inbound settings; its environment decides whether an insecure
        webhook URL is acceptable.

    Returns
    -------
    AppDependencies
        Dependencies for a full relay application.

    Raises
    ------
    EnvConfigError
        If a delivery variable holds an invalid value.

    """
    from herald.api.app import AppDependencies
    from herald.api.ingress import IngressRateLimiter
    from herald.discord.client import DeliveryClient
    from herald.discord.config import DeliveryConfig
    from herald.embeds.transformer import EntityTransformer
    from herald.linear.signature import SignatureVerifier
    from herald.relay.metrics import MetricsCollector
    from herald.relay.service import RelayDependencies, RelayService

    delivery_config = DeliveryConfig.from_env(production=api_config.is_production)
    metrics = MetricsCollector()
    delivery = DeliveryClient(delivery_config)
    verifier = SignatureVerifier(
        api_config.webhook_secret,
        enabled=api_config.verify_signatures,
        time_window_s=api_config.signature_window_s,
    )
    relay_service = RelayService(
        RelayDependencies(
            verifier=verifier,
            transformer=EntityTransformer(),
            delivery=delivery,
        ),
        metrics=metrics,
    )
    limiter = (
        IngressRateLimiter(api_config.max_requests_per_minute)
        if api_config.rate_limiting
        else None
    )
    return AppDependencies(
        relay_service=relay_service,
        delivery=delivery,
        delivery_config=delivery_config,
        metrics=metrics,
        ingress_limiter=limiter,
    )


def create_app() -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    When ``HERALD_DISCORD_WEBHOOK_URL`` is set, builds the relay pipeline
    so the app includes ``POST /linear-webhook`` and any enabled
    operational endpoints.  Otherwise only ``/health`` and ``/ready`` are
    available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    from herald.api.app import create_app as _create_api_app
    from herald.api.config import ApiConfig

    api_config = ApiConfig.from_env()
    for warning in api_config.consistency_warnings():
        log_warning(logger, "Configuration warning: %s", warning)

    if not os.environ.get(WEBHOOK_URL_ENV, "").strip():
        log_warning(
            logger,
            "%s is not set; starting in health-only mode",
            WEBHOOK_URL_ENV,
        )
        return _create_api_app(config=api_config)

    return _create_api_app(build_dependencies(api_config), config=api_config)


def main() -> None:
    """Start the Herald runtime server using Granian.

    Reads ``HERALD_HOST``, ``HERALD_PORT``, and ``HERALD_LOG_LEVEL`` from
    the environment and starts the ASGI server.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("HERALD_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port_str = os.environ.get("HERALD_PORT", "3000")
    port = _parse_port(port_str)
    log_level_str = os.environ.get("HERALD_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid HERALD_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting Herald runtime on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "herald.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
