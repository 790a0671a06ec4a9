"""Configuration for the Discord delivery client."""

from __future__ import annotations

import dataclasses as dc

from herald.common.env import EnvConfigError, env_int, env_required, env_str
from herald.embeds.style import LINEAR_LOGO_URL

__all__ = ["DeliveryConfig"]

_DEFAULT_USERNAME = "Linear Bot"
_DEFAULT_MAX_RETRIES = 3
_DEFAULT_RETRY_DELAY_MS = 1000
_DEFAULT_TIMEOUT_MS = 30000
_DEFAULT_RATE_LIMIT_BUFFER_MS = 100

_SECURE_SCHEME = "https://"
_INSECURE_SCHEME = "http://"
_MS_PER_SECOND = 1000.0


@dc.dataclass(frozen=True, slots=True)
class DeliveryConfig:
    """Settings for :class:`herald.discord.client.DeliveryClient`.

    Attributes
    ----------
    webhook_url
        Discord webhook endpoint that receives every message.
    max_retries
        Retries after the first attempt; total attempts are one more.
    retry_delay_s
        Base delay of the exponential backoff, in seconds.
    timeout_s
        Timeout for each HTTP request, in seconds.
    rate_limit_buffer_s
        Safety margin added to Discord-imposed waits and the minimum spacing
        between consecutive sends, in seconds.
    username
        Webhook display name used when a message does not set one.
    avatar_url
        Webhook avatar used when a message does not set one.

    """

    webhook_url: str
    max_retries: int = _DEFAULT_MAX_RETRIES
    retry_delay_s: float = _DEFAULT_RETRY_DELAY_MS / _MS_PER_SECOND
    timeout_s: float = _DEFAULT_TIMEOUT_MS / _MS_PER_SECOND
    rate_limit_buffer_s: float = _DEFAULT_RATE_LIMIT_BUFFER_MS / _MS_PER_SECOND
    username: str | None = _DEFAULT_USERNAME
    avatar_url: str | None = LINEAR_LOGO_URL

    @property
    def max_attempts(self) -> int:
        """Total number of attempts per message."""
        return self.max_retries + 1

    @classmethod
    def from_env(cls, *, production: bool = False) -> DeliveryConfig:
        """Build configuration from ``HERALD_*`` environment variables.

        Reads the following environment variables:

        - ``HERALD_DISCORD_WEBHOOK_URL``: required webhook URL
        - ``HERALD_DELIVERY_MAX_RETRIES``: retries, 0 to 10
        - ``HERALD_DELIVERY_RETRY_DELAY_MS``: backoff base, 100 to 30000
        - ``HERALD_DELIVERY_TIMEOUT_MS``: request timeout, 1000 to 60000
        - ``HERALD_RATE_LIMIT_BUFFER_MS``: pacing buffer, 0 to 1000
        - ``HERALD_DISCORD_USERNAME``: webhook display name
        - ``HERALD_DISCORD_AVATAR_URL``: webhook avatar

        Parameters
        ----------
        production
            Require an ``https://`` webhook URL when ``True``.

        Returns
        -------
        DeliveryConfig
            Configuration instance with values from the environment.

        Raises
        ------
        EnvConfigError
            If a variable is missing or holds an invalid value.

        """
        name = "HERALD_DISCORD_WEBHOOK_URL"
        webhook_url = env_required(name)
        schemes = (_SECURE_SCHEME,)
        if not production:
            schemes = (_SECURE_SCHEME, _INSECURE_SCHEME)
        if not webhook_url.startswith(schemes):
            raise EnvConfigError.invalid(
                name, webhook_url, f"a URL starting with {' or '.join(schemes)}"
            )

        retry_delay_ms = env_int(
            "HERALD_DELIVERY_RETRY_DELAY_MS",
            default=_DEFAULT_RETRY_DELAY_MS,
            minimum=100,
            maximum=30000,
        )
        timeout_ms = env_int(
            "HERALD_DELIVERY_TIMEOUT_MS",
            default=_DEFAULT_TIMEOUT_MS,
            minimum=1000,
            maximum=60000,
        )
        buffer_ms = env_int(
            "HERALD_RATE_LIMIT_BUFFER_MS",
            default=_DEFAULT_RATE_LIMIT_BUFFER_MS,
            minimum=0,
            maximum=1000,
        )
        return cls(
            webhook_url=webhook_url,
            max_retries=env_int(
                "HERALD_DELIVERY_MAX_RETRIES",
                default=_DEFAULT_MAX_RETRIES,
                minimum=0,
                maximum=10,
            ),
            retry_delay_s=retry_delay_ms / _MS_PER_SECOND,
            timeout_s=timeout_ms / _MS_PER_SECOND,
            rate_limit_buffer_s=buffer_ms / _MS_PER_SECOND,
            username=env_str("HERALD_DISCORD_USERNAME", _DEFAULT_USERNAME),
            avatar_url=env_str("HERALD_DISCORD_AVATAR_URL", LINEAR_LOGO_URL),
        )
