"""Delivery errors raised by the Discord webhook client."""

from __future__ import annotations

_HTTP_RATE_LIMITED = 429
_HTTP_SERVER_ERROR_THRESHOLD = 500


class DeliveryError(RuntimeError):
    """Base exception for failed webhook deliveries.

    Attributes
    ----------
    status_code
        HTTP status returned by Discord, or ``None`` when no response arrived.
    retryable
        Whether another attempt may succeed.
    retry_after_s
        Wait requested by Discord via ``Retry-After``, in seconds.

    """

    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        retry_after_s: float | None = None,
    ) -> None:
        """Initialise the error with optional response details."""
        self.status_code = status_code
        self.retry_after_s = retry_after_s
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int, reason: str = "") -> DeliveryError:
        """Create the error for a non-2xx response other than 429.

        Server errors are retryable; every other status is fatal.

        Parameters
        ----------
        status_code
            HTTP status code from the response.
        reason
            Optional reason phrase appended to the message.

        Returns
        -------
        DeliveryError
            A :class:`RetryableDeliveryError` for 5xx responses, otherwise a
            :class:`FatalDeliveryError`.

        """
        msg = f"Discord API error {status_code}"
        if reason:
            msg = f"{msg}: {reason}"
        if status_code >= _HTTP_SERVER_ERROR_THRESHOLD:
            return RetryableDeliveryError(msg, status_code=status_code)
        return FatalDeliveryError(msg, status_code=status_code)

    @classmethod
    def rate_limited(cls, retry_after_s: float | None = None) -> DeliveryError:
        """Create the retryable error for a 429 response."""
        shown = "unknown" if retry_after_s is None else f"{retry_after_s:g}"
        return RetryableDeliveryError(
            f"Discord rate limited. Retry after: {shown}s",
            status_code=_HTTP_RATE_LIMITED,
            retry_after_s=retry_after_s,
        )

    @classmethod
    def network_error(cls, detail: str) -> DeliveryError:
        """Create the retryable error for transport failures."""
        return RetryableDeliveryError(f"Network error: {detail}")

    @classmethod
    def timeout(cls) -> DeliveryError:
        """Create the retryable error for a request that timed out."""
        return RetryableDeliveryError("Discord request timed out")


class RetryableDeliveryError(DeliveryError):
    """A failed attempt that may succeed when retried."""

    retryable = True


class FatalDeliveryError(DeliveryError):
    """A failed attempt that will not succeed when retried."""


class DeliveryExhaustedError(FatalDeliveryError):
    """Raised when every delivery attempt failed with a retryable error.

    Attributes
    ----------
    attempts
        Number of attempts made.
    last_error
        Error from the final attempt.

    """

    def __init__(
        self,
        message: str,
        *,
        attempts: int,
        last_error: DeliveryError,
    ) -> None:
        """Initialise the error with the attempt count and final failure."""
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(message, status_code=last_error.status_code)

    @classmethod
    def after(cls, attempts: int, last_error: DeliveryError) -> DeliveryExhaustedError:
        """Create the aggregated error raised once retries run out."""
        msg = (
            f"Discord webhook failed after {attempts} attempts. "
            f"Last error: {last_error}"
        )
        return cls(msg, attempts=attempts, last_error=last_error)
