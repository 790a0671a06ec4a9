"""Falcon error handlers translating relay failures into HTTP responses.

Usage
-----
Register the handlers on the Falcon app::

    from herald.api.errors import register_error_handlers

    register_error_handlers(app, production=config.is_production)

"""

from __future__ import annotations

import traceback
import typing as typ

import falcon

from herald.discord.errors import DeliveryError
from herald.linear.errors import PayloadValidationError, WebhookAuthenticationError
from herald.logging import get_logger, log_exception

if typ.TYPE_CHECKING:
    import falcon.asgi
    from falcon.asgi import Request, Response

__all__ = [
    "RequestTimeoutError",
    "handle_authentication_error",
    "handle_request_timeout",
    "handle_validation_error",
    "make_delivery_error_handler",
    "make_unexpected_error_handler",
    "register_error_handlers",
]

logger = get_logger(__name__)

_GENERIC_DELIVERY_DESCRIPTION = "The notification could not be delivered."
_GENERIC_ERROR_DESCRIPTION = "An unexpected error occurred."

type ErrorHandler = typ.Callable[
    ["Request", "Response", typ.Any, dict[str, typ.Any]],
    typ.Awaitable[None],
]


class RequestTimeoutError(Exception):
    """Raised when webhook processing exceeds the request budget.

    Attributes
    ----------
    timeout_s
        Budget that was exceeded, in seconds.

    """

    def __init__(self, timeout_s: float) -> None:
        """Initialise with the exceeded budget."""
        self.timeout_s = timeout_s
        super().__init__(f"Request processing exceeded {timeout_s:g}s")


async def handle_authentication_error(
    _req: Request,
    resp: Response,
    ex: WebhookAuthenticationError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``WebhookAuthenticationError`` to an HTTP 401 JSON response."""
    resp.status = falcon.HTTP_401
    resp.media = {"title": "Unauthorized", "description": str(ex)}


async def handle_validation_error(
    _req: Request,
    resp: Response,
    ex: PayloadValidationError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``PayloadValidationError`` to an HTTP 400 JSON response.

    Parameters
    ----------
    _req
        Falcon request (unused).
    resp
        Falcon response whose status and media are set.
    ex
        The validation failure with its per-path issues.
    _params
        URI template parameters (unused).

    """
    resp.status = falcon.HTTP_400
    resp.media = {
        "title": "Invalid webhook payload",
        "description": str(ex),
        "kind": str(ex.kind),
        "errors": [issue.to_dict() for issue in ex.issues],
    }


async def handle_request_timeout(
    _req: Request,
    resp: Response,
    ex: RequestTimeoutError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``RequestTimeoutError`` to an HTTP 408 JSON response."""
    resp.status = falcon.HTTP_408
    resp.media = {"title": "Request Timeout", "description": str(ex)}


def make_delivery_error_handler(*, production: bool) -> ErrorHandler:
    """Return a handler mapping ``DeliveryError`` to HTTP 500.

    Outside production the description carries the delivery failure; in
    production it is replaced by a generic sentence.
    """

    async def handle_delivery_error(
        _req: Request,
        resp: Response,
        ex: DeliveryError,
        _params: dict[str, typ.Any],
    ) -> None:
        resp.status = falcon.HTTP_500
        description = _GENERIC_DELIVERY_DESCRIPTION if production else str(ex)
        resp.media = {"title": "Delivery failed", "description": description}

    return handle_delivery_error


def make_unexpected_error_handler(*, production: bool) -> ErrorHandler:
    """Return a catch-all handler mapping unexpected exceptions to HTTP 500.

    The exception is logged with its traceback. Outside production the
    response also names the exception class and includes the traceback.
    """

    async def handle_unexpected_error(
        req: Request,
        resp: Response,
        ex: Exception,
        _params: dict[str, typ.Any],
    ) -> None:
        log_exception(
            logger, f"Unhandled error processing {req.method} {req.path}", ex
        )
        resp.status = falcon.HTTP_500
        media: dict[str, typ.Any] = {
            "title": "Internal Server Error",
            "description": _GENERIC_ERROR_DESCRIPTION,
        }
        if not production:
            media["error"] = type(ex).__name__
            media["message"] = str(ex)
            media["traceback"] = traceback.format_exception(ex)
        resp.media = media

    return handle_unexpected_error


def register_error_handlers(app: falcon.asgi.App, *, production: bool) -> None:
    """Register every relay error handler on ``app``.

    ``falcon.HTTPError`` keeps Falcon's own rendering because Falcon picks
    the most specific registered handler.
    """
    app.add_error_handler(
        Exception, make_unexpected_error_handler(production=production)
    )
    app.add_error_handler(WebhookAuthenticationError, handle_authentication_error)
    app.add_error_handler(PayloadValidationError, handle_validation_error)
    app.add_error_handler(RequestTimeoutError, handle_request_timeout)
    app.add_error_handler(
        DeliveryError, make_delivery_error_handler(production=production)
    )
