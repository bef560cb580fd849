"""Failure taxonomy for calls to the generative-AI service.

Everything that leaves the gateway is a :class:`GatewayError` carrying a
message fit for the error banner. Service failures are classified into
permission, rate-limit and generic failures; local parsing failures keep
their own types.
"""
from __future__ import annotations

import functools
from typing import Any, Callable

from jobhunt.log import get_logger

log = get_logger(__name__)

SEARCH_GROUNDING_DISABLED = (
    "Search Grounding API not enabled. Please check your search API key settings."
)
PERMISSION_DENIED = "API Permission Denied. Please check your API Key permissions."
RATE_LIMITED = "API Rate limit exceeded. Please wait a moment and try again."


class GatewayError(Exception):
    """Base for every failure surfaced by the AI gateway."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class PermissionDenied(GatewayError):
    pass


class RateLimited(GatewayError):
    pass


class OperationFailed(GatewayError):
    pass


class MalformedResponse(GatewayError):
    """The service answered, but not with the JSON shape that was asked for."""


class EmptyResponse(GatewayError):
    """The service answered with no text at all."""


def _status_token(exc: BaseException) -> str:
    token = getattr(exc, "status", None)
    if isinstance(token, str):
        return token.upper()
    body = getattr(exc, "body", None)
    if isinstance(body, list) and body:
        body = body[0]
    if isinstance(body, dict):
        inner = body.get("error", body)
        if isinstance(inner, dict) and isinstance(inner.get("status"), str):
            return inner["status"].upper()
    return ""


def _status_code(exc: BaseException) -> int | None:
    code = getattr(exc, "status_code", None)
    if code is None:
        response = getattr(exc, "response", None)
        code = getattr(response, "status_code", None)
    return code if isinstance(code, int) else None


def classify_error(exc: BaseException, operation: str, *, grounded: bool = False) -> GatewayError:
    """Map a raw failure from *operation* onto the gateway taxonomy."""
    if isinstance(exc, GatewayError):
        return exc

    code = _status_code(exc)
    token = _status_token(exc)
    message = str(exc)
    low = message.lower()

    if code == 403 or token == "PERMISSION_DENIED" or "403" in message or "permission" in low:
        return PermissionDenied(SEARCH_GROUNDING_DISABLED if grounded else PERMISSION_DENIED)

    if (
        code == 429
        or token == "RESOURCE_EXHAUSTED"
        or "429" in message
        or "quota" in low
        or "rate limit" in low
    ):
        return RateLimited(RATE_LIMITED)

    return OperationFailed(f"Failed to {operation}. Please try again.")


def classified(operation: str, *, grounded: bool = False) -> Callable:
    """Decorator: re-raise anything but a GatewayError as its classified form."""

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except GatewayError as exc:
                log.error("%s failed: %s", operation, exc)
                raise
            except Exception as exc:
                log.error("Detailed error in %s: %r", operation, exc)
                raise classify_error(exc, operation, grounded=grounded) from exc

        return wrapper

    return decorator
