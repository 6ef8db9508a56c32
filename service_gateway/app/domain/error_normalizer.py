"""
Normalization of outbound-call failures into a fixed error descriptor.

Whatever went wrong while serving a route (a ``GatewayError`` raised by a
backend client, a bare httpx transport error, an ``HTTPException`` or some
value nobody anticipated) ends up as ``ErrorDescriptor(status, message, code)``.
``normalize`` never raises.
"""

from typing import Any, Mapping, Optional

import httpx
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.errors import BackendTimeout, GatewayError, NetworkFailure

DEFAULT_STATUS = 500
DEFAULT_MESSAGE = "Unknown error"


class ErrorDescriptor(BaseModel):
    """Uniform ``{status, message, code}`` triple for a failed request."""

    status: int = DEFAULT_STATUS
    message: str = DEFAULT_MESSAGE
    code: Optional[str] = None


def normalize(failure: Any) -> ErrorDescriptor:
    """Convert any failure value into an ``ErrorDescriptor``."""
    try:
        return _normalize(failure)
    except Exception:  # noqa: BLE001 - the normalizer must always answer
        return ErrorDescriptor()


def _normalize(failure: Any) -> ErrorDescriptor:
    if isinstance(failure, GatewayError):
        return ErrorDescriptor(
            status=_valid_status(failure.status_code) or DEFAULT_STATUS,
            message=_text(failure.message) or DEFAULT_MESSAGE,
            code=_text(failure.code),
        )

    if isinstance(failure, httpx.TimeoutException):
        return ErrorDescriptor(
            status=BackendTimeout.default_status,
            message=BackendTimeout.default_message,
        )

    if isinstance(failure, httpx.TransportError):
        return ErrorDescriptor(
            status=NetworkFailure.default_status,
            message=NetworkFailure.default_message,
        )

    if isinstance(failure, StarletteHTTPException):
        detail = failure.detail
        if isinstance(detail, Mapping):
            return ErrorDescriptor(
                status=_valid_status(failure.status_code) or DEFAULT_STATUS,
                message=_text(detail.get("message")) or DEFAULT_MESSAGE,
                code=_text(detail.get("code")),
            )
        return ErrorDescriptor(
            status=_valid_status(failure.status_code) or DEFAULT_STATUS,
            message=_text(detail) or DEFAULT_MESSAGE,
        )

    status = _valid_status(_field(failure, "status"))
    if status is None:
        status = _valid_status(_field(failure, "status_code"))

    message = _text(_field(failure, "message"))
    if message is None and isinstance(failure, BaseException):
        message = _text(str(failure))

    return ErrorDescriptor(
        status=status or DEFAULT_STATUS,
        message=message or DEFAULT_MESSAGE,
        code=_text(_field(failure, "code")),
    )


def _field(failure: Any, name: str) -> Any:
    """Read ``name`` from a mapping key or an attribute."""
    if isinstance(failure, Mapping):
        return failure.get(name)
    if isinstance(failure, (str, bytes, int, float, bool)) or failure is None:
        return None
    return getattr(failure, name, None)


def _valid_status(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    if 100 <= value <= 599:
        return value
    return None


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None
