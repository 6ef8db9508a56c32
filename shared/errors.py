"""
Shared error handling for the dashboard gateway.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel
from opentelemetry import trace


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    error_type: str
    status: int
    message: str
    code: Optional[str] = None
    details: Dict[str, Any] = {}


def current_trace_id() -> Optional[str]:
    """Return the active OpenTelemetry trace id, if a span is recording."""
    current_span = trace.get_current_span()
    if current_span and current_span.is_recording():
        span_context = current_span.get_span_context()
        if span_context.trace_id != 0:
            return f"{span_context.trace_id:032x}"
    return None


class GatewayError(Exception):
    """Base exception for failures raised while serving a gateway request.

    ``code`` is the machine-readable code supplied by a backend, if any.
    ``error_type`` names the failure kind and is never sent as ``code``.
    """

    error_type = "GATEWAY_ERROR"
    default_status = 500
    default_message = "Unknown error"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.status_code = status_code if status_code is not None else self.default_status
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            trace_id=current_trace_id(),
            error_type=self.error_type,
            status=self.status_code,
            message=self.message,
            code=self.code,
            details=self.details,
        )


class NetworkFailure(GatewayError):
    """Backend could not be reached."""

    error_type = "NETWORK_FAILURE"
    default_status = 502
    default_message = "Backend service unavailable"


class BackendTimeout(NetworkFailure):
    """Backend did not answer within the transport timeout."""

    error_type = "BACKEND_TIMEOUT"
    default_status = 504
    default_message = "Backend request timed out"


class BackendApplicationError(GatewayError):
    """Backend answered with a non-2xx status and a structured error body."""

    error_type = "BACKEND_APPLICATION_ERROR"


class MalformedBackendResponse(GatewayError):
    """Backend payload could not be parsed as JSON."""

    error_type = "MALFORMED_BACKEND_RESPONSE"
    default_status = 502
    default_message = "Backend returned a malformed response"


class UnknownFailure(GatewayError):
    """Anything else that went wrong during an outbound call."""

    error_type = "UNKNOWN_FAILURE"


class InvalidRequestBody(GatewayError):
    """Inbound request body is not valid JSON."""

    error_type = "INVALID_REQUEST_BODY"
    default_status = 400
    default_message = "Request body must be valid JSON"
