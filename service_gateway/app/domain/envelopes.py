"""
Outward response envelopes.

Two conventions coexist across route families and both are kept:

- ``WRAPPED``: ``{"success": true, "data": ...}`` / ``{"success": false, "error": {...}}``
- ``RAW``: the backend payload as-is / ``{"error": <message>, "code": <code>}``

The policy is picked per route when it is registered.
"""

from enum import Enum
from typing import Any, Dict

from .error_normalizer import ErrorDescriptor


class EnvelopePolicy(str, Enum):
    """How a route shapes its outward JSON."""

    WRAPPED = "wrapped"
    RAW = "raw"

    def success(self, payload: Any) -> Any:
        if self is EnvelopePolicy.RAW:
            return payload
        return {"success": True, "data": payload}

    def failure(self, error: ErrorDescriptor) -> Dict[str, Any]:
        if self is EnvelopePolicy.RAW:
            body: Dict[str, Any] = {"error": error.message}
            if error.code is not None:
                body["code"] = error.code
            return body

        detail: Dict[str, Any] = {"message": error.message}
        if error.code is not None:
            detail["code"] = error.code
        return {"success": False, "error": detail}
