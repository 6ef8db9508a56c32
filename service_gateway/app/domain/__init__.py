"""
Domain utilities for the Gateway Service.

Error normalization, outward envelopes and the route adapters that bind
inbound routes to backend forwarders.
"""

from .envelopes import EnvelopePolicy
from .error_normalizer import ErrorDescriptor, normalize
from .route_adapter import GatewayRoute, RouteAdapter

__all__ = [
    "EnvelopePolicy",
    "ErrorDescriptor",
    "GatewayRoute",
    "RouteAdapter",
    "normalize",
]
