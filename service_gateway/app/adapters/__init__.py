"""
Adapters package for the Gateway Service.

Contains the HTTP client that forwards gateway calls to a backend pool.
The client encapsulates:

- Base URL and service credential of its pool
- Translation of every failure into a shared ``GatewayError``

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .backend_client import BackendClient, Forwarder, OutboundRequest

__all__ = [
    "BackendClient",
    "Forwarder",
    "OutboundRequest",
]
