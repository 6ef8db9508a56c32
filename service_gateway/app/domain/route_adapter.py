"""
Route adapters: bind one inbound gateway route to a backend forwarder.

An adapter resolves path parameters (which may arrive as an awaitable),
builds the backend path and query string from the route declaration, forwards
the call, and shapes the answer with the route's envelope policy.
"""

import inspect
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, Mapping, Optional, Tuple, Union
from urllib.parse import quote, urlencode

from fastapi import Request
from fastapi.responses import JSONResponse

from shared.errors import InvalidRequestBody
from shared.logging import get_logger, set_route
from shared.metrics import MetricsCollector

from ..adapters.backend_client import Forwarder, OutboundRequest
from .envelopes import EnvelopePolicy
from .error_normalizer import normalize

PathParams = Union[Mapping[str, Any], Awaitable[Mapping[str, Any]]]

NO_STORE_HEADERS = {"Cache-Control": "no-store"}


@dataclass(frozen=True)
class GatewayRoute:
    """Declaration of a single gateway route."""

    name: str
    path: str
    backend_path: str
    pool: str
    method: str = "GET"
    envelope: EnvelopePolicy = EnvelopePolicy.WRAPPED
    # Forwarded query parameters in order; None means "only when supplied"
    query: Tuple[Tuple[str, Optional[str]], ...] = ()
    forward_body: bool = False
    forward_headers: Tuple[str, ...] = ()
    summary: str = ""
    tags: Tuple[str, ...] = ()


async def resolve_path_params(params: Optional[PathParams]) -> Dict[str, str]:
    """Await deferred path parameters and return them as plain strings."""
    if params is None:
        return {}
    if inspect.isawaitable(params):
        params = await params
    return {key: str(value) for key, value in dict(params).items()}


class RouteAdapter:
    """Forwards one gateway route to its backend pool."""

    def __init__(
        self,
        route: GatewayRoute,
        forwarder: Forwarder,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.route = route
        self.forwarder = forwarder
        self.metrics = metrics
        self.logger = get_logger(f"gateway.routes.{route.name}")

    def build_query(self, supplied: Mapping[str, str]) -> str:
        """Render the declared query parameters, applying route defaults."""
        pairs = []
        for name, default in self.route.query:
            value = supplied.get(name)
            if value is None:
                value = default
            if value is not None:
                pairs.append((name, value))
        return urlencode(pairs)

    def build_backend_path(self, path_params: Mapping[str, str], supplied_query: Mapping[str, str]) -> str:
        """Interpolate path parameters into the backend template and append the query."""
        quoted = {key: quote(value, safe="") for key, value in path_params.items()}
        path = self.route.backend_path.format(**quoted)
        query = self.build_query(supplied_query)
        if query:
            return f"{path}?{query}"
        return path

    async def read_body(self, request: Request) -> Any:
        raw = await request.body()
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise InvalidRequestBody() from exc

    def outbound_headers(self, request: Request) -> Dict[str, str]:
        headers = {}
        for name in self.route.forward_headers:
            value = request.headers.get(name)
            if value:
                headers[name] = value
        return headers

    async def handle(self, request: Request, path_params: Optional[PathParams] = None) -> JSONResponse:
        """Serve one inbound request."""
        set_route(self.route.name)
        if path_params is None:
            path_params = request.path_params

        try:
            resolved = await resolve_path_params(path_params)
            backend_path = self.build_backend_path(resolved, request.query_params)
            options = OutboundRequest(
                method=self.route.method,
                body=await self.read_body(request) if self.route.forward_body else None,
                headers=self.outbound_headers(request),
            )
            payload = await self.forwarder.forward(backend_path, options)
        except Exception as exc:
            error = normalize(exc)
            self.logger.error(
                "Gateway route failed",
                route=self.route.name,
                status=error.status,
                message=error.message,
                code=error.code,
            )
            if self.metrics:
                self.metrics.record_route_failure(self.route.name, error.status)
            return JSONResponse(
                status_code=error.status,
                content=self.route.envelope.failure(error),
                headers=NO_STORE_HEADERS,
            )

        return JSONResponse(
            status_code=200,
            content=self.route.envelope.success(payload),
            headers=NO_STORE_HEADERS,
        )
