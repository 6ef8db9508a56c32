"""
API Gateway service for the dashboard.
"""

from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

import httpx
from fastapi import Request
from fastapi.routing import APIRoute

from shared.base_service import BaseService
from shared.config import ServiceConfig

from .adapters.backend_client import BackendClient, Forwarder
from .domain.route_adapter import GatewayRoute, RouteAdapter
from .domain.route_catalog import BACKEND_POOL, GENERAL_ROUTES, PR_POOL, PR_ROUTES


class GatewayService(BaseService):
    """API Gateway service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        forwarders: Optional[Dict[str, Forwarder]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__("gateway", 8000, config=config)

        if forwarders is None:
            forwarders = {
                BACKEND_POOL: BackendClient(self.config.backend_pool(), metrics=self.metrics, transport=transport),
                PR_POOL: BackendClient(self.config.pr_backend_pool(), metrics=self.metrics, transport=transport),
            }
        self.forwarders = forwarders
        self.route_adapters: Dict[str, RouteAdapter] = {}

        @self.app.on_event("shutdown")
        async def _shutdown():
            for forwarder in self.forwarders.values():
                close = getattr(forwarder, "close", None)
                if close is not None:
                    await close()

        self._setup_gateway_routes()
        self._setup_general_routes()
        self._setup_pr_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.gateway_service = self

    def _format_iso(self, value: datetime) -> str:
        return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")

    def _setup_gateway_routes(self):
        """Set up gateway-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "gateway",
                "message": "Dashboard API Gateway",
                "version": "1.0.0"
            }

        @self.app.get("/api/v1/metadata/routes")
        async def list_gateway_routes():
            """Return metadata for registered API routes."""
            routes_payload = []
            for route in self.app.router.routes:
                if not isinstance(route, APIRoute):
                    continue
                if route.path.startswith("/openapi") or route.path.startswith("/docs"):
                    continue
                methods = sorted(m for m in (route.methods or set()) if m not in {"HEAD", "OPTIONS"})
                adapter = self.route_adapters.get(route.name)
                routes_payload.append(
                    {
                        "path": route.path,
                        "methods": methods,
                        "name": route.name,
                        "summary": route.summary,
                        "tags": list(route.tags or []),
                        "pool": adapter.route.pool if adapter else None,
                        "envelope": adapter.route.envelope.value if adapter else None,
                    }
                )

            routes_payload.sort(key=lambda item: item["path"])
            return {
                "count": len(routes_payload),
                "routes": routes_payload,
                "generated_at": self._format_iso(datetime.now(timezone.utc)),
            }

    def _setup_general_routes(self):
        """Set up routes served by the general backend pool."""
        self._register_routes(GENERAL_ROUTES)

    def _setup_pr_routes(self):
        """Set up PR routes; these echo the backend payload unwrapped."""
        self._register_routes(PR_ROUTES)

    def _register_routes(self, routes: Iterable[GatewayRoute]):
        for route in routes:
            adapter = RouteAdapter(route, self.forwarders[route.pool], metrics=self.metrics)
            self.route_adapters[route.name] = adapter
            self.app.add_api_route(
                route.path,
                self._make_endpoint(adapter),
                methods=[route.method],
                name=route.name,
                summary=route.summary or None,
                tags=list(route.tags),
            )

    def _make_endpoint(self, adapter: RouteAdapter):
        async def endpoint(request: Request):
            return await adapter.handle(request)

        endpoint.__name__ = adapter.route.name
        endpoint.__doc__ = adapter.route.summary
        return endpoint

    async def _check_dependencies(self):
        """Report the configured backend pools."""
        return {name: "configured" for name in self.forwarders}


def create_app(
    config: Optional[ServiceConfig] = None,
    forwarders: Optional[Dict[str, Forwarder]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
):
    """Create FastAPI application."""
    service = GatewayService(config=config, forwarders=forwarders, transport=transport)
    return service.app


if __name__ == "__main__":
    service = GatewayService()
    service.run()
