"""
Shared utilities for the dashboard gateway.

This package aggregates common building blocks consumed by all services:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request and trace correlation
- metrics: Prometheus metrics helpers
- errors: Canonical gateway error types
- base_service: FastAPI service skeleton with health, metrics and error handlers

Any cross-service logic should live here to avoid import cycles across
service packages. Do not import from service_* packages into shared/.
"""
