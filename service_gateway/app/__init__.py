"""
API Gateway Service package for the dashboard.

The gateway is the only entry point external clients address. Every route
forwards to an internal backend pool and answers with a normalized envelope:

- Forwarding: one outbound call per inbound request, via a backend client
- Error normalization: any failure becomes ``{status, message, code}``
- Envelopes: wrapped ``{success, data}`` or raw pass-through, per route

Structure:
- app.main: FastAPI app, route registration, and service wiring.
- app.adapters: HTTP clients for the backend pools.
- app.domain: Error normalizer, envelope policies, route adapters and catalogue.
"""
