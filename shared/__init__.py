"""
Shared utilities for the identity gateway.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Error types and the response envelope
- base_service: FastAPI service skeleton with health and metrics routes

Do not import from service_* packages into shared/.
"""
