"""
Identity Gateway service package.

This package exposes the FastAPI application that fronts the upstream
identity provider for signup, login, profile, password reset and logout.

- app.main: Application entrypoint that wires the /auth routes.
- app.translator: Caller request validation, profile field mapping and
  response normalization.
- app.provider: HTTP client for the identity provider and the decoding of
  its error bodies.

Design notes:
- Module import must not perform network calls; provider IO happens only
  inside route handlers and the health check.
- The service is stateless. Users, credentials and tokens live in the
  provider; configuration is passed in explicitly.
"""
