"""
Identity gateway service.
"""

from typing import Any, Dict, Optional

import httpx
from fastapi import Body, Header
from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig
from .models import GatewayResult, LoginRequest, LogoutRequest, ResetPasswordRequest, SignupRequest
from .provider import ProviderClient
from .translator import IdentityGatewayTranslator

SERVICE_NAME = "identity"
SERVICE_PORT = 8020


def _respond(result: GatewayResult) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.body)


class IdentityGatewayService(BaseService):
    """Identity gateway service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        super().__init__(SERVICE_NAME, SERVICE_PORT, config=config)
        self.provider = ProviderClient(self.config, metrics=self.metrics, transport=transport)
        self.translator = IdentityGatewayTranslator(self.config, self.provider, metrics=self.metrics)

        self._setup_identity_routes()

    def _setup_identity_routes(self):
        """Set up /auth routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": SERVICE_NAME,
                "message": "Identity Gateway - Auth Service",
                "version": "1.0.0"
            }

        @self.app.post("/auth/signup", status_code=201)
        async def signup(request: Optional[SignupRequest] = None):
            """Create a user account."""
            return _respond(await self.translator.signup(request or SignupRequest()))

        @self.app.post("/auth/login")
        async def login(request: Optional[LoginRequest] = None):
            """Exchange credentials for tokens."""
            return _respond(await self.translator.login(request or LoginRequest()))

        @self.app.get("/auth/profile")
        async def get_profile(authorization: Optional[str] = Header(None)):
            """Fetch the caller's profile."""
            return _respond(await self.translator.get_profile(authorization))

        @self.app.put("/auth/profile")
        async def update_profile(
            authorization: Optional[str] = Header(None),
            body: Optional[Dict[str, Any]] = Body(None)
        ):
            """Update allow-listed profile fields."""
            return _respond(await self.translator.update_profile(authorization, body or {}))

        @self.app.post("/auth/reset-password")
        async def reset_password(request: Optional[ResetPasswordRequest] = None):
            """Trigger a password reset email."""
            return _respond(await self.translator.reset_password(request or ResetPasswordRequest()))

        @self.app.post("/auth/logout")
        async def logout(request: Optional[LogoutRequest] = None):
            """Revoke an access token."""
            return _respond(await self.translator.logout(request or LogoutRequest()))

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check the identity provider."""
        return {"identity_provider": await self.provider.check_health()}


def create_app(
    config: Optional[ServiceConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
):
    """Create FastAPI application."""
    service = IdentityGatewayService(config=config, transport=transport)
    return service.app


if __name__ == "__main__":
    service = IdentityGatewayService()
    service.run()
