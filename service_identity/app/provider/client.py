"""
HTTP client for the upstream identity provider.
"""

import time
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from shared.config import BaseConfig
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from .errors import ProviderError, UnrecognizedProviderError, decode_provider_error


class ProviderClient:
    """Client for the identity provider's management and OAuth2 APIs."""

    def __init__(
        self,
        config: BaseConfig,
        metrics: Optional[MetricsCollector] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = config.provider_base_url
        self.api_token = config.provider_api_token
        self.client_id = config.client_id
        self.client_secret = config.client_secret
        self.scope = config.login_scope
        self.timeout = config.provider_timeout
        self.metrics = metrics
        self.transport = transport
        self.logger = get_logger("identity.provider_client")

    @property
    def management_headers(self) -> Dict[str, str]:
        """Headers for /api/v1 calls."""
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"SSWS {self.api_token}"
        }

    async def _request(self, operation: str, method: str, path: str, **kwargs) -> httpx.Response:
        """Send one request and decode any failure into a ProviderError."""
        start_time = time.time()
        outcome = "error"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(method, f"{self.base_url}{path}", **kwargs)

            if response.is_success:
                outcome = "success"
                return response

            error = decode_provider_error(response)
            outcome = "rejected"
            self.logger.warning(
                "Identity provider rejected request",
                operation=operation,
                status_code=response.status_code,
                provider_error=error.body
            )
            raise error

        except httpx.HTTPError as e:
            self.logger.error("Identity provider HTTP error", operation=operation, error=str(e))
            raise UnrecognizedProviderError(None, str(e)) from e

        finally:
            if self.metrics is not None:
                self.metrics.record_upstream_request(operation, outcome, time.time() - start_time)

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as e:
            raise UnrecognizedProviderError(response.status_code, response.text) from e
        if not isinstance(body, dict):
            raise UnrecognizedProviderError(response.status_code, body)
        return body

    async def create_user(self, first_name: str, last_name: str, email: str, password: str) -> Dict[str, Any]:
        """Create and activate a user; the email doubles as the login."""
        payload = {
            "profile": {
                "firstName": first_name,
                "lastName": last_name,
                "email": email,
                "login": email
            },
            "credentials": {
                "password": {"value": password}
            }
        }
        response = await self._request(
            "create_user",
            "POST",
            "/api/v1/users",
            params={"activate": "true"},
            json=payload,
            headers=self.management_headers
        )
        return self._json(response)

    async def exchange_password(self, username: str, password: str) -> Dict[str, Any]:
        """Resource owner password grant against the token endpoint."""
        response = await self._request(
            "token",
            "POST",
            "/oauth2/v1/token",
            data={
                "username": username,
                "password": password,
                "grant_type": "password",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "scope": self.scope
            },
            headers={"Accept": "application/json"}
        )
        return self._json(response)

    async def get_userinfo(self, token: str) -> Dict[str, Any]:
        """Fetch OIDC claims for a bearer token."""
        response = await self._request(
            "userinfo",
            "GET",
            "/oauth2/v1/userinfo",
            headers={"Authorization": f"Bearer {token}"}
        )
        return self._json(response)

    async def update_user(self, user_id: str, profile: Dict[str, Any]) -> Dict[str, Any]:
        """Partial profile update; only the given fields change."""
        response = await self._request(
            "update_user",
            "POST",
            f"/api/v1/users/{quote(user_id, safe='')}",
            json={"profile": profile},
            headers=self.management_headers
        )
        return self._json(response)

    async def reset_password(self, login: str) -> Dict[str, Any]:
        """Start the reset-password lifecycle and have the provider email the user."""
        response = await self._request(
            "reset_password",
            "POST",
            f"/api/v1/users/{quote(login, safe='@')}/lifecycle/reset_password",
            params={"sendEmail": "true"},
            json={},
            headers=self.management_headers
        )
        return self._json(response)

    async def revoke_token(self, token: str) -> None:
        """Revoke an access token."""
        await self._request(
            "revoke",
            "POST",
            "/oauth2/v1/revoke",
            data={
                "token": token,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "token_type_hint": "access_token"
            }
        )

    async def check_health(self) -> str:
        """Probe the provider's discovery document."""
        try:
            await self._request("discovery", "GET", "/.well-known/openid-configuration")
        except ProviderError:
            return "error"
        return "ok"
