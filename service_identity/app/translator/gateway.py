"""
Translation between caller requests and identity provider calls.

Each operation validates the caller's input, performs at most two provider
calls and returns a :class:`GatewayResult`. Failures are raised as
:class:`shared.errors.GatewayError` subclasses carrying their HTTP status;
the service's exception handler renders them as the error envelope.

Provider error bodies only reach the caller for signup and profile update,
and only as the provider's structured validation causes. Login, password
reset and logout collapse every provider failure to a fixed message so the
response does not reveal whether an account exists.
"""

from typing import Any, Mapping, Optional

from shared.config import BaseConfig
from shared.errors import (
    AuthenticationError,
    GatewayError,
    ServiceError,
    UpstreamValidationError,
    ValidationError,
)
from shared.logging import get_logger, set_user_context
from shared.metrics import MetricsCollector
from ..models import (
    GatewayResult,
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    MessageResponse,
    ProfileResponse,
    ResetPasswordRequest,
    SignupRequest,
    SignupResponse,
)
from ..provider import ProviderClient, ProviderError, RecognizedProviderError
from .field_map import LOGIN_FIELD, map_profile_fields

BEARER_PREFIX = "Bearer "


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    parts = authorization.split(" ")
    return parts[1] or None


def _provided(*values: Any) -> bool:
    return all(value is not None and value != "" for value in values)


class IdentityGatewayTranslator:
    """Stateless translator for the six gateway operations."""

    def __init__(
        self,
        config: BaseConfig,
        provider: ProviderClient,
        metrics: Optional[MetricsCollector] = None
    ):
        self.config = config
        self.provider = provider
        self.metrics = metrics
        self.logger = get_logger("identity.translator")

    def _business_event(self, event_type: str, **fields):
        self.logger.info(event_type, **fields)
        if self.metrics is not None:
            self.metrics.record_business_event(event_type)

    @staticmethod
    def _validation_error(error: ProviderError, fallback: str) -> GatewayError:
        """Pass recognized provider validation errors through, hide the rest."""
        if isinstance(error, RecognizedProviderError):
            return UpstreamValidationError(error.summary, errors=error.causes)
        return ServiceError(fallback)

    async def signup(self, request: SignupRequest) -> GatewayResult:
        """Create an active user from name, email and password."""
        if not _provided(request.firstName, request.lastName, request.email, request.password):
            raise ValidationError("Missing required fields")

        try:
            user = await self.provider.create_user(
                request.firstName,
                request.lastName,
                request.email,
                request.password
            )
        except ProviderError as e:
            raise self._validation_error(e, "Error creating user account") from e

        self._business_event("user_signed_up", user_id=user.get("id"))
        return GatewayResult.of(201, SignupResponse(
            message="User created successfully",
            userId=user.get("id")
        ))

    async def login(self, request: LoginRequest) -> GatewayResult:
        """Exchange username and password for tokens."""
        if not _provided(request.username, request.password):
            raise ValidationError("Username and password are required")

        try:
            tokens = await self.provider.exchange_password(request.username, request.password)
        except ProviderError as e:
            raise AuthenticationError("Authentication failed") from e

        self._business_event("user_logged_in")
        return GatewayResult.of(200, LoginResponse(
            message="Login successful",
            token=tokens.get("access_token"),
            id_token=tokens.get("id_token"),
            expires_in=tokens.get("expires_in")
        ))

    async def get_profile(self, authorization: Optional[str]) -> GatewayResult:
        """Return the provider's userinfo claims for the bearer token."""
        token = parse_bearer_token(authorization)
        if token is None:
            raise AuthenticationError("No token provided")

        try:
            profile = await self.provider.get_userinfo(token)
        except ProviderError as e:
            raise AuthenticationError("Failed to fetch user profile") from e

        set_user_context(profile.get("sub"))
        return GatewayResult.of(200, ProfileResponse(profile=profile))

    async def update_profile(self, authorization: Optional[str], body: Mapping[str, Any]) -> GatewayResult:
        """Resolve the caller from the token, then patch allow-listed fields."""
        token = parse_bearer_token(authorization)
        if token is None:
            raise AuthenticationError("No token provided")

        try:
            user_info = await self.provider.get_userinfo(token)
        except ProviderError as e:
            raise AuthenticationError("Invalid token") from e

        user_id = user_info.get("sub")
        if not user_id:
            raise AuthenticationError("Invalid token")
        set_user_context(user_id)

        profile = map_profile_fields(body)
        if not profile:
            raise ValidationError("No valid fields to update")

        login = body.get(LOGIN_FIELD)
        if login:
            if self.config.allow_login_change:
                # Forwarded without the extra verification the provider may require.
                self.logger.warning("Forwarding unverified login change", user_id=user_id)
                profile[LOGIN_FIELD] = login
            else:
                self.logger.warning("Dropping login change", user_id=user_id)

        try:
            await self.provider.update_user(user_id, profile)
        except ProviderError as e:
            raise self._validation_error(e, "Failed to update profile") from e

        self._business_event("profile_updated", user_id=user_id, fields=sorted(profile))
        return GatewayResult.of(200, MessageResponse(message="Profile updated successfully"))

    async def reset_password(self, request: ResetPasswordRequest) -> GatewayResult:
        """Ask the provider to email a password reset link."""
        if not _provided(request.email):
            raise ValidationError("Email is required")

        try:
            await self.provider.reset_password(request.email)
        except ProviderError as e:
            raise ValidationError("Failed to send password reset email") from e

        self._business_event("password_reset_requested")
        return GatewayResult.of(200, MessageResponse(message="Password reset email sent"))

    async def logout(self, request: LogoutRequest) -> GatewayResult:
        """Revoke the caller's access token."""
        if not _provided(request.token):
            raise ValidationError("Token is required")

        try:
            await self.provider.revoke_token(request.token)
        except ProviderError as e:
            raise ServiceError("Failed to logout") from e

        self._business_event("user_logged_out")
        return GatewayResult.of(200, MessageResponse(message="Logged out successfully"))
