"""
Mock identity provider exposing the user management and OAuth2 endpoints
the identity gateway consumes.
"""

import time
import uuid
import jwt
from typing import Dict, Any, List, Optional, Set
from fastapi import Body, FastAPI, Form, Header, Query
from fastapi.responses import JSONResponse, Response

from shared.logging import get_logger

MIN_PASSWORD_LENGTH = 8


def okta_error(status_code: int, code: str, summary: str, causes: Optional[List[str]] = None) -> JSONResponse:
    """Error body in the provider's shape."""
    return JSONResponse(
        status_code=status_code,
        content={
            "errorCode": code,
            "errorSummary": summary,
            "errorLink": code,
            "errorId": f"oae{uuid.uuid4().hex[:20]}",
            "errorCauses": [{"errorSummary": cause} for cause in (causes or [])]
        }
    )


def validation_summary(causes: List[str]) -> str:
    """Summary naming the fields that failed, in cause order."""
    fields = list(dict.fromkeys(cause.split(":", 1)[0] for cause in causes))
    return f"Api validation failed: {', '.join(fields)}"


def oauth_error(status_code: int, error: str, description: str) -> JSONResponse:
    """Error body in the OAuth2 shape (no errorCauses)."""
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "error_description": description}
    )


class MockIdentityProvider:
    """Mock identity provider implementation."""

    def __init__(
        self,
        api_token: str = "mock-api-token",
        client_id: str = "gateway-client",
        client_secret: str = "gateway-secret",
        port: int = 8090
    ):
        self.port = port
        self.logger = get_logger("mock.identity_provider")
        self.app = FastAPI(title="Mock Identity Provider", version="1.0.0")

        self.api_token = api_token
        self.client_id = client_id
        self.client_secret = client_secret
        self.issuer = f"http://localhost:{port}"
        self.signing_key = "mock-signing-key"

        self.users: Dict[str, Dict[str, Any]] = {}
        self.revoked_tokens: Set[str] = set()
        self.reset_requests: List[str] = []

        self._setup_routes()

    def add_user(self, first_name: str, last_name: str, email: str, password: str) -> Dict[str, Any]:
        """Create an active user directly."""
        user_id = f"00u{uuid.uuid4().hex[:17]}"
        now = time.strftime("%Y-%m-%dT%H:%M:%S.000Z", time.gmtime())
        user = {
            "id": user_id,
            "status": "ACTIVE",
            "created": now,
            "lastUpdated": now,
            "profile": {
                "firstName": first_name,
                "lastName": last_name,
                "email": email,
                "login": email
            },
            "_password": password
        }
        self.users[user_id] = user
        return user

    def find_user(self, id_or_login: str) -> Optional[Dict[str, Any]]:
        """Look a user up by id or by login, as the provider does."""
        if id_or_login in self.users:
            return self.users[id_or_login]
        for user in self.users.values():
            if user["profile"]["login"] == id_or_login:
                return user
        return None

    @staticmethod
    def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
        return {key: value for key, value in user.items() if not key.startswith("_")}

    def _authorized(self, authorization: Optional[str]) -> bool:
        return authorization == f"SSWS {self.api_token}"

    def _client_valid(self, client_id: str, client_secret: str) -> bool:
        return client_id == self.client_id and client_secret == self.client_secret

    def issue_tokens(self, user: Dict[str, Any], scope: str) -> Dict[str, Any]:
        """Sign an access token and an ID token for a user."""
        now = int(time.time())
        claims = {
            "iss": self.issuer,
            "sub": user["id"],
            "aud": self.client_id,
            "iat": now,
            "exp": now + 3600,
            "jti": uuid.uuid4().hex,
            "scp": scope.split()
        }
        id_claims = {
            "iss": self.issuer,
            "sub": user["id"],
            "aud": self.client_id,
            "iat": now,
            "exp": now + 3600,
            "email": user["profile"]["email"],
            "preferred_username": user["profile"]["login"]
        }
        return {
            "token_type": "Bearer",
            "expires_in": 3600,
            "access_token": jwt.encode(claims, self.signing_key, algorithm="HS256"),
            "id_token": jwt.encode(id_claims, self.signing_key, algorithm="HS256"),
            "scope": scope
        }

    def _user_for_token(self, token: str) -> Optional[Dict[str, Any]]:
        if token in self.revoked_tokens:
            return None
        try:
            claims = jwt.decode(token, self.signing_key, algorithms=["HS256"], audience=self.client_id)
        except jwt.InvalidTokenError:
            return None
        return self.users.get(claims.get("sub"))

    def _setup_routes(self):
        """Set up mock provider routes."""

        @self.app.get("/.well-known/openid-configuration")
        async def openid_configuration():
            """OpenID Connect discovery document."""
            return {
                "issuer": self.issuer,
                "token_endpoint": f"{self.issuer}/oauth2/v1/token",
                "userinfo_endpoint": f"{self.issuer}/oauth2/v1/userinfo",
                "revocation_endpoint": f"{self.issuer}/oauth2/v1/revoke",
                "grant_types_supported": ["password"],
                "scopes_supported": ["openid", "profile", "email"]
            }

        @self.app.post("/api/v1/users")
        async def create_user(
            payload: Dict[str, Any] = Body(...),
            activate: bool = Query(True),
            authorization: Optional[str] = Header(None)
        ):
            """Create a user with profile and password credentials."""
            if not self._authorized(authorization):
                return okta_error(401, "E0000011", "Invalid token provided")

            profile = payload.get("profile") or {}
            password = ((payload.get("credentials") or {}).get("password") or {}).get("value") or ""

            causes = []
            if not profile.get("login"):
                causes.append("login: The field cannot be left blank")
            elif self.find_user(profile["login"]):
                causes.append("login: An object with this field already exists in the current organization")
            if len(password) < MIN_PASSWORD_LENGTH:
                causes.append(
                    f"password: Password requirements were not met. "
                    f"Password requirements: at least {MIN_PASSWORD_LENGTH} characters."
                )
            if causes:
                return okta_error(400, "E0000001", validation_summary(causes), causes)

            user = self.add_user(
                profile.get("firstName", ""),
                profile.get("lastName", ""),
                profile.get("email", ""),
                password
            )
            if not activate:
                user["status"] = "STAGED"
            self.logger.info("User created", user_id=user["id"])
            return self.public_user(user)

        @self.app.post("/api/v1/users/{user_id}")
        async def update_user(
            user_id: str,
            payload: Dict[str, Any] = Body(...),
            authorization: Optional[str] = Header(None)
        ):
            """Partial profile update."""
            if not self._authorized(authorization):
                return okta_error(401, "E0000011", "Invalid token provided")

            user = self.find_user(user_id)
            if user is None:
                return okta_error(404, "E0000007", f"Not found: Resource not found: {user_id} (User)")

            changes = payload.get("profile") or {}
            login = changes.get("login")
            if login and login != user["profile"]["login"] and self.find_user(login):
                causes = ["login: An object with this field already exists in the current organization"]
                return okta_error(400, "E0000001", validation_summary(causes), causes)

            user["profile"].update(changes)
            user["lastUpdated"] = time.strftime("%Y-%m-%dT%H:%M:%S.000Z", time.gmtime())
            return self.public_user(user)

        @self.app.post("/api/v1/users/{login}/lifecycle/reset_password")
        async def reset_password(
            login: str,
            sendEmail: bool = Query(True),
            authorization: Optional[str] = Header(None)
        ):
            """Start the reset-password lifecycle."""
            if not self._authorized(authorization):
                return okta_error(401, "E0000011", "Invalid token provided")

            user = self.find_user(login)
            if user is None:
                return okta_error(404, "E0000007", f"Not found: Resource not found: {login} (User)")

            user["status"] = "RECOVERY"
            self.reset_requests.append(user["id"])
            if sendEmail:
                return {}
            return {"resetPasswordUrl": f"{self.issuer}/reset_password/{uuid.uuid4().hex}"}

        @self.app.post("/oauth2/v1/token")
        async def token_endpoint(
            grant_type: str = Form(...),
            client_id: str = Form(""),
            client_secret: str = Form(""),
            username: Optional[str] = Form(None),
            password: Optional[str] = Form(None),
            scope: str = Form("openid")
        ):
            """Token endpoint (password grant only)."""
            if not self._client_valid(client_id, client_secret):
                return oauth_error(401, "invalid_client", "Client authentication failed.")

            if grant_type != "password":
                return oauth_error(400, "unsupported_grant_type", "The grant type is not supported.")

            user = self.find_user(username or "")
            if user is None or user["_password"] != password or user["status"] != "ACTIVE":
                return oauth_error(400, "invalid_grant", "The credentials provided were invalid.")

            return self.issue_tokens(user, scope)

        @self.app.get("/oauth2/v1/userinfo")
        async def userinfo_endpoint(authorization: Optional[str] = Header(None)):
            """Claims for a bearer access token."""
            token = (authorization or "").partition("Bearer ")[2]
            user = self._user_for_token(token)
            if user is None:
                return oauth_error(401, "invalid_token", "The access token is invalid.")

            profile = user["profile"]
            return {
                "sub": user["id"],
                "name": f"{profile.get('firstName', '')} {profile.get('lastName', '')}".strip(),
                "given_name": profile.get("firstName"),
                "family_name": profile.get("lastName"),
                "email": profile.get("email"),
                "preferred_username": profile.get("login"),
                "locale": profile.get("locale"),
                "zoneinfo": profile.get("timezone")
            }

        @self.app.post("/oauth2/v1/revoke")
        async def revoke_endpoint(
            token: str = Form(...),
            client_id: str = Form(""),
            client_secret: str = Form(""),
            token_type_hint: Optional[str] = Form(None)
        ):
            """Token revocation; unknown tokens are accepted silently."""
            if not self._client_valid(client_id, client_secret):
                return oauth_error(401, "invalid_client", "Client authentication failed.")

            self.revoked_tokens.add(token)
            return Response(status_code=200)


def create_app():
    """Create mock identity provider application."""
    server = MockIdentityProvider()
    return server.app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8090)
