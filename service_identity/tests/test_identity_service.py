"""
Tests for the Identity gateway service HTTP surface.
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from service_identity.app.main import IdentityGatewayService
from shared.test_helpers import RecordingTransport, TestDataFactory, create_test_config, json_response


class FakeProvider:
    """Routes provider requests to canned responses by path."""

    def __init__(self):
        self.routes = {}

    def on(self, method: str, path: str, response: httpx.Response):
        self.routes[(method, path)] = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        response = self.routes.get((request.method, request.url.path))
        if response is None:
            return json_response(404, {"errorCode": "E0000007", "errorSummary": "Not found", "errorCauses": []})
        return response


@pytest.fixture
def user():
    """A test user."""
    return TestDataFactory.create_test_users()[0]


@pytest.fixture
def fake_provider():
    """Canned provider."""
    return FakeProvider()


@pytest.fixture
def transport(fake_provider):
    """Transport that records provider calls."""
    return RecordingTransport(fake_provider)


@pytest.fixture
def service(transport):
    """Gateway service wired to the fake provider."""
    return IdentityGatewayService(config=create_test_config(), transport=transport)


@pytest.fixture
def client(service):
    """Create test client."""
    return TestClient(service.app)


def test_root_endpoint(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "identity"
    assert data["version"] == "1.0.0"


def test_health_check(client, fake_provider, transport):
    """Health reports the provider dependency."""
    fake_provider.on("GET", "/.well-known/openid-configuration", json_response(200, {"issuer": "x"}))

    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "identity"
    assert data["status"] == "ok"
    assert data["dependencies"] == {"identity_provider": "ok"}
    assert transport.paths() == ["/.well-known/openid-configuration"]


def test_health_check_provider_down(client):
    """An unreachable provider is reported, not raised."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["dependencies"] == {"identity_provider": "error"}


def test_metrics_endpoint(client):
    """Prometheus exposition includes request counters."""
    client.get("/")
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "http_requests_total" in response.text
    assert "upstream_requests_total" in response.text


def test_request_id_is_echoed(client):
    """Caller-supplied request ids are returned."""
    response = client.get("/", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_request_id_is_generated(client):
    """A request id is assigned when none is supplied."""
    response = client.get("/")
    assert response.headers["X-Request-ID"]


@pytest.mark.parametrize("method,path,kwargs,status,message", [
    ("POST", "/auth/signup", {"json": {"firstName": "John", "lastName": "Doe", "email": "j@example.com"}},
     400, "Missing required fields"),
    ("POST", "/auth/signup", {}, 400, "Missing required fields"),
    ("POST", "/auth/login", {"json": {"username": "john"}}, 400, "Username and password are required"),
    ("GET", "/auth/profile", {}, 401, "No token provided"),
    ("GET", "/auth/profile", {"headers": {"Authorization": "Token abc"}}, 401, "No token provided"),
    ("PUT", "/auth/profile", {"json": {"firstName": "Ada"}}, 401, "No token provided"),
    ("POST", "/auth/reset-password", {"json": {}}, 400, "Email is required"),
    ("POST", "/auth/logout", {"json": {"token": ""}}, 400, "Token is required"),
])
def test_missing_input_makes_no_provider_call(client, transport, method, path, kwargs, status, message):
    """Missing input is rejected locally."""
    response = client.request(method, path, **kwargs)

    assert response.status_code == status
    assert response.json() == {"success": False, "message": message}
    assert transport.requests == []


def test_malformed_json_body(client, transport):
    """Unparseable bodies are a 400 envelope."""
    response = client.post(
        "/auth/login",
        content="{not json",
        headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid request body"}
    assert transport.requests == []


def test_signup_success(client, fake_provider, user):
    """Signup returns 201 with the provider's id."""
    fake_provider.on("POST", "/api/v1/users", json_response(200, TestDataFactory.create_created_user(user)))

    response = client.post("/auth/signup", json={
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "password": user.password
    })

    assert response.status_code == 201
    assert response.json() == {"success": True, "message": "User created successfully", "userId": user.user_id}


def test_signup_validation_error(client, fake_provider, user):
    """Provider causes are surfaced on signup."""
    body = TestDataFactory.create_validation_error(
        "Api validation failed: login",
        ["login: An object with this field already exists in the current organization"]
    )
    fake_provider.on("POST", "/api/v1/users", json_response(400, body))

    response = client.post("/auth/signup", json={
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "password": user.password
    })

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "Api validation failed: login",
        "errors": body["errorCauses"]
    }


def test_login_failure_does_not_leak(client, fake_provider):
    """Whatever the provider says, login failures look the same."""
    fake_provider.on("POST", "/oauth2/v1/token", json_response(400, TestDataFactory.create_oauth_error()))

    response = client.post("/auth/login", json={"username": "john@example.com", "password": "wrong"})

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Authentication failed"}


def test_login_success(client, fake_provider, transport, user):
    """Login returns the provider's tokens."""
    tokens = TestDataFactory.create_token_response(user)
    fake_provider.on("POST", "/oauth2/v1/token", json_response(200, tokens))

    response = client.post("/auth/login", json={"username": user.email, "password": user.password})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["token"] == tokens["access_token"]
    assert data["id_token"] == tokens["id_token"]
    assert data["expires_in"] == 3600
    assert transport.paths() == ["/oauth2/v1/token"]


def test_get_profile(client, fake_provider, user):
    """Profile is the provider's userinfo."""
    claims = TestDataFactory.create_userinfo(user)
    fake_provider.on("GET", "/oauth2/v1/userinfo", json_response(200, claims))

    response = client.get("/auth/profile", headers={"Authorization": "Bearer caller-token"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "profile": claims}


def test_update_profile_sequence(client, fake_provider, transport, user):
    """Userinfo resolves the subject, then one patch carries only mapped fields."""
    fake_provider.on("GET", "/oauth2/v1/userinfo", json_response(200, TestDataFactory.create_userinfo(user)))
    fake_provider.on(
        "POST", f"/api/v1/users/{user.user_id}", json_response(200, TestDataFactory.create_created_user(user))
    )

    response = client.put(
        "/auth/profile",
        json={"firstName": "Johnny", "role": "admin"},
        headers={"Authorization": "Bearer caller-token"}
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Profile updated successfully"}
    assert transport.paths() == ["/oauth2/v1/userinfo", f"/api/v1/users/{user.user_id}"]
    assert json.loads(transport.requests[1].content) == {"profile": {"firstName": "Johnny"}}


def test_update_profile_invalid_token(client, fake_provider, transport):
    """A rejected token stops before the patch."""
    fake_provider.on("GET", "/oauth2/v1/userinfo", json_response(401, {"error": "invalid_token"}))

    response = client.put(
        "/auth/profile",
        json={"firstName": "Johnny"},
        headers={"Authorization": "Bearer bogus"}
    )

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Invalid token"}
    assert transport.paths() == ["/oauth2/v1/userinfo"]


def test_update_profile_no_valid_fields(client, fake_provider, transport, user):
    """Only unrecognized fields is a 400 without a patch."""
    fake_provider.on("GET", "/oauth2/v1/userinfo", json_response(200, TestDataFactory.create_userinfo(user)))

    response = client.put(
        "/auth/profile",
        json={"role": "admin"},
        headers={"Authorization": "Bearer caller-token"}
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "No valid fields to update"}
    assert transport.paths() == ["/oauth2/v1/userinfo"]


def test_reset_password_hides_account_existence(client, fake_provider):
    """Unknown accounts fail with the same 400 as any other failure."""
    response = client.post("/auth/reset-password", json={"email": "nobody@example.com"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Failed to send password reset email"}


def test_reset_password_success(client, fake_provider):
    """Reset reports success when the provider accepts it."""
    fake_provider.on(
        "POST", "/api/v1/users/john.doe@example.com/lifecycle/reset_password", json_response(200, {})
    )

    response = client.post("/auth/reset-password", json={"email": "john.doe@example.com"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Password reset email sent"}


def test_logout(client, fake_provider):
    """Logout revokes the token."""
    fake_provider.on("POST", "/oauth2/v1/revoke", json_response(200))

    response = client.post("/auth/logout", json={"token": "caller-token"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Logged out successfully"}


def test_logout_failure(client, fake_provider):
    """Revocation failure is a 500."""
    fake_provider.on("POST", "/oauth2/v1/revoke", httpx.Response(503, text="Service Unavailable"))

    response = client.post("/auth/logout", json={"token": "caller-token"})

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Failed to logout"}


def test_business_events_counted(client, fake_provider, service):
    """Successful operations are counted as business events."""
    fake_provider.on("POST", "/oauth2/v1/revoke", json_response(200))

    client.post("/auth/logout", json={"token": "caller-token"})

    assert service.metrics.sample_value(
        "business_events_total", {"event_type": "user_logged_out", "service": "identity"}
    ) == 1.0


def test_login_with_non_object_token_body(client, fake_provider):
    """An unusable token response is an authentication failure, not a 500."""
    fake_provider.on("POST", "/oauth2/v1/token", json_response(200, "ok"))

    response = client.post("/auth/login", json={"username": "john@example.com", "password": "Password123!"})

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Authentication failed"}


def test_profile_with_non_object_userinfo_body(client, fake_provider):
    """An unusable userinfo response is a 401, not a 500."""
    fake_provider.on("GET", "/oauth2/v1/userinfo", json_response(200, ["not", "an", "object"]))

    response = client.get("/auth/profile", headers={"Authorization": "Bearer caller-token"})

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Failed to fetch user profile"}
