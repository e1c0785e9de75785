"""
Unit tests for the auth API routes.

Runs the real AuthService on the in-memory repository behind a FastAPI
TestClient, overriding the service dependency.
"""

from dataclasses import replace
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.auth.routes import router
from src.api.dependencies import get_auth_service
from src.api.errors import register_exception_handlers
from src.domain.auth import AuthService
from src.domain.exceptions import NotificationFailed

REGISTER_BODY = {
    "name": "Ada Lovelace",
    "email": "ada@example.com",
    "dateOfBirth": "1990-05-17",
    "password": "secret123",
}


def build_app(service: AuthService) -> FastAPI:
    app = FastAPI()
    app.include_router(router, prefix="/api/auth")
    register_exception_handlers(app)
    app.state.pool = MagicMock()
    app.dependency_overrides[get_auth_service] = lambda: service
    return app


@pytest.fixture
def client(service: AuthService) -> TestClient:
    return TestClient(build_app(service))


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register_and_verify(client: TestClient, email_sender) -> str:
    client.post("/api/auth/register", json=REGISTER_BODY)
    response = client.post(
        "/api/auth/verify-otp",
        json={"email": "ada@example.com", "otp": email_sender.last_code},
    )
    return response.json()["data"]["token"]


class TestRegisterEndpoint:
    """Tests for POST /api/auth/register."""

    def test_register_success_returns_201(self, client: TestClient) -> None:
        response = client.post("/api/auth/register", json=REGISTER_BODY)

        assert response.status_code == 201
        assert response.json() == {
            "success": True,
            "message": "Registration successful! Please check your email for verification code.",
            "data": {"email": "ada@example.com", "name": "Ada Lovelace", "isVerified": False},
        }

    def test_response_never_contains_secrets(self, client: TestClient, email_sender) -> None:
        response = client.post("/api/auth/register", json=REGISTER_BODY)

        assert "secret123" not in response.text
        assert email_sender.last_code not in response.text
        assert "password" not in response.text.lower()

    def test_duplicate_returns_400(self, client: TestClient) -> None:
        client.post("/api/auth/register", json=REGISTER_BODY)
        response = client.post("/api/auth/register", json=REGISTER_BODY)

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "User already exists with this email",
            "error": "Email already registered",
        }

    @pytest.mark.parametrize(
        "overrides",
        [
            {"email": "not-an-email"},
            {"password": "short"},
            {"name": ""},
            {"name": "   "},
            {"password": "x" * 80},
            {"password": "é" * 40},
            {"dateOfBirth": "yesterday"},
        ],
    )
    def test_invalid_fields_return_400(self, client: TestClient, overrides: dict) -> None:
        response = client.post("/api/auth/register", json={**REGISTER_BODY, **overrides})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Validation failed"

    def test_name_is_trimmed(self, client: TestClient) -> None:
        response = client.post("/api/auth/register", json={**REGISTER_BODY, "name": "  Ada  "})

        assert response.status_code == 201
        assert response.json()["data"]["name"] == "Ada"

    def test_72_byte_password_accepted(self, client: TestClient) -> None:
        response = client.post("/api/auth/register", json={**REGISTER_BODY, "password": "x" * 72})
        assert response.status_code == 201

    def test_missing_field_return_400(self, client: TestClient) -> None:
        body = {k: v for k, v in REGISTER_BODY.items() if k != "dateOfBirth"}
        response = client.post("/api/auth/register", json=body)

        assert response.status_code == 400
        assert "dateOfBirth" in response.json()["message"]


class TestVerifyOtpEndpoint:
    """Tests for POST /api/auth/verify-otp."""

    def test_correct_code_returns_token_and_user(
        self, client: TestClient, email_sender
    ) -> None:
        client.post("/api/auth/register", json=REGISTER_BODY)

        response = client.post(
            "/api/auth/verify-otp",
            json={"email": "ada@example.com", "otp": email_sender.last_code},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Email verified successfully! Welcome to HD Notes."
        assert body["data"]["token"]
        assert body["data"]["user"] == {
            "id": body["data"]["user"]["id"],
            "name": "Ada Lovelace",
            "email": "ada@example.com",
            "dateOfBirth": "1990-05-17",
            "isVerified": True,
        }

    def test_wrong_code_returns_400(self, client: TestClient, email_sender) -> None:
        client.post("/api/auth/register", json=REGISTER_BODY)
        wrong = "".join(str((int(c) + 1) % 10) for c in email_sender.last_code)

        response = client.post(
            "/api/auth/verify-otp", json={"email": "ada@example.com", "otp": wrong}
        )

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Invalid or expired OTP",
            "error": "OTP verification failed",
        }

    def test_code_reuse_returns_400(self, client: TestClient, email_sender) -> None:
        client.post("/api/auth/register", json=REGISTER_BODY)
        payload = {"email": "ada@example.com", "otp": email_sender.last_code}

        assert client.post("/api/auth/verify-otp", json=payload).status_code == 200
        assert client.post("/api/auth/verify-otp", json=payload).status_code == 400

    def test_non_numeric_code_returns_400(self, client: TestClient) -> None:
        response = client.post(
            "/api/auth/verify-otp", json={"email": "ada@example.com", "otp": "abcdef"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"


class TestLoginEndpoint:
    """Tests for POST /api/auth/login."""

    def test_verified_login_returns_token(self, client: TestClient, email_sender) -> None:
        register_and_verify(client, email_sender)

        response = client.post(
            "/api/auth/login", json={"email": "ada@example.com", "password": "secret123"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["data"]["token"]
        assert body["data"]["user"]["email"] == "ada@example.com"

    def test_unverified_login_requires_verification(
        self, client: TestClient, email_sender
    ) -> None:
        client.post("/api/auth/register", json=REGISTER_BODY)

        response = client.post(
            "/api/auth/login", json={"email": "ada@example.com", "password": "secret123"}
        )

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "message": "Please verify your email address. A new verification code has been sent.",
            "error": "Account not verified",
            "data": {"email": "ada@example.com", "requiresVerification": True},
        }
        assert len(email_sender.codes) == 2

    def test_wrong_password_and_unknown_email_look_identical(
        self, client: TestClient
    ) -> None:
        client.post("/api/auth/register", json=REGISTER_BODY)

        wrong_password = client.post(
            "/api/auth/login", json={"email": "ada@example.com", "password": "nope-nope"}
        )
        unknown_email = client.post(
            "/api/auth/login", json={"email": "bob@example.com", "password": "secret123"}
        )

        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json() == {
            "success": False,
            "message": "Invalid credentials",
            "error": "Invalid credentials",
        }

    @pytest.mark.parametrize("email", ["ada@example.com", "bob@example.com"])
    def test_overlong_password_is_invalid_credentials(
        self, client: TestClient, email: str
    ) -> None:
        client.post("/api/auth/register", json=REGISTER_BODY)

        response = client.post("/api/auth/login", json={"email": email, "password": "x" * 80})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"


class TestResendOtpEndpoint:
    """Tests for POST /api/auth/resend-otp."""

    def test_resend_success(self, client: TestClient, email_sender) -> None:
        client.post("/api/auth/register", json=REGISTER_BODY)

        response = client.post("/api/auth/resend-otp", json={"email": "ada@example.com"})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "New verification code sent to your email",
            "data": {"email": "ada@example.com"},
        }
        assert len(email_sender.codes) == 2

    def test_resend_unknown_email_returns_404(self, client: TestClient) -> None:
        response = client.post("/api/auth/resend-otp", json={"email": "bob@example.com"})

        assert response.status_code == 404
        assert response.json()["error"] == "User not found"

    def test_resend_verified_returns_400(self, client: TestClient, email_sender) -> None:
        register_and_verify(client, email_sender)

        response = client.post("/api/auth/resend-otp", json={"email": "ada@example.com"})

        assert response.status_code == 400
        assert response.json()["message"] == "Account is already verified"

    def test_resend_email_failure_returns_500(self, failing_service: AuthService) -> None:
        client = TestClient(build_app(failing_service))
        client.post("/api/auth/register", json=REGISTER_BODY)

        response = client.post("/api/auth/resend-otp", json={"email": "ada@example.com"})

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Failed to send verification email",
            "error": "Email service error",
        }

    def test_register_succeeds_when_email_fails(self, failing_service: AuthService) -> None:
        client = TestClient(build_app(failing_service))
        response = client.post("/api/auth/register", json=REGISTER_BODY)
        assert response.status_code == 201


class TestProtectedEndpoints:
    """Tests for GET /api/auth/me and POST /api/auth/logout."""

    def test_me_returns_profile(self, client: TestClient, email_sender) -> None:
        token = register_and_verify(client, email_sender)

        response = client.get("/api/auth/me", headers=bearer(token))

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "User profile retrieved successfully"
        user = body["data"]["user"]
        assert user["email"] == "ada@example.com"
        assert user["isVerified"] is True
        assert "createdAt" in user

    def test_me_without_token(self, client: TestClient) -> None:
        response = client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "message": "Not authorized to access this route",
            "error": "No token provided",
        }

    def test_me_with_garbage_token(self, client: TestClient) -> None:
        response = client.get("/api/auth/me", headers=bearer("garbage"))

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid token"

    def test_me_with_expired_token(
        self, client: TestClient, service: AuthService, email_sender
    ) -> None:
        register_and_verify(client, email_sender)
        account_id = next(iter(service.repository.accounts))
        expired = replace(service.tokens, ttl_seconds=-60).issue(account_id)

        response = client.get("/api/auth/me", headers=bearer(expired))

        assert response.status_code == 401
        assert response.json()["error"] == "Token expired"

    def test_me_for_unverified_account(self, client: TestClient, service: AuthService) -> None:
        client.post("/api/auth/register", json=REGISTER_BODY)
        account_id = next(iter(service.repository.accounts))
        response = client.get("/api/auth/me", headers=bearer(service.tokens.issue(account_id)))

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "message": "Please verify your email address first",
            "error": "Account not verified",
        }

    def test_me_for_deleted_account(self, client: TestClient, service: AuthService) -> None:
        token = service.tokens.issue("8d3c1d1e-0000-4000-8000-000000000000")

        response = client.get("/api/auth/me", headers=bearer(token))

        assert response.status_code == 401
        assert response.json()["error"] == "User not found"

    def test_basic_auth_is_not_a_token(self, client: TestClient) -> None:
        response = client.get("/api/auth/me", headers={"Authorization": "Basic dXNlcjpwYXNz"})
        assert response.status_code == 401
        assert response.json()["error"] == "No token provided"

    def test_logout(self, client: TestClient, email_sender) -> None:
        token = register_and_verify(client, email_sender)

        response = client.post("/api/auth/logout", headers=bearer(token))

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Logged out successfully"}

    def test_logout_requires_token(self, client: TestClient) -> None:
        assert client.post("/api/auth/logout").status_code == 401

    def test_token_still_valid_after_logout(self, client: TestClient, email_sender) -> None:
        """Logout is stateless; nothing is revoked server-side."""
        token = register_and_verify(client, email_sender)
        client.post("/api/auth/logout", headers=bearer(token))

        assert client.get("/api/auth/me", headers=bearer(token)).status_code == 200


class TestUnexpectedErrors:
    """Tests for the last-resort error handler."""

    def test_unexpected_error_returns_envelope(self) -> None:
        service = MagicMock(spec=AuthService)
        service.resend_otp.side_effect = RuntimeError("database on fire")
        client = TestClient(build_app(service), raise_server_exceptions=False)

        response = client.post("/api/auth/resend-otp", json={"email": "ada@example.com"})

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Internal Server Error"

    def test_domain_error_from_mock(self) -> None:
        service = MagicMock(spec=AuthService)
        service.resend_otp.side_effect = NotificationFailed()
        client = TestClient(build_app(service))

        response = client.post("/api/auth/resend-otp", json={"email": "ada@example.com"})

        assert response.status_code == 500
        assert response.json()["error"] == "Email service error"
