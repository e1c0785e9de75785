"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from functools import lru_cache

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresAccountRepository
from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.sender import SmtpEmailSender
from src.config.settings import get_settings
from src.domain.account import Account
from src.domain.auth import AuthService
from src.domain.exceptions import MissingToken
from src.domain.ports import EmailSender
from src.domain.tokens import TokenIssuer


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_repository(request: Request) -> PostgresAccountRepository:
    """Create repository with connection pool from app state."""
    pool = get_pool(request)
    return PostgresAccountRepository(pool)


@lru_cache
def get_email_sender() -> EmailSender:
    """
    Get the configured email sender (singleton).

    ``email_backend=smtp`` delivers real mail; anything else logs the
    codes to the console.
    """
    settings = get_settings()
    if settings.email_backend.lower() == "smtp":
        return SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            from_addr=settings.email_from,
            user=settings.smtp_user,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            code_valid_minutes=max(1, settings.otp_ttl_seconds // 60),
            frontend_url=settings.frontend_url,
        )
    return ConsoleEmailSender()


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Get the token issuer bound to the process-wide signing secret."""
    settings = get_settings()
    return TokenIssuer(
        secret=settings.jwt_secret,
        ttl_seconds=settings.jwt_ttl_seconds,
        issuer=settings.jwt_issuer,
    )


def get_auth_service(request: Request) -> AuthService:
    """
    Create auth service with injected dependencies.

    Wires together the repository, email sender and token issuer.
    """
    settings = get_settings()
    return AuthService(
        repository=get_repository(request),
        email_sender=get_email_sender(),
        tokens=get_token_issuer(),
        otp_length=settings.otp_length,
        otp_ttl_seconds=settings.otp_ttl_seconds,
        bcrypt_cost=settings.bcrypt_cost,
    )


# Bearer scheme for OpenAPI documentation; missing headers are reported
# through the envelope rather than FastAPI's default 403
http_bearer = HTTPBearer(auto_error=False)


def get_current_account(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    service: AuthService = Depends(get_auth_service),
) -> Account:
    """
    Resolve ``Authorization: Bearer <token>`` to a verified account.

    Raises the domain's SessionError subclasses, which the exception
    handlers turn into 401 responses.
    """
    if credentials is None or not credentials.credentials:
        raise MissingToken()
    return service.authenticate(credentials.credentials)
