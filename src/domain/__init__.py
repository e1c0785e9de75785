"""
Domain layer - Pure business logic with zero framework imports.

This package contains the account verification state machine, the
credential and session-token primitives it relies on, and the port
interfaces that infrastructure adapters implement.
"""

from .account import Account, AccountState, AuthSession, LoginResult
from .auth import AuthService, normalize_email
from .exceptions import (
    AccountAlreadyVerified,
    AccountNotFound,
    AccountNotVerified,
    AccountUnavailable,
    AuthError,
    EmailAlreadyRegistered,
    ExpiredToken,
    InvalidCredentials,
    InvalidToken,
    InvalidVerificationCode,
    MissingToken,
    NotificationFailed,
    SessionError,
)
from .ports import AccountRepository, EmailSender
from .tokens import TokenIssuer

__all__ = [
    "Account",
    "AccountAlreadyVerified",
    "AccountNotFound",
    "AccountNotVerified",
    "AccountRepository",
    "AccountState",
    "AccountUnavailable",
    "AuthError",
    "AuthService",
    "AuthSession",
    "EmailAlreadyRegistered",
    "EmailSender",
    "ExpiredToken",
    "InvalidCredentials",
    "InvalidToken",
    "InvalidVerificationCode",
    "LoginResult",
    "MissingToken",
    "NotificationFailed",
    "SessionError",
    "TokenIssuer",
    "normalize_email",
]
