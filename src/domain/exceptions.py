"""
Domain exceptions - Semantic error types for authentication.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
The HTTP layer decides how each one is presented to the caller.
"""


class AuthError(Exception):
    """Base class for authentication domain errors."""

    pass


class EmailAlreadyRegistered(AuthError):
    """An account already exists for this email."""

    pass


class InvalidCredentials(AuthError):
    """Unknown email or wrong password (deliberately indistinguishable)."""

    pass


class InvalidVerificationCode(AuthError):
    """Code mismatch, expired code, or no code outstanding."""

    pass


class AccountNotFound(AuthError):
    """No account for the email on a lookup-only path."""

    pass


class AccountAlreadyVerified(AuthError):
    """Operation only applies to unverified accounts."""

    pass


class NotificationFailed(AuthError):
    """Email transport could not deliver the message."""

    pass


class SessionError(AuthError):
    """Base class for bearer-token session check failures."""

    pass


class MissingToken(SessionError):
    """No bearer token was presented."""

    pass


class InvalidToken(SessionError):
    """Token is malformed, has a bad signature, or lacks required claims."""

    pass


class ExpiredToken(SessionError):
    """Token signature is valid but its expiry has passed."""

    pass


class AccountUnavailable(SessionError):
    """Token refers to an account that no longer exists."""

    pass


class AccountNotVerified(SessionError):
    """Token refers to an account that has not completed verification."""

    pass
