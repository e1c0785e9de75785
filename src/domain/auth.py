"""
Authentication domain service - account verification state machine.

States
======

- UNVERIFIED: after registration. Holds at most one outstanding
  verification code (stored as a digest, with an expiry).
- VERIFIED: after a correct code is submitted. Holds no code.

Transitions
===========

    register      -> UNVERIFIED, code issued
    login         UNVERIFIED -> UNVERIFIED, code re-issued (old code invalid)
    resend_otp    UNVERIFIED -> UNVERIFIED, code re-issued (old code invalid)
    verify_otp    UNVERIFIED -> VERIFIED, code cleared

There is no way back from VERIFIED.

Notification delivery happens after the state change is committed. Apart
from resend_otp, where delivering the code is the whole point, a failed
send is logged and the operation still succeeds.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from .account import Account, AuthSession, LoginResult
from .exceptions import (
    AccountAlreadyVerified,
    AccountNotFound,
    AccountNotVerified,
    AccountUnavailable,
    EmailAlreadyRegistered,
    InvalidCredentials,
    InvalidVerificationCode,
    NotificationFailed,
)
from .ports import AccountRepository, EmailSender
from .security import check_password, generate_otp, hash_otp, hash_password, otp_matches
from .tokens import TokenIssuer

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase. Emails are stored in this form
    only, so the lowercased address is the one compared and mailed to.
    """
    return email.strip().lower()


@dataclass
class AuthService:
    """
    Domain service orchestrating registration, verification and sessions.

    All collaborators are injected; the service holds no global state.
    """

    repository: AccountRepository
    email_sender: EmailSender
    tokens: TokenIssuer
    otp_length: int = 6
    otp_ttl_seconds: int = 600
    bcrypt_cost: int = 10
    clock: Callable[[], datetime] = field(default=_utcnow)

    def register(self, name: str, email: str, date_of_birth: date, password: str) -> Account:
        """
        Create an unverified account and email it a verification code.

        Returns:
            The created Account

        Raises:
            EmailAlreadyRegistered: If the email already has an account
        """
        normalized_email = normalize_email(email)
        code = generate_otp(self.otp_length)

        account = self.repository.create_account(
            name=name.strip(),
            email=normalized_email,
            date_of_birth=date_of_birth,
            password_hash=hash_password(password, self.bcrypt_cost),
            token_hash=hash_otp(code),
            token_expires_at=self._code_expiry(),
        )
        if account is None:
            raise EmailAlreadyRegistered(normalized_email)

        logger.info("Registered account %s", account.account_id)
        self._send_code_best_effort(account, code)
        return account

    def verify_otp(self, email: str, code: str) -> AuthSession:
        """
        Verify the outstanding code and open a session.

        A wrong, expired, superseded or already-used code leaves the
        account untouched.

        Raises:
            InvalidVerificationCode: For every kind of rejection
        """
        account = self.repository.get_by_email(normalize_email(email))

        # Digest comparison runs even for unknown emails
        stored_hash = account.verification_token_hash if account else None
        code_valid = otp_matches(code, stored_hash)

        if account is None or account.is_verified or not code_valid:
            raise InvalidVerificationCode()

        expires_at = account.verification_token_expires_at
        if expires_at is not None and expires_at <= self.clock():
            logger.info("Expired verification code for account %s", account.account_id)
            raise InvalidVerificationCode()

        verified = self.repository.mark_verified(account.account_id, stored_hash)
        if verified is None:
            # Superseded or consumed between the read and the update
            raise InvalidVerificationCode()

        logger.info("Account %s verified", verified.account_id)
        try:
            self.email_sender.send_welcome(verified.email, verified.name)
        except Exception:
            logger.exception("Failed to send welcome email to account %s", verified.account_id)

        return AuthSession(token=self.tokens.issue(verified.account_id), account=verified)

    def login(self, email: str, password: str) -> LoginResult:
        """
        Check credentials and open a session for verified accounts.

        For an unverified account a new code replaces the old one and no
        token is issued.

        Raises:
            InvalidCredentials: Unknown email or wrong password
        """
        account = self.repository.get_by_email(normalize_email(email))
        password_valid = check_password(password, account.password_hash if account else None)

        if account is None:
            logger.info("Login rejected: no account for email")
            raise InvalidCredentials()
        if not password_valid:
            logger.info("Login rejected: wrong password for account %s", account.account_id)
            raise InvalidCredentials()

        if not account.is_verified:
            code = self._reissue_code(account)
            if code is not None:
                self._send_code_best_effort(account, code)
                return LoginResult(account=account)
            # Verified between the read and the code replacement
            account = self.repository.get_by_id(account.account_id)
            if account is None:
                raise InvalidCredentials()

        return LoginResult(account=account, token=self.tokens.issue(account.account_id))

    def resend_otp(self, email: str) -> str:
        """
        Issue and send a fresh code to an unverified account.

        Returns:
            The account's email

        Raises:
            AccountNotFound: No account for the email
            AccountAlreadyVerified: Nothing to verify
            NotificationFailed: The code could not be delivered
        """
        account = self.repository.get_by_email(normalize_email(email))
        if account is None:
            raise AccountNotFound()
        if account.is_verified:
            raise AccountAlreadyVerified()

        code = self._reissue_code(account)
        if code is None:
            raise AccountAlreadyVerified()

        try:
            self.email_sender.send_verification_code(account.email, account.name, code)
        except Exception as exc:
            logger.exception("Failed to resend verification code to account %s", account.account_id)
            raise NotificationFailed() from exc
        return account.email

    def authenticate(self, token: str) -> Account:
        """
        Resolve a bearer token to a verified account.

        Raises:
            InvalidToken: Malformed or badly signed token
            ExpiredToken: Token past its expiry
            AccountUnavailable: Account no longer exists
            AccountNotVerified: Account has not completed verification
        """
        account_id = self.tokens.verify(token)
        account = self.repository.get_by_id(account_id)
        if account is None:
            raise AccountUnavailable()
        if not account.is_verified:
            raise AccountNotVerified()
        return account

    def _code_expiry(self) -> datetime:
        return self.clock() + timedelta(seconds=self.otp_ttl_seconds)

    def _reissue_code(self, account: Account) -> str | None:
        """Store a new code for the account; None if it got verified meanwhile."""
        code = generate_otp(self.otp_length)
        stored = self.repository.replace_verification_token(
            account.account_id, hash_otp(code), self._code_expiry()
        )
        if not stored:
            return None
        logger.info("Issued new verification code for account %s", account.account_id)
        return code

    def _send_code_best_effort(self, account: Account, code: str) -> None:
        try:
            self.email_sender.send_verification_code(account.email, account.name, code)
        except Exception:
            logger.exception("Failed to send verification code to account %s", account.account_id)
