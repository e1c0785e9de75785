"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- An in-memory AccountRepository with the same atomic semantics as Postgres
- Recording / failing email senders
- A controllable clock
- A wired AuthService
"""

import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

import pytest

from src.domain.account import Account
from src.domain.auth import AuthService
from src.domain.exceptions import NotificationFailed
from src.domain.tokens import TokenIssuer

TEST_SECRET = "test-secret-key-with-at-least-32-bytes"


class FakeAccountRepository:
    """In-memory AccountRepository; hands out copies like a real store."""

    def __init__(self) -> None:
        self.accounts: dict[str, Account] = {}

    def create_account(
        self,
        *,
        name: str,
        email: str,
        date_of_birth: date,
        password_hash: str,
        token_hash: str,
        token_expires_at: datetime,
    ) -> Account | None:
        if any(a.email == email for a in self.accounts.values()):
            return None
        now = datetime.now(timezone.utc)
        account = Account(
            account_id=str(uuid.uuid4()),
            name=name,
            email=email,
            date_of_birth=date_of_birth,
            password_hash=password_hash,
            is_verified=False,
            verification_token_hash=token_hash,
            verification_token_expires_at=token_expires_at,
            created_at=now,
            updated_at=now,
        )
        self.accounts[account.account_id] = account
        return replace(account)

    def get_by_email(self, email: str) -> Account | None:
        for account in self.accounts.values():
            if account.email == email:
                return replace(account)
        return None

    def get_by_id(self, account_id: str) -> Account | None:
        account = self.accounts.get(account_id)
        return replace(account) if account else None

    def replace_verification_token(
        self, account_id: str, token_hash: str, expires_at: datetime
    ) -> bool:
        account = self.accounts.get(account_id)
        if account is None or account.is_verified:
            return False
        account.verification_token_hash = token_hash
        account.verification_token_expires_at = expires_at
        account.updated_at = datetime.now(timezone.utc)
        return True

    def mark_verified(self, account_id: str, token_hash: str) -> Account | None:
        account = self.accounts.get(account_id)
        if (
            account is None
            or account.is_verified
            or account.verification_token_hash != token_hash
        ):
            return None
        account.is_verified = True
        account.verification_token_hash = None
        account.verification_token_expires_at = None
        account.updated_at = datetime.now(timezone.utc)
        return replace(account)

    def stored(self, email: str) -> Account:
        """Direct view of the stored record (test helper)."""
        for account in self.accounts.values():
            if account.email == email:
                return account
        raise KeyError(email)


class RecordingEmailSender:
    """EmailSender that remembers every message instead of sending it."""

    def __init__(self) -> None:
        self.codes: list[tuple[str, str, str]] = []
        self.welcomes: list[tuple[str, str]] = []

    def send_verification_code(self, email: str, name: str, code: str) -> None:
        self.codes.append((email, name, code))

    def send_welcome(self, email: str, name: str) -> None:
        self.welcomes.append((email, name))

    @property
    def last_code(self) -> str:
        return self.codes[-1][2]


class FailingEmailSender:
    """EmailSender whose transport is always down."""

    def send_verification_code(self, email: str, name: str, code: str) -> None:
        raise NotificationFailed("smtp unavailable")

    def send_welcome(self, email: str, name: str) -> None:
        raise NotificationFailed("smtp unavailable")


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def repository() -> FakeAccountRepository:
    return FakeAccountRepository()


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(secret=TEST_SECRET)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def service(
    repository: FakeAccountRepository,
    email_sender: RecordingEmailSender,
    token_issuer: TokenIssuer,
    clock: FakeClock,
) -> AuthService:
    """AuthService wired to in-memory collaborators (low bcrypt cost for speed)."""
    return AuthService(
        repository=repository,
        email_sender=email_sender,
        tokens=token_issuer,
        otp_length=6,
        otp_ttl_seconds=600,
        bcrypt_cost=4,
        clock=clock,
    )


@pytest.fixture
def failing_service(
    repository: FakeAccountRepository,
    token_issuer: TokenIssuer,
    clock: FakeClock,
) -> AuthService:
    """AuthService whose email transport always fails."""
    return AuthService(
        repository=repository,
        email_sender=FailingEmailSender(),
        tokens=token_issuer,
        otp_length=6,
        otp_ttl_seconds=600,
        bcrypt_cost=4,
        clock=clock,
    )
