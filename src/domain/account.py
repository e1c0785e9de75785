"""Account aggregate and the value objects returned by the auth flows."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class AccountState(str, Enum):
    """
    Verification lifecycle of an account.

    UNVERIFIED -> VERIFIED is the only transition. A verified account
    never holds an outstanding verification code.
    """

    UNVERIFIED = "UNVERIFIED"
    VERIFIED = "VERIFIED"


@dataclass(slots=True)
class Account:
    """A registered user identity."""

    account_id: str
    name: str
    email: str
    date_of_birth: date
    password_hash: str
    is_verified: bool = False
    verification_token_hash: str | None = None
    verification_token_expires_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def state(self) -> AccountState:
        return AccountState.VERIFIED if self.is_verified else AccountState.UNVERIFIED


@dataclass(slots=True)
class AuthSession:
    """Session token issued together with the account it authenticates."""

    token: str
    account: Account


@dataclass(slots=True)
class LoginResult:
    """
    Outcome of a login with valid credentials.

    ``token`` is None when the account still needs to verify its email;
    in that case a fresh code has just been issued.
    """

    account: Account
    token: str | None = None

    @property
    def requires_verification(self) -> bool:
        return self.token is None
