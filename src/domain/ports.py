"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from datetime import date, datetime
from typing import Protocol

from .account import Account


class AccountRepository(Protocol):
    """Port interface for account persistence."""

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
        """
        Atomically create an unverified account with an outstanding code.

        The existence check and the insert are a single operation, so two
        concurrent registrations for the same email cannot both succeed.

        Args:
            name: Display name
            email: Normalized email address
            date_of_birth: User's date of birth
            password_hash: bcrypt hashed password
            token_hash: SHA-256 digest of the verification code
            token_expires_at: When the verification code stops being accepted

        Returns:
            The created Account, or None if the email is already registered
        """
        ...

    def get_by_email(self, email: str) -> Account | None:
        """Fetch an account by normalized email, or None."""
        ...

    def get_by_id(self, account_id: str) -> Account | None:
        """Fetch an account by identifier, or None."""
        ...

    def replace_verification_token(
        self, account_id: str, token_hash: str, expires_at: datetime
    ) -> bool:
        """
        Overwrite the outstanding verification code of an unverified account.

        Any previously issued code stops matching. Concurrent replacements
        resolve as last writer wins.

        Returns:
            True if the code was stored, False if the account is missing
            or already verified
        """
        ...

    def mark_verified(self, account_id: str, token_hash: str) -> Account | None:
        """
        Flip an account to verified and clear its verification code.

        Guarded on ``token_hash`` still being the outstanding code, so at most
        one of several concurrent verifications with the same code succeeds.

        Returns:
            The updated Account, or None if the guard did not match
        """
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_verification_code(self, email: str, name: str, code: str) -> None:
        """
        Send verification code to email address.

        Args:
            email: Recipient email address
            name: Recipient display name
            code: Numeric verification code

        Raises:
            NotificationFailed: If the message could not be delivered
        """
        ...

    def send_welcome(self, email: str, name: str) -> None:
        """
        Send the post-verification welcome message.

        Raises:
            NotificationFailed: If the message could not be delivered
        """
        ...
