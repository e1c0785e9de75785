"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
JSON field names are camelCase on the wire.
"""

from datetime import date, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from src.domain.account import Account
from src.domain.security import MAX_PASSWORD_BYTES

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model serializing to and accepting camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    """Request model for user registration."""

    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: EmailStr
    date_of_birth: date = Field(..., description="Date of birth (YYYY-MM-DD)")
    password: str = Field(
        ...,
        min_length=6,
        description=f"User password (min 6 characters, max {MAX_PASSWORD_BYTES} bytes)",
    )

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Name must not be blank")
        return stripped

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        """Multi-byte characters count by their UTF-8 length."""
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class VerifyOtpRequest(CamelModel):
    """Request model for email verification."""

    email: EmailStr
    otp: str = Field(
        ...,
        min_length=4,
        max_length=10,
        pattern=r"^\d+$",
        description="Numeric verification code",
    )


class LoginRequest(CamelModel):
    """Request model for login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class ResendOtpRequest(CamelModel):
    """Request model for requesting a new verification code."""

    email: EmailStr


class RegisteredAccount(CamelModel):
    """Account summary returned after registration (no token yet)."""

    email: str
    name: str
    is_verified: bool


class UserSummary(CamelModel):
    """Public view of an account. Never carries credentials."""

    id: str
    name: str
    email: str
    date_of_birth: date
    is_verified: bool
    created_at: datetime | None = None

    @classmethod
    def from_domain(cls, account: Account, *, include_created_at: bool = False) -> "UserSummary":
        """Build a response model from the domain aggregate."""
        return cls(
            id=account.account_id,
            name=account.name,
            email=account.email,
            date_of_birth=account.date_of_birth,
            is_verified=account.is_verified,
            created_at=account.created_at if include_created_at else None,
        )


class SessionData(CamelModel):
    """Token plus the account it was issued for."""

    token: str
    user: UserSummary


class UserData(CamelModel):
    """Wrapper for the current-user payload."""

    user: UserSummary


class EmailData(CamelModel):
    """Email echo returned by resend-otp."""

    email: str


class VerificationRequired(CamelModel):
    """Payload of a login that must complete email verification first."""

    email: str
    requires_verification: bool = True


class ApiResponse(CamelModel, Generic[T]):
    """Envelope wrapping every response body."""

    success: bool
    message: str
    data: T | None = None
    error: str | None = None


class ErrorResponse(CamelModel):
    """Standard error response model."""

    success: bool = False
    message: str
    error: str
    data: Any | None = None
