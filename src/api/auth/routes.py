"""
Auth routes.

Defines REST endpoints for registration, email verification and sessions.
Domain exceptions propagate to the handlers in ``src.api.errors``.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.api.dependencies import get_auth_service, get_current_account
from src.api.errors import error_response
from src.api.models import (
    ApiResponse,
    EmailData,
    ErrorResponse,
    LoginRequest,
    RegisteredAccount,
    RegisterRequest,
    ResendOtpRequest,
    SessionData,
    UserData,
    UserSummary,
    VerificationRequired,
    VerifyOtpRequest,
)
from src.domain.account import Account
from src.domain.auth import AuthService

router = APIRouter(tags=["auth"])


@router.post(
    "/register",
    response_model=ApiResponse[RegisteredAccount],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Invalid input or email taken"}},
    summary="Register a new user",
    description="Create an unverified account. A verification code is emailed "
    "to the provided address.",
)
async def register(
    request_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse[RegisteredAccount]:
    """
    Register a new user and send verification code.

    - **name**: Display name
    - **email**: Valid email address to register
    - **dateOfBirth**: ISO date
    - **password**: Password (minimum 6 characters)
    """
    account = service.register(
        request_data.name,
        request_data.email,
        request_data.date_of_birth,
        request_data.password,
    )
    return ApiResponse(
        success=True,
        message="Registration successful! Please check your email for verification code.",
        data=RegisteredAccount(
            email=account.email,
            name=account.name,
            is_verified=account.is_verified,
        ),
    )


@router.post(
    "/verify-otp",
    response_model=ApiResponse[SessionData],
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse, "description": "Invalid or expired code"}},
    summary="Verify email with the emailed code",
)
async def verify_otp(
    request_data: VerifyOtpRequest,
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse[SessionData]:
    """Mark the account verified and return a session token."""
    session = service.verify_otp(request_data.email, request_data.otp)
    return ApiResponse(
        success=True,
        message="Email verified successfully! Welcome to HD Notes.",
        data=SessionData(token=session.token, user=UserSummary.from_domain(session.account)),
    )


@router.post(
    "/login",
    response_model=ApiResponse[SessionData],
    response_model_exclude_none=True,
    responses={
        401: {
            "model": ErrorResponse,
            "description": "Invalid credentials, or email verification required",
        }
    },
    summary="Log in with email and password",
)
async def login(
    request_data: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse[SessionData] | JSONResponse:
    """
    Log in a verified account.

    Unverified accounts get a fresh verification code instead of a token,
    and the response carries ``requiresVerification``.
    """
    result = service.login(request_data.email, request_data.password)

    if result.requires_verification:
        pending = VerificationRequired(email=result.account.email)
        return error_response(
            status.HTTP_401_UNAUTHORIZED,
            "Please verify your email address. A new verification code has been sent.",
            "Account not verified",
            data=pending.model_dump(by_alias=True),
        )

    return ApiResponse(
        success=True,
        message="Login successful",
        data=SessionData(token=result.token, user=UserSummary.from_domain(result.account)),
    )


@router.post(
    "/resend-otp",
    response_model=ApiResponse[EmailData],
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse, "description": "Account already verified"},
        404: {"model": ErrorResponse, "description": "Unknown email"},
        500: {"model": ErrorResponse, "description": "Email could not be sent"},
    },
    summary="Send a new verification code",
)
async def resend_otp(
    request_data: ResendOtpRequest,
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse[EmailData]:
    """Replace the outstanding code and email the new one."""
    email = service.resend_otp(request_data.email)
    return ApiResponse(
        success=True,
        message="New verification code sent to your email",
        data=EmailData(email=email),
    )


@router.get(
    "/me",
    response_model=ApiResponse[UserData],
    response_model_exclude_none=True,
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
    summary="Get the current user",
)
async def me(account: Account = Depends(get_current_account)) -> ApiResponse[UserData]:
    return ApiResponse(
        success=True,
        message="User profile retrieved successfully",
        data=UserData(user=UserSummary.from_domain(account, include_created_at=True)),
    )


@router.post(
    "/logout",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
    summary="Log out",
    description="Sessions are stateless tokens; the client discards its token.",
)
async def logout(account: Account = Depends(get_current_account)) -> ApiResponse[None]:
    return ApiResponse(success=True, message="Logged out successfully")
