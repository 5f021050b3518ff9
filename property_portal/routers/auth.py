"""
Authentication API endpoints for signup, login, Google sign-in, the current
user and password reset.
"""

from fastapi import APIRouter, Depends, status

from property_portal.models.user import User
from property_portal.schemas.auth import (
    ForgotPasswordRequest,
    GoogleLoginRequest,
    LoginRequest,
    ResetPasswordRequest,
    SignupRequest,
    SignupResponse,
    TokenResponse,
)
from property_portal.schemas.common import MessageResponse
from property_portal.schemas.error import get_error_responses
from property_portal.schemas.user import UserResponse
from property_portal.services.auth import AuthService
from property_portal.services.google_oauth import GoogleTokenVerifier
from property_portal.utils.dependencies import (
    get_auth_service,
    get_current_user,
    get_google_verifier,
)


router = APIRouter(tags=["Authentication"])


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create account",
    description=(
        "Create a tenant, property-owner or manager account. Property owners create "
        "or join their owner record; tenants get a payment customer."
    ),
    responses=get_error_responses(400, 409, 500)
)
async def signup(
    signup_data: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> SignupResponse:
    """
    Create a user account.

    Raises:
        ValidationError: If name, email or password is missing
        DuplicateResourceError: If the email is already registered
    """
    user = await auth_service.signup(signup_data)
    return SignupResponse(user_id=str(user.id))


def _token_response(user: User, token: str, expires_in: int) -> TokenResponse:
    return TokenResponse(
        access_token=token,
        token_type="bearer",
        expires_in=expires_in,
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/auth/login",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate with email and password and return a session token",
    responses=get_error_responses(400, 401, 500)
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> TokenResponse:
    """
    Authenticate user and return a session token.

    Raises:
        InvalidCredentialsError: If credentials are invalid or the account is Google-only
    """
    user, token, expires_in = await auth_service.login(login_data.email, login_data.password)
    return _token_response(user, token, expires_in)


@router.post(
    "/auth/google",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Google sign-in",
    description="Verify a Google ID token and sign in, creating a tenant account on first use",
    responses=get_error_responses(400, 401, 500)
)
async def google_login(
    google_data: GoogleLoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
    verifier: GoogleTokenVerifier = Depends(get_google_verifier)
) -> TokenResponse:
    user, token, expires_in = await auth_service.login_with_google(google_data.id_token, verifier)
    return _token_response(user, token, expires_in)


@router.get(
    "/auth/me",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    responses=get_error_responses(401, 500)
)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.post(
    "/auth/forgot-password",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Request password reset",
    description="Always answers the same way so it cannot be used to discover accounts.",
    responses=get_error_responses(400, 500)
)
async def forgot_password(
    forgot_data: ForgotPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth_service.request_password_reset(forgot_data.email)
    return MessageResponse(
        success=True,
        message="If an account exists for this email, a password reset link has been sent",
    )


@router.post(
    "/auth/reset-password",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Reset password",
    responses=get_error_responses(400, 500)
)
async def reset_password(
    reset_data: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth_service.reset_password(reset_data.token, reset_data.password)
    return MessageResponse(success=True, message="Password has been reset successfully")
