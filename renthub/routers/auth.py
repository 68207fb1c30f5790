"""
Authentication API endpoints for registration, login and current user information.
"""

from fastapi import APIRouter, Depends, status
from renthub.models.user import User
from renthub.services.auth import AuthService
from renthub.schemas.auth import (
    RegisterRequest,
    RegisterResponse,
    LoginRequest,
    LoginResponse
)
from renthub.schemas.user import UserResponse, UserSummary
from renthub.schemas.error import get_error_responses, get_auth_error_responses
from renthub.utils.dependencies import get_auth_service, get_current_user
from renthub.config import settings


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Create a user account with name, email and password",
    responses=get_error_responses(400, 500)
)
async def register(
    register_data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> RegisterResponse:
    """
    Register a new user account.

    Args:
        register_data: Name, email and password (at least 8 characters)
        auth_service: Authentication service

    Returns:
        Confirmation message with the public user fields

    Raises:
        DuplicateEmailError: If the email is already registered
    """
    user = await auth_service.register(
        name=register_data.name,
        email=register_data.email,
        password=register_data.password
    )

    return RegisterResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(user.to_dict())
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate user with email and password, returns a JWT valid for one hour",
    responses=get_error_responses(400, 401, 500)
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    """
    Authenticate user and return an access token.

    Raises:
        InvalidCredentialsError: If the email is unknown or the password is wrong
    """
    user, access_token = await auth_service.login(
        email=login_data.email,
        password=login_data.password
    )

    return LoginResponse(
        token=access_token,
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60,
        user=UserSummary.model_validate(user.to_summary())
    )


@router.get(
    "/me",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    description="Get the authenticated user's public information",
    responses=get_auth_error_responses()
)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
) -> UserResponse:
    return UserResponse.model_validate(current_user.to_dict())
