"""
Authentication service for registration, login and token verification.
Handles JWT token generation and validation and the user lookups behind them.
"""

from typing import Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from renthub.repositories.user import UserRepository
from renthub.models.user import User
from renthub.utils.auth import create_access_token, verify_token, verify_password
from renthub.utils.exceptions import (
    APIException,
    BadRequestError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidTokenError,
    ValidationError
)
from jose import JWTError
import uuid
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for managing user accounts and tokens.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    async def register(self, name: str, email: str, password: str) -> User:
        """
        Register a new user.

        Args:
            name: Display name
            email: Email address
            password: Plain text password, at least 8 characters

        Returns:
            Created User object

        Raises:
            DuplicateEmailError: If the email is already registered
            ValidationError: If the email or password is invalid
        """
        try:
            if await self.user_repo.email_exists(email):
                raise DuplicateEmailError()

            user = await self.user_repo.create_user({
                "name": name,
                "email": email,
                "password": password
            })

            logger.info(f"User registered: {user.email} (ID: {user.id})")
            return user

        except APIException:
            raise
        except ValueError as e:
            raise ValidationError(str(e))
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            raise DuplicateEmailError()
        except Exception as e:
            logger.error(f"Registration failed for {email}: {e}")
            raise BadRequestError("Server error during registration")

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Missing users and wrong passwords do the same hashing work and raise
        the same error.

        Raises:
            InvalidCredentialsError: If credentials are invalid
        """
        user = await self.user_repo.get_by_email(email, include_password=True)

        if not verify_password(password, user.hashed_password if user else None):
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        logger.info(f"User authenticated successfully: {user.email}")
        return user

    def create_token(self, user: User) -> str:
        return create_access_token(user_id=user.id, email=user.email, name=user.name)

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """
        Authenticate user and create an access token.

        Returns:
            Tuple of (user, access_token)
        """
        user = await self.authenticate_user(email, password)
        return user, self.create_token(user)

    async def get_current_user(self, token: str) -> User:
        """
        Get current user from access token.

        Args:
            token: JWT access token

        Returns:
            Current User object

        Raises:
            InvalidTokenError: If token is invalid, expired or its user is gone
        """
        try:
            token_payload = verify_token(token, token_type="access")
            user_id = uuid.UUID(token_payload.user_id)
        except (JWTError, ValueError) as e:
            logger.debug(f"Token rejected: {e}")
            raise InvalidTokenError()

        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise InvalidTokenError()

        return user
