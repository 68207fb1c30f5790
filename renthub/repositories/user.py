"""
User repository for registration and credential lookups.
The password hash is only loaded by the lookup used for login.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import undefer
from renthub.repositories.base import BaseRepository
from renthub.models.user import User
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for user accounts."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user, hashing the plain password.

        Args:
            user_data: Dictionary with name, email and password

        Returns:
            Created user instance

        Raises:
            ValueError: If the email is malformed or the password too short
        """
        data = dict(user_data)
        password = data.pop("password")

        user = User(
            name=data["name"].strip(),
            email=User.normalize_email(data["email"])
        )
        user.set_password(password)

        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
            logger.info(f"Created user: {user.email} (ID: {user.id})")
            return user
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create user: {e}")
            raise

    async def get_by_email(self, email: str, include_password: bool = False) -> Optional[User]:
        """
        Get user by email address.

        Args:
            email: Email address to search for
            include_password: Whether to load the deferred password hash

        Returns:
            User instance if found, None otherwise
        """
        try:
            normalized_email = email.lower().strip()

            query = select(User).where(User.email == normalized_email)
            if include_password:
                query = query.options(undefer(User.hashed_password)).execution_options(
                    populate_existing=True
                )

            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def email_exists(self, email: str) -> bool:
        return await self.get_by_email(email) is not None
