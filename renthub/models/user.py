"""
User model with password hashing.
Handles accounts of landlords, tenants and buyers.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from renthub.database import Base
from renthub.utils.auth import hash_password, verify_password
from email_validator import validate_email, EmailNotValidError


class User(Base):
    """
    User account.
    The password hash is deferred so ordinary reads never load it.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="User's display name"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address - unique, stored lower-case"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        deferred=True,
        comment="Bcrypt hashed password"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"

    @classmethod
    def normalize_email(cls, email: str) -> str:
        """
        Validate email format using email-validator.

        Args:
            email: Email address to validate

        Returns:
            Normalized lower-case email address

        Raises:
            ValueError: If email format is invalid
        """
        try:
            valid_email = validate_email(email.strip(), check_deliverability=False)
            return valid_email.normalized.lower()
        except EmailNotValidError as e:
            raise ValueError(f"Please provide a valid email address: {str(e)}")

    def set_password(self, password: str) -> None:
        """Hash and store a new password."""
        self.hashed_password = hash_password(password)

    def verify_password(self, password: str) -> bool:
        """
        Verify a password against the stored hash.
        The hash must have been loaded explicitly (see UserRepository.get_by_email).
        """
        return verify_password(password, self.hashed_password)

    def to_dict(self) -> dict:
        """Public representation, never includes the password hash."""
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "created_at": self.created_at.isoformat(),
        }

    def to_summary(self) -> dict:
        return {"id": str(self.id), "name": self.name, "email": self.email}
