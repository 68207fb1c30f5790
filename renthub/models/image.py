"""
ListingImage model for uploaded listing photos.
Stores the public URL, storage id and file metadata.
"""

from sqlalchemy import String, Integer, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from renthub.database import Base
import uuid
from typing import Optional


class ListingImage(Base):
    """Image attached to a listing."""

    __tablename__ = "listing_images"

    listing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    url: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        comment="Public URL of the stored image"
    )

    public_id: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        unique=True,
        comment="Storage identifier, relative to the upload directory"
    )

    filename: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Original filename of the uploaded image"
    )

    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    display_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0
    )

    def __repr__(self) -> str:
        return f"<ListingImage(id={self.id}, listing_id={self.listing_id}, public_id={self.public_id})>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "url": self.url,
            "public_id": self.public_id,
        }
