"""
Image storage service for listing photo uploads.
Validates uploads with Pillow and stores them under the upload directory.
"""

import io
import shutil
import uuid
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import aiofiles
from PIL import Image, UnidentifiedImageError
from fastapi import UploadFile

from renthub.config import get_settings
from renthub.models.image import ListingImage
from renthub.utils.exceptions import (
    ValidationError,
    FileUploadError,
    UnsupportedFileTypeError,
    FileSizeExceededError
)

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp'}

EXPECTED_FORMATS = {
    'image/jpeg': ['jpeg', 'jpg', 'mpo'],
    'image/png': ['png'],
    'image/webp': ['webp']
}


class ImageStorageService:
    """Stores listing images on local disk and builds their records."""

    def __init__(self, upload_dir: Optional[str] = None):
        settings = get_settings()
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.url_prefix = settings.upload_url_prefix.rstrip("/")
        self.max_file_size = settings.max_file_size
        self.allowed_types = settings.allowed_file_types

        self.upload_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def present(files: Optional[List[UploadFile]]) -> List[UploadFile]:
        """Drop empty file fields that browsers send when nothing was picked."""
        return [file for file in files or [] if file is not None and file.filename]

    async def validate_image_file(self, file: UploadFile) -> Tuple[bytes, int, int, str]:
        """
        Validate uploaded image file.

        Args:
            file: Uploaded file object

        Returns:
            Tuple of (content, width, height, mime_type)

        Raises:
            BadRequestError: A subclass naming the failed check
        """
        if file.content_type not in self.allowed_types:
            raise UnsupportedFileTypeError(str(file.content_type), self.allowed_types)

        file_ext = Path(file.filename).suffix.lower()
        if file_ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                f"File extension '{file_ext}' not allowed. "
                f"Allowed extensions: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
            )

        await file.seek(0)
        content = await file.read()

        if len(content) > self.max_file_size:
            raise FileSizeExceededError(len(content), self.max_file_size)

        try:
            with Image.open(io.BytesIO(content)) as img:
                width, height = img.size
                pil_format = (img.format or "").lower()
        except (UnidentifiedImageError, OSError) as e:
            raise ValidationError(f"Invalid image file: {file.filename}") from e

        if pil_format not in EXPECTED_FORMATS.get(file.content_type, [pil_format]):
            raise ValidationError(f"File content doesn't match declared type {file.content_type}")

        return content, width, height, file.content_type

    def _generate_file_path(self, listing_id: uuid.UUID, filename: str) -> Path:
        listing_dir = self.upload_dir / "listings" / str(listing_id)
        listing_dir.mkdir(parents=True, exist_ok=True)
        return listing_dir / f"{uuid.uuid4()}{Path(filename).suffix.lower()}"

    async def store_images(
        self,
        listing_id: uuid.UUID,
        files: List[UploadFile],
        start_order: int = 0
    ) -> List[ListingImage]:
        """
        Validate and save uploads, returning unsaved image records.

        Every file is validated before any is written, and files already
        written are removed again if a later write fails.

        Args:
            listing_id: Listing the images belong to
            files: Uploaded image files
            start_order: Display order of the first new image

        Returns:
            ListingImage records ready to attach to the listing
        """
        validated = [(file, await self.validate_image_file(file)) for file in files]

        images = []
        written: List[Path] = []
        try:
            for offset, (file, (content, width, height, mime_type)) in enumerate(validated):
                file_path = self._generate_file_path(listing_id, file.filename)
                async with aiofiles.open(file_path, 'wb') as f:
                    await f.write(content)
                written.append(file_path)

                public_id = file_path.relative_to(self.upload_dir).as_posix()
                images.append(ListingImage(
                    listing_id=listing_id,
                    url=f"{self.url_prefix}/{public_id}",
                    public_id=public_id,
                    filename=file.filename,
                    mime_type=mime_type,
                    file_size=len(content),
                    width=width,
                    height=height,
                    display_order=start_order + offset
                ))
        except OSError as e:
            self.delete_files([path.relative_to(self.upload_dir).as_posix() for path in written])
            logger.error(f"Failed to save images for listing {listing_id}: {e}")
            raise FileUploadError(f"could not save {file.filename}")

        logger.info(f"Stored {len(images)} image(s) for listing {listing_id}")
        return images

    def delete_files(self, public_ids: List[str]) -> None:
        """Remove stored files by their public ids, ignoring files already gone."""
        for public_id in public_ids:
            path = self.upload_dir / public_id
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not delete image file {path}: {e}")

    def delete_listing_files(self, listing_id: uuid.UUID) -> None:
        """Remove the whole image directory of a listing."""
        listing_dir = self.upload_dir / "listings" / str(listing_id)
        if listing_dir.exists():
            shutil.rmtree(listing_dir, ignore_errors=True)
            logger.info(f"Deleted image directory of listing {listing_id}")
