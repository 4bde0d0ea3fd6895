"""
Validation helpers for uploaded image files.
"""

from pathlib import Path
from typing import List

from fastapi import UploadFile

from image_checker.utils.logger import get_logger

logger = get_logger(__name__)


class FileValidationError(Exception):
    """Raised when file validation fails."""
    pass


class ImageFileValidator:
    """Checks applied to an uploaded image before it is sent to the image host."""

    @staticmethod
    def validate_file_extension(filename: str, allowed_extensions: List[str]) -> None:
        """
        Validate that file has an allowed extension.

        Args:
            filename: Name of the uploaded file
            allowed_extensions: List of allowed file extensions (e.g., ['.jpg', '.png'])

        Raises:
            FileValidationError: If extension is not allowed
        """
        file_ext = Path(filename or "").suffix.lower()
        if file_ext not in allowed_extensions:
            logger.warning("Invalid file extension", filename=filename, extension=file_ext)
            raise FileValidationError(
                f"File extension '{file_ext}' not allowed. Supported formats: {', '.join(allowed_extensions)}"
            )

    @staticmethod
    def validate_file_size(file_size: int, max_size: int) -> None:
        """
        Validate that file size is within limits.

        Raises:
            FileValidationError: If file is empty or too large
        """
        if file_size == 0:
            raise FileValidationError("File is empty")
        if file_size > max_size:
            max_mb = max_size / (1024 * 1024)
            current_mb = file_size / (1024 * 1024)
            logger.warning("File too large", file_size_mb=current_mb, max_size_mb=max_mb)
            raise FileValidationError(
                f"File size ({current_mb:.2f} MB) exceeds maximum allowed size ({max_mb:.2f} MB)"
            )

    @staticmethod
    def validate_content_type(content_type: str) -> None:
        """
        Validate that the declared MIME type is an image type.

        Raises:
            FileValidationError: If the content type is not image/*
        """
        if not content_type or not content_type.startswith("image/"):
            raise FileValidationError(f"Content type '{content_type}' is not an image")

    async def read_image(self, file: UploadFile, allowed_extensions: List[str], max_size: int) -> bytes:
        """
        Validate an uploaded image and return its bytes.

        Args:
            file: Uploaded file object from FastAPI
            allowed_extensions: Accepted filename extensions
            max_size: Maximum size in bytes

        Returns:
            File content

        Raises:
            FileValidationError: If any check fails
        """
        self.validate_file_extension(file.filename, allowed_extensions)
        self.validate_content_type(file.content_type)

        content = await file.read()
        self.validate_file_size(len(content), max_size)

        logger.info("Image file validation passed", filename=file.filename, size_bytes=len(content))
        return content
