"""
File upload utilities for property images.
Validates uploads with Pillow and writes them under the upload directory with aiofiles.
"""

import io
import time
import uuid
import logging
from pathlib import Path
from typing import List, Optional, Tuple
from PIL import Image, UnidentifiedImageError
import aiofiles
from fastapi import UploadFile

from homeverse.utils.exceptions import (
    FileUploadError,
    UnsupportedFileTypeError,
    FileSizeExceededError,
)

logger = logging.getLogger(__name__)

# Public URL prefix that StaticFiles serves the upload directory under
UPLOAD_URL_PREFIX = "/uploads"


class FileValidator:
    """Validation for uploaded listing images."""

    # Supported image formats and their extensions
    SUPPORTED_FORMATS = {
        'image/jpeg': ['.jpg', '.jpeg'],
        'image/png': ['.png'],
        'image/webp': ['.webp'],
        'image/gif': ['.gif'],
    }

    # Pillow format names per MIME type
    PIL_FORMATS = {
        'image/jpeg': 'jpeg',
        'image/png': 'png',
        'image/webp': 'webp',
        'image/gif': 'gif',
    }

    MAX_WIDTH = 10000
    MAX_HEIGHT = 10000

    def __init__(self, allowed_types: List[str], max_file_size: int):
        self.allowed_types = [t for t in allowed_types if t in self.SUPPORTED_FORMATS]
        self.max_file_size = max_file_size

    def validate_file_extension(self, filename: str) -> str:
        """
        Validate file extension against the allowed MIME types.

        Args:
            filename: Name of the file

        Returns:
            Lowercase file extension

        Raises:
            FileUploadError: If extension is missing or not supported
        """
        if not filename:
            raise FileUploadError("Filename is required")

        extension = Path(filename).suffix.lower()
        if not extension:
            raise FileUploadError("File must have an extension")

        supported_extensions = []
        for mime_type in self.allowed_types:
            supported_extensions.extend(self.SUPPORTED_FORMATS[mime_type])

        if extension not in supported_extensions:
            raise FileUploadError(
                f"File extension '{extension}' not supported. "
                f"Supported extensions: {', '.join(supported_extensions)}"
            )

        return extension

    def validate_mime_type(self, mime_type: str) -> str:
        if mime_type not in self.allowed_types:
            raise UnsupportedFileTypeError(mime_type or "unknown", self.allowed_types)
        return mime_type

    def validate_file_size(self, file_size: int) -> int:
        if file_size <= 0:
            raise FileUploadError("File is empty")
        if file_size > self.max_file_size:
            raise FileSizeExceededError(file_size, self.max_file_size)
        return file_size

    async def validate_upload_file(self, file: UploadFile) -> Tuple[bytes, str]:
        """
        Comprehensive validation of an uploaded image.

        Args:
            file: FastAPI UploadFile object

        Returns:
            Tuple of (file content, extension)

        Raises:
            FileUploadError: If any validation fails
        """
        extension = self.validate_file_extension(file.filename or "")
        mime_type = self.validate_mime_type(file.content_type or "")

        if extension not in self.SUPPORTED_FORMATS[mime_type]:
            raise FileUploadError(
                f"File extension '{extension}' doesn't match MIME type '{mime_type}'"
            )

        await file.seek(0)
        content = await file.read()
        self.validate_file_size(len(content))

        try:
            with Image.open(io.BytesIO(content)) as img:
                width, height = img.size
                pil_format = img.format.lower() if img.format else ""
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise FileUploadError(f"Invalid image file: {e}")

        if width > self.MAX_WIDTH or height > self.MAX_HEIGHT:
            raise FileUploadError(
                f"Image dimensions {width}x{height} exceed maximum {self.MAX_WIDTH}x{self.MAX_HEIGHT}"
            )

        if pil_format != self.PIL_FORMATS[mime_type]:
            raise FileUploadError(
                f"Image format '{pil_format}' doesn't match MIME type '{mime_type}'"
            )

        return content, extension


class FileStorage:
    """Stores uploaded images as flat files and maps them to public URLs."""

    def __init__(self, base_dir: str):
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def generate_unique_filename(self, extension: str) -> str:
        """
        Generate a unique, timestamp-prefixed filename.

        Args:
            extension: File extension including the leading dot

        Returns:
            Filename such as 1700000000000-<uuid>.jpg
        """
        return f"{int(time.time() * 1000)}-{uuid.uuid4().hex}{extension}"

    def url_for(self, filename: str) -> str:
        return f"{UPLOAD_URL_PREFIX}/{filename}"

    def path_for_url(self, url: str) -> Optional[Path]:
        """
        Resolve a public upload URL to a path inside the upload directory.

        Args:
            url: URL path as stored on a property

        Returns:
            File path, or None for URLs that don't point at an upload
        """
        prefix = f"{UPLOAD_URL_PREFIX}/"
        if not url or not url.startswith(prefix):
            return None

        name = url[len(prefix):]
        # Only flat names are ever generated
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            return None
        return self.base_dir / name

    async def save_file(self, content: bytes, extension: str) -> str:
        """
        Write image bytes to disk.

        Args:
            content: Validated file content
            extension: File extension including the leading dot

        Returns:
            Public URL path of the stored file

        Raises:
            FileUploadError: If the file can't be written
        """
        file_path = self.base_dir / self.generate_unique_filename(extension)
        try:
            async with aiofiles.open(file_path, 'wb') as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"Failed to save upload {file_path}: {e}")
            if file_path.exists():
                file_path.unlink()
            raise FileUploadError(f"Failed to save file: {e}")

        logger.debug(f"Saved upload {file_path} ({len(content)} bytes)")
        return self.url_for(file_path.name)

    def delete_file(self, url: str) -> bool:
        """
        Delete the file behind an upload URL.

        Args:
            url: Public URL path of the file

        Returns:
            True if a file was removed, False otherwise
        """
        file_path = self.path_for_url(url)
        if file_path is None or not file_path.exists():
            return False

        try:
            file_path.unlink()
            return True
        except OSError as e:
            logger.warning(f"Failed to delete upload {file_path}: {e}")
            return False
