"""
OCR Service using Tesseract

DESIGN DECISION: OCR is a black box to the rest of the system.
This service takes one receipt image and returns the raw recognized text.
It makes no attempt to find items in that text; that is the receipt
parser's job.

This service handles:
1. Checking an upload's format and size before any work is done
2. Opening the image (bytes, path, or an already-open PIL image)
3. Running Tesseract off the event loop
4. Wrapping engine failures in RecognitionFailedError

Failures are raised, never swallowed. The caller decides what to tell
the user.
"""

import asyncio
import io
from pathlib import Path
from typing import Optional, Union

import pytesseract
from PIL import Image, UnidentifiedImageError

from easesplit.config import get_settings


ImageSource = Union[bytes, str, Path, Image.Image]


class OCRError(Exception):
    """Base exception for OCR errors."""
    pass


class UnsupportedImageError(OCRError):
    """Upload is not an image we accept (wrong format or too large)."""

    def __init__(self, reason: str, message: str):
        self.reason = reason
        super().__init__(message)


class RecognitionFailedError(OCRError):
    """Tesseract could not read the image."""
    pass


class TesseractOCRService:
    """
    OCR service wrapping the local Tesseract engine.

    IMPORTANT BOUNDARIES:
    1. This service ONLY recognizes text - it does NOT interpret it
    2. It does not preprocess images (no deskew, no binarization)
    3. It does not retry; a failed recognition is reported once
    """

    def __init__(self):
        self._settings = get_settings().tesseract
        self._app_settings = get_settings().app
        if self._settings.cmd:
            pytesseract.pytesseract.tesseract_cmd = self._settings.cmd

    def validate_upload(
        self,
        filename: Optional[str],
        file_size: Optional[int],
    ) -> None:
        """
        Reject uploads we shouldn't attempt to read.

        Raises:
            UnsupportedImageError: If the extension or size is not accepted
        """
        if filename:
            extension = Path(filename).suffix.lstrip(".").lower()
            allowed = self._app_settings.supported_formats_list
            if extension not in allowed:
                raise UnsupportedImageError(
                    reason="format",
                    message=(
                        f"Unsupported image format: '{extension or filename}'. "
                        f"Allowed: {', '.join(allowed)}"
                    ),
                )

        if file_size is not None and file_size > self._app_settings.max_upload_size_bytes:
            raise UnsupportedImageError(
                reason="size",
                message=(
                    f"Image is too large ({file_size / (1024 * 1024):.1f} MB). "
                    f"Maximum is {self._app_settings.max_upload_size_mb} MB"
                ),
            )

    def _open_image(self, image: ImageSource) -> Image.Image:
        """Get a PIL image from any supported source."""
        if isinstance(image, Image.Image):
            return image
        if isinstance(image, bytes):
            return Image.open(io.BytesIO(image))
        return Image.open(image)

    def recognize_sync(self, image: ImageSource) -> str:
        """
        Run Tesseract on an image and return the raw text.

        Raises:
            RecognitionFailedError: If the image can't be opened or read
        """
        try:
            pil_image = self._open_image(image)
            return pytesseract.image_to_string(
                pil_image,
                lang=self._settings.language,
                config=self._settings.config,
                timeout=self._settings.timeout_seconds,
            )
        except (UnidentifiedImageError, OSError) as e:
            # TesseractNotFoundError is an OSError too
            raise RecognitionFailedError(f"Could not read receipt image: {e}") from e
        except (pytesseract.TesseractError, RuntimeError) as e:
            # RuntimeError is how pytesseract reports a timeout
            raise RecognitionFailedError(f"Text recognition failed: {e}") from e

    async def recognize(self, image: ImageSource) -> str:
        """
        Recognize text without blocking the event loop.

        Tesseract runs as a subprocess, so the call is moved to a worker
        thread.
        """
        return await asyncio.to_thread(self.recognize_sync, image)
