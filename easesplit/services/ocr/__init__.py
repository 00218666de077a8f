"""OCR services package."""

from easesplit.services.ocr.tesseract_service import (
    ImageSource,
    OCRError,
    RecognitionFailedError,
    TesseractOCRService,
    UnsupportedImageError,
)

__all__ = [
    "ImageSource",
    "OCRError",
    "RecognitionFailedError",
    "TesseractOCRService",
    "UnsupportedImageError",
]
