"""Services package."""

from easesplit.services.ocr import (
    ImageSource,
    OCRError,
    RecognitionFailedError,
    TesseractOCRService,
    UnsupportedImageError,
)

__all__ = [
    # OCR services
    "ImageSource",
    "OCRError",
    "RecognitionFailedError",
    "TesseractOCRService",
    "UnsupportedImageError",
]
