# src/lexscan/exceptions.py
from __future__ import annotations

from typing import Optional


class LexScanError(Exception):
    """Base exception for the lexscan library."""
    kind = "error"


class UnsupportedMediaType(LexScanError):
    """Raised before any I/O when a file is neither an image nor a PDF."""
    kind = "unsupported_media_type"

    def __init__(self, media_type: str):
        self.media_type = media_type
        super().__init__(
            f"Unsupported file type '{media_type or 'unknown'}'. Please upload an image or PDF."
        )


class ExtractionFailure(LexScanError):
    """Raised when a supported file fails to extract. No partial text is ever returned."""
    kind = "extraction"

    def __init__(self, message: str, page_number: Optional[int] = None):
        self.page_number = page_number
        super().__init__(message)


class DecodeFailure(ExtractionFailure):
    """The file could not be opened or parsed as its declared type."""
    kind = "decode"


class RenderFailure(ExtractionFailure):
    """A PDF page could not be rendered to a raster surface."""
    kind = "render"


class RecognitionFailure(ExtractionFailure):
    """The OCR backend raised while recognizing an image or a rendered page."""
    kind = "recognition"


class ExtractionCancelled(ExtractionFailure):
    """The caller set the cancel event before extraction finished."""
    kind = "cancelled"


def describe_failure(exc: BaseException) -> str:
    """Human readable message in the form shown to end users."""
    return f"Error extracting text: {exc or 'Unknown error'}"
