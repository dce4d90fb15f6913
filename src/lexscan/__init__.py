# src/lexscan/__init__.py
from .config import ExtractionConfig
from .engine import ExtractionEngine, classify_media_type, extract
from .exceptions import (
    DecodeFailure,
    ExtractionCancelled,
    ExtractionFailure,
    LexScanError,
    RecognitionFailure,
    RenderFailure,
    UnsupportedMediaType,
    describe_failure,
)
from .models import ExtractionResult, PageText, SourceFile
from .progress import ProgressSink

__version__ = "0.1.0"

__all__ = [
    "ExtractionConfig",
    "ExtractionEngine",
    "ExtractionResult",
    "PageText",
    "SourceFile",
    "ProgressSink",
    "classify_media_type",
    "extract",
    "describe_failure",
    "LexScanError",
    "UnsupportedMediaType",
    "ExtractionFailure",
    "DecodeFailure",
    "RenderFailure",
    "RecognitionFailure",
    "ExtractionCancelled",
]
