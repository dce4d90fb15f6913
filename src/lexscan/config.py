# src/lexscan/config.py
from dataclasses import dataclass, field, asdict
from typing import Dict, Any


DEFAULT_OCR_BACKEND = "lexscan.ocr_backends.tesseract_backend.TesseractOCREngine"


@dataclass
class ExtractionConfig:
    """Configuration for a lexscan extraction engine."""
    recognition_language: str = "eng"
    render_scale: float = 2.0

    ocr_backend: str = DEFAULT_OCR_BACKEND
    ocr_backend_kwargs: Dict[str, Any] = field(default_factory=dict)

    pdf_engine: str = "pymupdf"

    def __post_init__(self):
        if not str(self.recognition_language or "").strip():
            raise ValueError("recognition_language must be a non-empty language code")
        self.render_scale = float(self.render_scale)
        if self.render_scale <= 0:
            raise ValueError(f"render_scale must be positive, got {self.render_scale}")

    def to_dict(self):
        """Converts config to a plain dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: dict):
        # allow explicit None to mean use default
        d = {k: v for k, v in dict(config_dict).items() if v is not None}
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(d) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys, {unknown}")
        return cls(**d)
