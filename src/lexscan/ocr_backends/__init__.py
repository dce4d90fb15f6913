# lexscan/ocr_backends/__init__.py
from __future__ import annotations

import importlib
import logging
from typing import Any

from .base import BaseOCREngine

logger = logging.getLogger("lexscan")

_ALIASES = {
    # Tesseract (pytesseract)
    "tess": "lexscan.ocr_backends.tesseract_backend.TesseractOCREngine",
    "tesseract": "lexscan.ocr_backends.tesseract_backend.TesseractOCREngine",
    "pytesseract": "lexscan.ocr_backends.tesseract_backend.TesseractOCREngine",

    # EasyOCR
    "easy": "lexscan.ocr_backends.easyocr_backend.EasyOCREngine",
    "easyocr": "lexscan.ocr_backends.easyocr_backend.EasyOCREngine",
}


def normalize_backend_name(name: str) -> str:
    """
    Allow short aliases (case-insensitive) and module-only shorthands.
    Returns a fully qualified dotted path 'module.Class'.
    """
    if not name:
        return name
    original = name.strip().strip('"\'')
    alias = original.lower()
    if alias in _ALIASES:
        return _ALIASES[alias]
    if alias.endswith(".tesseract_backend"):
        return _ALIASES["tesseract"]
    if alias.endswith(".easyocr_backend"):
        return _ALIASES["easyocr"]
    return original


def _import_obj(dotted: str):
    mod_path, _, attr = dotted.rpartition(".")
    if not mod_path or not attr:
        raise ImportError(f"Invalid backend path, {dotted}")
    mod = importlib.import_module(mod_path)
    try:
        return getattr(mod, attr)
    except AttributeError as e:
        raise ImportError(f"Backend class not found, {dotted}") from e


def load_ocr_engine(name: str, **kwargs: Any) -> BaseOCREngine:
    """Import the backend named by alias or dotted path and instantiate it."""
    dotted = normalize_backend_name(name)
    engine_cls = _import_obj(dotted)
    if not (isinstance(engine_cls, type) and issubclass(engine_cls, BaseOCREngine)):
        raise ImportError(f"{dotted} is not a BaseOCREngine subclass")
    logger.debug("Loading OCR backend %s", dotted)
    return engine_cls(**kwargs)


__all__ = ["BaseOCREngine", "load_ocr_engine", "normalize_backend_name"]
