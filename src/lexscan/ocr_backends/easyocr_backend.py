# lexscan/ocr_backends/easyocr_backend.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple
import logging
import threading

import numpy as np

from .base import BaseOCREngine, ProgressHook, emit, to_pil
from ..progress import RECOGNIZING_TEXT

logger = logging.getLogger("lexscan")


# -----------------------------
# Helpers
# -----------------------------

def _as_bool(x, default=True) -> bool:
    if isinstance(x, bool):
        return x
    if isinstance(x, str):
        s = x.strip().lower()
        if s in ("true", "1", "yes", "y", "on"):
            return True
        if s in ("false", "0", "no", "n", "off"):
            return False
    return default


# Tesseract style codes accepted by the engine config, mapped to EasyOCR's
_EASYOCR_LANG_MAP = {
    "eng": "en",
    "vie": "vi",
    "fra": "fr",
    "deu": "de",
    "spa": "es",
    "ita": "it",
    "por": "pt",
    "nld": "nl",
}


def to_easyocr_langs(language) -> Tuple[str, ...]:
    if isinstance(language, str):
        langs = language.replace(",", "+").split("+")
    else:
        langs = list(language or [])
    out: List[str] = []
    for l in langs:
        code = _EASYOCR_LANG_MAP.get(str(l).strip().lower(), str(l).strip().lower())
        if code and code not in out:
            out.append(code)
    return tuple(out or ["en"])


def _torch_cuda_available() -> bool:
    try:
        import torch
    except ImportError:
        return False
    return bool(torch.cuda.is_available())


# -----------------------------
# Backend
# -----------------------------

class EasyOCREngine(BaseOCREngine):
    """
    EasyOCR adapter for lexscan. Requires the `easyocr` extra.

    Supported kwargs (all optional):
      - gpu / use_gpu: bool (defaults to True if CUDA is available, else False)
      - model_storage_directory: str
      - download_enabled: bool (default True)
      - paragraph: bool, merge detected boxes into paragraphs (default True)

    One Reader is built lazily per language set and reused.
    """

    def __init__(self, **kwargs: Dict[str, Any]):
        import easyocr  # heavy, only imported when this backend is selected

        self._easyocr = easyocr
        k = dict(kwargs)
        want_gpu = _as_bool(k.pop("gpu", k.pop("use_gpu", True)), True)
        self.use_gpu = bool(want_gpu and _torch_cuda_available())
        self.model_dir = k.pop("model_storage_directory", None)
        self.download_enabled = _as_bool(k.pop("download_enabled", True), True)
        self.paragraph = _as_bool(k.pop("paragraph", True), True)
        if k:
            logger.debug("Ignoring unknown easyocr backend options, %s", sorted(k))

        self._readers: Dict[Tuple[str, ...], Any] = {}
        self._lock = threading.Lock()

    def _reader_for(self, langs: Tuple[str, ...]):
        with self._lock:
            reader = self._readers.get(langs)
            if reader is None:
                logger.info("Loading EasyOCR reader for %s (gpu=%s)", "+".join(langs), self.use_gpu)
                reader = self._easyocr.Reader(
                    list(langs),
                    gpu=self.use_gpu,
                    model_storage_directory=self.model_dir,
                    download_enabled=self.download_enabled,
                    verbose=False,
                )
                self._readers[langs] = reader
            return reader

    def recognize(self, image: Any, language: str, progress: Optional[ProgressHook] = None) -> str:
        emit(progress, "loading language model", 0.0)
        reader = self._reader_for(to_easyocr_langs(language))
        emit(progress, "loading language model", 1.0)

        rgb = np.array(to_pil(image).convert("RGB"))
        emit(progress, RECOGNIZING_TEXT, 0.0)
        lines = reader.readtext(rgb, detail=0, paragraph=self.paragraph)
        emit(progress, RECOGNIZING_TEXT, 1.0)

        if isinstance(lines, (list, tuple)):
            return "\n".join(str(x) for x in lines if x)
        return str(lines) if lines else ""
