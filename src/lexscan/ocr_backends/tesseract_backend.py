# lexscan/ocr_backends/tesseract_backend.py
from __future__ import annotations

from typing import Any, Dict, Optional
import logging
import os
import platform
import re
import shutil
import threading
from pathlib import Path

import pytesseract as pt

from .base import BaseOCREngine, ProgressHook, emit, to_pil
from ..progress import RECOGNIZING_TEXT

logger = logging.getLogger("lexscan")


def _as_int(x, default: int) -> int:
    try:
        if isinstance(x, str):
            x = x.strip().rstrip(",}] ")
        return int(x)
    except (TypeError, ValueError):
        m = re.search(r"-?\d+", str(x))
        return int(m.group()) if m else default


def resolve_tesseract_cmd() -> str | None:
    # 1) explicit env override
    cmd = os.getenv("TESSERACT_CMD")
    if cmd and Path(cmd).exists():
        return cmd

    # 2) look on PATH
    cmd = shutil.which("tesseract")
    if cmd:
        return cmd

    # 3) common fallbacks by OS
    system = platform.system()
    if system == "Windows":
        candidates = [
            r"C:\Program Files\Tesseract-OCR\tesseract.exe",
            r"C:\Program Files (x86)\Tesseract-OCR\tesseract.exe",
        ]
    elif system == "Darwin":  # macOS
        candidates = [
            "/opt/homebrew/bin/tesseract",   # Apple Silicon Homebrew
            "/usr/local/bin/tesseract",      # Intel Homebrew/MacPorts
        ]
    else:  # Linux and others
        candidates = [
            "/usr/bin/tesseract",            # apt/yum default
            "/usr/local/bin/tesseract",      # source install
            "/snap/bin/tesseract",           # snap
        ]

    for p in candidates:
        if Path(p).exists():
            return p
    return None


_setup_lock = threading.Lock()
_configured = False


def configure_tesseract(tesseract_cmd: str | None = None, tessdata_prefix: str | None = None) -> str | None:
    """
    One-time, process wide setup of the tesseract binary path.

    Safe to call from every engine constructor: only the first call resolves
    the binary, later calls return the configured path. An explicit
    tesseract_cmd always wins and is validated.
    """
    global _configured
    with _setup_lock:
        if tesseract_cmd:
            if not os.path.exists(str(tesseract_cmd)):
                raise RuntimeError(f"Tesseract binary not found: {tesseract_cmd}")
            pt.pytesseract.tesseract_cmd = str(tesseract_cmd)
            _configured = True
        elif not _configured:
            cmd = resolve_tesseract_cmd()
            if cmd:
                pt.pytesseract.tesseract_cmd = cmd
                logger.debug("Using tesseract binary at %s", cmd)
            else:
                logger.warning("Tesseract binary not found on PATH, OCR calls will fail until it is installed")
            _configured = True

        if tessdata_prefix:
            os.environ["TESSDATA_PREFIX"] = str(tessdata_prefix)
        return pt.pytesseract.tesseract_cmd


def _reset_tesseract_configuration() -> None:
    global _configured
    with _setup_lock:
        _configured = False


# Map common two letter codes to Tesseract's traineddata names
_TESS_LANG_MAP = {
    "vi": "vie",
    "en": "eng",
    "fr": "fra",
    "de": "deu",
    "es": "spa",
    "it": "ita",
    "pt": "por",
    "nl": "nld",
}


def to_tesseract_lang(language) -> str:
    """'en' -> 'eng', ['en', 'vi'] -> 'eng+vie', 'eng+vie' is kept in order."""
    if isinstance(language, str):
        langs = [s for s in re.split(r"[+,]", language)]
    else:
        langs = list(language or [])
    codes = []
    for l in langs:
        code = _TESS_LANG_MAP.get(str(l).strip().lower(), str(l).strip().lower())
        if code and code not in codes:
            codes.append(code)
    return "+".join(codes) or "eng"


class TesseractOCREngine(BaseOCREngine):
    """
    Pytesseract-based backend.

    Kwargs supported (all optional):
      - tesseract_cmd: full path to tesseract binary (Windows)
      - tessdata_prefix: path to tessdata directory
      - oem: 0..3 (default 3 = LSTM)
      - psm: page segmentation mode (default 3 = fully automatic, as the
        browser build of tesseract uses)
      - preserve_interword_spaces: bool (default False)
      - extra_config: str of extra flags (appended to config string)
      - timeout: seconds before a single recognition is killed (default 0, none)
    """

    def __init__(self, **kwargs: Dict[str, Any]):
        k = dict(kwargs)  # don't mutate caller's dict

        configure_tesseract(
            k.pop("tesseract_cmd", None) or k.pop("tesseract_path", None),
            k.pop("tessdata_prefix", None),
        )

        oem = _as_int(k.pop("oem", 3), 3)
        psm = _as_int(k.pop("psm", 3), 3)
        preserve_spaces = bool(k.pop("preserve_interword_spaces", False))
        extra_cfg = str(k.pop("extra_config", "")).strip()
        self.timeout = _as_int(k.pop("timeout", 0), 0)

        if k:
            logger.debug("Ignoring unknown tesseract backend options, %s", sorted(k))

        cfg_parts = [f"--oem {oem}", f"--psm {psm}"]
        if preserve_spaces:
            cfg_parts.append("-c preserve_interword_spaces=1")
        if extra_cfg:
            cfg_parts.append(extra_cfg)
        self._config = " ".join(cfg_parts)

    @property
    def config(self) -> str:
        return self._config

    def recognize(self, image: Any, language: str, progress: Optional[ProgressHook] = None) -> str:
        emit(progress, "initializing tesseract", 0.0)
        pil_im = to_pil(image)
        lang = to_tesseract_lang(language)
        emit(progress, "initializing tesseract", 1.0)

        emit(progress, RECOGNIZING_TEXT, 0.0)
        text = pt.image_to_string(pil_im, lang=lang, config=self._config, timeout=self.timeout)
        emit(progress, RECOGNIZING_TEXT, 1.0)
        return text or ""
