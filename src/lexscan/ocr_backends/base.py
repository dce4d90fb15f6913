# lexscan/ocr_backends/base.py
from typing import Any, Callable, Optional
from abc import ABC, abstractmethod

import numpy as np
from PIL import Image

# (status, fraction) hook, status "recognizing text" is the phase the engine reports
ProgressHook = Callable[[str, float], None]


class BaseOCREngine(ABC):
    @abstractmethod
    def recognize(self, image: Any, language: str, progress: Optional[ProgressHook] = None) -> str:
        """Return the recognized text for one PIL image or numpy array."""
        pass


def to_pil(img: Any) -> Image.Image:
    """Accept PIL.Image | np.ndarray; return an RGB or grayscale PIL image."""
    if isinstance(img, Image.Image):
        if img.mode not in ("RGB", "L"):
            return img.convert("RGB")
        return img
    if isinstance(img, np.ndarray):
        if img.ndim == 2:
            return Image.fromarray(img)
        # Heuristic: if last dim is 3/4 treat as RGB
        return Image.fromarray(img[..., :3])
    raise TypeError(f"Unsupported image type for OCR, {type(img).__name__}")


def emit(progress: Optional[ProgressHook], status: str, fraction: float) -> None:
    if progress is not None:
        progress(status, fraction)
