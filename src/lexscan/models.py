# src/lexscan/models.py
from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

PDF_MEDIA_TYPE = "application/pdf"

# Page text sources
TEXT_LAYER = "text_layer"
OCR = "ocr"

PAGE_SEPARATOR = "\n\n"


def guess_media_type(path: Union[str, Path]) -> str:
    """Guess the media type from the file extension, empty string when unknown."""
    media_type, _ = mimetypes.guess_type(str(path))
    return media_type or ""


@dataclass(frozen=True)
class SourceFile:
    """An uploaded file: raw bytes plus the media type the caller declared."""
    data: bytes = field(repr=False)
    media_type: str
    name: str = "upload"

    @classmethod
    def from_path(cls, path: Union[str, Path], media_type: Optional[str] = None) -> "SourceFile":
        p = Path(path)
        return cls(data=p.read_bytes(), media_type=media_type or guess_media_type(p), name=p.name)

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class PageText:
    """Text for one page (1-indexed) and where it came from."""
    number: int
    text: str
    method: str


@dataclass
class ExtractionResult:
    """Final output of one extraction, pages already joined in order."""
    text: str
    media_kind: str
    pages: List[PageText] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def ocr_page_count(self) -> int:
        return sum(1 for p in self.pages if p.method == OCR)

    def __str__(self) -> str:
        return self.text
