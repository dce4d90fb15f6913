# src/lexscan/pdf_processor.py
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import fitz  # PyMuPDF
from PIL import Image

logger = logging.getLogger("lexscan")


class RasterSurface:
    """A rendered page held in memory. Release it with close() or a with block."""

    def __init__(self, image: Image.Image):
        self.image: Optional[Image.Image] = image

    @property
    def size(self):
        return self.image.size if self.image is not None else (0, 0)

    @property
    def closed(self) -> bool:
        return self.image is None

    def close(self) -> None:
        if self.image is not None:
            self.image.close()
            self.image = None

    def __enter__(self) -> "RasterSurface":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


# --- Step 1, interface ---
class PDFPage(ABC):
    @abstractmethod
    def get_text_fragments(self) -> List[str]:
        """Embedded text runs of the page, in reading order."""
        raise NotImplementedError

    @abstractmethod
    def render_to_surface(self, scale: float) -> RasterSurface:
        raise NotImplementedError


class PDFDocument(ABC):
    @property
    @abstractmethod
    def page_count(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def get_page(self, number: int) -> PDFPage:
        """Return page `number`, counting from 1."""
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class BasePDFDecoder(ABC):
    """
    Interface for any PDF decoding engine.
    """

    @abstractmethod
    def open_document(self, data: bytes) -> PDFDocument:
        """Open a PDF held in memory. Raises on corrupt or empty input."""
        raise NotImplementedError


# --- Step 2, concrete implementation with PyMuPDF ---
class PyMuPDFPage(PDFPage):
    def __init__(self, page: "fitz.Page"):
        self._page = page

    def get_text_fragments(self) -> List[str]:
        # sort=True gives reading order, block type 0 is text
        blocks = self._page.get_text("dict", sort=True).get("blocks", [])
        fragments: List[str] = []
        for b in blocks:
            if b.get("type") != 0:
                continue
            for line in b.get("lines", []):
                for span in line.get("spans", []):
                    fragments.append(span.get("text", ""))
        return fragments

    def render_to_surface(self, scale: float) -> RasterSurface:
        # Prefer matrix-based scaling (consistent across PyMuPDF versions)
        pix = self._page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
        mode = "RGB" if pix.n >= 3 else "L"
        img = Image.frombytes(mode, (pix.width, pix.height), pix.samples)
        return RasterSurface(img)


class PyMuPDFDocument(PDFDocument):
    def __init__(self, doc: "fitz.Document"):
        self._doc = doc

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def get_page(self, number: int) -> PDFPage:
        if not 1 <= number <= self._doc.page_count:
            raise IndexError(f"Page {number} out of range, document has {self._doc.page_count} pages")
        return PyMuPDFPage(self._doc.load_page(number - 1))

    def close(self) -> None:
        if not self._doc.is_closed:
            self._doc.close()


class PyMuPDFDecoder(BasePDFDecoder):
    """PDF decoder that uses PyMuPDF."""

    def open_document(self, data: bytes) -> PDFDocument:
        doc = fitz.open(stream=data, filetype="pdf")
        if doc.needs_pass:
            doc.close()
            raise ValueError("PDF is encrypted and requires a password")
        logger.debug("Opened PDF with %d pages", doc.page_count)
        return PyMuPDFDocument(doc)


# --- Step 3, factory ---
def get_pdf_decoder(engine_name: str = "pymupdf") -> BasePDFDecoder:
    """
    Create a PDF decoder by name.
    """
    name = (engine_name or "").lower()
    if name == "pymupdf":
        return PyMuPDFDecoder()
    raise ValueError(f"Unknown PDF engine, '{engine_name}'. Supported engines, ['pymupdf']")
