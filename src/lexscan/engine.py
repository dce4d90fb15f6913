# src/lexscan/engine.py
from __future__ import annotations

import io
import logging
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional, Union

from PIL import Image

from .config import ExtractionConfig
from .exceptions import (
    DecodeFailure,
    ExtractionCancelled,
    ExtractionFailure,
    LexScanError,
    RecognitionFailure,
    RenderFailure,
    UnsupportedMediaType,
)
from .logger import PROGRESS  # noqa, registers Logger.progress
from .models import (
    OCR,
    PAGE_SEPARATOR,
    PDF_MEDIA_TYPE,
    TEXT_LAYER,
    ExtractionResult,
    PageText,
    SourceFile,
    guess_media_type,
)
from .ocr_backends import BaseOCREngine, load_ocr_engine
from .pdf_processor import BasePDFDecoder, PDFDocument, get_pdf_decoder
from .progress import PageRangeSink, PhaseFilter, ProgressSink, as_progress_sink

logger = logging.getLogger("lexscan")

IMAGE = "image"
PDF = "pdf"

ProgressArg = Union[None, ProgressSink, Callable[[float], None]]


def classify_media_type(media_type: str) -> str:
    """
    Return "image" or "pdf" for a declared media type.
    Parameters such as "; charset=binary" are ignored.
    """
    mt = (media_type or "").split(";", 1)[0].strip().lower()
    if mt.startswith("image/"):
        return IMAGE
    if mt == PDF_MEDIA_TYPE:
        return PDF
    raise UnsupportedMediaType(media_type)


def _check_cancelled(cancel_event: Optional[threading.Event], where: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ExtractionCancelled(f"Extraction cancelled {where}")


class ExtractionEngine:
    """
    Turns an uploaded image or PDF into plain text.

    PDF pages with an embedded text layer are read directly. A page whose
    text layer is empty after stripping is rendered at `render_scale` and
    passed to OCR. Images always go through OCR. Pages are handled one at a
    time so only one rendered surface is alive at any moment.

    Any failure aborts the whole call, a partially extracted document is
    never returned.
    """

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        ocr_engine: Optional[BaseOCREngine] = None,
        pdf_decoder: Optional[BasePDFDecoder] = None,
    ):
        self.config = config or ExtractionConfig()
        if ocr_engine is None:
            ocr_engine = load_ocr_engine(self.config.ocr_backend, **(self.config.ocr_backend_kwargs or {}))
        self.ocr_engine = ocr_engine
        self.pdf_decoder = pdf_decoder if pdf_decoder is not None else get_pdf_decoder(self.config.pdf_engine)

    def extract(
        self,
        source: SourceFile,
        on_progress: ProgressArg = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ExtractionResult:
        """
        Extract the text of `source`.

        Args:
            source: The uploaded file.
            on_progress: Callable or ProgressSink receiving the fraction of
                OCR work done, in [0, 1] and never decreasing.
            cancel_event: Checked before every page, set it to abort.

        Raises:
            UnsupportedMediaType: before any decoding, for non image, non PDF input.
            ExtractionFailure: for decode, render, recognition errors or cancellation.
        """
        kind = classify_media_type(source.media_type)
        sink = as_progress_sink(on_progress)
        start = time.perf_counter()

        try:
            if kind == IMAGE:
                result = self._extract_image(source, sink, cancel_event)
            else:
                result = self._extract_pdf(source, sink, cancel_event)
        except ExtractionFailure as e:
            logger.warning("Extraction failed for %s, %s", source.name, e)
            raise

        logger.info(
            "Extracted %d chars from %s, %d page(s), %d via OCR, %.2fs",
            len(result.text), source.name, result.page_count, result.ocr_page_count,
            time.perf_counter() - start,
        )
        return result

    # -----------------------------
    # Image path
    # -----------------------------
    def _extract_image(
        self, source: SourceFile, sink: ProgressSink, cancel_event: Optional[threading.Event]
    ) -> ExtractionResult:
        _check_cancelled(cancel_event, "before image OCR")
        try:
            img = Image.open(io.BytesIO(source.data))
        except Exception as exc:
            raise DecodeFailure(f"Could not decode image {source.name}, {exc}") from exc

        with img:
            try:
                img.load()
            except Exception as exc:
                raise DecodeFailure(f"Could not decode image {source.name}, {exc}") from exc
            text = self._recognize(img, PhaseFilter(sink), page_number=None)

        return ExtractionResult(text=text, media_kind=IMAGE, pages=[PageText(1, text, OCR)])

    # -----------------------------
    # PDF path
    # -----------------------------
    def _extract_pdf(
        self, source: SourceFile, sink: ProgressSink, cancel_event: Optional[threading.Event]
    ) -> ExtractionResult:
        try:
            document = self.pdf_decoder.open_document(source.data)
        except Exception as exc:
            raise DecodeFailure(f"Could not open PDF {source.name}, {exc}") from exc

        pages: List[PageText] = []
        with document:
            total = document.page_count
            logger.debug("%s has %d page(s)", source.name, total)
            for number in range(1, total + 1):
                _check_cancelled(cancel_event, f"before page {number} of {total}")
                pages.append(self._extract_page(document, number, total, sink))

        text = PAGE_SEPARATOR.join(p.text for p in pages)
        return ExtractionResult(text=text, media_kind=PDF, pages=pages)

    def _extract_page(self, document: PDFDocument, number: int, total: int, sink: ProgressSink) -> PageText:
        try:
            page = document.get_page(number)
            fragments = page.get_text_fragments()
        except Exception as exc:
            raise DecodeFailure(f"Could not read page {number}, {exc}", page_number=number) from exc

        text = " ".join(fragments)
        if text.strip():
            logger.debug("Page %d/%d, using text layer (%d chars)", number, total, len(text))
            return PageText(number, text, TEXT_LAYER)

        logger.debug("Page %d/%d, no text layer, rendering at %.1fx for OCR", number, total, self.config.render_scale)
        try:
            surface = page.render_to_surface(self.config.render_scale)
        except Exception as exc:
            raise RenderFailure(f"Could not render page {number}, {exc}", page_number=number) from exc

        with surface:
            hook = PhaseFilter(PageRangeSink(sink, number, total))
            text = self._recognize(surface.image, hook, page_number=number)

        logger.progress(
            "Page %d/%d recognized", number, total,
            extra={"phase": "ocr", "pct": number / total, "current": number, "total": total},
        )
        return PageText(number, text, OCR)

    def _recognize(self, image, hook: PhaseFilter, page_number: Optional[int]) -> str:
        try:
            return self.ocr_engine.recognize(image, self.config.recognition_language, progress=hook)
        except LexScanError:
            raise
        except Exception as exc:
            where = f"page {page_number}" if page_number is not None else "image"
            raise RecognitionFailure(f"OCR failed on {where}, {exc}", page_number=page_number) from exc


def extract(
    source: Union[SourceFile, str, Path],
    on_progress: ProgressArg = None,
    config: Optional[ExtractionConfig] = None,
) -> ExtractionResult:
    """Convenience wrapper, builds an engine from `config` and extracts one file."""
    if not isinstance(source, SourceFile):
        # classify from the extension first so unsupported files are never read
        classify_media_type(guess_media_type(source))
        source = SourceFile.from_path(source)
    return ExtractionEngine(config).extract(source, on_progress=on_progress)
