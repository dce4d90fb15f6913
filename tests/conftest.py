"""
Shared fakes for the extraction tests.

FakeOCR and FakePDFDecoder stand in for tesseract and PyMuPDF and count
every call, open, render and release so tests can check what the engine
touched.
"""
import io

import pytest
from PIL import Image

from lexscan.ocr_backends.base import BaseOCREngine
from lexscan.pdf_processor import BasePDFDecoder, PDFDocument, PDFPage, RasterSurface


class FakeOCR(BaseOCREngine):
    def __init__(self, texts=None, fail_on_call=None, phases=None):
        self.texts = list(texts or [])
        self.fail_on_call = fail_on_call
        self.phases = phases or [
            ("loading language traineddata", 0.0),
            ("loading language traineddata", 1.0),
            ("initializing api", 0.5),
            ("recognizing text", 0.0),
            ("recognizing text", 0.25),
            ("recognizing text", 0.75),
            ("recognizing text", 1.0),
        ]
        self.calls = []

    def recognize(self, image, language, progress=None):
        self.calls.append({"image": image, "language": language, "size": image.size})
        if self.fail_on_call == len(self.calls):
            raise RuntimeError("ocr engine crashed")
        for status, fraction in self.phases:
            if progress is not None:
                progress(status, fraction)
        return self.texts[len(self.calls) - 1] if self.texts else "OCR TEXT"


class FakeSurface(RasterSurface):
    def __init__(self, counters, scale):
        super().__init__(Image.new("RGB", (int(10 * scale), int(12 * scale)), "white"))
        self.counters = counters
        self.scale = scale

    def close(self):
        if not self.closed:
            self.counters["released"] += 1
        super().close()


class FakePage(PDFPage):
    def __init__(self, decoder, number, fragments):
        self.decoder = decoder
        self.number = number
        self.fragments = fragments

    def get_text_fragments(self):
        if self.number in self.decoder.fail_fragments_on:
            raise ValueError(f"bad content stream on page {self.number}")
        return list(self.fragments)

    def render_to_surface(self, scale):
        if self.number in self.decoder.fail_render_on:
            raise MemoryError("cannot allocate surface")
        self.decoder.counters["rendered"] += 1
        self.decoder.render_scales.append(scale)
        return FakeSurface(self.decoder.counters, scale)


class FakeDocument(PDFDocument):
    def __init__(self, decoder):
        self.decoder = decoder

    @property
    def page_count(self):
        return len(self.decoder.pages)

    def get_page(self, number):
        return FakePage(self.decoder, number, self.decoder.pages[number - 1])

    def close(self):
        self.decoder.counters["closed"] += 1


class FakePDFDecoder(BasePDFDecoder):
    """`pages` is a list of fragment lists, one per page."""

    def __init__(self, pages, fail_open=False, fail_render_on=(), fail_fragments_on=()):
        self.pages = pages
        self.fail_open = fail_open
        self.fail_render_on = set(fail_render_on)
        self.fail_fragments_on = set(fail_fragments_on)
        self.render_scales = []
        self.counters = {"opened": 0, "closed": 0, "rendered": 0, "released": 0}

    def open_document(self, data):
        if self.fail_open:
            raise RuntimeError("cannot open document: format error")
        self.counters["opened"] += 1
        return FakeDocument(self)


def png_bytes(size=(40, 20), color="white"):
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def make_ocr():
    return FakeOCR


@pytest.fixture
def make_pdf():
    return FakePDFDecoder


@pytest.fixture
def png():
    return png_bytes()


@pytest.fixture
def pdf_bytes():
    """A real two page PDF: page 1 carries text, page 2 is blank."""
    fitz = pytest.importorskip("fitz")
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Hello world", fontsize=12)
    doc.new_page()
    data = doc.tobytes()
    doc.close()
    return data
