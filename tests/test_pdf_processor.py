import fitz
import pytest

from lexscan import ExtractionConfig, ExtractionEngine, SourceFile
from lexscan.pdf_processor import PyMuPDFDecoder, RasterSurface, get_pdf_decoder


def test_text_fragments_from_real_pdf(pdf_bytes):
    with PyMuPDFDecoder().open_document(pdf_bytes) as doc:
        assert doc.page_count == 2
        assert " ".join(doc.get_page(1).get_text_fragments()).strip() == "Hello world"
        assert doc.get_page(2).get_text_fragments() == []


def test_render_scales_page_dimensions(pdf_bytes):
    with PyMuPDFDecoder().open_document(pdf_bytes) as doc:
        page = doc.get_page(2)
        with page.render_to_surface(2.0) as surface:
            width, height = surface.size
            assert surface.image.mode == "RGB"
        assert surface.closed

    # default new_page() is A4, 595 x 842 points
    assert abs(width - 1190) <= 1
    assert abs(height - 1684) <= 1


def test_page_numbers_are_one_indexed(pdf_bytes):
    with PyMuPDFDecoder().open_document(pdf_bytes) as doc:
        with pytest.raises(IndexError):
            doc.get_page(0)
        with pytest.raises(IndexError):
            doc.get_page(3)


def test_garbage_bytes_fail_to_open():
    with pytest.raises(Exception):
        PyMuPDFDecoder().open_document(b"this is not a pdf")


def test_document_close_is_idempotent(pdf_bytes):
    doc = PyMuPDFDecoder().open_document(pdf_bytes)
    doc.close()
    doc.close()


def test_unknown_pdf_engine():
    assert isinstance(get_pdf_decoder("PyMuPDF"), PyMuPDFDecoder)
    with pytest.raises(ValueError, match="Unknown PDF engine"):
        get_pdf_decoder("pdfium")


def test_raster_surface_close():
    from PIL import Image

    surface = RasterSurface(Image.new("L", (3, 4)))
    assert surface.size == (3, 4)
    surface.close()
    assert surface.closed
    assert surface.size == (0, 0)


def test_engine_with_real_pdf_reads_text_layer_and_ocrs_blank_page(pdf_bytes, make_ocr):
    ocr = make_ocr(texts=["Signed by both parties"])
    engine = ExtractionEngine(ExtractionConfig(), ocr_engine=ocr)

    result = engine.extract(SourceFile(data=pdf_bytes, media_type="application/pdf"))

    assert result.text.split("\n\n")[0].strip() == "Hello world"
    assert result.text.endswith("\n\nSigned by both parties")
    assert len(ocr.calls) == 1
    width, height = ocr.calls[0]["size"]
    assert abs(width - 1190) <= 1 and abs(height - 1684) <= 1


def test_encrypted_pdf_is_rejected():
    doc = fitz.open()
    doc.new_page().insert_text((72, 72), "secret")
    data = doc.tobytes(encryption=fitz.PDF_ENCRYPT_AES_256, owner_pw="owner", user_pw="user")
    doc.close()

    with pytest.raises(ValueError, match="encrypted"):
        PyMuPDFDecoder().open_document(data)
