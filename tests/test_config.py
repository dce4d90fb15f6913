import pytest

from lexscan.config import DEFAULT_OCR_BACKEND, ExtractionConfig


def test_defaults():
    cfg = ExtractionConfig()
    assert cfg.recognition_language == "eng"
    assert cfg.render_scale == 2.0
    assert cfg.ocr_backend == DEFAULT_OCR_BACKEND
    assert cfg.pdf_engine == "pymupdf"


@pytest.mark.parametrize("scale", [0, -1.5])
def test_render_scale_must_be_positive(scale):
    with pytest.raises(ValueError):
        ExtractionConfig(render_scale=scale)


def test_language_must_be_set():
    with pytest.raises(ValueError):
        ExtractionConfig(recognition_language="  ")


def test_from_dict_ignores_none_and_coerces_scale():
    cfg = ExtractionConfig.from_dict({"recognition_language": None, "render_scale": "3"})
    assert cfg.recognition_language == "eng"
    assert cfg.render_scale == 3.0


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ValueError, match="dpi"):
        ExtractionConfig.from_dict({"dpi": 300})


def test_dict_round_trip():
    cfg = ExtractionConfig(recognition_language="eng+vie", ocr_backend_kwargs={"psm": 6})
    assert ExtractionConfig.from_dict(cfg.to_dict()) == cfg
