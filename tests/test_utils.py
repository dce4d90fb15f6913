from pathlib import Path

from lexscan.utils import collect_files, safe_fname, text_output_path


def test_collect_files_filters_directories(tmp_path):
    (tmp_path / "sub").mkdir()
    (tmp_path / "a.pdf").write_bytes(b"")
    (tmp_path / "sub" / "b.JPG").write_bytes(b"")
    (tmp_path / "sub" / "old-backup.png").write_bytes(b"")
    (tmp_path / "c.docx").write_bytes(b"")
    explicit = tmp_path / "c.docx"

    files = collect_files([tmp_path, explicit, tmp_path / "missing.pdf"], ignore_keywords=["Backup"])

    assert [f.name for f in files] == ["a.pdf", "b.JPG", "c.docx"]


def test_safe_fname():
    assert safe_fname("Lease Agreement (final).pdf") == "lease-agreement-final.pdf"
    assert safe_fname("") == "file"
    assert safe_fname("???") == "file"


def test_text_output_path():
    assert text_output_path(Path("out"), Path("in/Report.Final.pdf")) == Path("out/report-final.txt")
