# src/lexscan/utils.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

from slugify import slugify

logger = logging.getLogger("lexscan")

SUPPORTED_SUFFIXES = (".pdf", ".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".gif", ".webp")


def collect_files(paths: Iterable[Path], ignore_keywords: Iterable[str] = ()) -> List[Path]:
    """
    Expand files and directories into the list of files to extract.
    Directories are scanned recursively and filtered by suffix, files given
    explicitly are always kept so the engine can reject them itself.
    """
    ignore_keywords_lower = [k.lower() for k in ignore_keywords if k]
    selected: List[Path] = []
    for p in paths:
        p = Path(p)
        if p.is_dir():
            for file_path in sorted(p.rglob("*")):
                if not file_path.is_file():
                    continue
                filename_lower = file_path.name.lower()
                if any(keyword in filename_lower for keyword in ignore_keywords_lower):
                    continue
                if filename_lower.endswith(SUPPORTED_SUFFIXES):
                    selected.append(file_path)
        elif p.exists():
            selected.append(p)
        else:
            logger.error("Input path does not exist, %s", p)
    return selected


def safe_fname(name: str, fallback: str = "file") -> str:
    """
    Create a filesystem safe name, preserve extension when present.
    """
    name = (name or "").strip() or fallback
    if "." in name:
        base, ext = name.rsplit(".", 1)
        return f"{slugify(base)[:100] or fallback}.{ext}"
    return slugify(name)[:100] or fallback


def text_output_path(output_dir: Path, source: Path) -> Path:
    """report.final.pdf -> <output_dir>/report-final.txt"""
    return Path(output_dir) / Path(safe_fname(Path(source).name)).with_suffix(".txt")
