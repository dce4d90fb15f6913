# src/lexscan/cli.py
from __future__ import annotations

import argparse
import ast
import json
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from .config import ExtractionConfig
from .engine import ExtractionEngine, classify_media_type
from .exceptions import LexScanError, describe_failure
from .logger import setup_logging, teardown_logging
from .models import SourceFile, guess_media_type
from .ocr_backends import normalize_backend_name
from .progress import TqdmProgressSink
from .utils import collect_files, text_output_path

__all__ = ["main"]

logger = logging.getLogger("lexscan")


def _usage_error(message: str) -> None:
    """Report a bad invocation the way argparse does, exit status 2."""
    print(f"lexscan: error: {message}", file=sys.stderr)
    raise SystemExit(2)


def _parse_backend_kwargs(val) -> dict:
    """
    Accept several syntaxes for --ocr-backend-kwargs:
      1) JSON (double quotes)                      {"psm": 6, "oem": 1}
      2) Python-literal dict with single quotes    {'psm': 6}
      3) key=value pairs separated by , or ;       psm=6;preserve_interword_spaces=true
    """
    if isinstance(val, dict):
        return dict(val)
    if not isinstance(val, str) or not val.strip():
        return {}

    s = val.strip()
    # Strip outer quotes like '"{...}"' or "'{...}'"
    if len(s) >= 2 and s[0] in ("'", '"') and s[-1] == s[0]:
        s = s[1:-1].strip()

    try:
        parsed = json.loads(s)
        if isinstance(parsed, dict):
            return parsed
    except ValueError:
        pass

    try:
        lit = ast.literal_eval(s)
        if isinstance(lit, dict):
            return lit
    except (ValueError, SyntaxError):
        pass

    out: dict = {}
    for part in re.split(r"[;,]\s*", s):
        if "=" not in part:
            continue
        k, v = part.split("=", 1)
        k = k.strip().strip("'\"").replace("-", "_").lower()
        v = v.strip().strip("'\"")
        low = v.lower()
        if low in ("true", "false"):
            out[k] = (low == "true")
        elif re.fullmatch(r"-?\d+", v):
            out[k] = int(v)
        elif re.fullmatch(r"-?\d+\.\d*", v):
            out[k] = float(v)
        else:
            out[k] = v

    if out:
        return out

    _usage_error(f"invalid --ocr-backend-kwargs, could not parse: {val!r}")


def _build_extract_parser(subparsers: argparse._SubParsersAction) -> argparse.ArgumentParser:
    p = subparsers.add_parser("extract", help="Extract text from images and PDFs")
    p.add_argument("paths", nargs="+", type=Path, help="Files or directories to extract")
    p.add_argument(
        "-o", "--output-dir", type=Path,
        help="Write one .txt per input into this directory instead of printing to stdout",
    )
    p.add_argument("-l", "--language", default="eng", help="OCR recognition language, e.g. eng or eng+vie")
    p.add_argument("--render-scale", type=float, default=2.0, help="Scale used to render PDF pages that need OCR")
    p.add_argument("--media-type", help="Override the media type guessed from the file extension")
    p.add_argument(
        "--ignore-keyword", action="append", dest="ignore_keywords",
        help="Skip files whose name contains this keyword when scanning directories; repeatable",
    )

    backend = p.add_argument_group("OCR backend")
    backend.add_argument("--ocr-backend", default="tesseract", help="Alias (tesseract, easyocr) or dotted class path")
    backend.add_argument(
        "--ocr-backend-kwargs", default="{}",
        help='Backend init kwargs as JSON or key=value pairs, e.g. \'{"psm": 6}\' or psm=6;oem=1',
    )

    out = p.add_argument_group("Output and logging")
    out.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    out.add_argument("--log-file", type=Path, help="Also write logs to this file (rotated at 5 MB)")
    out.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return p


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="lexscan", description="lexscan, text extraction for uploaded documents")
    subparsers = parser.add_subparsers(dest="command")
    _build_extract_parser(subparsers)
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_usage(sys.stderr)
        raise SystemExit(2)
    return args


def _unique(path: Path, used: set) -> Path:
    candidate, n = path, 2
    while candidate in used:
        candidate = path.with_name(f"{path.stem}-{n}{path.suffix}")
        n += 1
    used.add(candidate)
    return candidate


def run_extract(args: argparse.Namespace) -> int:
    try:
        config = ExtractionConfig.from_dict({
            "recognition_language": args.language,
            "render_scale": args.render_scale,
            "ocr_backend": normalize_backend_name(args.ocr_backend),
            "ocr_backend_kwargs": _parse_backend_kwargs(args.ocr_backend_kwargs),
        })
    except ValueError as e:
        _usage_error(f"invalid configuration, {e}")

    files = collect_files(args.paths, args.ignore_keywords or [])
    if not files:
        logger.error("No files to extract")
        return 1

    try:
        engine = ExtractionEngine(config)
    except (ImportError, RuntimeError, TypeError, ValueError) as e:
        _usage_error(f"cannot load OCR backend {config.ocr_backend!r}, {e}")

    if args.output_dir:
        args.output_dir.mkdir(parents=True, exist_ok=True)

    failures = 0
    used_outputs: set = set()
    for file_path in files:
        bar = tqdm(
            total=TqdmProgressSink.STEPS, desc=file_path.name,
            disable=args.no_progress, leave=False, file=sys.stderr,
        )
        try:
            # classify first so unsupported files are never read
            media_type = args.media_type or guess_media_type(file_path)
            classify_media_type(media_type)
            source = SourceFile.from_path(file_path, media_type=media_type)
            result = engine.extract(source, on_progress=TqdmProgressSink(bar))
        except (LexScanError, OSError) as e:
            failures += 1
            logger.error("%s, %s", file_path, e)
            print(f"{file_path}: {describe_failure(e)}", file=sys.stderr)
            continue
        finally:
            bar.close()

        if args.output_dir:
            out_path = _unique(text_output_path(args.output_dir, file_path), used_outputs)
            out_path.write_text(result.text, encoding="utf-8")
            logger.info("Wrote %s", out_path)
        else:
            if len(files) > 1:
                sys.stdout.write(f"==> {file_path} <==\n")
            sys.stdout.write(result.text)
            if not result.text.endswith("\n"):
                sys.stdout.write("\n")

    if failures:
        logger.warning("%d of %d file(s) failed", failures, len(files))
    return 1 if failures else 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    handlers = setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        file_path=args.log_file,
    )
    try:
        return run_extract(args)
    finally:
        teardown_logging(handlers)


if __name__ == "__main__":
    sys.exit(main())
