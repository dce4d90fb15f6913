# src/lexscan/logger.py

import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import List, Optional, Union

# --- Custom Log Level for Progress ---
PROGRESS = 25
logging.addLevelName(PROGRESS, "PROGRESS")

def progress(self, msg, *args, **kwargs):
    if self.isEnabledFor(PROGRESS):
        self._log(PROGRESS, msg, args, **kwargs)

logging.Logger.progress = progress

# --- Custom Filters ---
class OnlyLevelFilter(logging.Filter):
    def __init__(self, levelno: int):
        super().__init__()
        self.levelno = levelno
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno == self.levelno

class ExcludeLevelFilter(logging.Filter):
    def __init__(self, levelno: int):
        super().__init__()
        self.levelno = levelno
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno != self.levelno

# --- Main Configuration Function ---
def setup_logging(
    *,
    level: int = logging.INFO,
    file_path: Optional[Union[str, Path]] = None,
    file_level: Optional[int] = None,
    stream=None,
) -> List[logging.Handler]:
    """
    Attaches console and optional file handlers to the "lexscan" logger.

    PROGRESS records are kept out of both handlers, the command line shows
    progress with a tqdm bar instead.

    Args:
        level: The base logging level for console output.
        file_path: Path to the persistent log file.
        file_level: The logging level for the file.
        stream: Console stream, stderr by default.

    Returns:
        The handlers that were installed, so callers can remove them again.
    """
    logger = logging.getLogger("lexscan")
    logger.setLevel(min(level, file_level if file_level is not None else level))

    handlers: List[logging.Handler] = []

    ch = logging.StreamHandler(stream or sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter("%(levelname)-8s | %(message)s"))
    ch.addFilter(ExcludeLevelFilter(PROGRESS))
    handlers.append(ch)

    if file_path:
        fp = Path(file_path)
        fp.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(fp, maxBytes=5*1024*1024, backupCount=2, encoding="utf-8")
        fh.setLevel(file_level if file_level is not None else level)
        fh.setFormatter(logging.Formatter("%(asctime)s | %(threadName)-12s | %(levelname)-8s | %(message)s"))
        fh.addFilter(ExcludeLevelFilter(PROGRESS))
        handlers.append(fh)

    for h in handlers:
        logger.addHandler(h)
    return handlers

def teardown_logging(handlers: List[logging.Handler]) -> None:
    """Detach and close handlers returned by setup_logging."""
    logger = logging.getLogger("lexscan")
    for h in handlers:
        logger.removeHandler(h)
        h.close()
