# src/lexscan/progress.py
"""
Progress reporting.

The engine never talks to an OCR library's callback directly. Each OCR call
gets a ProgressSink, and sinks are chained so that a page's own [0, 1]
progress lands in that page's slice of the document range.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional, Union

logger = logging.getLogger("lexscan")

RECOGNIZING_TEXT = "recognizing text"


class ProgressSink(ABC):
    @abstractmethod
    def report(self, fraction: float) -> None:
        raise NotImplementedError


class NullProgressSink(ProgressSink):
    def report(self, fraction: float) -> None:
        pass


class CallbackProgressSink(ProgressSink):
    """
    Wraps a caller supplied callable.

    Values are clamped to [0, 1] and anything below the last reported value
    is dropped, so the callback only ever sees a non-decreasing sequence.
    A callback that raises is logged and otherwise ignored.
    """

    def __init__(self, callback: Callable[[float], None]):
        self.callback = callback
        self.last: Optional[float] = None

    def report(self, fraction: float) -> None:
        value = min(1.0, max(0.0, float(fraction)))
        if self.last is not None and value < self.last:
            logger.debug("Dropping regressing progress value %.4f < %.4f", value, self.last)
            return
        self.last = value
        try:
            self.callback(value)
        except Exception:
            logger.exception("Progress callback raised, continuing extraction")


class PageRangeSink(ProgressSink):
    """Maps one page's progress into [(page-1)/total, page/total]."""

    def __init__(self, parent: ProgressSink, page_number: int, total_pages: int):
        if total_pages < 1 or not 1 <= page_number <= total_pages:
            raise ValueError(f"Page {page_number} is outside a {total_pages} page document")
        self.parent = parent
        self.page_number = page_number
        self.total_pages = total_pages

    def report(self, fraction: float) -> None:
        f = min(1.0, max(0.0, float(fraction)))
        self.parent.report((f + self.page_number - 1) / self.total_pages)


class PhaseFilter:
    """
    Adapts an OCR backend's (status, fraction) hook to a ProgressSink.
    Only the recognition phase is forwarded, loading and initialization
    phases would otherwise make the bar jump back and forth.
    """

    def __init__(self, sink: ProgressSink, phase: str = RECOGNIZING_TEXT):
        self.sink = sink
        self.phase = phase

    def __call__(self, status: str, fraction: float) -> None:
        if status == self.phase:
            self.sink.report(fraction)


class TqdmProgressSink(ProgressSink):
    """Drives a tqdm bar with a fixed total of 1000 steps."""

    STEPS = 1000

    def __init__(self, bar):
        self.bar = bar
        self.position = 0

    def report(self, fraction: float) -> None:
        target = int(round(min(1.0, max(0.0, float(fraction))) * self.STEPS))
        if target > self.position:
            self.bar.update(target - self.position)
            self.position = target


def as_progress_sink(on_progress: Union[None, ProgressSink, Callable[[float], None]]) -> ProgressSink:
    if on_progress is None:
        return NullProgressSink()
    if isinstance(on_progress, CallbackProgressSink):
        # fresh ordering state per call, a sink may be reused across extractions
        return CallbackProgressSink(on_progress.callback)
    if isinstance(on_progress, ProgressSink):
        # still guard the range and ordering for caller supplied sinks
        return CallbackProgressSink(on_progress.report)
    if callable(on_progress):
        return CallbackProgressSink(on_progress)
    raise TypeError(f"on_progress must be callable or a ProgressSink, got {type(on_progress).__name__}")
