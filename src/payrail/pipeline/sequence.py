"""Trace sequence generator for Entry Detail trace numbers."""

from __future__ import annotations

import threading

MAX_TRACE_SEQ = 9_999_999  # 7 digits in the trace number


class TraceSequenceGenerator:
    """In-process ITraceSequence: strictly increasing, thread-safe.

    ``start`` lets a restarted process resume above the highest sequence
    already handed out, so unflushed entries never share a trace number.
    """

    def __init__(self, start: int = 1) -> None:
        if start < 1:
            raise ValueError(f"start must be >= 1, got {start}")
        self._next = start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
        return value

    def peek(self) -> int:
        """The value the next call to ``next`` will return."""
        with self._lock:
            return self._next
