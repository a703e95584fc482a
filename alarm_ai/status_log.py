"""Status sinks for batch runs.

The batch processor reports every row through a small sink interface. Two
implementations ship here: a console sink that prints timestamped status
lines, and a daily request log that appends request/response/error lines to
``<log_dir>/YYYY-MM-DD.txt``. Sinks may fail; the processor ignores those
failures so logging never interrupts a run.
"""

from __future__ import annotations

import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Protocol

from .errors import StatusLogError


class StatusSink(Protocol):
    def on_request(self, row: int, description: str) -> None: ...

    def on_response(self, row: int, text: str) -> None: ...

    def on_error(self, row: int, message: str) -> None: ...

    def on_skip(self, row: int, reason: str) -> None: ...

    def on_notice(self, row: int, message: str) -> None: ...

    def on_progress(self, processed: int, total: int, skipped: int) -> None: ...


def _single_line(text: Optional[str]) -> str:
    if not text or not text.strip():
        return ""
    return text.replace("\r\n", "\n").replace("\r", "\n").replace("\n", " ")


class NullStatusSink:
    """Sink that drops every notification."""

    def on_request(self, row: int, description: str) -> None:
        pass

    def on_response(self, row: int, text: str) -> None:
        pass

    def on_error(self, row: int, message: str) -> None:
        pass

    def on_skip(self, row: int, reason: str) -> None:
        pass

    def on_notice(self, row: int, message: str) -> None:
        pass

    def on_progress(self, processed: int, total: int, skipped: int) -> None:
        pass


class ConsoleStatusSink(NullStatusSink):
    """Print status lines the way the rest of the tooling does."""

    def __init__(self, echo: Callable[[str], None] = print, *, show_responses: bool = False) -> None:
        self._echo = echo
        self._show_responses = show_responses

    def _emit(self, message: str) -> None:
        self._echo(f"[{datetime.now():%H:%M:%S}] {message}")

    def on_request(self, row: int, description: str) -> None:
        self._emit(f"Row {row} requesting: {_single_line(description)}")

    def on_response(self, row: int, text: str) -> None:
        if self._show_responses:
            self._emit(f"Row {row} answer: {_single_line(text)}")
        else:
            self._emit(f"Row {row} answered ({len(text or '')} chars).")

    def on_error(self, row: int, message: str) -> None:
        self._emit(f"Row {row} failed: {message}")

    def on_skip(self, row: int, reason: str) -> None:
        self._emit(f"Row {row} skipped: {reason}")

    def on_notice(self, row: int, message: str) -> None:
        self._emit(f"Row {row} {message}")

    def on_progress(self, processed: int, total: int, skipped: int) -> None:
        self._emit(f"processed: {processed} / {total}, skipped: {skipped}")


class DailyFileLog(NullStatusSink):
    """Append request/response/error lines to one UTF-8 file per day."""

    def __init__(self, log_dir: Path, clock: Callable[[], datetime] = datetime.now) -> None:
        self._log_dir = Path(log_dir)
        self._clock = clock
        self._lock = threading.Lock()

    def path_for(self, when: datetime) -> Path:
        return self._log_dir / f"{when:%Y-%m-%d}.txt"

    def _write(self, row: int, label: str, text: str) -> None:
        now = self._clock()
        line = f"[{now:%Y-%m-%d %H:%M:%S}] row {row} {label}: {_single_line(text)}"
        path = self.path_for(now)
        try:
            with self._lock:
                path.parent.mkdir(parents=True, exist_ok=True)
                with path.open("a", encoding="utf-8") as handle:
                    handle.write(line)
                    handle.write("\n")
        except OSError as exc:
            raise StatusLogError(f"Failed to append to request log '{path}': {exc}") from exc

    def on_request(self, row: int, description: str) -> None:
        self._write(row, "request", description)

    def on_response(self, row: int, text: str) -> None:
        self._write(row, "response", text)

    def on_error(self, row: int, message: str) -> None:
        self._write(row, "error", message)


class FanoutStatusSink:
    """Forward each notification to several sinks, isolating their failures."""

    def __init__(self, sinks: Iterable[StatusSink]) -> None:
        self._sinks: List[StatusSink] = list(sinks)

    def _each(self, method: str, *args) -> None:
        for sink in self._sinks:
            try:
                getattr(sink, method)(*args)
            except Exception:
                pass

    def on_request(self, row: int, description: str) -> None:
        self._each("on_request", row, description)

    def on_response(self, row: int, text: str) -> None:
        self._each("on_response", row, text)

    def on_error(self, row: int, message: str) -> None:
        self._each("on_error", row, message)

    def on_skip(self, row: int, reason: str) -> None:
        self._each("on_skip", row, reason)

    def on_notice(self, row: int, message: str) -> None:
        self._each("on_notice", row, message)

    def on_progress(self, processed: int, total: int, skipped: int) -> None:
        self._each("on_progress", processed, total, skipped)


__all__ = [
    "StatusSink",
    "NullStatusSink",
    "ConsoleStatusSink",
    "DailyFileLog",
    "FanoutStatusSink",
]
