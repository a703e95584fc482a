"""Row-by-row driver that fills AI answers into an alarm table.

Rows are handled strictly in ascending order by a single worker:

* blank description            -> skipped
* existing answer, no overwrite -> skipped
* otherwise                      -> one workflow call, answer written, table saved

A failed call only costs its row. A failed save aborts the run, because the
file on disk must always match the last reported success. Cancellation is
checked between rows and inside the client while it reads the stream.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Protocol

from ..cancellation import CancellationToken
from ..documents.xlsx.alarm_sheet import ANSWER_COLUMN, CODE_COLUMN, DESC_COLUMN
from ..errors import OperationCancelled, PersistenceError
from ..llm.workflow_client import WorkflowRunResult
from ..status_log import NullStatusSink, StatusSink


DEFAULT_ERROR_CODE = "0"


class RowTable(Protocol):
    def data_rows(self) -> Iterable[int]: ...

    def read_cell(self, row: int, column: int) -> str: ...

    def write_cell(self, row: int, column: int, value: str) -> None: ...


class WorkflowRunner(Protocol):
    def run_detailed(
        self,
        error_desc: str,
        error_code: str = ...,
        cancel_token: Optional[CancellationToken] = ...,
    ) -> WorkflowRunResult: ...


@dataclass
class RunSummary:
    processed: int = 0
    skipped: int = 0
    total: int = 0
    cancelled: bool = False

    @property
    def outcome(self) -> str:
        return "cancelled" if self.cancelled else "completed"

    @property
    def handled(self) -> int:
        return self.processed + self.skipped


class BatchRowProcessor:
    """Coordinates workflow calls, answer writes and saves for one table."""

    def __init__(
        self,
        client: WorkflowRunner,
        persist: Callable[[], None],
        sink: Optional[StatusSink] = None,
    ) -> None:
        self._client = client
        self._persist = persist
        self._sink = sink or NullStatusSink()

    def _notify(self, method: str, *args) -> None:
        # Status reporting must never interrupt the run.
        try:
            getattr(self._sink, method)(*args)
        except Exception:
            pass

    def process(
        self,
        table: RowTable,
        *,
        overwrite: bool = False,
        cancel_token: Optional[CancellationToken] = None,
    ) -> RunSummary:
        """Process every data row of ``table``.

        Returns the summary; ``summary.cancelled`` is set when the run was
        stopped by ``cancel_token``. Raises ``PersistenceError`` (with the
        partial summary attached) when saving fails.
        """
        token = cancel_token or CancellationToken()
        rows = list(table.data_rows())
        summary = RunSummary(total=len(rows))
        self._notify("on_progress", summary.processed, summary.total, summary.skipped)

        try:
            for row in rows:
                token.raise_if_cancelled()
                self._process_row(table, row, overwrite, token, summary)
        except OperationCancelled:
            summary.cancelled = True
        return summary

    def _skip(self, row: int, reason: str, summary: RunSummary) -> None:
        summary.skipped += 1
        self._notify("on_skip", row, reason)
        self._notify("on_progress", summary.processed, summary.total, summary.skipped)

    def _process_row(
        self,
        table: RowTable,
        row: int,
        overwrite: bool,
        token: CancellationToken,
        summary: RunSummary,
    ) -> None:
        error_desc = table.read_cell(row, DESC_COLUMN)
        if not error_desc:
            self._skip(row, "description is empty", summary)
            return

        existing = table.read_cell(row, ANSWER_COLUMN)
        if existing and not overwrite:
            self._skip(row, "answer already present", summary)
            return
        if existing:
            self._notify("on_notice", row, "has an answer; it will be overwritten.")

        error_code = table.read_cell(row, CODE_COLUMN) or DEFAULT_ERROR_CODE

        self._notify("on_request", row, error_desc)
        try:
            result = self._client.run_detailed(error_desc, error_code, token)
        except OperationCancelled:
            raise
        except Exception as exc:
            self._notify("on_error", row, str(exc))
            self._skip(row, "request failed", summary)
            return

        answer = result.answer or ""
        table.write_cell(row, ANSWER_COLUMN, answer)
        self._notify("on_response", row, answer)

        try:
            self._persist()
        except Exception as exc:
            self._notify("on_error", row, f"save failed: {exc}")
            raise PersistenceError(f"Saving after row {row} failed: {exc}", summary) from exc

        summary.processed += 1
        self._notify("on_notice", row, f"done and saved ({result.duration_ms:.0f} ms).")
        self._notify("on_progress", summary.processed, summary.total, summary.skipped)


__all__ = ["DEFAULT_ERROR_CODE", "RowTable", "WorkflowRunner", "RunSummary", "BatchRowProcessor"]
