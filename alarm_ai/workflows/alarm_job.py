from __future__ import annotations

"""
End-to-end job: open an alarm workbook, answer every row, save to a copy.

Used by ``scripts/alarm_answer_cli.py``; the function runs on the worker
thread and is safe to cancel through the passed ``CancellationToken``.
"""

import os
from pathlib import Path
from typing import Optional, Union

from ..cancellation import CancellationToken
from ..config import WorkflowSettings
from ..documents.xlsx.alarm_sheet import AlarmSheet
from ..errors import InputError
from ..llm.workflow_client import WorkflowClient
from ..processing.batch_processor import BatchRowProcessor, RunSummary, WorkflowRunner
from ..status_log import NullStatusSink, StatusSink


PathLike = Union[str, Path]


def default_output_path(input_path: PathLike) -> Path:
    source = Path(input_path)
    return source.with_name(f"{source.stem}_AI.xlsx")


def _same_file(a: PathLike, b: PathLike) -> bool:
    left = os.path.normcase(os.path.abspath(str(a)))
    right = os.path.normcase(os.path.abspath(str(b)))
    return left == right


def check_paths(input_path: Optional[PathLike], output_path: Optional[PathLike]) -> None:
    """Raise ``InputError`` when the job cannot start with these paths."""
    if not output_path or not str(output_path).strip():
        raise InputError("Set an output path first.")
    if not input_path or not Path(input_path).is_file():
        raise InputError(f"Input workbook not found: {input_path}")
    if _same_file(input_path, output_path):
        raise InputError("The output path must differ from the input workbook.")


def run_alarm_job(
    input_path: PathLike,
    output_path: PathLike,
    settings: WorkflowSettings,
    *,
    overwrite: bool = False,
    cancel_token: Optional[CancellationToken] = None,
    sink: Optional[StatusSink] = None,
    client: Optional[WorkflowRunner] = None,
) -> RunSummary:
    check_paths(input_path, output_path)
    settings.require_complete()
    sink = sink or NullStatusSink()

    sheet = AlarmSheet.open(input_path)
    try:
        if sheet.used_row_bounds() is None:
            raise InputError(f"No data found in '{input_path}'.")
        rows = sheet.data_rows()
        sheet.write_answer_header()

        runner = client or WorkflowClient(settings)
        processor = BatchRowProcessor(
            runner,
            persist=lambda: sheet.save(output_path),
            sink=sink,
        )
        print(f"[alarm_job] {Path(input_path).name}: {len(rows)} data rows, overwrite={overwrite}")
        return processor.process(sheet, overwrite=overwrite, cancel_token=cancel_token)
    finally:
        sheet.close()


__all__ = ["default_output_path", "check_paths", "run_alarm_job"]
