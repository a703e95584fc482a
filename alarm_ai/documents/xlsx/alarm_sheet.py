from __future__ import annotations

"""
Excel storage for alarm lists.

The alarm export has one alarm per row below a header row:

* column A  ← alarm code
* column B  ← alarm description (what gets sent to the workflow)
* column G  ← AI answer written back by the batch run

This module only knows how to read/write those cells and save the workbook;
the row policy lives in ``alarm_ai.processing.batch_processor``.
"""

from pathlib import Path
from typing import Any, Optional, Tuple, Union

from openpyxl import load_workbook
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from ...errors import InputError


HEADER_ROW = 1
CODE_COLUMN = 1
DESC_COLUMN = 2
ANSWER_COLUMN = 7
ANSWER_HEADER = "AI Answer"


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


class AlarmSheet:
    """First worksheet of an alarm workbook, addressed by (row, column)."""

    def __init__(self, workbook: Workbook, worksheet: Worksheet) -> None:
        self.workbook = workbook
        self.worksheet = worksheet
        self._bounds: Optional[Tuple[int, int]] = None
        self._measured = False

    @classmethod
    def open(cls, path: Union[str, Path]) -> "AlarmSheet":
        try:
            workbook = load_workbook(str(path))
        except Exception as exc:
            raise InputError(f"Could not open workbook '{path}': {exc}") from exc
        if not workbook.worksheets:
            workbook.close()
            raise InputError(f"No worksheet found in '{path}'.")
        return cls(workbook, workbook.worksheets[0])

    def used_row_bounds(self) -> Optional[Tuple[int, int]]:
        """Return (first, last) rows holding any value, or None for an empty sheet.

        The sheet is scanned on the first call only; later calls, including the
        ones made after the header or answers were written, return that result.
        """
        if not self._measured:
            self._bounds = self._scan_used_rows()
            self._measured = True
        return self._bounds

    def _scan_used_rows(self) -> Optional[Tuple[int, int]]:
        first: Optional[int] = None
        last: Optional[int] = None
        for index, values in enumerate(self.worksheet.iter_rows(values_only=True), start=1):
            if any(v is not None and str(v).strip() != "" for v in values):
                if first is None:
                    first = index
                last = index
        if first is None or last is None:
            return None
        return first, last

    def data_rows(self) -> range:
        bounds = self.used_row_bounds()
        if bounds is None:
            return range(0)
        first, last = bounds
        return range(max(HEADER_ROW + 1, first), last + 1)

    def read_cell(self, row: int, column: int) -> str:
        return _cell_text(self.worksheet.cell(row=row, column=column).value)

    def write_cell(self, row: int, column: int, value: str) -> None:
        cell = self.worksheet.cell(row=row, column=column)
        cell.value = value
        try:
            cell.alignment = cell.alignment.copy(wrap_text=True)
        except Exception:
            pass

    def write_answer_header(self) -> None:
        self.worksheet.cell(row=HEADER_ROW, column=ANSWER_COLUMN).value = ANSWER_HEADER

    def save(self, path: Union[str, Path]) -> None:
        self.workbook.save(str(path))

    def close(self) -> None:
        self.workbook.close()


__all__ = [
    "HEADER_ROW",
    "CODE_COLUMN",
    "DESC_COLUMN",
    "ANSWER_COLUMN",
    "ANSWER_HEADER",
    "AlarmSheet",
]
