from datetime import datetime
from pathlib import Path

import pytest

from alarm_ai.errors import StatusLogError
from alarm_ai.status_log import ConsoleStatusSink, DailyFileLog, FanoutStatusSink


def test_daily_log_writes_single_line_entries(tmp_path):
    log = DailyFileLog(tmp_path / "logs", clock=lambda: datetime(2025, 3, 4, 5, 6, 7))
    log.on_request(3, "line one\r\nline two")
    log.on_response(3, "answer")
    log.on_skip(4, "ignored by the file log")

    contents = (tmp_path / "logs" / "2025-03-04.txt").read_text(encoding="utf-8").splitlines()
    assert contents == [
        "[2025-03-04 05:06:07] row 3 request: line one line two",
        "[2025-03-04 05:06:07] row 3 response: answer",
    ]


def test_daily_log_raises_on_io_error(tmp_path, monkeypatch):
    log = DailyFileLog(tmp_path)

    def boom(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(Path, "open", boom, raising=False)
    with pytest.raises(StatusLogError) as excinfo:
        log.on_error(1, "x")
    assert "disk full" in str(excinfo.value)


def test_fanout_isolates_failing_sink():
    lines = []

    class Broken:
        def on_error(self, row, message):
            raise RuntimeError("down")

    sink = FanoutStatusSink([Broken(), ConsoleStatusSink(echo=lines.append)])
    sink.on_error(7, "HTTP 500: boom")
    assert len(lines) == 1
    assert lines[0].endswith("Row 7 failed: HTTP 500: boom")


def test_console_progress_line():
    lines = []
    ConsoleStatusSink(echo=lines.append).on_progress(2, 10, 3)
    assert lines[0].endswith("processed: 2 / 10, skipped: 3")
