#!/usr/bin/env python3

"""
alarm_answer_cli.py

Fill AI answers into an alarm workbook, one workflow call per row.

Expected layout (first worksheet, header in row 1):
  - A: alarm code
  - B: alarm description
  - G: AI answer (written by this tool; header set to "AI Answer")

Each answered row is saved to the output workbook immediately, so an
interrupted run keeps everything answered so far. Press Ctrl-C to cancel;
the in-flight request is aborted and the run stops.

Usage examples:
  python scripts/alarm_answer_cli.py alarms.xlsx
  python scripts/alarm_answer_cli.py alarms.xlsx -o alarms_AI.xlsx --overwrite
  python scripts/alarm_answer_cli.py alarms.xlsx --config D:/AppConfig.json --log-dir D:/Data/AiLog

Note: the workflow URL/AutoKey come from AppConfig.json (see alarm_ai/config.py).
"""

from __future__ import annotations

import argparse
import sys
import threading
from pathlib import Path
from typing import Dict, List, Optional

from alarm_ai.cancellation import CancellationToken
from alarm_ai.config import load_settings, resolve_log_dir
from alarm_ai.errors import AlarmAIError, PersistenceError
from alarm_ai.status_log import ConsoleStatusSink, DailyFileLog, FanoutStatusSink
from alarm_ai.workflows.alarm_job import default_output_path, run_alarm_job


EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130


def _run_in_worker(target, cancel_token: CancellationToken) -> Dict[str, object]:
    """Run ``target`` on a worker thread; Ctrl-C on the main thread cancels it."""
    outcome: Dict[str, object] = {}

    def _work() -> None:
        try:
            outcome["summary"] = target()
        except BaseException as exc:  # handed back to the main thread
            outcome["error"] = exc

    worker = threading.Thread(target=_work, name="alarm-ai-worker", daemon=True)
    worker.start()
    while worker.is_alive():
        try:
            worker.join(timeout=0.2)
        except KeyboardInterrupt:
            print("Cancelling...")
            cancel_token.cancel()
    return outcome


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        description="Answer alarm rows in an Excel workbook via the AI workflow.",
    )
    ap.add_argument("xlsx", help="Path to the input alarm workbook")
    ap.add_argument("-o", "--out", help="Path to output Excel; defaults to *_AI.xlsx")
    ap.add_argument("--overwrite", action="store_true", help="Overwrite existing AI answers")
    ap.add_argument("--config", help="Path to AppConfig.json with URL/AutoKey")
    ap.add_argument("--log-dir", help="Folder for the daily request log")
    ap.add_argument("--show-answers", action="store_true", help="Print full answers to the console")
    args = ap.parse_args(argv)

    in_path = Path(args.xlsx).expanduser().resolve()
    out_path = Path(args.out).expanduser().resolve() if args.out else default_output_path(in_path)

    try:
        settings = load_settings(args.config)
    except AlarmAIError as exc:
        print(f"Error: {exc}")
        return EXIT_FAILED

    sink = FanoutStatusSink(
        [
            ConsoleStatusSink(show_responses=args.show_answers),
            DailyFileLog(resolve_log_dir(args.log_dir)),
        ]
    )
    cancel_token = CancellationToken()

    print(f"Loading {in_path}; answers will be saved to {out_path}")
    outcome = _run_in_worker(
        lambda: run_alarm_job(
            in_path,
            out_path,
            settings,
            overwrite=args.overwrite,
            cancel_token=cancel_token,
            sink=sink,
        ),
        cancel_token,
    )

    error = outcome.get("error")
    if isinstance(error, PersistenceError):
        print(f"Stopped: {error}. Rows saved before this point are in {out_path}.")
        return EXIT_FAILED
    if isinstance(error, AlarmAIError):
        print(f"Error: {error}")
        return EXIT_FAILED
    if error is not None:
        print(f"Unexpected error: {error!r}")
        return EXIT_FAILED

    summary = outcome["summary"]
    if summary.cancelled:
        print(f"Cancelled. processed={summary.processed}, skipped={summary.skipped}, total={summary.total}")
        return EXIT_CANCELLED

    print(f"Done. processed={summary.processed}, skipped={summary.skipped}, total={summary.total}.")
    if summary.processed:
        print(f"Saved to {out_path}")
    else:
        print("No rows answered; output workbook was not written.")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
