#!/usr/bin/env python3
"""
workflow_client.py

Streaming client for the alarm analysis workflow (``POST /workflows/run`` in
streaming mode). The service answers with Server-Sent Events; this client
reads them line by line and keeps the best answer seen so far:

* ``node_finished``     ← intermediate step; its text is only a fallback
* ``workflow_finished`` ← authoritative result, ends the call

There is no request timeout. A call only stops early when its
``CancellationToken`` is cancelled. A request still waiting for response
headers is abandoned, and a live response is closed so a blocked read
returns immediately.

Usage:
    python3 -m alarm_ai.llm.workflow_client --desc "Spindle overload" --config AppConfig.json
"""

from __future__ import annotations

import argparse
import json
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional

import requests

from ..cancellation import CancellationToken
from ..config import WorkflowSettings, load_settings
from ..errors import OperationCancelled, WorkflowError, WorkflowHTTPError
from .answer_extractor import extract_text, is_blank
from .sse import DATA_PREFIX, SseEvent, SseLineAccumulator, decode_event, iter_stream_lines


WORKFLOW_USER = "abc-123"
# The workflow takes a fixed ErrorCode tag; the row's own code is not sent.
ERROR_CODE_TAG = "ERC"
MIN_NODE_ANSWER_LENGTH = 2
STREAM_CHUNK_SIZE = 512

NODE_FINISHED = "node_finished"
WORKFLOW_FINISHED = "workflow_finished"


@dataclass(frozen=True)
class WorkflowRequest:
    error_desc: str
    error_code: str = "0"
    user: str = WORKFLOW_USER

    def to_payload(self) -> Dict[str, Any]:
        return {
            "inputs": {
                "ErrorCode": ERROR_CODE_TAG,
                "ErrorDesc": self.error_desc or "",
                "machineCode": "",
            },
            "response_mode": "streaming",
            "user": self.user,
        }


@dataclass
class WorkflowRunResult:
    """Answer plus per-call diagnostics."""

    answer: str = ""
    status_code: Optional[int] = None
    workflow_run_id: Optional[str] = None
    task_id: Optional[str] = None
    workflow_status: Optional[str] = None
    finished: bool = False
    events: int = 0
    ttfb_ms: Optional[float] = None
    duration_ms: float = 0.0


class AnswerCollector:
    """Event dispatch rules; ``dispatch`` returns True on the terminal event."""

    def __init__(self) -> None:
        self.answer: Optional[str] = None

    def dispatch(self, event: SseEvent) -> bool:
        if event.data is None:
            return False

        if event.is_type(NODE_FINISHED):
            if is_blank(self.answer):
                text = extract_text(event.data.get("outputs"), text_only=True)
                if not is_blank(text) and len(text.strip()) >= MIN_NODE_ANSWER_LENGTH:
                    self.answer = text
            return False

        if event.is_type(WORKFLOW_FINISHED):
            text = extract_text(event.data.get("outputs"), text_only=False)
            if text is not None:
                self.answer = text
            return True

        return False


def _send_cancellable(
    send: Callable[[], requests.Response],
    token: CancellationToken,
) -> requests.Response:
    """Run ``send`` on a helper thread so a cancel can abandon the header wait.

    A response that arrives after the call was abandoned is closed.
    """
    lock = threading.Lock()
    ready = threading.Event()
    outcome: Dict[str, Any] = {}

    def _worker() -> None:
        try:
            key, value = "response", send()
        except Exception as exc:
            key, value = "error", exc
        with lock:
            if outcome.get("abandoned"):
                if key == "response":
                    value.close()
                return
            outcome[key] = value
        ready.set()

    threading.Thread(target=_worker, name="alarm-ai-post", daemon=True).start()
    unregister = token.on_cancel(ready.set)
    try:
        ready.wait()
    finally:
        unregister()

    with lock:
        if "response" not in outcome and "error" not in outcome:
            outcome["abandoned"] = True
            raise OperationCancelled("Operation cancelled")
    if "error" in outcome:
        raise outcome["error"]
    return outcome["response"]


class WorkflowClient:
    """Client for the streaming workflow endpoint."""

    def __init__(
        self,
        settings: WorkflowSettings,
        *,
        user: str = WORKFLOW_USER,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.settings = WorkflowSettings.create(settings.base_url, settings.api_key)
        self.user = user
        self._http = session or requests

    @property
    def endpoint(self) -> str:
        return f"{self.settings.base_url}/workflows/run"

    def run(
        self,
        error_desc: str,
        error_code: str = "0",
        cancel_token: Optional[CancellationToken] = None,
    ) -> str:
        """Run the workflow for one alarm and return its answer ('' if none)."""
        return self.run_detailed(error_desc, error_code, cancel_token).answer

    def run_detailed(
        self,
        error_desc: str,
        error_code: str = "0",
        cancel_token: Optional[CancellationToken] = None,
    ) -> WorkflowRunResult:
        self.settings.require_complete()
        token = cancel_token or CancellationToken()
        token.raise_if_cancelled()

        request = WorkflowRequest(error_desc=error_desc or "", error_code=error_code, user=self.user)
        headers = {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Accept": "text/event-stream",
            "Content-Type": "application/json; charset=utf-8",
        }
        body = json.dumps(request.to_payload(), ensure_ascii=False).encode("utf-8")

        result = WorkflowRunResult()
        start = time.monotonic()
        try:
            try:
                response = _send_cancellable(
                    lambda: self._http.post(
                        self.endpoint,
                        data=body,
                        headers=headers,
                        stream=True,
                        timeout=None,
                    ),
                    token,
                )
            except requests.RequestException as exc:
                token.raise_if_cancelled()
                raise WorkflowError(f"Request to {self.endpoint} failed: {exc}") from exc

            unregister = token.on_cancel(response.close)
            try:
                result.status_code = response.status_code
                if not 200 <= response.status_code < 300:
                    raise WorkflowHTTPError(response.status_code, response.text)
                self._read_stream(response, token, result, start)
            finally:
                unregister()
                response.close()
        finally:
            result.duration_ms = (time.monotonic() - start) * 1000.0

        return result

    def _read_stream(
        self,
        response: requests.Response,
        token: CancellationToken,
        result: WorkflowRunResult,
        start: float,
    ) -> None:
        lines: Iterator[str] = iter_stream_lines(response.iter_content(chunk_size=STREAM_CHUNK_SIZE))
        accumulator = SseLineAccumulator()
        collector = AnswerCollector()

        while True:
            token.raise_if_cancelled()
            try:
                line = next(lines)
            except StopIteration:
                # A response closed by cancel() can also end quietly.
                token.raise_if_cancelled()
                break
            except Exception as exc:
                if token.cancelled:
                    raise OperationCancelled("Operation cancelled") from exc
                raise WorkflowError(f"Reading the event stream failed: {exc}") from exc

            if result.ttfb_ms is None and line[: len(DATA_PREFIX)].lower() == DATA_PREFIX:
                result.ttfb_ms = (time.monotonic() - start) * 1000.0

            raw = accumulator.feed(line)
            if raw is None:
                continue

            event = decode_event(raw)
            if event is None:
                continue
            result.events += 1
            result.workflow_run_id = event.workflow_run_id or result.workflow_run_id
            result.task_id = event.task_id or result.task_id

            if collector.dispatch(event):
                result.finished = True
                if event.data is not None:
                    result.workflow_status = event.data.get_string("status")
                break

        result.answer = collector.answer or ""


def main() -> None:
    ap = argparse.ArgumentParser(description="Send one alarm description to the workflow.")
    ap.add_argument("--desc", required=True, help="Alarm/error description")
    ap.add_argument("--code", default="0", help="Alarm code (logged only)")
    ap.add_argument("--config", help="Path to AppConfig.json")
    args = ap.parse_args()

    client = WorkflowClient(load_settings(args.config))
    result = client.run_detailed(args.desc, args.code)
    print(
        f"status={result.status_code} finished={result.finished} "
        f"workflow_status={result.workflow_status} events={result.events} "
        f"duration={result.duration_ms:.0f}ms"
    )
    print("\n=== Workflow Answer ===\n")
    print(result.answer)


if __name__ == "__main__":
    main()
