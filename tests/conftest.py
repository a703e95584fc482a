import io
import json
import pathlib
import sys
from typing import Callable, Dict, Iterable, List, Optional

import pytest
import requests

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))


class FakeStreamResponse:
    """Stand-in for a streamed ``requests.Response``."""

    def __init__(
        self,
        lines: Iterable[str],
        status_code: int = 200,
        text: str = "",
        on_line: Optional[Callable[[int, str], None]] = None,
    ) -> None:
        self._lines = list(lines)
        self.status_code = status_code
        self.text = text
        self.encoding = None
        self.closed = False
        self.consumed = 0
        self._on_line = on_line

    def iter_content(self, chunk_size=1, decode_unicode=False):
        # one chunk per line, newline included
        for index, line in enumerate(self._lines):
            if self.closed:
                raise ValueError("I/O operation on closed response")
            self.consumed += 1
            if self._on_line is not None:
                self._on_line(index, line)
            yield line.encode("utf-8") + b"\n"

    def close(self) -> None:
        self.closed = True


class RecordingSink:
    def __init__(self) -> None:
        self.events: List[tuple] = []

    def _record(self, name, *args):
        self.events.append((name,) + args)

    def on_request(self, row, description):
        self._record("request", row, description)

    def on_response(self, row, text):
        self._record("response", row, text)

    def on_error(self, row, message):
        self._record("error", row, message)

    def on_skip(self, row, reason):
        self._record("skip", row, reason)

    def on_notice(self, row, message):
        self._record("notice", row, message)

    def on_progress(self, processed, total, skipped):
        self._record("progress", processed, total, skipped)

    def named(self, name):
        return [event for event in self.events if event[0] == name]


def _sse_lines(*events: Dict) -> List[str]:
    lines: List[str] = []
    for event in events:
        lines.append("data: " + json.dumps(event, ensure_ascii=False))
        lines.append("")
    return lines


@pytest.fixture
def fake_response():
    return FakeStreamResponse


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def sse_lines():
    return _sse_lines


def _stream_response(body: bytes, status_code: int = 200) -> requests.Response:
    """A real ``requests.Response`` reading ``body`` from memory."""
    response = requests.Response()
    response.status_code = status_code
    response.headers["Content-Type"] = "text/event-stream"
    response.raw = io.BytesIO(body)
    return response


@pytest.fixture
def stream_response():
    return _stream_response
