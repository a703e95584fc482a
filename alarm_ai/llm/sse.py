from __future__ import annotations

"""
Server-Sent Events framing for the workflow stream.

Only ``data:`` lines are interpreted. Consecutive ``data:`` lines are joined
with no separator (the workflow service emits one JSON document per line) and
a blank line closes the event.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional

from ..errors import WorkflowProtocolError
from .json_value import JsonObject, JsonValue, parse_json


DATA_PREFIX = "data:"


@dataclass(frozen=True)
class SseEvent:
    """One decoded stream event."""

    event: str
    data: Optional[JsonObject]
    envelope: JsonObject

    def is_type(self, name: str) -> bool:
        return self.event.lower() == name.lower()

    @property
    def workflow_run_id(self) -> Optional[str]:
        return self.envelope.get_string("workflow_run_id")

    @property
    def task_id(self) -> Optional[str]:
        return self.envelope.get_string("task_id")


def _decode_line(line: bytes) -> Iterator[str]:
    if line.endswith(b"\r"):
        line = line[:-1]
    for part in line.split(b"\r"):
        yield part.decode("utf-8", errors="replace")


def iter_stream_lines(chunks: Iterable[bytes]) -> Iterator[str]:
    """Split raw response bytes into text lines.

    Lines end at ``\\n``, ``\\r\\n`` or a lone ``\\r`` only. ``str.splitlines``
    also breaks on U+0085, U+2028 and U+2029, which may appear raw inside
    JSON strings.
    """
    pending = b""
    for chunk in chunks:
        if not chunk:
            continue
        pending += chunk
        *lines, pending = pending.split(b"\n")
        for line in lines:
            yield from _decode_line(line)
    if pending:
        yield from _decode_line(pending)


class SseLineAccumulator:
    """Collects framing lines and hands back one raw payload per event."""

    def __init__(self) -> None:
        self._parts: List[str] = []

    @property
    def pending(self) -> bool:
        return bool(self._parts)

    def feed(self, line: str) -> Optional[str]:
        """Consume one line; return the raw event text at an event boundary."""
        if line[: len(DATA_PREFIX)].lower() == DATA_PREFIX:
            self._parts.append(line[len(DATA_PREFIX):].lstrip())
            return None

        if line.strip():
            return None

        if not self._parts:
            return None

        raw = "".join(self._parts)
        self._parts.clear()
        return raw

    def reset(self) -> None:
        self._parts.clear()


def decode_event(raw: str) -> Optional[SseEvent]:
    """Decode a raw event payload.

    Malformed JSON raises ``WorkflowProtocolError``; a payload whose top level
    is not an object yields ``None``.
    """
    try:
        value: JsonValue = parse_json(raw)
    except ValueError as exc:
        snippet = raw if len(raw) <= 200 else raw[:197] + "..."
        raise WorkflowProtocolError(f"Malformed event JSON ({exc}): {snippet}") from exc

    if not isinstance(value, JsonObject):
        return None

    return SseEvent(
        event=value.get_string("event") or "",
        data=value.get_object("data"),
        envelope=value,
    )


__all__ = [
    "DATA_PREFIX",
    "SseEvent",
    "SseLineAccumulator",
    "decode_event",
    "iter_stream_lines",
]
