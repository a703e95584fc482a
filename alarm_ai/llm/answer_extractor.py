from __future__ import annotations

"""
Locate the "final answer" text inside an arbitrarily nested workflow payload.

The workflow returns its outputs under whatever variable names the workflow
author chose, so the search is deliberately forgiving but deterministic:
well-known keys first, then the first plain string member, then (outside
``text_only`` mode) the raw JSON of the object.
"""

from typing import Optional

from .json_value import (
    JsonArray,
    JsonBool,
    JsonNull,
    JsonNumber,
    JsonObject,
    JsonString,
    JsonValue,
    scalar_text,
    to_json_text,
)


PRIORITY_KEYS = ("text", "answer", "result", "output", "message")


def is_blank(text: Optional[str]) -> bool:
    return text is None or not text.strip()


def extract_text(value: Optional[JsonValue], text_only: bool) -> Optional[str]:
    """Return the best answer string in ``value`` or ``None``.

    ``text_only`` suppresses the non-textual fallbacks (scalars rendered as
    text and whole objects rendered as JSON).
    """
    if value is None or isinstance(value, JsonNull):
        return None

    if isinstance(value, JsonString):
        return value.value

    if isinstance(value, (JsonNumber, JsonBool)):
        return None if text_only else scalar_text(value)

    if isinstance(value, JsonObject):
        for key in PRIORITY_KEYS:
            if key in value:
                inner = extract_text(value.get(key), text_only)
                if not is_blank(inner):
                    return inner

        for _, member in value.items():
            if isinstance(member, JsonString):
                return member.value

        return None if text_only else to_json_text(value)

    if isinstance(value, JsonArray):
        for item in value:
            inner = extract_text(item, text_only)
            if not is_blank(inner):
                return inner
        return None

    raise TypeError(f"Not a JSON value: {value!r}")


__all__ = ["PRIORITY_KEYS", "extract_text", "is_blank"]
