from __future__ import annotations

"""
Tagged JSON value model for decoded workflow events.

Event payloads arrive with an unknown shape, so the stream decoder turns them
into one of six small frozen dataclasses instead of handing raw ``dict``/``list``
graphs around. The answer extractor pattern-matches on these types only.
"""

import json
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Tuple, Union


@dataclass(frozen=True)
class JsonNull:
    pass


@dataclass(frozen=True)
class JsonBool:
    value: bool


@dataclass(frozen=True)
class JsonNumber:
    value: Union[int, float]


@dataclass(frozen=True)
class JsonString:
    value: str


@dataclass(frozen=True)
class JsonArray:
    items: Tuple["JsonValue", ...] = ()

    def __iter__(self) -> Iterator["JsonValue"]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class JsonObject:
    """Ordered string-keyed members; keys are unique."""

    members: Tuple[Tuple[str, "JsonValue"], ...] = ()

    def get(self, key: str) -> Optional["JsonValue"]:
        for name, value in self.members:
            if name == key:
                return value
        return None

    def __contains__(self, key: object) -> bool:
        return any(name == key for name, _ in self.members)

    def keys(self) -> List[str]:
        return [name for name, _ in self.members]

    def items(self) -> Tuple[Tuple[str, "JsonValue"], ...]:
        return self.members

    def get_string(self, key: str) -> Optional[str]:
        """Return the member as text when it is a string or scalar."""
        value = self.get(key)
        if isinstance(value, JsonString):
            return value.value
        if isinstance(value, (JsonNumber, JsonBool)):
            return scalar_text(value)
        return None

    def get_object(self, key: str) -> Optional["JsonObject"]:
        value = self.get(key)
        return value if isinstance(value, JsonObject) else None


JsonValue = Union[JsonNull, JsonBool, JsonNumber, JsonString, JsonArray, JsonObject]


class _Pairs(list):
    """Marker so ``from_python`` can tell decoded objects from arrays."""


def _merge_pairs(pairs: List[Tuple[str, Any]]) -> _Pairs:
    # A repeated key keeps its first position and its last value.
    merged: dict = {}
    for key, value in pairs:
        merged[key] = value
    return _Pairs(merged.items())


def from_python(obj: Any) -> JsonValue:
    """Convert decoded Python data (dict/list/str/...) into the value model."""
    if obj is None:
        return JsonNull()
    if isinstance(obj, bool):
        return JsonBool(obj)
    if isinstance(obj, (int, float)):
        return JsonNumber(obj)
    if isinstance(obj, str):
        return JsonString(obj)
    if isinstance(obj, _Pairs):
        return JsonObject(tuple((str(k), from_python(v)) for k, v in obj))
    if isinstance(obj, dict):
        return JsonObject(tuple((str(k), from_python(v)) for k, v in obj.items()))
    if isinstance(obj, (list, tuple)):
        return JsonArray(tuple(from_python(item) for item in obj))
    raise TypeError(f"Unsupported JSON value type: {type(obj).__name__}")


def parse_json(text: str) -> JsonValue:
    """Decode JSON text; raises ``ValueError`` when the text is malformed."""
    return from_python(json.loads(text, object_pairs_hook=_merge_pairs))


def to_python(value: JsonValue) -> Any:
    if isinstance(value, JsonNull):
        return None
    if isinstance(value, (JsonBool, JsonNumber, JsonString)):
        return value.value
    if isinstance(value, JsonArray):
        return [to_python(item) for item in value.items]
    if isinstance(value, JsonObject):
        return {key: to_python(item) for key, item in value.members}
    raise TypeError(f"Not a JSON value: {value!r}")


def to_json_text(value: JsonValue) -> str:
    """Serialise back to compact JSON, keeping non-ASCII characters as-is."""
    return json.dumps(to_python(value), ensure_ascii=False, separators=(",", ":"))


def scalar_text(value: Union[JsonBool, JsonNumber]) -> str:
    """JSON literal text for a scalar (``true``, ``3``, ``2.5``)."""
    return json.dumps(value.value)


__all__ = [
    "JsonNull",
    "JsonBool",
    "JsonNumber",
    "JsonString",
    "JsonArray",
    "JsonObject",
    "JsonValue",
    "from_python",
    "parse_json",
    "to_python",
    "to_json_text",
    "scalar_text",
]
