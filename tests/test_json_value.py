import pytest

from alarm_ai.llm.json_value import (
    JsonArray,
    JsonBool,
    JsonNull,
    JsonNumber,
    JsonObject,
    JsonString,
    parse_json,
    to_json_text,
)


def test_parse_json_builds_tagged_values_in_order():
    value = parse_json('{"b": 1, "a": [true, null, "x"], "c": 2.5}')
    assert isinstance(value, JsonObject)
    assert value.keys() == ["b", "a", "c"]
    assert value.get("b") == JsonNumber(1)
    assert value.get("a") == JsonArray((JsonBool(True), JsonNull(), JsonString("x")))
    assert value.get("c") == JsonNumber(2.5)
    assert value.get("missing") is None


def test_repeated_key_keeps_first_position_and_last_value():
    value = parse_json('{"k": "first", "other": 0, "k": "last"}')
    assert value.keys() == ["k", "other"]
    assert value.get("k") == JsonString("last")


def test_malformed_json_raises_value_error():
    with pytest.raises(ValueError):
        parse_json('{"event": ')


def test_to_json_text_is_compact_and_keeps_unicode():
    value = parse_json('{"msg": "检查传感器", "n": [1, 2]}')
    assert to_json_text(value) == '{"msg":"检查传感器","n":[1,2]}'
