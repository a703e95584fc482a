from alarm_ai.llm.answer_extractor import extract_text
from alarm_ai.llm.json_value import JsonNull, parse_json


def test_text_key_in_text_only_mode():
    assert extract_text(parse_json('{"text": "OK"}'), text_only=True) == "OK"


def test_priority_key_beats_fallback_scan():
    value = parse_json('{"result": {"other": 1, "text": "inner"}}')
    assert extract_text(value, text_only=False) == "inner"


def test_priority_order_is_fixed():
    value = parse_json('{"message": "m", "answer": "a", "text": "t"}')
    assert extract_text(value, text_only=True) == "t"


def test_blank_priority_value_falls_through_to_next_key():
    value = parse_json('{"text": "   ", "answer": "real answer"}')
    assert extract_text(value, text_only=True) == "real answer"


def test_first_plain_string_member_when_no_priority_key():
    value = parse_json('{"count": 3, "summary": "Replace fuse", "note": "later"}')
    assert extract_text(value, text_only=True) == "Replace fuse"


def test_object_without_text_serialises_unless_text_only():
    value = parse_json('{"count": 3, "ok": true}')
    assert extract_text(value, text_only=True) is None
    assert extract_text(value, text_only=False) == '{"count":3,"ok":true}'


def test_scalars_depend_on_text_only():
    assert extract_text(parse_json("42"), text_only=True) is None
    assert extract_text(parse_json("42"), text_only=False) == "42"
    assert extract_text(parse_json("true"), text_only=False) == "true"


def test_array_returns_first_non_blank_item():
    value = parse_json('[null, "", {"output": "from list"}, "later"]')
    assert extract_text(value, text_only=True) == "from list"


def test_array_without_text_is_none():
    assert extract_text(parse_json("[null, [], {}]"), text_only=True) is None


def test_null_and_missing_are_none():
    assert extract_text(JsonNull(), text_only=False) is None
    assert extract_text(None, text_only=False) is None


def test_plain_string_returned_even_if_blank():
    assert extract_text(parse_json('"  "'), text_only=True) == "  "
