import json

import pytest

from simcase.llm import decoder as d
from simcase.llm.decoder import DecodeStage, decode
from simcase.llm.errors import LLMDecodeError

# =====================================================
# Well-formed and wrapped replies
# =====================================================


@pytest.mark.parametrize(
    "value",
    [
        {"a": [1, 2, {"b": None}], "c": "x"},
        [{"a": 1}, {"b": 2}],
        {"code": "```json\n{}\n```"},
        "plain string",
        42,
        True,
        None,
    ],
)
def test_valid_json_is_returned_at_strict_stage(value):
    result = decode(json.dumps(value))
    assert result.ok
    assert result.value == value
    assert result.stage is DecodeStage.STRICT


def test_json_fence_is_removed():
    value = {"mistakes": [{"mistake": "x"}]}
    result = decode("```json\n" + json.dumps(value) + "\n```")
    assert result.value == value
    assert result.stage is DecodeStage.STRICT


def test_bare_fence_is_removed():
    result = decode('```\n{"a": 1}\n```')
    assert result.value == {"a": 1}


def test_fence_with_commentary_around_it():
    raw = 'Here you go:\n```json\n{"a": 1, "b": [true]}\n```\nLet me know!'
    assert decode(raw).value == {"a": 1, "b": [True]}


def test_unclosed_fence():
    assert decode('```json\n{"a": 1}').value == {"a": 1}


def test_prose_around_object_is_discarded():
    value = {"patient": {"age": 67, "name": "R. Diaz"}}
    raw = "Here is your answer:\n" + json.dumps(value) + "\nLet me know if you need more."
    assert decode(raw).value == value


def test_scenario_sure_hope_that_helps():
    assert decode('Sure! {"a":1}\nHope that helps!').value == {"a": 1}


# =====================================================
# Expected top-level shape
# =====================================================


def test_array_reply_with_prose():
    raw = 'Questions:\n[{"q": "Why?"}, {"q": "How?"}]\nDone.'
    result = decode(raw, expect="array")
    assert result.value == [{"q": "Why?"}, {"q": "How?"}]


def test_object_brackets_are_authoritative_by_default():
    raw = 'Questions:\n[{"q": "Why?"}, {"q": "How?"}]\nDone.'
    result = decode(raw)
    assert not result.ok
    assert result.error.attempted_text == '{"q": "Why?"}, {"q": "How?"}'


def test_unknown_shape_raises():
    with pytest.raises(ValueError):
        decode("{}", expect="tuple")


# =====================================================
# Control characters and repairs
# =====================================================


def test_vertical_tab_in_string_is_stripped():
    raw = '{"name": "Jo\x0bhn", "age": 40, "notes": ["ok"]}'
    result = decode(raw)
    assert result.value == {"name": "John", "age": 40, "notes": ["ok"]}
    assert result.stage is DecodeStage.STRIP_CONTROL


def test_c1_and_null_controls_are_stripped():
    raw = '{"a": "x\x00y\x1fz"}'
    result = decode(raw)
    assert result.value == {"a": "xyz"}
    assert result.stage is DecodeStage.STRIP_CONTROL


def test_raw_newline_in_string_is_escaped():
    raw = '{"note": "line1\nline2", "tab": "a\tb"}'
    result = decode(raw)
    assert result.value == {"note": "line1\nline2", "tab": "a\tb"}
    assert result.stage is DecodeStage.ESCAPE_CONTROL


def test_pretty_printed_reply_with_raw_newline_falls_back_to_repair():
    raw = '{\n  "note": "line1\nline2"\n}'
    result = decode(raw)
    assert result.value == {"note": "line1 line2"}
    assert result.stage is DecodeStage.REPAIR


def test_trailing_commas_are_repaired():
    result = decode('{"a": 1, "b": 2,}')
    assert result.value == {"a": 1, "b": 2}
    assert result.stage is DecodeStage.REPAIR


def test_trailing_comma_in_nested_array():
    result = decode('{"items": [1, 2, 3, ], "ok": true}')
    assert result.value == {"items": [1, 2, 3], "ok": True}


def test_control_removed_even_when_repair_is_needed():
    result = decode('{"a": "b\x0bc",}')
    assert result.value == {"a": "bc"}
    assert result.stage is DecodeStage.REPAIR


# =====================================================
# Failures
# =====================================================


def test_not_json_returns_error():
    result = decode("not json at all")
    assert not result.ok
    assert result.value is None
    assert result.stage is None
    assert result.error.attempted_text == "not json at all"
    assert result.error.parser_message


def test_empty_text_returns_error():
    result = decode("")
    assert not result.ok
    assert result.error.attempted_text == ""


def test_nan_is_not_accepted():
    assert not decode('{"a": NaN}').ok


def test_error_carries_repaired_text():
    result = decode('{"a": \x0b 1,, }')
    assert not result.ok
    assert result.error.attempted_text == '{"a": 1,}'


def test_unwrap_raises_decode_error():
    result = decode("nope")
    with pytest.raises(LLMDecodeError) as exc:
        result.unwrap()
    assert exc.value.error is result.error
    assert "not valid JSON" in str(exc.value)


def test_unwrap_returns_value():
    assert decode('{"a": 1}').unwrap() == {"a": 1}


def test_none_input_is_a_contract_violation():
    with pytest.raises(TypeError):
        decode(None)


# =====================================================
# Stage helpers
# =====================================================


def test_strip_fences_prefers_json_marker():
    text = "intro ``` not this\n```json\n{}\n```"
    assert d.strip_fences(text) == "{}"


def test_strip_fences_without_fence_only_trims():
    assert d.strip_fences("  {}  \n") == "{}"


def test_extract_boundaries_requires_ordered_pair():
    assert d.extract_boundaries("} nothing {") == "} nothing {"
    assert d.extract_boundaries("x [1] y", "array") == "[1]"


def test_escape_control_chars_collapses_whitespace():
    assert d.escape_control_chars('  {"a":\x01   "b"}  ') == '{"a": "b"}'


def test_repair_removes_trailing_commas():
    assert d.repair('{"a": [1,\n], }') == '{"a": [1]}'


# =====================================================
# Pathological input
# =====================================================


@pytest.mark.parametrize("raw", ["[" * 100000, '{"a":' * 50000 + "1"])
def test_deeply_nested_input_returns_error(raw):
    result = decode(raw, expect="array" if raw.startswith("[") else "object")
    assert not result.ok
    assert result.error.parser_message


def test_plain_text_is_parsed_once_per_stage(monkeypatch):
    seen = []
    real_loads = d._loads

    def counting_loads(text):
        seen.append(text)
        return real_loads(text)

    monkeypatch.setattr(d, "_loads", counting_loads)
    decode("not json")
    # raw, strip_control, escape_control, repair; no second strict parse
    assert len(seen) == 4
