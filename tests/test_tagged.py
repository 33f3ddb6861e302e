import copy
import json
import math
from datetime import datetime, timedelta, timezone

import pytest

from ptoml.localtime import LocalDate, LocalDateTime, LocalTime
from ptoml.tagged import (
    JsonMismatch,
    add_tag,
    compare_json,
    remove_tag,
    untag,
    value_to_tagged_json,
)


def _typed(kind, value):
    return {"type": kind, "value": value}


# add_tag


def test_add_tag_primitives():
    assert add_tag("", "hello") == _typed("string", "hello")
    assert add_tag("", True) == _typed("bool", "true")
    assert add_tag("", False) == _typed("bool", "false")
    assert add_tag("", 5000) == _typed("integer", "5000")
    assert add_tag("", 3.5) == _typed("float", "3.5")
    assert add_tag("", math.nan) == _typed("float", "nan")


def test_add_tag_float_exponent_form():
    assert add_tag("", 1e6)["value"] == "1e+06"
    assert add_tag("", 100000.0)["value"] == "100000"


@pytest.mark.parametrize(
    "number", [0.1, 123.456782132399, 1e300, -2.5e-10, 1e6, 5e-324, -17.0, 0.0001]
)
def test_add_tag_float_reads_back(number):
    tagged = add_tag("", number)
    assert tagged["type"] == "float"
    assert float(tagged["value"]) == number


def test_add_tag_local_types():
    date = LocalDate(2021, 6, 8)
    time = LocalTime(20, 12, 1, 2, 9)
    assert add_tag("", date) == _typed("date-local", "2021-06-08")
    assert add_tag("", time) == _typed("time-local", "20:12:01.000000002")
    assert add_tag("", LocalDateTime(date, time)) == _typed(
        "datetime-local", "2021-06-08T20:12:01.000000002"
    )


def test_add_tag_utc_datetime():
    value = datetime(1979, 5, 27, 7, 32, tzinfo=timezone.utc)
    assert add_tag("", value) == _typed("datetime", "1979-05-27T07:32:00Z")


def test_add_tag_nested_structures():
    doc = {"a": [1, {"b": "x"}], "c": {}}
    assert add_tag("", doc) == {
        "a": [_typed("integer", "1"), {"b": _typed("string", "x")}],
        "c": {},
    }


@pytest.mark.parametrize("value", [None, object(), datetime(2020, 1, 1), b"raw"])
def test_add_tag_unknown_type(value):
    with pytest.raises(TypeError, match="Unknown type"):
        add_tag("", value)


# untag


@pytest.mark.parametrize(
    "value",
    [
        "text",
        42,
        -7,
        True,
        False,
        2.5,
        LocalDate(2021, 6, 8),
        LocalTime(7, 32, 0),
        LocalTime(0, 32, 0, 999999000, 6),
        LocalDateTime(LocalDate(1979, 5, 27), LocalTime(7, 32, 0)),
        datetime(1979, 5, 27, 7, 32, tzinfo=timezone.utc),
        datetime(1979, 5, 27, 0, 32, 0, 999999, tzinfo=timezone(timedelta(hours=-7))),
    ],
)
def test_untag_reverses_add_tag(value):
    assert untag(add_tag("", value)) == value


def test_untag_nan():
    result = untag(_typed("float", "nan"))
    assert math.isnan(result)
    assert add_tag("", result) == _typed("float", "nan")


def test_untag_integer_bounds():
    assert untag(_typed("integer", "9223372036854775807")) == 9223372036854775807
    assert untag(_typed("integer", "-9223372036854775808")) == -9223372036854775808


@pytest.mark.parametrize(
    "kind, value",
    [
        ("bool", "yes"),
        ("integer", "1_000"),
        ("integer", "9223372036854775808"),
        ("integer", ""),
        ("float", "1 "),
        ("float", "abc"),
        ("float", "1e400"),
        ("date-local", "2021-02-30"),
        ("time-local", "20:12:01 bad"),
        ("datetime-local", "what"),
        ("datetime", "1979-05-27 07:32:00Z"),
        ("bogus", "x"),
    ],
)
def test_untag_errors(kind, value):
    with pytest.raises(ValueError):
        untag(_typed(kind, value))


def test_untag_error_messages():
    with pytest.raises(ValueError, match='could not parse "yes" as a boolean'):
        untag(_typed("bool", "yes"))
    with pytest.raises(ValueError, match='unrecognized tag type "bogus"'):
        untag(_typed("bogus", "x"))


# remove_tag


def test_remove_tag_reverses_add_tag():
    doc = {
        "title": "TOML",
        "numbers": [1, 2, 3],
        "owner": {"name": "Tom", "dob": LocalDate(1979, 5, 27)},
        "servers": [{"ip": "10.0.0.1", "enabled": True}],
        "ratio": 0.5,
    }
    assert remove_tag(add_tag("", doc)) == doc


def test_remove_tag_wraps_untag_errors():
    with pytest.raises(ValueError, match="tag.Remove"):
        remove_tag({"a": _typed("bool", "maybe")})


def test_remove_tag_rejects_scalars():
    with pytest.raises(ValueError, match="unrecognized JSON format 'str'"):
        remove_tag("x")


def test_remove_tag_three_keys_is_a_table():
    with pytest.raises(ValueError, match="unrecognized JSON format"):
        remove_tag({"type": "string", "value": "x", "extra": "y"})


# value_to_tagged_json


def test_value_to_tagged_json_parses_back():
    doc = {"b": 1, "a": [True, "x"]}
    text = value_to_tagged_json(doc)
    assert json.loads(text) == add_tag("", doc)
    assert text.startswith('{\n  "')


def test_value_to_tagged_json_sorts_keys():
    text = value_to_tagged_json({"b": 1, "a": 2})
    assert text.index('"a"') < text.index('"b"')
    assert text.index('"type"') < text.index('"value"')


def test_value_to_tagged_json_escapes_html():
    doc = {"k": "<a&b>", "u": "é"}
    text = value_to_tagged_json(doc)
    assert "<" not in text and ">" not in text and "&" not in text
    assert "\\u003c" in text
    assert "é" in text
    assert json.loads(text)["k"]["value"] == "<a&b>"


# compare_json


def _sample():
    return add_tag("", {"a": 1, "b": {"c": "x"}, "list": [1, 2]})


def test_compare_values_differ():
    want = _sample()
    compare_json("", want, copy.deepcopy(want))
    have = copy.deepcopy(want)
    have["b"]["c"]["value"] = "y"
    with pytest.raises(JsonMismatch, match="Values for key 'b.c'") as exc:
        compare_json("", want, have)
    assert exc.value.key == "b.c"


def test_compare_missing_key_in_output():
    want = _sample()
    have = copy.deepcopy(want)
    del have["b"]["c"]
    with pytest.raises(JsonMismatch, match="Could not find key 'b.c' in parser output"):
        compare_json("", want, have)


def test_compare_extra_key_in_output():
    want = _sample()
    have = copy.deepcopy(want)
    have["z"] = _typed("string", "extra")
    with pytest.raises(JsonMismatch, match="Could not find key 'z' in expected output"):
        compare_json("", want, have)


def test_compare_array_lengths():
    want = _sample()
    have = copy.deepcopy(want)
    have["list"].pop()
    with pytest.raises(JsonMismatch, match="Array lengths differ for key 'list'"):
        compare_json("", want, have)


def test_compare_type_mismatch():
    with pytest.raises(JsonMismatch, match="is not an integer but string"):
        compare_json("", {"a": _typed("integer", "1")}, {"a": _typed("string", "1")})


def test_compare_value_against_table():
    want = {"a": _typed("integer", "1")}
    with pytest.raises(JsonMismatch, match="supposed to be a value"):
        compare_json("", want, {"a": {"x": _typed("integer", "1")}})
    with pytest.raises(JsonMismatch, match="supposed to be a table"):
        compare_json("", {"a": {"x": _typed("integer", "1")}}, want)


def test_compare_table_against_list():
    with pytest.raises(JsonMismatch, match="is not an table"):
        compare_json("", {"a": {"x": _typed("integer", "1")}}, {"a": []})


def test_compare_floats_numerically():
    compare_json("", {"f": _typed("float", "1.0")}, {"f": _typed("float", "1")})
    compare_json("", {"f": _typed("float", "nan")}, {"f": _typed("float", "nan")})
    with pytest.raises(JsonMismatch, match="Values for key 'f'"):
        compare_json("", {"f": _typed("float", "1.0")}, {"f": _typed("float", "1.5")})
    with pytest.raises(JsonMismatch):
        compare_json("", {"f": _typed("float", "nan")}, {"f": _typed("float", "1.0")})


def test_compare_datetimes_as_instants():
    want = {"d": _typed("datetime", "1979-05-27T07:32:00Z")}
    compare_json("", want, {"d": _typed("datetime", "1979-05-27 07:32:00z")})
    compare_json("", want, {"d": _typed("datetime", "1979-05-27T00:32:00-07:00")})
    with pytest.raises(JsonMismatch, match="Values for key 'd'"):
        compare_json("", want, {"d": _typed("datetime", "1979-05-27T07:33:00Z")})


def test_compare_local_times_ignore_precision():
    want = {"t": _typed("time-local", "07:32:00")}
    compare_json("", want, {"t": _typed("time-local", "07:32:00.000")})
    with pytest.raises(JsonMismatch):
        compare_json("", want, {"t": _typed("time-local", "07:32:01")})


def test_compare_local_dates():
    want = {"d": _typed("date-local", "1979-05-27")}
    compare_json("", want, copy.deepcopy(want))
    with pytest.raises(JsonMismatch):
        compare_json("", want, {"d": _typed("date-local", "1979-05-28")})
    with pytest.raises(JsonMismatch, match="is not a datetime"):
        compare_json("", want, {"d": _typed("date-local", "nope")})


def test_compare_scalar_expectation():
    with pytest.raises(JsonMismatch, match="should be a map or a list of maps"):
        compare_json("k", "scalar", "scalar")


def test_compare_malformed_expectation():
    with pytest.raises(ValueError, match="'type' should be a string"):
        compare_json("", {"a": {"type": 1, "value": "x"}}, {"a": _typed("string", "x")})