"""Conversion between TOML values and the type-tagged JSON of the TOML test suite."""

from __future__ import annotations

import json
import math
import re
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable

from .errors import ParserError
from .localtime import (
    LocalDate,
    LocalDateTime,
    LocalTime,
    parse_datetime,
    parse_local_date,
    parse_local_datetime,
    parse_local_time,
)

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_DECIMAL_INTEGER = re.compile(r"[+-]?[0-9]+")

_HTML_ESCAPES = {
    ord("<"): "\\u003c",
    ord(">"): "\\u003e",
    ord("&"): "\\u0026",
    0x2028: "\\u2028",
    0x2029: "\\u2029",
}


class JsonMismatch(AssertionError):
    """A decoded document differs from the expected tagged JSON."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(message)
        self.key = key
        self.message = message


def add_tag(key: str, value: Any) -> Any:
    """Wrap every primitive of ``value`` in a ``{"type", "value"}`` object."""
    if isinstance(value, dict):
        return {k: add_tag(k, v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [add_tag("", v) for v in value]
    if isinstance(value, LocalTime):
        return _tag("time-local", str(value))
    if isinstance(value, LocalDate):
        return _tag("date-local", str(value))
    if isinstance(value, LocalDateTime):
        return _tag("datetime-local", str(value))
    if isinstance(value, datetime) and value.utcoffset() is not None:
        return _tag("datetime", _format_datetime(value))
    if isinstance(value, bool):
        return _tag("bool", "true" if value else "false")
    if isinstance(value, str):
        return _tag("string", value)
    if isinstance(value, int):
        return _tag("integer", str(value))
    if isinstance(value, float):
        if math.isnan(value):
            return _tag("float", "nan")
        return _tag("float", _format_float(value))
    raise TypeError(f"Unknown type: {type(value).__name__}")


def untag(typed: dict) -> Any:
    """Convert one ``{"type", "value"}`` object back to its value."""
    kind = typed["type"]
    value = typed["value"]
    if not isinstance(kind, str) or not isinstance(value, str):
        raise ValueError("untag: 'type' and 'value' must be strings")

    if kind == "string":
        return value
    if kind == "integer":
        return _parse_int64(value)
    if kind == "float":
        return _parse_float(value)
    if kind == "datetime":
        if len(value) > 10 and value[10] != "T":
            raise ValueError(f"untag: could not parse {json.dumps(value)} as a datetime")
        return _wrap_parse(parse_datetime, value)
    if kind == "datetime-local":
        return _wrap_parse(LocalDateTime.unmarshal_text, value)
    if kind == "date-local":
        return _wrap_parse(LocalDate.unmarshal_text, value)
    if kind == "time-local":
        return _wrap_parse(LocalTime.unmarshal_text, value)
    if kind == "bool":
        if value == "true":
            return True
        if value == "false":
            return False
        raise ValueError(f"untag: could not parse {json.dumps(value)} as a boolean")
    raise ValueError(f"untag: unrecognized tag type {json.dumps(kind)}")


def remove_tag(value: Any) -> Any:
    """Strip the type tags from a tagged JSON structure."""
    if isinstance(value, dict):
        if len(value) == 2 and "type" in value and "value" in value:
            try:
                return untag(value)
            except ValueError as err:
                raise ValueError(f"tag.Remove: {err}") from err
        return {k: remove_tag(v) for k, v in value.items()}
    if isinstance(value, list):
        return [remove_tag(v) for v in value]
    raise ValueError(f"unrecognized JSON format '{type(value).__name__}'")


def value_to_tagged_json(doc: Any) -> str:
    """Tagged JSON text of ``doc``, indented by two spaces with sorted keys."""
    text = json.dumps(add_tag("", doc), indent=2, sort_keys=True, ensure_ascii=False)
    return text.translate(_HTML_ESCAPES)


def compare_json(key: str, want: Any, have: Any) -> None:
    """Check that tagged JSON ``have`` matches ``want``; raise JsonMismatch if not.

    Malformed expectations raise ValueError.
    """
    if isinstance(want, dict):
        _compare_maps(key, want, have)
    elif isinstance(want, list):
        _compare_arrays(key, want, have)
    else:
        raise JsonMismatch(
            key,
            f"Key '{key}' in expected output should be a map or a list of maps, "
            f"but it's a {_type_name(want)}",
        )


def _tag(kind: str, value: Any) -> dict:
    return {"type": kind, "value": value}


def _format_datetime(value: datetime) -> str:
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    fraction = f"{value.microsecond:06d}".rstrip("0")
    if fraction:
        text += "." + fraction
    seconds = int(value.utcoffset().total_seconds())
    if seconds == 0:
        return text + "Z"
    sign = "-" if seconds < 0 else "+"
    seconds = abs(seconds)
    return f"{text}{sign}{seconds // 3600:02d}:{seconds % 3600 // 60:02d}"


def _format_float(value: float) -> str:
    """Shortest representation, in exponent form outside [1e-4, 1e6)."""
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    sign = "-" if math.copysign(1.0, value) < 0 else ""
    if value == 0:
        return sign + "0"
    _, digits, exponent = Decimal(repr(abs(value))).as_tuple()
    point = len(digits) + exponent
    text = "".join(map(str, digits)).rstrip("0")
    exp = point - 1
    if exp < -4 or exp >= 6:
        mantissa = text[0] + ("." + text[1:] if len(text) > 1 else "")
        exp_sign = "-" if exp < 0 else "+"
        return f"{sign}{mantissa}e{exp_sign}{abs(exp):02d}"
    if point <= 0:
        return f"{sign}0.{'0' * -point}{text}"
    if point >= len(text):
        return sign + text + "0" * (point - len(text))
    return f"{sign}{text[:point]}.{text[point:]}"


def _parse_int64(value: str) -> int:
    if not _DECIMAL_INTEGER.fullmatch(value):
        raise ValueError(f"untag: invalid integer {json.dumps(value)}")
    number = int(value)
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise ValueError(f"untag: integer {json.dumps(value)} out of range")
    return number


def _parse_float(value: str) -> float:
    if not value or "_" in value or any(ch.isspace() for ch in value):
        raise ValueError(f"untag: invalid float {json.dumps(value)}")
    try:
        number = float(value)
    except ValueError:
        raise ValueError(f"untag: invalid float {json.dumps(value)}") from None
    if math.isinf(number) and "inf" not in value.lower():
        raise ValueError(f"untag: float {json.dumps(value)} out of range")
    return number


def _wrap_parse(parse: Callable[[str], Any], value: str) -> Any:
    try:
        return parse(value)
    except ParserError as err:
        raise ValueError(f"untag: {err}") from err


def _type_name(value: Any) -> str:
    return type(value).__name__


def _join(old: str, key: str) -> str:
    return f"{old}.{key}" if old else key


def _is_value(mapping: dict) -> bool:
    return len(mapping) == 2 and "type" in mapping and "value" in mapping


def _compare_maps(key: str, want: dict, have: Any) -> None:
    if not isinstance(have, dict):
        raise JsonMismatch(
            key,
            f"Key '{key}' is not an table but {_type_name(have)}:\n"
            f"  Expected:     {want!r}\n"
            f"  Your encoder: {have!r}",
        )

    want_value, have_value = _is_value(want), _is_value(have)
    if want_value and not have_value:
        raise JsonMismatch(
            key, f"Key '{key}' is supposed to be a value, but the parser reports it as a table"
        )
    if not want_value and have_value:
        raise JsonMismatch(
            key, f"Key '{key}' is supposed to be a table, but the parser reports it as a value"
        )
    if want_value:
        _compare_values(key, want, have)
        return

    for k in want:
        if k not in have:
            joined = _join(key, k)
            raise JsonMismatch(joined, f"Could not find key '{joined}' in parser output.")
    for k in have:
        if k not in want:
            joined = _join(key, k)
            raise JsonMismatch(joined, f"Could not find key '{joined}' in expected output.")
    for k, v in want.items():
        compare_json(_join(key, k), v, have[k])


def _compare_arrays(key: str, want: Any, have: Any) -> None:
    if not isinstance(want, list):
        raise ValueError(
            f"'value' should be a JSON array when 'type=array', but it is a {_type_name(want)}"
        )
    if not isinstance(have, list):
        raise JsonMismatch(
            key,
            f"Malformed output from your encoder: 'value' is not a JSON array: "
            f"{_type_name(have)}",
        )
    if len(want) != len(have):
        raise JsonMismatch(
            key,
            f"Array lengths differ for key '{key}':\n"
            f"  Expected:     {len(want)}\n"
            f"  Your encoder: {len(have)}",
        )
    for w, h in zip(want, have):
        compare_json(key, w, h)


def _compare_values(key: str, want: dict, have: dict) -> None:
    want_type = want["type"]
    if not isinstance(want_type, str):
        raise ValueError(f"'type' should be a string, but it is a {_type_name(want_type)}")
    have_type = have["type"]
    if not isinstance(have_type, str):
        raise JsonMismatch(
            key,
            f"Malformed output from your encoder: 'type' is not a string: "
            f"{_type_name(have_type)}",
        )
    if want_type != have_type:
        raise JsonMismatch(
            key,
            f"Key '{key}' is not an {want_type} but {have_type}:\n"
            f"  Expected:     {want!r}\n"
            f"  Your encoder: {have!r}",
        )

    if want_type == "array":
        _compare_arrays(key, want["value"], have["value"])
        return

    want_value = want["value"]
    if not isinstance(want_value, str):
        raise ValueError(
            f"'value' {want_value!r} should be a string, but it is a {_type_name(want_value)}"
        )
    have_value = have["value"]
    if not isinstance(have_value, str):
        raise JsonMismatch(
            key,
            f"Malformed output from your encoder: {_type_name(have_value)} is not a string",
        )

    if want_type == "float":
        _compare_floats(key, want_value, have_value)
    elif want_type in _DATETIME_PARSERS:
        _compare_datetimes(key, want_type, want_value, have_value)
    elif want_value != have_value:
        _raise_values_differ(key, want_value, have_value)


def _raise_values_differ(key: str, want: Any, have: Any) -> None:
    raise JsonMismatch(
        key,
        f"Values for key '{key}' don't match:\n"
        f"  Expected:     {want}\n"
        f"  Your encoder: {have}",
    )


def _compare_floats(key: str, want: str, have: str) -> None:
    if want.endswith("nan") or have.endswith("nan"):
        if want != have:
            _raise_values_differ(key, want, have)
        return
    try:
        want_number = float(want)
    except ValueError:
        raise ValueError(f"Could not read '{want}' as a float value for key '{key}'") from None
    try:
        have_number = float(have)
    except ValueError:
        raise JsonMismatch(
            key, f"Malformed output from your encoder: key '{key}' is not a float: '{have}'"
        ) from None
    if want_number != have_number:
        _raise_values_differ(key, want_number, have_number)


def _normalize_datetime(text: str) -> str:
    return text.replace(" ", "T").replace("t", "T").replace("z", "Z")


def _time_key(value: LocalTime) -> tuple[int, int, int, int]:
    return value.hour, value.minute, value.second, value.nanosecond


def _local_datetime_key(text: str) -> tuple:
    value, rest = parse_local_datetime(text)
    if rest:
        raise ValueError(f"extra characters in {text!r}")
    return value.date, _time_key(value.time)


def _local_time_key(text: str) -> tuple[int, int, int, int]:
    value, rest = parse_local_time(text)
    if rest:
        raise ValueError(f"extra characters in {text!r}")
    return _time_key(value)


_DATETIME_PARSERS: dict[str, Callable[[str], Any]] = {
    "datetime": parse_datetime,
    "datetime-local": _local_datetime_key,
    "date-local": parse_local_date,
    "time-local": _local_time_key,
}


def _compare_datetimes(key: str, kind: str, want: str, have: str) -> None:
    parse = _DATETIME_PARSERS[kind]
    try:
        want_time = parse(_normalize_datetime(want))
    except (ParserError, ValueError):
        raise ValueError(
            f"Could not read '{want}' as a datetime value for key '{key}'"
        ) from None
    try:
        have_time = parse(_normalize_datetime(have))
    except (ParserError, ValueError):
        raise JsonMismatch(
            key, f"Malformed output from your encoder: key '{key}' is not a datetime: '{have}'"
        ) from None
    if want_time != have_time:
        _raise_values_differ(key, want, have)