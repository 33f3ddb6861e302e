"""Parsing of TOML integer and float literals."""

from __future__ import annotations

import math

from .errors import ParserError

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1

_UNDERSCORE = ord("_")
_DOT = ord(".")
_SIGNS = b"+-"
_SIGN_PREFIXES = (b"+", b"-")
_EXPONENTS = b"eE"
_EXPONENT_PREFIXES = (b"e", b"E")

_DECIMAL = (10, "decimal", b"0123456789")
_PREFIXED_BASES = {
    ord("x"): (16, "hexadecimal", b"0123456789abcdefABCDEF"),
    ord("b"): (2, "binary", b"01"),
    ord("o"): (8, "octal", b"01234567"),
}


def parse_integer(data: bytes | str) -> int:
    """Parse a TOML integer (decimal, or with a 0x, 0o or 0b prefix).

    The value must fit in a signed 64-bit integer.
    """
    raw = _as_bytes(data)
    if len(raw) > 2 and raw[0] == ord("0"):
        try:
            base, name, alphabet = _PREFIXED_BASES[raw[1]]
        except KeyError:
            raise ParserError(f"invalid base '{chr(raw[1])}'", 1, 2) from None
        cleaned = _remove_integer_underscores(raw[2:], 2)
        return _to_int64(cleaned, raw, base, name, alphabet)

    cleaned = _remove_integer_underscores(raw, 0)
    start = 1 if cleaned[:1] in _SIGN_PREFIXES else 0
    if len(cleaned) > start + 1 and cleaned[start] == ord("0"):
        raise ParserError("leading zero not allowed on decimal number", 0, len(raw))
    base, name, alphabet = _DECIMAL
    return _to_int64(cleaned, raw, base, name, alphabet)


def parse_float(data: bytes | str) -> float:
    """Parse a TOML float, including ``inf`` and ``nan`` forms."""
    raw = _as_bytes(data)
    if len(raw) == 4 and raw[0] in _SIGNS and raw[1:] == b"nan":
        return math.nan
    if not raw:
        raise ParserError('unable to parse float: parsing "": invalid syntax', 0, 0)

    cleaned = _remove_float_underscores(raw)

    if cleaned[:1] == b".":
        raise ParserError("float cannot start with a dot", 0, len(raw))
    if cleaned[-1:] == b".":
        raise ParserError("float cannot end with a dot", 0, len(raw))

    dot_seen = False
    for i, c in enumerate(cleaned):
        if c != _DOT:
            continue
        if dot_seen:
            raise ParserError("float can have at most one decimal point", i, i + 1)
        if not _is_digit(cleaned[i - 1]):
            raise ParserError("float decimal point must be preceded by a digit", i - 1, i + 1)
        if not _is_digit(cleaned[i + 1]):
            raise ParserError("float decimal point must be followed by a digit", i, i + 2)
        dot_seen = True

    start = 1 if cleaned[:1] in _SIGN_PREFIXES else 0
    if (
        cleaned[start : start + 1] == b"0"
        and len(cleaned) > start + 1
        and _is_digit(cleaned[start + 1])
    ):
        raise ParserError("float integer part cannot have leading zeroes", 0, len(raw))

    return _to_float(cleaned, raw)


def _as_bytes(data: bytes | str) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def _is_digit(c: int) -> bool:
    return 0x30 <= c <= 0x39


def _to_int64(cleaned: bytes, raw: bytes, base: int, name: str, alphabet: bytes) -> int:
    text = cleaned.decode("ascii", "replace")
    body = cleaned[1:] if cleaned[:1] in _SIGN_PREFIXES else cleaned
    if not body or any(c not in alphabet for c in body):
        raise ParserError(
            f'couldn\'t parse {name} number: parsing "{text}": invalid syntax', 0, len(raw)
        )
    value = int(text, base)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ParserError(
            f'couldn\'t parse {name} number: parsing "{text}": value out of range',
            0,
            len(raw),
        )
    return value


def _to_float(cleaned: bytes, raw: bytes) -> float:
    shown = cleaned.decode("ascii", "replace")
    try:
        text = cleaned.decode("ascii")
        if any(ch.isspace() for ch in text):
            raise ValueError(text)
        value = float(text)
    except ValueError:
        raise ParserError(
            f'unable to parse float: parsing "{shown}": invalid syntax', 0, len(raw)
        ) from None
    if math.isinf(value) and "inf" not in text.lower():
        raise ParserError(
            f'unable to parse float: parsing "{shown}": value out of range', 0, len(raw)
        )
    return value


def _remove_integer_underscores(data: bytes, base: int) -> bytes:
    """Validate and strip digit separators; ``base`` offsets error spans."""
    start = 1 if data[:1] in _SIGN_PREFIXES else 0
    if len(data) == start:
        return data
    if data[start] == _UNDERSCORE:
        raise ParserError(
            "number cannot start with underscore", base + start, base + start + 1
        )
    if data[-1] == _UNDERSCORE:
        end = base + len(data)
        raise ParserError("number cannot end with underscore", end - 1, end)
    double = data.find(b"__")
    if double >= 0:
        raise ParserError(
            "number must have at least one digit between underscores",
            base + double,
            base + double + 2,
        )
    return data.replace(b"_", b"")


def _remove_float_underscores(data: bytes) -> bytes:
    if data[0] == _UNDERSCORE:
        raise ParserError("number cannot start with underscore", 0, 1)
    if data[-1] == _UNDERSCORE:
        raise ParserError("number cannot end with underscore", len(data) - 1, len(data))

    cleaned = bytearray()
    before = False
    for i, c in enumerate(data):
        following = data[i + 1 : i + 2]
        if c == _UNDERSCORE:
            if not before:
                raise ParserError(
                    "number must have at least one digit between underscores", i - 1, i + 1
                )
            if following in _EXPONENT_PREFIXES:
                raise ParserError("cannot have underscore before exponent", i + 1, i + 2)
            before = False
        elif c in _SIGNS:
            cleaned.append(c)
            before = False
        elif c in _EXPONENTS:
            if following == b"_":
                raise ParserError("cannot have underscore after exponent", i + 1, i + 2)
            cleaned.append(c)
        elif c == _DOT:
            if following == b"_":
                raise ParserError("cannot have underscore after decimal point", i + 1, i + 2)
            if i > 0 and data[i - 1] == _UNDERSCORE:
                raise ParserError("cannot have underscore before decimal point", i - 1, i)
            cleaned.append(c)
        else:
            before = True
            cleaned.append(c)
    return bytes(cleaned)