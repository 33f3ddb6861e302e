"""Validation of the characters TOML allows in strings and comments."""

from __future__ import annotations

from dataclasses import dataclass

_LOW = 0x80
_HIGH = 0xBF

_INVALID_ASCII = frozenset(
    [*range(0x00, 0x09), 0x0B, 0x0C, *range(0x0E, 0x20), 0x7F]
)


def _lead_table() -> tuple[tuple[int, int, int] | None, ...]:
    """Rune size and accepted range of the second byte, per first byte."""
    table: list[tuple[int, int, int] | None] = [None] * 256
    for c in range(0xC2, 0xE0):
        table[c] = (2, _LOW, _HIGH)
    for c in range(0xE0, 0xF0):
        table[c] = (3, _LOW, _HIGH)
    table[0xE0] = (3, 0xA0, _HIGH)
    table[0xED] = (3, _LOW, 0x9F)
    for c in range(0xF0, 0xF5):
        table[c] = (4, _LOW, _HIGH)
    table[0xF0] = (4, 0x90, _HIGH)
    table[0xF4] = (4, _LOW, 0x8F)
    return tuple(table)


_LEADS = _lead_table()


@dataclass(frozen=True)
class Utf8Error:
    """Position and length of the first disallowed or malformed character."""

    index: int
    size: int


def invalid_ascii(byte: int) -> bool:
    """Whether an ASCII byte is a control character TOML forbids."""
    return byte in _INVALID_ASCII


def _check_at(data: bytes, i: int) -> tuple[bool, int]:
    """Check the character at ``i``.

    Returns ``(True, size)`` for a valid character, or ``(False, span)`` with
    the number of bytes covered by the invalid sequence.
    """
    n = len(data)
    c = data[i]
    if c < 0x80:
        return (False, 1) if invalid_ascii(c) else (True, 1)
    lead = _LEADS[c]
    if lead is None:
        return False, 1
    size, low, high = lead
    if i + size > n:
        return False, n - i
    if not low <= data[i + 1] <= high:
        return False, 2
    for extra in range(2, size):
        if not _LOW <= data[i + extra] <= _HIGH:
            return False, extra + 1
    return True, size


def utf8_toml_valid_already_escaped(data: bytes) -> Utf8Error | None:
    """Find the first character of ``data`` that TOML does not allow.

    Returns None when every byte is well-formed UTF-8 and no forbidden control
    character appears.
    """
    data = bytes(data)
    i = 0
    while i < len(data):
        ok, size = _check_at(data, i)
        if not ok:
            return Utf8Error(i, size)
        i += size
    return None


def utf8_valid_next(data: bytes) -> int:
    """Size of the first character of ``data`` if it is allowed, else 0."""
    data = bytes(data)
    if not data:
        raise ValueError("cannot check the next character of empty data")
    ok, size = _check_at(data, 0)
    return size if ok else 0