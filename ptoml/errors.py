"""Errors raised while parsing and decoding TOML documents."""

from __future__ import annotations

from typing import Iterable, Sequence

_LINES_OF_CONTEXT = 3


class ParserError(Exception):
    """A low-level parsing error pointing at a span of the parsed input.

    ``start`` and ``end`` are byte offsets into the data that was being
    parsed; the highlighted span is ``data[start:end]``.
    """

    def __init__(
        self,
        message: str,
        start: int = 0,
        end: int = 0,
        key: Sequence[str] = (),
    ) -> None:
        super().__init__(message)
        self.message = message
        self.start = start
        self.end = end
        self.key = tuple(key)

    def __str__(self) -> str:
        return self.message


class DecodeError(Exception):
    """An error located in a document, with a human-readable rendering."""

    def __init__(
        self,
        message: str,
        line: int,
        column: int,
        key: Sequence[str] = (),
        human: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column
        self.key = tuple(key)
        self.human = human

    def __str__(self) -> str:
        return "toml: " + self.message

    @property
    def position(self) -> tuple[int, int]:
        """The 1-indexed (line, column) where the error occurred."""
        return self.line, self.column


class StrictMissingError(Exception):
    """Keys of a document that have no counterpart in the target."""

    def __init__(self, errors: Iterable[DecodeError]) -> None:
        self.errors = list(errors)
        super().__init__(str(self))

    def __str__(self) -> str:
        return "strict mode: fields in the document are missing in the target struct"

    def describe(self) -> str:
        """Human-readable description of every missing field."""
        return "\n---\n".join(e.human for e in self.errors)


def position_at_end(data: bytes | str) -> tuple[int, int]:
    """Return the 1-indexed (row, column) just past the end of ``data``."""
    data = _as_bytes(data)
    row = data.count(b"\n") + 1
    column = len(data) - (data.rfind(b"\n") + 1) + 1
    return row, column


def wrap_decode_error(document: bytes | str, error: ParserError) -> DecodeError:
    """Build a DecodeError locating ``error`` in ``document`` with context."""
    document = _as_bytes(document)
    start, end = error.start, error.end
    if not 0 <= start <= end <= len(document):
        raise ValueError(
            f"highlight [{start}:{end}] is outside of the document (length {len(document)})"
        )
    highlight = document[start:end]
    message = str(error)
    line, column = position_at_end(document[:start])
    before = _before_lines(document, start)
    after = _after_lines(document, end)

    width = len(str(line + len(after) - 1))
    out: list[bytes] = []

    for distance in range(len(before) - 1, 0, -1):
        out.append(_context_line(line - distance, width, before[distance]))
        out.append(b"\n")

    out.append(_line_number(line, width) + b"| ")
    if before:
        out.append(before[0])
    out.append(highlight)
    if after:
        out.append(after[0])
    out.append(b"\n")

    out.append(b" " * width + b"| ")
    if before:
        out.append(b" " * len(before[0]))
    out.append(b"~" * len(highlight))
    if message:
        out.append(b" " + message.encode("utf-8"))

    for distance, text in enumerate(after[1:], start=1):
        out.append(b"\n")
        out.append(_context_line(line + distance, width, text))

    return DecodeError(
        message=message,
        line=line,
        column=column,
        key=error.key,
        human=b"".join(out).decode("utf-8", errors="replace"),
    )


def _as_bytes(data: bytes | str) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def _line_number(line: int, width: int) -> bytes:
    return str(line).rjust(width).encode("ascii")


def _context_line(line: int, width: int, text: bytes) -> bytes:
    prefix = _line_number(line, width) + b"|"
    return prefix + b" " + text if text else prefix


def _before_lines(document: bytes, offset: int) -> list[bytes]:
    """Lines preceding the highlight, nearest first; index 0 is the partial line."""
    parts = document[:offset].split(b"\n")
    if parts[0] == b"":
        parts = parts[1:]
    parts.reverse()
    return parts[: _LINES_OF_CONTEXT + 1]


def _after_lines(document: bytes, offset: int) -> list[bytes]:
    """Lines following the highlight; index 0 is the rest of the error line."""
    parts = document[offset:].split(b"\n")
    if parts[-1] == b"":
        parts.pop()
    return parts[: _LINES_OF_CONTEXT + 1]