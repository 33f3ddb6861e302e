"""Local dates and times, and parsing of TOML date-time values."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo

from .errors import ParserError

_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)
_MAX_FRAC_PRECISION = 9
_LEADING_DIGITS = re.compile(rb"[0-9]*")


def is_leap(year: int) -> bool:
    """Whether ``year`` is a leap year in the Gregorian calendar."""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in(month: int, year: int) -> int:
    """Number of days of ``month`` (1-12) in ``year``."""
    if not 1 <= month <= 12:
        raise ValueError(f"invalid month {month}")
    if month == 2 and is_leap(year):
        return 29
    return _DAYS_IN_MONTH[month - 1]


def is_valid_date(year: int, month: int, day: int) -> bool:
    """Whether the given date exists."""
    return 0 < month < 13 and 0 < day <= days_in(month, year)


@dataclass(frozen=True)
class LocalDate:
    """A calendar day in no specific timezone."""

    year: int
    month: int
    day: int

    def as_time(self, zone: tzinfo | None) -> datetime:
        """Midnight of this day in ``zone``."""
        return datetime(self.year, self.month, self.day, tzinfo=zone)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def marshal_text(self) -> bytes:
        return str(self).encode("ascii")

    @classmethod
    def unmarshal_text(cls, data: bytes | str) -> LocalDate:
        return parse_local_date(data)


@dataclass(frozen=True)
class LocalTime:
    """A time of day, with nanoseconds and a display precision."""

    hour: int
    minute: int
    second: int
    nanosecond: int = 0
    precision: int = 0

    def __str__(self) -> str:
        text = f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}"
        fraction = f".{self.nanosecond:09d}"
        if self.precision > 0:
            text += fraction[: self.precision + 1]
        elif self.nanosecond > 0:
            text += fraction.strip("0")
        return text

    def marshal_text(self) -> bytes:
        return str(self).encode("ascii")

    @classmethod
    def unmarshal_text(cls, data: bytes | str) -> LocalTime:
        raw = _as_bytes(data)
        result, rest = parse_local_time(raw)
        if rest:
            raise ParserError("extra characters", len(raw) - len(rest), len(raw))
        return result


@dataclass(frozen=True)
class LocalDateTime:
    """A time on a specific day, in no specific timezone."""

    date: LocalDate
    time: LocalTime

    def as_time(self, zone: tzinfo | None) -> datetime:
        """This moment in ``zone``; nanoseconds are truncated to microseconds."""
        return _build_datetime(self, zone)

    def __str__(self) -> str:
        return f"{self.date}T{self.time}"

    def marshal_text(self) -> bytes:
        return str(self).encode("ascii")

    @classmethod
    def unmarshal_text(cls, data: bytes | str) -> LocalDateTime:
        raw = _as_bytes(data)
        result, rest = parse_local_datetime(raw)
        if rest:
            raise ParserError("extra characters", len(raw) - len(rest), len(raw))
        return result


def parse_local_date(data: bytes | str) -> LocalDate:
    """Parse ``YYYY-MM-DD``."""
    return _parse_local_date(_as_bytes(data), 0)


def parse_local_time(data: bytes | str) -> tuple[LocalTime, bytes]:
    """Parse ``HH:MM:SS[.fraction]``, returning the time and the unused bytes."""
    return _parse_local_time(_as_bytes(data), 0)


def parse_local_datetime(data: bytes | str) -> tuple[LocalDateTime, bytes]:
    """Parse a local date-time, returning it and the unused bytes."""
    return _parse_local_datetime(_as_bytes(data), 0)


def parse_datetime(data: bytes | str) -> datetime:
    """Parse an offset date-time into an aware datetime."""
    raw = _as_bytes(data)
    local, rest = _parse_local_datetime(raw, 0)
    base = len(raw) - len(rest)

    if not rest:
        raise ParserError("date time should have a timezone", base, base)

    if rest[:1] in (b"Z", b"z"):
        zone: tzinfo = timezone.utc
        rest = rest[1:]
        base += 1
    else:
        if len(rest) != 6:
            raise ParserError("invalid date-time timezone", base, base + len(rest))
        sign = rest[:1]
        if sign == b"-":
            direction = -1
        elif sign == b"+":
            direction = 1
        else:
            raise ParserError("invalid timezone offset character", base, base + 1)
        if rest[3:4] != b":":
            raise ParserError("expected a : separator", base + 3, base + 4)
        hours = _parse_digits(rest[1:3], base + 1)
        if hours > 23:
            raise ParserError("invalid timezone offset hours", base, base + 1)
        minutes = _parse_digits(rest[4:6], base + 4)
        if minutes > 59:
            raise ParserError("invalid timezone offset minutes", base, base + 1)
        seconds = direction * (hours * 3600 + minutes * 60)
        zone = timezone.utc if seconds == 0 else timezone(timedelta(seconds=seconds))
        rest = rest[6:]
        base += 6

    if rest:
        raise ParserError("extra bytes at the end of the timezone", base, base + len(rest))

    return _build_datetime(local, zone)


def _as_bytes(data: bytes | str) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def _build_datetime(value: LocalDateTime, zone: tzinfo | None) -> datetime:
    # A leap second (60) rolls over into the next minute.
    d, t = value.date, value.time
    start = datetime(d.year, d.month, d.day, t.hour, t.minute, tzinfo=zone)
    return start + timedelta(seconds=t.second, microseconds=t.nanosecond // 1000)


def _parse_digits(data: bytes, base: int) -> int:
    for i, c in enumerate(data):
        if not 0x30 <= c <= 0x39:
            raise ParserError("expected digit (0-9)", base + i, base + i + 1)
    return int(data)


def _parse_local_date(data: bytes, base: int) -> LocalDate:
    if len(data) != 10 or data[4:5] != b"-" or data[7:8] != b"-":
        raise ParserError(
            "dates are expected to have the format YYYY-MM-DD", base, base + len(data)
        )
    year = _parse_digits(data[0:4], base)
    month = _parse_digits(data[5:7], base + 5)
    day = _parse_digits(data[8:10], base + 8)
    if not is_valid_date(year, month, day):
        raise ParserError("impossible date", base, base + len(data))
    return LocalDate(year, month, day)


def _parse_local_datetime(data: bytes, base: int) -> tuple[LocalDateTime, bytes]:
    if len(data) < 11:
        raise ParserError(
            "local datetimes are expected to have the format "
            "YYYY-MM-DDTHH:MM:SS[.NNNNNNNNN]",
            base,
            base + len(data),
        )
    date = _parse_local_date(data[:10], base)
    if data[10:11] not in (b"T", b"t", b" "):
        raise ParserError(
            "datetime separator is expected to be T or a space", base + 10, base + 11
        )
    time, rest = _parse_local_time(data[11:], base + 11)
    return LocalDateTime(date, time), rest


def _parse_local_time(data: bytes, base: int) -> tuple[LocalTime, bytes]:
    if len(data) < 8:
        raise ParserError(
            "times are expected to have the format HH:MM:SS[.NNNNNN]",
            base,
            base + len(data),
        )

    hour = _parse_digits(data[0:2], base)
    if hour > 23:
        raise ParserError("hour cannot be greater 23", base, base + 2)
    if data[2:3] != b":":
        raise ParserError("expecting colon between hours and minutes", base + 2, base + 3)

    minute = _parse_digits(data[3:5], base + 3)
    if minute > 59:
        raise ParserError("minutes cannot be greater 59", base + 3, base + 5)
    if data[5:6] != b":":
        raise ParserError("expecting colon between minutes and seconds", base + 5, base + 6)

    second = _parse_digits(data[6:8], base + 6)
    if second > 60:
        raise ParserError("seconds cannot be greater 60", base + 6, base + 8)

    rest = data[8:]
    dot = base + 8
    if rest[:1] != b".":
        return LocalTime(hour, minute, second), rest

    digits = _LEADING_DIGITS.match(rest, 1).group()
    if not digits:
        message = (
            "need at least one digit after fraction point"
            if len(rest) > 1
            else "nanoseconds need at least one digit"
        )
        raise ParserError(message, dot, dot + 1)

    # Digits beyond nanosecond precision are accepted and dropped.
    kept = digits[:_MAX_FRAC_PRECISION]
    precision = len(kept)
    nanosecond = int(kept) * 10 ** (_MAX_FRAC_PRECISION - precision)
    return (
        LocalTime(hour, minute, second, nanosecond, precision),
        rest[1 + len(digits):],
    )