# ptoml

ptoml holds the low-level pieces that a TOML reader and writer is built from.
It has no dependencies outside the standard library.

## What is in it

- `ptoml.localtime`: the TOML date and time types `LocalDate`, `LocalTime`
  and `LocalDateTime`, with the parsers for them (`parse_local_date`,
  `parse_local_time`, `parse_local_datetime`, `parse_datetime`) and calendar
  helpers (`is_valid_date`, `is_leap`, `days_in`).
- `ptoml.numbers`: `parse_integer` reads decimal, hexadecimal (`0x`), octal
  (`0o`) and binary (`0b`) integers that fit in a signed 64-bit value.
  `parse_float` reads floats, including `inf` and `nan` forms. Both follow the
  TOML rules for underscores, leading zeroes and signs.
- `ptoml.characters`: checks bytes against the characters TOML allows in
  strings. It provides `invalid_ascii`, `utf8_toml_valid_already_escaped`
  (which returns `None` for valid input, or a `Utf8Error` with the index and
  size of the first bad character) and `utf8_valid_next`.
- `ptoml.errors`: `ParserError` marks a span (`start`, `end`) of the parsed
  bytes. `DecodeError` reports an error with its `position` (line, column)
  and a `human` rendering with a few lines of context. `wrap_decode_error`
  turns the first into the second. `StrictMissingError` gathers several
  `DecodeError`s; its `describe()` joins their renderings.
- `ptoml.tagged`: converts between plain values and the "tagged JSON" form
  (`{"type": ..., "value": ...}`) used by language-neutral TOML test suites.
  It provides `add_tag`, `remove_tag`, `untag`, `value_to_tagged_json` and
  `compare_json`, which raises `JsonMismatch` when two tagged documents
  differ.
- `ptoml.cli`: `Program` runs a conversion function on standard input or on
  a list of files, and can rewrite the files in place.

## Local dates and times

```python
from ptoml.localtime import LocalDate, LocalTime, LocalDateTime

d = LocalDate(2021, 6, 8)
str(d)                                  # '2021-06-08'
LocalDate.unmarshal_text(b"2021-06-08") # LocalDate(year=2021, month=6, day=8)

t = LocalTime.unmarshal_text(b"20:12:01.000000002")
str(t)                                  # '20:12:01.000000002'

dt = LocalDateTime.unmarshal_text(b"2021-06-08 20:12:01.5")
str(dt)                                 # '2021-06-08T20:12:01.5'
```

Fractional seconds keep the precision they were written with. Digits past the
ninth are read and dropped. `parse_datetime` reads a date-time with a `Z` or
`+HH:MM` offset and returns an aware `datetime`; nanoseconds are truncated to
microseconds.

## Numbers

```python
from ptoml.numbers import parse_integer, parse_float

parse_integer(b"1_000")   # 1000
parse_integer(b"0xff")    # 255
parse_float(b"6.02e23")   # 6.02e+23
```

Malformed input raises `ParserError`, whose span points at the bytes that
caused it.

## Error reports

`wrap_decode_error(document, parser_error)` builds a `DecodeError`. Its
`human` text shows the offending line and underlines the problem:

```
1| name = 123__456
 |           ~~ number must have at least one digit between underscores
```

`str()` of the error is `toml: ` followed by the message.

## Tagged JSON

```python
from ptoml.tagged import add_tag, remove_tag

add_tag("", {"a": 1})        # {'a': {'type': 'integer', 'value': '1'}}
remove_tag({"a": {"type": "integer", "value": "1"}})   # {'a': 1}
```

## Conversion programs

```python
from ptoml.cli import Program

def upper(src, dst):
    dst.write(src.read().upper())

Program(fn=upper, inplace=True).execute()
```

`Program.main` returns `0` on success and `-1` on failure, writing the error
to the given error stream; a `DecodeError` is shown with its context and the
row and column where it occurred. `execute` parses the arguments and exits
with that status.

## What it does not do

ptoml has no full TOML document parser or encoder: there is no function that
turns a whole document into a dictionary or writes one back, and no decoding
into user classes. It installs no commands; `Program` needs a conversion
function supplied by the caller.