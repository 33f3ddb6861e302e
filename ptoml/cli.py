"""Command-line front end shared by the conversion tools."""

from __future__ import annotations

import argparse
import io
import sys
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, TextIO

from .errors import DecodeError

ConvertFn = Callable[[TextIO, TextIO], None]


@dataclass
class Program:
    """A converter reading a document and writing its transformed form.

    With no file arguments the converter reads ``stdin`` and writes
    ``stdout``. With files, it reads the first one, or, when ``inplace`` is
    set, rewrites every given file with its converted content.
    """

    fn: ConvertFn
    usage: str = ""
    inplace: bool = False

    def execute(self, argv: Optional[Sequence[str]] = None) -> None:
        """Parse ``argv`` (or the process arguments) and exit with the result."""
        parser = argparse.ArgumentParser(
            description=self.usage,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        parser.add_argument("files", nargs="*")
        args = parser.parse_args(argv)
        sys.exit(self.main(args.files, sys.stdin, sys.stdout, sys.stderr))

    def main(
        self,
        files: Sequence[str],
        stdin: TextIO,
        stdout: TextIO,
        stderr: TextIO,
    ) -> int:
        """Run the conversion, report any failure on ``stderr``; return the exit status."""
        try:
            self.run(files, stdin, stdout)
        except DecodeError as err:
            print(err.human, file=stderr)
            row, column = err.position
            print(f"error occurred at row {row} column {column}", file=stderr)
            return -1
        except Exception as err:  # every failure becomes a reported exit status
            print(err, file=stderr)
            return -1
        return 0

    def run(self, files: Sequence[str], stdin: TextIO, stdout: TextIO) -> None:
        """Run the conversion, letting errors propagate."""
        if not files:
            self.fn(stdin, stdout)
            return
        if self.inplace:
            for path in files:
                self._run_file_in_place(path)
            return
        with open(files[0], encoding="utf-8", newline="") as handle:
            self.fn(handle, stdout)

    def _run_file_in_place(self, path: str) -> None:
        with open(path, encoding="utf-8", newline="") as handle:
            content = handle.read()
        out = io.StringIO()
        self.fn(io.StringIO(content), out)
        with open(path, "w", encoding="utf-8", newline="") as handle:
            handle.write(out.getvalue())