"""Building blocks for TOML: date and time values, number parsing, character
validation, error reports, tagged JSON and a conversion-program runner."""

__version__ = "0.1.0"

__all__ = ["characters", "cli", "errors", "localtime", "numbers", "tagged"]