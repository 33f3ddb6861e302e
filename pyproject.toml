[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ptoml"
version = "0.1.0"
description = "Building blocks for reading and writing TOML: local date and time values, number parsing, UTF-8 validation, readable error reports and tagged JSON."
requires-python = ">=3.10"
dependencies = []
keywords = ["toml", "parser", "datetime", "configuration", "json"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: File Formats",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ptoml"]

[tool.hatch.build.targets.sdist]
include = ["ptoml", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
