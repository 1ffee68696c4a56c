"""Standardized CLI exit codes and error types for sveltedoc.

Exit code scheme:

    0  SUCCESS        -- component parsed, no diagnostics (or not --strict)
    1  GENERAL_ERROR  -- unexpected failure, unreadable file
    2  USAGE_ERROR    -- invalid arguments or parse options (Click default)
    3  SYNTAX_ERROR   -- a script block (or inline expression) does not parse
    4  PARTIAL        -- parsed with diagnostics while --strict was given

Library callers get the same information from the exception types below;
they are ``click.ClickException`` subclasses so the CLI reports them
without a traceback.
"""

from __future__ import annotations

import click

# ---------------------------------------------------------------------------
# Exit code constants
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_ERROR: int = 1
EXIT_USAGE: int = 2
EXIT_SYNTAX: int = 3
EXIT_PARTIAL: int = 4

DESCRIPTIONS: dict[int, str] = {
    EXIT_SUCCESS: "success",
    EXIT_ERROR: "unexpected error",
    EXIT_USAGE: "invalid usage (bad arguments, flags or parse options)",
    EXIT_SYNTAX: "script block could not be parsed",
    EXIT_PARTIAL: "partial results (completed with diagnostics)",
}

# ---------------------------------------------------------------------------
# Custom exceptions
# ---------------------------------------------------------------------------


class SvelteDocError(click.ClickException):
    """Base class for sveltedoc errors with exit codes."""

    def __init__(self, message: str, exit_code: int = EXIT_ERROR):
        super().__init__(message)
        self.exit_code = exit_code

    def format_message(self) -> str:
        return self.message


class ConfigurationError(SvelteDocError):
    """Raised before any walk starts when parse options are invalid."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_USAGE)


class ScriptSyntaxError(SvelteDocError):
    """Raised when a script block does not parse; aborts the whole parse."""

    def __init__(self, message: str, *, line: int | None = None, column: int | None = None, offset: int | None = None):
        super().__init__(message, EXIT_SYNTAX)
        self.line = line
        self.column = column
        self.offset = offset
