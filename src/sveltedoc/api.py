"""Programmatic entry points.

``parse`` documents one component synchronously. ``parse_async`` does the
same work on an event loop: options are validated before the coroutine is
created, and the walk starts only after the coroutine yields once, so
callers can schedule other work before emission begins.
"""

from __future__ import annotations

import asyncio

from sveltedoc.exit_codes import ConfigurationError
from sveltedoc.options import ParseOptions
from sveltedoc.parser import ComponentParser, ParseResult
from sveltedoc.structure import ComponentStructure, load_structure


def _prepare(structure, file_content, filename, option_kwargs) -> tuple[ComponentStructure | None, ParseOptions]:
    options = ParseOptions.from_kwargs(filename=filename, **option_kwargs).validate()
    if structure is None and file_content is None and not filename:
        raise ConfigurationError("one of structure, file_content or filename is required")
    return structure, options


def _run(structure, file_content, options: ParseOptions) -> ParseResult:
    if structure is None:
        structure = load_structure(options.filename, file_content, options.encoding)
    return ComponentParser(structure, options).run()


def parse(
    structure: ComponentStructure | None = None,
    *,
    file_content: str | None = None,
    filename: str | None = None,
    **option_kwargs,
) -> ParseResult:
    """Document one component.

    The component comes from *structure* when given, else from
    *file_content*, else from the file at *filename*. *filename* also
    names the component. Remaining keyword arguments are ``ParseOptions``
    fields.

    Raises:
        ConfigurationError: an option is invalid or no input was given.
        ScriptSyntaxError: a script block does not parse.
    """
    structure, options = _prepare(structure, file_content, filename, option_kwargs)
    return _run(structure, file_content, options)


def parse_async(
    structure: ComponentStructure | None = None,
    *,
    file_content: str | None = None,
    filename: str | None = None,
    **option_kwargs,
):
    """Return a coroutine resolving to the ``ParseResult`` for one component.

    Configuration errors raise here, before any coroutine exists. Syntax
    errors surface when the coroutine is awaited.
    """
    structure, options = _prepare(structure, file_content, filename, option_kwargs)

    async def _parse() -> ParseResult:
        await asyncio.sleep(0)
        return _run(structure, file_content, options)

    return _parse()
