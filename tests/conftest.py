"""Shared test fixtures and helpers for sveltedoc tests.

Provides:
- CliRunner fixtures: cli_runner, invoke_cli()
- Factory fixture: component_factory writes component files into tmp_path
- Walker helpers: walk_script(), walk_markup()
- JSON validation helpers: parse_json_output(), assert_json_envelope()
"""

from __future__ import annotations

import json
import os

import pytest
from click.testing import CliRunner

# ===========================================================================
# CliRunner helpers
# ===========================================================================


@pytest.fixture
def cli_runner():
    """Provide a Click CliRunner for in-process CLI testing."""
    return CliRunner()


def invoke_cli(runner, args, cwd=None, json_mode=False):
    """Invoke the sveltedoc CLI via CliRunner.

    Args:
        runner: CliRunner instance
        args: list of CLI arguments (e.g. ["parse", "Button.svelte"])
        cwd: directory to run in
        json_mode: if True, prepend --json flag
    Returns:
        click.testing.Result
    """
    from sveltedoc.cli import cli

    full_args = []
    if json_mode:
        full_args.append("--json")
    full_args.extend(args)

    old_cwd = os.getcwd()
    try:
        if cwd:
            os.chdir(str(cwd))
        result = runner.invoke(cli, full_args)
    finally:
        os.chdir(old_cwd)

    return result


# ===========================================================================
# JSON validation helpers
# ===========================================================================


def parse_json_output(result, command=None):
    """Parse JSON from a CliRunner result.

    Raises:
        AssertionError with context on parse failure
    """
    assert result.exit_code == 0, f"Command {command or '?'} failed (exit {result.exit_code}):\n{result.output}"
    try:
        return json.loads(result.output)
    except json.JSONDecodeError as e:
        pytest.fail(f"Invalid JSON from {command or '?'}: {e}\nOutput was:\n{result.output[:500]}")


def assert_json_envelope(data, command=None):
    """Validate that a parsed JSON dict follows the sveltedoc envelope contract."""
    assert isinstance(data, dict), f"Expected dict, got {type(data)}"
    for key in ("schema", "command", "version", "summary"):
        assert key in data, f"Missing '{key}' key in envelope"
    assert "timestamp" in data.get("_meta", {}), "Missing 'timestamp' in _meta"
    if command:
        assert data["command"] == command, f"Expected command={command}, got {data['command']}"
    assert isinstance(data["summary"], dict), f"summary should be dict, got {type(data['summary'])}"


# ===========================================================================
# Walker helpers
# ===========================================================================


def walk_script(source: str, attributes: str = "", offset: int = 0, state=None):
    """Walk one script block; return (items, state)."""
    from sveltedoc.walkers.script import ScriptWalker
    from sveltedoc.walkers.symbols import SymbolState

    state = state or SymbolState()
    walker = ScriptWalker(state)
    return walker.walk_block(source, attributes, offset), state


def walk_markup(template: str, script: str | None = None):
    """Walk a template, optionally after one script block; return (items, walker)."""
    from sveltedoc.walkers.markup import MarkupWalker
    from sveltedoc.walkers.script import ScriptWalker
    from sveltedoc.walkers.symbols import SymbolState

    script_walker = ScriptWalker(SymbolState())
    if script is not None:
        script_walker.walk_block(script)
    walker = MarkupWalker(script_walker)
    return walker.walk(template), walker


def by_name(items, category=None):
    """Index items (SemanticItem or dict) by name, optionally filtered by category."""
    out = {}
    for item in items:
        if isinstance(item, dict):
            out[item["name"]] = item
        elif category is None or item.category == category:
            out[item.name] = item
    return out


# ===========================================================================
# Component fixtures
# ===========================================================================


@pytest.fixture
def component_factory(tmp_path):
    """Write a component file and return its path.

    Usage::

        path = component_factory("Button.svelte", "<button on:click/>")
    """

    def _make(name: str, content: str):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _make
