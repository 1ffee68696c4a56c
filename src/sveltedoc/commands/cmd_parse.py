"""Document one component file."""

from __future__ import annotations

import click

from sveltedoc.api import parse
from sveltedoc.exit_codes import EXIT_PARTIAL
from sveltedoc.grammar.comments import VISIBILITIES
from sveltedoc.options import DEFAULT_IGNORED_VISIBILITIES, SUPPORTED_FEATURES
from sveltedoc.output.formatter import (
    CATEGORY_LABELS,
    format_table,
    format_type,
    json_envelope,
    loc,
    section,
    to_json,
)

# ---------------------------------------------------------------------------
# Text rendering
# ---------------------------------------------------------------------------


def _detail(category: str, item: dict) -> str:
    """Kind-specific column for the text table."""
    if category in ("data", "computed"):
        detail = format_type(item.get("type"))
        if item.get("bind"):
            detail += "  bind " + ", ".join(f"{b['source']}.{b['property']}" for b in item["bind"])
        return detail
    if category == "methods":
        params = ", ".join(p["name"] for p in item.get("params", []))
        return f"({params})"
    if category == "events":
        return f"<{item['parent']}>" if item.get("parent") else ""
    if category == "slots":
        return ", ".join(p["name"] for p in item.get("parameters", []))
    if category == "refs":
        return f"<{item['parent']}>" if item.get("parent") else ""
    if category == "components":
        return item.get("importPath") or ""
    return ""


def _first_line(text: str | None) -> str:
    if not text:
        return ""
    return text.strip().splitlines()[0]


def _render_text(path: str, document: dict, diagnostics: list) -> str:
    blocks = []
    header = [f"Component: {document.get('name') or path}"]
    if document.get("description"):
        header.append(_first_line(document["description"]))
    blocks.append("\n".join(header))

    for category, items in document.items():
        if not isinstance(items, list) or category == "keywords":
            continue
        label = CATEGORY_LABELS.get(category, category)
        rows = []
        for item in items:
            first = (item.get("locations") or [None])[0]
            rows.append(
                [
                    item["name"],
                    item["visibility"],
                    _detail(category, item),
                    _first_line(item.get("description")),
                    loc(path, first["start"], first["end"]) if first else "",
                ]
            )
        blocks.append(section(f"{category} ({len(items)}):", [format_table([label, "vis", "detail", "description", "at"], rows)]))

    if diagnostics:
        lines = [f"  {d.code}: {d.message}" for d in diagnostics]
        blocks.append(section(f"diagnostics ({len(diagnostics)}):", lines))
    return "\n\n".join(blocks)


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------


@click.command("parse")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-f",
    "--feature",
    "features",
    multiple=True,
    type=click.Choice(SUPPORTED_FEATURES),
    help="Category to extract (repeatable; default: all)",
)
@click.option(
    "--ignore",
    "ignored",
    multiple=True,
    type=click.Choice(VISIBILITIES),
    help="Visibility to drop from the output (repeatable; default: protected, private)",
)
@click.option("--keep-all", is_flag=True, help="Keep items of every visibility")
@click.option("--locations", is_flag=True, help="Include source offsets for each item")
@click.option("--strict", is_flag=True, help=f"Exit with {EXIT_PARTIAL} when diagnostics were reported")
@click.pass_context
def parse_cmd(ctx, path, features, ignored, keep_all, locations, strict):
    """Extract documentation from a .svelte (or .js) component file."""
    json_mode = ctx.obj.get("json") if ctx.obj else False

    if keep_all:
        ignored_visibilities = ()
    elif ignored:
        ignored_visibilities = tuple(ignored)
    else:
        ignored_visibilities = DEFAULT_IGNORED_VISIBILITIES

    result = parse(
        filename=path,
        features=tuple(features) or SUPPORTED_FEATURES,
        ignored_visibilities=ignored_visibilities,
        include_source_locations=locations,
    )
    document = result.document

    if json_mode:
        summary = {
            "verdict": "partial" if result.diagnostics else "ok",
            "diagnostics": len(result.diagnostics),
        }
        for category, items in document.items():
            if isinstance(items, list) and category != "keywords":
                summary[category] = len(items)
        click.echo(
            to_json(
                json_envelope(
                    "parse",
                    summary=summary,
                    file=path,
                    document=document,
                    diagnostics=[d.to_dict() for d in result.diagnostics],
                )
            )
        )
    else:
        click.echo(_render_text(path, document, result.diagnostics))

    if strict and result.diagnostics:
        ctx.exit(EXIT_PARTIAL)
