"""List the document categories `parse` can extract."""

import click

from sveltedoc.options import SUPPORTED_FEATURES
from sveltedoc.output.formatter import format_table, json_envelope, to_json

_DESCRIPTIONS = {
    "name": "component name (file name or <svelte:options tag>)",
    "data": "variables, exported props, imports and bind: targets",
    "computed": "reactive $: assignments with their dependencies",
    "methods": "top-level functions with params and return",
    "components": "imported components",
    "description": "text of the component comment",
    "keywords": "@keywords of the component comment",
    "events": "dispatched and forwarded events",
    "slots": "<slot> elements and their props",
    "refs": "bind:this references",
}


@click.command("features")
@click.pass_context
def features(ctx):
    """List supported features."""
    json_mode = ctx.obj.get("json") if ctx.obj else False
    rows = [[name, _DESCRIPTIONS.get(name, "")] for name in SUPPORTED_FEATURES]

    if json_mode:
        click.echo(
            to_json(
                json_envelope(
                    "features",
                    summary={"count": len(rows)},
                    features=[{"name": n, "description": d} for n, d in rows],
                )
            )
        )
        return

    click.echo(format_table(["feature", "description"], rows))
