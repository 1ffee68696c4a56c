"""Allow running as `python -m sveltedoc`."""

from sveltedoc.cli import cli

cli()
