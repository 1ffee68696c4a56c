"""sveltedoc: structured documentation extraction for Svelte components."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("sveltedoc")
except PackageNotFoundError:
    __version__ = "dev"

from sveltedoc.api import parse, parse_async  # noqa: E402

__all__ = ["__version__", "parse", "parse_async"]
