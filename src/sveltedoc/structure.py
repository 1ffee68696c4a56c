"""Split a component file into template, script and style segments.

Offsets are character offsets into the original file. The template keeps
the file's full length: script and style blocks are blanked out (newlines
kept) so a position found while walking the template is already a file
position.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from sveltedoc.exit_codes import ConfigurationError, SvelteDocError

log = logging.getLogger(__name__)

_BLOCK_RE = {
    name: re.compile(rf"<{name}(\s[^>]*)?>(.*?)</{name}\s*>", re.IGNORECASE | re.DOTALL) for name in ("script", "style")
}
_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)


@dataclass(frozen=True)
class ScriptBlock:
    content: str
    attributes: str = ""
    offset: int = 0


@dataclass
class ComponentStructure:
    template: str = ""
    scripts: list[ScriptBlock] = field(default_factory=list)
    styles: list[ScriptBlock] = field(default_factory=list)


def _blank(text: str) -> str:
    return re.sub(r"[^\n]", " ", text)


def _find_blocks(content: str, name: str, masked: str) -> list[tuple[int, int, ScriptBlock]]:
    blocks = []
    for m in _BLOCK_RE[name].finditer(masked):
        attributes = (content[m.start(1) : m.end(1)] if m.group(1) is not None else "").strip()
        block = ScriptBlock(content[m.start(2) : m.end(2)], attributes, m.start(2))
        blocks.append((m.start(), m.end(), block))
    return blocks


def split_component(content: str) -> ComponentStructure:
    """Split component source into its template and script/style blocks."""
    # Blocks inside markup comments are not blocks
    masked = _COMMENT_RE.sub(lambda m: _blank(m.group(0)), content)
    scripts = _find_blocks(content, "script", masked)
    styles = _find_blocks(content, "style", masked)

    template = content
    for start, end, _ in sorted(scripts + styles, key=lambda b: b[0]):
        template = template[:start] + _blank(template[start:end]) + template[end:]

    log.debug("split component: %d script block(s), %d style block(s)", len(scripts), len(styles))
    return ComponentStructure(
        template=template,
        scripts=[b for _, _, b in scripts],
        styles=[b for _, _, b in styles],
    )


def load_structure(filename: str | None = None, file_content: str | None = None, encoding: str = "utf-8"):
    """Load a component from *file_content* or, failing that, from *filename*.

    A ``.js`` file is treated as one script block with no template.
    """
    if file_content is not None:
        return split_component(file_content)
    if not filename:
        raise ConfigurationError("one of filename or file_content is required")

    path = Path(filename)
    try:
        text = path.read_text(encoding=encoding)
    except OSError as exc:
        raise SvelteDocError(f"cannot read {filename}: {exc.strerror or exc}") from exc
    except UnicodeDecodeError as exc:
        raise SvelteDocError(f"cannot decode {filename} as {encoding}: {exc.reason}") from exc

    if path.suffix == ".js":
        return ComponentStructure(template="", scripts=[ScriptBlock(text, "", 0)])
    return split_component(text)
