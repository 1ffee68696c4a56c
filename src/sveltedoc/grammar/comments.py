"""Freeform documentation comment parsing.

A comment is reduced to a description (the text before the first
``@keyword``) and an ordered list of keywords. A keyword literally named
``public``, ``protected`` or ``private`` sets the visibility of the
documented symbol.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

VISIBILITIES = ("public", "protected", "private")
DEFAULT_VISIBILITY = "public"

# Higher rank wins when two declarations of one symbol are merged.
_VISIBILITY_RANK = {"private": 0, "protected": 1, "public": 2}

_KEYWORD_RE = re.compile(r"@\**\s*([a-z0-9_-]+)(?:\s+(?:-\s+)?([^@]+))?", re.IGNORECASE)
_OPEN_RE = re.compile(r"^/\*+")
_CLOSE_RE = re.compile(r"\s*\*+/$")
_STAR_RE = re.compile(r"^\*+")


@dataclass
class Keyword:
    name: str
    description: str = ""

    def to_dict(self) -> dict:
        return {"name": self.name, "description": self.description}


@dataclass
class ParsedComment:
    visibility: str = DEFAULT_VISIBILITY
    description: str = ""
    keywords: list[Keyword] = field(default_factory=list)

    def keyword(self, *names: str) -> Keyword | None:
        """Return the first keyword whose name is one of *names*."""
        for kw in self.keywords:
            if kw.name in names:
                return kw
        return None

    def keywords_named(self, *names: str) -> list[Keyword]:
        return [kw for kw in self.keywords if kw.name in names]


def is_visibility_supported(value) -> bool:
    return isinstance(value, str) and value in VISIBILITIES


def visibility_rank(visibility: str) -> int:
    return _VISIBILITY_RANK.get(visibility, 0)


def max_visibility(a: str, b: str) -> str:
    """Return the more visible of *a* and *b* (public > protected > private)."""
    return a if visibility_rank(a) >= visibility_rank(b) else b


def _strip_markers(line: str) -> str:
    line = line.strip()
    if line.startswith("//"):
        return line[2:].strip()
    line = _OPEN_RE.sub("", line).strip()
    line = _CLOSE_RE.sub("", line).strip()
    return _STAR_RE.sub("", line).strip()


def clean_comment_text(text: str) -> str:
    """Remove comment markers and leading stars, keeping line structure."""
    return "\n".join(_strip_markers(line) for line in text.split("\n")).strip()


def parse_comment(text: str | None, default_visibility: str = DEFAULT_VISIBILITY) -> ParsedComment:
    """Parse a raw comment into visibility, description and keywords.

    Accepts block (``/** ... */``), line (``// ...``) or HTML comment
    bodies. An empty or missing comment yields the default visibility and
    an empty description.
    """
    result = ParsedComment(visibility=default_visibility)
    if not text:
        return result

    cleaned = clean_comment_text(text)
    description_end = len(cleaned)

    for i, m in enumerate(_KEYWORD_RE.finditer(cleaned)):
        if i == 0:
            description_end = m.start()
        result.keywords.append(Keyword(m.group(1), (m.group(2) or "").strip()))

    result.description = cleaned[:description_end].strip()

    for kw in result.keywords:
        if kw.name in VISIBILITIES:
            result.visibility = kw.name
            break

    return result


def is_top_level_comment(comment: ParsedComment) -> bool:
    """A script comment documents the whole component when it carries @component."""
    return any(kw.name == "component" for kw in comment.keywords)
