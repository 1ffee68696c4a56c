"""Template (markup) walker.

Scans the template tag by tag and correlates attributes with the symbols
they document: ``bind:`` directives become data, ``bind:this`` becomes a
ref, ``on:`` directives without a handler become propagated events, and
``<slot>`` elements become slots. Handlers written inline
(``on:click={() => dispatch('x')}``) are handed to the script walker so
dispatch calls resolve against the state built from the script blocks.

A comment documents the next element only when nothing but whitespace
separates them.
"""

from __future__ import annotations

import logging
import re
from typing import NamedTuple

from sveltedoc.grammar.comments import ParsedComment, parse_comment
from sveltedoc.grammar.types import parse_signature_keywords
from sveltedoc.items import (
    BindMapping,
    DataItem,
    EventItem,
    Location,
    RefItem,
    SemanticItem,
    SlotItem,
    SlotParameter,
)
from sveltedoc.walkers.script import ScriptWalker

log = logging.getLogger(__name__)

_TAG_NAME_RE = re.compile(r"[A-Za-z][\w:.\-]*")
_ATTR_NAME_RE = re.compile(r"""[^\s=>"'/{}]+""")
_UNQUOTED_VALUE_RE = re.compile(r"""[^\s>"'=<`]+""")

_RAW_TEXT_TAGS = frozenset({"script", "style"})
_VOID_TAGS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


class Comment(NamedTuple):
    data: str
    start: int
    end: int


class Text(NamedTuple):
    data: str
    start: int
    end: int


class Attribute(NamedTuple):
    name: str
    value: str | None
    start: int
    end: int
    value_start: int | None = None


class OpenTag(NamedTuple):
    name: str
    attributes: list
    start: int
    end: int
    self_closing: bool = False

    def attribute(self, name: str) -> Attribute | None:
        for attr in self.attributes:
            if attr.name == name:
                return attr
        return None


class CloseTag(NamedTuple):
    name: str
    start: int
    end: int


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------


def skip_braces(text: str, i: int) -> int:
    """Index just past the ``}`` balancing the ``{`` at *i*.

    Quoted strings and template literals inside the braces are skipped, so
    a ``}`` or ``>`` inside them does not end the expression.
    """
    depth = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in "'\"`":
            i += 1
            while i < n and text[i] != ch:
                if text[i] == "\\":
                    i += 1
                i += 1
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return n


class MarkupScanner:
    """Tokenize template text into comments, text runs and tags.

    Offsets are absolute: *offset* is added to every position.
    """

    def __init__(self, text: str, offset: int = 0):
        self.text = text
        self.offset = offset

    def __iter__(self):
        text = self.text
        n = len(text)
        i = 0
        while i < n:
            if text.startswith("<!--", i):
                end = text.find("-->", i + 4)
                stop = n if end < 0 else end
                after = n if end < 0 else end + 3
                yield Comment(text[i + 4 : stop], self._abs(i), self._abs(after))
                i = after
            elif text.startswith("</", i):
                m = _TAG_NAME_RE.match(text, i + 2)
                end = text.find(">", i)
                after = n if end < 0 else end + 1
                yield CloseTag(m.group(0) if m else "", self._abs(i), self._abs(after))
                i = after
            elif text.startswith("<!", i) or text.startswith("<?", i):
                end = text.find(">", i)
                i = n if end < 0 else end + 1
            elif text[i] == "<" and _TAG_NAME_RE.match(text, i + 1):
                tag, i = self._open_tag(i)
                yield tag
                if tag.name.lower() in _RAW_TEXT_TAGS and not tag.self_closing:
                    i = self._skip_raw_text(tag.name, i)
            elif text[i] == "{":
                end = skip_braces(text, i)
                yield Text(text[i:end], self._abs(i), self._abs(end))
                i = end
            else:
                end = self._next_special(i + 1)
                yield Text(text[i:end], self._abs(i), self._abs(end))
                i = end

    def _abs(self, i: int) -> int:
        return self.offset + i

    def _next_special(self, i: int) -> int:
        candidates = [p for p in (self.text.find("<", i), self.text.find("{", i)) if p >= 0]
        return min(candidates) if candidates else len(self.text)

    def _skip_raw_text(self, name: str, i: int) -> int:
        m = re.compile(rf"</{re.escape(name)}\s*>", re.IGNORECASE).search(self.text, i)
        return m.end() if m else len(self.text)

    def _open_tag(self, start: int) -> tuple[OpenTag, int]:
        text = self.text
        n = len(text)
        m = _TAG_NAME_RE.match(text, start + 1)
        name = m.group(0)
        i = m.end()
        attributes = []
        self_closing = False

        while i < n:
            while i < n and text[i].isspace():
                i += 1
            if i >= n:
                break
            if text.startswith("/>", i):
                self_closing = True
                i += 2
                break
            if text[i] == ">":
                i += 1
                break
            if text[i] == "{":
                # Shorthand ({value}) or spread ({...props}) attribute
                end = skip_braces(text, i)
                attributes.append(Attribute(text[i + 1 : end - 1].strip(), None, self._abs(i), self._abs(end)))
                i = end
                continue

            am = _ATTR_NAME_RE.match(text, i)
            if am is None:
                i += 1
                continue
            attr_name = am.group(0)
            attr_start = i
            i = am.end()

            j = i
            while j < n and text[j].isspace():
                j += 1
            if j >= n or text[j] != "=":
                attributes.append(Attribute(attr_name, None, self._abs(attr_start), self._abs(i)))
                continue

            j += 1
            while j < n and text[j].isspace():
                j += 1
            value, value_start, i = self._attribute_value(j)
            attributes.append(
                Attribute(
                    attr_name,
                    value,
                    self._abs(attr_start),
                    self._abs(i),
                    self._abs(value_start) if value is not None else None,
                )
            )

        return OpenTag(name, attributes, self._abs(start), self._abs(i), self_closing), i

    def _attribute_value(self, i: int) -> tuple[str | None, int, int]:
        """Return (value, value start, index after the value)."""
        text = self.text
        n = len(text)
        if i >= n:
            return None, i, i
        ch = text[i]
        if ch in "'\"":
            j = i + 1
            while j < n and text[j] != ch:
                j = skip_braces(text, j) if text[j] == "{" else j + 1
            return text[i + 1 : j], i + 1, min(j + 1, n)
        if ch == "{":
            end = skip_braces(text, i)
            return text[i:end], i, end
        m = _UNQUOTED_VALUE_RE.match(text, i)
        if m is None:
            return "", i, i
        return m.group(0), i, m.end()


# ---------------------------------------------------------------------------
# Walker
# ---------------------------------------------------------------------------


def _unwrap_expression(value: str, value_start: int) -> tuple[str, int]:
    """Strip the braces around a ``{...}`` attribute value."""
    stripped = value.strip()
    lead = len(value) - len(value.lstrip())
    if stripped.startswith("{") and stripped.endswith("}"):
        return stripped[1:-1], value_start + lead + 1
    return stripped, value_start + lead


class MarkupWalker:
    """Walks a template, emitting slots, refs, bindings and propagated events."""

    def __init__(self, script_walker: ScriptWalker):
        self.script_walker = script_walker
        self.component_comment: ParsedComment | None = None
        self.component_name: str | None = None

    def walk(self, template: str, offset: int = 0) -> list[SemanticItem]:
        items: list[SemanticItem] = []
        emitted_events: dict[str, str] = {}
        stack: list[str] = []
        last_comment: Comment | None = None
        root_seen = False

        for token in MarkupScanner(template, offset):
            if isinstance(token, Comment):
                last_comment = token
            elif isinstance(token, Text):
                if token.data.strip():
                    last_comment = None
            elif isinstance(token, CloseTag):
                if token.name in stack:
                    while stack and stack.pop() != token.name:
                        pass
            else:
                is_top_level = not stack
                name = token.name
                lowered = name.lower()
                if not token.self_closing and lowered not in _VOID_TAGS and lowered not in _RAW_TEXT_TAGS:
                    stack.append(name)

                if name != "slot":
                    for attr in token.attributes:
                        if not attr.name.startswith("on:") or len(attr.name) <= 3:
                            continue
                        if attr.value:
                            self._walk_handler(attr, items)
                            continue
                        event = self._propagated_event(token, attr, last_comment)
                        previous = emitted_events.get(event.name)
                        if previous is None or (event.visibility == "public" and previous != "public"):
                            emitted_events[event.name] = event.visibility
                            items.append(event)
                        else:
                            log.debug("dropping repeated markup event %s on <%s>", event.name, name)
                        last_comment = None

                if is_top_level and lowered not in _RAW_TEXT_TAGS:
                    if last_comment is not None and not root_seen:
                        self.component_comment = parse_comment(last_comment.data)
                    root_seen = True

                if name == "slot":
                    items.append(self._slot(token, last_comment))
                    last_comment = None
                else:
                    if name == "svelte:options":
                        tag_attr = token.attribute("tag")
                        if tag_attr is not None and tag_attr.value:
                            self.component_name = _unwrap_expression(tag_attr.value, 0)[0].strip("'\" ")
                    items.extend(self._bindings(token))

        return items

    def _walk_handler(self, attr: Attribute, items: list):
        expression, start = _unwrap_expression(attr.value, attr.value_start if attr.value_start is not None else attr.start)
        items.extend(self.script_walker.walk_expression(expression, start))

    @staticmethod
    def _propagated_event(tag: OpenTag, attr: Attribute, comment: Comment | None) -> EventItem:
        parts = attr.name[3:].split("|")
        parsed = parse_comment(comment.data if comment else None)
        params, returns = parse_signature_keywords(parsed.keywords)
        return EventItem(
            name=parts[0],
            description=parsed.description,
            visibility=parsed.visibility,
            keywords=parsed.keywords,
            locations=[Location(attr.start, attr.end)],
            parent=tag.name,
            modifiers=[m for m in parts[1:] if m],
            params=params,
            return_=returns,
        )

    @staticmethod
    def _slot(tag: OpenTag, comment: Comment | None) -> SlotItem:
        parsed = parse_comment(comment.data if comment else None)
        name_attr = tag.attribute("name")
        name = name_attr.value.strip() if name_attr is not None and name_attr.value else "default"
        return SlotItem(
            name=name,
            description=parsed.description,
            visibility="public",
            keywords=parsed.keywords,
            locations=[Location(tag.start, tag.end)],
            parameters=[SlotParameter(attr.name) for attr in tag.attributes if attr.name and attr.name != "name"],
        )

    @staticmethod
    def _bindings(tag: OpenTag) -> list[SemanticItem]:
        found: list[SemanticItem] = []
        for attr in tag.attributes:
            if not attr.name.startswith("bind:") or len(attr.name) <= 5:
                continue
            location = Location(attr.start, attr.end)
            target = _unwrap_expression(attr.value, 0)[0].strip() if attr.value else ""

            if attr.name == "bind:this":
                if target:
                    found.append(RefItem(name=target, visibility="private", locations=[location], parent=tag.name))
                continue

            prop = attr.name[5:]
            found.append(
                DataItem(
                    name=target or prop,
                    visibility="private",
                    locations=[location],
                    kind=None,
                    bind=[BindMapping(tag.name, prop)],
                )
            )
        return found
