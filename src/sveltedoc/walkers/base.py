"""Shared tree-sitter helpers for the script and markup walkers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from sveltedoc.exit_codes import ScriptSyntaxError
from sveltedoc.items import Location, ScriptScope

_MODULE_SCOPE_RE = re.compile(r"""\s(?:context|scope)\s*=\s*(?:'module'|"module"|module\b)""", re.IGNORECASE)
_TS_LANG_RE = re.compile(r"""\slang\s*=\s*(?:'|")?(ts|typescript)\b""", re.IGNORECASE)

# A comment never attaches across these; a comment before an enclosing
# function or call does not document an expression nested inside it
_COMMENT_BOUNDARIES = frozenset(
    {
        "program",
        "statement_block",
        "class_body",
        "switch_body",
        "arrow_function",
        "function",
        "function_expression",
        "generator_function",
        "method_definition",
        "arguments",
    }
)


@lru_cache(maxsize=None)
def get_parser(grammar: str):
    """Get a cached tree-sitter parser from tree_sitter_language_pack."""
    from tree_sitter_language_pack import get_parser as _get_parser

    return _get_parser(grammar)


def script_grammar(attributes: str | None) -> str:
    """Grammar for a script block: typescript for lang="ts", else javascript."""
    if attributes and _TS_LANG_RE.search(" " + attributes):
        return "typescript"
    return "javascript"


def script_scope(attributes: str | None) -> ScriptScope:
    if attributes and _MODULE_SCOPE_RE.search(" " + attributes):
        return ScriptScope.MODULE
    return ScriptScope.INSTANCE


def _first_error(node):
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_error(child)
        if found is not None:
            return found
    return None


def parse_source(source: bytes, grammar: str = "javascript"):
    """Parse script source, raising ScriptSyntaxError on any ERROR/MISSING node."""
    tree = get_parser(grammar).parse(source)
    root = tree.root_node
    if root.has_error:
        bad = _first_error(root) or root
        line = bad.start_point[0] + 1
        column = bad.start_point[1] + 1
        what = "missing " + bad.type if bad.is_missing else "unexpected token"
        raise ScriptSyntaxError(
            f"{grammar} syntax error at line {line}, column {column}: {what}",
            line=line,
            column=column,
            offset=bad.start_byte,
        )
    return tree


def node_text(node, source: bytes) -> str:
    if node is None:
        return ""
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def string_value(node, source: bytes) -> str | None:
    """Value of a string literal, or of a template string without substitutions."""
    if node is None:
        return None
    if node.type == "string":
        return node_text(node, source)[1:-1]
    if node.type == "template_string":
        if any(child.type == "template_substitution" for child in node.children):
            return None
        return node_text(node, source)[1:-1]
    return None


def leading_comment(node):
    """Find the comment documenting *node*.

    Walks from the node up through its enclosing nodes, returning the
    first comment that immediately precedes one of them, and stops at the
    enclosing statement list.
    """
    current = node
    while current is not None:
        prev = current.prev_sibling
        if prev is not None and prev.type == "comment":
            return prev
        parent = current.parent
        if parent is None or parent.type in _COMMENT_BOUNDARIES:
            return None
        current = parent
    return None


@dataclass(frozen=True)
class ParseContext:
    """Immutable per-block state: scope tag, file offset and block source."""

    scope: ScriptScope
    offset: int
    source: bytes

    @property
    def is_static(self) -> bool:
        return self.scope is ScriptScope.MODULE

    @property
    def is_inline(self) -> bool:
        return self.scope is ScriptScope.INLINE

    def char_offset(self, byte_offset: int) -> int:
        """Absolute character offset of a byte offset inside this block."""
        return self.offset + len(self.source[:byte_offset].decode("utf-8", errors="replace"))

    def location(self, node) -> Location:
        return Location(self.char_offset(node.start_byte), self.char_offset(node.end_byte))

    def text(self, node) -> str:
        return node_text(node, self.source)
