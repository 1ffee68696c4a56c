"""Per-parse identifier table, dispatcher registry and diagnostics.

Everything here is allocated fresh for one component parse and dropped
afterwards. Resolution is best effort: only names declared at the top
level of a script block are recorded, so shadowed or nested names stay
unresolved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import NamedTuple

from sveltedoc.items import Location
from sveltedoc.walkers.base import node_text, string_value

log = logging.getLogger(__name__)

UNRESOLVED_EVENT_NAME = "****unhandled-event-name****"

DISPATCHER_MODULE = "svelte"
DISPATCHER_FACTORY = "createEventDispatcher"

# Alias hops followed when resolving an identifier chain
_MAX_ALIAS_DEPTH = 8


class TableEntry(NamedTuple):
    node: object  # initializer node (or the import specifier)
    source: bytes  # source of the block the node belongs to
    import_path: str | None = None


class IdentifierTable:
    """Flat map of top-level names to their initializers or import paths."""

    def __init__(self):
        self._entries: dict[str, TableEntry] = {}

    def record(self, name: str, node, source: bytes, import_path: str | None = None) -> None:
        self._entries[name] = TableEntry(node, source, import_path)

    def resolve(self, name: str) -> TableEntry | None:
        return self._entries.get(name)

    def import_path(self, name: str) -> str | None:
        entry = self._entries.get(name)
        return entry.import_path if entry else None

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class DispatcherRegistry:
    """Names bound to the dispatcher factory and to dispatchers built from it.

    Registration is monotonic: once a name is a dispatcher it stays one for
    the rest of the parse.
    """

    def __init__(self):
        # The canonical factory name counts even when its import is missing
        self._factories: set[str] = {DISPATCHER_FACTORY}
        self._dispatchers: set[str] = set()

    def register_factory(self, local_name: str) -> None:
        self._factories.add(local_name)

    def is_factory(self, name: str) -> bool:
        return name in self._factories

    def register(self, name: str) -> None:
        log.debug("dispatcher registered: %s", name)
        self._dispatchers.add(name)

    def is_dispatcher(self, name: str) -> bool:
        return name in self._dispatchers


@dataclass
class Diagnostic:
    """A recoverable issue reported without aborting the parse."""

    code: str
    message: str
    location: Location | None = None

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "location": self.location.to_dict() if self.location else None,
        }


@dataclass
class SymbolState:
    """Mutable state shared by both walkers during one parse."""

    identifiers: IdentifierTable = field(default_factory=IdentifierTable)
    dispatchers: DispatcherRegistry = field(default_factory=DispatcherRegistry)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def report(self, code: str, message: str, location: Location | None = None) -> None:
        log.warning("%s: %s", code, message)
        self.diagnostics.append(Diagnostic(code, message, location))


# ---- Chain resolution ----


def build_chain(node, source: bytes) -> list[str] | None:
    """Turn ``A`` or ``A.B.C`` into ``["A", "B", "C"]``; None for anything else."""
    if node is None:
        return None
    if node.type in ("identifier", "shorthand_property_identifier"):
        return [node_text(node, source)]
    if node.type == "member_expression":
        prop = node.child_by_field_name("property")
        if prop is None or prop.type != "property_identifier":
            return None
        head = build_chain(node.child_by_field_name("object"), source)
        if head is None:
            return None
        return head + [node_text(prop, source)]
    return None


def _object_property(obj, key: str, source: bytes):
    for child in obj.named_children:
        if child.type == "pair":
            key_node = child.child_by_field_name("key")
            name = string_value(key_node, source)
            if name is None:
                name = node_text(key_node, source)
            if name == key:
                return child.child_by_field_name("value")
        elif child.type == "shorthand_property_identifier" and node_text(child, source) == key:
            return child
    return None


def resolve_chain_node(table: IdentifierTable, chain: list[str], _depth: int = 0) -> tuple[object, bytes] | None:
    """Follow *chain* through top-level initializers to the node it names."""
    if not chain or _depth > _MAX_ALIAS_DEPTH:
        return None
    entry = table.resolve(chain[0])
    if entry is None or entry.import_path is not None:
        return None
    node, source = entry.node, entry.source

    for key in chain[1:]:
        while node is not None and node.type in ("identifier", "shorthand_property_identifier"):
            followed = resolve_chain_node(table, [node_text(node, source)], _depth + 1)
            if followed is None:
                return None
            node, source = followed
        if node is None or node.type != "object":
            return None
        node = _object_property(node, key, source)

    if node is None:
        return None
    return node, source


def resolve_chain_value(table: IdentifierTable, chain: list[str], _depth: int = 0) -> str | None:
    """String value a chain evaluates to, following identifier aliases."""
    found = resolve_chain_node(table, chain, _depth)
    if found is None:
        return None
    node, source = found
    value = string_value(node, source)
    if value is not None:
        return value
    if node.type in ("identifier", "shorthand_property_identifier") and _depth < _MAX_ALIAS_DEPTH:
        return resolve_chain_value(table, [node_text(node, source)], _depth + 1)
    return None
