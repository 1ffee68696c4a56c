"""Documented symbol model.

Every walker emits instances of the dataclasses below; the document
builder merges them per category. ``to_dict()`` produces the public JSON
shape (camelCase keys for the optional import/alias fields).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields
from typing import ClassVar

from sveltedoc.grammar.comments import DEFAULT_VISIBILITY, Keyword
from sveltedoc.grammar.types import any_type


class ScriptScope(enum.Enum):
    """Where an item was declared."""

    MODULE = "module"  # <script context="module">
    INSTANCE = "instance"  # plain <script>
    INLINE = "inline"  # expression embedded in markup


@dataclass(frozen=True)
class Location:
    start: int
    end: int

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class BindMapping:
    source: str
    property: str

    def to_dict(self) -> dict:
        return {"source": self.source, "property": self.property}


# Optional fields dropped from to_dict() output when unset
_OPTIONAL_KEYS = {
    "import_path": "importPath",
    "original_name": "originalName",
    "local_name": "localName",
    "params": "params",
    "return_": "return",
}


def _plain(value):
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


@dataclass
class SemanticItem:
    name: str
    description: str = ""
    visibility: str = DEFAULT_VISIBILITY
    keywords: list[Keyword] = field(default_factory=list)
    locations: list[Location] = field(default_factory=list)

    # Document key the item is collected under
    category: ClassVar[str] = ""

    def to_dict(self) -> dict:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in _OPTIONAL_KEYS:
                if value is None:
                    continue
                out[_OPTIONAL_KEYS[f.name]] = _plain(value)
            else:
                out[f.name] = _plain(value)
        return out


@dataclass
class DataItem(SemanticItem):
    kind: str | None = None  # var | let | const | None (markup-only binding)
    static: bool = False
    readonly: bool = False
    type: dict = field(default_factory=any_type)
    import_path: str | None = None
    original_name: str | None = None
    local_name: str | None = None
    bind: list[BindMapping] = field(default_factory=list)

    category: ClassVar[str] = "data"


@dataclass
class MethodItem(SemanticItem):
    params: list[dict] = field(default_factory=list)
    return_: dict | None = None
    static: bool = False

    category: ClassVar[str] = "methods"


@dataclass
class ComputedItem(SemanticItem):
    dependencies: list[str] = field(default_factory=list)
    type: dict = field(default_factory=any_type)
    static: bool = False

    category: ClassVar[str] = "computed"


@dataclass
class EventItem(SemanticItem):
    parent: str | None = None
    modifiers: list[str] = field(default_factory=list)
    params: list[dict] | None = None
    return_: dict | None = None

    category: ClassVar[str] = "events"


@dataclass
class SlotParameter:
    name: str
    description: str = ""
    visibility: str = DEFAULT_VISIBILITY

    def to_dict(self) -> dict:
        return {"name": self.name, "description": self.description, "visibility": self.visibility}


@dataclass
class SlotItem(SemanticItem):
    parameters: list[SlotParameter] = field(default_factory=list)

    category: ClassVar[str] = "slots"


@dataclass
class RefItem(SemanticItem):
    parent: str | None = None

    category: ClassVar[str] = "refs"


@dataclass
class ComponentItem(SemanticItem):
    import_path: str | None = None

    category: ClassVar[str] = "components"


ITEM_CATEGORIES = tuple(
    cls.category for cls in (DataItem, MethodItem, ComputedItem, EventItem, SlotItem, RefItem, ComponentItem)
)
