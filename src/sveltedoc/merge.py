"""Aggregate walker output into one component document.

Items arrive in walk order (script blocks first, then markup). Items
sharing a category and name collapse into one entry: visibility takes
the more public of the two, locations accumulate, and every other field
keeps the first non-empty value seen. A template binding (data with
``bind`` mappings and no declaration kind) is the exception: its
visibility replaces the declared one.
"""

from __future__ import annotations

import logging
from dataclasses import fields

from sveltedoc.grammar.comments import ParsedComment, max_visibility
from sveltedoc.grammar.types import ANY_TYPE
from sveltedoc.items import ITEM_CATEGORIES, DataItem, SemanticItem

log = logging.getLogger(__name__)

# Fields merged by dedicated rules rather than fill-if-missing
_SPECIAL_FIELDS = frozenset({"name", "visibility", "locations", "bind"})


def _is_missing(field_name: str, value) -> bool:
    if value is None or value == "" or value == []:
        return True
    # Walkers default unknown types to ``any``; a concrete type may still arrive
    return field_name == "type" and value == ANY_TYPE


def _is_template_binding(item: SemanticItem) -> bool:
    return isinstance(item, DataItem) and bool(item.bind) and item.kind is None


def merge_items(current: SemanticItem, incoming: SemanticItem) -> SemanticItem:
    """Merge *incoming* into *current* in place and return *current*."""
    if _is_template_binding(incoming):
        current.visibility = incoming.visibility
    else:
        current.visibility = max_visibility(current.visibility, incoming.visibility)
    current.locations = current.locations + incoming.locations
    if hasattr(current, "bind") and hasattr(incoming, "bind"):
        current.bind = current.bind + incoming.bind

    for f in fields(current):
        if f.name in _SPECIAL_FIELDS or not hasattr(incoming, f.name):
            continue
        value = getattr(incoming, f.name)
        if _is_missing(f.name, getattr(current, f.name)) and not _is_missing(f.name, value):
            setattr(current, f.name, value)
    return current


class DocumentBuilder:
    """Collects items per category and renders the final document dict.

    *features* picks and orders the document keys; categories that were not
    requested are never rendered. Items whose visibility is listed in
    *ignored_visibilities* are dropped at build time, after merging, so a
    private declaration later exported as public survives.
    Locations are left out of the rendered items unless *include_locations*.
    """

    def __init__(self, features, ignored_visibilities=(), *, include_locations=True):
        self.features = list(features)
        self.ignored_visibilities = frozenset(ignored_visibilities)
        self.include_locations = include_locations
        self.name: str | None = None
        self.description: str | None = None
        self.keywords: list = []
        self._items: dict[str, dict[str, SemanticItem]] = {c: {} for c in ITEM_CATEGORIES}
        # (category, local name) -> exported name
        self._aliases: dict[tuple[str, str], str] = {}

    def set_name(self, name: str | None) -> None:
        if name:
            self.name = name

    def set_description(self, comment: ParsedComment | None) -> None:
        """Take the component description and keywords from its top-level comment."""
        if comment is None:
            return
        if self.description is None and comment.description:
            self.description = comment.description
        if not self.keywords:
            self.keywords = list(comment.keywords)

    def add(self, item: SemanticItem) -> None:
        category = item.category
        bucket = self._items[category]
        name = self._aliases.get((category, item.name), item.name)
        local = getattr(item, "local_name", None)

        if local and local != item.name:
            self._aliases[(category, local)] = item.name
            if local in bucket and item.name not in bucket:
                self._rename(category, local, item.name)
                bucket = self._items[category]

        existing = bucket.get(name)
        if existing is None:
            if name != item.name:
                item.local_name = item.name
                item.name = name
            bucket[name] = item
            return
        log.debug("merging %s %r", category, name)
        merge_items(existing, item)

    def _rename(self, category: str, old: str, new: str) -> None:
        bucket = self._items[category]
        target = bucket[old]
        target.name = new
        target.local_name = old
        # Keep the declaration's position in the document
        self._items[category] = {(new if key == old else key): value for key, value in bucket.items()}

    def items(self, category: str) -> list[SemanticItem]:
        return list(self._items[category].values())

    def build(self) -> dict:
        doc: dict = {}
        for feature in self.features:
            if feature == "name":
                doc["name"] = self.name
            elif feature == "description":
                doc["description"] = self.description
            elif feature == "keywords":
                doc["keywords"] = [kw.to_dict() for kw in self.keywords]
            else:
                doc[feature] = [
                    self._render(item) for item in self.items(feature) if item.visibility not in self.ignored_visibilities
                ]
        return doc

    def _render(self, item: SemanticItem) -> dict:
        out = item.to_dict()
        if not self.include_locations:
            del out["locations"]
        return out
