"""Run both walkers over one component and build its document."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from sveltedoc.merge import DocumentBuilder
from sveltedoc.options import ParseOptions
from sveltedoc.structure import ComponentStructure
from sveltedoc.walkers.markup import MarkupWalker
from sveltedoc.walkers.script import ScriptWalker
from sveltedoc.walkers.symbols import Diagnostic, SymbolState

log = logging.getLogger(__name__)


def un_camelcase(text: str) -> str:
    """``MyButton`` -> ``my-button``."""
    chars = []
    for ch in text:
        if "A" <= ch <= "Z":
            if chars:
                chars.append("-")
            ch = ch.lower()
        chars.append(ch)
    return "".join(chars)


@dataclass
class ParseResult:
    """The document for one component plus the diagnostics raised building it."""

    document: dict
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    def to_dict(self) -> dict:
        return {
            "document": self.document,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


class ComponentParser:
    """One-shot parser for a single component.

    All symbol state is created in the constructor and owned by this
    instance, so independent parsers never share anything.
    """

    def __init__(self, structure: ComponentStructure, options: ParseOptions):
        self.structure = structure
        self.options = options
        self.state = SymbolState()
        self.script_walker = ScriptWalker(self.state, default_method_visibility=options.default_method_visibility)
        self.markup_walker = MarkupWalker(self.script_walker)
        self.builder = DocumentBuilder(
            options.features,
            options.ignored_visibilities,
            include_locations=options.include_source_locations,
        )

    def run(self) -> ParseResult:
        for block in self.structure.scripts:
            for item in self.script_walker.walk_block(block.content, block.attributes, block.offset):
                self.builder.add(item)

        if self.structure.template:
            for item in self.markup_walker.walk(self.structure.template):
                self.builder.add(item)

        self.builder.set_description(self.script_walker.component_comment or self.markup_walker.component_comment)
        self.builder.set_name(self._component_name())

        log.debug("parsed component with %d diagnostic(s)", len(self.state.diagnostics))
        return ParseResult(self.builder.build(), list(self.state.diagnostics))

    def _component_name(self) -> str | None:
        if self.markup_walker.component_name:
            return self.markup_walker.component_name
        if self.options.filename:
            return un_camelcase(Path(self.options.filename).stem)
        return None
