"""Tests for splitting a component into template and blocks."""

from __future__ import annotations

import pytest

from sveltedoc.exit_codes import ConfigurationError, SvelteDocError
from sveltedoc.structure import load_structure, split_component


class TestSplitComponent:
    def test_blocks_and_offsets(self):
        content = '<script context="module">const a = 1;</script>\n<script>let b;</script>\n<style>p {}</style>\n<p/>'
        structure = split_component(content)
        module, instance = structure.scripts
        assert module.attributes == 'context="module"'
        assert module.content == "const a = 1;"
        assert content[module.offset :].startswith("const a = 1;")
        assert instance.attributes == ""
        assert content[instance.offset :].startswith("let b;")
        assert [s.content for s in structure.styles] == ["p {}"]

    def test_template_keeps_file_length(self):
        content = "<script>\nlet b;\n</script>\n<p>hi</p>"
        structure = split_component(content)
        assert len(structure.template) == len(content)
        assert structure.template.index("<p>") == content.index("<p>")
        assert "let" not in structure.template
        assert structure.template.count("\n") == content.count("\n")

    def test_script_inside_markup_comment_ignored(self):
        structure = split_component("<!-- <script>let x;</script> -->\n<p/>")
        assert structure.scripts == []

    def test_no_blocks(self):
        structure = split_component("<p>only markup</p>")
        assert structure.scripts == []
        assert structure.template == "<p>only markup</p>"


class TestLoadStructure:
    def test_content_preferred(self):
        assert load_structure(file_content="<script>let a;</script>").scripts[0].content == "let a;"

    def test_reads_file(self, component_factory):
        path = component_factory("Card.svelte", "<script>let a;</script>")
        assert load_structure(filename=str(path)).scripts[0].content == "let a;"

    def test_js_file(self, component_factory):
        path = component_factory("helpers.js", "export const a = 1;")
        structure = load_structure(filename=str(path))
        assert structure.template == ""
        assert structure.scripts[0].content == "export const a = 1;"
        assert structure.scripts[0].offset == 0

    def test_missing_file(self, tmp_path):
        with pytest.raises(SvelteDocError, match="cannot read"):
            load_structure(filename=str(tmp_path / "missing.svelte"))

    def test_nothing_given(self):
        with pytest.raises(ConfigurationError):
            load_structure()
