"""Tests for the script walker: declarations, imports, reactive statements and events."""

from __future__ import annotations

import pytest
from conftest import by_name, walk_script

from sveltedoc.exit_codes import EXIT_SYNTAX, ScriptSyntaxError
from sveltedoc.items import ComponentItem, ComputedItem, DataItem, EventItem, MethodItem
from sveltedoc.walkers.script import ScriptWalker
from sveltedoc.walkers.symbols import UNRESOLVED_EVENT_NAME, SymbolState

DISPATCH_SETUP = "import { createEventDispatcher } from 'svelte';\nconst dispatch = createEventDispatcher();\n"


def _of(items, cls):
    return [i for i in items if isinstance(i, cls)]


# ===========================================================================
# Variables and exports
# ===========================================================================


class TestData:
    def test_let_is_private_with_inferred_type(self):
        items, _ = walk_script("let count = 1;")
        (item,) = _of(items, DataItem)
        assert item.name == "count"
        assert item.kind == "let"
        assert item.visibility == "private"
        assert item.type["type"] == "number"
        assert item.readonly is False
        assert item.static is False

    def test_export_let_is_public(self):
        items, _ = walk_script("export let label = 'ok';")
        item = by_name(items)["label"]
        assert item.visibility == "public"
        assert item.type["type"] == "string"

    def test_const_is_readonly(self):
        items, _ = walk_script("export const MAX = 10;")
        assert by_name(items)["MAX"].readonly is True
        assert by_name(items)["MAX"].kind == "const"

    def test_var_kind(self):
        items, _ = walk_script("var legacy;")
        assert by_name(items)["legacy"].kind == "var"

    def test_untyped_defaults_to_any(self):
        items, _ = walk_script("let value;")
        assert by_name(items)["value"].type == {"kind": "type", "text": "any", "type": "any"}

    def test_module_context_is_static(self):
        items, _ = walk_script("export const shared = 1;", attributes='context="module"')
        assert by_name(items)["shared"].static is True

    def test_comment_description_and_type_keyword(self):
        src = "/**\n * The label.\n * @type {'small'|'large'}\n */\nexport let size;"
        items, _ = walk_script(src)
        item = by_name(items)["size"]
        assert item.description == "The label."
        assert item.type["kind"] == "union"
        assert [t["value"] for t in item.type["type"]] == ["small", "large"]

    def test_visibility_keyword_on_export(self):
        items, _ = walk_script("/** @protected */\nexport let internal = 0;")
        assert by_name(items)["internal"].visibility == "protected"

    def test_destructuring_declares_each_name(self):
        items, _ = walk_script("let { a, b: c } = source;\nlet [d, ...rest] = list;")
        assert [i.name for i in _of(items, DataItem)] == ["a", "c", "d", "rest"]

    def test_nested_declarations_are_not_data(self):
        items, _ = walk_script("function f() { let inner = 1; }")
        assert "inner" not in by_name(items)

    def test_typescript_annotation(self):
        items, _ = walk_script("export let size: number;", attributes='lang="ts"')
        assert by_name(items)["size"].type["type"] == "number"

    def test_type_keyword_beats_annotation(self):
        items, _ = walk_script("/** @type {string} */\nexport let size: number = 1;", attributes='lang="ts"')
        assert by_name(items)["size"].type["type"] == "string"

    def test_export_specifier_carries_local_name(self):
        items, _ = walk_script("let local = 1;\nexport { local as exported };")
        data = _of(items, DataItem)
        assert [d.name for d in data] == ["local", "exported"]
        assert data[1].local_name == "local"
        assert data[1].visibility == "public"


class TestLocations:
    def test_offset_added_to_local_position(self):
        items, _ = walk_script("let a = 1;\nlet b = 2;", offset=100)
        loc = by_name(items)["b"].locations[0]
        assert (loc.start, loc.end) == (115, 116)

    def test_offsets_count_characters_not_bytes(self):
        items, _ = walk_script('let s = "é"; let b = 1;')
        assert by_name(items)["b"].locations[0].start == 17


# ===========================================================================
# Methods
# ===========================================================================


class TestMethods:
    def test_exported_function_with_documented_params(self):
        src = (
            "/**\n"
            " * Adds numbers.\n"
            " * @param {number} a first operand\n"
            " * @returns {number} the sum\n"
            " */\n"
            "export function add(a, b = 2) { return a + b; }\n"
        )
        items, _ = walk_script(src)
        (method,) = _of(items, MethodItem)
        assert method.name == "add"
        assert method.visibility == "public"
        assert method.description == "Adds numbers."
        a, b = method.params
        assert a["name"] == "a"
        assert a["type"]["type"] == "number"
        assert a["description"] == "first operand"
        assert b["name"] == "b"
        assert b["optional"] is True
        assert b["default"] == "2"
        assert method.return_["type"]["type"] == "number"
        assert method.return_["description"] == "the sum"

    def test_plain_function_uses_default_method_visibility(self):
        items, _ = walk_script("function helper() {}")
        assert by_name(items)["helper"].visibility == "private"

        walker = ScriptWalker(SymbolState(), default_method_visibility="protected")
        items = walker.walk_block("function helper() {}")
        assert by_name(items)["helper"].visibility == "protected"

    def test_rest_parameter_is_repeated(self):
        items, _ = walk_script("export function log(...args) {}")
        (param,) = by_name(items)["log"].params
        assert param["name"] == "args"
        assert param["repeated"] is True

    def test_documented_param_not_in_signature_is_appended(self):
        items, _ = walk_script("/** @param {string} extra */\nexport function f() {}")
        assert [p["name"] for p in by_name(items)["f"].params] == ["extra"]


# ===========================================================================
# Reactive declarations
# ===========================================================================


class TestComputed:
    def test_dependencies_collected(self):
        items, _ = walk_script("let count = 0;\nlet step = 1;\n$: doubled = count * 2 + step;")
        (computed,) = _of(items, ComputedItem)
        assert computed.name == "doubled"
        assert computed.dependencies == ["count", "step"]
        assert computed.visibility == "private"

    def test_function_parameters_are_not_dependencies(self):
        items, _ = walk_script("$: total = items.reduce((sum, item) => sum + item.price, 0);")
        assert by_name(items)["total"].dependencies == ["items"]

    def test_destructured_reactive_assignment(self):
        items, _ = walk_script("$: ({ width, height } = size);")
        names = [i.name for i in _of(items, ComputedItem)]
        assert names == ["width", "height"]

    def test_reactive_block_is_not_computed(self):
        items, _ = walk_script("$: { console.log(value); }")
        assert _of(items, ComputedItem) == []

    def test_literal_type_inferred(self):
        items, _ = walk_script("$: label = 'fixed';")
        assert by_name(items)["label"].type["type"] == "string"


# ===========================================================================
# Imports
# ===========================================================================


class TestImports:
    def test_default_uppercase_import_is_component(self):
        items, _ = walk_script("import Button from './Button.svelte';")
        (component,) = _of(items, ComponentItem)
        assert component.name == "Button"
        assert component.import_path == "./Button.svelte"
        assert component.visibility == "private"

    def test_named_import_is_readonly_data(self):
        items, state = walk_script("import { format as fmt } from 'date-fns';")
        item = by_name(items)["fmt"]
        assert isinstance(item, DataItem)
        assert item.original_name == "format"
        assert item.import_path == "date-fns"
        assert item.readonly is True
        assert state.identifiers.import_path("fmt") == "date-fns"

    def test_lowercase_default_import_is_data(self):
        items, _ = walk_script("import config from './config.js';")
        assert isinstance(by_name(items)["config"], DataItem)

    def test_namespace_import_only_recorded(self):
        items, state = walk_script("import * as utils from './utils.js';")
        assert items == []
        assert "utils" in state.identifiers


# ===========================================================================
# Dispatched events
# ===========================================================================


class TestEvents:
    def test_string_event_name(self):
        items, state = walk_script(DISPATCH_SETUP + "dispatch('notify');")
        (event,) = _of(items, EventItem)
        assert event.name == "notify"
        assert event.visibility == "public"
        assert event.parent is None
        assert state.dispatchers.is_dispatcher("dispatch")
        assert state.diagnostics == []

    def test_factory_without_import(self):
        items, _ = walk_script("const dispatch = createEventDispatcher();\ndispatch('notify');")
        assert [e.name for e in _of(items, EventItem)] == ["notify"]

    def test_renamed_factory_import(self):
        src = "import { createEventDispatcher as ced } from 'svelte';\nconst fire = ced();\nfire('go');"
        items, _ = walk_script(src)
        assert [e.name for e in _of(items, EventItem)] == ["go"]

    def test_event_name_from_constant_object(self):
        src = DISPATCH_SETUP + "const EVENTS = { CLOSE: 'close' };\ndispatch(EVENTS.CLOSE);"
        items, _ = walk_script(src)
        assert [e.name for e in _of(items, EventItem)] == ["close"]

    def test_event_name_from_identifier_alias(self):
        src = DISPATCH_SETUP + "const NAME = 'opened';\nconst ALIAS = NAME;\ndispatch(ALIAS);"
        items, _ = walk_script(src)
        assert [e.name for e in _of(items, EventItem)] == ["opened"]

    def test_dispatcher_through_member_alias(self):
        src = DISPATCH_SETUP + "const api = { fire: dispatch };\napi.fire('x');"
        items, _ = walk_script(src)
        assert [e.name for e in _of(items, EventItem)] == ["x"]

    def test_dispatch_inside_function(self):
        src = DISPATCH_SETUP + "export function close() {\n  /** Closed by the user */\n  dispatch('close');\n}"
        items, _ = walk_script(src)
        (event,) = _of(items, EventItem)
        assert event.name == "close"
        assert event.description == "Closed by the user"

    def test_unresolved_name_is_placeholder_with_diagnostic(self):
        items, state = walk_script(DISPATCH_SETUP + "dispatch(someVariable);")
        (event,) = _of(items, EventItem)
        assert event.name == UNRESOLVED_EVENT_NAME
        assert [d.code for d in state.diagnostics] == ["unresolved-event-name"]

    def test_event_keyword_names_unresolved_event(self):
        src = DISPATCH_SETUP + "/** @event custom */\ndispatch(someVariable);"
        items, state = walk_script(src)
        assert [e.name for e in _of(items, EventItem)] == ["custom"]
        assert state.diagnostics == []

    def test_empty_event_keyword_reported(self):
        src = DISPATCH_SETUP + "/** @event */\ndispatch('named');"
        items, state = walk_script(src)
        assert [e.name for e in _of(items, EventItem)] == ["named"]
        assert [d.code for d in state.diagnostics] == ["event-keyword-empty"]

    def test_dispatch_without_arguments(self):
        items, state = walk_script(DISPATCH_SETUP + "dispatch();")
        assert _of(items, EventItem) == []
        assert [d.code for d in state.diagnostics] == ["dispatch-without-name"]

    def test_private_event_keyword(self):
        items, _ = walk_script(DISPATCH_SETUP + "/** @private */\ndispatch('internal');")
        assert _of(items, EventItem)[0].visibility == "private"

    def test_declaration_comment_stays_on_arrow_declaration(self):
        src = DISPATCH_SETUP + "/** @private Internal helper */\nconst fire = () => dispatch('change');"
        items, _ = walk_script(src)
        (event,) = _of(items, EventItem)
        assert event.name == "change"
        assert event.visibility == "public"
        assert event.description == ""
        assert by_name(_of(items, DataItem))["fire"].visibility == "private"

    def test_call_comment_does_not_reach_callback(self):
        src = DISPATCH_SETUP + "/** @protected start timer */ setTimeout(() => dispatch('tick'), 10);"
        items, _ = walk_script(src)
        (event,) = _of(items, EventItem)
        assert event.visibility == "public"
        assert event.description == ""

    def test_call_comment_does_not_reach_argument(self):
        src = DISPATCH_SETUP + "/** @private */\nwrap(dispatch('direct'));"
        items, _ = walk_script(src)
        assert _of(items, EventItem)[0].visibility == "public"

    def test_param_and_returns_keywords(self):
        src = DISPATCH_SETUP + (
            "/**\n * Item picked\n * @param {string} id - picked id\n * @arg {number} [index=0]\n"
            " * @returns {boolean} handled\n */\ndispatch('pick');"
        )
        items, _ = walk_script(src)
        (event,) = _of(items, EventItem)
        assert [p["name"] for p in event.params] == ["id", "index"]
        assert event.params[0]["type"]["type"] == "string"
        assert event.params[0]["description"] == "picked id"
        assert event.params[1]["optional"] is True
        assert event.params[1]["default"] == "0"
        assert event.return_["type"]["type"] == "boolean"
        assert event.return_["description"] == "handled"
        rendered = event.to_dict()
        assert rendered["return"] == event.return_
        assert len(rendered["params"]) == 2

    def test_undocumented_event_has_no_params(self):
        items, _ = walk_script(DISPATCH_SETUP + "dispatch('plain');")
        (event,) = _of(items, EventItem)
        assert event.params is None
        assert event.return_ is None
        assert "params" not in event.to_dict()
        assert "return" not in event.to_dict()

    def test_unrelated_call_ignored(self):
        items, _ = walk_script("console.log('notify');")
        assert _of(items, EventItem) == []


class TestInlineExpressions:
    def test_inline_handler_dispatch(self):
        state = SymbolState()
        walker = ScriptWalker(state)
        walker.walk_block(DISPATCH_SETUP)
        items = walker.walk_expression("() => dispatch('save')", offset=50)
        (event,) = items
        assert event.name == "save"
        assert event.locations[0].start == 50 + len("() => dispatch(")

    def test_inline_scope_declares_nothing(self):
        walker = ScriptWalker(SymbolState())
        assert walker.walk_expression("value = 1") == []


class TestComponentComment:
    def test_component_keyword_captured(self):
        walker = ScriptWalker(SymbolState())
        walker.walk_block("/**\n * A button.\n * @component\n */\nlet a;")
        assert walker.component_comment.description == "A button."

    def test_plain_first_comment_ignored(self):
        walker = ScriptWalker(SymbolState())
        walker.walk_block("/** just a variable */\nlet a;")
        assert walker.component_comment is None


class TestSyntaxErrors:
    def test_invalid_script_raises(self):
        with pytest.raises(ScriptSyntaxError) as excinfo:
            walk_script("let a = ;\n")
        assert excinfo.value.exit_code == EXIT_SYNTAX
        assert excinfo.value.line == 1
