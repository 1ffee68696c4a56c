"""Script block walker.

Traverses one script block (or one inline markup expression) depth-first,
pre-order, emitting a documented item for every declaration shape it
recognizes. A ``level`` counter tracks nesting: declarations, exports,
imports and reactive statements only count at level 0, while dispatch
calls are recognized anywhere.
"""

from __future__ import annotations

import logging

from sveltedoc.grammar.comments import ParsedComment, is_top_level_comment, parse_comment
from sveltedoc.grammar.types import (
    any_type,
    infer_type_from_node_type,
    make_type,
    parse_param_keyword,
    parse_return_keyword,
    parse_signature_keywords,
    parse_type_keyword,
)
from sveltedoc.items import (
    ComponentItem,
    ComputedItem,
    DataItem,
    EventItem,
    MethodItem,
    ScriptScope,
    SemanticItem,
)
from sveltedoc.walkers.base import (
    ParseContext,
    leading_comment,
    parse_source,
    script_grammar,
    script_scope,
    string_value,
)
from sveltedoc.walkers.symbols import (
    DISPATCHER_FACTORY,
    DISPATCHER_MODULE,
    UNRESOLVED_EVENT_NAME,
    SymbolState,
    build_chain,
    resolve_chain_node,
    resolve_chain_value,
)

log = logging.getLogger(__name__)

# Nodes walked at the level of their parent
_TRANSPARENT = frozenset({"expression_statement", "statement_block", "parenthesized_expression"})
_FUNCTION_DECLARATIONS = frozenset({"function_declaration", "generator_function_declaration"})
_VARIABLE_DECLARATIONS = frozenset({"lexical_declaration", "variable_declaration"})
_FUNCTION_VALUES = frozenset(
    {"arrow_function", "function", "function_expression", "generator_function", "method_definition"}
)
_IDENTIFIERS = frozenset({"identifier", "shorthand_property_identifier", "shorthand_property_identifier_pattern"})


def _comment_for(node, ctx: ParseContext, default_visibility: str) -> ParsedComment:
    comment = leading_comment(node)
    return parse_comment(ctx.text(comment) if comment is not None else None, default_visibility)


def _meaningful(node) -> list:
    return [child for child in node.named_children if child.type != "comment"]


class ScriptWalker:
    """Walks script syntax trees, feeding the shared identifier/dispatcher state."""

    def __init__(self, state: SymbolState, *, default_method_visibility: str = "private"):
        self.state = state
        self.default_method_visibility = default_method_visibility
        self.component_comment: ParsedComment | None = None
        self._inline_grammar = "javascript"
        self._items: list[SemanticItem] = []

    # ---- Entry points ----

    def walk_block(self, content: str, attributes: str = "", offset: int = 0) -> list[SemanticItem]:
        """Parse and walk one ``<script>`` block located at *offset* in the file."""
        grammar = script_grammar(attributes)
        if grammar == "typescript":
            self._inline_grammar = grammar
        source = content.encode("utf-8")
        tree = parse_source(source, grammar)
        context = ParseContext(script_scope(attributes), offset, source)
        log.debug("walking %s script block at %d (%s scope)", grammar, offset, context.scope.value)
        return self.walk(tree.root_node, context)

    def walk_expression(self, expression: str, offset: int = 0) -> list[SemanticItem]:
        """Walk a JavaScript expression embedded in markup (inline scope)."""
        if not expression.strip():
            return []
        source = expression.encode("utf-8")
        tree = parse_source(source, self._inline_grammar)
        return self.walk(tree.root_node, ParseContext(ScriptScope.INLINE, offset, source))

    def walk(self, root, ctx: ParseContext) -> list[SemanticItem]:
        self._items = []
        if not ctx.is_inline:
            self._capture_component_comment(root, ctx)
        self._walk_children(root, ctx, 0)
        items, self._items = self._items, []
        return items

    # ---- Traversal ----

    def _walk_children(self, node, ctx, level):
        for child in node.named_children:
            self._visit(child, ctx, level)

    def _visit(self, node, ctx, level):
        kind = node.type
        if kind == "comment":
            return
        if kind in _TRANSPARENT:
            self._walk_children(node, ctx, level)
        elif kind == "call_expression":
            self._visit_call(node, ctx, level)
        elif kind in _VARIABLE_DECLARATIONS and not ctx.is_inline:
            self._visit_variables(node, ctx, level)
        elif kind in _FUNCTION_DECLARATIONS and not ctx.is_inline:
            self._visit_function(node, ctx, level)
        elif kind == "export_statement" and level == 0 and not ctx.is_inline:
            self._visit_export(node, ctx, level)
        elif kind == "labeled_statement" and level == 0 and not ctx.is_inline:
            self._visit_labeled(node, ctx, level)
        elif kind == "import_statement" and level == 0 and not ctx.is_inline:
            self._visit_import(node, ctx)
        else:
            self._walk_children(node, ctx, level + 1)

    def _capture_component_comment(self, root, ctx):
        if self.component_comment is not None or root.child_count == 0:
            return
        first = root.children[0]
        if first.type != "comment":
            return
        comment = parse_comment(ctx.text(first))
        if is_top_level_comment(comment):
            self.component_comment = comment

    # ---- Variables ----

    def _visit_variables(self, node, ctx, level, exported=False):
        if node.type == "variable_declaration":
            kind = "var"
        else:
            kind = node.children[0].type if node.child_count else "let"
        default_visibility = "public" if exported else "private"

        for declarator in node.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            value = declarator.child_by_field_name("value")
            if name_node is None:
                continue

            if level == 0:
                annotation = declarator.child_by_field_name("type")
                for ident in self._pattern_identifiers(name_node):
                    inferred = value if ident == name_node else None
                    self._emit_data(ident, ctx, kind, default_visibility, inferred, annotation)

            if value is None:
                continue

            if name_node.type == "identifier":
                name = ctx.text(name_node)
                if level == 0:
                    self.state.identifiers.record(name, value, ctx.source)
                if value.type == "call_expression":
                    factory = value.child_by_field_name("function")
                    if factory is not None and factory.type == "identifier":
                        if self.state.dispatchers.is_factory(ctx.text(factory)):
                            self.state.dispatchers.register(name)

            self._visit(value, ctx, level + 1)

    def _emit_data(self, ident, ctx, kind, default_visibility, value=None, annotation=None):
        comment = _comment_for(ident, ctx, default_visibility)
        item = DataItem(
            name=ctx.text(ident),
            description=comment.description,
            visibility=comment.visibility,
            keywords=comment.keywords,
            locations=[ctx.location(ident)],
            kind=kind,
            static=ctx.is_static,
            readonly=kind == "const",
            type=self._declared_type(comment, ctx, value, annotation),
        )
        self._items.append(item)

    @staticmethod
    def _declared_type(comment, ctx, value=None, annotation=None):
        kw = comment.keyword("type")
        if kw is not None:
            parsed = parse_type_keyword(kw.description)
            if parsed is not None:
                return parsed
        if annotation is not None:
            text = ctx.text(annotation).lstrip(":").strip()
            if text:
                return make_type(text)
        if value is not None:
            return infer_type_from_node_type(value.type) or any_type()
        return any_type()

    def _pattern_identifiers(self, node) -> list:
        """Every identifier bound by a (possibly destructuring) pattern."""
        if node is None:
            return []
        if node.type in ("identifier", "shorthand_property_identifier_pattern"):
            return [node]
        if node.type == "pair_pattern":
            return self._pattern_identifiers(node.child_by_field_name("value"))
        if node.type in ("object_assignment_pattern", "assignment_pattern"):
            return self._pattern_identifiers(node.child_by_field_name("left"))
        if node.type in ("object_pattern", "array_pattern", "rest_pattern"):
            found = []
            for child in _meaningful(node):
                found.extend(self._pattern_identifiers(child))
            return found
        return []

    # ---- Functions ----

    def _visit_function(self, node, ctx, level, exported=False):
        name_node = node.child_by_field_name("name")
        if level == 0 and name_node is not None:
            default_visibility = "public" if exported else self.default_method_visibility
            comment = _comment_for(node, ctx, default_visibility)
            returns = comment.keyword("returns", "return")
            self._items.append(
                MethodItem(
                    name=ctx.text(name_node),
                    description=comment.description,
                    visibility=comment.visibility,
                    keywords=comment.keywords,
                    locations=[ctx.location(name_node)],
                    params=self._function_params(node.child_by_field_name("parameters"), ctx, comment),
                    return_=parse_return_keyword(returns.description) if returns else None,
                    static=ctx.is_static,
                )
            )
        body = node.child_by_field_name("body")
        if body is not None:
            self._walk_children(body, ctx, level + 1)

    def _function_params(self, params_node, ctx, comment) -> list[dict]:
        params = []
        if params_node is not None:
            for child in _meaningful(params_node):
                param = self._declared_param(child, ctx)
                if param is not None:
                    params.append(param)

        by_name = {p["name"]: p for p in params}
        for kw in comment.keywords_named("param", "arg", "argument"):
            documented = parse_param_keyword(kw.description)
            name = documented["name"]
            if name is None:
                continue
            declared = by_name.get(name)
            if declared is None:
                params.append(documented)
                by_name[name] = documented
                continue
            declared["type"] = documented["type"]
            declared["description"] = documented["description"]
            declared["optional"] = declared["optional"] or documented["optional"]
            if documented["default"] is not None:
                declared["default"] = documented["default"]
            if documented.get("repeated"):
                declared["repeated"] = True
        return params

    def _declared_param(self, node, ctx) -> dict | None:
        param = {"name": None, "type": make_type("any"), "optional": False, "default": None, "description": None}
        kind = node.type

        if kind in ("required_parameter", "optional_parameter"):
            # TypeScript: pattern, optional type annotation and default value
            inner = self._declared_param(node.child_by_field_name("pattern"), ctx)
            if inner is None:
                return None
            annotation = node.child_by_field_name("type")
            if annotation is not None:
                inner["type"] = make_type(ctx.text(annotation).lstrip(":").strip())
            value = node.child_by_field_name("value")
            if value is not None:
                inner["default"] = ctx.text(value)
            inner["optional"] = inner["optional"] or kind == "optional_parameter" or value is not None
            return inner
        if kind == "identifier":
            param["name"] = ctx.text(node)
        elif kind == "assignment_pattern":
            param["name"] = ctx.text(node.child_by_field_name("left"))
            param["default"] = ctx.text(node.child_by_field_name("right"))
            param["optional"] = True
        elif kind == "rest_pattern":
            inner = _meaningful(node)
            param["name"] = ctx.text(inner[0]) if inner else ctx.text(node).lstrip(".")
            param["repeated"] = True
        elif kind in ("object_pattern", "array_pattern"):
            param["name"] = ctx.text(node)
        else:
            return None
        return param

    # ---- Exports ----

    def _visit_export(self, node, ctx, level):
        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            if declaration.type in _VARIABLE_DECLARATIONS:
                self._visit_variables(declaration, ctx, level, exported=True)
            elif declaration.type in _FUNCTION_DECLARATIONS:
                self._visit_function(declaration, ctx, level, exported=True)
            else:
                self._visit(declaration, ctx, level + 1)

        for clause in node.named_children:
            if clause.type != "export_clause":
                continue
            for specifier in clause.named_children:
                if specifier.type != "export_specifier":
                    continue
                local = specifier.child_by_field_name("name")
                alias = specifier.child_by_field_name("alias")
                exported = alias if alias is not None else local
                if local is None:
                    continue
                comment = _comment_for(specifier, ctx, "public")
                self._items.append(
                    DataItem(
                        name=ctx.text(exported),
                        description=comment.description,
                        visibility=comment.visibility,
                        keywords=comment.keywords,
                        locations=[ctx.location(exported)],
                        kind="const",
                        static=ctx.is_static,
                        local_name=ctx.text(local),
                    )
                )

        value = node.child_by_field_name("value")
        if value is not None:
            self._visit(value, ctx, level + 1)

    # ---- Reactive declarations ----

    def _visit_labeled(self, node, ctx, level):
        label = node.child_by_field_name("label")
        body = node.child_by_field_name("body")
        if label is None or body is None:
            return
        if ctx.text(label) != "$":
            self._walk_children(node, ctx, level + 1)
            return

        if body.type == "expression_statement":
            expressions = _meaningful(body)
            expression = expressions[0] if expressions else None
            while expression is not None and expression.type == "parenthesized_expression":
                inner = _meaningful(expression)
                expression = inner[0] if inner else None
            if expression is not None and expression.type == "assignment_expression":
                left = expression.child_by_field_name("left")
                right = expression.child_by_field_name("right")
                dependencies = self._free_identifiers(right, ctx)
                for ident in self._pattern_identifiers(left):
                    self._emit_computed(ident, ctx, dependencies, right if ident == left else None)

        self._walk_children(body, ctx, level + 1)

    def _emit_computed(self, ident, ctx, dependencies, value):
        comment = _comment_for(ident, ctx, "private")
        self._items.append(
            ComputedItem(
                name=ctx.text(ident),
                description=comment.description,
                visibility=comment.visibility,
                keywords=comment.keywords,
                locations=[ctx.location(ident)],
                dependencies=list(dependencies),
                type=self._declared_type(comment, ctx, value),
                static=ctx.is_static,
            )
        )

    def _free_identifiers(self, node, ctx) -> list[str]:
        """Identifiers read by an expression, in order, minus function parameters."""
        found: list[str] = []

        def visit(n, bound):
            if n.type in _IDENTIFIERS:
                name = ctx.text(n)
                if name not in bound and name not in found and name != "undefined":
                    found.append(name)
                return
            if n.type in _FUNCTION_VALUES:
                params = n.child_by_field_name("parameters") or n.child_by_field_name("parameter")
                names = {ctx.text(i) for i in self._param_identifiers(params)}
                body = n.child_by_field_name("body")
                if body is not None:
                    visit(body, bound | names)
                return
            if n.type == "member_expression":
                obj = n.child_by_field_name("object")
                if obj is not None:
                    visit(obj, bound)
                prop = n.child_by_field_name("property")
                if prop is not None and prop.type != "property_identifier":
                    visit(prop, bound)
                return
            if n.type == "pair":
                value = n.child_by_field_name("value")
                if value is not None:
                    visit(value, bound)
                return
            for child in n.named_children:
                visit(child, bound)

        if node is not None:
            visit(node, frozenset())
        return found

    def _param_identifiers(self, params) -> list:
        if params is None:
            return []
        if params.type == "identifier":
            return [params]
        found = []
        for child in _meaningful(params):
            if child.type in ("required_parameter", "optional_parameter"):
                child = child.child_by_field_name("pattern")
            found.extend(self._pattern_identifiers(child))
        return found

    # ---- Imports ----

    def _visit_import(self, node, ctx):
        source_node = node.child_by_field_name("source")
        import_path = string_value(source_node, ctx.source)
        if import_path is None:
            return

        for clause in node.named_children:
            if clause.type != "import_clause":
                continue
            for child in clause.named_children:
                if child.type == "identifier":
                    self._import_default(child, ctx, import_path)
                elif child.type == "named_imports":
                    for specifier in child.named_children:
                        if specifier.type == "import_specifier":
                            self._import_named(specifier, ctx, import_path)
                elif child.type == "namespace_import":
                    for ident in child.named_children:
                        if ident.type == "identifier":
                            self.state.identifiers.record(ctx.text(ident), child, ctx.source, import_path)

    def _import_default(self, ident, ctx, import_path):
        name = ctx.text(ident)
        if name in self.state.identifiers:
            return
        self.state.identifiers.record(name, ident, ctx.source, import_path)
        comment = _comment_for(ident, ctx, "private")

        if name[:1].isupper():
            self._items.append(
                ComponentItem(
                    name=name,
                    description=comment.description,
                    visibility=comment.visibility,
                    keywords=comment.keywords,
                    locations=[ctx.location(ident)],
                    import_path=import_path,
                )
            )
            return

        self._items.append(self._import_data(ident, ctx, comment, name, import_path))

    def _import_named(self, specifier, ctx, import_path):
        imported = specifier.child_by_field_name("name")
        alias = specifier.child_by_field_name("alias")
        local = alias if alias is not None else imported
        if local is None:
            return
        original = ctx.text(imported) if imported is not None else ctx.text(local)
        name = ctx.text(local)

        self.state.identifiers.record(name, specifier, ctx.source, import_path)
        if import_path == DISPATCHER_MODULE and original == DISPATCHER_FACTORY:
            self.state.dispatchers.register_factory(name)

        comment = _comment_for(local, ctx, "private")
        self._items.append(self._import_data(local, ctx, comment, original, import_path))

    @staticmethod
    def _import_data(local, ctx, comment, original, import_path):
        return DataItem(
            name=ctx.text(local),
            description=comment.description,
            visibility=comment.visibility,
            keywords=comment.keywords,
            locations=[ctx.location(local)],
            kind="const",
            static=ctx.is_static,
            readonly=True,
            type=ScriptWalker._declared_type(comment, ctx),
            import_path=import_path,
            original_name=original,
        )

    # ---- Calls and dispatched events ----

    def _visit_call(self, node, ctx, level):
        callee = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")

        if callee is not None and arguments is not None and self._is_dispatcher_callee(callee, ctx):
            self._emit_dispatched_event(node, arguments, ctx)

        if callee is not None and callee.type != "identifier":
            self._visit(callee, ctx, level + 1)
        if arguments is not None:
            self._walk_children(arguments, ctx, level + 1)

    def _is_dispatcher_callee(self, callee, ctx) -> bool:
        dispatchers = self.state.dispatchers
        if callee.type == "identifier":
            name = ctx.text(callee)
            if dispatchers.is_dispatcher(name):
                return True
            entry = self.state.identifiers.resolve(name)
            if entry is None or entry.import_path is not None:
                return False
            target = entry.node
            return target.type == "identifier" and dispatchers.is_dispatcher(
                entry.source[target.start_byte : target.end_byte].decode("utf-8", errors="replace")
            )

        chain = build_chain(callee, ctx.source)
        if not chain or len(chain) < 2:
            return False
        found = resolve_chain_node(self.state.identifiers, chain)
        if found is None:
            return False
        target, source = found
        return target.type in ("identifier", "shorthand_property_identifier") and dispatchers.is_dispatcher(
            source[target.start_byte : target.end_byte].decode("utf-8", errors="replace")
        )

    def _emit_dispatched_event(self, call, arguments, ctx):
        comment = _comment_for(call, ctx, "public")
        args = _meaningful(arguments)
        if not args:
            self.state.report(
                "dispatch-without-name",
                f"dispatcher called without an event name: {ctx.text(call)}",
                ctx.location(call),
            )
            return

        name_node = args[0]
        location = ctx.location(name_node)
        name = string_value(name_node, ctx.source)
        if name is None:
            chain = build_chain(name_node, ctx.source)
            if chain:
                name = resolve_chain_value(self.state.identifiers, chain)

        event_kw = comment.keyword("event")
        if event_kw is not None:
            if event_kw.description:
                if name is None:
                    name = event_kw.description.split()[0]
            else:
                self.state.report(
                    "event-keyword-empty",
                    f"@event keyword without a value on dispatch call {ctx.text(call)}",
                    location,
                )

        if name is None:
            self.state.report(
                "unresolved-event-name",
                f"could not resolve event name {ctx.text(name_node)!r}",
                location,
            )
            name = UNRESOLVED_EVENT_NAME

        params, returns = parse_signature_keywords(comment.keywords)
        self._items.append(
            EventItem(
                name=name,
                description=comment.description,
                visibility=comment.visibility,
                keywords=comment.keywords,
                locations=[location],
                parent=None,
                params=params,
                return_=returns,
            )
        )
