"""JSDoc-style type, parameter and return annotations.

Typed expressions are plain dicts so they serialize unchanged::

    {"kind": "type",  "text": "string", "type": "string"}
    {"kind": "const", "text": "'a'",    "type": "string", "value": "a"}
    {"kind": "union", "text": "'a'|'b'", "type": [<typed expression>, ...]}
"""

from __future__ import annotations

import re

DEFAULT_TYPE = "any"

_PARAM_NAME = r"[a-z0-9$.\[\]_]+"

_TYPE_RE = re.compile(r"^\s*\{([^}]*)\}", re.IGNORECASE)
_PARAM_RE = re.compile(
    r"^\s*(?:\{((?:\.\.\.)?[^}]*)\}\s+)?"
    rf"(?:\[\s*({_PARAM_NAME})\s*(?:=\s*([^\]]+))?\]|({_PARAM_NAME}))"
    r"(?:\s+(?:-\s+)?(.*))?",
    re.IGNORECASE,
)
_RETURN_RE = re.compile(r"^\s*(?:\{([^}]*)\}\s*)?-?\s*(.*)", re.IGNORECASE | re.DOTALL)

# Literal initializer node types (tree-sitter javascript/typescript) -> type name
_LITERAL_TYPES = {
    "string": "string",
    "template_string": "string",
    "number": "number",
    "true": "boolean",
    "false": "boolean",
    "array": "Array<any>",
}


def make_type(name: str, text: str | None = None) -> dict:
    return {"kind": "type", "text": text if text is not None else name, "type": name}


ANY_TYPE = make_type(DEFAULT_TYPE)


def any_type() -> dict:
    """Return a fresh ``any`` typed expression."""
    return dict(ANY_TYPE)


def parse_jsdoc_type(type_value: str) -> dict:
    """Parse the inside of a ``{...}`` annotation into a typed expression."""
    type_value = type_value.strip()

    if "|" in type_value:
        if type_value.startswith("(") and type_value.endswith(")"):
            type_value = type_value[1:-1].strip()
        return {
            "kind": "union",
            "text": type_value,
            "type": [parse_jsdoc_type(part) for part in type_value.split("|")],
        }

    # An unterminated quote falls through to a plain type on purpose.
    if len(type_value) >= 2 and type_value.startswith("'") and type_value.endswith("'"):
        return {
            "kind": "const",
            "text": type_value,
            "type": "string",
            "value": type_value[1:-1],
        }

    if type_value in ("*", "any"):
        return make_type(DEFAULT_TYPE, type_value)

    return make_type(type_value)


def parse_type_keyword(text: str | None) -> dict | None:
    """Parse a ``@type {...}`` keyword value; None when there is no annotation."""
    if not text:
        return None
    m = _TYPE_RE.match(text)
    if m and m.group(1):
        return parse_jsdoc_type(m.group(1))
    return None


def parse_param_keyword(text: str) -> dict:
    """Parse a ``@param`` keyword value.

    Supported forms::

        {string} name - description
        {number} [count=1] description
        {...string} names
        {string=} maybe
    """
    param = {
        "type": make_type(DEFAULT_TYPE, "*"),
        "name": None,
        "optional": False,
        "default": None,
        "description": None,
    }

    m = _PARAM_RE.match(text or "")
    if not m:
        return param

    param_type, optional_name, default, name, description = m.groups()

    if param_type:
        if param_type.startswith("..."):
            param["repeated"] = True
            param_type = param_type[3:]
        # Closure Compiler optional marker: {string=}
        if param_type.endswith("="):
            param["optional"] = True
            param_type = param_type[:-1]
        param["type"] = parse_jsdoc_type(param_type)

    if optional_name:
        param["name"] = optional_name.strip()
        param["optional"] = True
        if default:
            param["default"] = default.strip()

    if name:
        param["name"] = name.strip()

    if description:
        param["description"] = description.strip()

    return param


def parse_return_keyword(text: str) -> dict:
    """Parse a ``@returns`` keyword value into ``{type, description}``."""
    result = {"type": any_type(), "description": ""}
    m = _RETURN_RE.match(text or "")
    if not m:
        return result

    type_value, description = m.groups()
    if type_value and type_value.strip():
        type_value = type_value.strip()
        if type_value.startswith("..."):
            result["repeated"] = True
            type_value = type_value[3:]
        result["type"] = parse_jsdoc_type(type_value)
    result["description"] = (description or "").strip()
    return result


def parse_signature_keywords(keywords) -> tuple[list[dict] | None, dict | None]:
    """Expand ``@param``/``@arg``/``@argument`` and ``@returns`` keywords.

    Returns ``(params, return)``; ``params`` is None when no parameter is
    documented. A repeated ``@returns`` keeps the last one.
    """
    params = []
    returns = None
    for kw in keywords:
        if kw.name in ("param", "arg", "argument"):
            params.append(parse_param_keyword(kw.description))
        elif kw.name in ("returns", "return"):
            returns = parse_return_keyword(kw.description)
    return params or None, returns


def infer_type_from_node_type(node_type: str | None) -> dict | None:
    """Type of a literal initializer, or None when it cannot be inferred."""
    if node_type is None:
        return None
    name = _LITERAL_TYPES.get(node_type)
    if name is None:
        return None
    return make_type(name)
