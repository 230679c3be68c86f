from tree_sitter import Node

from visual_editor.core import jsx
from visual_editor.models import (
    DeletionReason,
    DynamicElementType,
    ElementTypeAnalysis,
    StaticElementType,
)

FUNCTION_TYPES = frozenset(
    {
        "arrow_function",
        "function",
        "function_declaration",
        "function_expression",
        "generator_function",
        "generator_function_declaration",
        "method_definition",
    }
)

# The walk also stops inside an enclosing tag (attribute values).
_ELEMENT_BOUNDARIES = jsx.MARKUP_TYPES | {jsx.OPENING}

_LOGICAL_OPERATORS = frozenset({b"&&", b"||", b"??"})

# Lower index wins.
_PRIORITY = (
    DeletionReason.CONDITIONAL_EXPRESSION,
    DeletionReason.MAP_EXPRESSION,
    DeletionReason.COMPLEX_PARENT,
)


def _is_map_call(node: Node) -> bool:
    if node.type != "call_expression":
        return False
    callee = jsx.unwrap_parentheses(node.child_by_field_name("function"))
    if callee is None or callee.type != "member_expression":
        return False
    prop = callee.child_by_field_name("property")
    return prop is not None and prop.text == b"map"


def _is_map_callback(function: Node) -> bool:
    arguments = function.parent
    if arguments is None or arguments.type != "arguments":
        return False
    call = arguments.parent
    return call is not None and _is_map_call(call)


def _reason_for(node: Node) -> DeletionReason | None:
    if node.type == "ternary_expression":
        return DeletionReason.CONDITIONAL_EXPRESSION
    if _is_map_call(node):
        return DeletionReason.MAP_EXPRESSION
    if node.type in ("sequence_expression", "array"):
        return DeletionReason.COMPLEX_PARENT
    if node.type == "binary_expression":
        operator = node.child_by_field_name("operator")
        if operator is not None and operator.text in _LOGICAL_OPERATORS:
            return DeletionReason.COMPLEX_PARENT
    return None


def analyze_deletion_safety(node: Node) -> ElementTypeAnalysis:
    """Decide whether removing ``node`` maps to removing exactly one rendered instance.

    Ancestors are walked from the immediate parent up to the nearest function
    or enclosing element. A function passed straight to ``.map()`` counts as a
    map ancestor. Among the ancestors seen, the reason ranked first in
    ``_PRIORITY`` is reported.
    """
    found: set[DeletionReason] = set()
    ancestor = node.parent
    while ancestor is not None:
        if ancestor.type in FUNCTION_TYPES:
            if _is_map_callback(ancestor):
                found.add(DeletionReason.MAP_EXPRESSION)
            break
        if ancestor.type in _ELEMENT_BOUNDARIES:
            break
        reason = _reason_for(ancestor)
        if reason is not None:
            found.add(reason)
        ancestor = ancestor.parent

    for reason in _PRIORITY:
        if reason in found:
            return DynamicElementType(reason=reason)
    return StaticElementType()
