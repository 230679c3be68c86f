"""Static/Dynamic classification of attribute values and element children.

Only values that can be rebuilt losslessly as a new literal are Static. Every
other shape is Dynamic, so an edit never overwrites program logic.
"""

import html
import re

from tree_sitter import Node

from visual_editor.core import jsx
from visual_editor.core.ast import ParsedSource
from visual_editor.models import (
    ClassNameAnalysis,
    DynamicClassName,
    DynamicText,
    StaticValue,
    TextContentAnalysis,
    TextDynamicReason,
)

_SIMPLE_ESCAPES = {
    "0": "\0",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def _decode_escape(sequence: str) -> str:
    body = sequence[1:]
    if not body:
        return sequence
    if body[0] in "ux" and len(body) > 1:
        digits = body[2:-1] if body.startswith("u{") else body[1:]
        try:
            return chr(int(digits, 16))
        except (ValueError, OverflowError):
            return body
    if body in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[body]
    if body[0] in "\r\n":
        return ""
    return body


def string_literal_value(node: Node, parsed: ParsedSource) -> str:
    """Decode a ``string`` node, resolving escapes and character references."""
    source = parsed.source
    cursor = node.start_byte + 1
    pieces: list[str] = []
    for child in node.children:
        if child.type == "escape_sequence":
            decoded = _decode_escape(parsed.text(child))
        elif child.type == jsx.CHARACTER_REFERENCE:
            decoded = html.unescape(parsed.text(child))
        else:
            continue
        pieces.append(source[cursor : child.start_byte].decode("utf-8"))
        pieces.append(decoded)
        cursor = child.end_byte
    pieces.append(source[cursor : node.end_byte - 1].decode("utf-8"))
    return "".join(pieces)


def _is_plain_template(node: Node) -> bool:
    return node.type == "template_string" and not any(c.type == "template_substitution" for c in node.children)


def literal_value(node: Node | None, parsed: ParsedSource) -> str | None:
    """The value of a string literal or substitution-free template, else ``None``."""
    node = jsx.unwrap_parentheses(node)
    if node is None:
        return None
    if node.type == "string":
        return string_literal_value(node, parsed)
    if _is_plain_template(node):
        return parsed.text(node)[1:-1]
    return None


def _branch_text(node: Node | None, parsed: ParsedSource) -> str | None:
    if node is None:
        return None
    literal = literal_value(node, parsed)
    return literal if literal is not None else parsed.text(node)


def _dynamic_class_name(expression: Node, parsed: ParsedSource) -> DynamicClassName:
    """Keep a ternary's condition and both branches so each variant can be shown."""
    ternary = jsx.unwrap_parentheses(expression)
    if ternary is None or ternary.type != "ternary_expression":
        return DynamicClassName(expression=parsed.text(expression))
    return DynamicClassName(
        expression=parsed.text(expression),
        condition=_branch_text(ternary.child_by_field_name("condition"), parsed),
        true_value=_branch_text(ternary.child_by_field_name("consequence"), parsed),
        false_value=_branch_text(ternary.child_by_field_name("alternative"), parsed),
    )


def classify_attribute_value(value: Node | None, parsed: ParsedSource) -> ClassNameAnalysis:
    """Classify the value node of an attribute. ``None`` means the attribute is absent."""
    if value is None:
        return StaticValue(value="")
    if value.type == "string":
        return StaticValue(value=string_literal_value(value, parsed))
    if value.type == jsx.EXPRESSION:
        inner = jsx.first_significant_child(value)
        literal = literal_value(inner, parsed)
        if literal is not None:
            return StaticValue(value=literal)
        if inner is None:
            return DynamicClassName()
        return _dynamic_class_name(inner, parsed)
    return DynamicClassName(expression=parsed.text(value))


def classify_attribute(attribute: Node | None, parsed: ParsedSource) -> ClassNameAnalysis:
    if attribute is None:
        return StaticValue(value="")
    value = jsx.attribute_value(attribute)
    if value is None:
        # ``<div className>`` is the boolean ``true``, not a string.
        return DynamicClassName(expression=parsed.text(attribute))
    return classify_attribute_value(value, parsed)


def clean_jsx_text(raw: str) -> str:
    """Collapse JSX text the way the JSX compilers do.

    Lines are trimmed at the edges that touch a line break, blank lines are
    dropped, and the remaining lines are joined by single spaces.
    """
    lines = _LINE_BREAK_RE.split(raw)
    last_non_empty = max((i for i, line in enumerate(lines) if line.strip(" \t")), default=-1)
    out: list[str] = []
    for i, line in enumerate(lines):
        trimmed = line.replace("\t", " ")
        if i != 0:
            trimmed = trimmed.lstrip(" ")
        if i != len(lines) - 1:
            trimmed = trimmed.rstrip(" ")
        if trimmed:
            if i != last_non_empty:
                trimmed += " "
            out.append(trimmed)
    return "".join(out)


def classify_children(element: Node, parsed: ParsedSource) -> TextContentAnalysis:
    children = jsx.element_children(element)
    span = jsx.children_span(element)
    if not children or span is None:
        return StaticValue(value="")
    if any(jsx.is_markup(child) for child in children):
        return DynamicText(reason=TextDynamicReason.HAS_ELEMENT_CHILDREN)

    source = parsed.source
    pieces: list[str] = []
    run: list[str] = []
    cursor = span[0]
    for child in children:
        run.append(source[cursor : child.start_byte].decode("utf-8"))
        cursor = child.end_byte
        if child.type in (jsx.TEXT, jsx.CHARACTER_REFERENCE):
            run.append(html.unescape(parsed.text(child)))
        else:
            inner = jsx.unwrap_parentheses(jsx.first_significant_child(child))
            if child.type == jsx.EXPRESSION and inner is None:
                # {/* comment */} renders nothing but still splits the text
                pieces.append(clean_jsx_text("".join(run)))
                run = []
                continue
            if child.type != jsx.EXPRESSION or inner is None or inner.type != "string":
                return DynamicText(reason=TextDynamicReason.DYNAMIC_EXPRESSION, expression=parsed.text(child))
            pieces.append(clean_jsx_text("".join(run)))
            pieces.append(string_literal_value(inner, parsed))
            run = []
    run.append(source[cursor : span[1]].decode("utf-8"))
    pieces.append(clean_jsx_text("".join(run)))
    return StaticValue(value="".join(pieces).strip(" \t\r\n"))
