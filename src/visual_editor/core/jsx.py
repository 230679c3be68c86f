"""Structural helpers over the tree-sitter JSX node shapes.

The javascript, typescript and tsx grammars share these node types. Older
grammar releases emit ``jsx_fragment`` for ``<>...</>``; newer ones emit a
``jsx_element`` whose opening tag has no name. Both are handled.
"""

from tree_sitter import Node

ELEMENT = "jsx_element"
SELF_CLOSING = "jsx_self_closing_element"
LEGACY_FRAGMENT = "jsx_fragment"
OPENING = "jsx_opening_element"
CLOSING = "jsx_closing_element"
ATTRIBUTE = "jsx_attribute"
EXPRESSION = "jsx_expression"
TEXT = "jsx_text"
CHARACTER_REFERENCE = "html_character_reference"

MARKUP_TYPES = frozenset({ELEMENT, SELF_CLOSING, LEGACY_FRAGMENT})


def is_markup(node: Node) -> bool:
    return node.type in MARKUP_TYPES


def opening_tag(node: Node) -> Node:
    """The node holding the tag name and attributes (the element itself when self-closing)."""
    if node.type == ELEMENT:
        for child in node.children:
            if child.type == OPENING:
                return child
    return node


def closing_tag(node: Node) -> Node | None:
    if node.type != ELEMENT:
        return None
    for child in reversed(node.children):
        if child.type == CLOSING:
            return child
    return None


def tag_name_node(node: Node) -> Node | None:
    opening = opening_tag(node)
    if opening.type not in (OPENING, SELF_CLOSING):
        return None
    return opening.child_by_field_name("name")


def is_fragment(node: Node) -> bool:
    if node.type == LEGACY_FRAGMENT:
        return True
    return node.type == ELEMENT and tag_name_node(node) is None


def is_named_element(node: Node) -> bool:
    return node.type in (ELEMENT, SELF_CLOSING) and tag_name_node(node) is not None


def first_significant_child(node: Node) -> Node | None:
    for child in node.named_children:
        if child.type != "comment":
            return child
    return None


def unwrap_parentheses(node: Node | None) -> Node | None:
    while node is not None and node.type == "parenthesized_expression":
        node = first_significant_child(node)
    return node


def attributes(node: Node) -> list[Node]:
    return [child for child in opening_tag(node).children if child.type == ATTRIBUTE]


def attribute_name(attribute: Node) -> str:
    name = attribute.named_children[0] if attribute.named_children else None
    if name is None or name.text is None:
        return ""
    return name.text.decode("utf-8")


def find_attribute(node: Node, name: str) -> Node | None:
    for attribute in attributes(node):
        if attribute_name(attribute) == name:
            return attribute
    return None


def attribute_value(attribute: Node) -> Node | None:
    """The node after ``=``; ``None`` for a valueless (boolean) attribute."""
    seen_equals = False
    for child in attribute.children:
        if child.type == "=":
            seen_equals = True
        elif seen_equals and child.is_named and child.type != "comment":
            return child
    return None


def element_children(node: Node) -> list[Node]:
    """Named children between the opening and closing tags."""
    if node.type == SELF_CLOSING:
        return []
    opening = opening_tag(node)
    closing = closing_tag(node)
    return [
        child
        for child in node.named_children
        if child.type != "comment" and child != opening and child != closing
    ]


def children_span(node: Node) -> tuple[int, int] | None:
    """Byte span strictly between the opening and closing tags."""
    opening = opening_tag(node)
    closing = closing_tag(node)
    if node.type != ELEMENT or opening is node or closing is None:
        return None
    return opening.end_byte, closing.start_byte


def attribute_anchor(node: Node) -> int:
    """Byte offset right after the tag name, type arguments and last attribute."""
    opening = opening_tag(node)
    anchor = opening.start_byte + 1
    for child in opening.children:
        if child.is_named and child.type != "comment":
            anchor = child.end_byte
    return anchor
