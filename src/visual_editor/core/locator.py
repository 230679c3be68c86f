from collections.abc import Iterator
from dataclasses import dataclass
from typing import Literal

from tree_sitter import Node

from visual_editor.core import jsx
from visual_editor.core.ast import ParsedSource
from visual_editor.core.errors import ElementNotFoundError
from visual_editor.models import NearbyElement

DEFAULT_COLUMN_TOLERANCE = 5
DEFAULT_NEARBY_LINES = 5

ElementKind = Literal["element", "self_closing", "fragment"]

_FRAGMENT_TAG = "<>"


@dataclass(frozen=True)
class ElementHandle:
    """One element of one parsed file. Valid only for the call that produced it."""

    parsed: ParsedSource
    node: Node
    kind: ElementKind
    tag: str
    line: int
    column: int

    @property
    def opening(self) -> Node:
        return jsx.opening_tag(self.node)


def _iter_markup(root: Node) -> Iterator[Node]:
    """Pre-order, document-order walk yielding element and fragment nodes."""
    stack = [root]
    while stack:
        node = stack.pop()
        if jsx.is_markup(node):
            yield node
        stack.extend(reversed(node.children))


def _handle_for(parsed: ParsedSource, node: Node) -> ElementHandle:
    line, column = parsed.position(jsx.opening_tag(node))
    if jsx.is_fragment(node):
        return ElementHandle(parsed, node, "fragment", _FRAGMENT_TAG, line, column)
    name = jsx.tag_name_node(node)
    tag = parsed.text(name) if name is not None else ""
    kind: ElementKind = "self_closing" if node.type == jsx.SELF_CLOSING else "element"
    return ElementHandle(parsed, node, kind, tag, line, column)


def locate_element(
    parsed: ParsedSource,
    line: int,
    column: int,
    *,
    tolerance: int = DEFAULT_COLUMN_TOLERANCE,
    nearby_lines: int = DEFAULT_NEARBY_LINES,
    include_fragments: bool = False,
) -> ElementHandle:
    """Find the first element whose opening tag sits on ``line`` within ``tolerance`` columns.

    Traversal is in document order and stops at the first match, so when
    several nested elements fall inside the window the outermost one wins.
    Fragments are only candidates when ``include_fragments`` is set.
    """
    scanned = 0
    nearby: list[NearbyElement] = []
    for node in _iter_markup(parsed.root):
        if jsx.is_fragment(node) and not include_fragments:
            continue
        handle = _handle_for(parsed, node)
        scanned += 1
        if handle.line == line and abs(handle.column - column) <= tolerance:
            return handle
        if abs(handle.line - line) <= nearby_lines:
            nearby.append(NearbyElement(line=handle.line, column=handle.column, tag=handle.tag))
    raise ElementNotFoundError(line, column, scanned, nearby)
