"""Formatting-preserving edits over a parsed file.

Edits are recorded as byte-span replacements against the original source and
applied in one pass by :meth:`Mutator.render`. Bytes outside the recorded
spans are copied through untouched, so unrelated code keeps its exact layout
and positions.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass

from tree_sitter import Node

from visual_editor.core import jsx
from visual_editor.core.ast import ParsedSource
from visual_editor.core.errors import SerializationError
from visual_editor.core.locator import ElementHandle

logger = logging.getLogger(__name__)

_JSX_TEXT_RESERVED = frozenset("{}<>\r\n")
# Text that JSX would decode as a character reference.
_ENTITY_RE = re.compile(r"&(#\d+|#x[0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")
_HORIZONTAL_SPACE = b" \t"


@dataclass(frozen=True)
class SourceEdit:
    start: int
    end: int
    replacement: bytes


def string_literal(value: str) -> str:
    """A JS string literal for ``value``; JSON string syntax is valid JS."""
    return json.dumps(value, ensure_ascii=False)


def attribute_literal(value: str, preferred_quote: str = '"') -> str:
    """Source text for an attribute value holding ``value``.

    JSX attribute strings have no escapes, so pick a quote the value does not
    contain and fall back to a ``{"..."}`` container. Values holding character
    references also need the container, since JSX would decode them.
    """
    if _ENTITY_RE.search(value):
        return "{" + string_literal(value) + "}"
    for quote in (preferred_quote, '"', "'"):
        if quote not in value:
            return f"{quote}{value}{quote}"
    return "{" + string_literal(value) + "}"


def jsx_text(value: str) -> str:
    if _JSX_TEXT_RESERVED.intersection(value) or _ENTITY_RE.search(value) or value != value.strip(" \t"):
        return "{" + string_literal(value) + "}"
    return value


class Mutator:
    def __init__(self, parsed: ParsedSource) -> None:
        self.parsed = parsed
        self._edits: list[SourceEdit] = []

    @property
    def edits(self) -> list[SourceEdit]:
        return list(self._edits)

    def _replace(self, start: int, end: int, text: str) -> None:
        self._edits.append(SourceEdit(start, end, text.encode("utf-8")))

    # -- attributes --

    def set_attribute(self, handle: ElementHandle, name: str, value: str) -> None:
        attribute = jsx.find_attribute(handle.node, name)
        if attribute is None:
            anchor = jsx.attribute_anchor(handle.node)
            self._replace(anchor, anchor, f" {name}={attribute_literal(value)}")
            return
        current = jsx.attribute_value(attribute)
        if current is None:
            self._replace(attribute.end_byte, attribute.end_byte, f"={attribute_literal(value)}")
            return
        quote = self.parsed.text(current)[0] if current.type == "string" else '"'
        self._replace(current.start_byte, current.end_byte, attribute_literal(value, quote))

    def remove_attribute(self, handle: ElementHandle, name: str) -> None:
        attribute = jsx.find_attribute(handle.node, name)
        if attribute is None:
            return
        previous = attribute.prev_sibling
        start = previous.end_byte if previous is not None else attribute.start_byte
        self._replace(start, attribute.end_byte, "")

    # -- children --

    def set_children(self, handle: ElementHandle, text: str) -> None:
        content = jsx_text(text) if text.strip() else ""
        span = jsx.children_span(handle.node)
        if span is not None:
            self._replace(span[0], span[1], content)
            return
        if handle.node.type != jsx.SELF_CLOSING:
            raise SerializationError(f"Cannot set children of <{handle.tag}>")
        if not content:
            return
        # <Tag a="b" /> becomes <Tag a="b">text</Tag>
        anchor = jsx.attribute_anchor(handle.node)
        self._replace(anchor, handle.node.end_byte, f">{content}</{handle.tag}>")

    # -- removal --

    def remove_node(self, handle: ElementHandle) -> None:
        node = handle.node
        parent = node.parent
        if parent is None:
            raise SerializationError("Cannot remove the root node")

        if jsx.is_markup(parent):
            self._remove_span(node.start_byte, node.end_byte)
            return
        if parent.type == jsx.EXPRESSION and parent.parent is not None and jsx.is_markup(parent.parent):
            # {<Item />} inside a children list goes with its braces
            self._remove_span(parent.start_byte, parent.end_byte)
            return

        # Expression position: render nothing instead, keeping the expression valid.
        target = node
        while target.parent is not None and target.parent.type == "parenthesized_expression":
            target = target.parent
        replacement = "null"
        if target.parent is not None and target.parent.type in ("return_statement", "arrow_function"):
            replacement = self._space_before(target) + "null"
        self._replace(target.start_byte, target.end_byte, replacement)

    def _space_before(self, node: Node) -> str:
        # ``return(<div/>)`` must not become ``returnnull``
        if node.start_byte and self.parsed.source[node.start_byte - 1 : node.start_byte].isalnum():
            return " "
        return ""

    def _remove_span(self, start: int, end: int) -> None:
        """Remove ``[start, end)``, taking whole lines when the span sits alone on them."""
        source = self.parsed.source
        line_start = source.rfind(b"\n", 0, start) + 1
        line_end = source.find(b"\n", end)
        line_end = len(source) if line_end == -1 else line_end + 1
        before = source[line_start:start]
        after = source[end:line_end]
        if not before.strip(_HORIZONTAL_SPACE) and not after.strip(_HORIZONTAL_SPACE + b"\r\n"):
            self._replace(line_start, line_end, "")
        else:
            self._replace(start, end, "")

    # -- output --

    def render(self) -> bytes:
        """Apply every recorded edit and return the new file contents."""
        source = self.parsed.source
        out: list[bytes] = []
        cursor = 0
        for edit in sorted(self._edits, key=lambda e: (e.start, e.end)):
            if edit.start < cursor:
                raise SerializationError(f"Overlapping edits at byte {edit.start}")
            out.append(source[cursor : edit.start])
            out.append(edit.replacement)
            cursor = edit.end
        out.append(source[cursor:])
        logger.debug("Rendered %d edit(s)", len(self._edits))
        return b"".join(out)
