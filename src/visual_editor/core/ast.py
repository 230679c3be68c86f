from dataclasses import dataclass
from pathlib import Path
from typing import cast

from tree_sitter import Node, Parser, Tree
from tree_sitter_language_pack import SupportedLanguage, get_parser

from visual_editor.core.errors import SourceParseError
from visual_editor.core.languages import detect_language_from_path


@dataclass(frozen=True)
class ParsedSource:
    """A parsed file: the original bytes plus the tree built from them.

    Lives for a single engine call. Nodes taken from ``tree`` are only valid
    while this object is alive and must not be reused across calls.
    """

    source: bytes
    tree: Tree
    language: str

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8")

    def position(self, node: Node) -> tuple[int, int]:
        """Return ``(line, column)``: 1-based line, 0-based column in UTF-16 code units.

        tree-sitter reports byte columns; Babel, which stamps component ids,
        counts UTF-16 code units, so an emoji before the tag counts as two.
        """
        row, byte_column = node.start_point
        line_start = node.start_byte - byte_column
        prefix = self.source[line_start : node.start_byte].decode("utf-8", errors="replace")
        return row + 1, len(prefix.encode("utf-16-le")) // 2


def _first_error(node: Node) -> Node | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error:
            found = _first_error(child)
            if found is not None:
                return found
    return None


class SourceParser:
    """Owns one tree-sitter parser per grammar, created on first use."""

    def __init__(self) -> None:
        self._parsers: dict[str, Parser] = {}

    def _parser_for(self, language: str) -> Parser:
        parser = self._parsers.get(language)
        if parser is None:
            parser = get_parser(cast(SupportedLanguage, language))
            self._parsers[language] = parser
        return parser

    def parse(self, source: bytes, language: str) -> ParsedSource:
        tree = self._parser_for(language).parse(source)
        parsed = ParsedSource(source=source, tree=tree, language=language)
        if tree.root_node.has_error:
            error_node = _first_error(tree.root_node) or tree.root_node
            line, column = parsed.position(error_node)
            what = f"missing '{error_node.type}'" if error_node.is_missing else "syntax error"
            raise SourceParseError(f"{what} at {line}:{column}")
        return parsed

    def parse_file(self, source: bytes, path: Path) -> ParsedSource:
        return self.parse(source, detect_language_from_path(path))
