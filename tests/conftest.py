"""Shared fixtures and helpers for tests."""

from collections.abc import Callable
from pathlib import Path

import pytest
from tree_sitter import Node

from visual_editor.core import jsx
from visual_editor.core.ast import ParsedSource, SourceParser
from visual_editor.storage.memory import InMemorySourceStore

_REPO_ROOT = Path(__file__).parent.parent
FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def source_parser() -> SourceParser:
    return SourceParser()


@pytest.fixture
def parse_tsx(source_parser: SourceParser) -> Callable[[str], ParsedSource]:
    """Parse a TSX snippet given as text."""

    def _parse(code: str) -> ParsedSource:
        return source_parser.parse(code.encode("utf-8"), "tsx")

    return _parse


@pytest.fixture
def find_element() -> Callable[[ParsedSource, str], Node]:
    """Return the first element (document order) whose tag name is ``tag``."""

    def _find(parsed: ParsedSource, tag: str) -> Node:
        stack = [parsed.root]
        while stack:
            node = stack.pop()
            if jsx.is_markup(node):
                name = jsx.tag_name_node(node)
                if name is not None and parsed.text(name) == tag:
                    return node
            stack.extend(reversed(node.children))
        raise AssertionError(f"no <{tag}> element in source")

    return _find


@pytest.fixture
def card_source() -> str:
    return (FIXTURES_DIR / "card.tsx").read_text(encoding="utf-8")


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    return tmp_path.resolve()


@pytest.fixture
def memory_store() -> InMemorySourceStore:
    return InMemorySourceStore()
