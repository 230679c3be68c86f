"""End-to-end tests for analyze/update/delete through the engine."""

from __future__ import annotations

from pathlib import Path

import pytest

from visual_editor.config import EngineSettings
from visual_editor.core import engine as engine_module
from visual_editor.core import jsx
from visual_editor.core.ast import SourceParser
from visual_editor.core.engine import EditorEngine, analyze_element, delete_element, update_element
from visual_editor.models import (
    DeletionReason,
    DynamicClassName,
    DynamicElementType,
    DynamicText,
    ElementUpdates,
    ErrorKind,
    StaticElementType,
    StaticValue,
    TextDynamicReason,
)
from visual_editor.storage.memory import InMemorySourceStore

BUTTON_SOURCE = """export function App() {
  return (
    <Button className="text-red-500">Hi</Button>
  );
}
"""

SELECT_SOURCE = """export function Picker({ x, items }: Props) {
  return (
    <SelectItem value={x ? "a" : "b"}>{items.map(i => <Item key={i}/>)}</SelectItem>
  );
}
"""

PAGE_SOURCE = """export const Page = () => (
  <main>
    <div>
      <p>gone</p>
    </div>
    <p>kept</p>
  </main>
);
"""


def _write(root: Path, name: str, text: str) -> Path:
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _opening_positions(text: str) -> list[tuple[int, int]]:
    parsed = SourceParser().parse(text.encode("utf-8"), "tsx")
    positions: list[tuple[int, int]] = []
    stack = [parsed.root]
    while stack:
        node = stack.pop()
        if jsx.is_markup(node):
            positions.append(parsed.position(jsx.opening_tag(node)))
        stack.extend(reversed(node.children))
    return positions


@pytest.fixture
def engine() -> EditorEngine:
    return EditorEngine()


class TestAnalyzeElement:
    @pytest.mark.asyncio
    async def test_static_button(self, engine: EditorEngine, project_root: Path) -> None:
        _write(project_root, "file.tsx", BUTTON_SOURCE)
        result = await engine.analyze_element("file.tsx:3:2", project_root)
        assert result.success
        assert result.tag == "Button"
        assert result.class_name == StaticValue(value="text-red-500")
        assert result.text_content == StaticValue(value="Hi")
        assert result.element_type == StaticElementType()

    @pytest.mark.asyncio
    async def test_fixture_dynamic_properties(self, engine: EditorEngine, project_root: Path, card_source: str) -> None:
        _write(project_root, "src/Card.tsx", card_source)
        result = await engine.analyze_element("src/Card.tsx:8:6", project_root)
        assert result.success
        assert result.tag == "h2"
        assert result.class_name == DynamicClassName(
            expression='active ? "on" : "off"', condition="active", true_value="on", false_value="off"
        )
        assert isinstance(result.text_content, DynamicText)
        assert result.text_content.reason is TextDynamicReason.DYNAMIC_EXPRESSION

    @pytest.mark.asyncio
    async def test_fixture_container_and_placements(
        self, engine: EditorEngine, project_root: Path, card_source: str
    ) -> None:
        _write(project_root, "src/Card.tsx", card_source)
        div = await engine.analyze_element("src/Card.tsx:7:4", project_root)
        assert div.text_content == DynamicText(reason=TextDynamicReason.HAS_ELEMENT_CHILDREN)
        badge = await engine.analyze_element("src/Card.tsx:10:17", project_root)
        assert badge.element_type == DynamicElementType(reason=DeletionReason.COMPLEX_PARENT)
        item = await engine.analyze_element("src/Card.tsx:13:10", project_root)
        assert item.element_type == DynamicElementType(reason=DeletionReason.MAP_EXPRESSION)
        small = await engine.analyze_element("src/Card.tsx:18:8", project_root)
        assert small.text_content == StaticValue(value="© 2024")

    @pytest.mark.asyncio
    async def test_map_item(self, engine: EditorEngine, project_root: Path) -> None:
        _write(project_root, "Picker.tsx", SELECT_SOURCE)
        column = SELECT_SOURCE.splitlines()[2].index("<Item")
        result = await engine.analyze_element(f"Picker.tsx:3:{column}", project_root)
        assert result.success
        assert result.tag == "Item"
        assert result.element_type == DynamicElementType(reason=DeletionReason.MAP_EXPRESSION)

    @pytest.mark.asyncio
    async def test_not_found_has_diagnostics(self, engine: EditorEngine, project_root: Path, card_source: str) -> None:
        _write(project_root, "Card.tsx", card_source)
        result = await engine.analyze_element("Card.tsx:9:40", project_root)
        assert not result.success
        assert result.error_kind is ErrorKind.NOT_FOUND
        assert result.error is not None
        assert "not found" in result.error
        assert result.diagnostics is not None
        assert len(result.diagnostics.nearby) == 6

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("component_id", "kind"),
        [
            ("Card.tsx", ErrorKind.INVALID_COMPONENT_ID),
            ("Card.tsx:0:1", ErrorKind.INVALID_COMPONENT_ID),
            ("../outside.tsx:1:0", ErrorKind.PATH_OUTSIDE_ROOT),
            ("styles.css:1:0", ErrorKind.UNSUPPORTED_FILE),
            ("Missing.tsx:1:0", ErrorKind.FILE_READ_ERROR),
        ],
    )
    async def test_request_errors(
        self, engine: EditorEngine, project_root: Path, card_source: str, component_id: str, kind: ErrorKind
    ) -> None:
        _write(project_root, "Card.tsx", card_source)
        result = await engine.analyze_element(component_id, project_root)
        assert not result.success
        assert result.error_kind is kind
        assert result.component_id == component_id

    @pytest.mark.asyncio
    async def test_parse_error(self, engine: EditorEngine, project_root: Path) -> None:
        _write(project_root, "Broken.tsx", "export const A = () => <div>;\n")
        result = await engine.analyze_element("Broken.tsx:1:23", project_root)
        assert not result.success
        assert result.error_kind is ErrorKind.PARSE_ERROR

    @pytest.mark.asyncio
    async def test_non_utf8_file_is_a_read_error(self, engine: EditorEngine, project_root: Path) -> None:
        (project_root / "Latin.tsx").write_bytes(b"const a = <b>\xe9</b>;\n")
        result = await engine.analyze_element("Latin.tsx:1:10", project_root)
        assert result.error_kind is ErrorKind.FILE_READ_ERROR

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_internal_error(
        self, engine: EditorEngine, project_root: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write(project_root, "file.tsx", BUTTON_SOURCE)

        def _boom(*_args: object) -> None:
            raise RuntimeError("boom")

        monkeypatch.setattr(engine_module, "classify_attribute", _boom)
        result = await engine.analyze_element("file.tsx:3:4", project_root)
        assert not result.success
        assert result.error_kind is ErrorKind.INTERNAL_ERROR
        assert result.error == "Unexpected error: boom"


class TestUpdateElement:
    @pytest.mark.asyncio
    async def test_class_name_rewrites_only_the_attribute(self, engine: EditorEngine, project_root: Path) -> None:
        path = _write(project_root, "file.tsx", BUTTON_SOURCE)
        result = await engine.update_element("file.tsx:3:2", ElementUpdates(class_name="text-blue-500"), project_root)
        assert result.success
        assert result.changed
        assert result.file_path == str(path)
        assert path.read_text(encoding="utf-8") == BUTTON_SOURCE.replace("text-red-500", "text-blue-500")

        again = await engine.analyze_element("file.tsx:3:2", project_root)
        assert again.class_name == StaticValue(value="text-blue-500")

    @pytest.mark.asyncio
    async def test_is_idempotent(self, engine: EditorEngine, project_root: Path) -> None:
        path = _write(project_root, "file.tsx", BUTTON_SOURCE)
        first = await engine.update_element("file.tsx:3:4", {"className": "x"}, project_root)
        after_first = path.read_bytes()
        second = await engine.update_element("file.tsx:3:4", {"className": "x"}, project_root)
        assert first.changed
        assert second.success
        assert not second.changed
        assert path.read_bytes() == after_first

    @pytest.mark.asyncio
    async def test_character_reference_class_name_is_idempotent(self, engine: EditorEngine, project_root: Path) -> None:
        path = _write(project_root, "file.tsx", BUTTON_SOURCE)
        first = await engine.update_element("file.tsx:3:4", {"className": "a&amp;b"}, project_root)
        after_first = path.read_bytes()
        second = await engine.update_element("file.tsx:3:4", {"className": "a&amp;b"}, project_root)
        analysis = await engine.analyze_element("file.tsx:3:4", project_root)
        assert first.changed
        assert b'className={"a&amp;b"}' in after_first
        assert second.success
        assert not second.changed
        assert path.read_bytes() == after_first
        assert analysis.class_name == StaticValue(value="a&amp;b")

    @pytest.mark.asyncio
    async def test_locates_element_after_emoji_by_utf16_column(self, project_root: Path) -> None:
        _write(project_root, "emoji.tsx", "export const A = () => <div>😀<b className=\"x\">y</b></div>;\n")
        strict = EditorEngine(EngineSettings(column_tolerance=0))
        result = await strict.analyze_element("emoji.tsx:1:30", project_root)
        assert result.success
        assert result.tag == "b"
        assert not (await strict.analyze_element("emoji.tsx:1:29", project_root)).success

    @pytest.mark.asyncio
    async def test_same_line_edit_keeps_other_positions(
        self, engine: EditorEngine, project_root: Path, card_source: str
    ) -> None:
        path = _write(project_root, "Card.tsx", card_source)
        before = [p for p in _opening_positions(card_source) if p[0] != 9]
        result = await engine.update_element("Card.tsx:9:6", {"className": "lead text-lg"}, project_root)
        assert result.success
        updated = path.read_text(encoding="utf-8")
        assert [p for p in _opening_positions(updated) if p[0] != 9] == before
        changed_lines = [
            i for i, (old, new) in enumerate(zip(card_source.splitlines(), updated.splitlines(), strict=True)) if old != new
        ]
        assert changed_lines == [8]

    @pytest.mark.asyncio
    async def test_text_and_class_together(self, engine: EditorEngine, project_root: Path) -> None:
        path = _write(project_root, "file.tsx", BUTTON_SOURCE)
        updates = ElementUpdates(class_name="btn", text_content="Save")
        result = await engine.update_element("file.tsx:3:4", updates, project_root)
        assert result.success
        assert '<Button className="btn">Save</Button>' in path.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_empty_class_name_removes_attribute(self, engine: EditorEngine, project_root: Path) -> None:
        path = _write(project_root, "file.tsx", BUTTON_SOURCE)
        result = await engine.update_element("file.tsx:3:4", {"className": ""}, project_root)
        assert result.success
        assert "<Button>Hi</Button>" in path.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_adds_text_to_self_closing_element(
        self, engine: EditorEngine, project_root: Path, card_source: str
    ) -> None:
        path = _write(project_root, "Card.tsx", card_source)
        result = await engine.update_element("Card.tsx:16:6", {"textContent": "new"}, project_root)
        assert result.success
        assert "      <span>new</span>\n" in path.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_entity_text_is_unchanged_when_equal(
        self, engine: EditorEngine, project_root: Path, card_source: str
    ) -> None:
        path = _write(project_root, "Card.tsx", card_source)
        result = await engine.update_element("Card.tsx:9:6", {"textContent": "Hello & welcome"}, project_root)
        assert result.success
        assert not result.changed
        assert path.read_text(encoding="utf-8") == card_source

    @pytest.mark.asyncio
    async def test_refuses_dynamic_class_name(
        self, engine: EditorEngine, project_root: Path, card_source: str
    ) -> None:
        path = _write(project_root, "Card.tsx", card_source)
        result = await engine.update_element("Card.tsx:8:6", {"className": "x"}, project_root)
        assert not result.success
        assert result.error_kind is ErrorKind.DYNAMIC_VALUE
        assert path.read_text(encoding="utf-8") == card_source

    @pytest.mark.asyncio
    async def test_refuses_text_with_element_children(
        self, engine: EditorEngine, project_root: Path, card_source: str
    ) -> None:
        path = _write(project_root, "Card.tsx", card_source)
        result = await engine.update_element("Card.tsx:7:4", {"textContent": "flat"}, project_root)
        assert result.error_kind is ErrorKind.DYNAMIC_VALUE
        assert result.error is not None
        assert "has_element_children" in result.error
        assert path.read_text(encoding="utf-8") == card_source

    @pytest.mark.asyncio
    async def test_missing_file_modifies_nothing(self, engine: EditorEngine, project_root: Path) -> None:
        result = await engine.update_element("nope.tsx:3:2", {"className": "x"}, project_root)
        assert not result.success
        assert result.error_kind is ErrorKind.FILE_READ_ERROR
        assert list(project_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_invalid_updates_become_internal_error(self, engine: EditorEngine, project_root: Path) -> None:
        _write(project_root, "file.tsx", BUTTON_SOURCE)
        result = await engine.update_element("file.tsx:3:4", {"className": 42}, project_root)
        assert not result.success
        assert result.error_kind is ErrorKind.INTERNAL_ERROR


class TestDeleteElement:
    @pytest.mark.asyncio
    async def test_removes_exactly_the_element(self, engine: EditorEngine, project_root: Path) -> None:
        path = _write(project_root, "Page.tsx", PAGE_SOURCE)
        result = await engine.delete_element("Page.tsx:3:4", project_root)
        assert result.success
        assert result.changed
        expected = "".join(line for i, line in enumerate(PAGE_SOURCE.splitlines(keepends=True)) if i not in (2, 3, 4))
        assert path.read_text(encoding="utf-8") == expected

    @pytest.mark.asyncio
    async def test_refuses_map_item(self, engine: EditorEngine, project_root: Path) -> None:
        path = _write(project_root, "Picker.tsx", SELECT_SOURCE)
        column = SELECT_SOURCE.splitlines()[2].index("<Item")
        result = await engine.delete_element(f"Picker.tsx:3:{column}", project_root)
        assert not result.success
        assert result.error_kind is ErrorKind.UNSAFE_DELETION
        assert result.error == "Element cannot be deleted safely: map_expression"
        assert path.read_text(encoding="utf-8") == SELECT_SOURCE

    @pytest.mark.asyncio
    async def test_deletes_fragment(self, engine: EditorEngine, project_root: Path) -> None:
        source = "export const F = () => (\n  <div>\n    <>\n      <span>a</span>\n    </>\n  </div>\n);\n"
        path = _write(project_root, "F.tsx", source)
        result = await engine.delete_element("F.tsx:3:4", project_root)
        assert result.success
        assert path.read_text(encoding="utf-8") == "export const F = () => (\n  <div>\n  </div>\n);\n"

    @pytest.mark.asyncio
    async def test_root_element_becomes_null(self, engine: EditorEngine, project_root: Path) -> None:
        path = _write(project_root, "file.tsx", BUTTON_SOURCE)
        result = await engine.delete_element("file.tsx:3:4", project_root)
        assert result.success
        assert path.read_text(encoding="utf-8") == "export function App() {\n  return null;\n}\n"


class TestStoreFailures:
    @pytest.mark.asyncio
    async def test_write_failure_leaves_source(self, project_root: Path, memory_store: InMemorySourceStore) -> None:
        path = project_root / "file.tsx"
        memory_store.put(path, BUTTON_SOURCE)
        memory_store.fail_writes = True
        engine = EditorEngine(store=memory_store)
        result = await engine.update_element("file.tsx:3:4", {"className": "x"}, project_root)
        assert not result.success
        assert result.error_kind is ErrorKind.WRITE_ERROR
        assert memory_store.get(path) == BUTTON_SOURCE

    @pytest.mark.asyncio
    async def test_unparseable_output_is_never_written(
        self, project_root: Path, memory_store: InMemorySourceStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = project_root / "file.tsx"
        memory_store.put(path, BUTTON_SOURCE)
        monkeypatch.setattr(engine_module.Mutator, "render", lambda self: b"export const = <div;\n")
        engine = EditorEngine(store=memory_store)
        result = await engine.delete_element("file.tsx:3:4", project_root)
        assert not result.success
        assert result.error_kind is ErrorKind.SERIALIZATION_ERROR
        assert memory_store.writes == []
        assert memory_store.get(path) == BUTTON_SOURCE

    @pytest.mark.asyncio
    async def test_verification_can_be_disabled(
        self, project_root: Path, memory_store: InMemorySourceStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = project_root / "file.tsx"
        memory_store.put(path, BUTTON_SOURCE)
        monkeypatch.setattr(engine_module.Mutator, "render", lambda self: b"broken <")
        engine = EditorEngine(EngineSettings(verify_output=False), store=memory_store)
        result = await engine.delete_element("file.tsx:3:4", project_root)
        assert result.success
        assert memory_store.get(path) == "broken <"

    @pytest.mark.asyncio
    async def test_column_tolerance_comes_from_settings(
        self, project_root: Path, memory_store: InMemorySourceStore
    ) -> None:
        memory_store.put(project_root / "file.tsx", BUTTON_SOURCE)
        strict = EditorEngine(EngineSettings(column_tolerance=0), store=memory_store)
        assert not (await strict.analyze_element("file.tsx:3:2", project_root)).success
        assert (await strict.analyze_element("file.tsx:3:4", project_root)).success


class TestModuleFunctions:
    @pytest.mark.asyncio
    async def test_round_trip(self, project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VISUAL_EDITOR_COLUMN_TOLERANCE", "5")
        path = _write(project_root, "file.tsx", BUTTON_SOURCE)
        assert (await analyze_element("file.tsx:3:2", str(project_root))).success
        assert (await update_element("file.tsx:3:2", {"textContent": "Bye"}, str(project_root))).success
        assert ">Bye</Button>" in path.read_text(encoding="utf-8")
        assert (await delete_element("file.tsx:3:2", str(project_root))).success
        assert "<Button" not in path.read_text(encoding="utf-8")
