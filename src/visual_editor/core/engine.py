"""The three public operations: analyze, update and delete an element.

Each call runs read → parse → locate → (classify | mutate → render → write)
from scratch. Nothing parsed survives the call, and every failure comes back
as a ``success: false`` result instead of an exception.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from visual_editor.config import EngineSettings
from visual_editor.core import jsx
from visual_editor.core.ast import ParsedSource, SourceParser
from visual_editor.core.classifier import classify_attribute, classify_children
from visual_editor.core.errors import (
    DynamicValueError,
    EditorError,
    ElementNotFoundError,
    FileReadError,
    PathOutsideRootError,
    SerializationError,
    SourceParseError,
    UnsafeDeletionError,
    WriteError,
)
from visual_editor.core.languages import detect_language_from_path
from visual_editor.core.locator import ElementHandle, locate_element
from visual_editor.core.mutator import Mutator
from visual_editor.core.ports.source_store import SourceStore
from visual_editor.core.position import decode_component_id
from visual_editor.core.safety import analyze_deletion_safety
from visual_editor.models import (
    AnalysisResult,
    DynamicClassName,
    DynamicElementType,
    DynamicText,
    ElementUpdates,
    ErrorKind,
    MutationResult,
    SourceLocation,
)
from visual_editor.storage.filesystem import LocalSourceStore

logger = logging.getLogger(__name__)

CLASS_NAME_ATTRIBUTE = "className"


def _failure_fields(exc: Exception) -> dict[str, Any]:
    if isinstance(exc, EditorError):
        fields: dict[str, Any] = {"error": str(exc), "error_kind": exc.kind}
        if isinstance(exc, ElementNotFoundError):
            fields["diagnostics"] = exc.diagnostics
        return fields
    return {"error": f"Unexpected error: {exc}", "error_kind": ErrorKind.INTERNAL_ERROR}


def _log_failure(operation: str, component_id: str, exc: Exception) -> None:
    if isinstance(exc, EditorError):
        logger.warning("%s %s failed: %s", operation, component_id, exc)
    else:
        logger.exception("%s %s failed unexpectedly", operation, component_id)


class EditorEngine:
    """Locates, classifies and edits elements in component source files.

    The engine holds configuration, the source store and the parser. It keeps
    no per-file state between calls.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        store: SourceStore | None = None,
        parser: SourceParser | None = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        self.store: SourceStore = store or LocalSourceStore()
        self.parser = parser or SourceParser()

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    def _resolve(self, component_id: str, root_dir: str | Path) -> tuple[SourceLocation, Path]:
        location = decode_component_id(component_id)
        root = Path(root_dir).resolve()
        path = (root / location.file_path).resolve()
        if not path.is_relative_to(root):
            raise PathOutsideRootError(f"Path {location.file_path} resolves outside of {root}")
        detect_language_from_path(path)
        return location, path

    async def _load(self, path: Path) -> ParsedSource:
        try:
            source = await self.store.read(path)
        except OSError as exc:
            raise FileReadError(f"Failed to read file {path}: {exc}") from exc
        try:
            source.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FileReadError(f"Failed to read file {path}: not valid UTF-8 ({exc})") from exc
        try:
            return self.parser.parse_file(source, path)
        except SourceParseError as exc:
            raise SourceParseError(f"Failed to parse {path}: {exc}") from exc

    def _locate(self, parsed: ParsedSource, location: SourceLocation, include_fragments: bool = False) -> ElementHandle:
        return locate_element(
            parsed,
            location.line,
            location.column,
            tolerance=self.settings.column_tolerance,
            nearby_lines=self.settings.nearby_line_window,
            include_fragments=include_fragments,
        )

    async def _commit(self, path: Path, mutator: Mutator) -> None:
        output = mutator.render()
        if self.settings.verify_output:
            try:
                self.parser.parse(output, mutator.parsed.language)
            except SourceParseError as exc:
                raise SerializationError(f"Edited source for {path} no longer parses: {exc}") from exc
        try:
            await self.store.write(path, output)
        except OSError as exc:
            raise WriteError(f"Failed to write file {path}: {exc}") from exc

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def analyze_element(self, component_id: str, root_dir: str | Path) -> AnalysisResult:
        try:
            location, path = self._resolve(component_id, root_dir)
            parsed = await self._load(path)
            handle = self._locate(parsed, location)
            return AnalysisResult(
                success=True,
                component_id=component_id,
                tag=handle.tag,
                class_name=classify_attribute(jsx.find_attribute(handle.node, CLASS_NAME_ATTRIBUTE), parsed),
                text_content=classify_children(handle.node, parsed),
                element_type=analyze_deletion_safety(handle.node),
            )
        except Exception as exc:
            _log_failure("analyze", component_id, exc)
            return AnalysisResult(success=False, component_id=component_id, **_failure_fields(exc))

    async def update_element(
        self,
        component_id: str,
        updates: ElementUpdates | Mapping[str, Any],
        root_dir: str | Path,
    ) -> MutationResult:
        try:
            if not isinstance(updates, ElementUpdates):
                updates = ElementUpdates.model_validate(updates)
            location, path = self._resolve(component_id, root_dir)
            parsed = await self._load(path)
            handle = self._locate(parsed, location)
            mutator = Mutator(parsed)

            if updates.class_name is not None:
                attribute = jsx.find_attribute(handle.node, CLASS_NAME_ATTRIBUTE)
                current = classify_attribute(attribute, parsed)
                if isinstance(current, DynamicClassName):
                    raise DynamicValueError(
                        f"className of <{handle.tag}> is computed by an expression and cannot be edited"
                    )
                if current.value != updates.class_name:
                    if updates.class_name:
                        mutator.set_attribute(handle, CLASS_NAME_ATTRIBUTE, updates.class_name)
                    else:
                        mutator.remove_attribute(handle, CLASS_NAME_ATTRIBUTE)

            if updates.text_content is not None:
                current_text = classify_children(handle.node, parsed)
                if isinstance(current_text, DynamicText):
                    raise DynamicValueError(
                        f"Text content of <{handle.tag}> cannot be edited: {current_text.reason.value}"
                    )
                if current_text.value != updates.text_content.strip():
                    mutator.set_children(handle, updates.text_content)

            if not mutator.edits:
                return MutationResult(success=True, file_path=str(path), changed=False)
            await self._commit(path, mutator)
            logger.info("Updated <%s> at %s:%d:%d", handle.tag, path, handle.line, handle.column)
            return MutationResult(success=True, file_path=str(path), changed=True)
        except Exception as exc:
            _log_failure("update", component_id, exc)
            return MutationResult(success=False, **_failure_fields(exc))

    async def delete_element(self, component_id: str, root_dir: str | Path) -> MutationResult:
        try:
            location, path = self._resolve(component_id, root_dir)
            parsed = await self._load(path)
            handle = self._locate(parsed, location, include_fragments=True)
            safety = analyze_deletion_safety(handle.node)
            if isinstance(safety, DynamicElementType):
                raise UnsafeDeletionError(safety.reason)
            mutator = Mutator(parsed)
            mutator.remove_node(handle)
            await self._commit(path, mutator)
            logger.info("Deleted <%s> at %s:%d:%d", handle.tag, path, handle.line, handle.column)
            return MutationResult(success=True, file_path=str(path), changed=True)
        except Exception as exc:
            _log_failure("delete", component_id, exc)
            return MutationResult(success=False, **_failure_fields(exc))


# ----------------------------------------------------------------------
# Convenience entry points: a fresh engine per call, configured from env.
# ----------------------------------------------------------------------


async def analyze_element(component_id: str, root_dir: str | Path) -> AnalysisResult:
    return await EditorEngine(EngineSettings.from_env()).analyze_element(component_id, root_dir)


async def update_element(
    component_id: str,
    updates: ElementUpdates | Mapping[str, Any],
    root_dir: str | Path,
) -> MutationResult:
    return await EditorEngine(EngineSettings.from_env()).update_element(component_id, updates, root_dir)


async def delete_element(component_id: str, root_dir: str | Path) -> MutationResult:
    return await EditorEngine(EngineSettings.from_env()).delete_element(component_id, root_dir)
