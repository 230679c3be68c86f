"""Exceptions raised inside the engine.

Every error carries an :class:`ErrorKind`; the engine converts them into
``success: false`` results at its boundary, so none of these escape the three
public operations.
"""

from __future__ import annotations

from visual_editor.models import DeletionReason, ErrorKind, LocateDiagnostics, NearbyElement


class EditorError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL_ERROR


class InvalidComponentIdError(EditorError):
    kind = ErrorKind.INVALID_COMPONENT_ID


class PathOutsideRootError(EditorError):
    kind = ErrorKind.PATH_OUTSIDE_ROOT


class UnsupportedFileError(EditorError):
    kind = ErrorKind.UNSUPPORTED_FILE


class FileReadError(EditorError):
    kind = ErrorKind.FILE_READ_ERROR


class SourceParseError(EditorError):
    kind = ErrorKind.PARSE_ERROR


class ElementNotFoundError(EditorError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, line: int, column: int, scanned: int, nearby: list[NearbyElement]) -> None:
        self.line = line
        self.column = column
        self.scanned = scanned
        self.nearby = nearby
        if nearby:
            found = ", ".join(f"<{n.tag}> at {n.line}:{n.column}" for n in nearby)
            detail = f"Found {len(nearby)} nearby elements: {found}"
        else:
            detail = f"Total JSX elements found: {scanned}"
        super().__init__(f"Component not found at {line}:{column}. {detail}")

    @property
    def diagnostics(self) -> LocateDiagnostics:
        return LocateDiagnostics(scanned=self.scanned, nearby=self.nearby)


class DynamicValueError(EditorError):
    kind = ErrorKind.DYNAMIC_VALUE


class UnsafeDeletionError(EditorError):
    kind = ErrorKind.UNSAFE_DELETION

    def __init__(self, reason: DeletionReason) -> None:
        self.reason = reason
        super().__init__(f"Element cannot be deleted safely: {reason.value}")


class SerializationError(EditorError):
    kind = ErrorKind.SERIALIZATION_ERROR


class WriteError(EditorError):
    kind = ErrorKind.WRITE_ERROR
