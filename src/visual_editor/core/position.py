import re

from pydantic import ValidationError

from visual_editor.core.errors import InvalidComponentIdError
from visual_editor.models import SourceLocation

# Anchored from the end so that paths containing colons still decode.
_COMPONENT_ID_RE = re.compile(r"^(?P<path>.+):(?P<line>\d+):(?P<column>\d+)$", re.DOTALL)


def encode_component_id(location: SourceLocation) -> str:
    return f"{location.file_path}:{location.line}:{location.column}"


def decode_component_id(component_id: str) -> SourceLocation:
    """Split ``path:line:col`` into a :class:`SourceLocation`.

    Raises ``InvalidComponentIdError`` when the last two segments are not
    integers, the path is empty, or the line is not 1-based.
    """
    match = _COMPONENT_ID_RE.match(component_id)
    if match is None:
        raise InvalidComponentIdError(f"Invalid component ID format: {component_id}")
    try:
        return SourceLocation(
            file_path=match["path"],
            line=int(match["line"]),
            column=int(match["column"]),
        )
    except ValidationError:
        raise InvalidComponentIdError(f"Invalid component ID format: {component_id}") from None
