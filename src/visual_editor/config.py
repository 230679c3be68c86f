import os

from pydantic import BaseModel, Field

from visual_editor.core.locator import DEFAULT_COLUMN_TOLERANCE, DEFAULT_NEARBY_LINES

_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


class EngineSettings(BaseModel):
    # Render-time positions point at the tag and drift a few columns across
    # transform passes; matching is exact on the line and tolerant on the column.
    column_tolerance: int = Field(default=DEFAULT_COLUMN_TOLERANCE, ge=0)
    nearby_line_window: int = Field(default=DEFAULT_NEARBY_LINES, ge=0)
    # Re-parse rendered output and refuse to write anything that no longer parses.
    verify_output: bool = True

    @classmethod
    def from_env(cls) -> "EngineSettings":
        return cls(
            column_tolerance=int(os.getenv("VISUAL_EDITOR_COLUMN_TOLERANCE", str(DEFAULT_COLUMN_TOLERANCE))),
            nearby_line_window=int(os.getenv("VISUAL_EDITOR_NEARBY_LINES", str(DEFAULT_NEARBY_LINES))),
            verify_output=os.getenv("VISUAL_EDITOR_VERIFY_OUTPUT", "true").strip().lower() not in _FALSE_VALUES,
        )


def get_project_root() -> str:
    return os.getenv("VISUAL_EDITOR_ROOT", os.getcwd())
