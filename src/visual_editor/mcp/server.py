"""FastMCP server exposing the visual editor operations."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from visual_editor.core.engine import EditorEngine
from visual_editor.models import ElementUpdates


def create_mcp_server(engine: EditorEngine, root_dir: str | Path) -> FastMCP:
    """Create a FastMCP server editing files under ``root_dir``."""

    mcp = FastMCP(
        "visual-editor",
        instructions=(
            "Inspect and edit JSX elements addressed by 'path:line:column' component ids. "
            "Call analyze_element first: only static values can be updated, and only "
            "statically placed elements can be deleted."
        ),
    )

    @mcp.tool()
    async def analyze_element(component_id: str) -> dict[str, Any]:
        """Classify an element's className, text content and deletion safety."""
        result = await engine.analyze_element(component_id, root_dir)
        return result.model_dump(by_alias=True, exclude_none=True, mode="json")

    @mcp.tool()
    async def update_element(
        component_id: str,
        class_name: str | None = None,
        text_content: str | None = None,
    ) -> dict[str, Any]:
        """Replace an element's static className and/or text content."""
        if class_name is None and text_content is None:
            return {"success": False, "error": "Either 'class_name' or 'text_content' must be provided."}
        updates = ElementUpdates(class_name=class_name, text_content=text_content)
        result = await engine.update_element(component_id, updates, root_dir)
        return result.model_dump(by_alias=True, exclude_none=True, mode="json")

    @mcp.tool()
    async def delete_element(component_id: str) -> dict[str, Any]:
        """Remove an element whose placement is static."""
        result = await engine.delete_element(component_id, root_dir)
        return result.model_dump(by_alias=True, exclude_none=True, mode="json")

    return mcp
