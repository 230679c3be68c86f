from __future__ import annotations

from fastapi import Request

from visual_editor.config import get_project_root
from visual_editor.core.engine import EditorEngine


def get_engine(request: Request) -> EditorEngine:
    """Return the engine created with the app in :func:`create_app`."""
    engine: EditorEngine = request.app.state.engine
    return engine


def get_root_dir(request: Request) -> str:
    root_dir: str | None = request.app.state.root_dir
    return root_dir or get_project_root()
