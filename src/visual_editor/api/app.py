from __future__ import annotations

from fastapi import FastAPI

from visual_editor.api.routes.elements import router as elements_router
from visual_editor.api.routes.health import router as health_router
from visual_editor.config import EngineSettings
from visual_editor.core.engine import EditorEngine


def create_app(root_dir: str | None = None, engine: EditorEngine | None = None) -> FastAPI:
    app = FastAPI(
        title="Visual Editor API",
        description="Analyze, update and delete JSX elements addressed by path:line:column.",
        version="0.1.0",
    )
    # One engine per app; it owns the parsers and lives as long as the app.
    app.state.engine = engine or EditorEngine(EngineSettings.from_env())
    # None falls back to $VISUAL_EDITOR_ROOT, then cwd, on each request.
    app.state.root_dir = root_dir

    app.include_router(health_router, include_in_schema=False)
    app.include_router(elements_router)

    return app
