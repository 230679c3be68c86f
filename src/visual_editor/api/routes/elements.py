"""The three element operations as JSON endpoints.

Engine failures are part of the response body (``success: false``) and keep
status 200; only malformed request bodies are rejected with 422.
"""

from fastapi import APIRouter, Depends

from visual_editor.api.dependencies import get_engine, get_root_dir
from visual_editor.api.schemas import AnalyzeRequest, DeleteRequest, UpdateRequest
from visual_editor.core.engine import EditorEngine
from visual_editor.models import AnalysisResult, ElementUpdates, MutationResult

router = APIRouter(prefix="/elements", tags=["elements"])


@router.post("/analyze", response_model=AnalysisResult, response_model_exclude_none=True)
async def analyze(
    body: AnalyzeRequest,
    engine: EditorEngine = Depends(get_engine),
    root_dir: str = Depends(get_root_dir),
) -> AnalysisResult:
    return await engine.analyze_element(body.component_id, root_dir)


@router.post("/update", response_model=MutationResult, response_model_exclude_none=True)
async def update(
    body: UpdateRequest,
    engine: EditorEngine = Depends(get_engine),
    root_dir: str = Depends(get_root_dir),
) -> MutationResult:
    updates = ElementUpdates(class_name=body.class_name, text_content=body.text_content)
    return await engine.update_element(body.component_id, updates, root_dir)


@router.post("/delete", response_model=MutationResult, response_model_exclude_none=True)
async def delete(
    body: DeleteRequest,
    engine: EditorEngine = Depends(get_engine),
    root_dir: str = Depends(get_root_dir),
) -> MutationResult:
    return await engine.delete_element(body.component_id, root_dir)
