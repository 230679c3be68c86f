from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Request(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyzeRequest(_Request):
    component_id: str = Field(min_length=1)


class UpdateRequest(_Request):
    component_id: str = Field(min_length=1)
    class_name: str | None = None
    text_content: str | None = None


class DeleteRequest(_Request):
    component_id: str = Field(min_length=1)


class HealthResponse(BaseModel):
    status: str = "ok"
