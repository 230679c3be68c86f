from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SourceLocation(_Model):
    file_path: str = Field(min_length=1)
    line: int = Field(ge=1)
    column: int = Field(ge=0)


class TextDynamicReason(StrEnum):
    HAS_ELEMENT_CHILDREN = "has_element_children"
    DYNAMIC_EXPRESSION = "dynamic_expression"


class DeletionReason(StrEnum):
    CONDITIONAL_EXPRESSION = "conditional_expression"
    MAP_EXPRESSION = "map_expression"
    COMPLEX_PARENT = "complex_parent"


class ErrorKind(StrEnum):
    INVALID_COMPONENT_ID = "invalid_component_id"
    PATH_OUTSIDE_ROOT = "path_outside_root"
    UNSUPPORTED_FILE = "unsupported_file"
    FILE_READ_ERROR = "file_read_error"
    PARSE_ERROR = "parse_error"
    NOT_FOUND = "not_found"
    DYNAMIC_VALUE = "dynamic_value"
    UNSAFE_DELETION = "unsafe_deletion"
    SERIALIZATION_ERROR = "serialization_error"
    WRITE_ERROR = "write_error"
    INTERNAL_ERROR = "internal_error"


# --- Classification results (tagged unions on ``kind``) ---


class StaticValue(_Model):
    kind: Literal["static"] = "static"
    value: str = ""


class DynamicClassName(_Model):
    kind: Literal["dynamic"] = "dynamic"
    expression: str | None = None
    # Set when the expression is a ternary; branches hold their literal value.
    condition: str | None = None
    true_value: str | None = None
    false_value: str | None = None


class DynamicText(_Model):
    kind: Literal["dynamic"] = "dynamic"
    reason: TextDynamicReason
    expression: str | None = None


class StaticElementType(_Model):
    kind: Literal["static"] = "static"


class DynamicElementType(_Model):
    kind: Literal["dynamic"] = "dynamic"
    reason: DeletionReason


ClassNameAnalysis = Annotated[StaticValue | DynamicClassName, Field(discriminator="kind")]
TextContentAnalysis = Annotated[StaticValue | DynamicText, Field(discriminator="kind")]
ElementTypeAnalysis = Annotated[StaticElementType | DynamicElementType, Field(discriminator="kind")]


# --- Operation inputs and results ---


class ElementUpdates(_Model):
    class_name: str | None = None
    text_content: str | None = None


class NearbyElement(_Model):
    line: int
    column: int
    tag: str


class LocateDiagnostics(_Model):
    scanned: int = 0
    nearby: list[NearbyElement] = Field(default_factory=list)


class AnalysisResult(_Model):
    success: bool
    component_id: str
    tag: str | None = None
    class_name: ClassNameAnalysis | None = None
    text_content: TextContentAnalysis | None = None
    element_type: ElementTypeAnalysis | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    diagnostics: LocateDiagnostics | None = None


class MutationResult(_Model):
    success: bool
    file_path: str | None = None
    changed: bool = False
    error: str | None = None
    error_kind: ErrorKind | None = None
    diagnostics: LocateDiagnostics | None = None
