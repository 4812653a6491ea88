"""Pydantic schemas to validate external inputs (gateway, Trello).

These schemas act as contracts at ingress points. They are deliberately
lenient: a field of the wrong shape is dropped rather than failing the
whole payload, because one odd result element must not hide its siblings.
"""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OperationResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool = False
    operation: Optional[str] = None
    task: Optional[str] = None
    error: Optional[str] = None

    @field_validator("success", mode="before")
    @classmethod
    def truthy_success(cls, v: Any) -> bool:
        return bool(v)

    @field_validator("operation", "task", "error", mode="before")
    @classmethod
    def optional_text(cls, v: Any) -> Optional[str]:
        if v is None or isinstance(v, (dict, list)):
            return None
        text = str(v)
        return text if text else None


class GatewayResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    transcript: Optional[str] = None
    results: List[OperationResult] = Field(default_factory=list)

    @field_validator("transcript", mode="before")
    @classmethod
    def transcript_text(cls, v: Any) -> Optional[str]:
        if isinstance(v, str) and v:
            return v
        return None

    @field_validator("results", mode="before")
    @classmethod
    def results_list(cls, v: Any) -> List[Any]:
        if not isinstance(v, list):
            return []
        return [item for item in v if isinstance(item, dict)]


class BoardSummary(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    name: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def id_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("name", mode="before")
    @classmethod
    def name_text(cls, v: Any) -> str:
        return "" if v is None else str(v)
