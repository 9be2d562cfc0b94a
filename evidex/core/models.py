from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Regulation(str, Enum):
    ERISA = "ERISA"
    MIFID_II = "MIFID II"
    HIPAA = "HIPAA"


class EvidenceEntry(BaseModel):
    """A text snippet an evaluation anchored to a printed page number."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    printed_page: int = Field(
        validation_alias=AliasChoices("printed_page", "printedPage", "pageNumber", "page_number"),
    )
    text: str = Field(
        min_length=1,
        validation_alias=AliasChoices("text", "pageText", "evidence"),
    )


class CreateViewerRequest(BaseModel):
    source_path: str | None = None
    result: dict[str, Any] | None = Field(default=None, description="Raw evaluation result to take evidence from")
    evidence: list[dict[str, Any]] | None = Field(default=None, description="Flat evidence entries")
    target_page: int | None = None
    fragment: str | None = None


class SetSourceRequest(BaseModel):
    source_path: str


class SetEvidenceRequest(BaseModel):
    result: dict[str, Any] | None = None
    evidence: list[dict[str, Any]] | None = None


class NavigateRequest(BaseModel):
    printed_page: Any = Field(default=None, description="Printed page number; non-integers are ignored")


class StepRequest(BaseModel):
    direction: int


class TargetPageRequest(BaseModel):
    printed_page: int | None = None


class FragmentRequest(BaseModel):
    fragment: str | None = None


class OffsetSaveRequest(BaseModel):
    value: str | None = Field(default=None, description="Offset text; when omitted the current buffer is saved")


class ZoomRequest(BaseModel):
    direction: int


class ViewerSnapshot(BaseModel):
    viewer_id: str
    session_id: str | None = None
    source: str | None = None
    total_pages: int | None = None
    ready: bool = False
    load_failed: bool = False
    offset: int = 0
    edit_mode: str = "display"
    offset_buffer: str = ""
    current_page: int | None = None
    target_page: int | None = None
    zoom: float = 1.0
    page_width: float = 0.0
    evidence_count: int = 0
    marks: dict[int, list[int]] = Field(default_factory=dict)


class PageFragment(BaseModel):
    index: int
    text: str
    bbox: tuple[float, float, float, float] | None = None
    marked: bool = False


class PageFragmentsResponse(BaseModel):
    viewer_id: str
    page: int
    printed_page: int
    fragments: list[PageFragment]
