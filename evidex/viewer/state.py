from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4

from evidex.core.models import EvidenceEntry
from evidex.core.pdf_tools import TextFragment


class OffsetEditMode(str, Enum):
    DISPLAY = "display"
    EDITING = "editing"


def new_session_id() -> str:
    return uuid4().hex


@dataclass
class SessionState:
    """Everything one loaded document knows. Discarded wholesale on a source swap."""

    source: str
    session_id: str = field(default_factory=new_session_id)
    total_pages: int | None = None
    load_failed: bool = False
    rendered: dict[int, bool] = field(default_factory=dict)

    offset: int = 0
    edit_mode: OffsetEditMode = OffsetEditMode.DISPLAY
    offset_buffer: str = ""

    current_page: int | None = None
    target_page: int | None = None

    # latest values of the external signals, not a queue
    requested_page: int | None = None
    fragment: str | None = None

    evidence: tuple[EvidenceEntry, ...] = ()
    text_layers: dict[int, tuple[TextFragment, ...]] = field(default_factory=dict)
