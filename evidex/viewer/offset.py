from __future__ import annotations

import logging

from evidex.core.evidence import parse_int
from evidex.viewer.state import OffsetEditMode, SessionState


logger = logging.getLogger(__name__)


class PageOffsetResolver:
    """Maps printed page numbers to physical page indices: ``actual = printed + offset``."""

    def __init__(self, state: SessionState):
        self.state = state

    @property
    def offset(self) -> int:
        return self.state.offset

    @property
    def editing(self) -> bool:
        return self.state.edit_mode == OffsetEditMode.EDITING

    def to_actual(self, printed: int) -> int:
        return printed + self.state.offset

    def to_printed(self, actual: int) -> int:
        return actual - self.state.offset

    def begin_edit(self) -> str:
        if not self.editing:
            self.state.edit_mode = OffsetEditMode.EDITING
            self.state.offset_buffer = str(self.state.offset)
        return self.state.offset_buffer

    def update_buffer(self, text: str) -> None:
        if self.editing:
            self.state.offset_buffer = text

    def save_edit(self) -> int:
        if not self.editing:
            return self.state.offset

        value = parse_int(self.state.offset_buffer)
        if value is None:
            logger.debug("Discarding offset edit %r", self.state.offset_buffer)
        else:
            self.state.offset = value
            logger.info("Page offset set to %d", value)
        self.state.edit_mode = OffsetEditMode.DISPLAY
        return self.state.offset
