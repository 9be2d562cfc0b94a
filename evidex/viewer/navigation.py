from __future__ import annotations

import logging
from typing import Any

from evidex.core.evidence import parse_int
from evidex.viewer.offset import PageOffsetResolver
from evidex.viewer.state import SessionState
from evidex.viewer.surface import RenderSurface, page_anchor


logger = logging.getLogger(__name__)


class NavigationController:
    """Turns navigation requests into scroll requests on the render surface.

    Out-of-range or unparseable requests are ignored without touching state.
    """

    def __init__(self, state: SessionState, offsets: PageOffsetResolver, surface: RenderSurface):
        self.state = state
        self.offsets = offsets
        self.surface = surface

    def in_range(self, actual: int) -> bool:
        total = self.state.total_pages
        return total is not None and 1 <= actual <= total

    def go_to_printed(self, printed: Any) -> int | None:
        value = parse_int(printed)
        if value is None:
            return None
        actual = self.offsets.to_actual(value)
        if not self.in_range(actual):
            logger.debug("Ignoring printed page %d (physical %d out of range)", value, actual)
            return None
        self.state.target_page = actual
        return self.scroll_to_page(actual)

    def step(self, direction: int) -> int | None:
        total = self.state.total_pages
        if total is None or total < 1 or not direction:
            return None
        delta = 1 if direction > 0 else -1
        current = self.state.current_page or 1
        return self.scroll_to_page(max(1, min(total, current + delta)))

    def scroll_to_page(self, actual: int) -> int:
        logger.debug("Bringing page %d into view", actual)
        self.surface.scroll_into_view(page_anchor(actual))
        self.state.current_page = actual
        return actual
