from __future__ import annotations

from evidex.viewer.state import SessionState


class PageRenderTracker:
    def __init__(self, state: SessionState):
        self.state = state

    def record_rendered(self, page: int) -> bool:
        """Mark a physical page rendered. Returns True when this call made the document ready."""
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            return False
        total = self.state.total_pages
        if total is not None and page > total:
            return False

        was_ready = self.is_ready(total)
        self.state.rendered[page] = True
        return not was_ready and self.is_ready(total)

    def is_ready(self, total_pages: int | None) -> bool:
        if total_pages is None or self.state.load_failed:
            return False
        return all(self.state.rendered.get(page, False) for page in range(1, total_pages + 1))

    def pages_rendered(self) -> int:
        return sum(1 for flag in self.state.rendered.values() if flag)
