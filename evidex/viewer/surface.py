from __future__ import annotations

from collections import deque
from collections.abc import Sequence
from typing import Protocol


PAGE_ANCHOR_PREFIX = "page_"
HIGHLIGHT_MARKER = "evidence-highlight"
SCROLL_HISTORY = 64


def page_anchor(page: int) -> str:
    return f"{PAGE_ANCHOR_PREFIX}{page}"


def anchor_page(anchor: str) -> int | None:
    if not anchor.startswith(PAGE_ANCHOR_PREFIX):
        return None
    suffix = anchor.removeprefix(PAGE_ANCHOR_PREFIX)
    return int(suffix) if suffix.isdigit() else None


class RenderSurface(Protocol):
    """Where pages are shown. The engine only asks it to scroll and to mark fragments."""

    def scroll_into_view(self, anchor: str) -> None: ...

    def mark_fragments(self, page: int, indices: Sequence[int]) -> None: ...

    def clear_marks(self, page: int | None = None) -> None: ...

    def reset(self) -> None: ...


class PageSurface:
    """Headless surface that remembers what a display would show."""

    def __init__(self) -> None:
        self.visible_anchor: str | None = None
        self.scroll_requests: deque[str] = deque(maxlen=SCROLL_HISTORY)
        self.marks: dict[int, set[int]] = {}

    @property
    def visible_page(self) -> int | None:
        return anchor_page(self.visible_anchor) if self.visible_anchor else None

    def scroll_into_view(self, anchor: str) -> None:
        self.scroll_requests.append(anchor)
        self.visible_anchor = anchor

    def mark_fragments(self, page: int, indices: Sequence[int]) -> None:
        self.marks.setdefault(page, set()).update(indices)

    def clear_marks(self, page: int | None = None) -> None:
        if page is None:
            self.marks.clear()
        else:
            self.marks.pop(page, None)

    def marked(self, page: int) -> set[int]:
        return set(self.marks.get(page, ()))

    def reset(self) -> None:
        self.visible_anchor = None
        self.scroll_requests.clear()
        self.marks.clear()
