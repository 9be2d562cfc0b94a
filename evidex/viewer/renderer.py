from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from evidex.core.pdf_tools import (
    TextFragment,
    extract_text_fragments,
    get_page_count,
    render_pdf_page_png,
)


@dataclass(frozen=True)
class RenderedPage:
    page: int
    width: float
    fragments: tuple[TextFragment, ...]
    image_png: bytes | None = None


class DocumentRenderer(Protocol):
    async def load(self, source: str) -> int: ...

    async def render_page(self, page: int, width: float) -> RenderedPage: ...


class PdfiumRenderer:
    """Renders PDF pages off the event loop; pages finish in whatever order the threads do."""

    def __init__(self, *, render_images: bool = False):
        self.render_images = render_images
        self._path: Path | None = None

    async def load(self, source: str) -> int:
        path = Path(source)
        page_count = await asyncio.to_thread(get_page_count, path)
        self._path = path
        return page_count

    def _render_sync(self, page: int, width: float) -> RenderedPage:
        if self._path is None:
            raise RuntimeError("load() must complete before pages are rendered")
        fragments = tuple(extract_text_fragments(self._path, page - 1))
        image_png = None
        if self.render_images:
            image_png = render_pdf_page_png(self._path, page - 1, width=width)
        return RenderedPage(page=page, width=width, fragments=fragments, image_png=image_png)

    async def render_page(self, page: int, width: float) -> RenderedPage:
        return await asyncio.to_thread(self._render_sync, page, width)
