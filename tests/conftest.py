from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence

import pytest

from evidex.core.pdf_tools import DocumentRenderError, TextFragment
from evidex.viewer.renderer import RenderedPage


def fragments_of(*texts: str) -> tuple[TextFragment, ...]:
    return tuple(TextFragment(index=index, text=text) for index, text in enumerate(texts))


class FakeRenderer:
    """In-memory renderer. Pages finish in ``order`` (default: last page first)."""

    def __init__(
        self,
        total_pages: int,
        texts: Mapping[int, Sequence[str]] | None = None,
        *,
        order: Sequence[int] | None = None,
        fail_load: bool = False,
        failing_pages: Sequence[int] = (),
    ):
        self.total_pages = total_pages
        self.texts = dict(texts or {})
        self.order = list(order) if order is not None else list(range(total_pages, 0, -1))
        self.fail_load = fail_load
        self.failing_pages = set(failing_pages)
        self.loaded: list[str] = []
        self.widths: list[float] = []

    async def load(self, source: str) -> int:
        self.loaded.append(source)
        await asyncio.sleep(0)
        if self.fail_load:
            raise DocumentRenderError(f"Cannot open document {source}")
        return self.total_pages

    async def render_page(self, page: int, width: float) -> RenderedPage:
        self.widths.append(width)
        position = self.order.index(page) if page in self.order else len(self.order)
        for _ in range(position + 1):
            await asyncio.sleep(0)
        if page in self.failing_pages:
            raise DocumentRenderError(f"Cannot render page {page}")
        return RenderedPage(page=page, width=width, fragments=fragments_of(*self.texts.get(page, ())))


@pytest.fixture
def write_pdf(tmp_path):
    def _write(name: str = "doc.pdf", payload: bytes = b"%PDF-1.7\n%fake\n") -> str:
        path = tmp_path / name
        path.write_bytes(payload)
        return str(path)

    return _write
