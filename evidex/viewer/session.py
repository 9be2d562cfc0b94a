from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any
from uuid import uuid4

from evidex.core.config import Settings
from evidex.core.evidence import coerce_entries, parse_int
from evidex.core.models import EvidenceEntry, ViewerSnapshot
from evidex.core.pdf_tools import DocumentRenderError
from evidex.viewer.deep_link import DeepLinkListener
from evidex.viewer.events import DocumentLoaded, DocumentLoadFailed, EventBus, PageRendered, TextLayerRendered
from evidex.viewer.highlight import EvidenceHighlightMatcher
from evidex.viewer.navigation import NavigationController
from evidex.viewer.offset import PageOffsetResolver
from evidex.viewer.render_tracker import PageRenderTracker
from evidex.viewer.renderer import DocumentRenderer
from evidex.viewer.state import SessionState
from evidex.viewer.surface import PageSurface, RenderSurface


logger = logging.getLogger(__name__)

PAGE_GUTTER = 32


class DocumentSession:
    """One loaded document: its state record, the components over it, and its event subscriptions."""

    def __init__(
        self,
        source: str,
        *,
        bus: EventBus,
        surface: RenderSurface,
        evidence: Iterable[EvidenceEntry] = (),
        offset: int = 0,
        requested_page: int | None = None,
        fragment: str | None = None,
    ):
        self.state = SessionState(
            source=str(source),
            offset=offset,
            evidence=tuple(evidence),
            requested_page=requested_page,
            fragment=fragment,
        )
        self.bus = bus
        self.surface = surface
        self.closed = False

        self.tracker = PageRenderTracker(self.state)
        self.offsets = PageOffsetResolver(self.state)
        self.navigation = NavigationController(self.state, self.offsets, surface)
        self.highlighter = EvidenceHighlightMatcher(self.state, self.offsets, surface)
        self.deep_links = DeepLinkListener(self.state, is_ready=self.is_ready, navigate=self.go_to_printed)

        bus.subscribe(self.session_id, DocumentLoaded, self._on_document_loaded)
        bus.subscribe(self.session_id, DocumentLoadFailed, self._on_document_load_failed)
        bus.subscribe(self.session_id, PageRendered, self._on_page_rendered)
        bus.subscribe(self.session_id, TextLayerRendered, self._on_text_layer_rendered)

        self.deep_links.reevaluate()

    @property
    def session_id(self) -> str:
        return self.state.session_id

    def is_ready(self) -> bool:
        return self.tracker.is_ready(self.state.total_pages)

    # -- render events -------------------------------------------------

    def _on_document_loaded(self, event: DocumentLoaded) -> None:
        self.state.total_pages = event.total_pages
        logger.info("Loaded %s (%d pages)", self.state.source, event.total_pages)
        if self.is_ready():
            self.deep_links.reevaluate()

    def _on_document_load_failed(self, event: DocumentLoadFailed) -> None:
        self.state.load_failed = True
        logger.warning("Failed to load %s: %s", self.state.source, event.error)

    def _on_page_rendered(self, event: PageRendered) -> None:
        if self.tracker.record_rendered(event.page):
            logger.info("All %d pages of %s rendered", self.state.total_pages, self.state.source)
            self.deep_links.reevaluate()

    def _on_text_layer_rendered(self, event: TextLayerRendered) -> None:
        self.state.text_layers[event.page] = event.fragments
        self.highlighter.on_text_layer_rendered(event.page, [fragment.text for fragment in event.fragments])

    def _rehighlight(self, page: int) -> None:
        fragments = self.state.text_layers.get(page)
        if fragments is not None:
            self.highlighter.on_text_layer_rendered(page, [fragment.text for fragment in fragments])

    # -- user and host input -------------------------------------------

    def go_to_printed(self, printed: Any) -> int | None:
        actual = self.navigation.go_to_printed(printed)
        if actual is not None:
            self._rehighlight(actual)
        return actual

    def step(self, direction: int) -> int | None:
        return self.navigation.step(direction)

    def set_evidence(self, evidence: Iterable[EvidenceEntry]) -> None:
        self.state.evidence = tuple(evidence)
        self.surface.clear_marks()
        if self.state.target_page is not None:
            self._rehighlight(self.state.target_page)

    def set_target_page(self, printed: Any) -> int | None:
        return self.deep_links.on_target_changed(parse_int(printed))

    def set_fragment(self, fragment: str | None) -> int | None:
        return self.deep_links.on_fragment_changed(fragment)

    # -- lifecycle -----------------------------------------------------

    async def open(self, renderer: DocumentRenderer, width: float) -> None:
        """Load the source and render every page, publishing completions as they land."""
        if self.closed:
            return
        logger.info("Loading %s", self.state.source)
        try:
            total_pages = await renderer.load(self.state.source)
        except DocumentRenderError as exc:
            self.bus.publish(DocumentLoadFailed(self.session_id, str(exc)))
            return

        self.bus.publish(DocumentLoaded(self.session_id, total_pages))
        await asyncio.gather(*(self._render_page(renderer, page, width) for page in range(1, total_pages + 1)))

    async def _render_page(self, renderer: DocumentRenderer, page: int, width: float) -> None:
        if self.closed:
            return
        try:
            rendered = await renderer.render_page(page, width)
        except DocumentRenderError as exc:
            logger.warning("Page %d of %s failed to render: %s", page, self.state.source, exc)
            return
        self.bus.publish(PageRendered(self.session_id, page))
        self.bus.publish(TextLayerRendered(self.session_id, page, tuple(rendered.fragments)))

    def close(self) -> None:
        self.closed = True
        self.bus.unsubscribe_session(self.session_id)
        logger.debug("Discarded session %s for %s", self.session_id, self.state.source)


class DocumentViewer:
    """What a host UI talks to: a document source, evidence, and a requested page."""

    def __init__(
        self,
        surface: RenderSurface,
        *,
        bus: EventBus | None = None,
        viewer_id: str | None = None,
        keep_offset_across_documents: bool = False,
        container_width: float = 832,
        zoom: float = 1.2,
        min_zoom: float = 0.5,
        zoom_step: float = 0.2,
    ):
        self.viewer_id = viewer_id or uuid4().hex
        self.surface = surface
        self.bus = bus or EventBus()
        self.keep_offset_across_documents = keep_offset_across_documents
        self.container_width = container_width
        self.zoom = zoom
        self.min_zoom = min_zoom
        self.zoom_step = zoom_step

        self.session: DocumentSession | None = None
        self.evidence: tuple[EvidenceEntry, ...] = ()
        self.requested_page: int | None = None
        self.fragment: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings, surface: RenderSurface, **kwargs: Any) -> "DocumentViewer":
        return cls(
            surface,
            keep_offset_across_documents=settings.keep_offset_across_documents,
            container_width=settings.container_width,
            zoom=settings.default_zoom,
            min_zoom=settings.min_zoom,
            zoom_step=settings.zoom_step,
            **kwargs,
        )

    def set_source(self, source: str) -> DocumentSession:
        offset = 0
        if self.session is not None:
            if self.keep_offset_across_documents:
                offset = self.session.state.offset
            self.session.close()
        self.surface.reset()

        self.session = DocumentSession(
            source,
            bus=self.bus,
            surface=self.surface,
            evidence=self.evidence,
            offset=offset,
            requested_page=self.requested_page,
            fragment=self.fragment,
        )
        return self.session

    def discard(self) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None

    async def open(self, renderer: DocumentRenderer) -> None:
        if self.session is not None:
            await self.session.open(renderer, self.page_width())

    def set_evidence(self, entries: Iterable[Any]) -> None:
        self.evidence = tuple(coerce_entries(entries))
        if self.session is not None:
            self.session.set_evidence(self.evidence)

    def set_target_page(self, printed: Any) -> int | None:
        self.requested_page = parse_int(printed)
        if self.session is None:
            return None
        return self.session.set_target_page(self.requested_page)

    def set_fragment(self, fragment: str | None) -> int | None:
        self.fragment = fragment
        if self.session is None:
            return None
        return self.session.set_fragment(fragment)

    def go_to_printed(self, value: Any) -> int | None:
        return self.session.go_to_printed(value) if self.session else None

    def step(self, direction: int) -> int | None:
        return self.session.step(direction) if self.session else None

    def begin_offset_edit(self) -> str | None:
        return self.session.offsets.begin_edit() if self.session else None

    def update_offset_buffer(self, text: str) -> None:
        if self.session is not None:
            self.session.offsets.update_buffer(text)

    def save_offset_edit(self) -> int | None:
        return self.session.offsets.save_edit() if self.session else None

    @property
    def current_page(self) -> int | None:
        return self.session.state.current_page if self.session else None

    def zoom_in(self) -> float:
        self.zoom = round(self.zoom + self.zoom_step, 4)
        return self.zoom

    def zoom_out(self) -> float:
        self.zoom = round(max(self.min_zoom, self.zoom - self.zoom_step), 4)
        return self.zoom

    def page_width(self) -> float:
        return (self.container_width - PAGE_GUTTER) * self.zoom

    def snapshot(self) -> ViewerSnapshot:
        marks: dict[int, list[int]] = {}
        if isinstance(self.surface, PageSurface):
            marks = {page: sorted(indices) for page, indices in sorted(self.surface.marks.items())}

        payload: dict[str, Any] = {
            "viewer_id": self.viewer_id,
            "zoom": self.zoom,
            "page_width": self.page_width(),
            "evidence_count": len(self.evidence),
            "marks": marks,
        }
        if self.session is not None:
            state = self.session.state
            payload.update(
                session_id=state.session_id,
                source=state.source,
                total_pages=state.total_pages,
                ready=self.session.is_ready(),
                load_failed=state.load_failed,
                offset=state.offset,
                edit_mode=state.edit_mode.value,
                offset_buffer=state.offset_buffer,
                current_page=state.current_page,
                target_page=state.target_page,
            )
        return ViewerSnapshot(**payload)
