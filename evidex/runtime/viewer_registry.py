from __future__ import annotations

import logging
from collections.abc import Callable

from evidex.core.config import Settings
from evidex.core.input_discovery import validate_document
from evidex.core.pdf_tools import TextFragment
from evidex.viewer.renderer import DocumentRenderer, PdfiumRenderer
from evidex.viewer.session import DocumentViewer
from evidex.viewer.surface import PageSurface


logger = logging.getLogger(__name__)


class ViewerRegistry:
    """Server-side viewers, each with a headless surface the API reports from."""

    def __init__(self, settings: Settings, renderer_factory: Callable[[], DocumentRenderer] = PdfiumRenderer):
        self.settings = settings
        self.renderer_factory = renderer_factory
        self._viewers: dict[str, DocumentViewer] = {}

    def create(self) -> DocumentViewer:
        viewer = DocumentViewer.from_settings(self.settings, PageSurface())
        self._viewers[viewer.viewer_id] = viewer
        logger.debug("Created viewer %s", viewer.viewer_id)
        return viewer

    def get(self, viewer_id: str) -> DocumentViewer | None:
        return self._viewers.get(viewer_id)

    def list_ids(self) -> list[str]:
        return sorted(self._viewers)

    async def open_source(self, viewer: DocumentViewer, source_path: str) -> None:
        """Swap the viewer onto a new document and render it. Raises ValueError for unusable paths."""
        path = validate_document(source_path)
        viewer.set_source(str(path))
        await viewer.open(self.renderer_factory())

    @staticmethod
    def text_layer(viewer: DocumentViewer, page: int) -> tuple[TextFragment, ...] | None:
        if viewer.session is None:
            return None
        return viewer.session.state.text_layers.get(page)

    def remove(self, viewer_id: str) -> bool:
        viewer = self._viewers.pop(viewer_id, None)
        if viewer is None:
            return False
        viewer.discard()
        return True

    async def shutdown(self) -> None:
        for viewer_id in list(self._viewers):
            self.remove(viewer_id)
