from evidex.viewer.deep_link import DeepLinkListener, parse_page_fragment
from evidex.viewer.events import DocumentLoaded, DocumentLoadFailed, EventBus, PageRendered, TextLayerRendered
from evidex.viewer.highlight import EvidenceHighlightMatcher, matching_fragments
from evidex.viewer.navigation import NavigationController
from evidex.viewer.offset import PageOffsetResolver
from evidex.viewer.render_tracker import PageRenderTracker
from evidex.viewer.renderer import DocumentRenderer, PdfiumRenderer, RenderedPage
from evidex.viewer.session import DocumentSession, DocumentViewer
from evidex.viewer.state import OffsetEditMode, SessionState
from evidex.viewer.surface import PageSurface, RenderSurface, page_anchor

__all__ = [
    "DeepLinkListener",
    "DocumentLoadFailed",
    "DocumentLoaded",
    "DocumentRenderer",
    "DocumentSession",
    "DocumentViewer",
    "EventBus",
    "EvidenceHighlightMatcher",
    "NavigationController",
    "OffsetEditMode",
    "PageOffsetResolver",
    "PageRenderTracker",
    "PageRendered",
    "PageSurface",
    "PdfiumRenderer",
    "RenderSurface",
    "RenderedPage",
    "SessionState",
    "TextLayerRendered",
    "matching_fragments",
    "page_anchor",
    "parse_page_fragment",
]
