from __future__ import annotations

from collections.abc import Sequence

from textual.app import App

from evidex.core.config import Settings, get_settings
from evidex.core.models import EvidenceEntry
from evidex.tui.screens import DocumentViewerScreen
from evidex.viewer.renderer import DocumentRenderer, PdfiumRenderer


class EvidexViewerApp(App[None]):
    TITLE = "evidex"

    def __init__(
        self,
        *,
        source: str,
        evidence: Sequence[EvidenceEntry] = (),
        renderer: DocumentRenderer | None = None,
        settings: Settings | None = None,
        target_page: int | None = None,
        fragment: str | None = None,
    ):
        super().__init__()
        self.source = source
        self.evidence = list(evidence)
        self.renderer = renderer or PdfiumRenderer()
        self.settings = settings or get_settings()
        self.target_page = target_page
        self.fragment = fragment
        self.sub_title = source

    def on_mount(self) -> None:
        self.push_screen(
            DocumentViewerScreen(
                source=self.source,
                evidence=self.evidence,
                renderer=self.renderer,
                settings=self.settings,
                target_page=self.target_page,
                fragment=self.fragment,
            )
        )


def run_viewer(
    source: str,
    *,
    evidence: Sequence[EvidenceEntry] = (),
    target_page: int | None = None,
    fragment: str | None = None,
) -> None:
    app = EvidexViewerApp(source=source, evidence=evidence, target_page=target_page, fragment=fragment)
    app.run()
