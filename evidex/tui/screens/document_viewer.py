from __future__ import annotations

from collections.abc import Callable, Sequence

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Footer, Header, Input, Label, OptionList, Static

from evidex.core.config import Settings
from evidex.core.models import EvidenceEntry
from evidex.tui.common import _evidence_label, _page_text, _status_line
from evidex.viewer.renderer import DocumentRenderer
from evidex.viewer.session import DocumentViewer
from evidex.viewer.surface import PageSurface, page_anchor


class TerminalSurface(PageSurface):
    """Page surface that asks the screen to redraw whenever what it shows changes."""

    def __init__(self, on_change: Callable[[], None]):
        super().__init__()
        self.on_change = on_change

    def scroll_into_view(self, anchor: str) -> None:
        super().scroll_into_view(anchor)
        self.on_change()

    def mark_fragments(self, page: int, indices: Sequence[int]) -> None:
        super().mark_fragments(page, indices)
        if page == self.visible_page:
            self.on_change()

    def clear_marks(self, page: int | None = None) -> None:
        super().clear_marks(page)
        if page is None or page == self.visible_page:
            self.on_change()

    def show_page(self, page: int) -> None:
        self.visible_anchor = page_anchor(page)


class DocumentViewerScreen(Screen[None]):
    """Evidence list on the left, the visible page's text layer on the right."""

    CSS = """
    #viewer-root {
      layout: horizontal;
      height: 1fr;
    }

    #evidence-pane {
      width: 1fr;
      border: solid $accent;
      margin: 0 1 1 1;
      padding: 0 1;
    }

    #page-pane {
      width: 2fr;
      border: solid $accent;
      margin: 0 1 1 0;
      padding: 0 1;
    }

    .pane-title {
      text-style: bold;
      color: $accent;
      height: auto;
      margin-top: 1;
    }

    #evidence-list {
      height: 1fr;
      margin-top: 1;
    }

    #viewer-status {
      color: $text-muted;
      height: auto;
      margin-bottom: 1;
    }

    #page-content {
      height: 1fr;
      border: round $secondary;
      padding: 0 1;
      overflow: auto;
    }

    #page-inputs {
      height: 3;
    }

    #page-jump {
      width: 1fr;
    }

    #offset-input {
      width: 20;
      margin-left: 1;
    }
    """

    BINDINGS = [
        Binding("left", "prev_page", "Prev"),
        Binding("right", "next_page", "Next"),
        Binding("g", "focus_jump", "Go to"),
        Binding("o", "edit_offset", "Offset"),
        Binding("plus,equals_sign", "zoom_in", "Zoom +"),
        Binding("minus", "zoom_out", "Zoom -"),
        Binding("q", "quit_viewer", "Quit"),
        Binding("escape", "quit_viewer", "Quit", show=False),
    ]

    def __init__(
        self,
        *,
        source: str,
        evidence: Sequence[EvidenceEntry],
        renderer: DocumentRenderer,
        settings: Settings,
        target_page: int | None = None,
        fragment: str | None = None,
    ):
        super().__init__()
        self.source = source
        self.renderer = renderer
        self.surface = TerminalSurface(self._draw_page)
        self._drawn: tuple | None = None

        self.viewer = DocumentViewer.from_settings(settings, self.surface)
        self.viewer.set_evidence(evidence)
        self.viewer.set_target_page(target_page)
        self.viewer.set_fragment(fragment)

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        with Horizontal(id="viewer-root"):
            with Vertical(id="evidence-pane"):
                yield Label("Evidence", classes="pane-title")
                yield OptionList(*(_evidence_label(entry) for entry in self.viewer.evidence), id="evidence-list")
            with Vertical(id="page-pane"):
                yield Label(self.source, classes="pane-title")
                yield Static("", id="viewer-status")
                yield Static("Loading document...", id="page-content")
                with Horizontal(id="page-inputs"):
                    yield Input(id="page-jump", placeholder="printed page, or #page-N")
                    yield Input(id="offset-input", placeholder="offset")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#offset-input", Input).display = False
        self.viewer.set_source(self.source)
        self.run_worker(self._open_document(), group="render", exclusive=True)
        self.set_interval(0.25, self._tick_refresh)

    async def _open_document(self) -> None:
        await self.viewer.open(self.renderer)
        session = self.viewer.session
        if self.surface.visible_page is None and session and session.state.total_pages:
            self.surface.show_page(1)
        self._tick_refresh()

    # -- drawing -------------------------------------------------------

    def _draw_key(self) -> tuple | None:
        session = self.viewer.session
        page = self.surface.visible_page
        if session is None or page is None:
            return None
        return (session.session_id, page, page in session.state.text_layers, len(self.surface.marked(page)))

    def _draw_page(self) -> None:
        session = self.viewer.session
        page = self.surface.visible_page
        if session is None or page is None or not self.is_mounted:
            return

        content = self.query_one("#page-content", Static)
        fragments = session.state.text_layers.get(page)
        marked = self.surface.marked(page)
        self._drawn = self._draw_key()
        if fragments is None:
            content.update(f"Page {page} is still rendering...")
        elif not fragments:
            content.update(f"Page {page} has no text layer.")
        else:
            content.update(_page_text(fragments, marked))
        content.scroll_home(animate=False)

    def _tick_refresh(self) -> None:
        session = self.viewer.session
        rendered = session.tracker.pages_rendered() if session else 0
        self.query_one("#viewer-status", Static).update(_status_line(self.viewer.snapshot(), rendered))

        if session is not None and session.state.load_failed:
            self.query_one("#page-content", Static).update("The document could not be loaded.")
            return
        key = self._draw_key()
        if key is not None and key != self._drawn:
            self._draw_page()

    # -- actions -------------------------------------------------------

    def action_prev_page(self) -> None:
        self.viewer.step(-1)
        self._tick_refresh()

    def action_next_page(self) -> None:
        self.viewer.step(1)
        self._tick_refresh()

    def action_focus_jump(self) -> None:
        self.query_one("#page-jump", Input).focus()

    def action_edit_offset(self) -> None:
        offset_input = self.query_one("#offset-input", Input)
        offset_input.value = self.viewer.begin_offset_edit() or ""
        offset_input.display = True
        offset_input.focus()

    def action_zoom_in(self) -> None:
        self.viewer.zoom_in()
        self._tick_refresh()

    def action_zoom_out(self) -> None:
        self.viewer.zoom_out()
        self._tick_refresh()

    def action_quit_viewer(self) -> None:
        self.viewer.discard()
        self.app.exit()

    @on(OptionList.OptionSelected, "#evidence-list")
    def on_evidence_selected(self, event: OptionList.OptionSelected) -> None:
        entry = self.viewer.evidence[event.option_index]
        self.viewer.set_target_page(entry.printed_page)
        self._tick_refresh()

    @on(Input.Submitted, "#page-jump")
    def on_page_jump(self, event: Input.Submitted) -> None:
        value = event.value.strip()
        if value.startswith("#"):
            self.viewer.set_fragment(value)
        else:
            self.viewer.go_to_printed(value)
        event.input.value = ""
        self._tick_refresh()

    @on(Input.Changed, "#offset-input")
    def on_offset_changed(self, event: Input.Changed) -> None:
        self.viewer.update_offset_buffer(event.value)

    @on(Input.Submitted, "#offset-input")
    def on_offset_submitted(self, event: Input.Submitted) -> None:
        self.viewer.update_offset_buffer(event.value)
        self.viewer.save_offset_edit()
        event.input.display = False
        self.query_one("#page-jump", Input).focus()
        self._tick_refresh()
