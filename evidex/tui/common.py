from __future__ import annotations

from collections.abc import Collection, Sequence

from rich.text import Text

from evidex.core.models import EvidenceEntry, ViewerSnapshot
from evidex.core.pdf_tools import TextFragment


HIGHLIGHT_STYLE = "bold black on yellow"


def _page_text(fragments: Sequence[TextFragment], marked: Collection[int]) -> Text:
    text = Text()
    for fragment in fragments:
        text.append(fragment.text, style=HIGHLIGHT_STYLE if fragment.index in marked else None)
        text.append("\n")
    return text


def _evidence_label(entry: EvidenceEntry, width: int = 72) -> str:
    snippet = " ".join(entry.text.split())
    if len(snippet) > width:
        snippet = snippet[: width - 1].rstrip() + "…"
    return f"p.{entry.printed_page}  {snippet}"


def _status_line(snapshot: ViewerSnapshot, pages_rendered: int) -> str:
    if snapshot.source is None:
        return "No document"
    if snapshot.load_failed:
        return "Document failed to load"

    total = snapshot.total_pages if snapshot.total_pages is not None else "?"
    current = snapshot.current_page
    printed = current - snapshot.offset if current is not None else "-"
    loading = "" if snapshot.ready else f" | rendering {pages_rendered}/{total}"
    return (
        f"Page {current or '-'} / {total}"
        f" | printed {printed}"
        f" | offset {snapshot.offset}"
        f" | zoom {snapshot.zoom * 100:.0f}%"
        f"{loading}"
    )
