from __future__ import annotations

import threading
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

import pypdfium2 as pdfium

try:
    import PIL.Image  # noqa: F401

    PIL_AVAILABLE = True
except ModuleNotFoundError:
    PIL_AVAILABLE = False


# pdfium is not thread-safe, even across separate documents.
_PDFIUM_LOCK = threading.RLock()


class DocumentRenderError(RuntimeError):
    pass


@dataclass(frozen=True)
class TextFragment:
    index: int
    text: str
    bbox: tuple[float, float, float, float] | None = None


def _ensure_pillow_available() -> None:
    if not PIL_AVAILABLE:
        raise RuntimeError(
            "Pillow is required to render PDF pages. Run `uv sync` to install project dependencies."
        )


def _open_document(pdf_path: Path) -> pdfium.PdfDocument:
    try:
        return pdfium.PdfDocument(str(pdf_path))
    except (pdfium.PdfiumError, OSError) as exc:
        raise DocumentRenderError(f"Cannot open document {pdf_path}: {exc}") from exc


def get_page_count(pdf_path: Path) -> int:
    with _PDFIUM_LOCK:
        document = _open_document(pdf_path)
        try:
            return len(document)
        finally:
            document.close()


def render_pdf_page_png(pdf_path: Path, page_index: int, *, width: float | None = None, dpi: int = 144) -> bytes:
    _ensure_pillow_available()
    with _PDFIUM_LOCK:
        document = _open_document(pdf_path)
        try:
            page = document[page_index]
            try:
                scale = dpi / 72.0
                if width:
                    scale = width / page.get_width()
                pil_image = page.render(scale=scale).to_pil()
            finally:
                page.close()
        except (pdfium.PdfiumError, IndexError) as exc:
            raise DocumentRenderError(f"Cannot render page {page_index + 1} of {pdf_path}: {exc}") from exc
        finally:
            document.close()

    buffer = BytesIO()
    pil_image.save(buffer, format="PNG")
    return buffer.getvalue()


def extract_text_fragments(pdf_path: Path, page_index: int) -> list[TextFragment]:
    """Return the page's text as small positioned pieces, one per text rectangle."""
    fragments: list[TextFragment] = []
    with _PDFIUM_LOCK:
        document = _open_document(pdf_path)
        try:
            page = document[page_index]
            try:
                textpage = page.get_textpage()
                try:
                    for rect_index in range(textpage.count_rects()):
                        left, bottom, right, top = textpage.get_rect(rect_index)
                        text = textpage.get_text_bounded(left=left, bottom=bottom, right=right, top=top)
                        fragments.append(
                            TextFragment(
                                index=len(fragments),
                                text=text,
                                bbox=(left, bottom, right, top),
                            )
                        )
                finally:
                    textpage.close()
            finally:
                page.close()
        except (pdfium.PdfiumError, IndexError) as exc:
            raise DocumentRenderError(f"Cannot read text of page {page_index + 1} of {pdf_path}: {exc}") from exc
        finally:
            document.close()
    return fragments
