from pathlib import Path

import pypdfium2 as pdfium
import pytest

from evidex.core import pdf_tools


def _blank_pdf(path: Path, pages: int = 2) -> Path:
    document = pdfium.PdfDocument.new()
    for _ in range(pages):
        document.new_page(612, 792)
    document.save(str(path))
    document.close()
    return path


def test_rendering_requires_pillow(monkeypatch) -> None:
    monkeypatch.setattr(pdf_tools, "PIL_AVAILABLE", False)

    with pytest.raises(RuntimeError, match="Pillow is required"):
        pdf_tools._ensure_pillow_available()


def test_unreadable_documents_raise_render_error(tmp_path: Path) -> None:
    garbage = tmp_path / "garbage.pdf"
    garbage.write_bytes(b"not a pdf at all")

    with pytest.raises(pdf_tools.DocumentRenderError):
        pdf_tools.get_page_count(garbage)
    with pytest.raises(pdf_tools.DocumentRenderError):
        pdf_tools.get_page_count(tmp_path / "missing.pdf")


def test_blank_document_pages_and_text(tmp_path: Path) -> None:
    path = _blank_pdf(tmp_path / "blank.pdf")

    assert pdf_tools.get_page_count(path) == 2
    assert pdf_tools.extract_text_fragments(path, 0) == []
    with pytest.raises(pdf_tools.DocumentRenderError):
        pdf_tools.extract_text_fragments(path, 5)


def test_render_page_png_honours_width(tmp_path: Path) -> None:
    path = _blank_pdf(tmp_path / "blank.pdf", pages=1)

    png = pdf_tools.render_pdf_page_png(path, 0, width=306)
    assert png.startswith(b"\x89PNG")


class _BrokenTextPage:
    def __init__(self) -> None:
        self.closed = False

    def get_textpage(self):
        raise pdfium.PdfiumError("Failed to load text page")

    def close(self) -> None:
        self.closed = True


class _OnePageDocument:
    def __init__(self, page) -> None:
        self.page = page
        self.closed = False

    def __getitem__(self, index):
        return self.page

    def close(self) -> None:
        self.closed = True


def test_text_extraction_closes_page_when_text_layer_fails(monkeypatch, tmp_path: Path) -> None:
    page = _BrokenTextPage()
    document = _OnePageDocument(page)
    monkeypatch.setattr(pdf_tools, "_open_document", lambda _path: document)

    with pytest.raises(pdf_tools.DocumentRenderError, match="Cannot read text of page 1"):
        pdf_tools.extract_text_fragments(tmp_path / "doc.pdf", 0)
    assert page.closed is True
    assert document.closed is True
