from __future__ import annotations

from pathlib import Path


PDF_SUFFIXES = {".pdf"}
PDF_MAGIC = b"%PDF"


def is_pdf(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() in PDF_SUFFIXES


def has_pdf_header(path: Path) -> bool:
    try:
        with path.open("rb") as handle:
            return handle.read(len(PDF_MAGIC)) == PDF_MAGIC
    except OSError:
        return False


def resolve_document_path(candidate: str | Path) -> Path:
    raw = Path(candidate).expanduser()
    if raw.is_absolute():
        return raw
    return (Path.cwd() / raw).resolve()


def validate_document(candidate: str | Path) -> Path:
    path = resolve_document_path(candidate)
    if not path.exists():
        raise ValueError(f"Document not found: {path}")
    if not is_pdf(path) or not has_pdf_header(path):
        raise ValueError(f"Not a PDF file: {path}")
    return path
