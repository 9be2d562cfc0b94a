from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from evidex.core.config import Settings
from evidex.core.evidence import coerce_entries, flatten_evidence
from evidex.core.models import (
    CreateViewerRequest,
    FragmentRequest,
    NavigateRequest,
    OffsetSaveRequest,
    PageFragment,
    PageFragmentsResponse,
    SetEvidenceRequest,
    SetSourceRequest,
    StepRequest,
    TargetPageRequest,
    ViewerSnapshot,
    ZoomRequest,
)
from evidex.core.pdf_tools import DocumentRenderError, render_pdf_page_png
from evidex.runtime.viewer_registry import ViewerRegistry
from evidex.viewer.session import DocumentViewer
from evidex.viewer.surface import PageSurface


def _evidence_from_payload(result: dict[str, Any] | None, evidence: list[dict[str, Any]] | None) -> list[Any]:
    entries: list[Any] = []
    if result is not None:
        entries.extend(flatten_evidence(result))
    if evidence is not None:
        entries.extend(coerce_entries(evidence))
    return entries


def build_viewer_router(*, settings: Settings, registry: ViewerRegistry) -> APIRouter:
    router = APIRouter(prefix="/api/viewers")

    def _viewer(viewer_id: str) -> DocumentViewer:
        viewer = registry.get(viewer_id)
        if viewer is None:
            raise HTTPException(status_code=404, detail=f"Viewer not found: {viewer_id}")
        return viewer

    async def _open(viewer: DocumentViewer, source_path: str) -> None:
        try:
            await registry.open_source(viewer, source_path)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @router.get("")
    async def list_viewers() -> dict[str, Any]:
        return {"viewers": registry.list_ids()}

    @router.post("", response_model=ViewerSnapshot)
    async def create_viewer(payload: CreateViewerRequest) -> ViewerSnapshot:
        viewer = registry.create()
        if payload.result is not None or payload.evidence is not None:
            viewer.set_evidence(_evidence_from_payload(payload.result, payload.evidence))
        if payload.target_page is not None:
            viewer.set_target_page(payload.target_page)
        if payload.fragment is not None:
            viewer.set_fragment(payload.fragment)
        if payload.source_path:
            try:
                await _open(viewer, payload.source_path)
            except HTTPException:
                registry.remove(viewer.viewer_id)
                raise
        return viewer.snapshot()

    @router.get("/{viewer_id}", response_model=ViewerSnapshot)
    async def get_viewer(viewer_id: str) -> ViewerSnapshot:
        return _viewer(viewer_id).snapshot()

    @router.delete("/{viewer_id}")
    async def delete_viewer(viewer_id: str) -> dict[str, Any]:
        _viewer(viewer_id)
        return {"viewer_id": viewer_id, "deleted": registry.remove(viewer_id)}

    @router.put("/{viewer_id}/source", response_model=ViewerSnapshot)
    async def set_source(viewer_id: str, payload: SetSourceRequest) -> ViewerSnapshot:
        viewer = _viewer(viewer_id)
        await _open(viewer, payload.source_path)
        return viewer.snapshot()

    @router.put("/{viewer_id}/evidence", response_model=ViewerSnapshot)
    async def set_evidence(viewer_id: str, payload: SetEvidenceRequest) -> ViewerSnapshot:
        viewer = _viewer(viewer_id)
        viewer.set_evidence(_evidence_from_payload(payload.result, payload.evidence))
        return viewer.snapshot()

    @router.post("/{viewer_id}/navigate", response_model=ViewerSnapshot)
    async def navigate(viewer_id: str, payload: NavigateRequest) -> ViewerSnapshot:
        viewer = _viewer(viewer_id)
        viewer.go_to_printed(payload.printed_page)
        return viewer.snapshot()

    @router.post("/{viewer_id}/step", response_model=ViewerSnapshot)
    async def step(viewer_id: str, payload: StepRequest) -> ViewerSnapshot:
        viewer = _viewer(viewer_id)
        viewer.step(payload.direction)
        return viewer.snapshot()

    @router.post("/{viewer_id}/target", response_model=ViewerSnapshot)
    async def set_target(viewer_id: str, payload: TargetPageRequest) -> ViewerSnapshot:
        viewer = _viewer(viewer_id)
        viewer.set_target_page(payload.printed_page)
        return viewer.snapshot()

    @router.post("/{viewer_id}/fragment", response_model=ViewerSnapshot)
    async def set_fragment(viewer_id: str, payload: FragmentRequest) -> ViewerSnapshot:
        viewer = _viewer(viewer_id)
        viewer.set_fragment(payload.fragment)
        return viewer.snapshot()

    @router.post("/{viewer_id}/offset/edit", response_model=ViewerSnapshot)
    async def begin_offset_edit(viewer_id: str) -> ViewerSnapshot:
        viewer = _viewer(viewer_id)
        viewer.begin_offset_edit()
        return viewer.snapshot()

    @router.post("/{viewer_id}/offset/save", response_model=ViewerSnapshot)
    async def save_offset_edit(viewer_id: str, payload: OffsetSaveRequest) -> ViewerSnapshot:
        viewer = _viewer(viewer_id)
        if payload.value is not None:
            viewer.update_offset_buffer(payload.value)
        viewer.save_offset_edit()
        return viewer.snapshot()

    @router.post("/{viewer_id}/zoom", response_model=ViewerSnapshot)
    async def zoom(viewer_id: str, payload: ZoomRequest) -> ViewerSnapshot:
        viewer = _viewer(viewer_id)
        if payload.direction > 0:
            viewer.zoom_in()
        elif payload.direction < 0:
            viewer.zoom_out()
        return viewer.snapshot()

    @router.get("/{viewer_id}/pages/{page}/fragments", response_model=PageFragmentsResponse)
    async def page_fragments(viewer_id: str, page: int) -> PageFragmentsResponse:
        viewer = _viewer(viewer_id)
        fragments = registry.text_layer(viewer, page)
        if fragments is None or viewer.session is None:
            raise HTTPException(status_code=404, detail=f"Text layer not rendered for page {page}")

        marked: set[int] = set()
        if isinstance(viewer.surface, PageSurface):
            marked = viewer.surface.marked(page)
        return PageFragmentsResponse(
            viewer_id=viewer_id,
            page=page,
            printed_page=viewer.session.offsets.to_printed(page),
            fragments=[
                PageFragment(index=fragment.index, text=fragment.text, bbox=fragment.bbox, marked=fragment.index in marked)
                for fragment in fragments
            ],
        )

    @router.get("/{viewer_id}/pages/{page}/image")
    async def page_image(viewer_id: str, page: int) -> Response:
        viewer = _viewer(viewer_id)
        session = viewer.session
        if session is None or session.state.total_pages is None:
            raise HTTPException(status_code=404, detail="No document loaded")
        if not 1 <= page <= session.state.total_pages:
            raise HTTPException(status_code=404, detail=f"Page {page} not in document")

        try:
            image_bytes = await asyncio.to_thread(
                render_pdf_page_png,
                Path(session.state.source),
                page - 1,
                width=viewer.page_width(),
                dpi=settings.page_image_dpi,
            )
        except DocumentRenderError as exc:
            raise HTTPException(status_code=500, detail=f"Failed rendering page image: {exc}") from exc

        return Response(content=image_bytes, media_type="image/png")

    return router
