import asyncio

from conftest import FakeRenderer, fragments_of

from evidex.core.models import EvidenceEntry
from evidex.viewer.events import EventBus, PageRendered, TextLayerRendered
from evidex.viewer.session import DocumentSession, DocumentViewer
from evidex.viewer.surface import PageSurface


ALPHA_TEXTS = {5: ["alpha", "unrelated words", "beta"]}


def _viewer(**kwargs) -> DocumentViewer:
    return DocumentViewer(PageSurface(), **kwargs)


def test_target_page_is_navigated_and_highlighted_once_ready() -> None:
    viewer = _viewer()
    viewer.set_evidence([{"pageNumber": 5, "pageText": "alpha beta"}])
    viewer.set_target_page(5)
    viewer.set_source("doc.pdf")
    assert viewer.current_page is None

    asyncio.run(viewer.open(FakeRenderer(10, ALPHA_TEXTS)))

    snapshot = viewer.snapshot()
    assert snapshot.ready is True
    assert snapshot.current_page == 5
    assert snapshot.target_page == 5
    assert snapshot.marks == {5: [0, 2]}


def test_negative_offset_scenario() -> None:
    viewer = _viewer()
    viewer.set_source("doc.pdf")
    asyncio.run(viewer.open(FakeRenderer(10)))

    viewer.begin_offset_edit()
    viewer.update_offset_buffer("-2")
    assert viewer.save_offset_edit() == -2
    assert viewer.go_to_printed("7") == 5
    assert viewer.surface.visible_page == 5


def test_fragment_before_ready_is_honored_when_ready() -> None:
    viewer = _viewer()
    session = viewer.set_source("doc.pdf")
    session.bus.publish(PageRendered(session.session_id, 1))
    assert viewer.set_fragment("#page-3") is None
    assert viewer.current_page is None

    asyncio.run(viewer.open(FakeRenderer(4)))

    assert viewer.current_page == 3
    assert list(viewer.surface.scroll_requests) == ["page_3"]


def test_navigation_rehighlights_already_rendered_page() -> None:
    viewer = _viewer()
    viewer.set_evidence([EvidenceEntry(printed_page=5, text="alpha beta")])
    viewer.set_source("doc.pdf")
    asyncio.run(viewer.open(FakeRenderer(10, ALPHA_TEXTS)))
    assert viewer.surface.marks == {}

    viewer.go_to_printed(5)
    assert viewer.surface.marked(5) == {0, 2}

    viewer.go_to_printed(5)
    assert viewer.snapshot().marks == {5: [0, 2]}


def test_replacing_evidence_rehighlights_current_target() -> None:
    viewer = _viewer()
    viewer.set_source("doc.pdf")
    asyncio.run(viewer.open(FakeRenderer(10, ALPHA_TEXTS)))
    viewer.go_to_printed(5)
    assert viewer.surface.marks == {}

    viewer.set_evidence([{"page_number": 5, "text": "Unrelated words here"}])
    assert viewer.surface.marked(5) == {1}


def test_malformed_evidence_entries_are_skipped() -> None:
    viewer = _viewer()
    viewer.set_evidence(
        [
            {"pageNumber": 5, "pageText": "alpha"},
            {"pageNumber": "five", "pageText": "beta"},
            {"pageText": "gamma"},
            {"pageNumber": 6},
            {"pageNumber": 6, "pageText": ""},
            "not an entry",
        ]
    )
    assert viewer.evidence == (EvidenceEntry(printed_page=5, text="alpha"),)


def test_load_failure_leaves_session_inert() -> None:
    viewer = _viewer()
    viewer.set_target_page(1)
    viewer.set_source("broken.pdf")
    asyncio.run(viewer.open(FakeRenderer(3, fail_load=True)))

    snapshot = viewer.snapshot()
    assert snapshot.load_failed is True
    assert snapshot.ready is False
    assert snapshot.total_pages is None
    assert viewer.go_to_printed(1) is None
    assert viewer.step(1) is None


def test_page_render_failure_keeps_document_unready() -> None:
    viewer = _viewer()
    viewer.set_target_page(1)
    viewer.set_source("doc.pdf")
    asyncio.run(viewer.open(FakeRenderer(3, failing_pages=[2])))

    assert viewer.snapshot().ready is False
    assert viewer.current_page is None


def test_source_swap_discards_session_and_ignores_late_events() -> None:
    viewer = _viewer()
    viewer.set_evidence([{"pageNumber": 1, "pageText": "alpha"}])
    first = viewer.set_source("first.pdf")
    asyncio.run(viewer.open(FakeRenderer(2, {1: ["alpha"]})))
    viewer.go_to_printed(1)
    viewer.begin_offset_edit()
    assert viewer.surface.marks == {1: {0}}

    second = viewer.set_source("second.pdf")
    assert second.session_id != first.session_id
    assert viewer.surface.marks == {}
    assert viewer.surface.visible_page is None

    assert viewer.bus.publish(PageRendered(first.session_id, 1)) == 0
    assert viewer.bus.publish(TextLayerRendered(first.session_id, 1, fragments_of("alpha"))) == 0
    assert viewer.surface.marks == {}

    snapshot = viewer.snapshot()
    assert snapshot.session_id == second.session_id
    assert snapshot.total_pages is None
    assert snapshot.edit_mode == "display"
    assert snapshot.target_page is None
    assert snapshot.current_page is None


def test_closed_session_stops_rendering() -> None:
    bus = EventBus()
    surface = PageSurface()
    session = DocumentSession("doc.pdf", bus=bus, surface=surface)
    session.close()
    renderer = FakeRenderer(3)

    asyncio.run(session.open(renderer, 800))

    assert renderer.loaded == []
    assert bus.has_subscribers(session.session_id) is False


def test_offset_resets_on_swap_by_default() -> None:
    viewer = _viewer()
    viewer.set_source("first.pdf")
    viewer.begin_offset_edit()
    viewer.update_offset_buffer("4")
    viewer.save_offset_edit()

    viewer.set_source("second.pdf")
    assert viewer.snapshot().offset == 0


def test_offset_can_carry_across_documents() -> None:
    viewer = _viewer(keep_offset_across_documents=True)
    viewer.set_source("first.pdf")
    viewer.begin_offset_edit()
    viewer.update_offset_buffer("4")
    viewer.save_offset_edit()

    viewer.set_source("second.pdf")
    assert viewer.snapshot().offset == 4


def test_requested_page_carries_into_new_document() -> None:
    viewer = _viewer()
    viewer.set_target_page(2)
    viewer.set_source("first.pdf")
    asyncio.run(viewer.open(FakeRenderer(3)))
    assert viewer.current_page == 2

    viewer.set_source("second.pdf")
    asyncio.run(viewer.open(FakeRenderer(5)))
    assert viewer.current_page == 2


def test_zoom_scales_page_width_with_floor() -> None:
    viewer = _viewer(container_width=832, zoom=1.0, min_zoom=0.5, zoom_step=0.2)
    assert viewer.page_width() == 800
    assert viewer.zoom_in() == 1.2
    for _ in range(10):
        viewer.zoom_out()
    assert viewer.zoom == 0.5

    renderer = FakeRenderer(1)
    viewer.set_source("doc.pdf")
    asyncio.run(viewer.open(renderer))
    assert renderer.widths == [400]


def test_viewer_without_document_is_a_no_op() -> None:
    viewer = _viewer()
    assert viewer.go_to_printed(1) is None
    assert viewer.step(1) is None
    assert viewer.begin_offset_edit() is None
    assert viewer.save_offset_edit() is None
    assert viewer.set_fragment("#page-1") is None
    snapshot = viewer.snapshot()
    assert snapshot.source is None
    assert snapshot.ready is False


def test_replacing_evidence_drops_marks_it_no_longer_supports() -> None:
    viewer = _viewer()
    viewer.set_evidence([{"pageNumber": 5, "pageText": "alpha beta"}])
    viewer.set_target_page(5)
    viewer.set_source("doc.pdf")
    asyncio.run(viewer.open(FakeRenderer(10, ALPHA_TEXTS)))
    assert viewer.surface.marked(5) == {0, 2}

    viewer.set_evidence([{"pageNumber": 5, "pageText": "Unrelated words here"}])
    assert viewer.surface.marked(5) == {1}

    viewer.set_evidence([])
    assert viewer.snapshot().marks == {}
