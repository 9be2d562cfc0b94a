from evidex.viewer.navigation import NavigationController
from evidex.viewer.offset import PageOffsetResolver
from evidex.viewer.state import SessionState
from evidex.viewer.surface import SCROLL_HISTORY, PageSurface


def _controller(total_pages: int | None = 10, offset: int = 0) -> tuple[NavigationController, PageSurface]:
    state = SessionState(source="doc.pdf", total_pages=total_pages, offset=offset)
    surface = PageSurface()
    return NavigationController(state, PageOffsetResolver(state), surface), surface


def test_go_to_printed_applies_offset() -> None:
    controller, surface = _controller(offset=-2)
    assert controller.go_to_printed(7) == 5
    assert list(surface.scroll_requests) == ["page_5"]
    assert controller.state.current_page == 5
    assert controller.state.target_page == 5


def test_go_to_printed_parses_text_input() -> None:
    controller, surface = _controller()
    assert controller.go_to_printed(" 3 ") == 3
    assert surface.visible_page == 3


def test_out_of_range_and_invalid_requests_change_nothing() -> None:
    controller, surface = _controller(offset=-2)
    for value in (2, 13, 0, "abc", "4.5", None, ""):
        assert controller.go_to_printed(value) is None
    assert list(surface.scroll_requests) == []
    assert controller.state.current_page is None
    assert controller.state.target_page is None


def test_no_navigation_before_page_count_is_known() -> None:
    controller, surface = _controller(total_pages=None)
    assert controller.go_to_printed(1) is None
    assert controller.step(1) is None
    assert list(surface.scroll_requests) == []


def test_step_moves_one_page_and_clamps() -> None:
    controller, surface = _controller(total_pages=3)
    assert controller.step(1) == 2
    assert controller.step(5) == 3
    assert controller.step(1) == 3
    assert controller.step(-1) == 2
    assert controller.step(-1) == 1
    assert controller.step(-1) == 1
    assert controller.step(0) is None
    assert list(surface.scroll_requests) == ["page_2", "page_3", "page_3", "page_2", "page_1", "page_1"]


def test_step_does_not_move_the_highlight_target() -> None:
    controller, _ = _controller()
    controller.go_to_printed(4)
    controller.step(1)
    assert controller.state.current_page == 5
    assert controller.state.target_page == 4


def test_scroll_history_is_bounded() -> None:
    controller, surface = _controller(total_pages=3)
    for _ in range(SCROLL_HISTORY + 10):
        controller.step(1)
    assert len(surface.scroll_requests) == SCROLL_HISTORY
    assert surface.visible_page == 3
