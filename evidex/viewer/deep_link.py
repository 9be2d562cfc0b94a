from __future__ import annotations

import re
from collections.abc import Callable

from evidex.core.evidence import parse_int
from evidex.viewer.state import SessionState


FRAGMENT_PATTERN = re.compile(r"^#?page-(?P<page>.+)$")


def parse_page_fragment(fragment: str | None) -> int | None:
    """``"#page-12"`` or ``"page-12"`` -> 12."""
    if not fragment:
        return None
    match = FRAGMENT_PATTERN.match(fragment.strip())
    if match is None:
        return None
    return parse_int(match.group("page"))


class DeepLinkListener:
    """Re-evaluates the external page signals whenever one of them, or readiness, changes.

    Requests made before the document is ready are dropped; only the latest
    signal values are looked at again once readiness flips.
    """

    def __init__(
        self,
        state: SessionState,
        *,
        is_ready: Callable[[], bool],
        navigate: Callable[[int], int | None],
    ):
        self.state = state
        self.is_ready = is_ready
        self.navigate = navigate

    def _try_fragment(self) -> int | None:
        printed = parse_page_fragment(self.state.fragment)
        if printed is None or not self.is_ready():
            return None
        return self.navigate(printed)

    def _try_target(self) -> int | None:
        printed = self.state.requested_page
        if printed is None or not self.is_ready():
            return None
        return self.navigate(printed)

    def on_fragment_changed(self, fragment: str | None) -> int | None:
        self.state.fragment = fragment
        return self._try_fragment()

    def on_target_changed(self, printed: int | None) -> int | None:
        self.state.requested_page = printed
        return self._try_target()

    def reevaluate(self) -> int | None:
        """Session start and readiness transitions: fragment first, then target page."""
        from_fragment = self._try_fragment()
        from_target = self._try_target()
        return from_target if from_target is not None else from_fragment
