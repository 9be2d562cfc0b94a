from __future__ import annotations

import logging
from collections.abc import Sequence

from evidex.viewer.offset import PageOffsetResolver
from evidex.viewer.state import SessionState
from evidex.viewer.surface import RenderSurface


logger = logging.getLogger(__name__)


def normalize(text: str) -> str:
    return text.casefold()


def matching_fragments(fragment_texts: Sequence[str], evidence_texts: Sequence[str]) -> list[int]:
    """Indices of fragments contained in at least one evidence text.

    The fragment is the needle: text layers split sentences into small pieces
    that never line up with a whole evidence snippet. There is no minimum
    fragment length, so short common fragments can match unrelated evidence.
    """
    haystacks = [normalize(text) for text in evidence_texts if text]
    matched: list[int] = []
    for index, text in enumerate(fragment_texts):
        if not text:
            continue
        needle = normalize(text)
        if needle and any(needle in haystack for haystack in haystacks):
            matched.append(index)
    return matched


class EvidenceHighlightMatcher:
    def __init__(self, state: SessionState, offsets: PageOffsetResolver, surface: RenderSurface):
        self.state = state
        self.offsets = offsets
        self.surface = surface

    def evidence_for_page(self, actual: int) -> list[str]:
        return [
            entry.text
            for entry in self.state.evidence
            if self.offsets.to_actual(entry.printed_page) == actual
        ]

    def on_text_layer_rendered(self, page: int, fragment_texts: Sequence[str]) -> list[int]:
        if page != self.state.target_page:
            return []

        evidence_texts = self.evidence_for_page(page)
        if not evidence_texts:
            return []

        matched = matching_fragments(fragment_texts, evidence_texts)
        if matched:
            logger.debug("Marking %d fragment(s) on page %d", len(matched), page)
            self.surface.mark_fragments(page, matched)
        return matched
