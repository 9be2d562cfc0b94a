from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from evidex.core.pdf_tools import TextFragment


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentLoaded:
    session_id: str
    total_pages: int


@dataclass(frozen=True)
class DocumentLoadFailed:
    session_id: str
    error: str


@dataclass(frozen=True)
class PageRendered:
    session_id: str
    page: int


@dataclass(frozen=True)
class TextLayerRendered:
    session_id: str
    page: int
    fragments: tuple[TextFragment, ...]


Handler = Callable[[Any], None]


class EventBus:
    """Routes render events to the handlers of the session that produced them.

    Events for a session with no live subscriptions are dropped, so a
    discarded document's late completions cannot reach its replacement.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, dict[type, list[Handler]]] = defaultdict(lambda: defaultdict(list))

    def subscribe(self, session_id: str, event_type: type, handler: Handler) -> None:
        self._handlers[session_id][event_type].append(handler)

    def unsubscribe_session(self, session_id: str) -> None:
        self._handlers.pop(session_id, None)

    def has_subscribers(self, session_id: str) -> bool:
        return session_id in self._handlers

    def publish(self, event: Any) -> int:
        session_handlers = self._handlers.get(event.session_id)
        if not session_handlers:
            logger.debug("Dropping %s for inactive session %s", type(event).__name__, event.session_id)
            return 0
        handlers = list(session_handlers.get(type(event), ()))
        for handler in handlers:
            handler(event)
        return len(handlers)
