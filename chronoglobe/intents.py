"""Typed intent channel from the timeline/globe core to the host application.

Leaf components publish intents on an IntentBus instead of calling
optional callbacks threaded down the view hierarchy. The host subscribes to
the intent types it handles.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from enum import Enum
from typing import TypeVar

from pydantic import BaseModel

from chronoglobe.models import ViewMode, ZoomLevel

logger = logging.getLogger(__name__)


class AppView(str, Enum):
    CHAPTERS = "chapters"
    FEED = "feed"
    TIMELINE = "timeline"


class Intent(BaseModel):
    """Base class for everything emitted upward."""


class OpenMemory(Intent):
    memory_id: str
    chapter_id: str | None = None


class OpenChapter(Intent):
    chapter_id: str


class CreateMemory(Intent):
    chapter_id: str | None = None
    chapter_title: str | None = None


class ZoomChanged(Intent):
    zoom_level: ZoomLevel
    view_year: int


class ViewModeSwitched(Intent):
    view: AppView


class ChapterViewModeChanged(Intent):
    chapter_id: str
    mode: ViewMode


IntentT = TypeVar("IntentT", bound=Intent)


class IntentBus:
    """Synchronous publish/subscribe keyed by intent type.

    Subscribers registered for a base class also receive its subclasses.
    A subscriber that raises is logged and skipped; delivery continues.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type[Intent], list[Callable[[Intent], None]]] = defaultdict(list)
        self.history: list[Intent] = []

    def subscribe(self, intent_type: type[IntentT], handler: Callable[[IntentT], None]) -> Callable[[], None]:
        """Register handler. Returns an unsubscribe function."""
        self._subscribers[intent_type].append(handler)  # type: ignore[arg-type]

        def unsubscribe() -> None:
            handlers = self._subscribers.get(intent_type, [])
            if handler in handlers:
                handlers.remove(handler)  # type: ignore[arg-type]

        return unsubscribe

    def emit(self, intent: Intent) -> int:
        """Deliver intent to matching subscribers. Returns the delivery count."""
        self.history.append(intent)
        delivered = 0
        for intent_type, handlers in list(self._subscribers.items()):
            if not isinstance(intent, intent_type):
                continue
            for handler in list(handlers):
                try:
                    handler(intent)
                    delivered += 1
                except Exception:
                    logger.exception("Intent handler failed for %s", type(intent).__name__)
        logger.debug("Emitted %r to %d handlers", intent, delivered)
        return delivered
