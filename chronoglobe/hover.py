"""Hover intent: which chapter's globe is disclosed, with debounced hiding.

A chapter has three pointer regions (blob, count badge, floating globe
container). The globe container can sit away from the blob, so leaving one
region only schedules a hide; the hide is dropped if, when the timer fires,
the pointer is inside any region of that chapter again.

At most one chapter is disclosed at a time. The slot is owned here and only
changed through the transition methods below.
"""

import logging
from collections import defaultdict
from collections.abc import Callable

from chronoglobe.config import HoverConfig
from chronoglobe.models import DisclosureState, Region
from chronoglobe.scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

DisclosureListener = Callable[[str, DisclosureState], None]
MemoryHoverListener = Callable[[bool], None]


class HoverIntentController:
    def __init__(self, scheduler: Scheduler, config: HoverConfig | None = None) -> None:
        self.scheduler = scheduler
        self.config = config or HoverConfig()
        self._disclosed: str | None = None
        self._inside: dict[str, set[Region]] = defaultdict(set)
        self._hide_timers: dict[str, TimerHandle] = {}
        self._hovered_memories: set[str] = set()
        self._listeners: list[DisclosureListener] = []
        self._memory_listeners: list[MemoryHoverListener] = []

    # --- Read-only projection ---

    @property
    def disclosed_chapter_id(self) -> str | None:
        return self._disclosed

    @property
    def any_memory_hovered(self) -> bool:
        return bool(self._hovered_memories)

    def state_of(self, chapter_id: str) -> DisclosureState:
        if self._disclosed == chapter_id:
            return DisclosureState.DISCLOSED
        return DisclosureState.HIDDEN

    def is_inside(self, chapter_id: str, region: Region | None = None) -> bool:
        regions = self._inside.get(chapter_id, set())
        return bool(regions) if region is None else region in regions

    def has_pending_hide(self, chapter_id: str) -> bool:
        handle = self._hide_timers.get(chapter_id)
        return handle is not None and handle.pending

    # --- Subscriptions ---

    def subscribe(self, listener: DisclosureListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def subscribe_memory_hover(self, listener: MemoryHoverListener) -> Callable[[], None]:
        self._memory_listeners.append(listener)
        return lambda: (
            self._memory_listeners.remove(listener) if listener in self._memory_listeners else None
        )

    # --- Pointer events ---

    def pointer_enter(self, chapter_id: str, region: Region) -> None:
        self._inside[chapter_id].add(region)
        self._cancel_hide(chapter_id)
        self._disclose(chapter_id)

    def pointer_leave(self, chapter_id: str, region: Region) -> None:
        regions = self._inside.get(chapter_id)
        if regions is not None:
            regions.discard(region)
            if not regions:
                del self._inside[chapter_id]
        if self._disclosed != chapter_id:
            return
        if region == Region.GLOBE:
            delay = self.config.globe_hide_delay_ms
        else:
            delay = self.config.blob_hide_delay_ms
        self._schedule_hide(chapter_id, delay)

    def tap(self, chapter_id: str) -> DisclosureState:
        """Touch input: a single tap toggles the chapter."""
        if self._disclosed == chapter_id:
            self._hide(chapter_id)
        else:
            self._disclose(chapter_id)
        return self.state_of(chapter_id)

    def memory_enter(self, memory_id: str) -> None:
        was_hovered = self.any_memory_hovered
        self._hovered_memories.add(memory_id)
        if not was_hovered:
            self._notify_memory_hover(True)

    def memory_leave(self, memory_id: str) -> None:
        if memory_id not in self._hovered_memories:
            return
        self._hovered_memories.discard(memory_id)
        if not self._hovered_memories:
            self._notify_memory_hover(False)

    def hide_now(self, chapter_id: str | None = None) -> None:
        target = chapter_id or self._disclosed
        if target is not None:
            self._hide(target)

    def dispose(self) -> None:
        """Cancel all timers and hide whatever is disclosed."""
        for handle in self._hide_timers.values():
            handle.cancel()
        self._hide_timers.clear()
        self.hide_now()
        self._inside.clear()

    # --- Transitions ---

    def _disclose(self, chapter_id: str) -> None:
        if self._disclosed == chapter_id:
            return
        if self._disclosed is not None:
            self._hide(self._disclosed)
        self._disclosed = chapter_id
        logger.debug("Disclosed chapter %s", chapter_id)
        self._notify(chapter_id, DisclosureState.DISCLOSED)

    def _hide(self, chapter_id: str) -> None:
        self._cancel_hide(chapter_id)
        if self._disclosed != chapter_id:
            return
        self._disclosed = None
        if self._hovered_memories:
            self._hovered_memories.clear()
            self._notify_memory_hover(False)
        logger.debug("Hid chapter %s", chapter_id)
        self._notify(chapter_id, DisclosureState.HIDDEN)

    def _schedule_hide(self, chapter_id: str, delay_ms: float) -> None:
        self._cancel_hide(chapter_id)

        def fire() -> None:
            self._on_hide_timer(chapter_id, handle)

        handle = self.scheduler.call_later(delay_ms, fire)
        self._hide_timers[chapter_id] = handle

    def _on_hide_timer(self, chapter_id: str, handle: TimerHandle) -> None:
        if self._hide_timers.get(chapter_id) is not handle:
            return  # superseded
        del self._hide_timers[chapter_id]
        if self._disclosed != chapter_id:
            return
        if self._inside.get(chapter_id):
            logger.debug("Hide of %s dropped: pointer still inside %s",
                         chapter_id, sorted(r.value for r in self._inside[chapter_id]))
            return
        self._hide(chapter_id)

    def _cancel_hide(self, chapter_id: str) -> None:
        handle = self._hide_timers.pop(chapter_id, None)
        if handle is not None:
            handle.cancel()

    def _notify(self, chapter_id: str, state: DisclosureState) -> None:
        for listener in list(self._listeners):
            listener(chapter_id, state)

    def _notify_memory_hover(self, hovered: bool) -> None:
        for listener in list(self._memory_listeners):
            listener(hovered)
