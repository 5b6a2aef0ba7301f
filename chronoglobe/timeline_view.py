"""Top-level composition: zoom axis, chapter placements, and the disclosed globe."""

import logging
import random
from dataclasses import dataclass, field
from datetime import date

from chronoglobe.config import Config
from chronoglobe.feed import summary_line
from chronoglobe.globe_view import GlobeFrame, GlobeView
from chronoglobe.hover import HoverIntentController
from chronoglobe.intents import AppView, CreateMemory, IntentBus, OpenChapter, ViewModeSwitched
from chronoglobe.layout import (
    ChapterTimelineLayout,
    axis_markers,
    format_date_range,
    timeline_window,
)
from chronoglobe.models import (
    AxisMarker,
    Chapter,
    ChapterPlacement,
    DisclosureState,
    Memory,
    Region,
    TimelineWindow,
)
from chronoglobe.scheduler import Scheduler
from chronoglobe.sphere import DistributionCache, SphereDistributor
from chronoglobe.zoom import ZoomNavigator

logger = logging.getLogger(__name__)


@dataclass
class ChapterCard:
    chapter: Chapter
    placement: ChapterPlacement
    top_px: int
    date_label: str
    state: DisclosureState
    thumbnails: list[Memory] = field(default_factory=list)
    overflow_count: int = 0


@dataclass
class TimelineFrame:
    window: TimelineWindow
    markers: list[AxisMarker]
    cards: list[ChapterCard]
    zoom_label: str
    summary: str
    birth_year: int
    current_year: int
    disclosed: GlobeFrame | None = None


class TimelineView:
    """Owns the hover controller, zoom cursor and the single mounted GlobeView.

    Chapters and memories are a read-only snapshot; call update() when the
    host has a new one.
    """

    def __init__(
        self,
        chapters: list[Chapter],
        memories: list[Memory],
        *,
        scheduler: Scheduler,
        birth_year: int | None = None,
        current_year: int | None = None,
        config: Config | None = None,
        bus: IntentBus | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or Config()
        self.scheduler = scheduler
        self.bus = bus or IntentBus()
        self.rng = rng
        self.birth_year = birth_year or self.config.layout.default_birth_year
        self.current_year = current_year or date.today().year

        self.layout = ChapterTimelineLayout(self.config.layout)
        self.zoom = ZoomNavigator(self.current_year, self.bus)
        self.hover = HoverIntentController(scheduler, self.config.hover)
        self.hover.subscribe(self._on_disclosure)
        self.distributor = SphereDistributor(self.config.globe)
        self.cache = (
            DistributionCache(self.distributor) if self.config.globe.stable_positions else None
        )
        self.globe: GlobeView | None = None

        self.chapters: list[Chapter] = []
        self.memories: list[Memory] = []
        self.update(chapters, memories)

    # --- Snapshot ---

    def update(self, chapters: list[Chapter], memories: list[Memory]) -> None:
        previous = self._memory_ids(self.globe.chapter_id) if self.globe else None
        self.chapters = list(chapters)
        self.memories = list(memories)
        self._by_id = {c.id: c for c in self.chapters if c.is_well_formed}

        disclosed = self.hover.disclosed_chapter_id
        if disclosed is not None and disclosed not in self._by_id:
            logger.info("Disclosed chapter %s left the snapshot; hiding", disclosed)
            self.hover.hide_now(disclosed)
        elif self.globe is not None and self._memory_ids(self.globe.chapter_id) != previous:
            # Memory set changed under the open globe: regenerate its points
            mode = self.globe.view_mode
            self._mount_globe(self.globe.chapter_id)
            if self.globe is not None:
                self.globe.restore_view_mode(mode)

    def memories_for(self, chapter_id: str) -> list[Memory]:
        return [m for m in self.memories if m.chapter_id == chapter_id]

    def _memory_ids(self, chapter_id: str) -> list[str]:
        return [m.id for m in self.memories_for(chapter_id)]

    # --- Layout ---

    @property
    def window(self) -> TimelineWindow:
        return timeline_window(
            self.zoom.zoom_level, self.birth_year, self.current_year,
            self.zoom.view_year, self.config.layout.years_window_radius,
        )

    def placements(self) -> list[ChapterPlacement]:
        counts: dict[str, int] = {}
        for memory in self.memories:
            if memory.chapter_id:
                counts[memory.chapter_id] = counts.get(memory.chapter_id, 0) + 1
        return self.layout.compute_placements(
            self.chapters, self.window,
            fallback_start=self.birth_year,
            fallback_end=self.current_year,
            memory_counts=counts,
        )

    # --- Disclosure ---

    def _on_disclosure(self, chapter_id: str, state: DisclosureState) -> None:
        if state == DisclosureState.HIDDEN:
            if self.globe is not None and self.globe.chapter_id == chapter_id:
                self.globe.unmount()
                self.globe = None
            return
        self._mount_globe(chapter_id)

    def _mount_globe(self, chapter_id: str) -> None:
        if self.globe is not None:
            self.globe.unmount()
            self.globe = None
        chapter = self._by_id.get(chapter_id)
        if chapter is None:
            logger.warning("Disclosure for unknown chapter %s ignored", chapter_id)
            return
        self.globe = GlobeView(
            chapter, self.memories_for(chapter_id),
            scheduler=self.scheduler,
            hover=self.hover,
            bus=self.bus,
            config=self.config,
            distributor=self.distributor,
            cache=self.cache,
            rng=self.rng,
        )
        self.globe.mount()

    # --- Pointer / intent input ---

    def enter_blob(self, chapter_id: str) -> None:
        self.hover.pointer_enter(chapter_id, Region.BLOB)

    def leave_blob(self, chapter_id: str) -> None:
        self.hover.pointer_leave(chapter_id, Region.BLOB)

    def enter_badge(self, chapter_id: str) -> None:
        self.hover.pointer_enter(chapter_id, Region.BADGE)

    def leave_badge(self, chapter_id: str) -> None:
        self.hover.pointer_leave(chapter_id, Region.BADGE)

    def tap_chapter(self, chapter_id: str) -> DisclosureState:
        return self.hover.tap(chapter_id)

    def select_chapter(self, chapter_id: str) -> None:
        self.bus.emit(OpenChapter(chapter_id=chapter_id))

    def add_memory(self, chapter_id: str | None = None) -> None:
        chapter = self._by_id.get(chapter_id) if chapter_id else None
        self.bus.emit(CreateMemory(
            chapter_id=chapter_id,
            chapter_title=chapter.title if chapter else None,
        ))

    def switch_view(self, view: AppView) -> None:
        self.bus.emit(ViewModeSwitched(view=view))

    def close(self) -> None:
        """Hide everything and cancel outstanding timers and frames."""
        self.hover.dispose()
        if self.globe is not None:
            self.globe.unmount()
            self.globe = None

    # --- Rendering ---

    def render(self) -> TimelineFrame:
        window = self.window
        thumbs = self.config.render.card_thumbnails
        cards: list[ChapterCard] = []
        for placement in self.placements():
            chapter = self._by_id[placement.chapter_id]
            chapter_memories = self.memories_for(placement.chapter_id)
            cards.append(ChapterCard(
                chapter=chapter,
                placement=placement,
                top_px=self.layout.top_px(placement),
                date_label=format_date_range(chapter, self.current_year),
                state=self.hover.state_of(placement.chapter_id),
                thumbnails=chapter_memories[:thumbs],
                overflow_count=max(0, len(chapter_memories) - thumbs),
            ))

        return TimelineFrame(
            window=window,
            markers=axis_markers(window),
            cards=cards,
            zoom_label=self.zoom.label,
            summary=summary_line(len(self.memories), len(self._by_id)),
            birth_year=self.birth_year,
            current_year=self.current_year,
            disclosed=self.globe.render() if self.globe is not None else None,
        )
