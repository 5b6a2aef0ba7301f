"""Disclosure content for one chapter: a rotating memory globe or a plain list."""

import logging
import random
from dataclasses import dataclass, field

from chronoglobe.config import Config
from chronoglobe.feed import reverse_chronological
from chronoglobe.hover import HoverIntentController
from chronoglobe.intents import (
    ChapterViewModeChanged,
    CreateMemory,
    IntentBus,
    OpenChapter,
    OpenMemory,
)
from chronoglobe.models import (
    Chapter,
    Memory,
    ProjectedPoint,
    Region,
    RotationState,
    SpherePoint,
    ViewMode,
)
from chronoglobe.rotation import RotationEngine
from chronoglobe.scheduler import Scheduler
from chronoglobe.sphere import DistributionCache, SphereDistributor

logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "No memories yet"


@dataclass
class GlobeItem:
    memory: Memory
    point: ProjectedPoint


@dataclass
class GlobeFrame:
    """What to draw for the disclosed chapter at one instant."""
    chapter_id: str
    title: str
    mode: ViewMode
    memory_count: int
    rotation: RotationState
    items: list[GlobeItem] = field(default_factory=list)  # far to near
    list_items: list[Memory] = field(default_factory=list)
    unplotted_count: int = 0
    empty_message: str | None = None


class GlobeView:
    """Composes sphere distribution, rotation and hover input for one chapter.

    Created when a chapter is disclosed and unmounted when it is hidden, so
    its view mode starts from the configured default on every disclosure.
    """

    def __init__(
        self,
        chapter: Chapter,
        memories: list[Memory],
        *,
        scheduler: Scheduler,
        hover: HoverIntentController,
        bus: IntentBus,
        config: Config | None = None,
        distributor: SphereDistributor | None = None,
        cache: DistributionCache | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or Config()
        self.chapter = chapter
        self.chapter_id: str = chapter.id or ""
        self.memories = list(memories)
        self.hover = hover
        self.bus = bus
        self.view_mode = self.config.globe.default_view_mode
        self.rotation = RotationEngine(scheduler, self.config.globe)
        self.mounted = False
        self._unsubscribe = None

        distributor = distributor or SphereDistributor(self.config.globe)
        self.plotted = self.memories[: distributor.point_count(len(self.memories))]
        if cache is not None:
            self.points: list[SpherePoint] = cache.get(
                self.chapter_id, [m.id for m in self.memories], rng,
            )
        else:
            self.points = distributor.distribute(len(self.memories), rng)

    # --- Lifecycle ---

    def mount(self) -> None:
        if self.mounted:
            return
        self.mounted = True
        self._unsubscribe = self.hover.subscribe_memory_hover(self.rotation.set_memory_hovered)
        self.rotation.set_memory_hovered(self.hover.any_memory_hovered)
        self._sync_rotation()
        logger.debug("Mounted globe for %s (%d points)", self.chapter_id, len(self.points))

    def unmount(self) -> None:
        if not self.mounted:
            return
        self.mounted = False
        self.rotation.dispose()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        logger.debug("Unmounted globe for %s", self.chapter_id)

    def _sync_rotation(self) -> None:
        show_globe = self.mounted and self.view_mode == ViewMode.GLOBE and bool(self.points)
        self.rotation.set_disclosed(show_globe)

    # --- View mode ---

    def set_view_mode(self, mode: ViewMode) -> None:
        if mode == self.view_mode:
            return
        self.view_mode = mode
        self._sync_rotation()
        self.bus.emit(ChapterViewModeChanged(chapter_id=self.chapter_id, mode=mode))

    def restore_view_mode(self, mode: ViewMode) -> None:
        """Carry a mode over to a regenerated globe without emitting an intent."""
        self.view_mode = mode
        self._sync_rotation()

    def toggle_view_mode(self) -> ViewMode:
        self.set_view_mode(ViewMode.LIST if self.view_mode == ViewMode.GLOBE else ViewMode.GLOBE)
        return self.view_mode

    # --- Pointer input ---

    def pointer_enter(self) -> None:
        self.hover.pointer_enter(self.chapter_id, Region.GLOBE)

    def pointer_move(self, nx: float, ny: float) -> bool:
        """Pointer at normalised offset (nx, ny) from the globe centre."""
        if self.view_mode != ViewMode.GLOBE:
            return False
        return self.rotation.drag_to(nx, ny)

    def pointer_leave(self) -> None:
        self.rotation.pointer_leave()
        self.hover.pointer_leave(self.chapter_id, Region.GLOBE)

    def memory_enter(self, memory_id: str) -> None:
        self.hover.memory_enter(memory_id)

    def memory_leave(self, memory_id: str) -> None:
        self.hover.memory_leave(memory_id)

    def click_memory(self, memory_id: str) -> None:
        self.bus.emit(OpenMemory(memory_id=memory_id, chapter_id=self.chapter_id))

    def click_title(self) -> None:
        self.bus.emit(OpenChapter(chapter_id=self.chapter_id))

    def click_add_memory(self) -> None:
        self.bus.emit(CreateMemory(chapter_id=self.chapter_id, chapter_title=self.chapter.title))

    # --- Rendering ---

    def render(self) -> GlobeFrame:
        frame = GlobeFrame(
            chapter_id=self.chapter_id,
            title=self.chapter.title or "",
            mode=self.view_mode,
            memory_count=len(self.memories),
            rotation=self.rotation.state.model_copy(),
        )
        if not self.memories:
            frame.empty_message = EMPTY_MESSAGE
            return frame

        if self.view_mode == ViewMode.LIST:
            frame.list_items = reverse_chronological(self.memories)
            return frame

        projected = self.rotation.project(self.points)
        items = [
            GlobeItem(memory=self.plotted[p.index], point=p)
            for p in projected if p.index < len(self.plotted)
        ]
        items.sort(key=lambda item: item.point.z)
        frame.items = items
        frame.unplotted_count = len(self.memories) - len(self.plotted)
        return frame
