"""Zoom level and view-year cursor for the timeline axis."""

import logging

from chronoglobe.intents import IntentBus, ZoomChanged
from chronoglobe.models import ZoomLevel

logger = logging.getLogger(__name__)

_ORDER = [ZoomLevel.DECADES, ZoomLevel.YEARS, ZoomLevel.MONTHS]


class ZoomNavigator:
    """Tracks zoom level + view year and emits ZoomChanged on every change."""

    def __init__(
        self,
        current_year: int,
        bus: IntentBus | None = None,
        zoom_level: ZoomLevel = ZoomLevel.DECADES,
    ) -> None:
        self.current_year = current_year
        self.bus = bus
        self.zoom_level = zoom_level
        self.view_year = current_year

    @property
    def can_zoom_in(self) -> bool:
        return self.zoom_level != ZoomLevel.MONTHS

    @property
    def can_zoom_out(self) -> bool:
        return self.zoom_level != ZoomLevel.DECADES

    def zoom_in(self) -> bool:
        if not self.can_zoom_in:
            return False
        if self.zoom_level == ZoomLevel.DECADES:
            self.view_year = self.current_year
        self.zoom_level = _ORDER[_ORDER.index(self.zoom_level) + 1]
        self._changed()
        return True

    def zoom_out(self) -> bool:
        if not self.can_zoom_out:
            return False
        self.zoom_level = _ORDER[_ORDER.index(self.zoom_level) - 1]
        if self.zoom_level == ZoomLevel.DECADES:
            self.view_year = self.current_year
        self._changed()
        return True

    def navigate(self, direction: int) -> None:
        """Step the view year; direction is +1 (next) or -1 (prev)."""
        step = 10 if self.zoom_level == ZoomLevel.DECADES else 1
        self.view_year += step if direction > 0 else -step
        self._changed()

    def navigate_next(self) -> None:
        self.navigate(1)

    def navigate_prev(self) -> None:
        self.navigate(-1)

    @property
    def label(self) -> str:
        if self.zoom_level == ZoomLevel.DECADES:
            return "Decades View"
        if self.zoom_level == ZoomLevel.YEARS:
            return f"Years View (around {self.view_year})"
        return f"Monthly View • {self.view_year}"

    def _changed(self) -> None:
        logger.debug("Zoom now %s at %d", self.zoom_level.value, self.view_year)
        if self.bus is not None:
            self.bus.emit(ZoomChanged(zoom_level=self.zoom_level, view_year=self.view_year))
