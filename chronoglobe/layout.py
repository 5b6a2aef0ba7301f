"""Chapter placement on the zoomable timeline axis.

Maps each chapter's year range into the current window as a horizontal
offset/width percentage, then stacks chapters that land close together.
"""

import calendar
import logging
import math
from collections.abc import Iterable

from chronoglobe.config import LayoutConfig
from chronoglobe.models import (
    AxisMarker,
    Chapter,
    ChapterPlacement,
    TimelineWindow,
    ZoomLevel,
    parse_iso,
)

logger = logging.getLogger(__name__)


# --- Windows and axis markers ---


def timeline_window(
    zoom_level: ZoomLevel,
    birth_year: int,
    current_year: int,
    view_year: int,
    years_radius: int = 10,
) -> TimelineWindow:
    """Visible year range for a zoom level and view-year cursor."""
    if zoom_level == ZoomLevel.DECADES:
        start = math.floor(birth_year / 10) * 10
        end = max(current_year, start)
    elif zoom_level == ZoomLevel.YEARS:
        start = max(birth_year, view_year - years_radius)
        end = min(current_year, view_year + years_radius)
        if start > end:
            # Cursor wandered outside the lifetime; show just the nearest year
            low, high = sorted((birth_year, current_year))
            start = end = min(max(view_year, low), high)
    else:
        start = end = view_year
    return TimelineWindow(zoom_level=zoom_level, start_year=start, end_year=end)


def axis_markers(window: TimelineWindow) -> list[AxisMarker]:
    if window.zoom_level == ZoomLevel.DECADES:
        return [
            AxisMarker(year=decade, label=f"{decade}s")
            for decade in range(window.start_year, window.end_year + 1, 10)
        ]
    if window.zoom_level == ZoomLevel.YEARS:
        return [
            AxisMarker(year=year, label=str(year))
            for year in range(window.start_year, window.end_year + 1)
        ]
    return [
        AxisMarker(year=window.start_year, month=month, label=calendar.month_abbr[month])
        for month in range(1, 13)
    ]


# --- Year resolution ---


def year_of(value: str | None) -> int | None:
    """Year of an ISO date string; also accepts a bare 'YYYY'."""
    dt = parse_iso(value)
    if dt is not None:
        return dt.year
    if value and value.strip()[:4].isdigit():
        return int(value.strip()[:4])
    return None


def chapter_years(chapter: Chapter, fallback_start: int, fallback_end: int) -> tuple[int, int]:
    """(start_year, end_year) with fallbacks for missing dates. Never inverted."""
    start = year_of(chapter.start_date)
    end = year_of(chapter.end_date)
    start = fallback_start if start is None else start
    end = fallback_end if end is None else end
    if start > end:
        logger.debug("Chapter %s has start after end; swapping", chapter.id)
        start, end = end, start
    return start, end


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return a_start <= b_end and b_start <= a_end


def is_visible(start_year: int, end_year: int, window: TimelineWindow) -> bool:
    return overlaps(start_year, end_year, window.start_year, window.end_year)


def format_date_range(chapter: Chapter, current_year: int) -> str:
    """Human label for a chapter's dates, e.g. '1995 - Present'."""
    start = year_of(chapter.start_date)
    end = year_of(chapter.end_date)
    if start is not None and end is not None:
        return f"{start} - {'Present' if end == current_year else end}"
    if start is not None:
        return f"From {start}"
    if end is not None:
        return f"Until {end}"
    return ""


# --- Placement ---


class ChapterTimelineLayout:
    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    def blob_size(self, memory_count: int) -> float:
        """Blob diameter in px: grows with memory count, clamped to [min, max]."""
        cfg = self.config
        size = cfg.blob_min_px + cfg.blob_px_per_memory * max(0, memory_count)
        return max(cfg.blob_min_px, min(size, cfg.blob_max_px))

    def top_px(self, placement: ChapterPlacement) -> int:
        return self.config.base_top_px + placement.vertical_slot * self.config.stack_unit_px

    def compute_placements(
        self,
        chapters: Iterable[Chapter],
        window: TimelineWindow,
        *,
        fallback_start: int,
        fallback_end: int,
        memory_counts: dict[str, int] | None = None,
    ) -> list[ChapterPlacement]:
        """Place every visible, well-formed chapter. Order follows the input."""
        cfg = self.config
        memory_counts = memory_counts or {}
        span = window.span_years
        placements: list[ChapterPlacement] = []

        for chapter in chapters:
            if not chapter.is_well_formed:
                logger.debug("Dropping malformed chapter %r", chapter.id)
                continue

            start, end = chapter_years(chapter, fallback_start, fallback_end)
            if not is_visible(start, end, window):
                continue

            clamped_start = max(start, window.start_year)
            clamped_end = min(end, window.end_year)
            if span <= 0:
                offset, width = cfg.min_offset_pct, 100.0
            else:
                offset = (clamped_start - window.start_year) / span * 100
                width = (clamped_end - clamped_start + 1) / span * 100
            offset = max(cfg.min_offset_pct, min(offset, cfg.max_offset_pct))

            slot = sum(
                1 for earlier in placements
                if abs(offset - earlier.horizontal_offset_pct) < cfg.stack_threshold_pct
            )

            count = memory_counts.get(chapter.id, 0)  # type: ignore[arg-type]
            placements.append(ChapterPlacement(
                chapter_id=chapter.id,  # type: ignore[arg-type]
                horizontal_offset_pct=offset,
                horizontal_width_pct=width,
                vertical_slot=slot,
                start_year=start,
                end_year=end,
                blob_size_px=self.blob_size(count),
                memory_count=count,
            ))

        logger.debug("Placed %d chapters in %s window %d-%d", len(placements),
                     window.zoom_level.value, window.start_year, window.end_year)
        return placements
