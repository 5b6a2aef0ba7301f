"""Feed and sidebar views over the same chapters/memories snapshot."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from chronoglobe.layout import format_date_range, year_of
from chronoglobe.models import Chapter, Memory


@dataclass
class FeedGroup:
    key: str
    label: str
    memories: list[Memory] = field(default_factory=list)


@dataclass
class SidebarEntry:
    chapter: Chapter
    date_label: str
    memory_count: int
    badge: str  # last two digits of the start year, or "?"


def reverse_chronological(memories: Iterable[Memory]) -> list[Memory]:
    """Newest first; memories without a timestamp go last in input order."""
    dated = [m for m in memories if m.created_dt is not None]
    undated = [m for m in memories if m.created_dt is None]
    dated.sort(key=lambda m: _naive(m.created_dt), reverse=True)  # type: ignore[arg-type]
    return dated + undated


def _naive(dt: datetime) -> datetime:
    """Aware datetimes become naive UTC; naive ones are taken as-is."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.replace(tzinfo=None)


def _group_for(day: date, today: date) -> tuple[str, str]:
    if day == today:
        return "today", "Today"
    if day == today - timedelta(days=1):
        return "yesterday", "Yesterday"
    if day >= today - timedelta(days=7):
        return f"week-{day.isoformat()}", f"{day:%A} {day.day} {day:%b}"
    if day >= today.replace(day=1):
        return f"month-{day.month}-{day.year}", f"{day.day} {day:%B}"
    return day.isoformat(), f"{day:%A} {day.day} {day:%B} {day.year}"


def group_feed(memories: Iterable[Memory], today: date) -> list[FeedGroup]:
    """Group memories newest-first into Today / Yesterday / this week / this month / older."""
    groups: dict[str, FeedGroup] = {}
    for memory in reverse_chronological(memories):
        dt = memory.created_dt
        if dt is None:
            key, label = "undated", "Undated"
        else:
            key, label = _group_for(dt.date(), today)
        groups.setdefault(key, FeedGroup(key=key, label=label)).memories.append(memory)
    return list(groups.values())


def chapter_sidebar(
    chapters: Iterable[Chapter],
    memories: Iterable[Memory],
    current_year: int,
) -> list[SidebarEntry]:
    """Well-formed chapters sorted by start date (undated last) with memory counts."""
    counts: dict[str, int] = {}
    for memory in memories:
        if memory.chapter_id:
            counts[memory.chapter_id] = counts.get(memory.chapter_id, 0) + 1

    valid = [c for c in chapters if c.is_well_formed]
    valid.sort(key=lambda c: (year_of(c.start_date) is None, c.start_date or ""))

    entries = []
    for chapter in valid:
        start = year_of(chapter.start_date)
        entries.append(SidebarEntry(
            chapter=chapter,
            date_label=format_date_range(chapter, current_year),
            memory_count=counts.get(chapter.id, 0),  # type: ignore[arg-type]
            badge=str(start)[-2:] if start is not None else "?",
        ))
    return entries


def summary_line(memory_count: int, chapter_count: int) -> str:
    memories = "memory" if memory_count == 1 else "memories"
    chapters = "chapter" if chapter_count == 1 else "chapters"
    return f"{memory_count} {memories} across {chapter_count} {chapters}"
