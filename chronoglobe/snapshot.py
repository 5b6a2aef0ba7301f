"""Load a chapters/memories snapshot exported by the host app.

Accepts YAML or JSON with `birth_year`, `chapters` and `memories` keys. The
web app's camelCase keys and nested `media` lists are normalised here.
Entries that fail validation are skipped with a warning.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from chronoglobe.models import Chapter, Memory, MediaType

logger = logging.getLogger(__name__)

_ID_FIELDS = ("id", "chapter_id", "chapterId", "timeZoneId")
_DATE_FIELDS = ("startDate", "start_date", "endDate", "end_date", "createdAt", "created_at")


class SnapshotError(ValueError):
    """Snapshot file missing or not a mapping."""


@dataclass
class Snapshot:
    chapters: list[Chapter] = field(default_factory=list)
    memories: list[Memory] = field(default_factory=list)
    birth_year: int | None = None
    skipped: int = 0


def _stringify_ids(raw: dict[str, Any]) -> dict[str, Any]:
    out = dict(raw)
    for key in _ID_FIELDS:
        if isinstance(out.get(key), int):
            out[key] = str(out[key])
    for key in _DATE_FIELDS:
        value = out.get(key)
        # YAML turns unquoted dates into date/datetime and bare years into int
        if isinstance(value, date):
            out[key] = value.isoformat()
        elif isinstance(value, int) and not isinstance(value, bool):
            out[key] = str(value)
    return out


def _normalise_memory(raw: dict[str, Any]) -> dict[str, Any]:
    out = _stringify_ids(raw)
    media = out.pop("media", None) or []
    if media and isinstance(media, list) and isinstance(media[0], dict):
        first = media[0]
        out.setdefault("thumbnailUrl", first.get("thumbnail_url") or first.get("storage_url"))
        kind = str(first.get("type", "")).lower()
        out.setdefault("mediaType", kind if kind in MediaType._value2member_map_ else "file")
        out.setdefault("mediaCount", len(media))
    if isinstance(out.get("mediaType"), str):
        out["mediaType"] = out["mediaType"].lower()
    return out


def _birth_year(data: dict[str, Any]) -> int | None:
    raw = data.get("birth_year", data.get("birthYear"))
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring birth year %r: not a number", raw)
        return None


def parse_snapshot(data: dict[str, Any]) -> Snapshot:
    snap = Snapshot(birth_year=_birth_year(data))

    for raw in data.get("chapters") or data.get("timeZones") or []:
        if not isinstance(raw, dict):
            snap.skipped += 1
            continue
        try:
            snap.chapters.append(Chapter.model_validate(_stringify_ids(raw)))
        except ValidationError as e:
            logger.warning("Skipping chapter %r: %s", raw.get("id"), e.error_count())
            snap.skipped += 1

    for raw in data.get("memories") or []:
        if not isinstance(raw, dict):
            snap.skipped += 1
            continue
        try:
            snap.memories.append(Memory.model_validate(_normalise_memory(raw)))
        except ValidationError as e:
            logger.warning("Skipping memory %r: %s", raw.get("id"), e.error_count())
            snap.skipped += 1

    logger.info("Loaded %d chapters, %d memories (%d skipped)",
                len(snap.chapters), len(snap.memories), snap.skipped)
    return snap


def load_snapshot(path: Path) -> Snapshot:
    if not path.exists():
        raise SnapshotError(f"Snapshot not found: {path}")
    text = path.read_text()
    try:
        data = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SnapshotError(f"Could not parse snapshot {path}: {e}") from e
    if not isinstance(data, dict):
        raise SnapshotError(f"Snapshot {path} must be a mapping, got {type(data).__name__}")
    return parse_snapshot(data)
