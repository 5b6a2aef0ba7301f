"""Pydantic models for the chapter timeline and memory globe."""

from datetime import datetime
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class ZoomLevel(str, Enum):
    DECADES = "decades"
    YEARS = "years"
    MONTHS = "months"


class DisclosureState(str, Enum):
    HIDDEN = "hidden"
    DISCLOSED = "disclosed"


class ViewMode(str, Enum):
    GLOBE = "globe"
    LIST = "list"


class Region(str, Enum):
    """Pointer hit regions that belong to one chapter."""
    BLOB = "blob"
    BADGE = "badge"
    GLOBE = "globe"


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    TEXT = "text"
    FILE = "file"


# --- Input models (read-only snapshot from the app) ---


class Chapter(BaseModel):
    """A user-defined life period. id/title may be missing in raw input."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str | None = None
    title: str | None = None
    start_date: str | None = Field(default=None, alias="startDate")
    end_date: str | None = Field(default=None, alias="endDate")
    location: str | None = None
    description: str | None = None
    header_image_url: str | None = Field(default=None, alias="headerImageUrl")

    @property
    def is_well_formed(self) -> bool:
        return bool(self.id and self.id.strip() and self.title and self.title.strip())


class Memory(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    chapter_id: str | None = Field(
        default=None, validation_alias=AliasChoices("chapter_id", "chapterId", "timeZoneId"),
    )
    title: str | None = None
    created_at: str | None = Field(default=None, alias="createdAt")
    thumbnail_url: str | None = Field(default=None, alias="thumbnailUrl")
    text_content: str | None = Field(default=None, alias="textContent")
    media_type: MediaType = Field(default=MediaType.TEXT, alias="mediaType")
    media_count: int = Field(default=0, alias="mediaCount")

    @property
    def created_dt(self) -> datetime | None:
        return parse_iso(self.created_at)

    @property
    def display_title(self) -> str:
        return self.title or "Memory"


# --- Derived models (recomputed per render) ---


class TimelineWindow(BaseModel):
    zoom_level: ZoomLevel
    start_year: int
    end_year: int

    @model_validator(mode="after")
    def _check_order(self) -> "TimelineWindow":
        if self.start_year > self.end_year:
            raise ValueError(
                f"start_year {self.start_year} is after end_year {self.end_year}"
            )
        return self

    @property
    def span_years(self) -> int:
        return self.end_year - self.start_year


class AxisMarker(BaseModel):
    year: int
    month: int | None = None
    label: str


class ChapterPlacement(BaseModel):
    chapter_id: str
    horizontal_offset_pct: float
    horizontal_width_pct: float
    vertical_slot: int = 0
    start_year: int
    end_year: int
    blob_size_px: float = 0.0
    memory_count: int = 0


class SpherePoint(BaseModel):
    """A point in the local, unrotated sphere frame."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float
    scale: float = 1.0


class RotationState(BaseModel):
    pitch: float = 0.0
    yaw: float = 0.0
    is_user_driven: bool = False


class ProjectedPoint(BaseModel):
    """A sphere point after rotation, with depth-derived styling."""
    index: int
    x: float
    y: float
    z: float
    scale: float
    opacity: float
    blur: float


def parse_iso(value: str | None) -> datetime | None:
    """Parse an ISO date/datetime string. Returns None when unparseable."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None
