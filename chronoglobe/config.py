"""Configuration loading for the chapter timeline and memory globe."""

import math
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from chronoglobe.models import ViewMode


class LayoutConfig(BaseModel):
    min_offset_pct: float = 1.0
    max_offset_pct: float = 95.0
    stack_threshold_pct: float = 8.0
    stack_unit_px: int = 350
    base_top_px: int = 80
    blob_min_px: float = 48.0
    blob_max_px: float = 120.0
    blob_px_per_memory: float = 6.0
    years_window_radius: int = 10
    default_birth_year: int = 1981


class GlobeConfig(BaseModel):
    max_points: int = 15
    min_radius: float = 90.0
    max_radius: float = 140.0
    y_flatten: float = 0.7
    min_scale: float = 0.8
    max_scale: float = 1.2
    cull_z: float = -60.0
    max_blur_px: float = 3.0
    auto_yaw_step: float = 0.005  # radians per frame
    max_drag_yaw: float = math.pi / 2
    max_drag_pitch: float = math.pi / 6
    recenter_delay_ms: int = 300
    recenter_factor: float = 0.15
    recenter_epsilon: float = 0.001
    default_view_mode: ViewMode = ViewMode.GLOBE
    stable_positions: bool = False


class HoverConfig(BaseModel):
    blob_hide_delay_ms: int = 300
    globe_hide_delay_ms: int = 500


class RenderConfig(BaseModel):
    globe_size_px: int = 360
    card_thumbnails: int = 4
    background: str = "#0d1117"
    point_color: str = "#58a6ff"


class Config(BaseModel):
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    globe: GlobeConfig = Field(default_factory=GlobeConfig)
    hover: HoverConfig = Field(default_factory=HoverConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)


def _project_root() -> Path:
    """Return the chronoglobe project root directory."""
    return Path(__file__).parent.parent


def load_config(config_path: Path | None = None) -> Config:
    """Load config from YAML file. Falls back to defaults if file missing."""
    if config_path is None:
        config_path = _project_root() / "config.yaml"

    if config_path.exists():
        raw: dict[str, Any] = yaml.safe_load(config_path.read_text()) or {}
        return Config(**raw)

    return Config()
