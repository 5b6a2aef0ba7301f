"""Globe rotation: auto-rotation loop, pointer drag, and 3D→2D projection."""

import logging
import math

from chronoglobe.config import GlobeConfig
from chronoglobe.models import ProjectedPoint, RotationState, SpherePoint
from chronoglobe.scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class RotationEngine:
    """Owns the (pitch, yaw) of one globe and the loop that animates it.

    Auto-rotation runs only while `active`: the globe is disclosed, the user is
    not dragging, and no memory is hovered. Every state setter re-evaluates
    that guard, so starting and stopping the frame loop is idempotent.
    """

    def __init__(self, scheduler: Scheduler, config: GlobeConfig | None = None) -> None:
        self.scheduler = scheduler
        self.config = config or GlobeConfig()
        self.state = RotationState()
        self.disclosed = False
        self.dragging = False
        self.memory_hovered = False
        self.frames_run = 0
        self._frame: TimerHandle | None = None
        self._recenter_timer: TimerHandle | None = None
        self._recenter_frame: TimerHandle | None = None

    @property
    def active(self) -> bool:
        return self.disclosed and not self.dragging and not self.memory_hovered

    @property
    def animating(self) -> bool:
        return self._frame is not None

    # --- Guard inputs ---

    def set_disclosed(self, disclosed: bool) -> None:
        self.disclosed = disclosed
        if not disclosed:
            self.dragging = False
            self.state.is_user_driven = False
            self._cancel_recenter()
        self._sync_loop()

    def set_memory_hovered(self, hovered: bool) -> None:
        self.memory_hovered = hovered
        self._sync_loop()

    def begin_drag(self) -> None:
        if self.dragging:
            return
        self.dragging = True
        self.state.is_user_driven = True
        self._cancel_recenter()
        self._sync_loop()

    def end_drag(self) -> None:
        if not self.dragging:
            return
        self.dragging = False
        self.state.is_user_driven = False
        self._sync_loop()

    # --- Pointer input ---

    def drag_to(self, nx: float, ny: float) -> bool:
        """Set yaw/pitch from the pointer's normalised offset from the globe centre.

        nx, ny are in [-1, 1] (clamped). Returns False when suppressed because
        a memory is hovered.
        """
        if self.memory_hovered:
            return False
        self.begin_drag()
        self.state.yaw = _clamp(nx, -1.0, 1.0) * self.config.max_drag_yaw
        self.state.pitch = _clamp(ny, -1.0, 1.0) * self.config.max_drag_pitch
        return True

    def apply_drag_delta(self, dyaw: float, dpitch: float) -> bool:
        """Incremental drag, used for touch. Deltas are not clamped."""
        if self.memory_hovered:
            return False
        self.begin_drag()
        self.state.yaw += dyaw
        self.state.pitch += dpitch
        return True

    def pointer_leave(self) -> None:
        """End the drag, resume auto-rotation, and recentre pitch after a delay."""
        self.end_drag()
        self._cancel_recenter()
        if self.disclosed and self.state.pitch != 0.0:
            self._recenter_timer = self.scheduler.call_later(
                self.config.recenter_delay_ms, self._start_recenter,
            )

    def dispose(self) -> None:
        """Cancel every pending frame and timer."""
        self.set_disclosed(False)

    # --- Animation ---

    def _sync_loop(self) -> None:
        if self.active and self._frame is None:
            self._frame = self.scheduler.request_frame(self._on_frame)
            logger.debug("Auto-rotation started")
        elif not self.active and self._frame is not None:
            self._frame.cancel()
            self._frame = None
            logger.debug("Auto-rotation stopped")

    def _on_frame(self) -> None:
        self._frame = None
        if not self.active:
            return
        self.state.yaw += self.config.auto_yaw_step
        self.frames_run += 1
        self._frame = self.scheduler.request_frame(self._on_frame)

    def _start_recenter(self) -> None:
        self._recenter_timer = None
        if self.dragging or not self.disclosed:
            return
        self._recenter_frame = self.scheduler.request_frame(self._recenter_step)

    def _recenter_step(self) -> None:
        self._recenter_frame = None
        if self.dragging or not self.disclosed:
            return
        self.state.pitch *= 1.0 - self.config.recenter_factor
        if abs(self.state.pitch) < self.config.recenter_epsilon:
            self.state.pitch = 0.0
            return
        self._recenter_frame = self.scheduler.request_frame(self._recenter_step)

    def _cancel_recenter(self) -> None:
        if self._recenter_timer is not None:
            self._recenter_timer.cancel()
            self._recenter_timer = None
        if self._recenter_frame is not None:
            self._recenter_frame.cancel()
            self._recenter_frame = None

    # --- Projection ---

    def project(
        self,
        points: list[SpherePoint],
        state: RotationState | None = None,
    ) -> list[ProjectedPoint]:
        """Rotate points by yaw then pitch, cull the far side, derive depth styling."""
        state = state or self.state
        cfg = self.config
        cos_yaw, sin_yaw = math.cos(state.yaw), math.sin(state.yaw)
        cos_pitch, sin_pitch = math.cos(state.pitch), math.sin(state.pitch)
        depth_range = cfg.max_radius or 1.0

        projected: list[ProjectedPoint] = []
        for index, p in enumerate(points):
            # yaw about the vertical axis
            x1 = p.x * cos_yaw - p.z * sin_yaw
            z1 = p.x * sin_yaw + p.z * cos_yaw
            # pitch about the resulting horizontal axis
            y2 = p.y * cos_pitch - z1 * sin_pitch
            z2 = p.y * sin_pitch + z1 * cos_pitch
            if z2 < cfg.cull_z:
                continue

            t = _clamp((z2 + depth_range) / (2 * depth_range), 0.0, 1.0)
            projected.append(ProjectedPoint(
                index=index,
                x=x1,
                y=y2,
                z=z2,
                scale=p.scale * (0.6 + 0.6 * t),
                opacity=0.35 + 0.65 * t,
                blur=(1.0 - t) * cfg.max_blur_px,
            ))
        return projected
