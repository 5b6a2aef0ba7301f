"""Tests for globe rotation: auto-rotate guard, drag, recentering, projection."""

import math

import pytest

from chronoglobe.config import GlobeConfig
from chronoglobe.models import RotationState, SpherePoint
from chronoglobe.rotation import RotationEngine


@pytest.fixture()
def engine(scheduler):
    return RotationEngine(scheduler, GlobeConfig())


class TestAutoRotation:
    def test_rotates_only_when_disclosed(self, engine, scheduler):
        scheduler.run_frames(10)
        assert engine.state.yaw == 0
        engine.set_disclosed(True)
        scheduler.run_frames(10)
        assert engine.state.yaw == pytest.approx(10 * 0.005)
        assert engine.frames_run == 10

    def test_start_is_idempotent(self, engine, scheduler):
        engine.set_disclosed(True)
        engine.set_disclosed(True)
        assert scheduler.pending_frames == 1
        scheduler.run_frames(4)
        assert engine.state.yaw == pytest.approx(4 * 0.005)

    def test_memory_hover_pauses(self, engine, scheduler):
        engine.set_disclosed(True)
        scheduler.run_frames(5)
        engine.set_memory_hovered(True)
        assert not engine.animating
        scheduler.run_frames(5)
        assert engine.state.yaw == pytest.approx(5 * 0.005)
        engine.set_memory_hovered(False)
        scheduler.run_frames(5)
        assert engine.state.yaw == pytest.approx(10 * 0.005)

    def test_hidden_stops_loop(self, engine, scheduler):
        engine.set_disclosed(True)
        scheduler.run_frames(3)
        engine.set_disclosed(False)
        assert scheduler.pending_frames == 0
        scheduler.run_frames(3)
        assert engine.frames_run == 3


class TestDrag:
    def test_drag_to_maps_and_clamps(self, engine):
        engine.set_disclosed(True)
        assert engine.drag_to(0.5, -1.0)
        assert engine.state.yaw == pytest.approx(0.5 * math.pi / 2)
        assert engine.state.pitch == pytest.approx(-math.pi / 6)
        engine.drag_to(3.0, 9.0)
        assert engine.state.yaw == pytest.approx(math.pi / 2)
        assert engine.state.pitch == pytest.approx(math.pi / 6)

    def test_drag_suspends_auto_rotation(self, engine, scheduler):
        engine.set_disclosed(True)
        engine.drag_to(0.2, 0.0)
        assert engine.state.is_user_driven
        yaw = engine.state.yaw
        scheduler.run_frames(10)
        assert engine.state.yaw == yaw

    def test_drag_suppressed_while_memory_hovered(self, engine):
        engine.set_disclosed(True)
        engine.set_memory_hovered(True)
        assert engine.drag_to(1.0, 1.0) is False
        assert engine.apply_drag_delta(0.3, 0.3) is False
        assert engine.state.yaw == 0
        assert engine.state.pitch == 0
        assert not engine.dragging

    def test_net_zero_deltas_return_to_start(self, engine):
        engine.set_disclosed(True)
        for dyaw, dpitch in [(0.3, 0.1), (-0.5, 0.2), (0.2, -0.3), (2.0, -1.0), (-2.0, 1.0)]:
            engine.apply_drag_delta(dyaw, dpitch)
        assert engine.state.yaw == pytest.approx(0.0, abs=1e-12)
        assert engine.state.pitch == pytest.approx(0.0, abs=1e-12)

    def test_pointer_leave_recentres_pitch_keeps_yaw(self, engine, scheduler):
        engine.set_disclosed(True)
        engine.drag_to(0.4, 1.0)
        yaw = engine.state.yaw
        engine.pointer_leave()
        assert not engine.state.is_user_driven
        assert engine.state.yaw == yaw

        scheduler.advance(299)
        assert engine.state.pitch == pytest.approx(math.pi / 6)

        scheduler.run_frames(200)
        assert engine.state.pitch == 0.0
        assert engine.state.yaw > yaw

    def test_new_drag_cancels_recentre(self, engine, scheduler):
        engine.set_disclosed(True)
        engine.drag_to(0.0, 1.0)
        engine.pointer_leave()
        scheduler.advance(100)
        engine.drag_to(0.0, 1.0)
        assert scheduler.pending_timers == 0
        scheduler.run_frames(100)
        assert engine.state.pitch == pytest.approx(math.pi / 6)

    def test_dispose_cancels_everything(self, engine, scheduler):
        engine.set_disclosed(True)
        engine.drag_to(0.0, 0.5)
        engine.pointer_leave()
        engine.dispose()
        assert scheduler.pending_frames == 0
        assert scheduler.pending_timers == 0
        scheduler.advance(1000)
        scheduler.run_frames(10)
        assert engine.frames_run == 0


class TestProjection:
    def test_front_visible_back_culled(self, engine):
        points = [SpherePoint(x=0, y=0, z=100), SpherePoint(x=0, y=0, z=-100)]
        projected = engine.project(points)
        assert [p.index for p in projected] == [0]

    def test_yaw_half_turn_brings_back_to_front(self, engine):
        points = [SpherePoint(x=0, y=0, z=-100)]
        [p] = engine.project(points, RotationState(yaw=math.pi))
        assert p.z == pytest.approx(100)
        assert p.x == pytest.approx(0, abs=1e-9)

    def test_yaw_quarter_turn(self, engine):
        [p] = engine.project([SpherePoint(x=100, y=0, z=0)], RotationState(yaw=math.pi / 2))
        assert p.x == pytest.approx(0, abs=1e-9)
        assert p.z == pytest.approx(100)

    def test_pitch_tilts_vertical_axis(self, engine):
        [p] = engine.project([SpherePoint(x=0, y=100, z=0)], RotationState(pitch=math.pi / 2))
        assert p.y == pytest.approx(0, abs=1e-9)
        assert p.z == pytest.approx(100)

    def test_cull_threshold(self, engine):
        points = [SpherePoint(x=0, y=0, z=-60), SpherePoint(x=0, y=0, z=-60.5)]
        assert [p.index for p in engine.project(points)] == [0]

    def test_nearer_points_are_bigger_brighter_sharper(self, engine):
        near, far = engine.project([
            SpherePoint(x=0, y=0, z=120, scale=1.0),
            SpherePoint(x=0, y=0, z=-40, scale=1.0),
        ])
        assert near.scale > far.scale
        assert near.opacity > far.opacity
        assert near.blur < far.blur
        for p in (near, far):
            assert 0.35 <= p.opacity <= 1.0
            assert 0 <= p.blur <= 3.0

    def test_projection_preserves_distance(self, engine):
        point = SpherePoint(x=30, y=-50, z=90)
        [p] = engine.project([point], RotationState(yaw=0.7, pitch=0.3))
        before = math.sqrt(30 ** 2 + 50 ** 2 + 90 ** 2)
        assert math.sqrt(p.x ** 2 + p.y ** 2 + p.z ** 2) == pytest.approx(before)
