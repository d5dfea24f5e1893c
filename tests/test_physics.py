"""Tests for the integrator, collision resolution, and initial-state derivation."""

import math
import pytest

from tennis_engine.types import BallState, StepKind, Vec3
from tennis_engine.config import SimulationConfig
from tennis_engine.physics import derive_initial_state, simulate, step
from tennis_engine import court


NO_FORCES = SimulationConfig(enable_gravity=False, enable_drag=False, enable_magnus=False)


def test_net_hit_interpolates_contact_point():
    """Step from x=38 to x=40 with y 2 -> 1 stops on the net at y=1.5."""
    state = BallState(
        pos=Vec3(38.0, 2.0, 0.0),
        vel=Vec3(240.0, -120.0, 0.0),  # exactly 2 ft forward, 1 ft down per step
        spin=Vec3(5.0, 0.0, -3.0),
        has_served=True,
    )
    new_state, event = step(state, NO_FORCES)

    assert event.kind is StepKind.NET_HIT
    assert event.point.x == 39.0
    assert event.point.y == pytest.approx(1.5)
    assert new_state.pos.x == 39.0
    assert new_state.pos.y == pytest.approx(1.5)
    assert new_state.vel == Vec3(0.0, 0.0, 0.0)
    assert new_state.spin == Vec3(5.0, 0.0, -3.0)


def test_net_takes_precedence_over_ground():
    """A step that crosses the net and reaches the ground reports only the net."""
    state = BallState(pos=Vec3(38.0, 0.5, 0.0), vel=Vec3(240.0, -120.0, 0.0))
    new_state, event = step(state, NO_FORCES)

    assert event.kind is StepKind.NET_HIT
    assert new_state.pos.x == court.NET_X
    assert new_state.vel == Vec3()


def test_ball_clears_net_above_tape():
    state = BallState(pos=Vec3(38.0, 5.0, 0.0), vel=Vec3(240.0, 0.0, 0.0))
    new_state, event = step(state, NO_FORCES)
    assert event.kind is StepKind.NORMAL
    assert new_state.pos.x > court.NET_X


def test_ball_passes_outside_net_span():
    """Beyond the singles sidelines there is no net to hit."""
    state = BallState(pos=Vec3(38.0, 1.0, 14.0), vel=Vec3(240.0, 0.0, 0.0))
    _, event = step(state, NO_FORCES)
    assert event.kind is StepKind.NORMAL


def test_net_only_checked_on_forward_crossing():
    """A ball already past the net (or moving backward) never hits it."""
    past = BallState(pos=Vec3(39.0, 1.0, 0.0), vel=Vec3(240.0, 0.0, 0.0))
    assert step(past, NO_FORCES)[1].kind is StepKind.NORMAL

    backward = BallState(pos=Vec3(40.0, 1.0, 0.0), vel=Vec3(-240.0, 0.0, 0.0))
    assert step(backward, NO_FORCES)[1].kind is StepKind.NORMAL


def test_bounce_clamps_and_reflects():
    """Ground contact: y=0 exactly, vy reflected x0.7, horizontal x0.7, spin x0.8."""
    state = BallState(
        pos=Vec3(10.0, 0.04, 0.0),
        vel=Vec3(60.0, -5.0, 2.0),
        spin=Vec3(10.0, -20.0, 30.0),
        has_served=True,
    )
    new_state, event = step(state, NO_FORCES)

    assert event.kind is StepKind.BOUNCED
    assert new_state.pos.y == 0.0
    assert event.point.y == 0.0
    assert event.point.x == pytest.approx(10.5)
    assert new_state.vel.y == pytest.approx(3.5)
    assert new_state.vel.x == pytest.approx(42.0)
    assert new_state.vel.z == pytest.approx(1.4)
    assert new_state.spin.x == pytest.approx(8.0)
    assert new_state.spin.y == pytest.approx(-16.0)
    assert new_state.spin.z == pytest.approx(24.0)


def test_bounce_reflects_updated_velocity():
    """Restitution applies to the velocity after this step's acceleration."""
    config = SimulationConfig(enable_gravity=True, enable_drag=False, enable_magnus=False)
    state = BallState(pos=Vec3(10.0, 0.01, 0.0), vel=Vec3(0.0, -5.0, 0.0))
    new_state, event = step(state, config)

    assert event.kind is StepKind.BOUNCED
    expected_vy = (5.0 + court.GRAVITY * court.DT) * court.RESTITUTION
    assert new_state.vel.y == pytest.approx(expected_vy)


def test_no_bounce_when_moving_up():
    """Below ground but rising (previous vy >= 0) is not a new impact."""
    state = BallState(pos=Vec3(10.0, -0.5, 0.0), vel=Vec3(0.0, 1.0, 0.0))
    _, event = step(state, NO_FORCES)
    assert event.kind is StepKind.NORMAL


def test_spin_decays_only_on_bounce():
    config = SimulationConfig()
    state = BallState(pos=Vec3(5.0, 6.0, 0.0), vel=Vec3(100.0, 0.0, 0.0), spin=Vec3(50.0, 0.0, -80.0))
    new_state, event = step(state, config)
    assert event.kind is StepKind.NORMAL
    assert new_state.spin == state.spin


def test_time_advances_by_dt_on_every_branch():
    cases = [
        BallState(pos=Vec3(5.0, 6.0, 0.0), vel=Vec3(100.0, 0.0, 0.0), t=0.5),   # normal
        BallState(pos=Vec3(10.0, 0.04, 0.0), vel=Vec3(60.0, -5.0, 0.0), t=0.5),  # bounce
        BallState(pos=Vec3(38.0, 2.0, 0.0), vel=Vec3(240.0, -120.0, 0.0), t=0.5),  # net
    ]
    kinds = set()
    for state in cases:
        new_state, event = step(state, NO_FORCES)
        kinds.add(event.kind)
        assert new_state.t == 0.5 + court.DT
    assert kinds == {StepKind.NORMAL, StepKind.BOUNCED, StepKind.NET_HIT}


def test_semi_implicit_euler_ordering():
    """Position moves with the velocity already updated by this step's gravity."""
    config = SimulationConfig(enable_gravity=True, enable_drag=False, enable_magnus=False)
    state = BallState(pos=Vec3(0.0, 10.0, 0.0), vel=Vec3(0.0, 0.0, 0.0))
    new_state, _ = step(state, config)

    expected_vy = -court.GRAVITY * court.DT
    assert new_state.vel.y == pytest.approx(expected_vy)
    assert new_state.pos.y == pytest.approx(10.0 + expected_vy * court.DT)


def test_step_is_deterministic():
    """Identical (state, config) gives bit-identical results."""
    config = SimulationConfig()
    state = derive_initial_state(config)
    a_state, a_event = step(state, config)
    b_state, b_event = step(state, config)
    assert a_state == b_state
    assert a_event == b_event


def test_step_does_not_mutate_input():
    config = SimulationConfig()
    state = derive_initial_state(config)
    before = state.copy()
    step(state, config)
    assert state == before


@pytest.mark.parametrize("mph", [50, 75, 100, 125, 150])
def test_step_finite_across_speed_range(mph):
    config = SimulationConfig(initial_speed=mph, topspin_rpm=2000, vertical_angle=5)
    new_state, _ = step(derive_initial_state(config), config)
    assert new_state.pos.is_finite()
    assert new_state.vel.is_finite()


def test_initial_state_velocity_magnitude():
    config = SimulationConfig(initial_speed=100, direction=0, vertical_angle=-3, topspin_rpm=0)
    state = derive_initial_state(config)
    assert state.vel.magnitude() == pytest.approx(146.7)
    assert state.vel.y < 0
    assert state.vel.z == 0.0
    assert state.spin == Vec3(0.0, 0.0, 0.0)


def test_initial_state_position():
    config = SimulationConfig().with_player_height(6.5)
    state = derive_initial_state(config)
    assert state.pos == Vec3(0.0, 6.5 * 1.42, 3.0)
    assert state.t == 0.0
    assert state.has_served is True


def test_initial_state_direction_is_lateral():
    """Positive direction sends the ball toward negative z."""
    config = SimulationConfig(initial_speed=100, direction=90, vertical_angle=0)
    state = derive_initial_state(config)
    assert state.vel.x == pytest.approx(0.0, abs=1e-9)
    assert state.vel.z == pytest.approx(-146.7)


def test_initial_state_spin_decomposition():
    config = SimulationConfig(topspin_rpm=600, spin_plane=90)
    state = derive_initial_state(config)
    omega = 600 * 2 * math.pi / 60
    assert state.spin.x == pytest.approx(0.0, abs=1e-9)
    assert state.spin.y == 0.0
    assert state.spin.z == pytest.approx(omega)


def test_end_to_end_flat_serve_bounces_before_exit():
    """100 mph, -3 deg, no spin: drag slows the ball, then it lands in view."""
    config = SimulationConfig(initial_speed=100, direction=0, vertical_angle=-3, topspin_rpm=0)
    state = derive_initial_state(config)
    assert state.vel.magnitude() == pytest.approx(146.7)

    speeds = [state.vel.magnitude()]
    for _ in range(30):
        state, event = step(state, config)
        assert event.kind is StepKind.NORMAL
        speeds.append(state.vel.magnitude())
    assert all(b < a for a, b in zip(speeds, speeds[1:])), "Drag should dominate early"

    result = simulate(config)
    assert result.net_hit is None
    assert len(result.bounces) >= 1
    assert result.bounces[0].pos.y == 0.0
    assert result.bounces[0].pos.x < court.EXIT_X


def test_simulate_stops_at_net():
    config = SimulationConfig(initial_speed=90, vertical_angle=-8, topspin_rpm=0)
    result = simulate(config)
    assert result.net_hit is not None
    assert result.net_hit.pos.x == court.NET_X
    assert 0 < result.net_hit.pos.y <= court.NET_HEIGHT
    assert result.positions[-1].vel == Vec3()
    assert not result.exited


def test_simulate_stops_when_ball_leaves_view():
    """Without gravity a level serve sails out of the drawn region."""
    config = SimulationConfig(enable_gravity=False, enable_magnus=False, vertical_angle=0)
    result = simulate(config)
    assert result.exited
    assert result.positions[-1].pos.x >= court.EXIT_X
    assert result.bounces == []


def test_simulate_terminates():
    """Simulation should terminate within max_time."""
    config = SimulationConfig(enable_drag=False, enable_gravity=False, initial_speed=1, vertical_angle=0)
    result = simulate(config, max_time=1.0)
    assert result.duration <= 1.0 + court.DT
