"""Ball physics — fixed-step integration, net and ground collision resolution."""

import math
from dataclasses import dataclass, field
from typing import Optional

from tennis_engine.types import BallState, BouncePoint, NetHit, StepEvent, StepKind, Vec3
from tennis_engine.config import SimulationConfig
from tennis_engine.forces import mph_to_ft_per_sec, rpm_to_rad_per_sec, total_acceleration
from tennis_engine import court


def derive_initial_state(config: SimulationConfig) -> BallState:
    """Ball state at racquet contact, decomposed from speed, angles, and spin."""
    speed = mph_to_ft_per_sec(config.initial_speed)
    direction = math.radians(config.direction)
    vertical = math.radians(config.vertical_angle)
    omega = rpm_to_rad_per_sec(config.topspin_rpm)
    spin_plane = math.radians(config.spin_plane)

    horizontal = speed * math.cos(vertical)
    return BallState(
        pos=Vec3(0.0, config.contact_height, court.SERVE_LATERAL),
        vel=Vec3(
            horizontal * math.cos(direction),
            speed * math.sin(vertical),
            -horizontal * math.sin(direction),
        ),
        spin=Vec3(omega * math.cos(spin_plane), 0.0, omega * math.sin(spin_plane)),
        t=0.0,
        has_served=True,
    )


def _check_net(prev: BallState, pos: Vec3) -> Optional[Vec3]:
    """Return the exact net-plane contact point if this step ran into the net."""
    if not (prev.pos.x < court.NET_X <= pos.x):
        return None
    if pos.y > court.NET_HEIGHT or abs(pos.z) > court.NET_HALF_SPAN:
        return None
    t = (court.NET_X - prev.pos.x) / (pos.x - prev.pos.x)
    return Vec3(
        court.NET_X,
        prev.pos.y + t * (pos.y - prev.pos.y),
        prev.pos.z + t * (pos.z - prev.pos.z),
    )


def _check_ground(
    prev: BallState, pos: Vec3, vel: Vec3
) -> Optional[tuple[Vec3, Vec3, Vec3]]:
    """Resolve a bounce. Returns (position, velocity, spin) or None."""
    if pos.y > 0 or prev.vel.y >= 0:
        return None
    keep = 1 - court.GROUND_FRICTION
    return (
        Vec3(pos.x, 0.0, pos.z),
        Vec3(vel.x * keep, -vel.y * court.RESTITUTION, vel.z * keep),
        prev.spin * court.SPIN_DECAY_ON_BOUNCE,
    )


def step(state: BallState, config: SimulationConfig) -> tuple[BallState, StepEvent]:
    """Advance the ball by exactly one DT.

    Semi-implicit Euler: velocity first, then position from the new velocity.
    The net is checked before the ground; a net hit pins the ball to the net
    plane with zero velocity and no bounce is applied in the same step.
    """
    dt = court.DT
    accel = total_acceleration(state, config)
    vel = state.vel + accel * dt
    pos = state.pos + vel * dt
    t = state.t + dt

    net_point = _check_net(state, pos)
    if net_point is not None:
        new_state = BallState(
            pos=net_point,
            vel=Vec3(),
            spin=state.spin.copy(),
            t=t,
            has_served=state.has_served,
        )
        return new_state, StepEvent.net_hit(net_point.copy())

    bounce = _check_ground(state, pos, vel)
    if bounce is not None:
        pos, vel, spin = bounce
        new_state = BallState(pos=pos, vel=vel, spin=spin, t=t, has_served=state.has_served)
        return new_state, StepEvent.bounced(pos.copy())

    new_state = BallState(pos=pos, vel=vel, spin=state.spin.copy(), t=t, has_served=state.has_served)
    return new_state, StepEvent.normal()


def has_exited(state: BallState) -> bool:
    """Ball is past the region drawn for the visualization."""
    return state.pos.x >= court.EXIT_X


@dataclass
class FlightResult:
    """A headless flight from racquet contact to a terminal condition."""
    positions: list  # list[BallState], contact state first
    bounces: list = field(default_factory=list)  # list[BouncePoint]
    net_hit: Optional[NetHit] = None
    exited: bool = False

    @property
    def duration(self) -> float:
        return self.positions[-1].t if self.positions else 0.0


def simulate(
    config: SimulationConfig,
    max_time: float = 10.0,
) -> FlightResult:
    """Fly a serve from contact until it hits the net, leaves, or times out.

    Time is measured from racquet contact; the scripted serve motion is not
    part of the result.
    """
    state = derive_initial_state(config)
    result = FlightResult(positions=[state.copy()])

    steps = int(max_time / court.DT)
    for _ in range(steps):
        state, event = step(state, config)
        result.positions.append(state.copy())

        if event.kind is StepKind.NET_HIT:
            result.net_hit = NetHit(pos=event.point, t=state.t)
            break
        if event.kind is StepKind.BOUNCED:
            result.bounces.append(BouncePoint(pos=event.point, t=state.t))
        if has_exited(state):
            result.exited = True
            break

    return result
