"""Force model — gravity, quadratic drag, and Magnus acceleration (ft/s^2).

Each contribution is independent and returns an acceleration vector; the
integrator sums the enabled ones. Nothing here mutates its inputs.
"""

import math

from tennis_engine.types import BallState, Vec3
from tennis_engine.config import SimulationConfig
from tennis_engine import court


def mph_to_ft_per_sec(mph: float) -> float:
    return mph * court.MPH_TO_FTPS


def ft_per_sec_to_mph(ftps: float) -> float:
    return ftps * court.FTPS_TO_MPH


def rpm_to_rad_per_sec(rpm: float) -> float:
    return (rpm * 2 * math.pi) / 60


def gravity_acceleration() -> Vec3:
    return Vec3(0.0, -court.GRAVITY, 0.0)


def drag_acceleration(vel: Vec3, config: SimulationConfig) -> Vec3:
    """Quadratic drag: |F| = 0.5 * rho * Cd * pi * r^2 * |v|^2, opposite v."""
    speed = vel.magnitude()
    if speed == 0:
        return Vec3()
    drag_force = (
        0.5
        * config.air_density
        * config.drag_coefficient
        * math.pi
        * court.BALL_RADIUS**2
        * speed**2
    )
    return Vec3(
        -drag_force * vel.x / speed / court.BALL_MASS,
        -drag_force * vel.y / speed / court.BALL_MASS,
        -drag_force * vel.z / speed / court.BALL_MASS,
    )


def magnus_factor(config: SimulationConfig) -> float:
    """4 * pi^2 * r^3 * rho * Cm / m — scales (spin x velocity) to ft/s^2."""
    return (
        4
        * math.pi**2
        * court.BALL_RADIUS**3
        * config.air_density
        * config.magnus_coefficient
    ) / court.BALL_MASS


def magnus_acceleration(vel: Vec3, spin: Vec3, config: SimulationConfig) -> Vec3:
    return spin.cross(vel) * magnus_factor(config)


def total_acceleration(state: BallState, config: SimulationConfig) -> Vec3:
    """Sum of the enabled contributions for the current state."""
    accel = Vec3()
    if config.enable_gravity:
        accel = accel + gravity_acceleration()
    if config.enable_drag:
        accel = accel + drag_acceleration(state.vel, config)
    if config.enable_magnus:
        accel = accel + magnus_acceleration(state.vel, state.spin, config)
    return accel
