"""Core data types for the tennis serve simulation."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


@dataclass
class Vec3:
    """3D vector for position, velocity, spin, and acceleration."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> "Vec3":
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    def __rmul__(self, scalar: float) -> "Vec3":
        return self.__mul__(scalar)

    def magnitude(self) -> float:
        return (self.x**2 + self.y**2 + self.z**2) ** 0.5

    def cross(self, other: "Vec3") -> "Vec3":
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)

    def copy(self) -> "Vec3":
        return Vec3(self.x, self.y, self.z)


@dataclass
class BallState:
    """Full state of the ball at a point in time."""
    pos: Vec3 = field(default_factory=Vec3)
    vel: Vec3 = field(default_factory=Vec3)
    spin: Vec3 = field(default_factory=Vec3)  # rad/s
    t: float = 0.0
    has_served: bool = False  # racquet contact has happened

    def copy(self) -> "BallState":
        return BallState(
            pos=self.pos.copy(),
            vel=self.vel.copy(),
            spin=self.spin.copy(),
            t=self.t,
            has_served=self.has_served,
        )


@dataclass(frozen=True)
class BouncePoint:
    """Where and when the ball touched the court."""
    pos: Vec3
    t: float


@dataclass(frozen=True)
class NetHit:
    """Where and when the ball struck the net."""
    pos: Vec3
    t: float


class StepKind(Enum):
    NORMAL = "normal"
    BOUNCED = "bounced"
    NET_HIT = "net_hit"


@dataclass(frozen=True)
class StepEvent:
    """Outcome of a single integrator step.

    Exactly one kind per step. ``point`` is the contact point for
    BOUNCED and NET_HIT and None for NORMAL.
    """
    kind: StepKind = StepKind.NORMAL
    point: Optional[Vec3] = None

    @classmethod
    def normal(cls) -> "StepEvent":
        return cls(StepKind.NORMAL)

    @classmethod
    def bounced(cls, point: Vec3) -> "StepEvent":
        return cls(StepKind.BOUNCED, point)

    @classmethod
    def net_hit(cls, point: Vec3) -> "StepEvent":
        return cls(StepKind.NET_HIT, point)


class Phase(Enum):
    IDLE = "idle"
    SERVING = "serving"
    IN_FLIGHT = "in_flight"
    TERMINAL = "terminal"


class TerminalReason(Enum):
    NET_HIT = "net_hit"
    EXITED = "exited"  # left the drawn region past the far baseline


@dataclass
class HistorySnapshot:
    """Everything step_backward needs to put the controller back verbatim."""
    ball_state: BallState
    trail: list  # list[Vec3]
    bounce_points: list  # list[BouncePoint]
    net_hit: Optional[NetHit]
    is_serving: bool
    phase: Phase
    terminal_reason: Optional[TerminalReason] = None
