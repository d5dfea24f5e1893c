"""Scripted serve motion — the racquet carries the ball up and forward.

No forces act here; the arc is an animation, not physics. Once the motion
completes the controller hands over to the integrator.
"""

import math

from tennis_engine.types import BallState, Vec3
from tennis_engine.config import SimulationConfig
from tennis_engine import court


def serve_progress(serve_time: float) -> float:
    """Fraction of the serve motion completed, capped at 1."""
    return min(serve_time / court.SERVE_DURATION, 1)


def serve_state(config: SimulationConfig, serve_time: float) -> BallState:
    """Ball pose ``serve_time`` seconds into the serve motion.

    Height peaks SERVE_ARC_HEIGHT above contact height mid-motion and is
    back at contact height when the motion completes.
    """
    progress = serve_progress(serve_time)
    height = config.contact_height + math.sin(progress * math.pi) * court.SERVE_ARC_HEIGHT
    return BallState(
        pos=Vec3(court.SERVE_START_X + progress, height, court.SERVE_LATERAL),
        vel=Vec3(),
        spin=Vec3(),
        t=serve_time,
        has_served=progress >= 1,
    )
