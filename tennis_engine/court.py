"""Tennis court dimensions and physical constants.

All values in imperial units (feet, seconds, pounds, radians). Axes: x runs from the
server's baseline toward the far baseline, y is height above the court, z is lateral.
"""

import math

# Court: server stands at the near baseline (x = 0)
BASELINE_X = 78.0  # far baseline
NET_X = BASELINE_X / 2
NET_HEIGHT = 3.0
COURT_WIDTH = 27.0  # singles
NET_HALF_SPAN = COURT_WIDTH / 2
EXIT_X = BASELINE_X + 25.0  # ball leaves the drawn region 25 ft past the far baseline

# Ball: ITF standard tennis ball
BALL_RADIUS = 0.1067
BALL_MASS = 0.125
BALL_AREA = math.pi * BALL_RADIUS**2

GRAVITY = 32.174

# Bounce physics
RESTITUTION = 0.7
GROUND_FRICTION = 0.3
SPIN_DECAY_ON_BOUNCE = 0.8

# Unit conversions
MPH_TO_FTPS = 1.467
FTPS_TO_MPH = 3600 / 5280

# Integration
DT = 1 / 120

# Scripted serve motion (racquet carries the ball before contact)
SERVE_DURATION = 0.3
SERVE_ARC_HEIGHT = 2.0
SERVE_START_X = -1.0
SERVE_LATERAL = 3.0  # right of the center mark

# Contact height is ~1.42x player height (6 ft player -> ~8.5 ft contact)
CONTACT_HEIGHT_RATIO = 1.42

# Stepping
PLAYBACK_FRAME_MS = 16.67  # one 60 fps frame at 1x playback
PLAYBACK_SERVE_DT = 1 / 60
MANUAL_STEP_INTERVAL = 0.01
HISTORY_LIMIT = 5000
