"""Run configuration and serve presets.

A SimulationConfig is fixed for one run. Editing a slider produces a new
config (``dataclasses.replace``) that the controller picks up on the next
start; a flight already in the air is never live-edited.

Preset spin values are in rpm (real serve values):
  - Flat first serve:  ~1200 rpm
  - Slice serve:       ~2500 rpm, mostly rifle spin
  - Kick serve:        ~2800 rpm, mostly topspin

The spin plane splits rpm between spin.x (cos) and spin.z (sin). For a ball
travelling +x, negative spin.z is topspin and dips the flight.
"""

from dataclasses import dataclass, replace

from tennis_engine import court


@dataclass(frozen=True)
class SimulationConfig:
    """Everything the core needs to derive and advance one serve."""
    player_height: float = 6.0  # ft
    contact_height: float = 6.0 * court.CONTACT_HEIGHT_RATIO  # ft
    initial_speed: float = 90.0  # mph
    topspin_rpm: float = -2000.0
    spin_plane: float = 30.0  # deg
    direction: float = 0.0  # deg, positive aims left of the center line
    vertical_angle: float = -3.0  # deg, positive = up
    playback_speed: float = 0.5  # 0.01x to 1x
    air_density: float = 0.0765  # lb/ft^3 at sea level
    drag_coefficient: float = 0.47  # smooth sphere
    magnus_coefficient: float = 0.1
    enable_gravity: bool = True
    enable_drag: bool = True
    enable_magnus: bool = True

    def with_player_height(self, player_height: float) -> "SimulationConfig":
        """Return a copy with contact height re-derived from player height."""
        return replace(
            self,
            player_height=player_height,
            contact_height=contact_height_for(player_height),
        )


def contact_height_for(player_height: float) -> float:
    return player_height * court.CONTACT_HEIGHT_RATIO


SERVE_PRESETS = {
    "flat": {
        "label": "Flat First Serve (~120 mph)",
        "initial_speed": 120,
        "topspin_rpm": 1200,  # mostly rifle spin along the flight line
        "spin_plane": 0,
        "direction": 0,
        "vertical_angle": -4,
    },
    "kick": {
        "label": "Kick Serve (~95 mph)",
        "initial_speed": 95,
        "topspin_rpm": -2800,
        "spin_plane": 75,
        "direction": 2,
        "vertical_angle": 4,
    },
    "slice": {
        "label": "Slice Serve (~105 mph)",
        "initial_speed": 105,
        "topspin_rpm": -2500,
        "spin_plane": 15,
        "direction": -4,
        "vertical_angle": -3,
    },
    "body": {
        "label": "Body Serve (~110 mph)",
        "initial_speed": 110,
        "topspin_rpm": -2000,
        "spin_plane": 30,
        "direction": 5,
        "vertical_angle": -2,
    },
    "slow_second": {
        "label": "Slow Second Serve (~70 mph)",
        "initial_speed": 70,
        "topspin_rpm": -1800,
        "spin_plane": 60,
        "direction": 0,
        "vertical_angle": 6,
    },
    "into_net": {
        "label": "Into the Net (~90 mph, -8 deg)",
        "initial_speed": 90,
        "topspin_rpm": 0,
        "spin_plane": 0,
        "direction": 0,
        "vertical_angle": -8,  # aimed low enough to meet the tape
    },
}


def get_config(key: str, base: SimulationConfig = None) -> SimulationConfig:
    """Return a SimulationConfig for a preset key, layered over ``base``."""
    preset = SERVE_PRESETS[key]
    fields = {k: v for k, v in preset.items() if k != "label"}
    return replace(base or SimulationConfig(), **fields)


def list_presets() -> list[str]:
    """Return all available serve preset keys."""
    return list(SERVE_PRESETS.keys())
