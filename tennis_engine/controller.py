"""Simulation controller — serve/flight/terminal phases, playback, and undo.

The controller is the only owner of the live ball state, trail, bounce list,
and history. Two ways to drive it:

- Real-time playback: call ``update()`` from a frame loop. A tick runs only
  once the playback interval has elapsed since the last executed tick.
- Manual stepping: ``step_forward()`` / ``step_backward()`` while paused.
  Every forward step pushes a snapshot so it can be undone exactly.

Both modes use the same integrator and the same per-tick bookkeeping, so a
flight traces identical positions whichever way it is driven.
"""

import logging
import math
import time
from collections import deque
from typing import Callable, Optional

from tennis_engine.types import (
    BallState,
    BouncePoint,
    HistorySnapshot,
    NetHit,
    Phase,
    StepKind,
    TerminalReason,
)
from tennis_engine.config import SimulationConfig
from tennis_engine.forces import ft_per_sec_to_mph
from tennis_engine.physics import derive_initial_state, has_exited, step
from tennis_engine.serve import serve_progress, serve_state
from tennis_engine import court

log = logging.getLogger(__name__)

# 0.01 s of simulated time per manual step at the integrator's rate
MANUAL_SUBSTEPS = math.ceil(court.MANUAL_STEP_INTERVAL / court.DT)


class SimulationController:
    """Drives one serve at a time through the phase state machine.

    Args:
        config: Run configuration, used on the next ``start()``.
        clock: Returns wall-clock seconds; used by ``update()`` when no
            explicit time is passed.
        history_limit: Maximum undo snapshots kept; oldest are dropped.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        clock: Callable[[], float] = time.perf_counter,
        history_limit: int = court.HISTORY_LIMIT,
    ):
        self._config = config if config is not None else SimulationConfig()
        self._clock = clock
        self._history: deque = deque(maxlen=history_limit)
        self._running = False
        self._last_tick_ms = 0.0
        self._clear_run()

    def _clear_run(self):
        self._state: Optional[BallState] = None
        self._trail: list = []
        self._bounces: list = []
        self._net_hit: Optional[NetHit] = None
        self._serving = False
        self._phase = Phase.IDLE
        self._terminal_reason: Optional[TerminalReason] = None

    # ---- read-only views for renderers ----

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def state(self) -> Optional[BallState]:
        return self._state.copy() if self._state is not None else None

    @property
    def trail(self) -> list:
        return [p.copy() for p in self._trail]

    @property
    def bounce_points(self) -> list:
        return list(self._bounces)

    @property
    def net_hit(self) -> Optional[NetHit]:
        return self._net_hit

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def terminal_reason(self) -> Optional[TerminalReason]:
        return self._terminal_reason

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_serving(self) -> bool:
        return self._serving

    @property
    def history_depth(self) -> int:
        return len(self._history)

    @property
    def serve_progress(self) -> float:
        if not self._serving or self._state is None:
            return 0.0
        return serve_progress(self._state.t)

    @property
    def tick_interval_ms(self) -> float:
        return court.PLAYBACK_FRAME_MS / self._config.playback_speed

    def set_config(self, config: SimulationConfig) -> bool:
        """Swap the configuration. Refused while playback is running."""
        if self._running:
            log.debug("set_config ignored while running")
            return False
        self._config = config
        return True

    # ---- lifecycle ----

    def start(self, play: bool = True):
        """Begin a new serve from the current configuration.

        With ``play=False`` the run is primed but paused, ready for manual
        stepping.
        """
        self._running = False
        self._clear_run()
        self._history.clear()

        self._state = serve_state(self._config, 0.0)
        self._serving = True
        self._phase = Phase.SERVING
        log.info(
            "Serve started: %.0f mph, %.0f rpm, vertical %.1f deg",
            self._config.initial_speed,
            self._config.topspin_rpm,
            self._config.vertical_angle,
        )
        if play:
            self._running = True
            self._last_tick_ms = self._now_ms()

    def resume(self) -> bool:
        """Restart playback of a paused run without resetting it."""
        if self._running or self._phase not in (Phase.SERVING, Phase.IN_FLIGHT):
            log.debug("resume ignored in phase %s", self._phase.value)
            return False
        self._running = True
        self._last_tick_ms = self._now_ms()
        return True

    def stop(self):
        """Cancel playback. Safe to call any number of times."""
        if self._running:
            log.debug("Playback stopped at t=%.3fs", self._state.t)
        self._running = False

    def reset(self):
        self.stop()
        self._clear_run()
        self._history.clear()
        log.debug("Simulation reset")

    # ---- real-time playback ----

    def update(self, now_ms: Optional[float] = None) -> bool:
        """Frame-loop callback. Returns True if a tick was executed."""
        if not self._running:
            return False
        if now_ms is None:
            now_ms = self._now_ms()
        if now_ms - self._last_tick_ms < self.tick_interval_ms:
            return False

        if self._serving:
            # contact keeps the pre-tick time in playback
            self._advance_serve(self._state.t + court.PLAYBACK_SERVE_DT, self._state.t)
        else:
            self._advance_flight()
        self._last_tick_ms = now_ms
        return True

    # ---- manual stepping ----

    def step_forward(self) -> bool:
        """Advance 0.01 s of simulated time, saving a snapshot first."""
        if self._running or self._phase in (Phase.IDLE, Phase.TERMINAL):
            log.debug("step_forward ignored in phase %s", self._phase.value)
            return False

        self._history.append(self._snapshot())
        t_before = self._state.t
        for i in range(MANUAL_SUBSTEPS):
            if self._serving:
                self._advance_serve(self._state.t + court.DT, t_before + (i + 1) * court.DT)
            elif self._advance_flight():
                break
        return True

    def step_backward(self) -> bool:
        """Restore the most recent snapshot. No-op when there is none."""
        if self._running or not self._history:
            return False
        snap = self._history.pop()
        self._state = snap.ball_state
        self._trail = snap.trail
        self._bounces = snap.bounce_points
        self._net_hit = snap.net_hit
        self._serving = snap.is_serving
        self._phase = snap.phase
        self._terminal_reason = snap.terminal_reason
        return True

    # ---- shared per-tick work ----

    def _advance_serve(self, serve_time: float, contact_time: float):
        next_state = serve_state(self._config, serve_time)
        if not next_state.has_served:
            self._state = next_state
            return

        contact = derive_initial_state(self._config)
        contact.t = contact_time
        self._state = contact
        self._serving = False
        self._phase = Phase.IN_FLIGHT
        self._trail = [contact.pos.copy()]
        log.info("Racquet contact at t=%.3fs, height %.2f ft", contact.t, contact.pos.y)

    def _advance_flight(self) -> bool:
        """One integrator step. Returns True if the flight just ended."""
        new_state, event = step(self._state, self._config)
        self._state = new_state

        if event.kind is StepKind.NET_HIT:
            self._net_hit = NetHit(pos=event.point, t=new_state.t)
            log.info("Net hit at t=%.3fs, height %.2f ft", new_state.t, event.point.y)
            self._terminate(TerminalReason.NET_HIT)
            return True

        if event.kind is StepKind.BOUNCED:
            self._bounces.append(BouncePoint(pos=event.point, t=new_state.t))
            log.info("Bounce %d at x=%.1f ft, t=%.3fs", len(self._bounces), event.point.x, new_state.t)

        if has_exited(new_state):
            log.info("Ball left the court region at t=%.3fs", new_state.t)
            self._terminate(TerminalReason.EXITED)
            return True

        self._trail.append(new_state.pos.copy())
        return False

    def _terminate(self, reason: TerminalReason):
        self._phase = Phase.TERMINAL
        self._terminal_reason = reason
        self._running = False

    def _snapshot(self) -> HistorySnapshot:
        return HistorySnapshot(
            ball_state=self._state.copy(),
            trail=[p.copy() for p in self._trail],
            bounce_points=[BouncePoint(pos=b.pos.copy(), t=b.t) for b in self._bounces],
            net_hit=self._net_hit,
            is_serving=self._serving,
            phase=self._phase,
            terminal_reason=self._terminal_reason,
        )

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    # ---- stats panel ----

    def stats(self) -> dict:
        """Live numbers for a stats panel; empty before the first start."""
        if self._state is None:
            return {}
        if self._net_hit is not None:
            status = "Hit Net!"
        elif self._serving:
            status = "Serving..."
        elif self._terminal_reason is TerminalReason.EXITED:
            status = "Out of view"
        else:
            status = "Ball in flight"
        return {
            "time": self._state.t,
            "height": self._state.pos.y,
            "distance": self._state.pos.x,
            "speed_mph": ft_per_sec_to_mph(self._state.vel.magnitude()),
            "status": status,
            "bounces": len(self._bounces),
            "net_hit_time": self._net_hit.t if self._net_hit else None,
        }
