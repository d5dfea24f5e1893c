"""Pygame visualizer — side and bird's-eye views of a serve with playback and stepping."""

from dataclasses import replace

try:
    import pygame
except ImportError:
    pygame = None

from tennis_engine.types import Phase, TerminalReason
from tennis_engine.config import SERVE_PRESETS, SimulationConfig, get_config, list_presets
from tennis_engine.controller import SimulationController
from tennis_engine import court

WIN_W = 1400
WIN_H = 820

# Colors
BG_COLOR = (12, 12, 22)
COURT_BLUE = (38, 84, 124)
SURROUND_GREEN = (40, 110, 70)
LINE_WHITE = (255, 255, 255)
NET_GRAY = (180, 180, 180)
BALL_YELLOW = (215, 240, 60)
TRAIL_RED = (233, 69, 96)
ACCENT = (233, 69, 96)
CARD_BG = (26, 26, 46)
PANEL_BG = (22, 33, 62)
TEXT_WHITE = (224, 224, 224)
TEXT_DIM = (136, 136, 136)
BOUNCE_TEAL = (78, 205, 196)
NET_YELLOW = (255, 217, 61)
PLAYING_GREEN = (40, 167, 69)

# World window shown in both views (ft)
VIEW_X_MIN = -6.0
VIEW_X_MAX = court.EXIT_X + 2.0
SIDE_VIEW_MAX_HEIGHT = 16.0
TOP_VIEW_HALF_WIDTH = 20.0
SERVICE_LINE_OFFSET = 21.0  # service lines sit 21 ft either side of the net

PLAYBACK_SPEEDS = [0.01, 0.05, 0.1, 0.25, 0.5, 0.75, 1.0]
PLAYER_HEIGHT_RANGE = (5.0, 8.0)
MAX_BOUNCE_MARKERS = 12


def _x_to_px(x, left, width):
    return left + (x - VIEW_X_MIN) / (VIEW_X_MAX - VIEW_X_MIN) * width


def _world_to_side(pos, left, ground_y, width):
    px_per_ft = width / (VIEW_X_MAX - VIEW_X_MIN)
    return int(_x_to_px(pos.x, left, width)), int(ground_y - pos.y * px_per_ft)


def _world_to_top(pos, left, center_y, width):
    px_per_ft = width / (VIEW_X_MAX - VIEW_X_MIN)
    return int(_x_to_px(pos.x, left, width)), int(center_y + pos.z * px_per_ft)


def _draw_court_side(surface, top, height, margin=20):
    w = surface.get_width()
    width = w - margin * 2
    ground_y = top + height - 12
    px_per_ft = width / (VIEW_X_MAX - VIEW_X_MIN)

    pygame.draw.rect(surface, SURROUND_GREEN, (margin, ground_y, width, 6))
    x0 = int(_x_to_px(0, margin, width))
    x1 = int(_x_to_px(court.BASELINE_X, margin, width))
    pygame.draw.rect(surface, COURT_BLUE, (x0, ground_y, x1 - x0, 6))
    net_x = int(_x_to_px(court.NET_X, margin, width))
    net_top = int(ground_y - court.NET_HEIGHT * px_per_ft)
    pygame.draw.line(surface, NET_GRAY, (net_x, ground_y), (net_x, net_top), 3)
    exit_x = int(_x_to_px(court.EXIT_X, margin, width))
    pygame.draw.line(surface, (70, 70, 90), (exit_x, top), (exit_x, ground_y), 1)
    return margin, ground_y, width


def _draw_court_top(surface, top, height, margin=20):
    w = surface.get_width()
    width = w - margin * 2
    center_y = top + height // 2
    px_per_ft = width / (VIEW_X_MAX - VIEW_X_MIN)
    half = court.NET_HALF_SPAN * px_per_ft

    x0 = _x_to_px(0, margin, width)
    x1 = _x_to_px(court.BASELINE_X, margin, width)
    pygame.draw.rect(surface, SURROUND_GREEN, (margin, top, width, height))
    pygame.draw.rect(surface, COURT_BLUE, (int(x0), int(center_y - half), int(x1 - x0), int(2 * half)))
    pygame.draw.rect(surface, LINE_WHITE, (int(x0), int(center_y - half), int(x1 - x0), int(2 * half)), 2)

    for sx in (court.NET_X - SERVICE_LINE_OFFSET, court.NET_X + SERVICE_LINE_OFFSET):
        px = int(_x_to_px(sx, margin, width))
        pygame.draw.line(surface, LINE_WHITE, (px, int(center_y - half)), (px, int(center_y + half)), 1)
    s0 = int(_x_to_px(court.NET_X - SERVICE_LINE_OFFSET, margin, width))
    s1 = int(_x_to_px(court.NET_X + SERVICE_LINE_OFFSET, margin, width))
    pygame.draw.line(surface, LINE_WHITE, (s0, center_y), (s1, center_y), 1)

    net_x = int(_x_to_px(court.NET_X, margin, width))
    pygame.draw.line(surface, NET_GRAY, (net_x, int(center_y - half) - 6), (net_x, int(center_y + half) + 6), 3)
    return margin, center_y, width


def _bounce_markers(bounce_points, limit=MAX_BOUNCE_MARKERS):
    """Distinct bounce positions, most recent last, at most ``limit`` of them.

    A ball at rest on the court is clamped back to the ground every other
    step, so one spot can collect thousands of bounce records.
    """
    latest = {}
    for b in bounce_points:
        key = (round(b.pos.x, 1), round(b.pos.z, 1))
        latest.pop(key, None)
        latest[key] = b
    return list(latest.values())[-limit:]


def _preset_index(presets, preset=None):
    if preset in presets:
        return presets.index(preset)
    return 0


def _draw_flight(surface, ctrl, to_screen, font_sm):
    trail = ctrl.trail
    if len(trail) > 1:
        step = max(1, len(trail) // 800)
        pts = [to_screen(p) for p in trail[::step]]
        pts.append(to_screen(trail[-1]))
        pygame.draw.lines(surface, TRAIL_RED, False, pts, 2)

    for b in _bounce_markers(ctrl.bounce_points):
        bp = to_screen(b.pos)
        pygame.draw.circle(surface, BOUNCE_TEAL, bp, 5, 2)
        txt = font_sm.render("BOUNCE", True, BOUNCE_TEAL)
        surface.blit(txt, (bp[0] - txt.get_width() // 2, bp[1] - 18))

    if ctrl.net_hit is not None:
        np_ = to_screen(ctrl.net_hit.pos)
        pygame.draw.circle(surface, NET_YELLOW, np_, 7, 2)
        txt = font_sm.render("NET", True, NET_YELLOW)
        surface.blit(txt, (np_[0] - txt.get_width() // 2, np_[1] - 20))

    state = ctrl.state
    if state is not None:
        bp = to_screen(state.pos)
        glow = pygame.Surface((26, 26), pygame.SRCALPHA)
        pygame.draw.circle(glow, (*BALL_YELLOW, 50), (13, 13), 12)
        surface.blit(glow, (bp[0] - 13, bp[1] - 13))
        pygame.draw.circle(surface, BALL_YELLOW, bp, 6)
        pygame.draw.circle(surface, LINE_WHITE, bp, 6, 1)


def _status_text(ctrl):
    if ctrl.phase is Phase.IDLE:
        return "Press SPACE to serve, RIGHT to step"
    stats = ctrl.stats()
    if ctrl.terminal_reason is TerminalReason.NET_HIT:
        return f"Net hit at {stats['net_hit_time']:.2f}s"
    if ctrl.terminal_reason is TerminalReason.EXITED:
        return f"Ball left the court after {stats['bounces']} bounce(s)"
    return stats["status"]


def run_visualizer(config: SimulationConfig = None, preset: str = None):
    """Launch the Pygame visualizer.

    ``preset`` names the serve preset ``config`` was built from, for the panel
    label and preset cycling.
    """
    if pygame is None:
        print("ERROR: pygame is not installed. Run: pip install pygame")
        return

    pygame.init()
    screen = pygame.display.set_mode((WIN_W, WIN_H))
    pygame.display.set_caption("Tennis Serve Simulator")
    clock = pygame.time.Clock()

    font_sm = pygame.font.SysFont("monospace", 12)
    font_md = pygame.font.SysFont("monospace", 14)
    font_lg = pygame.font.SysFont("monospace", 20)
    font_title = pygame.font.SysFont("monospace", 15, bold=True)
    font_header = pygame.font.SysFont("monospace", 11)

    presets = list_presets()
    preset_idx = _preset_index(presets, preset)
    config = config or get_config(presets[preset_idx])
    ctrl = SimulationController(config, clock=lambda: pygame.time.get_ticks() / 1000.0)

    def apply_config(new_config, keep_run=False):
        """Physics changes start a fresh run; playback speed keeps the current one."""
        was_running = ctrl.is_running
        ctrl.stop()
        if not keep_run:
            ctrl.reset()
        ctrl.set_config(new_config)
        if keep_run and was_running:
            ctrl.resume()

    canvas_w = int(WIN_W * 0.75)
    canvas_h = WIN_H - 50
    canvas_surface = pygame.Surface((canvas_w, canvas_h))
    side_h = int(canvas_h * 0.5)

    running = True
    while running:
        clock.tick(60)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                cfg = ctrl.config
                if event.key == pygame.K_q:
                    running = False
                elif event.key == pygame.K_SPACE:
                    if ctrl.phase in (Phase.IDLE, Phase.TERMINAL):
                        ctrl.start()
                    elif ctrl.is_running:
                        ctrl.stop()
                    else:
                        ctrl.resume()
                elif event.key == pygame.K_RIGHT:
                    if ctrl.phase is Phase.IDLE:
                        ctrl.start(play=False)
                    ctrl.step_forward()
                elif event.key == pygame.K_LEFT:
                    ctrl.step_backward()
                elif event.key == pygame.K_r:
                    ctrl.reset()
                elif event.key in (pygame.K_UP, pygame.K_DOWN):
                    speeds = PLAYBACK_SPEEDS
                    idx = min(range(len(speeds)), key=lambda i: abs(speeds[i] - cfg.playback_speed))
                    idx += 1 if event.key == pygame.K_UP else -1
                    idx = max(0, min(len(speeds) - 1, idx))
                    apply_config(replace(cfg, playback_speed=speeds[idx]), keep_run=True)
                elif event.key == pygame.K_g:
                    apply_config(replace(cfg, enable_gravity=not cfg.enable_gravity))
                elif event.key == pygame.K_d:
                    apply_config(replace(cfg, enable_drag=not cfg.enable_drag))
                elif event.key == pygame.K_m:
                    apply_config(replace(cfg, enable_magnus=not cfg.enable_magnus))
                elif event.key == pygame.K_p:
                    preset_idx = (preset_idx + 1) % len(presets)
                    apply_config(get_config(presets[preset_idx], cfg))
                elif event.key in (pygame.K_LEFTBRACKET, pygame.K_RIGHTBRACKET):
                    delta = -0.1 if event.key == pygame.K_LEFTBRACKET else 0.1
                    lo, hi = PLAYER_HEIGHT_RANGE
                    height = round(max(lo, min(hi, cfg.player_height + delta)), 1)
                    apply_config(cfg.with_player_height(height))

        ctrl.update()

        # ---- DRAW ----
        screen.fill(BG_COLOR)

        pygame.draw.rect(screen, CARD_BG, (0, 0, WIN_W, 42))
        pygame.draw.line(screen, ACCENT, (0, 41), (WIN_W, 41), 2)
        screen.blit(font_title.render("TENNIS SERVE", True, TEXT_WHITE), (28, 13))
        controls = font_header.render(
            "SPACE:play/pause  LEFT/RIGHT:step  R:reset  UP/DOWN:speed  G/D/M:effects  P:preset  [/]:height  Q:quit",
            True, TEXT_DIM,
        )
        screen.blit(controls, (WIN_W - controls.get_width() - 10, 17))

        canvas_surface.fill((8, 8, 18))
        left, ground_y, width = _draw_court_side(canvas_surface, 0, side_h)
        _draw_flight(canvas_surface, ctrl, lambda p: _world_to_side(p, left, ground_y, width), font_sm)
        canvas_surface.blit(font_sm.render("SIDE VIEW", True, TEXT_DIM), (24, 6))

        left, center_y, width = _draw_court_top(canvas_surface, side_h + 8, canvas_h - side_h - 40)
        _draw_flight(canvas_surface, ctrl, lambda p: _world_to_top(p, left, center_y, width), font_sm)
        canvas_surface.blit(font_sm.render("BIRD'S EYE VIEW", True, TEXT_WHITE), (24, side_h + 12))

        overlay = pygame.Surface((canvas_w, 26), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 160))
        canvas_surface.blit(overlay, (0, canvas_h - 26))
        canvas_surface.blit(font_md.render(_status_text(ctrl), True, TEXT_WHITE), (10, canvas_h - 22))

        screen.blit(canvas_surface, (0, 46))

        # ---- STATS PANEL ----
        panel_x = canvas_w + 2
        panel_w = WIN_W - panel_x
        pygame.draw.rect(screen, PANEL_BG, (panel_x, 46, panel_w, WIN_H - 46))
        px = panel_x + 10
        py = 56

        screen.blit(font_title.render("BALL STATS", True, ACCENT), (px, py))
        py += 24
        stats = ctrl.stats()
        if stats:
            for line in (
                f"Time:     {stats['time']:.2f} s",
                f"Height:   {stats['height']:.1f} ft",
                f"Distance: {stats['distance']:.1f} ft",
                f"Speed:    {stats['speed_mph']:.1f} mph",
                f"Bounces:  {stats['bounces']}",
            ):
                screen.blit(font_md.render(line, True, TEXT_WHITE), (px, py))
                py += 18
            screen.blit(font_lg.render(stats["status"], True, NET_YELLOW if ctrl.net_hit else BOUNCE_TEAL), (px, py))
            py += 28
        else:
            screen.blit(font_sm.render("No serve yet", True, TEXT_DIM), (px, py))
            py += 20

        pygame.draw.line(screen, (42, 42, 74), (px, py), (px + panel_w - 20, py), 1)
        py += 8
        screen.blit(font_title.render("SERVE", True, ACCENT), (px, py))
        py += 20
        cfg = ctrl.config
        screen.blit(font_md.render(SERVE_PRESETS[presets[preset_idx]]["label"], True, TEXT_WHITE), (px, py))
        py += 20
        for line in (
            f"Player:    {cfg.player_height:.1f} ft (contact {cfg.contact_height:.2f})",
            f"Speed:     {cfg.initial_speed:.0f} mph",
            f"Spin:      {cfg.topspin_rpm:.0f} rpm @ {cfg.spin_plane:.0f} deg",
            f"Direction: {cfg.direction:.0f} deg",
            f"Vertical:  {cfg.vertical_angle:.0f} deg",
            f"Playback:  {cfg.playback_speed:.2f}x",
        ):
            screen.blit(font_sm.render(line, True, TEXT_DIM), (px, py))
            py += 16
        py += 8

        pygame.draw.line(screen, (42, 42, 74), (px, py), (px + panel_w - 20, py), 1)
        py += 8
        screen.blit(font_title.render("EFFECTS", True, ACCENT), (px, py))
        py += 20
        for name, on in (("Gravity", cfg.enable_gravity), ("Drag", cfg.enable_drag), ("Magnus", cfg.enable_magnus)):
            screen.blit(font_md.render(f"{name:8s} {'ON' if on else 'OFF'}", True, PLAYING_GREEN if on else TEXT_DIM), (px, py))
            py += 18

        py = WIN_H - 28
        state_txt = "PLAYING" if ctrl.is_running else "PAUSED"
        screen.blit(font_sm.render(state_txt, True, PLAYING_GREEN if ctrl.is_running else TEXT_DIM), (px, py))
        screen.blit(font_sm.render(f"Phase:{ctrl.phase.value}", True, TEXT_DIM), (px + 85, py))
        screen.blit(font_sm.render(f"Undo:{ctrl.history_depth}", True, TEXT_DIM), (px + 230, py))

        pygame.display.flip()

    pygame.quit()
