"""Matplotlib analysis charts — serve trajectories, speed decay, effect comparison, landing distance."""

import os
from dataclasses import replace

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np

from tennis_engine.physics import simulate
from tennis_engine.config import SERVE_PRESETS, SimulationConfig, get_config, list_presets
from tennis_engine.forces import ft_per_sec_to_mph
from tennis_engine import court

PRESET_COLORS = ["#e94560", "#28a745", "#ffc107", "#4ecdc4", "#a855f7", "#fb923c"]


def _style_chart(ax, title):
    """Apply dark theme styling to chart."""
    ax.set_facecolor("#0f0f1a")
    ax.set_title(title, color="#e0e0e0", fontsize=13, fontweight="bold", pad=12)
    ax.tick_params(colors="#888888", labelsize=9)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.spines["bottom"].set_color("#333333")
    ax.spines["left"].set_color("#333333")
    ax.xaxis.label.set_color("#aaaaaa")
    ax.yaxis.label.set_color("#aaaaaa")


def _draw_court_profile(ax):
    ax.axhline(0, color="#2f6b4a", linewidth=2)
    ax.plot([0, court.BASELINE_X], [0, 0], color="#26547c", linewidth=4)
    ax.plot([court.NET_X, court.NET_X], [0, court.NET_HEIGHT], color="#b4b4b4", linewidth=3)


def _flight_arrays(result):
    """Columns t, x, y, z, speed (mph) for every recorded state."""
    t = np.array([s.t for s in result.positions])
    xyz = np.array([[s.pos.x, s.pos.y, s.pos.z] for s in result.positions])
    speed = np.array([ft_per_sec_to_mph(s.vel.magnitude()) for s in result.positions])
    return t, xyz, speed


def first_landing_distance(config: SimulationConfig):
    """Downrange distance of the first bounce, or None when the serve never lands."""
    result = simulate(config)
    if not result.bounces:
        return None
    return result.bounces[0].pos.x


def chart_trajectories(save_path=None):
    """Chart 1: Side-view flight of every serve preset."""
    fig, ax = plt.subplots(figsize=(10, 5))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, "Serve Trajectories (side view)")
    _draw_court_profile(ax)

    for color, key in zip(PRESET_COLORS, list_presets()):
        result = simulate(get_config(key))
        _, xyz, _ = _flight_arrays(result)
        ax.plot(xyz[:, 0], xyz[:, 1], color=color, linewidth=2, label=SERVE_PRESETS[key]["label"])
        if result.bounces:
            bx = [b.pos.x for b in result.bounces]
            ax.scatter(bx, np.zeros(len(bx)), color=color, s=30, zorder=5)
        if result.net_hit is not None:
            ax.scatter([result.net_hit.pos.x], [result.net_hit.pos.y], color=color, marker="x", s=80, zorder=6)

    ax.set_xlabel("Distance from server (ft)")
    ax.set_ylabel("Height (ft)")
    ax.set_xlim(-2, court.EXIT_X)
    ax.set_ylim(bottom=-0.5)
    ax.legend(facecolor="#1a1a2e", edgecolor="#333", labelcolor="#e0e0e0", fontsize=8)
    ax.grid(True, alpha=0.15)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def chart_speed_over_time(save_path=None):
    """Chart 2: Ball speed after contact for every preset.

    Drag bleeds speed in flight; each bounce drops it in a step.
    """
    fig, ax = plt.subplots(figsize=(8, 5))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, "Ball Speed After Contact")

    for color, key in zip(PRESET_COLORS, list_presets()):
        t, _, speed = _flight_arrays(simulate(get_config(key)))
        ax.plot(t, speed, color=color, linewidth=2, label=key)

    ax.set_xlabel("Time since contact (s)")
    ax.set_ylabel("Speed (mph)")
    ax.set_ylim(bottom=0)
    ax.legend(facecolor="#1a1a2e", edgecolor="#333", labelcolor="#e0e0e0", fontsize=9)
    ax.grid(True, alpha=0.15)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


EFFECT_VARIANTS = [
    ("All effects", {}, "#e94560"),
    ("No drag", {"enable_drag": False}, "#ffc107"),
    ("No Magnus", {"enable_magnus": False}, "#4ecdc4"),
    ("Gravity only", {"enable_drag": False, "enable_magnus": False}, "#a855f7"),
]


def chart_effect_comparison(preset="kick", save_path=None):
    """Chart 3: One serve flown with force effects switched off one at a time."""
    base = get_config(preset)

    fig, ax = plt.subplots(figsize=(10, 5))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, f"Effect Comparison: {SERVE_PRESETS[preset]['label']}")
    _draw_court_profile(ax)

    for label, overrides, color in EFFECT_VARIANTS:
        result = simulate(replace(base, **overrides))
        _, xyz, _ = _flight_arrays(result)
        ax.plot(xyz[:, 0], xyz[:, 1], color=color, linewidth=2, label=label)

    ax.set_xlabel("Distance from server (ft)")
    ax.set_ylabel("Height (ft)")
    ax.set_xlim(-2, court.EXIT_X)
    ax.set_ylim(bottom=-0.5)
    ax.legend(facecolor="#1a1a2e", edgecolor="#333", labelcolor="#e0e0e0", fontsize=9)
    ax.grid(True, alpha=0.15)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def chart_landing_vs_speed(speeds=None, save_path=None):
    """Chart 4: First-bounce distance across serve speeds, with and without spin."""
    if speeds is None:
        speeds = np.arange(50, 151, 10)

    base = get_config("kick")
    series = [
        ("Kick spin", base, "#28a745"),
        ("No spin", replace(base, topspin_rpm=0), "#dc3545"),
    ]

    fig, ax = plt.subplots(figsize=(8, 5))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, "First Bounce Distance vs Serve Speed")

    for label, cfg, color in series:
        landings = [first_landing_distance(replace(cfg, initial_speed=float(s))) for s in speeds]
        values = np.array([np.nan if d is None else d for d in landings])
        ax.plot(speeds, values, color=color, marker="o", linewidth=2, markersize=6, label=label)

    for y, name in ((court.NET_X, "Net"), (court.NET_X + 21.0, "Service line"), (court.BASELINE_X, "Baseline")):
        ax.axhline(y, color="#555555", linestyle="--", linewidth=1)
        ax.text(speeds[0], y + 1, name, color="#888888", fontsize=8)

    ax.set_xlabel("Serve speed (mph)")
    ax.set_ylabel("First bounce (ft from server)")
    ax.legend(facecolor="#1a1a2e", edgecolor="#333", labelcolor="#e0e0e0", fontsize=9)
    ax.grid(True, alpha=0.15)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def generate_all_charts(output_dir="."):
    """Generate all analysis charts and save to output directory."""
    os.makedirs(output_dir, exist_ok=True)

    charts = [
        ("chart_trajectories.png", chart_trajectories),
        ("chart_speed_over_time.png", chart_speed_over_time),
        ("chart_effect_comparison.png", chart_effect_comparison),
        ("chart_landing_vs_speed.png", chart_landing_vs_speed),
    ]

    paths = []
    for filename, build in charts:
        path = os.path.join(output_dir, filename)
        build(save_path=path)
        paths.append(path)
        print(f"  Saved: {path}")

    plt.close("all")
    return paths
