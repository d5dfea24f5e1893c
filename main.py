#!/usr/bin/env python3
"""CLI entry point for the Tennis Serve Simulator.

Usage:
    python main.py play [options]     Launch Pygame visualizer
    python main.py run [options]      Fly one serve (text mode) and print stats
    python main.py analyze            Generate comparison charts
    python main.py test               Run all tests
    python main.py demo               Full demo: every preset, then charts

Options for play/run:
    --preset NAME       Serve preset (default: kick)
    --speed MPH         Initial speed
    --spin RPM          Spin rate (negative is topspin)
    --angle DEG         Vertical launch angle
    --direction DEG     Horizontal direction
    --height FT         Player height (contact height follows)
    --no-gravity / --no-drag / --no-magnus
    --verbose           Debug logging
"""

import argparse
import logging
import sys
import os
from dataclasses import replace

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))


def _parse_run_args(argv):
    from tennis_engine.config import list_presets

    parser = argparse.ArgumentParser(prog="main.py")
    parser.add_argument("--preset", default="kick", choices=list_presets())
    parser.add_argument("--speed", type=float)
    parser.add_argument("--spin", type=float)
    parser.add_argument("--angle", type=float)
    parser.add_argument("--direction", type=float)
    parser.add_argument("--height", type=float)
    parser.add_argument("--no-gravity", action="store_true")
    parser.add_argument("--no-drag", action="store_true")
    parser.add_argument("--no-magnus", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def _configure_logging(verbose=False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


def _build_config(args):
    """Layer CLI overrides on top of the chosen preset."""
    from tennis_engine.config import get_config

    config = get_config(args.preset)
    if args.height is not None:
        config = config.with_player_height(args.height)

    overrides = {
        "initial_speed": args.speed,
        "topspin_rpm": args.spin,
        "vertical_angle": args.angle,
        "direction": args.direction,
    }
    config = replace(config, **{k: v for k, v in overrides.items() if v is not None})
    return replace(
        config,
        enable_gravity=config.enable_gravity and not args.no_gravity,
        enable_drag=config.enable_drag and not args.no_drag,
        enable_magnus=config.enable_magnus and not args.no_magnus,
    )


def _print_flight(label, config, result):
    from tennis_engine.forces import ft_per_sec_to_mph

    print(f"Serve: {label}")
    print(f"  {config.initial_speed:.0f} mph  |  {config.topspin_rpm:.0f} rpm @ {config.spin_plane:.0f} deg  |  "
          f"vertical {config.vertical_angle:.1f} deg  |  direction {config.direction:.1f} deg")
    effects = [name for name, on in (("gravity", config.enable_gravity),
                                     ("drag", config.enable_drag),
                                     ("magnus", config.enable_magnus)) if on]
    print(f"  Effects: {', '.join(effects) or 'none'}")

    last = result.positions[-1]
    print(f"  Flight time: {result.duration:.3f}s  |  Steps: {len(result.positions) - 1}")
    for i, b in enumerate(result.bounces):
        print(f"  Bounce {i + 1}: x={b.pos.x:6.1f} ft  z={b.pos.z:5.1f} ft  at {b.t:.3f}s")
    if result.net_hit is not None:
        n = result.net_hit
        print(f"  NET at height {n.pos.y:.2f} ft, {n.t:.3f}s after contact")
    elif result.exited:
        print(f"  Left the court at {last.t:.3f}s, {ft_per_sec_to_mph(last.vel.magnitude()):.1f} mph")
    else:
        print(f"  Still in play at {last.t:.3f}s (x={last.pos.x:.1f} ft)")


def cmd_play():
    """Launch the Pygame visualizer."""
    args = _parse_run_args(sys.argv[2:])
    _configure_logging(args.verbose)
    print("Launching Tennis Serve Visualizer...")
    print("Controls: SPACE=play/pause  LEFT/RIGHT=step  R=reset  UP/DOWN=speed  G/D/M=effects  P=preset  Q=quit")
    print("-" * 60)
    from tennis_sim.visualizer import run_visualizer
    run_visualizer(_build_config(args), preset=args.preset)


def cmd_run():
    """Fly one serve in text mode and print stats."""
    from tennis_engine.config import SERVE_PRESETS
    from tennis_engine.physics import simulate

    args = _parse_run_args(sys.argv[2:])
    _configure_logging(args.verbose)
    config = _build_config(args)

    print("=" * 60)
    print("  TENNIS SERVE")
    print("=" * 60)
    _print_flight(SERVE_PRESETS[args.preset]["label"], config, simulate(config))
    print("=" * 60)


def cmd_analyze():
    """Generate all analysis charts."""
    _configure_logging()
    print("Generating analysis charts...")
    print("-" * 60)
    from tennis_sim.analysis import generate_all_charts
    output_dir = os.path.join(os.path.dirname(__file__), "output")
    paths = generate_all_charts(output_dir=output_dir)
    print(f"\nDone! {len(paths)} charts saved to {output_dir}/")


def cmd_test():
    """Run all tests."""
    import subprocess
    print("Running tests...")
    print("-" * 60)
    result = subprocess.run(
        [sys.executable, "-m", "pytest", "tests/", "-v"],
        cwd=os.path.dirname(os.path.abspath(__file__)),
    )
    sys.exit(result.returncode)


def cmd_demo():
    """Full demo: every preset, then charts."""
    _configure_logging()
    print("=" * 60)
    print("  TENNIS SERVE — SIMULATION DEMO")
    print("=" * 60)
    print()

    from tennis_engine.config import SERVE_PRESETS, get_config, list_presets
    from tennis_engine.physics import simulate

    for key in list_presets():
        config = get_config(key)
        _print_flight(SERVE_PRESETS[key]["label"], config, simulate(config))
        print()

    print("-" * 60)
    cmd_analyze()

    print()
    print("=" * 60)
    print("  Demo complete! Check the 'output' folder for charts.")
    print("=" * 60)


COMMANDS = {
    "play": cmd_play,
    "run": cmd_run,
    "analyze": cmd_analyze,
    "test": cmd_test,
    "demo": cmd_demo,
}


def main():
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        print(__doc__)
        print("Available commands:")
        for name, func in COMMANDS.items():
            print(f"  {name:12s} {func.__doc__}")
        sys.exit(1)

    COMMANDS[sys.argv[1]]()


if __name__ == "__main__":
    main()
