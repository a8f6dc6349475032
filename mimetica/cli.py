"""Command line front end: run a 1D or 2D wave simulation from a preset or a config file."""

from __future__ import annotations

import argparse
import logging
import signal
import threading
from pathlib import Path
from typing import Sequence

from mimetica.config import PRESETS, SimulationConfig, load_config, save_config
from mimetica.integrators import Scheme
from mimetica.solver import RunSummary, WaveSolver

logger = logging.getLogger(__name__)

DEFAULT_PRESET = "wave1d"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Solve the wave equation with mimetic operators and a symplectic integrator."
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        help=f"Built-in configuration (default: {DEFAULT_PRESET})",
    )
    source.add_argument(
        "--config",
        type=Path,
        help="JSON configuration written by --save-config",
    )
    parser.add_argument("--order", type=int, help="Accuracy order (2 or 4)")
    parser.add_argument("--cells", type=int, help="Cells per axis")
    parser.add_argument("--wave-speed", type=float, help="Wave speed c")
    parser.add_argument("--total-time", type=float, help="Simulated time")
    parser.add_argument(
        "--scheme",
        choices=[s.value for s in Scheme],
        help="Time integrator",
    )
    parser.add_argument(
        "--save-config",
        type=Path,
        help="Write the resolved configuration to this JSON file",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve and print the configuration without running",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> SimulationConfig:
    """Apply command line overrides on top of the preset or config file."""
    if args.config is not None:
        config = load_config(args.config)
    else:
        config = PRESETS[args.preset or DEFAULT_PRESET]()

    cells = None
    if args.cells is not None:
        cells = (args.cells,) * config.dimension
    return config.with_overrides(
        order=args.order,
        cells=cells,
        wave_speed=args.wave_speed,
        total_time=args.total_time,
        scheme=Scheme(args.scheme) if args.scheme is not None else None,
    )


def interrupt_handler(stop_event: threading.Event):
    """SIGINT handler that asks the running solver to stop after its current step."""

    def handle(signum, frame) -> None:
        logger.info("Interrupt received, stopping after the current step")
        stop_event.set()

    return handle


def format_summary(summary: RunSummary) -> str:
    status = "cancelled" if summary.cancelled else "completed"
    return (
        f"{status}: {summary.steps_completed}/{summary.num_steps} steps, dt={summary.dt:.6g}, "
        f"t={summary.final_time:.6g}, u in [{summary.field_min:.6g}, {summary.field_max:.6g}], "
        f"energy {summary.initial_energy:.6g} -> {summary.final_energy:.6g}"
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    config = resolve_config(args)
    if args.save_config is not None:
        save_config(config, args.save_config)
        logger.info("Saved configuration to %s", args.save_config)

    if args.dry_run:
        print(config)
        return 0

    solver = WaveSolver(config)
    stop_event = threading.Event()
    previous = signal.signal(signal.SIGINT, interrupt_handler(stop_event))
    try:
        summary = solver.run(stop_event=stop_event, keep_history=False)
    finally:
        signal.signal(signal.SIGINT, previous)

    print(format_summary(summary))
    return 130 if summary.cancelled else 0


if __name__ == "__main__":
    raise SystemExit(main())
