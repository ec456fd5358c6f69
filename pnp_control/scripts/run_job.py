#!/usr/bin/env python3
"""
Run Job Script.

Generate pick-and-place or paste-dispense G-code for a job file.

Usage:
    python -m pnp_control.scripts.run_job --job board.yaml
    python -m pnp_control.scripts.run_job --job board.yaml --output board.gcode
    python -m pnp_control.scripts.run_job --job board.yaml --mode dispense --init-ms 40 --area-ms 25
    python -m pnp_control.scripts.run_job --job board.yaml --config my_machine.yaml --log-level DEBUG

Modes:
    place      pick every part from its tape and place it (default)
    dispense   put a paste dot on every pad of every part

G-code goes to stdout unless --output is given; diagnostics go to stderr.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Sequence, TextIO

import yaml

from pnp_control.board.loader import Job, load_job
from pnp_control.configs.loader import ConfigError, MachineConfig, load_config
from pnp_control.gcode.generator import GCodeEmitter
from pnp_control.machine.session import PnPSession
from pnp_control.utils.fs import atomic_write_text
from pnp_control.utils.logging_config import logging_context, push_context, setup_logging

logger = logging.getLogger(__name__)

MODES = ("place", "dispense")


def run(
    job: Job,
    machine: MachineConfig,
    emitter: GCodeEmitter,
    mode: str = "place",
    banner: str | None = None,
) -> dict[str, int]:
    """Emit a complete job: banner, preamble, per-part groups, finish.

    In ``place`` mode each tape is advanced after a successful
    pick-and-place, so consecutive parts take consecutive components.

    Returns
    -------
    dict
        Counters: ``parts``, ``placed``, ``skipped``, ``pads``.
    """
    if mode not in MODES:
        raise ValueError(f"mode must be one of {MODES}, got {mode!r}")

    stats = {"parts": len(job.parts), "placed": 0, "skipped": 0, "pads": 0}
    if banner:
        emitter.comment(banner)

    session = PnPSession(machine, emitter)
    session.initialize(job.config)

    for part in job.parts:
        if mode == "dispense":
            stats["pads"] += session.dispense_part(part)
            continue
        if session.pick_and_place(part):
            job.config.tape_for(part).advance()
            stats["placed"] += 1
        else:
            stats["skipped"] += 1

    session.finish()
    return stats


def _build_overrides(args: argparse.Namespace) -> dict[str, Any]:
    dispense: dict[str, float] = {}
    if args.init_ms is not None:
        dispense["init_ms"] = args.init_ms
    if args.area_ms is not None:
        dispense["area_ms_per_mm2"] = args.area_ms
    return {"dispense": dispense} if dispense else {}


def main(argv: Sequence[str] | None = None, stdout: TextIO | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Generate pick-and-place / paste-dispense G-code",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Available modes: {', '.join(MODES)}",
    )
    parser.add_argument(
        "--job",
        "-j",
        type=str,
        required=True,
        help="Job file (YAML) with board, tapes and parts",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Machine configuration file path",
    )
    parser.add_argument(
        "--mode",
        "-m",
        type=str,
        choices=MODES,
        default="place",
        help="What to generate (default: place)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Write G-code to this file instead of stdout",
    )
    parser.add_argument(
        "--banner",
        type=str,
        help="Comment written as the first line (default: job file name)",
    )

    # Dispense timing
    parser.add_argument(
        "--init-ms",
        type=float,
        help="Dispense dwell base time in ms (overrides config)",
    )
    parser.add_argument(
        "--area-ms",
        type=float,
        help="Dispense dwell per mm^2 of pad area (overrides config)",
    )

    # Diagnostics
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic verbosity on stderr",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write diagnostics to this file",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit diagnostics as JSON lines",
    )

    args = parser.parse_args(argv)

    setup_logging(
        log_level=args.log_level,
        log_file=args.log_file,
        json=args.json_logs,
        context={"app": "pnp"},
    )
    push_context(mode=args.mode)

    try:
        machine = load_config(args.config, overrides=_build_overrides(args))
        job = load_job(args.job)
    except (ConfigError, FileNotFoundError, yaml.YAMLError) as e:
        logger.error("%s", e)
        return 1

    banner = args.banner if args.banner is not None else str(job.source)

    if args.output:
        emitter = GCodeEmitter()
    else:
        emitter = GCodeEmitter(stdout if stdout is not None else sys.stdout)

    with logging_context(job=job.source.name if job.source else "-"):
        stats = run(job, machine, emitter, mode=args.mode, banner=banner)

    if args.output:
        atomic_write_text(args.output, emitter.getvalue())
        logger.info("G-code written to %s", args.output)

    if args.mode == "place":
        logger.info(
            "Placed %d of %d part(s), %d skipped",
            stats["placed"],
            stats["parts"],
            stats["skipped"],
        )
    else:
        logger.info("Dispensed %d pad(s) on %d part(s)", stats["pads"], stats["parts"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
