"""Serves as the command line entry point of the level generator."""

from __future__ import annotations

import argparse
import logging
import multiprocessing
from pathlib import Path
import sys

import constants
from enums import ExampleCatalog, NeighborMismatchPolicy, TieBreakMode
from logging_config import setup_logging
from model.errors import ConfigurationError
from model.generation_manager import GenerationManager
from model.generation_result import ContradictionReport, InconsistencyReport, NeighborMismatchReport, ResolvedGrid
from model.module_catalog import ModuleCatalog


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generates a tile level with edge-constrained wave function collapse")
    parser.add_argument("--width", type=int, default=constants.GRID_SIZE_DEFAULT, help="Grid width in cells")
    parser.add_argument("--height", type=int, default=constants.GRID_SIZE_DEFAULT, help="Grid height in cells")
    parser.add_argument(
        "--seed",
        type=int,
        default=constants.RANDOM_SEED_SENTINEL,
        help=f"RNG seed ({constants.RANDOM_SEED_SENTINEL} for a time-derived seed)",
    )
    parser.add_argument(
        "--catalog",
        choices=[example.name.lower() for example in ExampleCatalog],
        default=ExampleCatalog.CORRIDORS.name.lower(),
        help="Example module catalog to generate from",
    )
    parser.add_argument(
        "--attempts",
        type=int,
        default=constants.MAX_ATTEMPTS_DEFAULT,
        help="Maximum number of seeds to try before giving up",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of worker processes trying seeds in parallel",
    )
    parser.add_argument("--stable-ties", action="store_true", help="Break priority ties by cell coordinates")
    parser.add_argument(
        "--tolerate-mismatches",
        action="store_true",
        help="Record mismatching neighbor assignments instead of aborting the run",
    )
    parser.add_argument("--log-dir", type=Path, default=None, help="Directory to write a debug log file to")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging on the console")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Generates a level and prints its module IDs.

    Returns:
        0 if a consistent level was generated, 1 if every attempt failed, 2 for invalid settings.
    """
    args = _parse_args(argv)

    setup_logging(args.log_dir, console_level=logging.DEBUG if args.debug else logging.WARNING)

    catalog = ModuleCatalog.from_example(ExampleCatalog[args.catalog.upper()])
    try:
        manager = GenerationManager(
            catalog,
            max_attempts=args.attempts,
            max_workers=args.workers,
            tie_break_mode=TieBreakMode.STABLE if args.stable_ties else TieBreakMode.RANDOM,
            neighbor_mismatch_policy=(
                NeighborMismatchPolicy.RECORD if args.tolerate_mismatches else NeighborMismatchPolicy.HALT
            ),
        )
        result = manager.generate(args.width, args.height, args.seed)
    except ConfigurationError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 2

    match result:
        case ResolvedGrid():
            print(result.format_grid())
            print(f"\nStart: {result.start_coords}  Goal: {result.goal_coords}  Seed: {result.seed}")
            return 0
        case InconsistencyReport():
            print(result.format_grid())
            print(
                f"\nInconsistent level (seed {result.seed}): {len(result.mismatched_pairs)} mismatching pairs, "
                f"{len(result.exposed_edges)} exposed rim edges"
            )
        case ContradictionReport():
            print(f"Contradiction at {result.coords} (seed {result.seed})", file=sys.stderr)
        case NeighborMismatchReport():
            print(f"Neighbor mismatch at {result.mismatch.coords} (seed {result.seed})", file=sys.stderr)
    return 1


if __name__ == "__main__":
    multiprocessing.freeze_support()

    sys.exit(main())
