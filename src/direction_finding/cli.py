#!/usr/bin/env python3
"""
Direction Finding - Command Line Interface

Runs simulated direction of arrival scenarios with the classical
beamformer or MUSIC and prints the estimates.
"""

import argparse
import logging
import sys
from typing import Optional

from . import __version__
from .core.config import ScenarioConfig, get_preset, list_presets
from .core.exceptions import DirectionFindingError
from .utils.conversions import freq_to_str, sample_rate_to_str

logger = logging.getLogger(__name__)


def cmd_info(args: argparse.Namespace) -> int:
    """Display module information."""
    print(f"Direction Finding v{__version__}")
    print()
    print("Simulated Direction of Arrival Estimation")
    print("=========================================")
    print()
    print("Estimators:")
    print("  - cbf:   classical beamformer grid scan (single source)")
    print("  - music: MUSIC noise-subspace pseudospectrum (multiple sources)")
    print()
    print("Array layouts: linear, circular, corner, random")
    print()
    print("Presets:")
    for name in list_presets():
        print(f"  - {name}")
    return 0


def _load_scenario(args: argparse.Namespace) -> Optional[ScenarioConfig]:
    """Resolve the scenario from --config or --preset and apply overrides."""
    if args.config:
        config = ScenarioConfig.load(args.config)
        if config is None:
            print(f"Error: could not load scenario from {args.config}")
            return None
    else:
        preset = get_preset(args.preset)
        if preset is None:
            print(f"Error: unknown preset '{args.preset}'")
            print(f"Available presets: {', '.join(list_presets())}")
            return None
        # Presets are shared, work on a copy
        config = ScenarioConfig.from_dict(preset.to_dict())

    if args.seed is not None:
        config.seed = args.seed
    if args.snapshots is not None:
        config.num_snapshots = args.snapshots
    config._validate()

    if args.save:
        config.save(args.save)
    return config


def _print_scenario(config: ScenarioConfig) -> None:
    print(f"Scenario: {config.name}")
    print(
        f"  Array: {config.array.layout}, {config.array.num_elements} elements, "
        f"dimension {config.array.dimension} wavelengths"
    )
    print(f"  Carrier: {freq_to_str(config.carrier_frequency)}")
    print(
        f"  Sampling: {sample_rate_to_str(config.sample_rate)}, "
        f"{config.num_snapshots} snapshots"
    )
    angles = ", ".join(f"{s.angle:.4f}" for s in config.sources)
    print(f"  Source angles (rad): {angles}")


def cmd_cbf(args: argparse.Namespace) -> int:
    """Run the classical beamformer on a scenario."""
    from .antenna_array import ClassicalBeamformer, Simulation, beamwidth

    config = _load_scenario(args)
    if config is None:
        return 1
    _print_scenario(config)

    try:
        sim = Simulation.from_config(config)
        result = ClassicalBeamformer(sim).scan(
            config.sample_rate, config.num_snapshots, config.scan_grid()
        )
    except DirectionFindingError as e:
        print(f"Error: {e}")
        return 1

    print()
    print(f"Found: {result.peak_angle:.4f} rad ({result.peak_angle_deg:.2f} deg)")
    if sim.array.aperture() > 0:
        print(f"Beamwidth: {beamwidth(sim):.4f} rad")
    return 0


def cmd_music(args: argparse.Namespace) -> int:
    """Run MUSIC on a scenario."""
    from .antenna_array import MUSICEstimator, Simulation, find_peaks

    config = _load_scenario(args)
    if config is None:
        return 1
    _print_scenario(config)

    try:
        sim = Simulation.from_config(config)
        spectrum = MUSICEstimator(sim).pseudospectrum(
            config.sample_rate, config.num_snapshots
        )
    except DirectionFindingError as e:
        print(f"Error: {e}")
        return 1

    grid = config.scan_grid()
    if args.threshold is not None:
        peaks = find_peaks(spectrum, grid, threshold=args.threshold)
    else:
        peaks = find_peaks(spectrum, grid, n=sim.num_sources)

    print()
    print("Found: " + " -- ".join(f"{p:.4f}" for p in peaks))
    return 0


def _add_scenario_arguments(parser: argparse.ArgumentParser, default_preset: str) -> None:
    parser.add_argument(
        "--preset",
        "-p",
        type=str,
        default=default_preset,
        help=f"Preset scenario (default: {default_preset})",
    )
    parser.add_argument(
        "--config", "-c", type=str, help="Scenario JSON file (overrides --preset)"
    )
    parser.add_argument("--seed", type=int, help="Random seed")
    parser.add_argument("--snapshots", "-k", type=int, help="Number of snapshots")
    parser.add_argument("--save", type=str, help="Save the resolved scenario to JSON")


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="direction-finding",
        description="Direction Finding - simulated DoA estimation",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Info command
    info_parser = subparsers.add_parser("info", help="Display module information")
    info_parser.set_defaults(func=cmd_info)

    # CBF command
    cbf_parser = subparsers.add_parser("cbf", help="Run the classical beamformer")
    _add_scenario_arguments(cbf_parser, "cbf_linear")
    cbf_parser.set_defaults(func=cmd_cbf)

    # MUSIC command
    music_parser = subparsers.add_parser("music", help="Run the MUSIC estimator")
    _add_scenario_arguments(music_parser, "music_circular")
    music_parser.add_argument(
        "--threshold",
        "-t",
        type=float,
        help="Keep every peak above min(spectrum) * threshold instead of one per source",
    )
    music_parser.set_defaults(func=cmd_music)

    return parser


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point.

    Args:
        argv: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    if args.command is None:
        # No command specified - show info
        return cmd_info(args)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
