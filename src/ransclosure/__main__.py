"""Command-line interface: run a closure on the demo channel."""
from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from ransclosure.cases import ChannelCase
from ransclosure.config import TurbulenceConfig
from ransclosure.logging_config import setup_logging
from ransclosure.turbulence.registry import TurbulenceModelType

logger = logging.getLogger("ransclosure.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ransclosure",
        description="Evaluate a RANS turbulence closure on a plane channel.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Each iteration assembles the turbulent stress into a fresh momentum operator
and advances the turbulence fields. The velocity itself is not solved for.

Example:
  python -m ransclosure --model k-omega --nx 40 --ny 20 --iterations 50
""",
    )
    parser.add_argument("--config", help="JSON file with a 'turbulence' section")
    parser.add_argument("--model", choices=[t.value for t in TurbulenceModelType],
                        help="Closure to use (overrides the config file)")
    parser.add_argument("--nx", type=int, default=20, help="Cells along the channel (default: 20)")
    parser.add_argument("--ny", type=int, default=16, help="Cells across the channel (default: 16)")
    parser.add_argument("--iterations", type=int, default=10, help="Outer iterations (default: 10)")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    parser.add_argument("--log-file", help="Also write the log to this file")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    config = TurbulenceConfig.load(args.config) if args.config else TurbulenceConfig()
    if args.model:
        config.model = args.model

    case = ChannelCase(nx=args.nx, ny=args.ny)
    summary = case.run(config, iterations=args.iterations)
    if "eddy_mu_max" in summary:
        logger.info(f"Final eddy viscosity range: [{summary['eddy_mu_min']:.4e}, {summary['eddy_mu_max']:.4e}]")
    logger.info("Done.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
