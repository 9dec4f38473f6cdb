"""
Command line interface for OpenCSP.

Usage:
    opencsp generate --stock-length 100 --num-items 10 \\
        --min-item-length 10 --max-item-length 50 \\
        --min-demand 1 --max-demand 30 --output instance.csv
    opencsp solve instance.csv
    opencsp solve instance.csv --max-time 60 --json result.json --verbose

Exit codes:
    0  converged, or stopped on a budget with a usable pattern set
    1  solver failure
    2  invalid or infeasible instance / bad arguments
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from opencsp.config import CSPConfig
from opencsp.exceptions import InfeasibleInstance, InvalidInstance, SolverFailure
from opencsp.generator import generate_instance
from opencsp.parsers import CSVInstanceParser, write_instance_csv
from opencsp.solver import ColumnGeneration, LoopState

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """Configure logging to the console and optionally a file."""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w'))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=handlers,
        force=True,
    )
    logging.captureWarnings(True)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="opencsp",
        description="One-dimensional cutting stock via column generation",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Config file (default: ./opencsp.toml or ~/.opencsp/config.toml)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", type=Path, default=None, help="Also log to this file")

    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate a random instance CSV")
    gen.add_argument("--stock-length", type=int, required=True,
                     help="Length of the stock roll/bar")
    gen.add_argument("--num-items", type=int, required=True, help="Number of item types")
    gen.add_argument("--min-item-length", type=int, required=True, help="Minimum item length")
    gen.add_argument("--max-item-length", type=int, required=True, help="Maximum item length")
    gen.add_argument("--min-demand", type=int, required=True, help="Minimum demand")
    gen.add_argument("--max-demand", type=int, required=True, help="Maximum demand")
    gen.add_argument("--output", "-o", type=Path, required=True, help="Output CSV filename")
    gen.add_argument("--seed", type=int, default=None, help="Random seed")

    solve = sub.add_parser("solve", help="Solve an instance CSV")
    solve.add_argument("instance", type=Path, help="Instance CSV file")
    solve.add_argument("--max-time", type=float, default=None,
                       help="Global time budget in seconds (default: 600)")
    solve.add_argument("--master-time-limit", type=float, default=None,
                       help="Per-solve master LP budget in seconds (default: 10)")
    solve.add_argument("--pricing-time-limit", type=float, default=None,
                       help="Per-solve pricing budget in seconds (default: 60)")
    solve.add_argument("--max-iterations", type=int, default=None,
                       help="Maximum column generation rounds (default: unlimited)")
    solve.add_argument("--json", type=Path, default=None, dest="json_output",
                       help="Write the solution as JSON to this file")

    return parser


def _load_config(args: argparse.Namespace) -> CSPConfig:
    values = CSPConfig.load(args.config).to_dict()
    for name in ("max_time", "master_time_limit", "pricing_time_limit", "max_iterations"):
        value = getattr(args, name, None)
        if value is not None:
            values[name] = value
    if args.verbose:
        values["log_level"] = "DEBUG"
    # Rebuilt so command-line values are validated like file values
    return CSPConfig(**values)


def cmd_generate(args: argparse.Namespace) -> int:
    instance = generate_instance(
        stock_length=args.stock_length,
        num_items=args.num_items,
        min_item_length=args.min_item_length,
        max_item_length=args.max_item_length,
        min_demand=args.min_demand,
        max_demand=args.max_demand,
        seed=args.seed,
        name=args.output.stem,
    )
    write_instance_csv(instance, args.output)
    logger.info("Wrote %d item types to %s", instance.num_items, args.output)
    return 0


def cmd_solve(args: argparse.Namespace, config: CSPConfig) -> int:
    instance = CSVInstanceParser().parse(args.instance)
    logger.info("Loaded %s", instance)

    cg = ColumnGeneration(instance, config.to_cg_config())
    solution = cg.solve()

    print(solution.summary())

    if args.json_output is not None:
        args.json_output.write_text(json.dumps(solution.to_dict(), indent=2))
        logger.info("Wrote solution to %s", args.json_output)

    if solution.status == LoopState.FAILED:
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point; returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = _load_config(args)
    except ValueError as e:
        parser.error(str(e))

    setup_logging(config.log_level, args.log_file)

    try:
        if args.command == "generate":
            return cmd_generate(args)
        return cmd_solve(args, config)
    except (InvalidInstance, InfeasibleInstance, FileNotFoundError) as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 2
    except SolverFailure as e:
        logger.error("SolverFailure: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
