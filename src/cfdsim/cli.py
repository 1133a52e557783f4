"""Command-line entry point for the position simulator.

Usage:
    cfdsim --config examples/default.yaml --out out/ --charts
    cfdsim --start-price 100 --add-interval 50 --display-interval 50 \\
        --rule 100 200 1 --direction sell

Outputs (with --out):
    results.json - Full ResultSet (canonical JSON)
    sha256.txt - SHA256 digest of the ResultSet
    profit_loss.png, position.png - Charts (with --charts)
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from cfdsim.artifacts import write_outputs
from cfdsim.config import SimulatorConfig, load_config
from cfdsim.contracts import Direction, ParseMode, SamplingMode
from cfdsim.engine import simulate
from cfdsim.errors import SimulatorError
from cfdsim.logging_config import setup_logging
from cfdsim.report import ResultFormatter

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="cfdsim",
        description="Simulate a cost-averaging CFD position across a price sweep",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML or JSON config file (default: built-in starter rules)",
    )
    parser.add_argument("--start-price", type=str, default=None, help="Price to start from")
    parser.add_argument(
        "--add-interval",
        type=str,
        default=None,
        help="Price step between position additions",
    )
    parser.add_argument(
        "--display-interval",
        type=str,
        default=None,
        help="Price stride between result rows",
    )
    parser.add_argument(
        "--direction",
        choices=[d.value for d in Direction],
        default=None,
        help="Trade direction (default: buy)",
    )
    parser.add_argument(
        "--sampling",
        choices=[m.value for m in SamplingMode],
        default=None,
        help="Row sampling mode (default: exact_modulo)",
    )
    parser.add_argument(
        "--rule",
        nargs=3,
        action="append",
        metavar=("START", "END", "SIZE"),
        default=None,
        help="Sizing rule; repeat for several (replaces config rules)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject incomplete rule rows instead of skipping them",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Output directory for results.json and sha256.txt",
    )
    parser.add_argument(
        "--charts",
        action="store_true",
        help="Also render PNG charts into the output directory",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Log level (default: WARNING)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit JSON log lines instead of plain text",
    )
    return parser


def apply_overrides(config: SimulatorConfig, args: argparse.Namespace) -> SimulatorConfig:
    """Overlay CLI flags on top of a loaded config."""
    parameter_updates = {
        name: value
        for name, value in (
            ("start_price", args.start_price),
            ("add_interval", args.add_interval),
            ("display_interval", args.display_interval),
            ("direction", args.direction),
            ("sampling_mode", args.sampling),
        )
        if value is not None
    }
    updates: dict[str, object] = {}
    if parameter_updates:
        updates["parameters"] = config.parameters.model_copy(update=parameter_updates)
    if args.rule:
        updates["rules"] = [list(rule) for rule in args.rule]
    if args.strict:
        updates["parse_mode"] = ParseMode.STRICT
    return config.model_copy(update=updates) if updates else config


def main(argv: list[str] | None = None) -> int:
    """Run the simulator from the command line."""
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level, json_format=args.log_json)

    try:
        config = load_config(args.config) if args.config else SimulatorConfig()
        config = apply_overrides(config, args)
        result = simulate(config.build_parameters(), config.build_rule_set())
    except SimulatorError as exc:
        logger.warning(
            "Simulation rejected",
            extra={"error_type": type(exc).__name__, "reason": str(exc)},
        )
        print(f"ERROR: {exc}")
        return 1

    formatter = ResultFormatter(currency_suffix=config.currency_suffix)
    print(formatter.render_text(result))

    if args.out or args.charts:
        out_dir = args.out or Path(".")
        results_path, sha256_path = write_outputs(result, out_dir)
        print(f"\n  Results written to {results_path}")
        print(f"  SHA256 written to {sha256_path}")

        if args.charts:
            from cfdsim.report.charts import render_charts

            profit_path, position_path = render_charts(result, out_dir, formatter)
            print(f"  Charts written to {profit_path} and {position_path}")

    return 0
