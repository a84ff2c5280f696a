# Profit Sharing - Profit-sharing calculation engine for multi-company operations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for the profit-sharing engine.

The CLI is intentionally thin: it loads a TOML configuration, hands the
resulting inputs to the engine and renders the results as console tables.
It does not implement any profit-sharing logic itself.


Commands
--------

formulas
    Print the catalog of available formula types:

        python -m profit_sharing.cli formulas

calculate
    Compute profit sharing for the projects of a configuration file:

        python -m profit_sharing.cli calculate --config profit_sharing.toml
        python -m profit_sharing.cli calculate --project torre-prisma --breakdown

    Options:

    - ``--config PATH``:
        TOML configuration (see config.py for the layout). Defaults to
        ``profit_sharing.toml`` in the current directory.
    - ``--project ID`` (repeatable):
        Restrict the calculation to the given projects.
    - ``--breakdown``:
        Also print the line items of every result.
    - ``--decimals N``:
        Override display.decimals from the configuration.
    - ``--no-validate``:
        Skip rules validation even if [calculation].strict is true. The
        engine then applies its defaults to out-of-range values.


Errors
------
Configuration problems (missing file, invalid TOML, invalid rules) and
unknown formula types stop the command with an error message. A project
without profit is not an error: it is reported with a share of 0.

Use ``-v/--verbose`` to enable debug logging.
"""

import argparse
import logging
from typing import Optional

from . import __version__
from .config import build_config_inputs, check_decimals, load_config
from .engine import UnknownFormulaTypeError, calculate_batch
from .views import (
    breakdown_to_dataframe,
    formula_types_to_dataframe,
    results_to_dataframe,
)

logger = logging.getLogger(__name__)


def _decimals_arg(value: str) -> int:
    """argparse type for --decimals: a non-negative integer."""
    try:
        return check_decimals(int(value), "--decimals")
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m profit_sharing.cli",
        description=(
            "Profit Sharing - computes the management/service fee owed on "
            "each project's net profit according to its configured formula."
        ),
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of profit_sharing and exit.",
    )
    ap.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command")

    subparsers.add_parser(
        "formulas",
        help="List the available formula types.",
    )

    calc = subparsers.add_parser(
        "calculate",
        help="Compute profit sharing for the configured projects.",
    )
    calc.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. "
            "If omitted, 'profit_sharing.toml' in the current directory is used."
        ),
    )
    calc.add_argument(
        "--project",
        dest="projects",
        action="append",
        metavar="ID",
        help="Only compute the given project (can be repeated).",
    )
    calc.add_argument(
        "--breakdown",
        action="store_true",
        help="Also print the breakdown line items of every project.",
    )
    calc.add_argument(
        "--decimals",
        type=_decimals_arg,
        help="Number of decimals for amounts (overrides display.decimals).",
    )
    calc.add_argument(
        "--no-validate",
        dest="validate",
        action="store_false",
        help="Do not validate rules on load, even in strict mode.",
    )

    return ap


def _handle_formulas() -> None:
    """Handle the 'formulas' subcommand: print the formula type catalog."""
    print(formula_types_to_dataframe().to_string(index=False))


def _handle_calculate(args: argparse.Namespace) -> None:
    """
    Handle the 'calculate' subcommand.

    This function:
    - loads the configuration (validating rules unless --no-validate),
    - builds engine inputs for the eligible (and requested) projects,
    - runs the batch calculation,
    - prints the summary table, the optional breakdown and the total.
    """
    strict = None if args.validate else False

    # 1) Load configuration.
    try:
        config = load_config(args.config_path, strict=strict)
        inputs = build_config_inputs(config, args.projects)
    except (FileNotFoundError, ValueError) as exc:
        # RuleValidationError is a ValueError and carries all problems.
        raise SystemExit(f"Error: {exc}") from exc

    if not config.handles_profit_sharing:
        print("Profit sharing is disabled for this company.")
        return

    if not inputs:
        print("No eligible projects found in the configuration.")
        return

    # 2) Compute.
    try:
        results = calculate_batch(inputs)
    except UnknownFormulaTypeError as exc:
        raise SystemExit(f"Error: {exc}") from exc

    decimals = config.decimals if args.decimals is None else args.decimals

    # 3) Render.
    summary = results_to_dataframe(results, decimals=decimals)
    print()
    print(f"=== Profit sharing ({config.currency}) ===")
    print(summary.to_string(index=False))

    if args.breakdown:
        print()
        print("=== Breakdown ===")
        print(breakdown_to_dataframe(results, decimals=decimals).to_string(index=False))

    total_share = sum(r.total_share for r in results)
    print()
    print(
        f"Total projects: {len(results)} | "
        f"Total share: {total_share:.{decimals}f} {config.currency}"
    )


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the profit-sharing CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # --version: short-circuit and exit early.
    if args.version:
        print(f"profit_sharing version {__version__}")
        return

    if args.command == "formulas":
        _handle_formulas()
    elif args.command == "calculate":
        _handle_calculate(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
