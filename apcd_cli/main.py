"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m apcd_cli criteria [--rubric PATH] [--json]
    python -m apcd_cli evaluate <snapshot.json> [--rubric PATH] [--json]
    python -m apcd_cli fees --types N [--discount] [--json]
    python -m apcd_cli simulate <script.json> [--rubric PATH] [--json]
    python -m apcd_cli config --show | --init

Environment Variables:
    APCD_APPROVE_THRESHOLD      Ratio at or above which APPROVE is advised (default: 0.6)
    APCD_REJECT_THRESHOLD       Ratio below which REJECT is advised (default: 0.4)
    APCD_RUBRIC_PATH            YAML rubric replacing the default criteria
    APCD_ALWAYS_INSPECT         Comma-separated device types that always need a site visit
    APCD_LOG_LEVEL              Log level (default: INFO)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from apcd_cli.commands import criteria, evaluate, fees, simulate
from core.config.runtime import RuntimeConfig, load_runtime_config


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="apcd",
        description="APCD empanelment CLI - Inspect the rubric, score snapshots, quote fees and replay lifecycles.",
    )
    parser.add_argument(
        "--version", action="version", version="%(prog)s 0.1.0"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./apcd.json or ~/.config/apcd/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks for unexpected errors",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- criteria command ---
    criteria_parser = subparsers.add_parser(
        "criteria",
        help="Show the evaluation rubric",
        description="List the evaluation criteria with their maximum scores.",
    )
    criteria_parser.add_argument(
        "--rubric",
        type=str,
        default=None,
        help="YAML rubric file (default: configured rubric or built-in criteria)",
    )
    criteria_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    criteria_parser.set_defaults(func=criteria.criteria_cmd)

    # --- evaluate command ---
    evaluate_parser = subparsers.add_parser(
        "evaluate",
        help="Aggregate the scores of a stored snapshot",
        description="Compute total, ratio and recommendation for an application snapshot.",
    )
    evaluate_parser.add_argument(
        "snapshot",
        type=str,
        help="Path to application snapshot JSON",
    )
    evaluate_parser.add_argument("--rubric", type=str, default=None, help="YAML rubric file")
    evaluate_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    evaluate_parser.set_defaults(func=evaluate.evaluate_cmd)

    # --- fees command ---
    fees_parser = subparsers.add_parser(
        "fees",
        help="Quote application and empanelment fees",
        description="Application fee plus per-type empanelment fee, with discount and GST.",
    )
    fees_parser.add_argument(
        "--types", "-n",
        type=int,
        required=True,
        help="Number of APCD types applied for",
    )
    fees_parser.add_argument(
        "--discount",
        action="store_true",
        default=False,
        help="Apply the MSE / startup / local supplier discount",
    )
    fees_parser.add_argument("--json", action="store_true", default=False, help="JSON output")
    fees_parser.set_defaults(func=fees.fees_cmd)

    # --- simulate command ---
    simulate_parser = subparsers.add_parser(
        "simulate",
        help="Replay a scripted sequence of lifecycle events",
        description="Apply {actor, event} steps in order and stop at the first rejected event.",
    )
    simulate_parser.add_argument("script", type=str, help="Path to script JSON")
    simulate_parser.add_argument("--rubric", type=str, default=None, help="YAML rubric file")
    simulate_parser.add_argument("--json", action="store_true", default=False, help="JSON output")
    simulate_parser.set_defaults(func=simulate.simulate_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show the effective configuration (file + environment)",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="apcd.json",
        help="Path for config file (default: apcd.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(json.dumps(RuntimeConfig().to_dict(), indent=2) + "\n")
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (APCD_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.runtime_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: apcd config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=rejected or invalid input)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_runtime_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    setup_logging(level=args.log_level or config.log_level)

    # Attach config to args for commands to use
    args.runtime_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if args.debug:
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
