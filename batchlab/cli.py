"""
batchlab CLI: Command-line interface for running experiment batches.

Provides commands for:
- run: Expand a configuration, execute every invocation, write results
"""

from __future__ import annotations

import argparse
import logging
import shlex
import sys
from pathlib import Path

from batchlab.errors import BatchlabError

# Exit codes
EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="batchlab",
        description="batchlab: run an experiment command over a parameter sweep",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser(
        "run",
        help="Run all invocations declared in a configuration file",
    )
    run_parser.add_argument(
        "config",
        help="Configuration file (.yaml, .yml, .json or .toml)",
    )
    run_parser.add_argument(
        "--results-dir", "-o",
        help="Directory for logs, summary.csv and manifest.json (default: results)",
    )
    run_parser.add_argument(
        "--dry-run", "-n",
        action="store_true",
        help="Print planned invocations without executing anything",
    )
    run_parser.add_argument(
        "--command", "-c",
        dest="experiment_command",
        help="Experiment command (overrides 'command' in the config)",
    )
    run_parser.add_argument(
        "--timeout", "-t",
        type=float,
        help="Per-invocation timeout in seconds",
    )
    run_parser.add_argument(
        "--jobs", "-j",
        type=int,
        help="Number of invocations to run at once (default: 1)",
    )
    run_parser.add_argument(
        "--echo",
        action="store_true",
        default=None,
        help="Print captured output of each invocation",
    )
    run_parser.add_argument(
        "--progress",
        choices=["auto", "rich", "simple"],
        help="Progress display style (default: auto)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "run":
        return handle_run(args)
    else:
        parser.print_help()
        return EXIT_OK


def handle_run(args: argparse.Namespace) -> int:
    """Handle the run subcommand."""
    from batchlab.config import resolve_settings
    from batchlab.executor.base import build_argv
    from batchlab.loader import load
    from batchlab.runner import plan, run

    try:
        config = load(args.config)
        settings = resolve_settings(
            document=config,
            overrides={
                "command": args.experiment_command,
                "results_dir": Path(args.results_dir) if args.results_dir else None,
                "timeout": args.timeout,
                "jobs": args.jobs,
                "echo": args.echo,
                "progress": args.progress,
            },
        )
        invocations = plan(config)
    except BatchlabError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    if args.dry_run:
        if not invocations:
            print("No invocations to run")
            return EXIT_OK
        print(f"Planned invocations ({len(invocations)}):")
        for invocation in invocations:
            if settings.command:
                print(f"  {invocation.name}: {shlex.join(build_argv(settings.command, invocation))}")
            else:
                print(f"  {invocation.name}")
        return EXIT_OK

    if not invocations:
        print("No invocations to run")

    try:
        summary = run(config, settings)
    except BatchlabError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except OSError as e:
        print(f"Error: cannot write results: {e}", file=sys.stderr)
        return EXIT_ERROR

    print(
        f"{summary.succeeded} succeeded, {summary.failed} failed "
        f"({summary.total} total); summary: {settings.results_dir / 'summary.csv'}"
    )
    return EXIT_OK if summary.all_succeeded else EXIT_FAILURES


if __name__ == "__main__":
    sys.exit(main())
