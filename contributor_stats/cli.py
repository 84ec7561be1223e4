#!/usr/bin/env python3
"""
Command-line interface for contributor-stats.
"""

import argparse
import sys
from typing import Optional

from .app import (
    MissingCredentialError,
    load_configuration,
    read_repositories,
    run_count,
    run_unique,
    setup_logging,
)
from .console import Reporter


def _add_run_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "repositories",
        nargs="*",
        metavar="OWNER/REPO",
        help="Repositories to process (read from stdin, one per line, when omitted)"
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for raw API responses (default: ./tmp)"
    )
    parser.add_argument(
        "--no-artifacts",
        action="store_true",
        help="Do not save raw API responses"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Timeout in seconds for each request (default: 30)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log each request"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="contributor-stats",
        description="Count contributors across GitHub repositories"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    count_parser = subparsers.add_parser("count", help="Fast contributor count per repository")
    _add_run_arguments(count_parser)

    unique_parser = subparsers.add_parser("unique", help="Unique contributors across all repositories")
    _add_run_arguments(unique_parser)

    return parser


def execute(command: str, args: argparse.Namespace, prog: str, reporter: Optional[Reporter] = None) -> int:
    """Run one tool with parsed arguments and return the exit code."""
    reporter = reporter or Reporter()
    setup_logging(args.verbose)

    try:
        config = load_configuration(
            output_dir=args.output_dir,
            timeout=args.timeout,
            save_artifacts=not args.no_artifacts,
        )
    except MissingCredentialError as e:
        reporter.fatal(str(e), hint='Please set it with: [yellow]export PAT="ghp_YourTokenHere"[/yellow]')
        return 1
    except ValueError as e:
        reporter.fatal(str(e))
        return 1

    tokens = read_repositories(args.repositories, sys.stdin)
    if not tokens:
        reporter.usage(prog, unique=(command == "unique"))
        return 1

    try:
        if command == "count":
            run_count(config, tokens, reporter)
        else:
            run_unique(config, tokens, reporter)
    except KeyboardInterrupt:
        reporter.cancelled()
        return 130
    return 0


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command in ("count", "unique"):
        return execute(args.command, args, f"{parser.prog} {args.command}")
    else:
        parser.print_help()
        return 1


def _single_tool_main(command: str, prog: str, argv: Optional[list]) -> int:
    parser = argparse.ArgumentParser(prog=prog, description=create_parser().description)
    _add_run_arguments(parser)
    args = parser.parse_args(argv)
    return execute(command, args, prog)


def count_main(argv: Optional[list] = None) -> int:
    """Entry point of the count-contributors tool."""
    return _single_tool_main("count", "count-contributors", argv)


def unique_main(argv: Optional[list] = None) -> int:
    """Entry point of the count-unique-contributors tool."""
    return _single_tool_main("unique", "count-unique-contributors", argv)


if __name__ == "__main__":
    sys.exit(main())
