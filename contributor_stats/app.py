#!/usr/bin/env python3
"""
Configuration and run orchestration for the contributor statistics tools.

Both tools load their configuration from environment variables (optionally
from a .env file), process repositories strictly one after another, and
release the HTTP session on every exit path.
"""

import logging
import os
from contextlib import ExitStack
from dataclasses import dataclass
from typing import IO, Iterable, List, Optional

from dotenv import find_dotenv, load_dotenv

from .aggregator import UniqueAggregator
from .artifacts import DEFAULT_OUTPUT_DIR, ArtifactWriter
from .client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, ContributorsClient
from .console import Reporter
from .counter import FastCounter
from .models import AggregateResult, CountResult

TOKEN_VARIABLES = ("PAT", "GITHUB_TOKEN")


class MissingCredentialError(ValueError):
    """No GitHub token was found in the environment."""


@dataclass
class AppConfig:
    """Runtime settings shared by both tools."""
    token: str
    base_url: str = DEFAULT_BASE_URL
    output_dir: str = DEFAULT_OUTPUT_DIR
    timeout: float = DEFAULT_TIMEOUT
    save_artifacts: bool = True


def setup_logging(verbose: bool = False) -> None:
    """Configure the root logger once for the process."""
    level_name = "INFO" if verbose else os.environ.get("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def load_configuration(output_dir: Optional[str] = None, timeout: Optional[float] = None,
                       save_artifacts: bool = True) -> AppConfig:
    """Load configuration from environment variables, overridden by explicit arguments."""
    load_dotenv(find_dotenv(usecwd=True))

    token = None
    for name in TOKEN_VARIABLES:
        token = os.environ.get(name)
        if token:
            break
    if not token:
        raise MissingCredentialError("The 'PAT' environment variable is not set.")

    if timeout is None:
        raw_timeout = os.environ.get("CONTRIBUTOR_STATS_TIMEOUT")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise ValueError(f"Invalid CONTRIBUTOR_STATS_TIMEOUT value: {raw_timeout!r}")
    if timeout <= 0:
        raise ValueError(f"Timeout must be positive, got {timeout}")

    return AppConfig(
        token=token.strip(),
        base_url=os.environ.get("GITHUB_API_URL", DEFAULT_BASE_URL),
        output_dir=output_dir or os.environ.get("CONTRIBUTOR_STATS_OUTPUT_DIR", DEFAULT_OUTPUT_DIR),
        timeout=timeout,
        save_artifacts=save_artifacts,
    )


def read_repositories(arguments: Iterable[str], stdin: Optional[IO[str]] = None) -> List[str]:
    """
    Collect repository tokens.

    Args:
        arguments: Tokens given on the command line; used when non-empty.
        stdin: Stream read one token per line when no arguments were given
            and it is not an interactive terminal.

    Returns:
        Non-blank tokens, in input order. Empty when nothing was supplied.
    """
    tokens = [arg for arg in arguments if arg.strip()]
    if tokens:
        return tokens
    if stdin is None or stdin.isatty():
        return []
    return [line.strip() for line in stdin if line.strip()]


def _open_run(config: AppConfig, stack: ExitStack):
    client = stack.enter_context(
        ContributorsClient(config.token, base_url=config.base_url, timeout=config.timeout)
    )
    artifacts = None
    if config.save_artifacts:
        artifacts = stack.enter_context(ArtifactWriter(config.output_dir))
    return client, artifacts


def run_count(config: AppConfig, tokens: List[str], reporter: Optional[Reporter] = None) -> List[CountResult]:
    """Run the fast counter over all repositories."""
    logger = logging.getLogger(__name__)
    logger.info(f"Counting contributors for {len(tokens)} repositories")

    with ExitStack() as stack:
        client, artifacts = _open_run(config, stack)
        results = FastCounter(client, artifacts=artifacts, reporter=reporter).run(tokens)

    if reporter:
        reporter.count_summary(config.output_dir if config.save_artifacts else None)
    logger.info(f"Counted {sum(1 for r in results if r.ok)} of {len(results)} repositories")
    return results


def run_unique(config: AppConfig, tokens: List[str], reporter: Optional[Reporter] = None) -> AggregateResult:
    """Run the unique aggregator over all repositories."""
    logger = logging.getLogger(__name__)
    output_dir = config.output_dir if config.save_artifacts else None
    if reporter:
        reporter.aggregate_start(len(tokens), output_dir)

    with ExitStack() as stack:
        client, artifacts = _open_run(config, stack)
        result = UniqueAggregator(client, artifacts=artifacts, reporter=reporter).run(tokens)

    if reporter:
        reporter.aggregate_summary(result, output_dir)
    logger.info(f"{result.unique_count} unique of {result.total_collected} collected logins")
    return result
