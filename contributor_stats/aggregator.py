#!/usr/bin/env python3
"""
Unique contributor aggregation across repositories.

Every page of every repository's contributors is fetched by following the
``next`` pagination link, and the logins are reduced to a sorted unique list.
"""

import logging
from typing import Iterable, Iterator, List, Optional

from .artifacts import ArtifactWriter
from .client import ContributorsClient, PageFetchError, ensure_usable, parse_link_relation
from .console import Reporter
from .models import AggregateResult, InvalidRepositoryError, RepositoryRef, RepositoryTraversal

PAGE_SIZE = 100


class LoginAccumulator:
    """Append-only collection of contributor logins for a single run."""

    def __init__(self):
        self._logins: List[str] = []

    def __len__(self) -> int:
        return len(self._logins)

    def __iter__(self) -> Iterator[str]:
        return iter(self._logins)

    def extend(self, logins: Iterable[str]) -> None:
        self._logins.extend(logins)

    def unique(self) -> List[str]:
        """Sorted, de-duplicated logins."""
        return sorted(set(self._logins))


def extract_logins(records: List) -> List[str]:
    """Logins of a page of contributor records. Anonymous entries have none."""
    return [
        record["login"] for record in records
        if isinstance(record, dict) and isinstance(record.get("login"), str) and record["login"]
    ]


class UniqueAggregator:
    """Collects every contributor login of every repository."""

    def __init__(self, client: ContributorsClient, artifacts: Optional[ArtifactWriter] = None,
                 reporter: Optional[Reporter] = None):
        self.client = client
        self.artifacts = artifacts
        self.reporter = reporter
        self.logger = logging.getLogger(__name__)

    def fetch_repository(self, token: str, accumulator: LoginAccumulator) -> RepositoryTraversal:
        """
        Follow the pagination of one repository, adding its logins to the accumulator.

        A failed page stops this repository only; logins from earlier pages are kept.
        """
        traversal = RepositoryTraversal(repository=token.strip())
        try:
            repo = RepositoryRef.parse(token)
        except InvalidRepositoryError as e:
            self.logger.warning(str(e))
            traversal.state = RepositoryTraversal.SKIPPED
            traversal.error = str(e)
            if self.reporter:
                self.reporter.skipped(str(e))
            return traversal

        if self.reporter:
            self.reporter.fetching(repo.full_name)

        next_url = self.client.contributors_url(repo)
        requested = set()
        page_number = 1

        while next_url:
            if next_url in requested:
                self.logger.warning(f"{repo}: next link repeats {next_url}, stopping")
                break
            requested.add(next_url)

            try:
                page = self.client.fetch_page(next_url, page_size=PAGE_SIZE)
                if self.artifacts:
                    self.artifacts.save_page(repo, page_number, page)
                records = ensure_usable(page)
            except PageFetchError as e:
                traversal.state = RepositoryTraversal.DONE_WITH_PARTIAL
                traversal.error = f"Failed to fetch page {page_number} for {repo}. {e}"
                self.logger.error(traversal.error)
                if self.reporter:
                    self.reporter.error(traversal.error)
                break

            logins = extract_logins(records)
            accumulator.extend(logins)
            traversal.pages_fetched += 1
            traversal.logins_collected += len(logins)
            self.logger.debug(f"{repo}: page {page_number} gave {len(logins)} logins")

            next_url = parse_link_relation(page.header_text, "next")
            if next_url and self.reporter:
                self.reporter.progress()
            page_number += 1

        if self.reporter:
            self.reporter.end_repository()
        self.logger.info(
            f"{repo}: {traversal.pages_fetched} pages, {traversal.logins_collected} logins ({traversal.state})"
        )
        return traversal

    def run(self, tokens: Iterable[str], accumulator: Optional[LoginAccumulator] = None) -> AggregateResult:
        """Process every repository in order and reduce to unique logins."""
        if accumulator is None:
            accumulator = LoginAccumulator()

        traversals = [self.fetch_repository(token, accumulator) for token in tokens]
        return AggregateResult(
            logins=accumulator.unique(),
            total_collected=len(accumulator),
            traversals=traversals,
        )
