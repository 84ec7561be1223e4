#!/usr/bin/env python3
"""
Fast contributor counter.

Uses a page size of one so that the page number of the ``last`` pagination link
equals the number of contributors. Repositories whose contributors fit on a single
page are re-fetched with a page size of 100 and counted directly.
"""

import logging
from typing import Iterable, List, Optional
from urllib.parse import parse_qs, urlsplit

from .artifacts import ArtifactWriter
from .client import ContributorsClient, PageFetchError, ensure_usable, parse_link_relation
from .console import Reporter
from .models import CountResult, InvalidRepositoryError, RepositoryRef

PROBE_PAGE_SIZE = 1
FULL_PAGE_SIZE = 100


def page_number_from_url(url: str) -> Optional[int]:
    """Extract the ``page`` query parameter of a pagination URL."""
    values = parse_qs(urlsplit(url).query).get("page")
    if not values:
        return None
    try:
        return int(values[0])
    except ValueError:
        return None


class FastCounter:
    """Counts contributors per repository with as few requests as possible."""

    def __init__(self, client: ContributorsClient, artifacts: Optional[ArtifactWriter] = None,
                 reporter: Optional[Reporter] = None):
        self.client = client
        self.artifacts = artifacts
        self.reporter = reporter
        self.logger = logging.getLogger(__name__)

    def _count(self, repo: RepositoryRef, result: CountResult) -> int:
        url = self.client.contributors_url(repo)

        page = self.client.fetch_page(url, page_size=PROBE_PAGE_SIZE)
        result.requests_made += 1
        if self.artifacts:
            self.artifacts.save_headers(repo, page)
            self.artifacts.save_body(repo, page)
        ensure_usable(page)

        last_url = parse_link_relation(page.header_text, "last")
        if last_url:
            count = page_number_from_url(last_url)
            if count is None:
                raise ValueError(f"Could not read page number from last link {last_url}")
            self.logger.info(f"{repo}: last page link gives {count} contributors")
            return count

        # Everything fits on one page; fetch it in full.
        page = self.client.fetch_page(url, page_size=FULL_PAGE_SIZE)
        result.requests_made += 1
        if self.artifacts:
            self.artifacts.save_body(repo, page)
        records = ensure_usable(page)
        self.logger.info(f"{repo}: single page with {len(records)} contributors")
        return len(records)

    def count_repository(self, token: str) -> CountResult:
        """Count the contributors of one 'owner/repo' token."""
        result = CountResult(repository=token.strip())
        try:
            repo = RepositoryRef.parse(token)
        except InvalidRepositoryError as e:
            self.logger.warning(str(e))
            result.error = str(e)
            if self.reporter:
                self.reporter.skipped(str(e))
            return result

        if self.reporter:
            self.reporter.processing(repo.full_name)

        try:
            result.count = self._count(repo, result)
        except PageFetchError as e:
            self.logger.error(f"Failed to count contributors for {repo}: {e}")
            result.error = str(e)
        except ValueError as e:
            self.logger.error(f"Could not determine the contributor count for {repo}: {e}")
            result.error = "Could not determine the contributor count."

        if self.reporter:
            if result.ok:
                self.reporter.count_success(result.count)
            else:
                self.reporter.error(result.error)
        return result

    def run(self, tokens: Iterable[str]) -> List[CountResult]:
        """Count every repository in turn. Failures never stop the run."""
        return [self.count_repository(token) for token in tokens]
