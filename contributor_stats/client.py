#!/usr/bin/env python3
"""
HTTP pagination client for the GitHub contributors endpoint.

Performs single authenticated GET requests and exposes the pagination
relations advertised in the ``Link`` response header.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlsplit

import requests
from requests.utils import parse_header_links

from . import __version__
from .models import PageResponse, RepositoryRef

DEFAULT_BASE_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0
API_VERSION = "2022-11-28"


class PageFetchError(Exception):
    """A contributors page could not be fetched or had no usable body."""

    def __init__(self, message: str, status_code: Optional[int] = None, api_message: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.api_message = api_message


def parse_link_header(header_value: str) -> Dict[str, str]:
    """
    Parse a ``Link`` header value into a relation -> URL mapping.

    Args:
        header_value: e.g. '<https://...&page=2>; rel="next", <https://...&page=5>; rel="last"'

    Returns:
        Mapping of relation name to URL. Entries without a URL or rel are ignored.
    """
    links: Dict[str, str] = {}
    if not header_value:
        return links

    for link in parse_header_links(header_value):
        url = link.get("url")
        relation = link.get("rel")
        if url and relation:
            links.setdefault(relation, url)

    return links


def parse_link_relation(header_text: str, relation_name: str) -> Optional[str]:
    """
    Find the URL for a relation in raw response header text.

    The header name is matched case-insensitively, the relation value exactly.
    Returns None if no matching relation exists.
    """
    for line in header_text.splitlines():
        name, sep, value = line.partition(":")
        if not sep or name.strip().lower() != "link":
            continue
        url = parse_link_header(value.strip()).get(relation_name)
        if url:
            return url
    return None


def ensure_usable(page: PageResponse) -> List[Dict[str, Any]]:
    """Return the contributor records of a page or raise PageFetchError."""
    if page.status_code != 200:
        message = page.error_message
        raise PageFetchError(
            f"Failed with status {page.status_code}. Message: '{message or 'N/A'}'",
            status_code=page.status_code,
            api_message=message,
        )

    records = page.contributors
    if records is None:
        raise PageFetchError(
            "Page fetch produced no usable body.",
            status_code=page.status_code,
        )
    return records


class ContributorsClient:
    """Thin wrapper around a requests session for the contributors endpoint."""

    def __init__(self, token: str, base_url: str = DEFAULT_BASE_URL, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            token: GitHub Personal Access Token
            base_url: Base URL of the GitHub REST API
            timeout: Timeout in seconds applied to every request
            session: Optional pre-built session (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {token}",
            "X-GitHub-Api-Version": API_VERSION,
            "User-Agent": f"contributor-stats/{__version__}",
        })
        self.logger = logging.getLogger(__name__)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self.session.close()

    def contributors_url(self, repo: RepositoryRef) -> str:
        return f"{self.base_url}/repos/{repo.owner}/{repo.name}/contributors"

    def fetch_page(self, url: str, page_size: Optional[int] = None, include_anonymous: bool = True) -> PageResponse:
        """
        Fetch a single page of contributors.

        Query parameters already present in ``url`` (as in a ``next`` link) are kept
        as they are; ``per_page`` and ``anon`` are only added when missing.
        """
        existing = parse_qs(urlsplit(url).query)
        params: Dict[str, Any] = {}
        if page_size is not None and "per_page" not in existing:
            params["per_page"] = page_size
        if include_anonymous and "anon" not in existing:
            params["anon"] = 1

        self.logger.info(f"GET {url} {params or ''}".rstrip())
        try:
            response = self.session.get(
                url,
                params=params or None,
                timeout=self.timeout,
                allow_redirects=True,
            )
        except requests.RequestException as e:
            self.logger.error(f"Error fetching {url}: {e}")
            raise PageFetchError(f"Request failed: {e}") from e

        self.logger.debug(f"Status {response.status_code} from {response.url}")
        return PageResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.text,
            url=response.url or url,
            reason=response.reason or "",
        )
