#!/usr/bin/env python3
"""
Data models for GitHub contributor statistics.

Contains the core data classes used throughout the application.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from requests.structures import CaseInsensitiveDict


class InvalidRepositoryError(ValueError):
    """Raised when a repository token is not in 'owner/repo' format."""


@dataclass(frozen=True)
class RepositoryRef:
    """Represents a repository as an (owner, name) pair."""
    owner: str
    name: str

    def __str__(self) -> str:
        return self.full_name

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def file_safe_name(self) -> str:
        """Name usable as a file prefix, e.g. 'octocat-Hello-World'."""
        return f"{self.owner}-{self.name}".replace("/", "-")

    @classmethod
    def parse(cls, token: str) -> 'RepositoryRef':
        """Create a RepositoryRef from an 'owner/repo' string."""
        text = token.strip()
        parts = text.split("/")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise InvalidRepositoryError(
                f"Skipping invalid format: {text}. Should be 'owner/repo'."
            )
        return cls(parts[0], parts[1])


@dataclass
class PageResponse:
    """The result of a single contributors API call."""
    status_code: int
    headers: Mapping[str, str]
    body: str
    url: str = ""
    reason: str = ""

    def __post_init__(self):
        self.headers = CaseInsensitiveDict(self.headers)

    @property
    def status_line(self) -> str:
        return f"HTTP {self.status_code} {self.reason}".rstrip()

    @property
    def header_text(self) -> str:
        """Headers rendered as 'Name: value' lines. Repeated headers arrive merged."""
        return "".join(f"{name}: {value}\r\n" for name, value in self.headers.items())

    def json(self) -> Optional[Any]:
        """Parsed body, or None when it is empty or not valid JSON."""
        if not self.body or not self.body.strip():
            return None
        try:
            return json.loads(self.body)
        except ValueError:
            return None

    @property
    def contributors(self) -> Optional[List[Dict[str, Any]]]:
        """Contributor records when the body is a JSON array."""
        data = self.json()
        return data if isinstance(data, list) else None

    @property
    def error_message(self) -> Optional[str]:
        data = self.json()
        if isinstance(data, dict) and data.get("message") is not None:
            return str(data["message"])
        return None


@dataclass
class CountResult:
    """Outcome of counting the contributors of one repository."""
    repository: str
    count: Optional[int] = None
    error: Optional[str] = None
    requests_made: int = 0

    @property
    def ok(self) -> bool:
        return self.count is not None

    def __str__(self) -> str:
        if self.ok:
            return f"{self.repository} {self.count}"
        return f"{self.repository} error: {self.error}"


@dataclass
class RepositoryTraversal:
    """Outcome of paginating through the contributors of one repository."""
    DONE = "done"
    DONE_WITH_PARTIAL = "done_with_partial"
    SKIPPED = "skipped"

    repository: str
    state: str = DONE
    pages_fetched: int = 0
    logins_collected: int = 0
    error: Optional[str] = None


@dataclass
class AggregateResult:
    """Unique contributors across every processed repository."""
    logins: List[str] = field(default_factory=list)
    total_collected: int = 0
    traversals: List[RepositoryTraversal] = field(default_factory=list)

    @property
    def unique_count(self) -> int:
        return len(self.logins)

    @property
    def is_empty(self) -> bool:
        return not self.logins
