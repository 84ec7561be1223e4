"""
GitHub Repository Contributor Statistics

Counts contributors of GitHub repositories through the REST API, either quickly
per repository from pagination metadata, or exactly as the unique union of
contributor logins across several repositories.
"""

__version__ = "1.0.0"

from .aggregator import LoginAccumulator, UniqueAggregator
from .client import ContributorsClient, PageFetchError, parse_link_header, parse_link_relation
from .counter import FastCounter
from .models import AggregateResult, CountResult, PageResponse, RepositoryRef

__all__ = [
    "AggregateResult",
    "ContributorsClient",
    "CountResult",
    "FastCounter",
    "LoginAccumulator",
    "PageFetchError",
    "PageResponse",
    "RepositoryRef",
    "UniqueAggregator",
    "parse_link_header",
    "parse_link_relation",
]
