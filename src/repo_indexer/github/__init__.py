"""GitHub integration module for repo-indexer."""

from repo_indexer.github.client import GitHubClient
from repo_indexer.github.limiter import ConcurrencyLimiter
from repo_indexer.github.url_parser import GitHubRepoRef, parse_github_url, require_github_url

__all__ = [
    "GitHubClient",
    "ConcurrencyLimiter",
    "GitHubRepoRef",
    "parse_github_url",
    "require_github_url",
]
