"""Parsing GitHub repository URLs."""

import re
from typing import NamedTuple

from repo_indexer.core.exceptions import InvalidRepositoryUrlError

_HTTPS_RE = re.compile(
    r"^https?://(?:www\.)?github\.com/(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+?)(?:\.git)?(?:/.*)?$"
)
_SSH_RE = re.compile(r"^git@github\.com:(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+?)(?:\.git)?$")


class GitHubRepoRef(NamedTuple):
    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def html_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}"


def parse_github_url(url: str) -> GitHubRepoRef | None:
    """Extract owner and repository name from a GitHub URL.

    Handles:
    - https://github.com/org/repo
    - https://github.com/org/repo.git
    - https://github.com/org/repo/tree/main/src
    - git@github.com:org/repo.git
    """
    url = url.strip().rstrip("/")
    match = _HTTPS_RE.match(url) or _SSH_RE.match(url)
    if not match:
        return None
    return GitHubRepoRef(match.group("owner"), match.group("repo"))


def require_github_url(url: str) -> GitHubRepoRef:
    """Like parse_github_url, but raise for anything that is not a repo URL."""
    ref = parse_github_url(url)
    if ref is None:
        raise InvalidRepositoryUrlError(
            f"Not a GitHub repository URL: {url}",
            details={"repo_url": url},
        )
    return ref
