"""Async client for the GitHub REST API and raw content host."""

from urllib.parse import quote

import httpx
import structlog

from repo_indexer import __version__
from repo_indexer.core.exceptions import MetadataFetchError
from repo_indexer.core.models.file import FetchFailure, FileContent
from repo_indexer.core.models.repository import RepositoryMetadata
from repo_indexer.github.url_parser import require_github_url
from repo_indexer.utils.file_tree import build_tree

logger = structlog.get_logger(__name__)

# Bytes inspected for NUL when sniffing binary content
BINARY_SNIFF_BYTES = 8192


class GitHubClient:
    """Wraps the GitHub endpoints the indexer needs with async httpx.

    ``fetch_repository_metadata`` raises on failure; ``fetch_file_content``
    never does for expected problems and reports them as a typed
    ``FetchFailure`` on the returned ``FileContent`` instead.
    """

    def __init__(
        self,
        api_url: str = "https://api.github.com",
        raw_url: str = "https://raw.githubusercontent.com",
        token: str | None = None,
        timeout: float = 20.0,
        max_file_size: int = 1_000_000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.raw_url = raw_url.rstrip("/")
        self.max_file_size = max_file_size
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": f"repo-indexer/{__version__}",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.client = httpx.AsyncClient(
            headers=headers,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def close(self) -> None:
        await self.client.aclose()

    # ── Metadata ────────────────────────────────────────────

    async def _get_json(self, path: str, **params) -> dict | list:
        try:
            resp = await self.client.get(f"{self.api_url}{path}", params=params or None)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                reason = "repository not found or not accessible"
            elif status in (403, 429):
                reason = "rate limit exceeded or access denied"
            else:
                reason = f"HTTP {status}"
            raise MetadataFetchError(
                f"{reason} ({path})",
                details={"path": path, "status": status},
            ) from e
        except httpx.HTTPError as e:
            raise MetadataFetchError(
                f"{type(e).__name__}: {e} ({path})",
                details={"path": path},
            ) from e
        return resp.json()

    async def fetch_repository_info(self, repo_url: str) -> RepositoryMetadata:
        """Fetch name, description, stars and default branch only."""
        ref = require_github_url(repo_url)
        info = await self._get_json(f"/repos/{ref.owner}/{ref.repo}")
        return RepositoryMetadata(
            name=info.get("name") or ref.repo,
            owner=(info.get("owner") or {}).get("login") or ref.owner,
            description=info.get("description"),
            stars=info.get("stargazers_count") or 0,
            languages=[info["language"]] if info.get("language") else [],
            default_branch=info.get("default_branch") or "main",
        )

    async def fetch_repository_metadata(self, repo_url: str) -> RepositoryMetadata:
        """Fetch name, stars, languages and the full file tree of a repository."""
        ref = require_github_url(repo_url)
        base = f"/repos/{ref.owner}/{ref.repo}"

        info = await self.fetch_repository_info(repo_url)

        languages = await self._get_json(f"{base}/languages")
        try:
            tree = await self._get_json(
                f"{base}/git/trees/{quote(info.default_branch, safe='')}", recursive="1"
            )
        except MetadataFetchError as e:
            # GitHub answers 409 Conflict for a repository with no commits
            if e.details.get("status") != 409:
                raise
            logger.info("Repository is empty", repo=ref.full_name)
            tree = {"tree": []}
        if tree.get("truncated"):
            logger.warning(
                "GitHub tree listing truncated",
                repo=ref.full_name,
                entries=len(tree.get("tree", [])),
            )

        entries = [
            (entry["path"], entry.get("type", ""))
            for entry in tree.get("tree", [])
            if entry.get("path")
        ]

        return info.model_copy(
            update={
                "languages": list(languages) if isinstance(languages, dict) else info.languages,
                "files": build_tree(entries),
            }
        )

    # ── Raw content ─────────────────────────────────────────

    async def fetch_file_content(self, owner: str, repo: str, path: str) -> FileContent:
        """Fetch one file's text from the raw content host."""
        url = f"{self.raw_url}/{owner}/{repo}/HEAD/{quote(path)}"
        try:
            async with self.client.stream("GET", url) as resp:
                if resp.status_code == 404:
                    return FileContent(path=path, failure=FetchFailure.NOT_FOUND)
                if resp.status_code >= 400:
                    return FileContent(
                        path=path,
                        failure=FetchFailure.NETWORK_ERROR,
                        detail=f"HTTP {resp.status_code}",
                    )

                declared = resp.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > self.max_file_size:
                    return FileContent(path=path, failure=FetchFailure.TOO_LARGE)

                body = bytearray()
                async for chunk in resp.aiter_bytes():
                    body.extend(chunk)
                    if len(body) > self.max_file_size:
                        return FileContent(path=path, failure=FetchFailure.TOO_LARGE)
        except httpx.TimeoutException as e:
            return FileContent(path=path, failure=FetchFailure.TIMEOUT, detail=str(e))
        except httpx.HTTPError as e:
            return FileContent(
                path=path,
                failure=FetchFailure.NETWORK_ERROR,
                detail=f"{type(e).__name__}: {e}",
            )

        if b"\x00" in body[:BINARY_SNIFF_BYTES]:
            return FileContent(path=path, failure=FetchFailure.BINARY)
        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError:
            return FileContent(path=path, failure=FetchFailure.BINARY)

        return FileContent(path=path, content=text)
