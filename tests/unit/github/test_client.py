"""Tests for the GitHub client, against an httpx mock transport."""

import httpx
import pytest

from repo_indexer.core.exceptions import MetadataFetchError
from repo_indexer.core.models.file import FetchFailure
from repo_indexer.github.client import GitHubClient
from repo_indexer.utils.file_tree import flatten_files

API = "https://api.github.test"
RAW = "https://raw.github.test"


def make_client(handler, max_file_size: int = 1000) -> GitHubClient:
    return GitHubClient(
        api_url=API,
        raw_url=RAW,
        token="secret",
        max_file_size=max_file_size,
        transport=httpx.MockTransport(handler),
    )


def api_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/repos/octo/project":
        return httpx.Response(
            200,
            json={
                "name": "project",
                "owner": {"login": "octo"},
                "description": "A project",
                "stargazers_count": 1200,
                "language": "Python",
                "default_branch": "develop",
            },
        )
    if path == "/repos/octo/project/languages":
        return httpx.Response(200, json={"Python": 9000, "Shell": 120})
    if path == "/repos/octo/project/git/trees/develop":
        return httpx.Response(
            200,
            json={
                "truncated": False,
                "tree": [
                    {"path": "README.md", "type": "blob"},
                    {"path": "src", "type": "tree"},
                    {"path": "src/app.py", "type": "blob"},
                ],
            },
        )
    return httpx.Response(404, json={"message": "Not Found"})


def empty_repo_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/repos/octo/empty":
        return httpx.Response(200, json={"name": "empty", "default_branch": "main"})
    if path == "/repos/octo/empty/languages":
        return httpx.Response(200, json={})
    if path == "/repos/octo/empty/git/trees/main":
        return httpx.Response(409, json={"message": "Git Repository is empty."})
    return httpx.Response(404, json={"message": "Not Found"})


@pytest.mark.unit
class TestRepositoryMetadata:
    """Tests for metadata fetching."""

    @pytest.mark.asyncio
    async def test_fetch_repository_metadata(self) -> None:
        client = make_client(api_handler)
        try:
            metadata = await client.fetch_repository_metadata("https://github.com/octo/project")
        finally:
            await client.close()

        assert metadata.name == "project"
        assert metadata.owner == "octo"
        assert metadata.stars == 1200
        assert metadata.default_branch == "develop"
        assert metadata.languages == ["Python", "Shell"]
        assert flatten_files(metadata.files) == ["README.md", "src/app.py"]

    @pytest.mark.asyncio
    async def test_sends_token(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("authorization")
            return api_handler(request)

        client = make_client(handler)
        try:
            await client.fetch_repository_info("https://github.com/octo/project")
        finally:
            await client.close()

        assert seen["auth"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_not_found_raises(self) -> None:
        client = make_client(api_handler)
        try:
            with pytest.raises(MetadataFetchError, match="not found"):
                await client.fetch_repository_metadata("https://github.com/octo/missing")
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_rate_limit_raises(self) -> None:
        client = make_client(lambda request: httpx.Response(403, json={}))
        try:
            with pytest.raises(MetadataFetchError, match="rate limit"):
                await client.fetch_repository_info("https://github.com/octo/project")
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_empty_repository_has_no_files(self) -> None:
        client = make_client(empty_repo_handler)
        try:
            metadata = await client.fetch_repository_metadata("https://github.com/octo/empty")
        finally:
            await client.close()

        assert metadata.name == "empty"
        assert metadata.files == []

    @pytest.mark.asyncio
    async def test_tree_server_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/git/trees/develop"):
                return httpx.Response(500, json={})
            return api_handler(request)

        client = make_client(handler)
        try:
            with pytest.raises(MetadataFetchError, match="HTTP 500"):
                await client.fetch_repository_metadata("https://github.com/octo/project")
        finally:
            await client.close()


@pytest.mark.unit
class TestFetchFileContent:
    """Tests for raw file fetching."""

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/octo/project/HEAD/src/app.py"
            return httpx.Response(200, content=b"print('hi')\n")

        client = make_client(handler)
        try:
            result = await client.fetch_file_content("octo", "project", "src/app.py")
        finally:
            await client.close()

        assert result.success
        assert result.content == "print('hi')\n"

    @pytest.mark.asyncio
    async def test_not_found(self) -> None:
        client = make_client(lambda request: httpx.Response(404))
        try:
            result = await client.fetch_file_content("octo", "project", "gone.py")
        finally:
            await client.close()

        assert result.failure == FetchFailure.NOT_FOUND
        assert not result.success

    @pytest.mark.asyncio
    async def test_server_error_is_network_error(self) -> None:
        client = make_client(lambda request: httpx.Response(502))
        try:
            result = await client.fetch_file_content("octo", "project", "a.py")
        finally:
            await client.close()

        assert result.failure == FetchFailure.NETWORK_ERROR
        assert result.detail == "HTTP 502"

    @pytest.mark.asyncio
    async def test_too_large(self) -> None:
        client = make_client(lambda request: httpx.Response(200, content=b"x" * 2000))
        try:
            result = await client.fetch_file_content("octo", "project", "big.log")
        finally:
            await client.close()

        assert result.failure == FetchFailure.TOO_LARGE

    @pytest.mark.asyncio
    async def test_binary(self) -> None:
        client = make_client(lambda request: httpx.Response(200, content=b"\x89PNG\x00\x00data"))
        try:
            result = await client.fetch_file_content("octo", "project", "logo.png")
        finally:
            await client.close()

        assert result.failure == FetchFailure.BINARY

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(handler)
        try:
            result = await client.fetch_file_content("octo", "project", "slow.py")
        finally:
            await client.close()

        assert result.failure == FetchFailure.TIMEOUT

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = make_client(handler)
        try:
            result = await client.fetch_file_content("octo", "project", "a.py")
        finally:
            await client.close()

        assert result.failure == FetchFailure.NETWORK_ERROR
