"""Tests for core domain models."""

import pytest

from repo_indexer.core.exceptions import (
    IndexingError,
    MetadataFetchError,
    MetadataTimeoutError,
    NoFilesIndexedError,
    RepoIndexerError,
)
from repo_indexer.core.models.file import (
    FetchFailure,
    FileContent,
    FileTreeNode,
    IndexedFile,
    file_document_id,
)
from repo_indexer.core.models.repository import IndexStatus, RepositoryRecord


@pytest.mark.unit
class TestFileTreeNode:
    def test_file(self) -> None:
        assert FileTreeNode(type="file", path="a.py").is_file

    def test_file_without_path(self) -> None:
        assert not FileTreeNode(type="file").is_file

    def test_directory(self) -> None:
        assert not FileTreeNode(type="dir", path="src").is_file


@pytest.mark.unit
class TestFileContent:
    """Tests for FileContent placeholders."""

    def test_success(self) -> None:
        content = FileContent(path="a.py", content="x = 1")
        assert content.success
        assert content.content_or_placeholder() == "x = 1"

    def test_empty_content_is_not_success(self) -> None:
        content = FileContent(path="empty.txt")
        assert not content.success
        assert content.content_or_placeholder() == (
            "// File: empty.txt\n// Content unavailable (file may be too large or binary)"
        )

    @pytest.mark.parametrize("failure", [FetchFailure.TOO_LARGE, FetchFailure.BINARY])
    def test_too_large_or_binary_placeholder(self, failure: FetchFailure) -> None:
        content = FileContent(path="blob.bin", failure=failure)
        assert content.content_or_placeholder() == (
            "// File: blob.bin\n// Content unavailable (file may be too large or binary)"
        )

    @pytest.mark.parametrize(
        "failure", [FetchFailure.NOT_FOUND, FetchFailure.NETWORK_ERROR, FetchFailure.TIMEOUT]
    )
    def test_unavailable_placeholder(self, failure: FetchFailure) -> None:
        content = FileContent(path="x.py", failure=failure)
        assert content.content_or_placeholder() == "// File: x.py\n// Content unavailable"


@pytest.mark.unit
class TestIndexedFile:
    def test_document_id(self) -> None:
        assert file_document_id("r1", "src/app-main.py") == "r1:src/app-main.py"

    def test_build(self) -> None:
        doc = IndexedFile.build("r1", "src/app.py", "print()", None)

        assert doc.id == "r1:src/app.py"
        assert doc.file_size == 7
        assert doc.file_language == "unknown"
        assert doc.file_type == "file"


@pytest.mark.unit
class TestRepositoryRecord:
    def test_defaults(self) -> None:
        record = RepositoryRecord(
            repo_url="https://github.com/octo/project", repo_name="project", repo_owner="octo"
        )
        assert record.id
        assert record.index_status == IndexStatus.PENDING
        assert record.index_progress == 0
        assert record.indexed_at is None

    def test_progress_bounds(self) -> None:
        with pytest.raises(ValueError):
            RepositoryRecord(
                repo_url="https://github.com/octo/project",
                repo_name="project",
                repo_owner="octo",
                index_progress=101,
            )


@pytest.mark.unit
class TestExceptions:
    def test_message_and_details(self) -> None:
        error = MetadataTimeoutError("GitHub API timeout after 30 seconds", details={"a": 1})

        assert str(error) == "GitHub API timeout after 30 seconds"
        assert error.details == {"a": 1}
        assert isinstance(error, MetadataFetchError)
        assert isinstance(error, RepoIndexerError)

    def test_no_files_indexed(self) -> None:
        error = NoFilesIndexedError(details={"repo_id": "r1"})

        assert str(error) == "No files were successfully indexed"
        assert isinstance(error, IndexingError)
