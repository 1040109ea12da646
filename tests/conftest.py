"""Pytest configuration and fixtures."""

import pytest
from factories import RepositoryRecordFactory, dir_node, file_node
from fakes import FakeInsights, FakeSearchIndex, FakeStatusStore

from repo_indexer.core.models.file import FileTreeNode
from repo_indexer.core.models.repository import RepositoryRecord


@pytest.fixture
def sample_tree() -> list[FileTreeNode]:
    """A small nested repository tree."""
    return [
        file_node("README.md"),
        dir_node(
            "src",
            file_node("src/app.py"),
            dir_node("src/utils", file_node("src/utils/helpers.py")),
            file_node("src/config.yaml"),
        ),
        dir_node("docs"),
        file_node("setup.py"),
    ]


@pytest.fixture
def sample_record() -> RepositoryRecord:
    """A pending repository record."""
    return RepositoryRecordFactory(repo_owner="octo", repo_name="project")


@pytest.fixture
def status_store(sample_record: RepositoryRecord) -> FakeStatusStore:
    store = FakeStatusStore()
    store.records[sample_record.id] = sample_record
    return store


@pytest.fixture
def search_index() -> FakeSearchIndex:
    return FakeSearchIndex()


@pytest.fixture
def insights() -> FakeInsights:
    return FakeInsights()
