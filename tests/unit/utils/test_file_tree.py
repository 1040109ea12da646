"""Tests for file tree walking."""

import pytest
from factories import FileNodeFactory, dir_node, file_node

from repo_indexer.core.models.file import FileTreeNode
from repo_indexer.utils.file_tree import build_tree, count_files, flatten_files


@pytest.mark.unit
class TestFlattenFiles:
    """Tests for flatten_files and count_files."""

    def test_depth_first_order(self, sample_tree: list[FileTreeNode]) -> None:
        assert flatten_files(sample_tree) == [
            "README.md",
            "src/app.py",
            "src/utils/helpers.py",
            "src/config.yaml",
            "setup.py",
        ]

    def test_count_matches_flatten(self, sample_tree: list[FileTreeNode]) -> None:
        assert count_files(sample_tree) == len(flatten_files(sample_tree)) == 5

    def test_empty_tree(self) -> None:
        assert flatten_files([]) == []
        assert count_files([]) == 0

    def test_empty_directories_contribute_nothing(self) -> None:
        tree = [dir_node("a", dir_node("a/b"), dir_node("a/c"))]
        assert flatten_files(tree) == []
        assert count_files(tree) == 0

    def test_malformed_nodes_are_skipped(self) -> None:
        tree = [
            FileTreeNode(type="file", path=None),
            FileTreeNode(type="file", path=""),
            FileTreeNode(type="symlink", path="link"),
            FileTreeNode(),
            file_node("ok.txt"),
        ]
        assert flatten_files(tree) == ["ok.txt"]
        assert count_files(tree) == 1

    def test_untyped_node_children_are_walked(self) -> None:
        tree = [FileTreeNode(path="weird", children=[file_node("weird/inner.py")])]
        assert flatten_files(tree) == ["weird/inner.py"]
        assert count_files(tree) == 1

    def test_large_flat_tree(self) -> None:
        nodes = FileNodeFactory.build_batch(250)
        assert count_files(nodes) == 250
        assert flatten_files(nodes) == [node.path for node in nodes]


@pytest.mark.unit
class TestBuildTree:
    """Tests for build_tree."""

    def test_nests_blobs_under_trees(self) -> None:
        tree = build_tree(
            [
                ("README.md", "blob"),
                ("src", "tree"),
                ("src/main.py", "blob"),
                ("src/pkg", "tree"),
                ("src/pkg/mod.py", "blob"),
            ]
        )

        assert [node.path for node in tree] == ["README.md", "src"]
        src = tree[1]
        assert src.type == "dir"
        assert [node.path for node in src.children] == ["src/main.py", "src/pkg"]
        assert flatten_files(tree) == ["README.md", "src/main.py", "src/pkg/mod.py"]

    def test_creates_missing_parents(self) -> None:
        tree = build_tree([("a/b/c.txt", "blob")])

        assert tree[0].path == "a"
        assert tree[0].children[0].path == "a/b"
        assert flatten_files(tree) == ["a/b/c.txt"]

    def test_ignores_other_kinds(self) -> None:
        tree = build_tree([("vendor/lib", "commit"), ("main.go", "blob")])
        assert flatten_files(tree) == ["main.go"]
