"""Walking repository file trees."""

from collections.abc import Iterable, Iterator

from repo_indexer.core.models.file import FileTreeNode


def iter_files(nodes: Iterable[FileTreeNode]) -> Iterator[str]:
    """Yield file paths depth-first, in children order.

    Directories contribute no entry of their own, only their file
    descendants. Nodes that are not explicitly files are skipped.
    """
    for node in nodes:
        if node.is_file:
            yield node.path  # type: ignore[misc]
        elif node.children:
            yield from iter_files(node.children)


def flatten_files(nodes: Iterable[FileTreeNode]) -> list[str]:
    """Flatten a file tree into an ordered list of file paths."""
    return list(iter_files(nodes))


def count_files(nodes: Iterable[FileTreeNode]) -> int:
    """Count the files in a tree; always ``len(flatten_files(nodes))``."""
    count = 0
    for node in nodes:
        if node.is_file:
            count += 1
        elif node.children:
            count += count_files(node.children)
    return count


def build_tree(entries: Iterable[tuple[str, str]]) -> list[FileTreeNode]:
    """Nest a flat ``(path, kind)`` listing into a tree.

    ``kind`` is ``"blob"`` for files and ``"tree"`` for directories, as
    returned by the GitHub git trees API. Entries may come in any order;
    missing parent directories are created on the fly. Children keep the
    order in which they were first seen.
    """
    roots: list[FileTreeNode] = []
    dirs: dict[str, FileTreeNode] = {}

    def ensure_dir(path: str) -> list[FileTreeNode]:
        if not path:
            return roots
        if path not in dirs:
            parent, _, _ = path.rpartition("/")
            node = FileTreeNode(type="dir", path=path)
            ensure_dir(parent).append(node)
            dirs[path] = node
        return dirs[path].children

    for path, kind in entries:
        if kind == "tree":
            ensure_dir(path)
        elif kind == "blob":
            parent, _, _ = path.rpartition("/")
            ensure_dir(parent).append(FileTreeNode(type="file", path=path))

    return roots
