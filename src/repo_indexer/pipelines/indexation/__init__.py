"""Repository indexation pipeline."""

from repo_indexer.pipelines.indexation.pipeline import (
    IndexationPipeline,
    compute_file_progress,
    find_readme,
)

__all__ = ["IndexationPipeline", "compute_file_progress", "find_readme"]
