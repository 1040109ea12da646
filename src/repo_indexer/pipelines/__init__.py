"""Processing pipelines for repo-indexer."""

from repo_indexer.pipelines.indexation import IndexationPipeline

__all__ = ["IndexationPipeline"]
