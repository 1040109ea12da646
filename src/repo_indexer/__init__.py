"""repo-indexer: GitHub repository indexing with observable progress."""

__version__ = "0.1.0"
