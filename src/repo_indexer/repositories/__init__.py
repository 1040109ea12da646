"""Storage backends for repo-indexer."""
