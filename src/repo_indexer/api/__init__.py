"""HTTP API for repo-indexer."""
