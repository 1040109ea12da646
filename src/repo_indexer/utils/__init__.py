"""Utility helpers for repo-indexer."""
