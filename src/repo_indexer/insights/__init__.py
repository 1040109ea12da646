"""Repository insights generation."""

from repo_indexer.insights.generator import InsightsGenerator, Summarizer
from repo_indexer.insights.summarizer import OllamaSummarizer

__all__ = ["InsightsGenerator", "OllamaSummarizer", "Summarizer"]
