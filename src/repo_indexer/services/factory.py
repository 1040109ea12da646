"""Wiring the indexing service from settings."""

from typing import TYPE_CHECKING

from repo_indexer.github.client import GitHubClient
from repo_indexer.insights.generator import InsightsGenerator
from repo_indexer.insights.summarizer import OllamaSummarizer
from repo_indexer.pipelines.indexation import IndexationPipeline
from repo_indexer.repositories.factory import RepositoryFactory
from repo_indexer.services.indexing import IndexingService

if TYPE_CHECKING:
    from repo_indexer.config.settings import Settings


async def create_indexing_service(settings: "Settings") -> IndexingService:
    """Create the indexing service and everything it depends on."""
    factory = RepositoryFactory(settings)
    status_store = await factory.get_status_store()
    search_index = await factory.get_search_index()

    github = GitHubClient(
        api_url=settings.github_api_url,
        raw_url=settings.github_raw_url,
        token=settings.github_token,
        timeout=settings.github_timeout,
        max_file_size=settings.max_file_size,
    )
    summarizer = OllamaSummarizer(
        base_url=settings.ollama_url,
        model=settings.ollama_model,
        timeout=settings.summarizer_timeout,
    )
    insights = InsightsGenerator(
        summarizer,
        max_files=settings.insights_max_files,
        max_readme_chars=settings.insights_max_readme_chars,
    )

    pipeline = IndexationPipeline(
        status_store=status_store,
        search_index=search_index,
        github=github,
        insights=insights,
        concurrency=settings.github_concurrency,
        metadata_timeout=settings.metadata_timeout,
        status_write_timeout=settings.status_write_timeout,
        fetch_heartbeat_delay=settings.fetch_heartbeat_delay,
        progress_update_every=settings.progress_update_every,
        popular_threshold=settings.popular_star_threshold,
    )

    async def cleanup() -> None:
        await github.close()
        await summarizer.close()
        await factory.close()

    return IndexingService(
        pipeline=pipeline,
        status_store=status_store,
        search_index=search_index,
        github=github,
        job_workers=settings.job_workers,
        cache_ttl_hours=settings.cache_ttl_hours,
        popular_threshold=settings.popular_star_threshold,
        cleanup=cleanup,
    )
