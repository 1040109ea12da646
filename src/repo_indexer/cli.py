"""CLI for repo-indexer."""

import asyncio
import sys

import click
import structlog

from repo_indexer.config.logging import configure_logging
from repo_indexer.core.exceptions import InvalidRepositoryUrlError, RepositoryNotFoundError
from repo_indexer.core.models.repository import IndexStatus

logger = structlog.get_logger(__name__)


def run_async(coro):
    """Run an async function synchronously."""
    return asyncio.run(coro)


async def _create_service():
    from repo_indexer.config.settings import get_settings
    from repo_indexer.services.factory import create_indexing_service

    return await create_indexing_service(get_settings())


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool) -> None:
    """repo-indexer: index GitHub repositories for search and insights."""
    log_level = "DEBUG" if verbose else "INFO"
    configure_logging(log_level=log_level)


@cli.command()
@click.argument("repo_url")
def index(repo_url: str) -> None:
    """Index a GitHub repository and wait for the job to finish."""

    async def _index() -> bool:
        service = await _create_service()
        try:
            try:
                record = await service.start_indexing(repo_url)
            except InvalidRepositoryUrlError as e:
                click.echo(f"Error: {e}", err=True)
                return False

            click.echo(f"Indexing {record.repo_owner}/{record.repo_name} (id: {record.id})")
            await service.start()
            await service.jobs.join()

            progress = await service.get_status(record.id)
            if progress.status == IndexStatus.COMPLETED:
                click.echo(f"Indexed {progress.indexed_files}/{progress.total_files} files")
                skipped = progress.total_files - progress.indexed_files
                if skipped:
                    click.echo(f"  {skipped} files could not be indexed")
                return True

            click.echo(f"Indexing failed: {progress.error_message}", err=True)
            return False
        finally:
            await service.close()

    if not run_async(_index()):
        sys.exit(1)


@cli.command()
@click.argument("repo_id")
def status(repo_id: str) -> None:
    """Show the indexing status of a repository."""

    async def _status() -> bool:
        service = await _create_service()
        try:
            try:
                record = await service.get_repository(repo_id)
            except RepositoryNotFoundError as e:
                click.echo(f"Error: {e}", err=True)
                return False

            click.echo(f"{record.repo_owner}/{record.repo_name}")
            click.echo(f"  URL:       {record.repo_url}")
            click.echo(f"  Status:    {record.index_status.value} ({record.index_progress}%)")
            if record.status_message:
                click.echo(f"  Stage:     {record.status_message}")
            click.echo(f"  Files:     {record.indexed_files}/{record.total_files}")
            click.echo(f"  Stars:     {record.repo_stars}")
            if record.error_message:
                click.echo(f"  Error:     {record.error_message}")
            if record.repo_summary:
                click.echo(f"\n{record.repo_summary}")
            return True
        finally:
            await service.close()

    if not run_async(_status()):
        sys.exit(1)


@cli.command()
@click.argument("repo_id")
@click.argument("query")
@click.option("--limit", "-l", default=10, help="Max results")
def search(repo_id: str, query: str, limit: int) -> None:
    """Search a repository's indexed files."""

    async def _search() -> bool:
        service = await _create_service()
        try:
            try:
                hits = await service.search(repo_id, query, limit=limit)
            except RepositoryNotFoundError as e:
                click.echo(f"Error: {e}", err=True)
                return False

            if not hits:
                click.echo("No results found.")
                return True

            click.echo(f"Found {len(hits)} results:\n")
            for i, hit in enumerate(hits, 1):
                click.echo(f"  {i}. [{hit.score:.3f}] {hit.file_path}")
                if hit.snippet:
                    snippet = " ".join(hit.snippet.split())
                    snippet = snippet[:120] + "..." if len(snippet) > 120 else snippet
                    click.echo(f"     {snippet}")
            return True
        finally:
            await service.close()

    if not run_async(_search()):
        sys.exit(1)


@cli.command()
def serve() -> None:
    """Run the HTTP API."""
    from repo_indexer.api.main import run

    run()


if __name__ == "__main__":
    cli()
