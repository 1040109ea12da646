"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends, Request

from repo_indexer.config import Settings, get_settings
from repo_indexer.services.indexing import IndexingService


def get_settings_dep() -> Settings:
    """Get application settings."""
    return get_settings()


async def get_indexing_service(request: Request) -> IndexingService:
    """Get the indexing service created by the application lifespan."""
    return request.app.state.indexing_service


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings_dep)]
IndexingServiceDep = Annotated[IndexingService, Depends(get_indexing_service)]
