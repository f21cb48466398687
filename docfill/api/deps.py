"""FastAPI dependencies for dependency injection.

Provides reusable dependencies for routes including:
- Database sessions
- Owner context
- Component factory and template service
"""

import logging
import uuid
from collections.abc import AsyncGenerator

from fastapi import Depends, Header, status
from sqlalchemy.ext.asyncio import AsyncSession

from docfill.api.errors import ApiError
from docfill.core.config import Settings, get_settings
from docfill.core.factory import ComponentFactory, get_factory
from docfill.db.repository import SqlTemplateRepository
from docfill.db.session import get_async_session
from docfill.services.templates import TemplateService

logger = logging.getLogger(__name__)


async def get_db(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions.

    Args:
        settings: Application settings.

    Yields:
        An async database session.
    """
    async for session in get_async_session(settings):
        yield session


async def get_user_id(
    x_user_id: str | None = Header(default=None, description="ID of the requesting user"),
) -> uuid.UUID:
    """Dependency for extracting the requesting user from headers.

    Args:
        x_user_id: The user ID from the X-User-ID header.

    Returns:
        The user UUID.

    Raises:
        ApiError: If the header is missing or not a UUID.
    """
    if not x_user_id:
        logger.warning("X-User-ID header is missing")
        raise ApiError(status.HTTP_400_BAD_REQUEST, "X-User-ID header is required")

    try:
        return uuid.UUID(x_user_id)
    except ValueError as e:
        logger.warning(f"Invalid user ID format: {x_user_id}")
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Invalid user ID format") from e


def get_component_factory() -> ComponentFactory:
    """Dependency returning the component factory."""
    return get_factory()


async def get_template_service(
    session: AsyncSession = Depends(get_db),
    factory: ComponentFactory = Depends(get_component_factory),
) -> TemplateService:
    """Dependency building a template service bound to the request's session."""
    return TemplateService(
        repository=SqlTemplateRepository(session),
        storage=factory.get_object_storage(),
        factory=factory,
    )
