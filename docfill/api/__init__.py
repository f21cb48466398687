"""FastAPI routers and dependencies."""

from docfill.api.conversion import router as conversion_router
from docfill.api.deps import (
    get_component_factory,
    get_db,
    get_template_service,
    get_user_id,
)
from docfill.api.errors import ApiError, api_error_handler
from docfill.api.templates import router as templates_router

__all__ = [
    "ApiError",
    "api_error_handler",
    "get_component_factory",
    "get_db",
    "get_template_service",
    "get_user_id",
    "conversion_router",
    "templates_router",
]
