"""Taxonomy domain API package."""

from taxonomy.api.errors import register_error_handlers
from taxonomy.api.routes import category_router

__all__ = ["category_router", "register_error_handlers"]
