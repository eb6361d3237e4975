"""
Middleware components for the API error extensions.

This module contains FastAPI middleware for request preconditions.
"""

from middleware.meta import MetaHeaderMiddleware, check_meta_header, setup_meta_header

__all__ = [
    "MetaHeaderMiddleware",
    "check_meta_header",
    "setup_meta_header",
]
