"""
OnlySwap accounts API package.

Provides the FastAPI application for the account lifecycle service.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
