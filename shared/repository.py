"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access and providing shared utilities for data operations.
"""

from typing import Any, TypeVar, Generic
from supabase import Client

from .exceptions import ExternalServiceError


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Generic type parameter for model type hints
    - A single place that turns client failures into ExternalServiceError

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.
    """

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    def _execute(self, query: Any, operation: str) -> Any:
        """
        Execute a built query, wrapping client errors.

        Args:
            query: A Supabase query builder ready for ``execute()``.
            operation: Short description used in the error message.

        Returns:
            The client response object.

        Raises:
            ExternalServiceError: If the client raises.
        """
        try:
            return query.execute()
        except ExternalServiceError:
            raise
        except Exception as e:
            raise ExternalServiceError(
                f"Database error during {operation}",
                service="supabase",
                code="SERVER_ERROR",
                details={"operation": operation, "original_error": str(e)},
            ) from e
