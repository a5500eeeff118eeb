"""
Repository exception taxonomy.

Local failures raised by the repository before (or, for
EntityNotFoundError, instead of) completing a driver call.
Driver errors (pymongo.errors.*) are never wrapped.
"""

from typing import Optional


class RepositoryError(Exception):
    """Base exception for repository errors."""
    pass


class NotConfiguredError(RepositoryError):
    """Raised when an operation is attempted before configure()."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or "The repository is not configured. Make sure configure() succeeded "
            "before using the repository."
        )


class InvalidConfigurationError(RepositoryError, ValueError):
    """Raised when configuration is absent or missing binding data."""
    pass


class NullEntityError(RepositoryError, ValueError):
    """Raised when a write operation is given no entity."""

    def __init__(self, message: str = "Entity cannot be None."):
        super().__init__(message)


class EntityNotFoundError(RepositoryError):
    """Raised when the target of an update does not exist."""

    def __init__(self, entity_id: Optional[str]):
        self.entity_id = entity_id
        super().__init__(f"No document with _id {entity_id!r} exists")
