"""Persistence-related exceptions."""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError


class PersistenceError(Exception):
    """Base exception for persistence-related errors."""


class DatabaseError(PersistenceError):
    """Database operation error."""


@contextmanager
def database_errors(operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as DatabaseError.

    Args:
        operation: Name of the repository operation, used in the message.
    """
    try:
        yield
    except SQLAlchemyError as e:
        raise DatabaseError(f"{operation} failed: {e}") from e
