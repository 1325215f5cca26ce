import logging
from contextlib import contextmanager

import asyncpg

logger = logging.getLogger(__name__)


# --- Custom Service Layer Exception Classes ---
class ServiceError(Exception):
    """General exception class for the service layer (bad or conflicting input)."""
    pass


class NotFoundError(ServiceError):
    """A referenced student, payment or attendance record does not exist."""
    pass


class StorageError(Exception):
    """The database failed underneath a service call."""
    pass


@contextmanager
def storage_errors(action: str):
    """
    Wraps database failures into StorageError after logging them.
    Service errors raised inside the block pass through untouched.
    """
    try:
        yield
    except ServiceError:
        raise
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
        logger.error(f"Database error while {action}.", exc_info=True)
        raise StorageError(f"A database error occurred while {action}.") from e
