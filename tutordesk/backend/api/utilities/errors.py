from uuid import UUID

from fastapi import HTTPException, status

from ...services.errors import NotFoundError, ServiceError


def to_http_exception(error: ServiceError) -> HTTPException:
    """NotFoundError -> 404, any other ServiceError -> 400."""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


def parse_id(value: str, not_found_message: str) -> UUID:
    """A path id that is not a UUID cannot name an existing record."""
    try:
        return UUID(value)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found_message)
