"""Mapping from service errors to HTTP responses."""
from fastapi import HTTPException, status

from worktracker.exceptions import InvalidStateError, NotFoundError


def to_http_exception(error: ValueError) -> HTTPException:
    """
    Translate a service error into an ``HTTPException``.

    Not-found maps to 404, forbidden transitions to 409 and every other
    ``ValueError`` (validation included) to 400.
    """
    if isinstance(error, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, InvalidStateError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(error))
