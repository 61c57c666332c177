from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class CatalogError(RuntimeError):
    """
    Base for every error the request pipeline can surface.

    `status_code` is the HTTP status the error maps to and `public_message`
    is the short summary placed in the response body. For server-side errors
    the underlying message (str(exc)) is echoed in the `error` field.
    """

    status_code: int = 500
    public_message: str = "Server Error"

    def __init__(self, message: str = "", *, public_message: str | None = None):
        if public_message is not None:
            self.public_message = public_message
        super().__init__(message or self.public_message)

    def to_dict(self) -> dict[str, str]:
        if self.status_code < 500:
            return {"message": str(self)}
        return {"message": self.public_message, "error": str(self)}


# 4xx
class ClientInputError(CatalogError):
    status_code = 400
    public_message = "Invalid request"


class NotFoundError(ClientInputError):
    status_code = 404
    public_message = "Not found"


class PayloadTooLargeError(ClientInputError):
    status_code = 413
    public_message = "Payload too large"


# 5xx
class QueryError(CatalogError):
    public_message = "Database query failed"


class StoreWriteError(CatalogError):
    public_message = "Failed to upload image"


class TranscodeError(CatalogError):
    public_message = "Failed to process image"


class StoreDeleteError(CatalogError):
    """Never raised to the client; travels inside a DeleteResult."""

    public_message = "Failed to delete stored object"


@contextmanager
def failure_summary(message: str) -> Iterator[None]:
    """Use `message` as the response summary for any 5xx raised inside the block."""
    try:
        yield
    except CatalogError as e:
        if e.status_code >= 500:
            e.public_message = message
        raise


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, catalog_error_handler)
