# userservice/exceptions.py

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class UserServiceError(Exception):
    """
    Base error for the service.

    `message` is what the client sees, so it must stay generic; the
    underlying store error is kept on `__cause__` and only logged.
    """

    def __init__(self, message: str, code: str = "STORE_ERROR", status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


class StoreUnavailableError(UserServiceError):
    """The store could not be reached."""

    def __init__(self):
        super().__init__(
            "Database unavailable",
            code="STORE_UNAVAILABLE",
            status_code=503,
        )


class DuplicateUserError(UserServiceError):
    """A user with the same name or email already exists."""

    def __init__(self):
        super().__init__(
            "User could not be created: name or email already taken",
            code="DUPLICATE_USER",
        )


class InvalidUserError(UserServiceError):
    """Missing field, wrong type or unreadable body."""

    def __init__(self, reason: str = "name, email and an integer age are required"):
        super().__init__(
            f"User could not be created: {reason}",
            code="INVALID_USER",
        )


class StoreError(UserServiceError):
    def __init__(self):
        super().__init__("Internal server error", code="STORE_ERROR")


async def user_service_exception_handler(request: Request, exc: UserServiceError) -> JSONResponse:
    logger.error(
        "%s %s failed with %s: %s",
        request.method,
        request.url.path,
        exc.code,
        exc.__cause__ or exc.message,
        exc_info=exc.__cause__,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
