"""Exceptions."""

from __future__ import annotations

__all__ = [
    "DbfsError",
    "NotInitializedError",
    "TransportError",
    "EncodingError",
    "RemoteApiError",
    "NotFoundError",
    "AlreadyExistsError",
    "BlockTooLargeError",
    "ReadTooLargeError",
    "InvalidParameterError",
    "IoError",
]


class DbfsError(Exception):
    pass


class NotInitializedError(DbfsError):
    def __init__(self, message: str | None = None):
        if message is None:
            message = (
                "No session configured; call dbfskit.configure() first"
            )
        super().__init__(message)


class TransportError(DbfsError):
    """The request failed before a structured API error could be read.

    Raised for connection problems, where ``status_code`` and ``body`` are
    ``None``, and for error responses whose body is not in the documented
    error shape.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class EncodingError(DbfsError):
    pass


class RemoteApiError(DbfsError):
    """An error reported by the API with an ``error_code`` and ``message``."""

    error_code: str | None = None

    def __init__(
        self,
        error_code: str,
        message: str = "",
        status_code: int | None = None,
    ):
        super().__init__(f"{error_code}: {message}" if message else error_code)
        self.error_code = error_code
        self.message = message
        self.status_code = status_code

    @property
    def code(self) -> str:
        return self.error_code


class NotFoundError(RemoteApiError):
    error_code = "RESOURCE_DOES_NOT_EXIST"


class AlreadyExistsError(RemoteApiError):
    error_code = "RESOURCE_ALREADY_EXISTS"


class BlockTooLargeError(RemoteApiError):
    error_code = "MAX_BLOCK_SIZE_EXCEEDED"


class ReadTooLargeError(RemoteApiError):
    error_code = "MAX_READ_SIZE_EXCEEDED"


class InvalidParameterError(RemoteApiError):
    error_code = "INVALID_PARAMETER_VALUE"


class IoError(RemoteApiError):
    error_code = "IO_ERROR"


ERRORS_BY_CODE: dict[str, type[RemoteApiError]] = {
    cls.error_code: cls
    for cls in (
        NotFoundError,
        AlreadyExistsError,
        BlockTooLargeError,
        ReadTooLargeError,
        InvalidParameterError,
        IoError,
    )
}


def error_for(
    error_code: str, message: str = "", status_code: int | None = None
) -> RemoteApiError:
    """Create the exception registered for an API error code."""
    cls = ERRORS_BY_CODE.get(error_code, RemoteApiError)
    return cls(error_code, message, status_code=status_code)
