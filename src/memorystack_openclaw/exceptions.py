"""Errors raised by ``MemoryStackClient``.

Everything the client can fail with is a ``MemoryStackError``: HTTP error
statuses, transport failures and bodies that do not match the response
models. Tools, slash commands and the CLI catch that single type and turn it
into a reply.
"""


class MemoryStackError(Exception):
    """A MemoryStack call did not produce a usable result."""

    default_message = "MemoryStack request failed"

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        self.message = message or self.default_message
        self.status_code = status_code
        super().__init__(self.message)


class AuthenticationError(MemoryStackError):
    """401: the API key is missing, malformed or revoked."""

    default_message = "Invalid or missing MemoryStack API key"


class AuthorizationError(MemoryStackError):
    """403: the key is valid but lacks access to the resource."""

    default_message = "API key is not allowed to do this"


class NotFoundError(MemoryStackError):
    default_message = "Memory not found"


class ValidationError(MemoryStackError):
    """422: the store rejected the request payload."""

    default_message = "Request rejected by MemoryStack"


class RateLimitError(MemoryStackError):
    """429: the plan's API call allowance is used up."""

    default_message = "MemoryStack API call limit reached"


class ServerError(MemoryStackError):
    default_message = "MemoryStack is unavailable"


class TransportError(MemoryStackError):
    """The request never got an HTTP response (connection failure or timeout)."""

    default_message = "Could not reach MemoryStack"


class InvalidResponseError(MemoryStackError):
    """The store answered 2xx with a body that is not the expected JSON shape."""

    default_message = "Invalid response from MemoryStack"


_STATUS_ERRORS: dict[int, type[MemoryStackError]] = {
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    422: ValidationError,
    429: RateLimitError,
}


def error_for_status(status_code: int, message: str | None = None) -> MemoryStackError:
    """Build the error for an HTTP error status, using the store's message when it sent one."""
    if status_code in _STATUS_ERRORS:
        error_cls = _STATUS_ERRORS[status_code]
    elif status_code >= 500:
        error_cls = ServerError
    else:
        error_cls = MemoryStackError
    return error_cls(message, status_code=status_code)
