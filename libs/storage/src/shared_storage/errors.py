from botocore.exceptions import (
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

_TRANSIENT_CODES = {
    "SlowDown", "Throttling", "RequestTimeout",
    "InternalError", "ServiceUnavailable", "InternalServerError",
}
_NOT_FOUND_CODES = {"NoSuchKey", "NotFound", "404"}


class StoreError(Exception):
    pass


class TransientStoreFailure(StoreError):
    """Connection or I/O failure talking to the object store. Safe to retry."""


class ServiceUnavailable(StoreError):
    """The object store stayed unreachable after every retry."""

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Object store is persistently unavailable for {operation}")


class ObjectNotFound(StoreError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Object not found: {key}")


def error_code(exc: ClientError) -> str:
    return (exc.response.get("Error", {}) or {}).get("Code", "")


def http_status(exc: ClientError) -> int | None:
    return exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")


def is_not_found(exc: Exception) -> bool:
    if not isinstance(exc, ClientError):
        return False
    return error_code(exc) in _NOT_FOUND_CODES or http_status(exc) == 404


def is_transient(exc: Exception) -> bool:
    # network/endpoint timeouts
    if isinstance(exc, (EndpointConnectionError, ConnectionClosedError,
                        ConnectTimeoutError, ReadTimeoutError)):
        return True
    if isinstance(exc, ClientError):
        status = http_status(exc)
        if error_code(exc) in _TRANSIENT_CODES:
            return True
        return isinstance(status, int) and 500 <= status < 600
    return isinstance(exc, OSError)
