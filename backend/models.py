from enum import Enum
from http import HTTPStatus

UNAUTHORIZED_MESSAGE = "Unauthorized image proxy access"
GENERIC_FAILURE_MESSAGE = "An error occurred while downloading your image."


class ErrorKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    MALFORMED_URL = "malformed_url"
    UNSUPPORTED_MEDIA_TYPE = "unsupported_media_type"
    UPSTREAM_HTTP_ERROR = "upstream_http_error"
    NETWORK_FAILURE = "network_failure"
    UNKNOWN = "unknown"


class ProxyError(Exception):
    """
    A pipeline failure that already knows the response it should turn into.

    One tagged type for every failure: `kind` says what went wrong,
    `http_status` and `message` are what the client receives.
    """
    def __init__(self, kind: ErrorKind, http_status: int, message: str):
        super().__init__(f"{kind.value}: {http_status} {message}")
        self.kind = kind
        self.http_status = http_status
        self.message = message

    @classmethod
    def unauthorized(cls) -> "ProxyError":
        return cls(ErrorKind.UNAUTHORIZED, 401, UNAUTHORIZED_MESSAGE)

    @classmethod
    def malformed_url(cls, value: str) -> "ProxyError":
        return cls(ErrorKind.MALFORMED_URL, 400, f"Malformed target URL: {value}")

    @classmethod
    def unsupported_media_type(cls, accepted, received) -> "ProxyError":
        return cls(
            ErrorKind.UNSUPPORTED_MEDIA_TYPE,
            415,
            f"Unsupported Media Type, expected {', '.join(accepted)}, received {received or 'none'}",
        )

    @classmethod
    def upstream_http_error(cls, status: int, reason: str) -> "ProxyError":
        if not reason:
            try:
                reason = HTTPStatus(status).phrase
            except ValueError:
                reason = f"HTTP {status}"
        return cls(ErrorKind.UPSTREAM_HTTP_ERROR, status, reason)

    @classmethod
    def network_failure(cls) -> "ProxyError":
        return cls(ErrorKind.NETWORK_FAILURE, 500, GENERIC_FAILURE_MESSAGE)

    @classmethod
    def unknown(cls) -> "ProxyError":
        return cls(ErrorKind.UNKNOWN, 500, GENERIC_FAILURE_MESSAGE)
