import requests
from typing import Tuple
from config import logger
from models import ProxyError, ErrorKind, UNAUTHORIZED_MESSAGE


def classify_error(exc: BaseException) -> Tuple[int, str]:
    """
    Map any pipeline failure to the (status, message) pair sent to the client.

    First match wins: authorization, structured ProxyError, upstream HTTP error,
    then a generic 500. Never raises.
    """
    if isinstance(exc, ProxyError):
        if exc.kind is ErrorKind.UNAUTHORIZED:
            return 401, UNAUTHORIZED_MESSAGE
        return exc.http_status, exc.message

    # Regular HTTP errors carrying the upstream response
    response = getattr(exc, "response", None)
    if isinstance(exc, requests.HTTPError) and response is not None:
        forwarded = ProxyError.upstream_http_error(response.status_code, response.reason)
        return forwarded.http_status, forwarded.message

    logger.error(f"Unexpected error while proxying: {exc!r}", exc_info=exc)
    unknown = ProxyError.unknown()
    return unknown.http_status, unknown.message
