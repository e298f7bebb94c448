from typing import Mapping
from fastapi import Response
from fastapi.responses import PlainTextResponse
from config import logger, ProxyConfig
from models import ProxyError
from security.authorizer import Authorizer
from services.url_extractor import extract_target_url
from services.upstream import UpstreamFetcher
from services.validator import validate_response
from services.error_classifier import classify_error
from services.stream_forwarder import forward_stream


class ProxyPipeline:
    """
    Ordered request stages: authorize, extract the target, fetch, validate, forward.

    Each stage hands its value to the next one or raises ProxyError to stop the
    request. Every failure is turned into exactly one plain-text response here, and
    nothing is sent to the client before validation has passed.
    """
    def __init__(self, config: ProxyConfig, authorizer: Authorizer, fetcher: UpstreamFetcher):
        self.config = config
        self.authorizer = authorizer
        self.fetcher = fetcher

    def handle(self, raw_segment: str, query_params: Mapping[str, str]) -> Response:
        try:
            self._authorize(query_params)
            url = extract_target_url(raw_segment)
            logger.info(f"[PROXY] {url}")

            result = self.fetcher.fetch(url)
            validate_response(
                result,
                allowed_types=self.config.allowed_content_types,
                allow_missing_content_type=self.config.allow_missing_content_type,
            )
            return forward_stream(result)
        except Exception as e:
            status, message = classify_error(e)
            return PlainTextResponse(message, status_code=status)

    def _authorize(self, query_params: Mapping[str, str]) -> None:
        if not self.authorizer.is_authorized(query_params):
            logger.warning("Rejected proxy request: missing or invalid access_token")
            raise ProxyError.unauthorized()
