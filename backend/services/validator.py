from typing import Sequence
from config import logger, DEFAULT_ALLOWED_CONTENT_TYPES
from models import ProxyError
from services.upstream import UpstreamResult


def validate_response(
    result: UpstreamResult,
    allowed_types: Sequence[str] = DEFAULT_ALLOWED_CONTENT_TYPES,
    allow_missing_content_type: bool = False,
) -> UpstreamResult:
    """
    Vérifie le statut et le type MIME de la réponse amont avant tout envoi au client.
    En cas de refus, la connexion amont est fermée.

    :param result: La réponse amont dont le corps n'a pas encore été lu.
    :type result: UpstreamResult
    :param allowed_types: La liste des types MIME acceptés.
    :type allowed_types: Sequence[str]
    :param allow_missing_content_type: Laisse passer une réponse 2xx sans en-tête Content-Type.
    :type allow_missing_content_type: bool
    :return: La même réponse, inchangée.
    :rtype: UpstreamResult
    :raises ProxyError: UPSTREAM_HTTP_ERROR si le statut n'est pas 2xx,
        UNSUPPORTED_MEDIA_TYPE si le type n'est pas dans la liste.
    """
    if not result.status_ok:
        result.close()
        logger.info(f"Réponse amont en erreur: {result.status_code} {result.reason}")
        raise ProxyError.upstream_http_error(result.status_code, result.reason)

    content_type = (result.content_type or "").strip().lower()
    if not content_type:
        if allow_missing_content_type:
            return result
        result.close()
        logger.info("Réponse amont sans Content-Type, refusée.")
        raise ProxyError.unsupported_media_type(allowed_types, None)

    if content_type not in allowed_types:
        result.close()
        logger.info(f"Type MIME refusé: {content_type}")
        raise ProxyError.unsupported_media_type(allowed_types, content_type)

    return result
