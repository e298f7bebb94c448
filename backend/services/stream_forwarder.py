import requests
from typing import Iterator
from fastapi.responses import StreamingResponse
from config import logger
from services.upstream import UpstreamResult


def iter_upstream_body(result: UpstreamResult) -> Iterator[bytes]:
    """
    Relaie le corps amont bloc par bloc, sans accumulation.

    Une erreur de lecture en cours de transfert est journalisée puis relancée :
    le serveur interrompt alors la réponse partielle, sans reprise.

    :param result: La réponse amont validée, corps non consommé.
    :type result: UpstreamResult
    :return: Un itérateur sur les blocs d'octets.
    :rtype: Iterator[bytes]
    """
    try:
        for chunk in result.iter_body():
            if chunk:
                yield chunk
    except requests.RequestException as e:
        logger.warning(f"Transfert interrompu depuis {result.url}: {e}")
        raise
    finally:
        result.close()


class UpstreamStreamingResponse(StreamingResponse):
    """
    StreamingResponse qui ferme toujours la connexion amont à la fin de l'envoi,
    y compris quand le client se déconnecte en cours de transfert.
    """
    def __init__(self, result: UpstreamResult):
        """
        :param result: La réponse amont validée, corps non consommé.
        :type result: UpstreamResult
        """
        super().__init__(
            iter_upstream_body(result),
            status_code=result.status_code,
            media_type=result.content_type,
        )
        self.upstream = result

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            self.upstream.close()


def forward_stream(result: UpstreamResult) -> StreamingResponse:
    """
    Construit la réponse client : statut amont, Content-Type amont, corps en flux.
    Aucun Content-Length n'est recopié ; le serveur choisit le découpage (chunked).

    :param result: La réponse amont validée.
    :type result: UpstreamResult
    :return: La réponse en flux prête à être envoyée.
    :rtype: StreamingResponse
    """
    return UpstreamStreamingResponse(result)
