import requests
from typing import Iterator, Optional
from config import logger, DEFAULT_USER_AGENT, DEFAULT_TIMEOUT, DEFAULT_CHUNK_SIZE
from models import ProxyError


class UpstreamResult:
    """
    Réponse amont d'une seule requête. Le corps est un flux paresseux, lisible une seule fois.
    """
    def __init__(self, response: requests.Response, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        :param response: La réponse requests ouverte en mode stream.
        :type response: requests.Response
        :param chunk_size: La taille des blocs lus sur la connexion amont.
        :type chunk_size: int
        """
        self._response = response
        self._chunk_size = chunk_size
        self._consumed = False

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def reason(self) -> str:
        return self._response.reason or ""

    @property
    def status_ok(self) -> bool:
        return 200 <= self._response.status_code < 300

    @property
    def content_type(self) -> Optional[str]:
        return self._response.headers.get("Content-Type")

    @property
    def url(self) -> str:
        return self._response.url

    def iter_body(self) -> Iterator[bytes]:
        """
        Itère sur le corps sans le mettre en mémoire.

        :raises RuntimeError: Si le corps a déjà été consommé.
        """
        if self._consumed:
            raise RuntimeError("Le corps de la réponse amont a déjà été consommé.")
        self._consumed = True
        return self._response.iter_content(chunk_size=self._chunk_size)

    def close(self) -> None:
        """Libère la connexion amont (idempotent)."""
        self._response.close()


class UpstreamFetcher:
    """
    Effectue le GET sortant vers l'URL cible avec un User-Agent de navigateur.
    Les redirections sont suivies, aucune nouvelle tentative n'est faite.
    """
    def __init__(
        self,
        session: requests.Session,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = DEFAULT_TIMEOUT,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """
        :param session: La session requests partagée (pool de connexions).
        :type session: requests.Session
        :param user_agent: L'en-tête User-Agent envoyé au serveur d'origine.
        :type user_agent: str
        :param timeout: Délai maximal en secondes pour la connexion et chaque lecture.
        :type timeout: float
        :param chunk_size: La taille des blocs transmis au client.
        :type chunk_size: int
        """
        self.session = session
        self.user_agent = user_agent
        self.timeout = timeout
        self.chunk_size = chunk_size

    def fetch(self, url: str) -> UpstreamResult:
        """
        Télécharge l'URL en mode stream, sans lire le corps.

        :param url: L'URL absolue à récupérer.
        :type url: str
        :return: La réponse amont, corps non consommé.
        :rtype: UpstreamResult
        :raises ProxyError: MALFORMED_URL si requests refuse l'URL,
            NETWORK_FAILURE si le serveur d'origine est injoignable.
        """
        try:
            response = self.session.get(
                url,
                headers={"User-Agent": self.user_agent},
                stream=True,
                timeout=self.timeout,
                allow_redirects=True,
            )
        except (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema, requests.exceptions.InvalidSchema) as e:
            logger.info(f"URL refusée par le client HTTP: {url} ({e})")
            raise ProxyError.malformed_url(url) from e
        except requests.RequestException as e:
            logger.warning(f"Échec réseau vers {url}: {e}")
            raise ProxyError.network_failure() from e

        logger.debug(f"Réponse amont {response.status_code} pour {url}")
        return UpstreamResult(response, self.chunk_size)
