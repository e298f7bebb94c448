import hmac
from abc import ABC, abstractmethod
from typing import Mapping
from config import logger, ProxyConfig, AUTH_MODE_OPEN

ACCESS_TOKEN_PARAM = "access_token"


class Authorizer(ABC):
    """
    Interface définissant le point de décision unique pour l'accès au proxy.
    Chaque déploiement peut fournir sa propre politique sans toucher au routage.
    """
    @abstractmethod
    def is_authorized(self, query_params: Mapping[str, str]) -> bool:
        """
        Décide si la requête peut continuer vers le téléchargement.

        :param query_params: Les paramètres de la query string de la requête entrante.
        :type query_params: Mapping[str, str]
        :return: True si la requête est autorisée, False sinon.
        :rtype: bool
        """
        pass


class SharedSecretAuthorizer(Authorizer):
    """
    Autorise une requête si le paramètre `access_token` est égal au secret partagé.
    La comparaison est exacte et sensible à la casse.
    """
    def __init__(self, secret: str):
        """
        :param secret: Le jeton secret chargé une seule fois au démarrage.
        :type secret: str
        """
        if not secret:
            raise ValueError("Le secret partagé ne peut pas être vide.")
        self._secret = secret

    def is_authorized(self, query_params: Mapping[str, str]) -> bool:
        token = query_params.get(ACCESS_TOKEN_PARAM)
        if not token:
            return False
        return hmac.compare_digest(token.encode("utf-8"), self._secret.encode("utf-8"))


class OpenAccessAuthorizer(Authorizer):
    """
    Accès public sans jeton. Déconseillé, à réserver à un proxy protégé par le réseau.
    """
    def is_authorized(self, query_params: Mapping[str, str]) -> bool:
        return True


def build_authorizer(config: ProxyConfig) -> Authorizer:
    """
    Construit la politique d'autorisation décrite par la configuration.

    :param config: La configuration immuable du processus.
    :type config: ProxyConfig
    :return: L'implémentation concrète d'Authorizer à utiliser.
    :rtype: Authorizer
    """
    if config.auth_mode == AUTH_MODE_OPEN:
        logger.warning("Proxy en accès public : aucune vérification de jeton ne sera faite.")
        return OpenAccessAuthorizer()
    return SharedSecretAuthorizer(config.access_token)
