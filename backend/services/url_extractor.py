from typing import Any, Mapping
from urllib.parse import unquote, urlsplit
from models import ProxyError

ALLOWED_SCHEMES = {"http", "https"}


def raw_target_segment(scope: Mapping[str, Any], fallback: str) -> str:
    """
    Return the still-encoded target from the ASGI scope.

    The routed path parameter has already been decoded by the server, so encoded
    slashes and `%25` sequences would be lost; `raw_path` keeps them intact.
    """
    raw_path = scope.get("raw_path")
    if not raw_path:
        return fallback

    raw = raw_path.decode("latin-1").split("?", 1)[0]
    root_path = scope.get("root_path") or ""
    if root_path and raw.startswith(root_path):
        raw = raw[len(root_path):]
    return raw


def extract_target_url(raw_segment: str) -> str:
    """
    Décode (une seule fois) le segment encodé et vérifie qu'il s'agit d'une URL absolue.

    :param raw_segment: Le segment de chemin tel que reçu, encodé en pourcentage.
    :type raw_segment: str
    :return: L'URL cible décodée.
    :rtype: str
    :raises ProxyError: MALFORMED_URL si le résultat n'est pas une URL http(s) absolue.
    """
    url = unquote(raw_segment[1:] if raw_segment.startswith("/") else raw_segment).strip()

    try:
        parts = urlsplit(url)
        host = parts.hostname
        # Raises on non-numeric or out-of-range ports
        parts.port
    except ValueError as e:
        raise ProxyError.malformed_url(url) from e

    if parts.scheme.lower() not in ALLOWED_SCHEMES or not host:
        raise ProxyError.malformed_url(url)
    if any(c.isspace() for c in parts.netloc):
        raise ProxyError.malformed_url(url)
    return url
