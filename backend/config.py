import os
import logging
from typing import List, Mapping, Optional, Tuple
from pydantic import BaseModel, ConfigDict
from dotenv import load_dotenv

load_dotenv()

# Configure logging
logging.basicConfig(
    level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/89.0.4389.82 Safari/537.36"
)

# See https://developer.mozilla.org/en-US/docs/Web/HTTP/Basics_of_HTTP/MIME_types/Common_types
DEFAULT_ALLOWED_CONTENT_TYPES = (
    "image/jpg",
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/svg+xml",
)

AUTH_MODE_TOKEN = "token"
AUTH_MODE_OPEN = "open"

DEFAULT_TIMEOUT = 30.0
DEFAULT_CHUNK_SIZE = 64 * 1024


class ConfigError(Exception):
    """Raised at startup when the environment does not describe a usable proxy."""
    pass


class ProxyConfig(BaseModel):
    """Process-wide settings, built once at startup and never mutated."""
    model_config = ConfigDict(frozen=True)

    port: int
    host: str = "0.0.0.0"
    auth_mode: str = AUTH_MODE_TOKEN
    access_token: Optional[str] = None
    upstream_timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    allowed_content_types: Tuple[str, ...] = DEFAULT_ALLOWED_CONTENT_TYPES
    allow_missing_content_type: bool = False
    chunk_size: int = DEFAULT_CHUNK_SIZE
    cors_allow_origins: Tuple[str, ...] = ("*",)


def _split_list(value: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(environ: Optional[Mapping[str, str]] = None) -> ProxyConfig:
    """
    Read the proxy settings from the environment (after .env has been loaded).

    Every problem is collected so a broken deployment reports all of them at once.
    Raises ConfigError when a required value is missing or a value cannot be parsed.
    """
    env = os.environ if environ is None else environ
    errors: List[str] = []

    port = 0
    raw_port = env.get("PORT", "").strip()
    if not raw_port:
        errors.append("PORT is not set")
    else:
        try:
            port = int(raw_port)
            if not 0 < port < 65536:
                errors.append(f"PORT must be between 1 and 65535, got {port}")
        except ValueError:
            errors.append(f"PORT must be an integer, got {raw_port!r}")

    auth_mode = env.get("PROXY_AUTH_MODE", AUTH_MODE_TOKEN).strip().lower()
    access_token = env.get("PROXY_ACCESS_TOKEN") or None
    if auth_mode not in (AUTH_MODE_TOKEN, AUTH_MODE_OPEN):
        errors.append(f"PROXY_AUTH_MODE must be '{AUTH_MODE_TOKEN}' or '{AUTH_MODE_OPEN}', got {auth_mode!r}")
    elif auth_mode == AUTH_MODE_TOKEN and not access_token:
        errors.append("PROXY_ACCESS_TOKEN is not set (required unless PROXY_AUTH_MODE=open)")

    timeout = DEFAULT_TIMEOUT
    raw_timeout = env.get("PROXY_UPSTREAM_TIMEOUT")
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
            if timeout <= 0:
                errors.append("PROXY_UPSTREAM_TIMEOUT must be positive")
        except ValueError:
            errors.append(f"PROXY_UPSTREAM_TIMEOUT must be a number, got {raw_timeout!r}")

    chunk_size = DEFAULT_CHUNK_SIZE
    raw_chunk = env.get("PROXY_CHUNK_SIZE")
    if raw_chunk:
        try:
            chunk_size = int(raw_chunk)
            if chunk_size <= 0:
                errors.append("PROXY_CHUNK_SIZE must be positive")
        except ValueError:
            errors.append(f"PROXY_CHUNK_SIZE must be an integer, got {raw_chunk!r}")

    allowed_types = DEFAULT_ALLOWED_CONTENT_TYPES
    raw_types = env.get("PROXY_ALLOWED_CONTENT_TYPES")
    if raw_types:
        allowed_types = tuple(t.lower() for t in _split_list(raw_types))
        if not allowed_types:
            errors.append("PROXY_ALLOWED_CONTENT_TYPES must list at least one type")

    if errors:
        raise ConfigError("; ".join(errors))

    return ProxyConfig(
        port=port,
        host=env.get("HOST", "0.0.0.0"),
        auth_mode=auth_mode,
        access_token=access_token,
        upstream_timeout=timeout,
        user_agent=env.get("PROXY_USER_AGENT") or DEFAULT_USER_AGENT,
        allowed_content_types=allowed_types,
        allow_missing_content_type=_parse_bool(env.get("PROXY_ALLOW_MISSING_CONTENT_TYPE", "false")),
        chunk_size=chunk_size,
        cors_allow_origins=_split_list(env.get("CORS_ALLOW_ORIGINS", "*")) or ("*",),
    )
