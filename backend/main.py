import sys
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import requests
import uvicorn

from config import logger, load_config, ConfigError, ProxyConfig
from security.authorizer import build_authorizer
from services.upstream import UpstreamFetcher
from services.pipeline import ProxyPipeline
from routers import proxy


def create_app(config: ProxyConfig, session: Optional[requests.Session] = None) -> FastAPI:
    """
    Build the proxy application from an already loaded configuration.

    `session` is the outbound HTTP session; a fresh requests.Session is created
    (and closed on shutdown) when none is given.
    """
    owns_session = session is None
    session = session or requests.Session()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_session:
            session.close()

    app = FastAPI(title="Image Proxy", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_allow_origins),
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    fetcher = UpstreamFetcher(
        session,
        user_agent=config.user_agent,
        timeout=config.upstream_timeout,
        chunk_size=config.chunk_size,
    )
    app.state.config = config
    app.state.pipeline = ProxyPipeline(config, build_authorizer(config), fetcher)

    app.include_router(proxy.router)
    return app


def main():
    try:
        config = load_config()
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    app = create_app(config)
    logger.info(f"Image proxy started on :{config.port} (auth: {config.auth_mode})")
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
