"""
Application factory and server lifecycle.

``create_app`` wires the immutable configuration, the process start time and
the error handlers into a FastAPI app. ``serve`` runs it under uvicorn, which
stops accepting connections on SIGINT/SIGTERM and drains in-flight requests
for up to ``graceful_timeout`` seconds.
"""

import time
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from conscript import logger
from conscript.api import router
from conscript.config import ServerConfig, load_config


async def http_error_handler(_req: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    return PlainTextResponse(f"{exc.detail}\n", status_code=exc.status_code, headers=exc.headers)


async def validation_error_handler(_req: Request, exc: RequestValidationError) -> PlainTextResponse:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return PlainTextResponse(f"Invalid request: {problems}\n", status_code=400)


async def unhandled_error_handler(_req: Request, exc: Exception) -> PlainTextResponse:
    logger.error(f"Unhandled error: {exc}", exc_info=exc)
    return PlainTextResponse("Internal server error\n", status_code=500)


def create_app(config: Optional[ServerConfig] = None) -> FastAPI:
    if config is None:
        config = load_config()

    app = FastAPI(
        title="Conscript",
        description="Read-only HTTP view of Docker containers and their health.",
        version=config.app_version,
    )
    app.state.config = config
    app.state.started_at = time.monotonic()

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(router)
    return app


def serve(config: ServerConfig) -> None:
    """Blocks until the server stops. A fatal listen error ends the process through SystemExit."""
    logger.setLevel(config.log_level.upper())
    logger.info(f"Starting Conscript {config.app_version} on {config.host}:{config.port}")
    try:
        uvicorn.run(
            create_app(config),
            host=config.host,
            port=config.port,
            log_level=config.log_level,
            timeout_graceful_shutdown=config.graceful_timeout,
        )
    except SystemExit as e:
        # uvicorn exits on its own when it cannot bind or start.
        logger.error(f"Error listening on {config.host}:{config.port}; server exited with status {e.code}")
        raise
    logger.info("Server closed")
