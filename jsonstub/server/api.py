"""Module api: FastAPI application factory for the stub server."""
#
# PURPOSE:
# Wires the routers, the request-log middleware and the StubError handler
# around one ApplicationState, and runs the result under uvicorn.
#

from __future__ import annotations

import asyncio
import logging
from http import HTTPStatus
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from jsonstub import __version__
from jsonstub.base.config import StubConfig, get_config, setup_logging
from jsonstub.errors import StubError
from jsonstub.server.routers import config as config_router
from jsonstub.server.routers import content, realtime, stub_api
from jsonstub.server.state import ApplicationState

logger = logging.getLogger(__name__)


def _status_text(status: int) -> str:
    try:
        return f"{status} {HTTPStatus(status).phrase}"
    except ValueError:
        return str(status)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Publishes `REQ <method> <uri>` / `RES <status>` for every logged request."""

    async def dispatch(self, request: Request, call_next):
        hub = request.app.state.stub.log_hub
        path = request.url.path
        # should_log re-reads config files
        enabled = await asyncio.to_thread(hub.should_log, path)

        if enabled:
            uri = f"{path}?{request.url.query}" if request.url.query else path
            logger.info(f"request method={request.method} uri={uri}")
            hub.publish(f"REQ {request.method} {uri}")

        response = await call_next(request)

        if enabled:
            logger.info(f"response status={response.status_code}")
            hub.publish(f"RES {_status_text(response.status_code)}")
        return response


async def stub_error_handler(request: Request, exc: StubError):
    """Convert StubError to a JSON error response."""
    if exc.is_client_error:
        logger.info(f"[API] {exc.code.value}: {exc.message} ({request.url.path})")
    else:
        logger.error(f"[API] {exc.code.value}: {exc.message}", extra={"details": exc.details})
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
        headers={"Cache-Control": "no-store"},
    )


def create_app(config: Optional[StubConfig] = None) -> FastAPI:
    config = config or get_config()

    app = FastAPI(
        title="jsonstub",
        description="Development-time JSON stub server",
        version=__version__,
    )

    state = ApplicationState(config)
    state.init_log_hub()
    app.state.stub = state

    app.add_exception_handler(StubError, stub_error_handler)
    app.add_middleware(RequestLogMiddleware)

    app.include_router(realtime.router)
    app.include_router(config_router.router)
    app.include_router(content.router)
    app.include_router(stub_api.router)

    @app.on_event("startup")
    async def startup_event():
        logger.info(
            f"jsonstub {__version__} serving {config.storage.content_dir} "
            f"(config: {config.storage.config_dir})"
        )
        if config.watch.enabled:
            await state.watcher.start()

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("jsonstub shutting down...")
        await state.watcher.stop()

    return app


def serve(port: Optional[int] = None, host: Optional[str] = None):
    config = get_config()
    setup_logging(config)
    app = create_app(config)
    host = host or config.api_host
    port = port or config.api_port
    logger.info(f"Listening on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    serve()
