import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from ros_bridge import __version__
from ros_bridge.api import router as api_router
from ros_bridge.clients.routeros_client import RouterOSSessionManager
from ros_bridge.core.errors import BridgeError
from ros_bridge.core.logging import logger
from ros_bridge.schemas.config import Config
from ros_bridge.services.dispatcher import BridgeDispatcher

OPENAPI_SPEC_PATH = "/spec/openapi.v1.json"
# path served by earlier releases
LEGACY_OPENAPI_SPEC_PATH = "/spec/opeanapi.v1.json"


def create_app(config: Config, sessions: Optional[RouterOSSessionManager] = None) -> FastAPI:
    """
    Build the bridge application from a normalized Config

    Args:
        config: output of load_config() / Config.normalize()
        sessions: device session manager (tests pass a fake one)
    """
    app = FastAPI(
        title="RouterOS REST bridge",
        version=__version__,
        description="Generic REST interface over the RouterOS API.",
    )
    app.state.dispatcher = BridgeDispatcher(config, sessions=sessions)

    cors = config.server.cors
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors.allowed_origins,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type"],
        max_age=cors.max_age,
    )

    @app.middleware("http")
    async def _access_log(request: Request, call_next):
        started = time.monotonic()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(f"method={request.method} path={request.url.path} error={e}")
            raise
        elapsed_ms = (time.monotonic() - started) * 1000
        client = request.client.host if request.client else "-"
        logger.info(
            f"client={client} method={request.method} path={request.url.path} "
            f"status={response.status_code} duration_ms={elapsed_ms:.1f}"
        )
        return response

    @app.exception_handler(BridgeError)
    async def _bridge_error(request: Request, exc: BridgeError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.get(OPENAPI_SPEC_PATH, include_in_schema=False)
    @app.get(LEGACY_OPENAPI_SPEC_PATH, include_in_schema=False)
    async def _openapi_spec():
        return JSONResponse(app.openapi())

    app.include_router(api_router)

    logger.info(
        f"initializing server address={config.server.http_listen_address} "
        f"devices={len(config.devices)} aliases={len(config.aliases)}"
    )
    return app
