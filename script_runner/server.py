import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import __version__
from .browser.api import router as script_router
from .browser.executor import ScriptExecutor
from .browser.provider import BrowserSessionProvider
from .config import ServiceConfig
from .logging_config import get_logger

logger = get_logger("script_runner.server")


def create_app(
    config: Optional[ServiceConfig] = None,
    provider: Optional[BrowserSessionProvider] = None,
    executor: Optional[ScriptExecutor] = None,
) -> FastAPI:
    """Build the FastAPI application around one provider and executor."""
    config = config or ServiceConfig.from_env()
    provider = provider or BrowserSessionProvider(config)
    executor = executor or ScriptExecutor(timeout=config.script_timeout)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info_with("Script runner started", **config.to_dict())
        yield
        await provider.shutdown()
        logger.info("Browser provider shut down")

    app = FastAPI(title="Script Runner", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.provider = provider
    app.state.executor = executor

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Attach an X-Request-ID to every request and response."""
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = rid
        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error_with(
            f"Unexpected server error: {exc}",
            exc_info=True,
            request_id=getattr(request.state, "request_id", None),
        )
        return JSONResponse(status_code=500, content={"error": f"Internal server error: {exc}"})

    app.include_router(script_router)

    @app.get("/health")
    async def health_check():
        return {
            "status": "ok",
            "version": __version__,
            "mode": config.mode,
            "cdp_endpoint": None if config.use_local_playwright else config.cdp_endpoint_url,
            "script_timeout": config.script_timeout,
        }

    return app


def run_server(config: Optional[ServiceConfig] = None):
    """
    Run the Script Runner server.

    Args:
        config: Service configuration. Read from the environment when omitted.
    """
    import uvicorn

    config = config or ServiceConfig.from_env()

    if config.host == "0.0.0.0":
        logger.warning(
            "Server is binding to 0.0.0.0. Submitted scripts run unrestricted "
            "against the browser and this process; only expose it to trusted callers."
        )

    uvicorn.run(create_app(config), host=config.host, port=config.port, log_config=None)
