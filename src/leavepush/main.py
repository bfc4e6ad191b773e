import sys
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.responses import FileResponse
from starlette.templating import Jinja2Templates

from leavepush.api.router import api_router
from leavepush.config import Settings, get_settings
from leavepush.errors import MissingVapidKeysError, ValidationError
from leavepush.log_setup import setup_logging
from leavepush.notifications.dispatch import NotificationDispatcher
from leavepush.notifications.registry import (
    SubscriptionRegistry,
    seed_default_users,
)
from leavepush.notifications.transport import WebPushTransport
from leavepush.notifications.vapid import VapidCredentials, require_vapid_keys
from leavepush.storage.records import JsonFileStore

logger = structlog.get_logger()

load_dotenv()

PKG_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = PKG_DIR / "templates"
STATIC_DIR = PKG_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def _credentials(settings: Settings) -> VapidCredentials:
    return require_vapid_keys(
        settings.vapid_public_key,
        settings.vapid_private_key,
        settings.vapid_subject,
    )


@asynccontextmanager
async def lifespan(
    app: FastAPI,
) -> AsyncGenerator[None]:
    settings = get_settings()
    setup_logging(settings.log_level, settings.health_log_every)
    logger.info("starting_up", version=settings.app_version)

    # Raises MissingVapidKeysError, aborting startup
    creds = _credentials(settings)

    store = JsonFileStore(settings.data_dir)
    seed_default_users(store)
    registry = SubscriptionRegistry(store)
    transport = WebPushTransport(
        vapid_private_key=creds.private_key,
        vapid_claims=creds.claims,
        timeout_s=settings.push_timeout_s,
        ttl_s=settings.push_ttl_s,
    )
    app.state.vapid_public_key = creds.public_key
    app.state.registry = registry
    app.state.dispatcher = NotificationDispatcher(registry, transport)
    logger.info(
        "push_notifications_enabled",
        data_dir=settings.data_dir,
        vapid_key=creds.public_key[:20],
    )

    yield

    logger.info("shutting_down")


async def _validation_error(request: Request, exc: Exception) -> JSONResponse:
    logger.info("request_rejected", path=request.url.path, error=str(exc))
    if isinstance(exc, RequestValidationError):
        fields = [".".join(str(p) for p in err["loc"][1:]) for err in exc.errors()]
        message = f"Invalid or missing fields: {', '.join(fields)}"
    else:
        message = str(exc)
    return JSONResponse(status_code=400, content={"success": False, "error": message})


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()
    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    application.state.started_at = time.monotonic()
    application.state.icon_path = settings.icon_path
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_exception_handler(ValidationError, _validation_error)
    application.add_exception_handler(RequestValidationError, _validation_error)
    application.include_router(api_router, prefix="/api")
    application.mount(
        "/static",
        StaticFiles(directory=str(STATIC_DIR)),
        name="static",
    )
    return application


app = create_app()


@app.get("/sw.js")
async def service_worker() -> FileResponse:
    """Serve service worker from root scope."""
    return FileResponse(
        STATIC_DIR / "sw.js",
        media_type="application/javascript",
        headers={
            "Cache-Control": "no-cache",
            "Service-Worker-Allowed": "/",
        },
    )


@app.get("/manifest.json")
async def web_manifest() -> FileResponse:
    return FileResponse(
        STATIC_DIR / "manifest.json",
        media_type="application/manifest+json",
    )


@app.get("/")
async def index(request: Request):  # type: ignore[no-untyped-def]
    """Serve the subscribe page."""
    settings = get_settings()
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "app_name": settings.app_name,
            "vapid_public_key": getattr(request.app.state, "vapid_public_key", ""),
        },
    )


def run() -> None:
    """Console entry point. Exits with status 1 without VAPID keys."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.health_log_every)
    try:
        _credentials(settings)
    except MissingVapidKeysError as e:
        logger.error("vapid_keys_missing", error=str(e), hint="run scripts/generate_vapid_keys.py")
        sys.exit(1)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
