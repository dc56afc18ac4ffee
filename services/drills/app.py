"""Drills service FastAPI application.

Exposes the FastAPI app, attaches tracing / security middleware and CORS,
installs the shared error handlers, includes the drill routes, and
initializes the database and the drill list cache on startup.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response

from packages.common.cache import build_cache
from packages.common.config import get_settings
from packages.common.errors import install_error_handlers
from packages.common.logging import configure_logging
from packages.common.metrics import render_latest
from packages.common.tracing import security_headers_middleware, trace_middleware
from .routes import router as drills_router
from .repo import init_db

settings = get_settings()
logger = configure_logging(settings.LOG_LEVEL, service=settings.SERVICE_NAME)

app = FastAPI(title="Interview Drills Service", version="1.0.0")
app.middleware("http")(security_headers_middleware)
app.middleware("http")(trace_middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
)
install_error_handlers(app)
app.include_router(drills_router)
app.state.drills_cache = build_cache(settings)


@app.get("/healthz", tags=["infra"])
def healthz() -> dict[str, str]:
    return {"status": "ok", "env": settings.ENV}


@app.get("/metrics", tags=["infra"])
def metrics() -> Response:
    data, content_type = render_latest()
    return PlainTextResponse(data.decode("utf-8"), media_type=content_type)


@app.on_event("startup")
async def _init() -> None:
    """Initialize service dependencies at application startup."""
    await init_db()
    logger.info("drills service started", extra={"fields": {"env": settings.ENV}})
