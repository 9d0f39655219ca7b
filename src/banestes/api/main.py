"""FastAPI application for the client roster."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from banestes import __version__
from banestes.api.dependencies import close_dependencies
from banestes.api.v1.router import api_router as v1_router
from banestes.core.config import get_settings
from banestes.core.logging import configure_logging, get_logger
from banestes.core.session_store import get_session_store

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown."""
    settings = get_settings()
    logger.info(
        "Starting application",
        environment=settings.environment,
        feeds=sorted(settings.feed_urls),
    )

    yield

    logger.info("Shutting down application")
    purged = get_session_store().purge_expired()
    logger.debug("Expired sessions purged", count=purged)
    close_dependencies()


# Middleware to strip trailing slashes (avoid 307 redirects)
class TrailingSlashMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        # Remove trailing slash from path (except for root "/")
        if request.url.path != "/" and request.url.path.endswith("/"):
            request.scope["path"] = request.url.path.rstrip("/")
        return await call_next(request)


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()

    app = FastAPI(
        title="Banestes Clientes API",
        description="Lista de clientes, contas e agências a partir das planilhas do banco",
        version=__version__,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        redirect_slashes=False,
    )

    app.add_middleware(TrailingSlashMiddleware)

    # Configure CORS - MUST be added last to be processed first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v1_router, prefix="/api/v1")

    @app.get("/health")
    def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
