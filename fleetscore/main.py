"""
FastAPI application factory
"""
import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from fleetscore.config import get_settings
from fleetscore.infrastructure.db.session import check_db_connection
from fleetscore.api.v1 import operatives, fleet

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start background jobs when enabled"""
    enabled = get_settings().SCHEDULER_ENABLED
    if enabled:
        from fleetscore.application.scheduler import start_scheduler
        start_scheduler()
    yield
    if enabled:
        from fleetscore.application.scheduler import shutdown_scheduler
        shutdown_scheduler()


def create_app() -> FastAPI:
    """
    Application factory - creates and configures the FastAPI app

    Returns:
        Configured FastAPI app
    """
    settings = get_settings()

    app = FastAPI(
        title="Fleet Performance Scoring",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    # Error-logging middleware: catches ALL exceptions including sync routes
    from starlette.middleware.base import BaseHTTPMiddleware
    from starlette.responses import Response

    class ErrorLoggingMiddleware(BaseHTTPMiddleware):
        async def dispatch(self, request, call_next):
            try:
                response = await call_next(request)
                return response
            except Exception as exc:
                tb_str = traceback.format_exc()
                logger.error(f"\n{'='*60}\nERROR on {request.method} {request.url.path}\n{tb_str}{'='*60}")
                return Response(content=f"Internal Server Error: {exc}", status_code=500)

    app.add_middleware(ErrorLoggingMiddleware)

    # Record store unreachable: report, don't crash the worker
    @app.exception_handler(SQLAlchemyError)
    async def record_store_error(request: Request, exc: SQLAlchemyError):
        logger.error("Record store read failed on %s %s", request.method, request.url.path, exc_info=exc)
        return PlainTextResponse("Record store unavailable", status_code=503)

    # Routers
    app.include_router(operatives.router)
    app.include_router(fleet.router)

    # Health checks
    @app.get("/health", response_class=PlainTextResponse, tags=["system"])
    def health():
        """Health check endpoint"""
        return "ok"

    @app.get("/ready", response_class=PlainTextResponse, tags=["system"])
    def ready():
        """Readiness check endpoint (checks the record store is reachable)"""
        check_db_connection()
        return "ok"

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "fleetscore.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
