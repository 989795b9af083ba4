# snippetsync/main_fastapi.py

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from snippetsync.config import Settings, get_settings
from snippetsync.db.base import Database
from snippetsync.middleware.error_handler import ErrorHandlerMiddleware, setup_exception_handlers
from snippetsync.middleware.rate_limiter import RateLimitMiddleware
from snippetsync.observability.logger import configure_logging
from snippetsync.observability.metrics import metrics_app
from snippetsync.repositories.share_code_repository import ShareCodeRepository
from snippetsync.repositories.snippet_repository import SnippetRepository
from snippetsync.routers.health import router as health_router
from snippetsync.routers.snippets import router as snippets_router
from snippetsync.services.code_generator import CodeGenerator
from snippetsync.services.share_code_service import ShareCodeService
from snippetsync.services.snippet_service import SnippetService
from snippetsync.services.sweeper import ShareCodeSweeper
from snippetsync.utils.clock import SystemClock
from snippetsync.utils.logger import log_info
from snippetsync.utils.telemetry import init_otel, instrument_database


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database, wire services, run the sweeper; undo it all on shutdown."""
    settings: Settings = app.state.settings
    configure_logging(settings)

    database = Database(settings.DB_URL, echo=settings.DB_ECHO)
    if settings.DB_CREATE_TABLES:
        await database.create_all()
    if settings.OTEL_ENABLED:
        instrument_database(database)

    clock = app.state.clock
    share_code_service = ShareCodeService(
        share_codes=ShareCodeRepository(database),
        snippets=SnippetRepository(database),
        generator=app.state.code_generator,
        clock=clock,
    )
    app.state.database = database
    app.state.share_code_service = share_code_service
    app.state.snippet_service = SnippetService(
        repository=SnippetRepository(database),
        share_codes=share_code_service,
        clock=clock,
    )

    sweeper = ShareCodeSweeper(share_code_service, interval_seconds=settings.SWEEP_INTERVAL_SECONDS)
    app.state.sweeper = sweeper
    if settings.SWEEP_ENABLED:
        sweeper.start()

    log_info(f"SnippetSync API started ({database.dialect_name})")
    try:
        yield
    finally:
        await sweeper.stop()
        await database.dispose()
        log_info("SnippetSync API stopped")


def create_app(
    settings: Optional[Settings] = None,
    clock=None,
    code_generator: Optional[CodeGenerator] = None,
) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="SnippetSync API",
        description="Code snippets and temporary share codes for the editor extension",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.clock = clock or SystemClock()
    app.state.code_generator = code_generator or CodeGenerator()

    # Add middleware (order matters: last added = outermost)
    app.add_middleware(
        RateLimitMiddleware,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
    )
    app.add_middleware(ErrorHandlerMiddleware, debug=settings.DEBUG)

    setup_exception_handlers(app)

    app.include_router(health_router)  # Health checks at root level
    app.include_router(snippets_router, prefix="/api")
    app.mount("/metrics", metrics_app())

    if settings.OTEL_ENABLED:
        init_otel(app=app)

    return app


app = create_app()
