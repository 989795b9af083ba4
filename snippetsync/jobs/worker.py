from arq import cron
from arq.connections import RedisSettings
from opentelemetry import trace

from snippetsync.config import get_settings
from snippetsync.db.base import Database
from snippetsync.repositories.share_code_repository import ShareCodeRepository
from snippetsync.repositories.snippet_repository import SnippetRepository
from snippetsync.services.share_code_service import ShareCodeService
from snippetsync.utils.telemetry import init_otel

settings = get_settings()


async def sweep_expired_codes(ctx) -> dict:
    """Periodic cleanup: delete share codes whose window has closed."""
    tracer = trace.get_tracer("worker")
    with tracer.start_as_current_span("sweep_expired_codes"):
        removed = await ctx["share_codes"].sweep_expired()
    return {"removed": removed}


class WorkerSettings:
    functions = [sweep_expired_codes]
    redis_settings = RedisSettings.from_dsn(settings.REDIS_URL)
    cron_jobs = [
        cron(sweep_expired_codes, second=0, run_at_startup=True),
    ]

    @staticmethod
    async def startup(ctx):
        database = Database(settings.DB_URL, echo=settings.DB_ECHO)
        if settings.OTEL_ENABLED:
            init_otel(database=database, service_name="snippetsync-worker")
        ctx["database"] = database
        ctx["share_codes"] = ShareCodeService(
            share_codes=ShareCodeRepository(database),
            snippets=SnippetRepository(database),
        )

    @staticmethod
    async def shutdown(ctx):
        database = ctx.get("database")
        if database is not None:
            await database.dispose()
