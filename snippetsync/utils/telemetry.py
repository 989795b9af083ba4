# snippetsync/utils/telemetry.py
# OpenTelemetry wiring shared by the API process and the arq worker

from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

_provider_installed = False


def init_otel(app=None, database=None, service_name: str = "snippetsync"):
    """Install a console-exporting tracer provider once per process.

    Pass the FastAPI app and/or a Database to instrument them as well.
    """
    global _provider_installed
    if not _provider_installed:
        provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
        trace.set_tracer_provider(provider)
        _provider_installed = True

    if app is not None:
        FastAPIInstrumentor.instrument_app(app)
    if database is not None:
        instrument_database(database)

    return trace.get_tracer(service_name)


def instrument_database(database) -> None:
    """Emit a span per statement on the database's engine."""
    SQLAlchemyInstrumentor().instrument(engine=database.engine.sync_engine)
