"""
OpenTelemetry instrumentation for FastAPI and PyMongo

Creates spans for inbound requests and database calls; exporting them is left to
whatever collector the deployment configures.
"""

from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.pymongo import PymongoInstrumentor

from app.core.config import config
from app.core.logger import logger


def instrument_app(app) -> bool:
    """
    Instrument the application when TRACING_ENABLED is set.

    Returns True when instrumentation was applied. Failures are logged and the
    service keeps running untraced.
    """
    if not config.tracing_enabled:
        logger.info("OpenTelemetry instrumentation disabled")
        return False

    try:
        FastAPIInstrumentor.instrument_app(app)
        PymongoInstrumentor().instrument()
    except Exception as e:
        logger.error("Failed to instrument application", error=e)
        return False

    logger.info("FastAPI and PyMongo instrumented with OpenTelemetry")
    return True
