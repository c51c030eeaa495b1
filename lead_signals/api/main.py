"""
FastAPI Application

Main entry point for the lead signals API.
Handles application lifecycle and router mounting.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from loguru import logger

from lead_signals import __version__
from lead_signals.config import settings
from lead_signals.core.pipeline import SignalPipeline
from lead_signals.core.rules import get_rule_table
from lead_signals.repositories import db_manager
from lead_signals.utils.observability import configure_logging
from lead_signals.api.routes import health_router, messages_router, analytics_router, metrics_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle: startup and shutdown events.

    Startup:
    - Configure logging and load the signal rule table (fails fast if invalid)
    - Connect to MongoDB and create indexes (mongodb backend)
    - Build the SignalPipeline

    Shutdown:
    - Disconnect from MongoDB
    """
    configure_logging()
    logger.info("Starting Lead Signals API server...")

    rule_table = get_rule_table()

    if settings.storage_backend == "mongodb":
        await db_manager.connect()
        await db_manager.create_indexes()
        pipeline = SignalPipeline.for_mongodb(db_manager.database, settings=settings)
    else:
        logger.warning("Using in-memory storage - events and throttle state are lost on restart")
        pipeline = SignalPipeline.in_memory(settings=settings, rule_table=rule_table)

    app.state.pipeline = pipeline

    logger.info("API server ready to process messages")

    yield

    logger.info("Shutting down API server...")
    if settings.storage_backend == "mongodb":
        await db_manager.disconnect()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Lead Signals API",
    description="Behavioral signal extraction, lead scoring and hot lead alerts",
    version=__version__,
    lifespan=lifespan
)

# Mount routers
app.include_router(health_router)
app.include_router(messages_router)
app.include_router(analytics_router)
app.include_router(metrics_router)
