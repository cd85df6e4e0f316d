"""
Application lifecycle events
Handles startup and shutdown tasks
"""

from fastapi import FastAPI
import logging
from contextlib import asynccontextmanager

from .database import init_db, close_db
from .logging import setup_logging
from .config import settings

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager
    Handles startup and shutdown events
    """
    engine = getattr(app.state, "engine", None)

    # Startup
    try:
        setup_logging()
        logger.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION}...")

        if app.state.file_store is not None:
            logger.info(f"Using JSON file store in {settings.DATA_DIR}")
        elif engine is not None:
            await init_db(engine)
            logger.info("Database initialized")

        logger.info(f"{settings.APP_NAME} started successfully")

        yield

    finally:
        # Shutdown
        logger.info(f"Shutting down {settings.APP_NAME}...")

        if engine is not None:
            await close_db(engine)
