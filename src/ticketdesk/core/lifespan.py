"""
Application lifespan manager.

Handles startup and shutdown of logging and the database engine.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings
from .database import close_db, init_db
from .logging_config import LogConfig, setup_logging, stop_queue_listener


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    setup_logging(LogConfig(**settings.logging.log_config))
    logger = logging.getLogger("main")

    logger.info(f"🚀 Starting {settings.api.app_name} API...")
    logger.info(f"🔒 CORS Allowed Origins: {settings.cors.origins}")

    await init_db()
    logger.info("✅ Database initialized")

    yield

    logger.info(f"🛑 Shutting down {settings.api.app_name} API...")
    await close_db()
    stop_queue_listener()
