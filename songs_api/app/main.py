"""
Main entrypoint for the Songs API.

``create_app`` assembles the FastAPI application: it sets up logging,
stores the settings and the database handle on ``app.state``,
registers the error handlers and includes the API router under
``/api``.  Nothing is created at import time; serve the app through
``run.py`` or with uvicorn's factory mode::

    uvicorn songs_api.app.main:create_app --factory

The database handle is built from the settings unless one is passed
in, which is how the tests substitute an in-memory store.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from .api.router import router as api_router
from .core.config import Settings
from .core.db import MongoDatabase
from .core.errors import register_exception_handlers
from .core.logging_config import setup_logging


def create_app(settings: Optional[Settings] = None, database: Optional[MongoDatabase] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Application settings.  Read from the environment when omitted,
        which raises ``ConfigurationError`` if required variables are
        missing.
    database : Optional[MongoDatabase]
        Data-access handle exposing ``songs`` and ``users`` repositories
        plus ``connect``/``close`` coroutines.  Built from ``settings``
        when omitted.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or Settings.from_env()
    # Initialise logging before anything else so that startup can log.
    setup_logging(settings.log_level)

    database = database or MongoDatabase.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await database.connect()
        try:
            yield
        finally:
            await database.close()

    app = FastAPI(title=settings.project_name, version=settings.api_version, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")
    return app
