"""Entry point for the Songs API server.

Reads configuration from the environment, builds the application and
serves it with Uvicorn.  ``MONGODB_URI`` and ``JWT_SECRET`` are
required; ``SERVER_HOST`` and ``SERVER_PORT`` default to ``0.0.0.0``
and ``3000``.

Usage:
    python run.py
"""
import logging
import sys

from uvicorn import Config, Server

from songs_api.app.core.config import ConfigurationError, Settings
from songs_api.app.main import create_app


def main() -> None:
    try:
        settings = Settings.from_env()
    except ConfigurationError as exc:
        logging.basicConfig(level=logging.ERROR)
        logging.error("%s. Check your environment before starting the server.", exc)
        sys.exit(1)

    app = create_app(settings)
    config = Config(
        app=app,
        host=settings.server_host,
        port=settings.server_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    Server(config).run()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
