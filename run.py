"""Entry point for the Digital Bank API.

Starts the FastAPI application with Uvicorn.  Host and port are read
from the environment variables ``API_HOST`` and ``API_PORT``
(defaults ``0.0.0.0`` and ``8000``).

Usage:
    python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server

from digital_bank_api.app.main import app


async def main() -> None:
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    # Logging is configured by the application; see core.logging_config.
    config = Config(app=app, host=host, port=port, reload=False, log_config=None)
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logging.getLogger(__name__).info("Server stopped")
