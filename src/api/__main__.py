"""Entry point: `python -m api` serves the MCP endpoint with uvicorn."""

import logging
import os

import uvicorn

from core.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.getenv("MCP_HOST", "0.0.0.0")
    # MCP_PORT for local dev, PORT for PaaS platforms (Railway, Heroku, etc.)
    port = int(os.getenv("MCP_PORT") or os.getenv("PORT") or "8001")

    uvicorn.run(
        "api.main:app",
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )
