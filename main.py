"""
Metaplan -- Application Entry Point.

Starts the FastAPI server via uvicorn.

Usage:
    python main.py              # Development (reload when METAPLAN_DEV_MODE=1)
    uvicorn main:app --host 127.0.0.1 --port 8000
"""

from __future__ import annotations

import os

import uvicorn

from metaplan.api import create_app
from metaplan.lib.logging import setup_logging

setup_logging()
app = create_app()


if __name__ == "__main__":
    port = int(os.getenv("METAPLAN_PORT", "8000"))
    host = os.getenv("METAPLAN_HOST", "127.0.0.1")
    reload = os.getenv("METAPLAN_DEV_MODE", "0") == "1"

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )
