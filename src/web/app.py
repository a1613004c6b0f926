"""
FastAPI application factory for Presence Monitor.

Routes:
- /api/health          -> liveness + uptime
- /api/status          -> camera freshness, fps, subject count, publish stats
- /api/subjects        -> current tracked subjects
- /api/reports/latest  -> last report handed to the transport
- /api/config          -> effective configuration
"""

from __future__ import annotations

import logging
import threading

import uvicorn
from fastapi import FastAPI

from .routes import api


def create_app() -> FastAPI:
    """Create the FastAPI app and wire routes."""
    app = FastAPI(
        title="Presence Monitor",
        version="0.1.0",
        description="People presence tracking with change-gated reports",
    )
    app.include_router(api.router, prefix="/api")
    return app


def start_web_thread(host: str, port: int) -> threading.Thread:
    """Serve the API from a daemon thread."""
    def run_web_app():
        uvicorn.run(
            create_app(),
            host=host,
            port=port,
            log_level="warning",
        )

    web_thread = threading.Thread(target=run_web_app, name="web", daemon=True)
    web_thread.start()
    logging.info(f"Web interface started on {host}:{port}")
    return web_thread
