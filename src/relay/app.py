#!/usr/bin/env python3
"""Monday progress relay -- FastAPI app receiving monday automation triggers.

Run with:
    python3 -m src.relay.app
or:
    python3 -m uvicorn src.relay.app:app --host 0.0.0.0 --port 8033
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from src.common.config import REPO_DIR, load_config, load_env_local, setup_logging
from src.relay.routes import CONFIG_PATH, router

logger = logging.getLogger("relay.app")


def create_app(
    static_dir: Path | None = None,
    upstream_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the relay app; ``static_dir`` is served at ``/`` when it exists.

    ``upstream_transport`` replaces the network for monday API and webhook calls.
    """
    app = FastAPI(title="Monday Progress Relay", version="1.0.0")
    app.state.upstream_transport = upstream_transport

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    # Mounted last so /api routes win.
    if static_dir is not None and static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="client")
    elif static_dir is not None:
        logger.info("Static client dir %s not found, not serving /", static_dir)

    return app


def _static_dir() -> Path:
    load_env_local()
    cfg = load_config(CONFIG_PATH)
    path = Path(cfg.get("static_dir") or "client")
    return path if path.is_absolute() else REPO_DIR / path


app = create_app(_static_dir())


if __name__ == "__main__":
    import uvicorn

    cfg = load_config(CONFIG_PATH)
    setup_logging(cfg)
    logger.info("Backend running on http://localhost:%d", cfg["server"]["port"])
    uvicorn.run(
        "src.relay.app:app",
        host=cfg["server"]["host"],
        port=cfg["server"]["port"],
        reload=False,
        log_level="info",
    )
