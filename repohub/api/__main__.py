"""
repohub.api.__main__ — Entry point for ``python -m repohub.api``
================================================================

Wiring:
1. Load .env (DATABASE_URL, JWT_SECRET).
2. Load config.yaml for the listen port.
3. Serve :data:`repohub.api.main.app` with uvicorn (blocking).

Tables and the badge catalog are prepared by the app's lifespan.

Run with::

    python -m repohub.api
"""

from __future__ import annotations

import logging
import os

import uvicorn
from dotenv import load_dotenv

from repohub.config import load_config

# ---------------------------------------------------------------------------
# Logging (repohub.api.main reuses this; basicConfig only applies once)
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("repohub")


def main() -> None:
    """Serve the Repohub API on the configured port."""

    # 1. Environment variables (secrets).
    load_dotenv()

    # 2. Soft configuration.
    cfg = load_config(os.getenv("REPOHUB_CONFIG", "config.yaml"))

    # 3. Serve.
    logger.info("Starting %s API on port %d…", cfg.community_name, cfg.api_port)
    uvicorn.run(
        "repohub.api.main:app",
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=cfg.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
