"""
repohub.api.main — FastAPI application entry point
===================================================

Run with::

    uvicorn repohub.api.main:app --reload --port 8000

or ``python -m repohub.api`` to serve on ``api_port`` from config.yaml.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from repohub.api.deps import get_config, get_engine  # noqa: E402
from repohub.api.routes.admin import router as admin_router  # noqa: E402
from repohub.api.routes.badges import router as badges_router  # noqa: E402
from repohub.api.routes.content import router as content_router  # noqa: E402
from repohub.api.routes.users import router as users_router  # noqa: E402
from repohub.database.engine import init_db  # noqa: E402
from repohub.errors import (  # noqa: E402
    Conflict,
    Forbidden,
    NotFound,
    PartialSeedError,
    PersistenceError,
    RepohubError,
    ValidationError,
)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

# Most specific first: StoreTimeout is matched through PersistenceError.
_ERROR_STATUS: tuple[tuple[type[RepohubError], int], ...] = (
    (ValidationError, 400),
    (Forbidden, 403),
    (NotFound, 404),
    (Conflict, 409),
    (PartialSeedError, 500),
    (PersistenceError, 503),
)


def _cors_origins() -> list[str]:
    """CORS_ALLOW_ORIGINS (comma-separated) wins over config.yaml."""
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]
    return list(get_config().cors_origins)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle: create tables and seed the catalog."""
    engine = get_engine()
    init_db(engine)
    logger.info("%s API started (%s)", get_config().community_name, engine.url.database)
    yield
    logger.info("API shutting down")


app = FastAPI(
    title="Repohub API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RepohubError)
async def repohub_error_handler(request: Request, exc: RepohubError) -> JSONResponse:
    status_code = next(
        (code for cls, code in _ERROR_STATUS if isinstance(exc, cls)), 500,
    )
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


app.include_router(badges_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(content_router, prefix="/api")
app.include_router(admin_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
