"""
hangout.api.main — FastAPI application entry point
===================================================

Run with::

    uvicorn hangout.api.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from hangout import __version__  # noqa: E402
from hangout.api.deps import get_engine  # noqa: E402
from hangout.api.errors import install_error_handlers  # noqa: E402
from hangout.api.routes.channels import router as channels_router  # noqa: E402
from hangout.api.routes.events import router as events_router  # noqa: E402
from hangout.api.routes.groups import router as groups_router  # noqa: E402
from hangout.api.routes.messages import router as messages_router  # noqa: E402
from hangout.api.routes.notifications import router as notifications_router  # noqa: E402
from hangout.api.routes.reactions import router as reactions_router  # noqa: E402
from hangout.api.routes.splits import router as splits_router  # noqa: E402
from hangout.api.routes.users import router as users_router  # noqa: E402

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — warm the DB engine."""
    engine = get_engine()
    logger.info("Hangout API started — engine ready (%s)", engine.url.database)
    yield
    logger.info("Hangout API shutting down")


app = FastAPI(
    title="Hangout API",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)

# Mount routers
app.include_router(users_router, prefix="/api")
app.include_router(groups_router, prefix="/api")
app.include_router(channels_router, prefix="/api")
app.include_router(messages_router, prefix="/api")
app.include_router(reactions_router, prefix="/api")
app.include_router(splits_router, prefix="/api")
app.include_router(events_router, prefix="/api")
app.include_router(notifications_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
