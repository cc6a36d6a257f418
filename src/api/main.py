import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.deps import get_rules, get_settings, get_store

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    settings = get_settings()

    # Load rules and the snapshot fixture on startup (fail-fast)
    try:
        rules = get_rules(settings)
    except (FileNotFoundError, ValueError) as e:
        logger.critical("Rules load failed: %s", e)
        sys.exit(1)

    logging.getLogger().setLevel(rules.observability.log_level)
    logger.info("Rules loaded from %s", settings.rules_path)

    try:
        get_store(settings, rules)
    except (FileNotFoundError, ValueError) as e:
        logger.critical("Snapshot fixture load failed: %s", e)
        sys.exit(1)

    yield
    # Shutdown cleanup if needed


app = FastAPI(
    title="Moyo Discovery API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from src.api.routes import entitlements, explore  # noqa: E402

app.include_router(entitlements.router, prefix="/api/posts", tags=["Entitlements"])
app.include_router(explore.router, prefix="/api/explore", tags=["Explore"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
