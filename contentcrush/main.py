"""Content Crush FastAPI backend: main application entry point."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from contentcrush import config
from contentcrush.routers.project_status import project_status_router, status_model_router
from contentcrush.workflow import get_registry
from contentcrush.observability import initialize as initialize_observability, shutdown as shutdown_observability

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("contentcrush")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    logger.info("Content Crush backend starting up")
    initialize_observability(app)

    # Load the status model once; a broken file must stop startup.
    registry = get_registry()
    app.state.status_model_version = registry.version

    yield

    logger.info("Content Crush backend shutting down")
    shutdown_observability(app)


app = FastAPI(
    title="Content Crush API",
    description="Backend API for the Content Crush production dashboard",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS: allow the Vite dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        config.FRONTEND_ORIGIN,
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(status_model_router)
app.include_router(project_status_router)


@app.get("/api/health")
def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "statusModel": get_registry().version,
    }
