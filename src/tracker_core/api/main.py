"""Tracker Core FastAPI application."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import get_settings
from .routers import issues

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("tracker-core")

logger.info("Starting Tracker Core API (header-based tenant context)")

# Create FastAPI app
app = FastAPI(
    title="Tracker Core API",
    description="Multi-tenant issue tracking with role-based access and activity logs",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(issues.router, prefix="/issues")


@app.get("/")
def root():
    """Root endpoint with server info."""
    return {
        "name": "Tracker Core API",
        "version": __version__,
        "authentication": "headers",
        "required_headers": ["x-user-id", "x-org-id", "x-user-role"],
        "docs": "/docs",
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
