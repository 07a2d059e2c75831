"""
VersionVault Server - Main FastAPI Application

This module contains the main FastAPI application for the VersionVault server.
It exposes REST API endpoints for uploading files into (userId, category)
namespaces and retrieving their versions.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from config import get_settings
from file_storage import VersionStore
from logging_config import ConfigureLogging

logger = logging.getLogger(__name__)

# Import storage module for shared version_store instance
import storage


# ==================== Lifespan Events ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan event handler for startup and shutdown
    Creates the version store and its directories before serving requests
    """
    settings = get_settings()
    ConfigureLogging(settings.log_dir, settings.log_level)

    # Startup
    logger.info("VersionVault Server starting up...")

    storage.version_store = VersionStore(
        storage_root=settings.storage_root,
        allow_empty_uploads=settings.allow_empty_uploads,
        chunk_size=settings.chunk_size
    )
    storage.version_store.InitializeStorage()
    logger.info("File storage initialized successfully")

    logger.info("Server startup complete")

    yield

    # Shutdown
    logger.info("VersionVault Server shutting down...")
    logger.info("Shutdown complete")


# ==================== FastAPI Application ====================

app = FastAPI(
    title="VersionVault Server",
    description="Versioned file storage organized by user and category",
    version="1.0.0",
    lifespan=lifespan
)

# ==================== CORS Middleware ====================

# Allow all origins for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== Import Routers ====================

from routes import status, files


# ==================== Include Routers ====================

app.include_router(status.router)
app.include_router(files.router)


# ==================== Main Entry Point ====================

if __name__ == "__main__":
    """
    Run the server using uvicorn
    """
    settings = get_settings()
    ConfigureLogging(settings.log_dir, settings.log_level)

    logger.info(f"Starting VersionVault Server on http://{settings.host}:{settings.port}")

    uvicorn.run(
        "server:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower()
    )
