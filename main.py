"""
Wedding Guest Directory - admin surface
Main application entry point
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from guest_directory.core.config import settings
from guest_directory.core.errors import DirectoryError
from guest_directory.services.directory import GuestDirectory
from guest_directory.api import routes_admin, routes_identity
from guest_directory.utils.responses import directory_error_response

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

def create_app(directory: Optional[GuestDirectory] = None) -> FastAPI:
    """Build the admin app around a guest directory client"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan management"""
        logger.info(f"Guest directory using API at {settings.API_BASE_URL}")
        yield
        await app.state.directory.aclose()
        logger.info("Application shutdown")

    app = FastAPI(
        title="Wedding Guest Directory",
        description="Guest list administration over the remote guest API",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.directory = directory or GuestDirectory.build()

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DirectoryError)
    async def handle_directory_error(request: Request, exc: DirectoryError):
        return directory_error_response(exc)

    # Include routers
    app.include_router(routes_identity.router, prefix="/identity", tags=["identity"])
    app.include_router(routes_admin.router, prefix="/admin", tags=["admin"])

    return app

app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True
    )
