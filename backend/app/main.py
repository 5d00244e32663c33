"""
backend/app/main.py

FastAPI Entrypoint.

Responsibilities:
- Initialize FastAPI app
- Register the upload router
- Setup middleware (CORS) and logging
- Serve stored uploads and a health check
"""

from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.core.config import settings
from app.core.logger import setup_logger
from app.routes import upload

setup_logger()

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Validated image uploads for the storefront",
    version="0.1.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(upload.router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": f"{settings.PROJECT_NAME} is running"}


# Accepted files are reachable at the fileName returned by the upload route
_mount = settings.UPLOAD_PATH.strip("/")
app.mount(
    f"/{_mount}" if _mount else "/",
    StaticFiles(directory=Path(settings.PUBLIC_DIR) / settings.storage_subpath.strip("/"), check_dir=False),
    name="uploads",
)
