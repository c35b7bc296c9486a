"""DicomVault application factory.

FastAPI application with the chunked upload pipeline, file and inference
routes, the exception handler registry, CORS and security headers.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import SecurityHeadersMiddleware, register_exception_handlers
from .api.routers.health import router as health_router
from .config import Settings, get_settings
from .container import ServiceContainer
from .features.files.routers import router as files_router
from .features.inference.routers import router as inference_router
from .features.uploads.routers import router as upload_router

logger = logging.getLogger(__name__)


def load_environment(project_root: Optional[Path] = None) -> None:
    """Load .env, then .env.local overrides, into the process environment."""
    project_root = project_root or Path.cwd()

    env_file = project_root / ".env"
    if env_file.exists():
        load_dotenv(env_file)
        logger.info(f"Loaded environment variables from {env_file}")

    env_local_file = project_root / ".env.local"
    if env_local_file.exists():
        load_dotenv(env_local_file, override=True)
        logger.info(f"Loaded local environment overrides from {env_local_file}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    container: Optional[ServiceContainer] = getattr(app.state, "container", None)
    if container is None:
        container = ServiceContainer.from_settings(app.state.settings)
        app.state.container = container

    await container.startup()
    try:
        yield
    finally:
        await container.shutdown()


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """Create the DicomVault API.

    Args:
        settings: Settings to use; read from the environment when omitted
        container: Prebuilt services; built during startup when omitted

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        load_environment()
        settings = container.settings if container is not None else get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="DICOM file management API with chunked uploads to remote object storage",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    if container is not None:
        app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        SecurityHeadersMiddleware,
        is_production=settings.is_production,
        server_name=settings.app_name,
        exclude_paths=["/docs", "/redoc"],
    )

    register_exception_handlers(app, is_production=settings.is_production)

    prefix = settings.api_prefix
    app.include_router(health_router, prefix=prefix, tags=["Health"])
    app.include_router(upload_router, prefix=f"{prefix}/upload", tags=["Uploads"])
    app.include_router(files_router, prefix=f"{prefix}/files", tags=["Files"])
    app.include_router(inference_router, prefix=f"{prefix}/inference", tags=["Inference"])

    logger.info(f"Created {settings.app_name} API")
    return app
