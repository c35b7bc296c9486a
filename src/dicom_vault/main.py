"""DicomVault main entry point."""

import uvicorn

from .config.logging_config import LoggingConfig, get_logger

# Configure logging based on environment
LoggingConfig.configure()

from .app import create_app  # noqa: E402

logger = get_logger(__name__)

# Create the FastAPI application
app = create_app()


def main() -> None:
    """Run the application."""
    settings = app.state.settings
    logger.info(f"Starting {settings.app_name} on {settings.host}:{settings.port}")

    uvicorn.run(
        "dicom_vault.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level="debug" if settings.debug else "info",
        access_log=True,
    )


if __name__ == "__main__":
    main()
