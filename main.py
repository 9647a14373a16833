"""
Entry point for the eBay to FreeAgent sync service.

Loads `.env`, validates settings and serves the FastAPI app with uvicorn.
"""
import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent

# Settings are read on first use, so the environment must be populated first
load_dotenv(PROJECT_ROOT / ".env")

from core.config import Settings, get_settings  # noqa: E402
from core.exceptions import ConfigurationError  # noqa: E402
from core.logger import setup_logger  # noqa: E402

logger = setup_logger(__name__)


def log_startup(settings: Settings) -> None:
    """Summarize the effective configuration."""
    logger.info(f"Starting {settings.app_name}")
    logger.info(f"Backend API: {settings.api_base_url}")
    logger.info(f"Request timeout: {settings.request_timeout}s")
    logger.info(f"Max date range: {settings.max_date_range_days} days")
    logger.info(f"Export directory: {settings.export_path}")

    if not settings.api_token:
        logger.warning(
            "API_TOKEN is not set; processing and CSV export work, "
            "eBay fetch and FreeAgent sync will fail"
        )


def main():
    try:
        settings = get_settings()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e.message} {e.details or ''}")
        sys.exit(1)

    log_startup(settings)

    import uvicorn
    from app.api import app

    logger.info(f"Listening on {settings.host}:{settings.port}")
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
