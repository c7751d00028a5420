"""Main application entry point."""

import logging

import uvicorn
from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from membership.config import settings  # noqa: E402
from membership.services.logging import setup_server_logging  # noqa: E402

logger = logging.getLogger(__name__)


def main() -> None:
    """Configure logging and serve the API with uvicorn."""
    setup_server_logging(settings.log_file)
    logger.info(f"Starting Uvicorn server on {settings.host}:{settings.port}...")
    uvicorn.run(
        "membership.api.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
