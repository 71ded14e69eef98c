"""Main FastAPI application entry point."""

from pathlib import Path

from dotenv import load_dotenv

from jinja_view_driver.config import get_settings
from jinja_view_driver.core.app_factory import create_app
from jinja_view_driver.logging_config import setup_logging

# Load environment variables from .env file
load_dotenv(Path(__file__).parent.parent / ".env")

settings = get_settings()

# Configure structured logging (JSON to file + console)
setup_logging(settings.log_level)

app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "jinja_view_driver.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )
