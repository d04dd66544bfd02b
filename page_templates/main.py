"""Main FastAPI application entry point."""

from pathlib import Path

from dotenv import load_dotenv

from page_templates.config import get_settings
from page_templates.core.app_factory import create_app
from page_templates.logging_config import setup_logging

# Load environment variables from .env file
load_dotenv(Path(__file__).parent.parent / ".env")

settings = get_settings()
setup_logging(settings.log_level, settings.log_file, json_console=settings.log_json)

app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "page_templates.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )
