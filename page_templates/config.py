import logging
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


class Settings(BaseSettings):
    """Application settings with validation.

    Values come from PAGE_TEMPLATES_* environment variables or the .env file.
    Template patterns are evaluated relative to ``templates_dir``.
    """

    # Template registration
    templates_dir: Path = Field(default=DEFAULT_TEMPLATES_DIR, description="Root directory of the template tree")
    layout: str | None = Field(default="layout.html", description="Layout file shared by all pages")
    includes: str | None = Field(default="includes/*.html", description="Glob of include fragments")
    pages: list[str] = Field(default=["pages/*.html"], description="Globs of page templates")
    fragments: list[str] = Field(default=[], description="Globs of standalone templates without layout")

    # Template engine
    autoescape: bool = Field(default=True, description="Escape expression output in HTML templates")
    strict_undefined: bool = Field(default=True, description="Fail rendering on undefined variables")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_file: Path | None = Field(default=None, description="JSON log file, console only when unset")
    log_json: bool = Field(default=False, description="Write console logs as JSON")

    # Server
    api_host: str = Field(default="127.0.0.1", min_length=1, description="Server host")
    api_port: int = Field(ge=1, le=65535, default=8000, description="Server port")

    model_config = SettingsConfigDict(
        env_prefix="PAGE_TEMPLATES_",
        env_file=Path(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    @field_validator("layout", "includes", mode="after")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat blank layout or includes as not configured."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("pages", mode="after")
    @classmethod
    def validate_pages(cls, v: list[str]) -> list[str]:
        """Ensure at least one page pattern is configured."""
        patterns = [p.strip() for p in v if p.strip()]
        if not patterns:
            raise ValueError("pages must contain at least one glob pattern")
        return patterns

    @model_validator(mode="after")
    def validate_includes_need_layout(self) -> "Settings":
        """Ensure includes are only configured together with a layout."""
        if self.includes and not self.layout:
            raise ValueError("includes require a layout")
        return self

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log_level names a standard logging level."""
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"log_level must be a logging level name, got {v!r}")
        return level


# Singleton settings instance (cached for performance)
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get singleton Settings instance for dependency injection.

    Returns:
        Cached Settings instance
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
