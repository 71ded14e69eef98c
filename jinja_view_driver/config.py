import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from jinja_view_driver.exceptions import ConfigurationException
from jinja_view_driver.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_CAPACITY = 4096
DEFAULT_MIME_TYPE = "application/octet-stream"


class ViewDriverConfig(BaseModel):
    """Immutable per-driver configuration.

    Set once at construction; a driver never changes it while rendering.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mime_type: str | None = Field(default=None, description="Forced output MIME type")
    capacity: int = Field(default=DEFAULT_CAPACITY, ge=1, description="Initial output buffer capacity")

    @field_validator("mime_type", mode="after")
    @classmethod
    def validate_mime_type(cls, v: str | None) -> str | None:
        """Reject blank MIME type overrides."""
        if v is not None and not v.strip():
            raise ValueError("mime_type cannot be blank")
        return v


def build_driver_config(mime_type: str | None = None, capacity: int = DEFAULT_CAPACITY) -> ViewDriverConfig:
    """Build a ViewDriverConfig, translating validation errors.

    Raises:
        ConfigurationException: If capacity < 1 or mime_type is blank
    """
    try:
        return ViewDriverConfig(mime_type=mime_type, capacity=capacity)
    except ValidationError as e:
        raise ConfigurationException(
            f"Invalid view driver configuration: {e.errors()[0]['msg']}",
            details={"mime_type": mime_type, "capacity": capacity},
        ) from e


class Settings(BaseSettings):
    """Application settings with validation.

    Values come from environment variables or the .env file.
    """

    api_host: str = Field(default="127.0.0.1", min_length=1, description="API server host")
    api_port: int = Field(ge=1, le=65535, default=8000, description="API server port")
    log_level: str = Field(default="INFO", description="Root log level")

    # Template sources
    template_dir: Path | None = Field(default=None, description="Filesystem template root (optional)")
    resource_root: str = Field(
        default="jinja_view_driver/templates",
        min_length=1,
        description="Packaged template root: '<package>/<directory>'",
    )
    template_encoding: str = Field(default="utf-8", description="Template file encoding")

    # Rendering
    view_suffixes: list[str] = Field(
        default=[".html", ".txt", ".xml", ".json"],
        description="View name suffixes handled by the drivers",
    )
    mime_type: str | None = Field(default=None, description="Forced output MIME type for every view")
    buffer_capacity: int = Field(default=DEFAULT_CAPACITY, ge=1, description="Initial output buffer capacity")
    default_mime_type: str = Field(default=DEFAULT_MIME_TYPE, min_length=1)
    mime_types: dict[str, str] = Field(
        default_factory=dict,
        description="Extension to MIME type overrides, e.g. {'.tmpl': 'text/plain'}",
    )

    model_config = SettingsConfigDict(
        env_file=Path(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log_level names a standard level."""
        v = v.strip().upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"log_level must be a standard logging level, got {v!r}")
        return v

    @field_validator("template_dir", mode="after")
    @classmethod
    def validate_template_dir(cls, v: Path | None) -> Path | None:
        """Ensure template_dir, when given, is an existing directory."""
        if v is not None and not v.is_dir():
            raise ValueError(f"template_dir {v} is not a directory")
        return v

    @field_validator("mime_types", mode="before")
    @classmethod
    def parse_mime_types(cls, v):
        """Accept a JSON object string for mime_types."""
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except json.JSONDecodeError as e:
                log_with_context(
                    logger,
                    "error",
                    "Invalid JSON in mime_types setting",
                    error=str(e),
                    event_type="config_mime_types_invalid",
                )
                raise ValueError(f"mime_types contains invalid JSON: {e}") from e
        return v

    @field_validator("mime_types", mode="after")
    @classmethod
    def normalize_mime_types(cls, v: dict[str, str]) -> dict[str, str]:
        """Lower-case extensions and make sure they start with a dot."""
        return {(ext if ext.startswith(".") else f".{ext}").lower(): mime for ext, mime in v.items()}

    def driver_config(self) -> ViewDriverConfig:
        """Per-driver configuration derived from these settings."""
        return build_driver_config(mime_type=self.mime_type, capacity=self.buffer_capacity)


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
