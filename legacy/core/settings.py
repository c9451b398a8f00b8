"""Application settings with Pydantic validation."""

from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from legacy.constants import Multipart, Properties, Resources


class AppSettings(BaseSettings):
    """Process-wide settings read from the environment (``APP_*``) and ``.env``."""

    env: str = Field(
        default="production",
        validation_alias=AliasChoices("APP_ENV", "ENV"),
        description="Environment (production, staging, development, testing)",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Write JSON log files under logs/")

    database_properties: Path = Field(
        default=Path(Properties.FILE_NAME),
        description="Properties file holding db.driver, db.url, db.username, db.password",
    )
    upload_dir: Path = Field(
        default=Path(Multipart.UPLOAD_DIR), description="Upload staging directory"
    )
    static_dir: Path = Field(
        default=Path(Resources.LOCATION), description="Directory served under /resources"
    )
    templates_dir: Optional[Path] = Field(
        default=None, description="Template root; defaults to the bundled templates"
    )
    servlet_mapping: str = Field(default="/", description="URL prefix of the front controller")

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ["production", "staging", "development", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f'ENV must be one of: {", ".join(allowed)}')
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f'LOG_LEVEL must be one of: {", ".join(allowed)}')
        return v_upper

    @field_validator("servlet_mapping")
    @classmethod
    def validate_servlet_mapping(cls, v: str) -> str:
        """The mapping is an absolute URL prefix."""
        if not v.startswith("/"):
            raise ValueError("servlet_mapping must start with '/'")
        return v

    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env == "development"


# Singleton instance
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """
    Get application settings singleton.

    Raises:
        ValidationError: If settings are invalid
    """
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
