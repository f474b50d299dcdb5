"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables (or a ``.env`` file);
CLI options override the values loaded here.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shapeyourcity import __version__


class ConfigError(ValueError):
    """Raised when a base URL, CLI argument, or pattern is unusable."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_file: str = Field(
        default="data.db",
        description="Path of the SQLite database file holding synced markers",
    )

    @field_validator("database_file")
    @classmethod
    def validate_database_file(cls, v: str) -> str:
        if not v.strip():
            msg = "database_file must not be empty"
            raise ValueError(msg)
        return v

    @property
    def database_url(self) -> str:
        """SQLAlchemy async connection string for ``database_file``."""
        return sqlite_url(self.database_file)

    # Remote map
    base_url: str | None = Field(
        default=None,
        description="Map page URL, eg https://www.shapeyourcityhalifax.ca/<project>/maps/<map>",
    )
    http_timeout: float = Field(
        default=5.0,
        description="HTTP request timeout in seconds",
        gt=0,
    )
    user_agent: str = Field(
        default=f"shapeyourcity-sync/{__version__}",
        description="User-Agent header sent to the remote map",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )
    log_json: bool = Field(
        default=False,
        description="Write console log records as JSON lines",
    )


def sqlite_url(database_file: str) -> str:
    """Build an aiosqlite connection string for a database file path."""
    return f"sqlite+aiosqlite:///{database_file}"


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
