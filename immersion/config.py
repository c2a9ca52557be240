import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by IMMERSION_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        config_file = os.environ.get("IMMERSION_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Server(BaseModel):
    """Server configuration (nested in Config, uses env_nested_delimiter)."""

    name: str = "Immersion Facile conventions"
    version: str = "0.1.0"
    description: str = "Signature and validation workflow for work-immersion conventions"
    host: str = "127.0.0.1"
    port: int = 8000
    api_url: str = "http://localhost:8000/api/v1"


class Frontend(BaseModel):
    """Frontend that serves the pages magic links point to."""

    url: str = "http://localhost:3000"


class DatabaseConfig(BaseModel):
    url: str = "sqlite+aiosqlite:///immersion.db"
    echo: bool = False
    auto_migrate: bool = True  # Auto-migrate for SQLite, manual for PostgreSQL


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from IMMERSION_LOG_FILE env var."""
        return os.environ.get("IMMERSION_LOG_FILE")


class JwtConfig(BaseModel):
    """JWT configuration shared by magic links and connected-user tokens."""

    secret: str = ""  # Must be set in production
    algorithm: str = "HS256"
    connected_user_expire_minutes: int = 60 * 24
    version: int = 1  # Bump to invalidate every previously issued token


class AuthConfig(BaseModel):
    jwt: JwtConfig = JwtConfig()


class MagicLinkConfig(BaseModel):
    """Lifetimes of convention magic links, in days."""

    short_duration_days: int = 7
    long_duration_days: int = 30


class ShortLinkConfig(BaseModel):
    id_length: int = 10
    route: str = "to"


class ReminderConfig(BaseModel):
    """Minimum delay between two manual reminders of the same kind to the same recipient."""

    signature_link_cooldown_hours: int = 24
    assessment_link_cooldown_hours: int = 24


class EventRelayConfig(BaseModel):
    """Delivery of queued domain events to their handlers."""

    enabled: bool = True
    poll_interval_seconds: float = 2.0
    batch_size: int = 50
    max_attempts: int = 3


class Config(BaseSettings):
    server: Server = Server()
    frontend: Frontend = Frontend()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    auth: AuthConfig = AuthConfig()
    magic_link: MagicLinkConfig = MagicLinkConfig()
    short_link: ShortLinkConfig = ShortLinkConfig()
    reminder: ReminderConfig = ReminderConfig()
    events: EventRelayConfig = EventRelayConfig()

    model_config = {
        "env_prefix": "IMMERSION_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows IMMERSION_DATABASE__URL override
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority: init kwargs, env, .env, IMMERSION_CONFIG_FILE yaml, secret files."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Call early in application startup so every module logger picks it up.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(config.level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("alembic").setLevel(logging.INFO)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
