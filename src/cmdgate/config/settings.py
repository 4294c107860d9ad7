"""Runtime settings for cmdgate.

Settings come from defaults, a ``.env`` file and ``CMDGATE_``-prefixed
environment variables; command-line flags are applied on top by the CLI.
The route table itself lives in a separate YAML file (see ``routes.py``).
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_ROUTES_PATH = Path("./config.yml")


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=1307, ge=1, le=65535)


class CallbackConfig(BaseModel):
    timeout: float | None = Field(
        default=30.0, gt=0, description="Seconds to wait on a callback POST, None for no limit"
    )
    user_agent: str = Field(default="cmdgate-callback")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    target: str = Field(
        default="stdout",
        description="'stdout', 'stderr', '' to discard, or a file path",
    )


class Settings(BaseSettings):
    """Root configuration for the cmdgate server.

    Reads ``CMDGATE_*`` environment variables (nested sections use ``__``,
    e.g. ``CMDGATE_SERVER__PORT``) and a ``.env`` file if present.
    """

    model_config = {
        "env_prefix": "CMDGATE_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    routes_file: Path = Field(default=DEFAULT_ROUTES_PATH)

    server: ServerConfig = Field(default_factory=ServerConfig)
    callback: CallbackConfig = Field(default_factory=CallbackConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env + environment variables.

    Keyword arguments take priority over everything else.

    Priority: overrides > env vars > .env file > defaults
    """
    settings = Settings(**overrides)
    logger.debug("Loaded settings: %s", settings.model_dump())
    return settings
