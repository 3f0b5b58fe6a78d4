"""Configuration management using pydantic-settings.

``get_app_config()`` is cached: the first call reads every source and the
result is shared by every decorator built afterwards.
``get_app_config.cache_clear()`` forces the next call to re-read.

Priority order (highest first):

1. YAML file named by the ``FNGUARD_CONFIG_FILE`` env var (optional)
2. Environment variables (``FNGUARD_`` prefix, ``__`` nesting)
3. ``.env`` dotenv file in the working directory
4. Init defaults / field defaults
5. File secrets
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from fnguard.infra.singleton import singleton

from .system import CoalescerConfig, LimiterConfig, LoggingConfig

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CONFIG_FILE_ENV = "FNGUARD_CONFIG_FILE"
DOTENV_FILE_PATH = Path(".env")
ENV_DELIMITER = "__"
ENV_PREFIX = "FNGUARD_"

DEFAULT_ENCODING = "utf-8"


def _config_file() -> Optional[Path]:
    raw = os.environ.get(CONFIG_FILE_ENV)
    return Path(raw) if raw else None


# ---------------------------------------------------------------------------
# Application config
# ---------------------------------------------------------------------------


class AppConfig(BaseSettings):
    """Library configuration."""

    model_config = SettingsConfigDict(
        env_file=DOTENV_FILE_PATH,
        env_file_encoding=DEFAULT_ENCODING,
        env_nested_delimiter=ENV_DELIMITER,
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging bootstrap settings",
    )

    limiter: LimiterConfig = Field(
        default_factory=LimiterConfig,
        description="Concurrency limiter defaults",
    )

    coalescer: CoalescerConfig = Field(
        default_factory=CoalescerConfig,
        description="Request coalescer defaults",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = []

        # 1. Optional YAML override
        config_file = _config_file()
        if config_file is not None and config_file.is_file():
            sources.append(
                YamlConfigSettingsSource(
                    settings_cls,
                    yaml_file=config_file,
                    yaml_file_encoding=DEFAULT_ENCODING,
                )
            )

        # 2-3. Env vars and dotenv
        sources.append(env_settings)
        sources.append(dotenv_settings)

        # 4-5. Init defaults and file secrets
        sources.append(init_settings)
        sources.append(file_secret_settings)

        return tuple(sources)


@singleton
def get_app_config() -> AppConfig:
    """Return the process-wide ``AppConfig``, building it on first use."""
    return AppConfig()
