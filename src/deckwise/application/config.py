from pathlib import Path
from typing import Any

import pytz
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from deckwise.domain.constants import DAILY_NEW_CARD_LIMIT, RETENTION_WINDOW_DAYS


class AppConfig(BaseSettings):
    """
    Configuration model for deckwise.
    Supports loading from:
    1. Environment variables (DECKWISE_*)
    2. Config file (~/.config/deckwise/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="DECKWISE_",
        extra="ignore",
    )

    # Paths
    data_file: Path = Field(default_factory=lambda: Path.home() / ".config/deckwise/data.yaml")

    # Scheduling
    time_zone: str = "UTC"
    session_limit: int | None = None
    new_card_limit: int | None = DAILY_NEW_CARD_LIMIT
    shuffle: bool = True

    # Statistics
    retention_window_days: int = Field(default=RETENTION_WINDOW_DAYS, ge=1)
    weighted_retention: bool = False

    # Server
    host: str = "127.0.0.1"
    port: int = 8787

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Earlier sources take priority: CLI overrides, then env, then the TOML file
        toml_file = Path.home() / ".config/deckwise/config.toml"
        if toml_file.exists():
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("time_zone")
    @classmethod
    def check_time_zone(cls, v: str) -> str:
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown time zone: {v}")
        return v

    @field_validator("data_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path:
        return Path(v).expanduser()


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/deckwise/config.toml (if exists)
    3. Environment variables (DECKWISE_*)
    4. cli_overrides (passed from Typer, None values dropped)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
