"""Centralized configuration using Pydantic Settings.

Configuration can be overridden via environment variables:
- TFC_DATA_DIR=/path/to/data
- TFC_DATA_FORMAT=text
- TFC_BUILD_MAX_WORKERS=4
- TFC_FARE_DEFAULT_POLICY=sjt
- TFC_LOG_LEVEL=DEBUG
- etc.
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DirectoryConfig(BaseSettings):
    """Fare data location and format.

    Environment variables prefixed with TFC_DATA_.
    """

    model_config = SettingsConfigDict(env_prefix="TFC_DATA_")

    dir: Path = Field(
        default_factory=lambda: Path(__file__).resolve().parent.parent / "data"
    )
    format: Literal["json", "text"] = "json"
    directory_file: str = "directory.json"
    transfers_file: str = "transfers.txt"
    line_files: List[str] = Field(default_factory=lambda: ["GL.txt", "PL.txt", "YL.txt"])

    @property
    def directory_path(self) -> Path:
        """Full path to the JSON directory file."""
        return self.dir / self.directory_file

    @property
    def transfers_path(self) -> Path:
        """Full path to the plain-text transfers file."""
        return self.dir / self.transfers_file

    @property
    def line_paths(self) -> List[Path]:
        """Full paths to the plain-text line matrices."""
        return [self.dir / name for name in self.line_files]


class BuildConfig(BaseSettings):
    """Graph construction settings.

    Environment variables prefixed with TFC_BUILD_.
    """

    model_config = SettingsConfigDict(env_prefix="TFC_BUILD_")

    max_workers: int = Field(default=1, ge=1)


class FareConfig(BaseSettings):
    """Fare presentation settings.

    Environment variables prefixed with TFC_FARE_.
    """

    model_config = SettingsConfigDict(env_prefix="TFC_FARE_")

    default_policy: Literal["svc", "sjt"] = "svc"
    discount_rate: Decimal = Decimal("0.5")
    currency_symbol: str = "₱"

    @field_validator("discount_rate")
    @classmethod
    def _rate_in_range(cls, value: Decimal) -> Decimal:
        if not Decimal(0) <= value <= Decimal(1):
            raise ValueError("discount_rate must be between 0 and 1")
        return value


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Environment variables prefixed with TFC_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="TFC_LOG_")

    level: str = "WARNING"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = False  # Set True for JSON logging


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

        config = get_config()
        print(config.directory.directory_path)
        print(config.fare.discount_rate)

    Environment variables prefixed with TFC_.
    """

    model_config = SettingsConfigDict(env_prefix="TFC_")

    directory: DirectoryConfig = Field(default_factory=DirectoryConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    fare: FareConfig = Field(default_factory=FareConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache.

    Call this in tests to ensure a fresh configuration is loaded.
    """
    get_config.cache_clear()
