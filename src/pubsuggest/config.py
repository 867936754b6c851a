"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Constructor arguments
  2. Environment variables  (PUBSUGGEST__SUGGESTIONS__DEBOUNCE_MS=300)
  3. pubsuggest.yaml        (searched in cwd, then the platform config dir)
  4. Hardcoded defaults

The config file is optional; all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_CONFIG_DIR = platformdirs.user_config_dir("pubsuggest")
_CONFIG_FILE_NAME = "pubsuggest.yaml"


def _find_config_file() -> str | None:
    """Return the path of the first pubsuggest.yaml found, or None."""
    candidates = [
        Path(_CONFIG_FILE_NAME),
        Path(_DEFAULT_CONFIG_DIR) / _CONFIG_FILE_NAME,
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class RegistrySettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    base_url: str = "https://pub.dev/api"
    timeout_seconds: float = Field(default=10.0, gt=0)
    max_results: int = Field(default=10, ge=1, le=10)


class PackageManagerSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    executable: str = "flutter"
    manifest_file: str = "pubspec.yaml"
    timeout_seconds: float = Field(default=120.0, gt=0)


class SuggestionSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enable_suggestions: bool = True
    auto_resync_on_manifest_save: bool = True
    debounce_ms: int = Field(default=500, ge=0)
    manifest_save_debounce_ms: int = Field(default=1000, ge=0)
    # Only count import/export lines when checking whether a package is used.
    strict_imports: bool = False

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000

    @property
    def manifest_save_debounce_seconds(self) -> float:
        return self.manifest_save_debounce_ms / 1000


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: PUBSUGGEST__REGISTRY__BASE_URL=...
        env_prefix="PUBSUGGEST__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
        extra="forbid",
    )

    registry: RegistrySettings = RegistrySettings()
    package_manager: PackageManagerSettings = PackageManagerSettings()
    suggestions: SuggestionSettings = SuggestionSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
