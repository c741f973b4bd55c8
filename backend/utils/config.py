"""
CacheWarmer Configuration Module.

Centralizes all configuration settings using Pydantic Settings.
Requires Python 3.11+.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

import yaml
from dotenv import load_dotenv
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from utils.errors import ConfigurationError

ENV_FILE_NAME = ".cw.env"
PROJECT_CONFIG_FILE_NAME = ".cw.yaml"

DEFAULT_EXCLUDED_DIRS = (".git", ".github", "node_modules")

# Load the tool's own env file into os.environ at module import time so the
# nested BaseSettings classes can read the values. The project's .env is
# deliberately not loaded: it belongs to the Symfony application.
_env_file = Path.cwd() / ENV_FILE_NAME
if _env_file.exists():
    load_dotenv(_env_file)


def _split_comma_separated(v: Any) -> Any:
    if isinstance(v, str):
        return [item.strip() for item in v.split(",") if item.strip()]
    return v


class SymfonySettings(BaseSettings):
    """Symfony project layout and console settings (Symfony Flex defaults)."""

    model_config = SettingsConfigDict(env_prefix="CW_SYMFONY_")

    console_path: str = Field(default="bin/console", description="Console path relative to the project")
    env: str = Field(default="dev", description="APP_ENV passed to the console")
    debug: bool = Field(default=True, description="APP_DEBUG; --no-debug is passed when false")

    # An empty directory name disables watching that directory
    config_dir: str = Field(default="config")
    src_dir: str = Field(default="src")
    templates_dir: str = Field(default="templates")
    translations_dir: str = Field(default="translations")
    migrations_dir: str = Field(default="migrations")
    vendor_dir: str = Field(default="vendor", min_length=1)

    @property
    def watch_dirs(self) -> list[str]:
        """Project directories to scan, in a stable order."""
        dirs = [
            self.config_dir,
            self.src_dir,
            self.templates_dir,
            self.translations_dir,
            self.migrations_dir,
        ]
        return list(dict.fromkeys(d.strip() for d in dirs if d and d.strip()))


class WatcherSettings(BaseSettings):
    """Polling watcher settings."""

    model_config = SettingsConfigDict(env_prefix="CW_WATCHER_")

    sleep_time_ms: int = Field(default=30, ge=1, le=60_000, description="Pause between two polls")
    exclude_dirs: Annotated[list[str], NoDecode] = Field(
        default=list(DEFAULT_EXCLUDED_DIRS),
        description="Path fragments never watched (substring match)",
    )
    vendor_watch: bool = Field(default=False)
    vendor_list: Annotated[list[str], NoDecode] = Field(
        default=[],
        description="Vendor sub-paths (e.g. acme/widget) watched when vendor_watch is on",
    )
    env_glob: str = Field(default=".env*", description="Top-level files matched in the project root")

    @field_validator("exclude_dirs", "vendor_list", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: str | list[str]) -> list[str]:
        """Parse lists from comma-separated string or list."""
        return _split_comma_separated(v)


class CacheSettings(BaseSettings):
    """What the rebuild action does besides cache:warmup."""

    model_config = SettingsConfigDict(env_prefix="CW_CACHE_")

    clear_cache: bool = Field(default=False, description="Run cache:clear before warming up")
    force_clear_cache: bool = Field(default=False, description="Remove var/cache before warming up")
    pools: Annotated[list[str] | None, NoDecode] = Field(
        default=None,
        description="Cache pools cleared before warming up; None disables pool clearing",
    )

    @field_validator("pools", mode="before")
    @classmethod
    def parse_pools(cls, v: str | list[str] | None) -> list[str] | None:
        """Parse pools from comma-separated string or list."""
        return _split_comma_separated(v)

    @property
    def pools_provided(self) -> bool:
        return self.pools is not None


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="CW_LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="console")  # "json" or "console"

    @field_validator("format")
    @classmethod
    def check_format(cls, v: str) -> str:
        if v not in ("json", "console"):
            raise ValueError("format must be 'json' or 'console'")
        return v


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_prefix="CW_",
        env_file=ENV_FILE_NAME,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="CacheWarmer")
    app_version: str = Field(default="0.1.0")

    # Sub-settings
    symfony: SymfonySettings = Field(default_factory=SymfonySettings)
    watcher: WatcherSettings = Field(default_factory=WatcherSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


_SECTIONS: dict[str, type[BaseSettings]] = {
    "symfony": SymfonySettings,
    "watcher": WatcherSettings,
    "cache": CacheSettings,
    "logging": LoggingSettings,
}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached default settings.

    Defaults overlaid with the environment only; project overrides are
    applied by load_settings().
    """
    return Settings()


def load_project_overrides(config_file: Path) -> dict[str, dict[str, Any]]:
    """
    Read per-section overrides from a project YAML file.

    A missing file means no overrides.

    Args:
        config_file: Path to the YAML file (usually <project>/.cw.yaml)

    Returns:
        Mapping of section name to field overrides

    Raises:
        ConfigurationError: If the file is not valid YAML or has an unexpected shape
    """
    if not config_file.is_file():
        return {}

    try:
        raw = yaml.safe_load(config_file.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse config file {config_file}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {config_file} must contain a mapping")

    unknown = sorted(str(key) for key in raw if key not in _SECTIONS)
    if unknown:
        raise ConfigurationError(
            f"Unknown section(s) in {config_file}: {', '.join(unknown)} "
            f"(expected {', '.join(_SECTIONS)})"
        )

    overrides: dict[str, dict[str, Any]] = {}
    for name, values in raw.items():
        if values is None:
            continue
        if not isinstance(values, dict):
            raise ConfigurationError(f"Section '{name}' in {config_file} must be a mapping")
        overrides[name] = values
    return overrides


def load_settings(config_file: Path | None = None) -> Settings:
    """
    Build settings from defaults, environment and an optional project file.

    Values from the project file win over the environment.

    Raises:
        ConfigurationError: If the project file or a value is invalid
    """
    overrides = load_project_overrides(config_file) if config_file is not None else {}

    try:
        sections = {
            name: section_cls(**overrides.get(name, {}))
            for name, section_cls in _SECTIONS.items()
        }
        return Settings(**sections)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


@dataclass(frozen=True, slots=True)
class WatchConfiguration:
    """
    Immutable settings of one watch run.

    Built once at startup and shared by every component of the engine.
    All paths are absolute.
    """

    project_dir: Path
    watch_dirs: tuple[Path, ...]
    vendor_dir: Path
    exclude_dirs: tuple[str, ...] = DEFAULT_EXCLUDED_DIRS
    vendor_watch: bool = False
    vendor_list: tuple[str, ...] = ()
    poll_interval: float = 0.03
    env_glob: str = ".env*"

    @property
    def vendor_paths(self) -> tuple[Path, ...]:
        """Allow-listed vendor sub-paths, empty unless vendor-watch is on."""
        if not self.vendor_watch:
            return ()
        return tuple(self.vendor_dir / vendor for vendor in self.vendor_list)

    @property
    def scan_roots(self) -> tuple[Path, ...]:
        return self.watch_dirs + self.vendor_paths

    @property
    def excluded_fragments(self) -> tuple[str, ...]:
        """Exclusion fragments, with the vendor tree added when it is not watched."""
        if self.vendor_watch or "vendor" in self.exclude_dirs:
            return self.exclude_dirs
        return self.exclude_dirs + ("vendor",)

    @classmethod
    def from_settings(cls, settings: Settings, project_dir: Path) -> "WatchConfiguration":
        """Resolve settings against a project directory."""
        project_dir = project_dir.absolute()
        vendor_list = tuple(
            vendor.strip().strip("/")
            for vendor in settings.watcher.vendor_list
            if vendor.strip().strip("/")
        )
        return cls(
            project_dir=project_dir,
            watch_dirs=tuple(project_dir / d for d in settings.symfony.watch_dirs),
            vendor_dir=project_dir / settings.symfony.vendor_dir,
            exclude_dirs=tuple(d for d in settings.watcher.exclude_dirs if d),
            vendor_watch=settings.watcher.vendor_watch,
            vendor_list=vendor_list,
            poll_interval=settings.watcher.sleep_time_ms / 1000.0,
            env_glob=settings.watcher.env_glob,
        )
