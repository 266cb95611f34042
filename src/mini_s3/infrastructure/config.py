"""Configuration management for mini-s3 using Pydantic Settings."""

from __future__ import annotations

import hashlib
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, EnvSettingsSource, SettingsConfigDict

DEFAULT_CONFIG_FILE = Path.home() / ".mini-s3.yaml"

DEFAULT_CONFIG_TEMPLATE = """# mini-s3 configuration
data-dir: ./data
"""

# Flat YAML keys -> (section, field)
_YAML_KEYS: dict[str, tuple[str, str]] = {
    "data-dir": ("storage", "data_dir"),
    "chunk-size": ("storage", "chunk_size"),
    "pipe-depth": ("storage", "pipe_depth"),
    "checksum-algorithm": ("storage", "checksum_algorithm"),
    "log-level": ("observability", "log_level"),
    "log-format": ("observability", "log_format"),
}


class ConfigError(Exception):
    """Raised when a configuration file cannot be loaded."""

    pass


class StorageConfig(BaseSettings):
    """Storage backend configuration."""

    model_config = SettingsConfigDict(env_prefix="MINI_S3_STORAGE_")

    data_dir: str = "./data"
    chunk_size: int = Field(default=64 * 1024, ge=1, description="Copy/read size in bytes")
    pipe_depth: int = Field(
        default=16,
        ge=1,
        description="Chunks buffered between the copy loop and the digest task",
    )
    checksum_algorithm: str = "sha256"
    sync_writes: bool = True
    dir_mode: int = 0o755

    @field_validator("checksum_algorithm")
    @classmethod
    def check_algorithm(cls, v: str) -> str:
        """Reject hash names hashlib cannot construct."""
        name = v.lower()
        if name not in hashlib.algorithms_available:
            raise ValueError(f"unsupported checksum algorithm: {v}")
        return name


class ObservabilityConfig(BaseSettings):
    """Observability configuration."""

    model_config = SettingsConfigDict(env_prefix="MINI_S3_OBSERVABILITY_")

    log_level: str = "warning"
    log_format: Literal["json", "console"] = "console"
    enable_tracing: bool = False
    otlp_endpoint: str = ""
    environment: str = "development"


class Config(BaseSettings):
    """Root configuration for mini-s3."""

    model_config = SettingsConfigDict(
        env_prefix="MINI_S3_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config()


def bootstrap_config_file(path: Path) -> None:
    """Write the default config file if none exists.

    Failure to write is not fatal; the caller falls back to defaults.
    """
    if path.exists():
        return
    try:
        path.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    except OSError:
        return


def read_config_file(path: Path) -> dict[str, dict[str, Any]]:
    """Read a YAML config file into per-section overrides.

    Args:
        path: YAML file with flat keys such as ``data-dir``.

    Returns:
        Mapping of section name to field overrides.

    Raises:
        ConfigError: If the file cannot be read or is not a mapping.
    """
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"config file {path} must contain a mapping")

    sections: dict[str, dict[str, Any]] = {}
    for name, value in raw.items():
        target = _YAML_KEYS.get(name)
        if target is None:
            continue
        section, field_name = target
        sections.setdefault(section, {})[field_name] = value
    return sections


def _without_environment(
    settings_cls: type[BaseSettings], overrides: dict[str, Any]
) -> dict[str, Any]:
    """Drop file values for fields the environment already sets."""
    from_env = EnvSettingsSource(settings_cls)()
    return {name: value for name, value in overrides.items() if name not in from_env}


def load_config(
    config_file: str | Path | None = None,
    data_dir: str | None = None,
) -> Config:
    """Build configuration from CLI flags, environment, config file and defaults.

    Precedence is CLI flag > environment > config file > defaults. Without an
    explicit ``config_file`` the default ``~/.mini-s3.yaml`` is used and created
    on first use; if it cannot be read it is skipped with a warning.

    Args:
        config_file: Explicit YAML config file.
        data_dir: Root directory override from the command line.

    Returns:
        Resolved configuration.

    Raises:
        ConfigError: If an explicit config file is unreadable, or any source
            holds an invalid value.
    """
    ignored: ConfigError | None = None
    if config_file is not None:
        path = Path(config_file)
        if not path.exists():
            raise ConfigError(f"config file not found: {path}")
        sections = read_config_file(path)
    else:
        path = DEFAULT_CONFIG_FILE
        bootstrap_config_file(path)
        try:
            sections = read_config_file(path) if path.exists() else {}
        except ConfigError as exc:
            ignored = exc
            sections = {}

    storage = _without_environment(StorageConfig, sections.get("storage", {}))
    observability = _without_environment(
        ObservabilityConfig, sections.get("observability", {})
    )
    if data_dir:
        storage["data_dir"] = data_dir

    try:
        config = Config(
            storage=StorageConfig(**storage),
            observability=ObservabilityConfig(**observability),
        )
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration in {path}: {exc}") from exc

    if ignored is not None:
        # Imported here: the logging module depends on this one.
        from mini_s3.infrastructure.logging import setup_logging

        setup_logging(config).warning("config_file_ignored", path=str(path), error=str(ignored))

    return config
