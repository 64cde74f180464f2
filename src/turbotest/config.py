"""
Configuration management for TurboTest.

Hybrid configuration system using a YAML file and environment variables.
Priority: Environment variables > .env file > YAML config > Pydantic defaults
"""

from pathlib import Path
from typing import List, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_FILE = "turbo.yaml"


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or validated."""


class Settings(BaseSettings):
    """
    TurboTest configuration schema.

    Loads configuration from:
    1. Environment variables prefixed with ``TURBO_`` (highest priority),
       including those read from the project's ``.env`` file
    2. ``turbo.yaml`` in the project root (or an explicit file)
    3. Pydantic defaults (lowest priority)

    List values given through the environment use JSON syntax, e.g.
    ``TURBO_LINT_COMMAND='["npx", "eslint"]'``.
    """

    model_config = SettingsConfigDict(
        env_prefix="TURBO_",
        case_sensitive=False,
        extra="ignore",
    )

    # Fingerprint cache
    cache_file: str = Field(
        default=".vscode/.turbo-cache.json",
        description="Persisted fingerprint cache, relative to the project root",
    )

    # Lint track
    lint_command: List[str] = Field(
        default_factory=lambda: ["npx", "eslint"],
        description="Lint tool invocation; files are appended",
    )
    lint_fix_flag: str = Field(default="--fix", description="Auto-fix flag")
    lint_extensions: List[str] = Field(
        default_factory=lambda: [".ts", ".html"],
        description="Source and markup extensions that are linted",
    )

    # Test track
    test_command: List[str] = Field(
        default_factory=lambda: ["npx", "ng", "test"],
        description="Test tool invocation",
    )
    test_include_flag: str = Field(
        default="--include",
        description="Inclusion flag, repeated once per spec file",
    )
    test_args: List[str] = Field(
        default_factory=lambda: [
            "--watch=false",
            "--code-coverage",
            "--karma-config=karma-parallel.conf.js",
        ],
        description="Non-watch, coverage and parallel configuration flags",
    )
    spec_suffix: str = Field(default=".spec.ts", description="Test file suffix")
    source_suffix: str = Field(default=".ts", description="Source file suffix")

    # Logging
    log_dir: Optional[str] = Field(default=None, description="Log file directory")
    verbose: int = Field(default=1, ge=0, le=3, description="Verbosity (0-3)")

    @field_validator("lint_command", "test_command")
    @classmethod
    def validate_command(cls, v: List[str]) -> List[str]:
        """Validate that a command has an executable."""
        if not v or not v[0].strip():
            raise ValueError("command must name an executable")
        return v

    @field_validator("spec_suffix", "source_suffix")
    @classmethod
    def validate_suffix(cls, v: str) -> str:
        """Validate file suffix."""
        if not v.startswith("."):
            raise ValueError(f"suffix must start with '.': {v!r}")
        return v

    @field_validator("lint_extensions")
    @classmethod
    def validate_extensions(cls, v: List[str]) -> List[str]:
        """Normalize lint extensions to start with a dot."""
        return [ext if ext.startswith(".") else f".{ext}" for ext in v if ext]


def load_config(
    project_root: Optional[Path] = None,
    config_file: Optional[Union[str, Path]] = None,
) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority: ENV vars > .env > YAML > defaults

    Args:
        project_root: Directory searched for ``turbo.yaml`` (default: cwd)
        config_file: Explicit YAML file; must exist when given

    Returns:
        Settings instance

    Raises:
        ConfigError: If the YAML file is unreadable or values are invalid
    """
    root = Path(project_root) if project_root else Path.cwd()

    # Real environment variables keep precedence over .env values
    env_file_path = root / ".env"
    if env_file_path.exists():
        load_dotenv(env_file_path, override=False)

    if config_file is not None:
        config_path = Path(config_file)
        if not config_path.is_absolute():
            config_path = root / config_path
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
    else:
        config_path = root / DEFAULT_CONFIG_FILE

    yaml_config = {}
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Could not read {config_path}: {e}") from e

        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"{config_path} must contain a mapping")
        yaml_config = loaded or {}

    try:
        # Init kwargs outrank env vars in pydantic-settings, so only pass
        # YAML keys that the environment does not already set.
        env_settings = Settings()
        explicit_env = env_settings.model_fields_set
        overrides = {k: v for k, v in yaml_config.items() if k not in explicit_env}
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


# Global settings singleton (lazy initialization)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or initialize global settings singleton.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def override_settings(new_settings: Settings) -> None:
    """
    Override global settings (for testing).

    Args:
        new_settings: New Settings instance to use
    """
    global _settings
    _settings = new_settings


def reset_settings() -> None:
    """Reset settings to force re-initialization (for testing)."""
    global _settings
    _settings = None
