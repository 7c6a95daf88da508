"""Configuration system for workspace-size.

This module implements the configuration schema using Pydantic for
validation, with support for environment variable resolution and fail-fast
validation with actionable error messages.
"""

import os
import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Annotated, Final

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from workspace_size.core.stat_dispatcher import DEFAULT_STAT_CONCURRENCY
from workspace_size.types import Root

# Matches ${VARIABLE_NAME} where VARIABLE_NAME can contain letters, digits, and underscores
ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\{([A-Za-z0-9_]+)\}")

# Configuration file discovery paths in order of precedence
CURRENT_DIR_CONFIG_FILES: Final[tuple[str, ...]] = (
    "workspace-size.yaml",
    "workspace-size.yml",
)
HOME_CONFIG_FILES: Final[tuple[str, ...]] = (
    ".workspace-size.yaml",
    ".workspace-size.yml",
)
SYSTEM_CONFIG_PATHS: Final[tuple[Path, ...]] = (Path("/etc/workspace-size/config.yaml"),)


class ScannerConfig(BaseModel):
    """Configuration for the size scanner."""

    stat_concurrency: Annotated[
        int,
        Field(
            ge=1,
            description="Maximum number of stat operations in flight per directory batch",
        ),
    ] = DEFAULT_STAT_CONCURRENCY


class RefreshConfig(BaseModel):
    """Debounce delays used when recalculation is scheduled."""

    debounce_seconds: Annotated[
        float,
        Field(
            gt=0,
            description="Delay before a scheduled recalculation runs",
        ),
    ] = 0.75
    save_debounce_seconds: Annotated[
        float,
        Field(
            gt=0,
            description="Delay before recalculating after a document save",
        ),
    ] = 1.5


class ApplicationConfig(BaseModel):
    """Application-level settings."""

    log_level: Annotated[
        str,
        Field(
            description="Logging level",
            pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        ),
    ] = "WARNING"


class RootConfig(BaseModel):
    """A configured workspace root."""

    path: Annotated[Path, Field(description="Directory to measure")]
    name: Annotated[
        str | None,
        Field(
            description="Display label (defaults to the directory name)",
        ),
    ] = None

    @field_validator("path", mode="after")
    @classmethod
    def expand_user_home(cls, v: Path) -> Path:
        """Expand a leading ``~`` in root paths.

        Args:
            v: Configured path

        Returns:
            Path with the user's home directory expanded
        """
        return v.expanduser()

    def to_root(self) -> Root:
        return Root.from_path(self.path, name=self.name)


class AppConfig(BaseModel):
    """Top-level configuration schema.

    All sections are optional; an empty file or no file at all yields the
    defaults.
    """

    scanner: Annotated[
        ScannerConfig,
        Field(description="Size scanner configuration"),
    ] = ScannerConfig()
    refresh: Annotated[
        RefreshConfig,
        Field(description="Recalculation debounce configuration"),
    ] = RefreshConfig()
    application: Annotated[
        ApplicationConfig,
        Field(description="Application-level configuration"),
    ] = ApplicationConfig()
    roots: Annotated[
        Sequence[RootConfig],
        Field(description="Default workspace roots"),
    ] = []

    def root_objects(self) -> list[Root]:
        """Convert configured roots to Root values, preserving order."""
        return [root.to_root() for root in self.roots]


class EnvironmentVariableError(Exception):
    """Exception raised when environment variable resolution fails."""


class ConfigurationError(Exception):
    """Exception raised when configuration loading or validation fails.

    Carries detailed, actionable messages for file-not-found, YAML parsing
    and validation failures.
    """


def resolve_env_var(value: str) -> str:
    """Resolve ${VARIABLE_NAME} references in a string value.

    Args:
        value: String potentially containing environment variable references

    Returns:
        String with environment variables resolved

    Raises:
        EnvironmentVariableError: If a referenced environment variable is not set

    Examples:
        >>> os.environ["PROJECTS"] = "/srv/projects"
        >>> resolve_env_var("${PROJECTS}/api")
        '/srv/projects/api'
    """

    def replace_match(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)

        if env_value is None:
            msg = (
                f"Required environment variable '{var_name}' is not set. "
                f"Please set this variable before starting the application."
            )
            raise EnvironmentVariableError(msg)

        return env_value

    return ENV_VAR_PATTERN.sub(replace_match, value)


def resolve_env_vars_in_dict(data: Mapping[str, object]) -> dict[str, object]:
    """Recursively resolve environment variables in a dictionary.

    Traverses nested dictionaries and lists, resolving references in string
    values. Non-string values are preserved as-is.

    Args:
        data: Dictionary potentially containing environment variable references

    Returns:
        New dictionary with environment variables resolved

    Raises:
        EnvironmentVariableError: If a referenced environment variable is not set
    """
    return {key: _resolve_value(value) for key, value in data.items()}


def _resolve_value(value: object) -> object:
    if isinstance(value, str):
        return resolve_env_var(value)
    if isinstance(value, dict):
        # YAML data is untyped at load time; validated by Pydantic after resolution
        return resolve_env_vars_in_dict(value)  # pyright: ignore[reportUnknownArgumentType]  # YAML boundary
    if isinstance(value, list):
        return [_resolve_value(item) for item in value]  # pyright: ignore[reportUnknownVariableType]  # YAML list items
    return value


def discover_config_file() -> Path | None:
    """Discover a configuration file in standard locations.

    Searches, in order of precedence:
    1. Current directory (workspace-size.yaml, workspace-size.yml)
    2. User home directory (~/.workspace-size.yaml, ~/.workspace-size.yml)
    3. System directory (/etc/workspace-size/config.yaml)

    Returns:
        Path to the first configuration file found, or None
    """
    for config_file in CURRENT_DIR_CONFIG_FILES:
        config_path = Path(config_file)
        if config_path.is_file():
            return config_path

    try:
        home_dir = Path.home()
    except (OSError, RuntimeError):
        # Path.home() can fail in some environments
        home_dir = None

    if home_dir is not None:
        for config_file in HOME_CONFIG_FILES:
            config_path = home_dir / config_file
            if config_path.is_file():
                return config_path

    for config_path in SYSTEM_CONFIG_PATHS:
        if config_path.is_file():
            return config_path

    return None


def load_config(config_path: Path) -> AppConfig:
    """Load and validate configuration from a YAML file.

    Args:
        config_path: Path to configuration YAML file

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigurationError: If the file cannot be loaded, references an unset
            environment variable, or fails validation
    """
    if not config_path.exists():
        msg = (
            f"Configuration file not found: {config_path}\n"
            f"Please create a configuration file at this location."
        )
        raise ConfigurationError(msg)

    try:
        with config_path.open("r") as f:
            raw_data: object = yaml.safe_load(f)  # pyright: ignore[reportAny]  # YAML boundary
    except yaml.YAMLError as e:
        msg = (
            f"Failed to parse YAML configuration file: {config_path}\n"
            f"YAML parsing error: {e}\n"
            f"Please check the file for syntax errors."
        )
        raise ConfigurationError(msg) from e
    except OSError as e:
        msg = f"Failed to read configuration file: {config_path}\nError: {e}\nPlease check file permissions."
        raise ConfigurationError(msg) from e

    # An empty file is a valid, all-defaults configuration
    if raw_data is None:
        raw_data = {}

    if not isinstance(raw_data, dict):
        msg = (
            f"Invalid configuration file format: {config_path}\n"
            f"Expected YAML dictionary at root level, got: {type(raw_data).__name__}\n"
            f"Configuration file must contain key-value pairs."
        )
        raise ConfigurationError(msg)

    try:
        resolved_data = resolve_env_vars_in_dict(raw_data)  # pyright: ignore[reportUnknownArgumentType]  # YAML boundary
    except EnvironmentVariableError as e:
        msg = (
            f"Environment variable resolution failed in: {config_path}\n"
            f"{e}\n"
            f"Set the required environment variable before starting the application."
        )
        raise ConfigurationError(msg) from e

    try:
        config = AppConfig.model_validate(resolved_data)
    except ValidationError as e:
        error_lines = ["Configuration validation failed:", ""]
        for error in e.errors():
            field_path = " → ".join(str(loc) for loc in error["loc"])
            error_lines.append(f"  Field: {field_path}")
            error_lines.append(f"  Error: {error['msg']}")
            error_lines.append(f"  Type: {error['type']}")
            error_lines.append("")

        error_lines.append(f"Configuration file: {config_path}")
        error_lines.append("Please fix the above errors and try again.")

        msg = "\n".join(error_lines)
        raise ConfigurationError(msg) from e

    return config
