from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Self

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from gitdrive.constants import (
    FETCH_MAX_ATTEMPTS,
    FETCH_MAX_BACKOFF_SECONDS,
    FETCH_MIN_BACKOFF_SECONDS,
)
from gitdrive.exceptions import ConfigError
from gitdrive.logging import get_logger

__all__ = [
    "GitDriveConfig",
    "RetryConfig",
    "load_config",
    "get_user_config_path",
]

logger = get_logger(__name__)


class RetryConfig(BaseModel):
    """Settings for fetch retries.

    Attributes:
        max_attempts: Total fetch attempts, including the first (default: 3).
        min_backoff_seconds: Lower bound of the random backoff (default: 1s).
        max_backoff_seconds: Upper bound of the random backoff (default: 10s).
    """

    max_attempts: int = Field(default=FETCH_MAX_ATTEMPTS, ge=1, le=10)
    min_backoff_seconds: float = Field(default=FETCH_MIN_BACKOFF_SECONDS, ge=0.0)
    max_backoff_seconds: float = Field(default=FETCH_MAX_BACKOFF_SECONDS, ge=0.0)

    @model_validator(mode="after")
    def check_backoff_range(self) -> Self:
        if self.min_backoff_seconds > self.max_backoff_seconds:
            raise ValueError("min_backoff_seconds must not exceed max_backoff_seconds")
        return self


class YamlConfigSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from YAML files."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: Path | None = None,
    ):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._config_data: dict[str, Any] = {}
        if yaml_file and yaml_file.exists():
            try:
                with open(yaml_file) as f:
                    loaded = yaml.safe_load(f)
                    if loaded is None:
                        logger.warning("config_file_empty", path=str(yaml_file))
                    elif loaded:
                        self._config_data = loaded
            except yaml.YAMLError as e:
                raise ConfigError(
                    message=f"Invalid YAML in {yaml_file}: {e}",
                    field=None,
                    value=None,
                ) from e

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        """Get value for a specific field from the YAML config."""
        if field_name in self._config_data:
            return self._config_data[field_name], field_name, False
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return the complete config data."""
        return self._config_data


class GitDriveConfig(BaseSettings):
    """Root configuration for a git session.

    Attributes:
        quiet_checkout: Drop ``--progress`` from fetch for smaller logs.
        disable_fetch_prune_tags: Never pass ``--prune-tags`` to fetch.
        lfs_support: The caller intends to use git-lfs; enables LFS advisories.
        agent_version: Version string appended to the git user agent.
        work_folder: Directory version probes run in (default: cwd).
        use_built_in_git: Use the git bundled under agent_home (Windows).
        agent_home: Agent installation root.
        env: Session environment overrides for every git process.
        retry: Fetch retry settings.
        verbosity: Log level for the CLI.
    """

    model_config = SettingsConfigDict(
        env_prefix="GITDRIVE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    quiet_checkout: bool = False
    disable_fetch_prune_tags: bool = False
    lfs_support: bool = False
    agent_version: str | None = None
    work_folder: Path | None = None
    use_built_in_git: bool = False
    agent_home: Path | None = None
    env: dict[str, str] = Field(default_factory=dict)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    verbosity: Literal["error", "warning", "info", "debug"] = "info"

    @field_validator("work_folder")
    @classmethod
    def check_work_folder_exists(cls, v: Path | None) -> Path | None:
        """Warn if work_folder doesn't exist."""
        if v is not None and not v.is_dir():
            logger.warning("work_folder_missing", path=str(v))
        return v

    @model_validator(mode="after")
    def check_agent_home_when_built_in(self) -> Self:
        if self.use_built_in_git and self.agent_home is None:
            logger.warning("built_in_git_without_agent_home", fallback="PATH")
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize the order of settings sources.

        Priority (highest to lowest):
        1. Init arguments
        2. Environment variables (GITDRIVE_*)
        3. Project YAML config (./gitdrive.yaml)
        4. User YAML config (~/.config/gitdrive/config.yaml)
        """
        return (
            init_settings,
            env_settings,
            YamlConfigSource(settings_cls, Path.cwd() / "gitdrive.yaml"),
            YamlConfigSource(settings_cls, get_user_config_path()),
        )


def get_user_config_path() -> Path:
    """Get the path to the user configuration file.

    Returns:
        Path to ~/.config/gitdrive/config.yaml
    """
    return Path.home() / ".config" / "gitdrive" / "config.yaml"


def load_config(config_path: Path | None = None) -> GitDriveConfig:
    """Load configuration with hierarchy: user -> project -> env.

    Args:
        config_path: Optional explicit YAML file (the CLI's --config). Its
            values are passed as init settings and so win over every other
            source.

    Returns:
        GitDriveConfig instance with merged configuration.

    Raises:
        ConfigError: If configuration is invalid.
    """
    try:
        if config_path is None:
            return GitDriveConfig()
        if not config_path.exists():
            raise ConfigError(
                f"Config file not found: {config_path}",
                field=None,
                value=str(config_path),
            )
        explicit = YamlConfigSource(GitDriveConfig, config_path)()
        return GitDriveConfig(**explicit)
    except ValidationError as e:
        first_error = e.errors()[0]
        field = ".".join(str(loc) for loc in first_error["loc"])
        raise ConfigError(
            message=f"Invalid configuration: {first_error['msg']}",
            field=field,
            value=first_error.get("input"),
        ) from e
