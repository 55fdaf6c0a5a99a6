"""
Configuration system using Pydantic for type-safe settings management.

Three layers of configuration exist:

- ``FlowConfiguration``: the durable, repository-scoped git-flow settings
  (integration branch names, prefixes, version tag prefix, initialized flag),
  persisted as plain strings in the repository's own git config.
- ``InitContext``: the request used to initialize a repository, with the
  conventional git-flow defaults. Can be loaded from YAML.
- ``EngineSettings``: process-level settings (remote name, log level) read
  from ``GITFLOW_*`` environment variables.

Persisted layout::

    [gitflow "branch"]
        master = master
        develop = develop
    [gitflow "prefix"]
        feature = feature/
        release = release/
        hotfix = hotfix/
        support = support/
        versiontag =
    [gitflow]
        initialized = true
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gitflow_core.enums import WorkflowKind
from gitflow_core.exceptions import ConfigurationError
from gitflow_core.utils.logging_config import configure_logging

if TYPE_CHECKING:
    from gitflow_core.git.repository import GitRepository

log = structlog.get_logger(__name__)

MASTER_KEY = "gitflow.branch.master"
DEVELOP_KEY = "gitflow.branch.develop"
VERSION_TAG_KEY = "gitflow.prefix.versiontag"
INITIALIZED_KEY = "gitflow.initialized"
PREFIX_KEYS: dict[WorkflowKind, str] = {kind: f"gitflow.prefix.{kind.value}" for kind in WorkflowKind}

DEFAULT_PREFIXES: dict[WorkflowKind, str] = {
    WorkflowKind.FEATURE: "feature/",
    WorkflowKind.RELEASE: "release/",
    WorkflowKind.HOTFIX: "hotfix/",
    WorkflowKind.SUPPORT: "support/",
}


class InitContext(BaseModel):
    """Branch names and prefixes requested when initializing a repository."""

    master: str = Field(default="master", description="Production integration branch")
    develop: str = Field(default="develop", description="Development integration branch")
    feature: str = Field(default="feature/", description="Feature branch prefix")
    release: str = Field(default="release/", description="Release branch prefix")
    hotfix: str = Field(default="hotfix/", description="Hotfix branch prefix")
    support: str = Field(default="support/", description="Support branch prefix")
    versiontag: str = Field(default="", description="Prefix prepended to release and hotfix tags")

    @field_validator("master", "develop")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Ensure integration branch names are not empty.

        Raises:
            ValueError: If value is empty or whitespace
        """
        if not v or not v.strip():
            raise ValueError("Integration branch names must not be empty")
        return v.strip()

    @field_validator("feature", "release", "hotfix", "support")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Reject empty workflow prefixes.

        An empty prefix would make every local branch, including master and
        develop, look like a workflow branch of that kind.

        Raises:
            ValueError: If value is empty or whitespace
        """
        if not v or not v.strip():
            raise ValueError("Workflow branch prefixes must not be empty")
        return v

    def prefixes(self) -> dict[WorkflowKind, str]:
        return {
            WorkflowKind.FEATURE: self.feature,
            WorkflowKind.RELEASE: self.release,
            WorkflowKind.HOTFIX: self.hotfix,
            WorkflowKind.SUPPORT: self.support,
        }

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> InitContext:
        """Load an init context from a YAML mapping.

        Keys are the field names (``master``, ``develop``, ``feature``, ...);
        missing keys keep their defaults.

        Args:
            config_path: Path to YAML file

        Returns:
            InitContext instance

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file) as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid init context in {config_path}: {e}") from e


class FlowConfiguration(BaseModel):
    """Repository-scoped git-flow configuration.

    Invariant: once ``initialized`` is true, master and develop are distinct
    and non-empty, and every workflow prefix is non-empty.
    """

    master_branch: str = "master"
    develop_branch: str = "develop"
    prefixes: dict[WorkflowKind, str] = Field(default_factory=lambda: dict(DEFAULT_PREFIXES))
    version_tag_prefix: str = ""
    initialized: bool = False

    @model_validator(mode="after")
    def validate_integration_branches(self) -> FlowConfiguration:
        """Enforce distinct integration branches and non-empty prefixes when initialized."""
        if self.initialized:
            if not self.master_branch or not self.develop_branch:
                raise ValueError("master and develop branch names must not be empty")
            if self.master_branch == self.develop_branch:
                raise ValueError(f"master and develop must differ (both '{self.master_branch}')")
            empty = sorted(kind.value for kind, prefix in self.prefixes.items() if not prefix.strip())
            if empty:
                raise ValueError(f"Workflow branch prefixes must not be empty: {', '.join(empty)}")
        return self

    def prefix(self, kind: WorkflowKind) -> str:
        return self.prefixes.get(kind, DEFAULT_PREFIXES[kind])

    def branch_name(self, kind: WorkflowKind, short_name: str) -> str:
        """Compose the full branch name for a workflow branch."""
        return f"{self.prefix(kind)}{short_name}"

    def tag_name(self, short_name: str) -> str:
        return f"{self.version_tag_prefix}{short_name}"

    @classmethod
    def from_context(cls, context: InitContext) -> FlowConfiguration:
        return cls(
            master_branch=context.master,
            develop_branch=context.develop,
            prefixes=context.prefixes(),
            version_tag_prefix=context.versiontag,
            initialized=True,
        )

    @classmethod
    def load(cls, repository: GitRepository) -> FlowConfiguration:
        """Read the configuration from the repository's git config.

        Missing keys fall back to the git-flow defaults. The configuration is
        only reported as initialized when the flag is set and both integration
        branches are configured.

        Raises:
            LocalStorageError: If the config cannot be read.
            ConfigurationError: If the stored values violate the invariants.
        """
        master = repository.get_config(MASTER_KEY)
        develop = repository.get_config(DEVELOP_KEY)
        flag = (repository.get_config(INITIALIZED_KEY) or "").strip().lower()

        prefixes = {}
        for kind, key in PREFIX_KEYS.items():
            value = repository.get_config(key)
            prefixes[kind] = DEFAULT_PREFIXES[kind] if value is None else value

        try:
            return cls(
                master_branch=master or "master",
                develop_branch=develop or "develop",
                prefixes=prefixes,
                version_tag_prefix=repository.get_config(VERSION_TAG_KEY) or "",
                initialized=flag == "true" and bool(master) and bool(develop),
            )
        except ValidationError as e:
            raise ConfigurationError(
                f"Stored git-flow configuration is invalid: {e}",
                hint="Re-run initialization with force=True.",
            ) from e

    def save(self, repository: GitRepository) -> None:
        """Write every key to the repository's git config.

        The initialized flag is cleared first and written last, so a
        partially written configuration is never reported as initialized,
        even when a forced re-initialization overwrites an existing one.

        Raises:
            LocalStorageError: If the config cannot be written.
        """
        repository.unset_config(INITIALIZED_KEY)
        repository.set_config(MASTER_KEY, self.master_branch)
        repository.set_config(DEVELOP_KEY, self.develop_branch)
        for kind, key in PREFIX_KEYS.items():
            repository.set_config(key, self.prefix(kind))
        repository.set_config(VERSION_TAG_KEY, self.version_tag_prefix)
        repository.set_config(INITIALIZED_KEY, "true" if self.initialized else "false")
        log.info(
            "flow_configuration_saved",
            master=self.master_branch,
            develop=self.develop_branch,
            initialized=self.initialized,
        )


class EngineSettings(BaseSettings):
    """Process-level engine settings.

    Read from ``GITFLOW_REMOTE``, ``GITFLOW_LOG_LEVEL`` and
    ``GITFLOW_DEFAULT_ORIGIN_URL``.
    """

    model_config = SettingsConfigDict(
        env_prefix="GITFLOW_",
        case_sensitive=False,
    )

    remote: str = Field(default="origin", description="Remote used by publish, fetch and push")
    log_level: str = Field(default="INFO", description="Minimum structlog level")
    default_origin_url: str | None = Field(
        default=None,
        description="URL for an 'origin' remote added at init time when none exists",
    )

    def configure_logging(self, json_output: bool = True) -> None:
        """Configure structlog at this settings' log level."""
        configure_logging(self.log_level, json_output=json_output)
