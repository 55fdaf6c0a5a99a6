"""Configuration for the git-flow engine.

Key Components:
    - FlowConfiguration: repository-scoped settings persisted in git config
    - InitContext: branch names and prefixes requested at initialization
    - EngineSettings: environment-driven process settings (GITFLOW_*)

Example:
    >>> from gitflow_core.config import FlowConfiguration
    >>> config = FlowConfiguration.load(repository)
    >>> config.branch_name(WorkflowKind.FEATURE, "login")
    'feature/login'
"""

from gitflow_core.config.settings import (
    DEFAULT_PREFIXES,
    EngineSettings,
    FlowConfiguration,
    InitContext,
)

__all__ = [
    "DEFAULT_PREFIXES",
    "EngineSettings",
    "FlowConfiguration",
    "InitContext",
]
