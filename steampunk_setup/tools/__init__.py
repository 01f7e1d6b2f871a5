"""Wrappers around the external CLIs the setup pipeline drives."""

from steampunk_setup.tools.base import (
    CommandRunner,
    PreviewLauncher,
    ProjectScaffolder,
    RepositoryHost,
    Spawner,
    StaticDeployer,
    VersionControl,
)
from steampunk_setup.tools.deploy import GhPagesDeployer
from steampunk_setup.tools.git import GitRepository
from steampunk_setup.tools.github import GitHubHost
from steampunk_setup.tools.npm import DEV_DEPENDENCIES, NpmScaffolder
from steampunk_setup.tools.ssh import SshAgent
from steampunk_setup.tools.storybook import StorybookLauncher

__all__ = [
    "CommandRunner",
    "DEV_DEPENDENCIES",
    "GhPagesDeployer",
    "GitHubHost",
    "GitRepository",
    "NpmScaffolder",
    "PreviewLauncher",
    "ProjectScaffolder",
    "RepositoryHost",
    "Spawner",
    "SshAgent",
    "StaticDeployer",
    "StorybookLauncher",
    "VersionControl",
]
