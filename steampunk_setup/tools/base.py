"""Capability interfaces for the external tools the pipeline drives.

Each wrapper takes a ``runner`` (defaulting to ``utils.run_command``) so tests
can substitute a fake that records invocations instead of spawning processes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Awaitable, Protocol

from steampunk_setup.utils import format_command, run_command


class CommandRunner(Protocol):
    def __call__(
        self,
        cmd: list[str],
        cwd: str | Path | None = None,
        env: dict[str, str] | None = None,
    ) -> Awaitable[tuple[int, str, str]]: ...


class Spawner(Protocol):
    def __call__(
        self,
        cmd: list[str],
        cwd: str | Path | None = None,
        env: dict[str, str] | None = None,
    ) -> int: ...


class ProjectScaffolder(Protocol):
    async def create_project(self, base_dir: Path, app_name: str) -> Path: ...

    async def install(self, project_root: Path) -> None: ...

    async def install_dev(self, project_root: Path, packages: list[str]) -> None: ...


class VersionControl(Protocol):
    async def init(self, project_root: Path) -> None: ...

    async def add_all(self, project_root: Path) -> None: ...

    async def commit(self, project_root: Path, message: str) -> None: ...

    async def rename_branch(self, project_root: Path, branch: str) -> None: ...

    async def status(self, project_root: Path) -> str: ...


class RepositoryHost(Protocol):
    async def check_auth(self) -> None: ...

    async def repo_exists(self, slug: str) -> bool: ...

    async def create_and_push(self, slug: str, source: Path, visibility: str) -> None: ...


class StaticDeployer(Protocol):
    def configure(self, project_root: Path) -> dict[str, str]: ...

    async def deploy(self, project_root: Path) -> None: ...


class PreviewLauncher(Protocol):
    async def initialize(self, project_root: Path) -> None: ...

    def launch(self, project_root: Path) -> int: ...


class ToolWrapper:
    """Shared plumbing: a runner plus extra environment for child processes."""

    def __init__(
        self,
        runner: CommandRunner | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        self.runner: CommandRunner = runner or run_command
        self.env = env if env is not None else {}

    async def _run(self, cmd: list[str], cwd: Path | None = None) -> tuple[int, str, str]:
        return await self.runner(cmd, cwd=cwd, env=self.env or None)

    async def _run_checked(
        self,
        cmd: list[str],
        error_cls: type,
        cwd: Path | None = None,
    ) -> str:
        """Run *cmd*; raise *error_cls* with its stderr verbatim on failure."""
        returncode, stdout, stderr = await self._run(cmd, cwd=cwd)
        if returncode != 0:
            rendered = format_command(cmd)
            raise error_cls(
                f"Command failed (exit {returncode}): {rendered}\n{stderr or stdout}".rstrip(),
                command=rendered,
                stderr=stderr,
            )
        return stdout
