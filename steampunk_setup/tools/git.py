"""Local git operations for the generated project."""

from __future__ import annotations

from pathlib import Path

from steampunk_setup.errors import VersionControlFailed
from steampunk_setup.tools.base import ToolWrapper


class GitRepository(ToolWrapper):
    """Thin wrapper over the ``git`` CLI. Every failure is fatal."""

    async def init(self, project_root: Path) -> None:
        await self._run_checked(["git", "init"], VersionControlFailed, cwd=project_root)

    async def add_all(self, project_root: Path) -> None:
        await self._run_checked(["git", "add", "."], VersionControlFailed, cwd=project_root)

    async def commit(self, project_root: Path, message: str) -> None:
        await self._run_checked(
            ["git", "commit", "-m", message], VersionControlFailed, cwd=project_root
        )

    async def rename_branch(self, project_root: Path, branch: str) -> None:
        await self._run_checked(
            ["git", "branch", "-M", branch], VersionControlFailed, cwd=project_root
        )

    async def status(self, project_root: Path) -> str:
        return await self._run_checked(
            ["git", "status", "--short", "--branch"], VersionControlFailed, cwd=project_root
        )
