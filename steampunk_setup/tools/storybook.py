"""Storybook initializer and detached dev-server launch."""

from __future__ import annotations

from pathlib import Path

from steampunk_setup.errors import PreviewFailed
from steampunk_setup.tools.base import CommandRunner, Spawner, ToolWrapper
from steampunk_setup.utils import spawn_detached


class StorybookLauncher(ToolWrapper):
    def __init__(
        self,
        runner: CommandRunner | None = None,
        env: dict[str, str] | None = None,
        spawner: Spawner | None = None,
    ) -> None:
        super().__init__(runner, env)
        self.spawner: Spawner = spawner or spawn_detached

    async def initialize(self, project_root: Path) -> None:
        await self._run_checked(
            ["npx", "--yes", "storybook@latest", "init", "--builder", "vite", "--yes"],
            PreviewFailed,
            cwd=project_root,
        )

    def launch(self, project_root: Path) -> int:
        """Start ``npm run storybook`` without waiting for it; return its PID."""
        return self.spawner(["npm", "run", "storybook"], cwd=project_root, env=self.env or None)
