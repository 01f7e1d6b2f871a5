"""npm / create-vite wrapper: base project generation and dependency installs."""

from __future__ import annotations

from pathlib import Path

from steampunk_setup.errors import DependencyInstallFailed
from steampunk_setup.tools.base import ToolWrapper

VITE_TEMPLATE = "react-ts"

DEV_DEPENDENCIES: list[str] = [
    "tailwindcss",
    "postcss",
    "autoprefixer",
    "@tailwindcss/postcss",
    "gh-pages",
    "prettier",
]


class NpmScaffolder(ToolWrapper):
    """Creates the Vite skeleton and installs packages through npm."""

    async def create_project(self, base_dir: Path, app_name: str) -> Path:
        await self._run_checked(
            [
                "npm", "create", "vite@latest", app_name,
                "--", "--template", VITE_TEMPLATE, "--no-interactive",
            ],
            DependencyInstallFailed,
            cwd=base_dir,
        )
        project_root = base_dir / app_name
        if not project_root.is_dir():
            raise DependencyInstallFailed(
                f"create-vite exited successfully but {project_root} was not created",
                command="npm create vite@latest",
            )
        return project_root

    async def install(self, project_root: Path) -> None:
        await self._run_checked(["npm", "install"], DependencyInstallFailed, cwd=project_root)

    async def install_dev(self, project_root: Path, packages: list[str]) -> None:
        await self._run_checked(
            ["npm", "install", "-D", *packages], DependencyInstallFailed, cwd=project_root
        )
