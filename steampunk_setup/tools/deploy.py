"""GitHub Pages deployment through the ``gh-pages`` npm package."""

from __future__ import annotations

from pathlib import Path

from steampunk_setup.errors import DeployFailed
from steampunk_setup.tools.base import ToolWrapper
from steampunk_setup.utils import load_json, save_json, wait_for_url

DEPLOY_SCRIPTS: dict[str, str] = {
    "predeploy": "npm run build",
    "deploy": "gh-pages -d dist -f",
}


class GhPagesDeployer(ToolWrapper):
    """Adds deploy scripts to ``package.json`` and runs them."""

    def configure(self, project_root: Path) -> dict[str, str]:
        """Add ``predeploy``/``deploy`` scripts to the project's ``package.json``.

        Existing scripts are kept; the two deploy entries are overwritten.
        Returns the resulting ``scripts`` mapping.
        """
        manifest_path = project_root / "package.json"
        if not manifest_path.is_file():
            raise DeployFailed(f"package.json not found in {project_root}")
        try:
            package = load_json(manifest_path)
        except ValueError as exc:
            raise DeployFailed(f"Cannot read {manifest_path}: {exc}") from exc

        scripts = package.setdefault("scripts", {})
        scripts.update(DEPLOY_SCRIPTS)
        save_json(package, manifest_path)
        return dict(scripts)

    async def deploy(self, project_root: Path) -> None:
        await self._run_checked(["npm", "run", "deploy"], DeployFailed, cwd=project_root)

    async def wait_until_live(self, url: str, timeout: int = 300) -> bool:
        return await wait_for_url(url, timeout=timeout)
