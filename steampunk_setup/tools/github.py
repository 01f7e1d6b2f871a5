"""GitHub CLI (``gh``) wrapper: authentication, repository lookup and creation."""

from __future__ import annotations

from pathlib import Path

from steampunk_setup.errors import PushRejected, RemoteRepoExists, ToolNotAuthenticated
from steampunk_setup.tools.base import ToolWrapper
from steampunk_setup.utils import format_command

_ALREADY_EXISTS_MARKERS = ("already exists", "name already exists on this account")


class GitHubHost(ToolWrapper):
    """Repository hosting through an authenticated ``gh`` CLI."""

    async def check_auth(self) -> None:
        returncode, _, stderr = await self._run(["gh", "auth", "status"])
        if returncode != 0:
            raise ToolNotAuthenticated(
                "GitHub CLI is installed but you're not authenticated. "
                "Run 'gh auth login' and follow prompts, then re-run.\n" + stderr
            )

    async def repo_exists(self, slug: str) -> bool:
        returncode, _, _ = await self._run(["gh", "repo", "view", slug, "--json", "name"])
        return returncode == 0

    async def create_and_push(self, slug: str, source: Path, visibility: str = "public") -> None:
        """Create *slug* on GitHub from the local repo at *source* and push it.

        Raises:
            RemoteRepoExists: If GitHub reports the name is taken.
            PushRejected: For any other failure of the create/push.
        """
        cmd = [
            "gh", "repo", "create", slug,
            f"--{visibility}",
            "--source=.",
            "--remote=origin",
            "--push",
        ]
        returncode, stdout, stderr = await self._run(cmd, cwd=source)
        if returncode == 0:
            return

        output = f"{stderr}\n{stdout}".strip()
        rendered = format_command(cmd)
        if any(marker in output.lower() for marker in _ALREADY_EXISTS_MARKERS):
            raise RemoteRepoExists(f"Remote repository {slug} already exists.\n{output}")
        raise PushRejected(
            f"Command failed (exit {returncode}): {rendered}\n{output}",
            command=rendered,
            stderr=stderr,
        )
