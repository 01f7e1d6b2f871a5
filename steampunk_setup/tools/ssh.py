"""Opportunistic ssh-agent seeding so git pushes don't prompt.

Nothing here is fatal: a missing key or a failing agent only produces a
warning, and the pipeline continues with whatever credentials ``gh`` has.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from steampunk_setup.tools.base import ToolWrapper
from steampunk_setup.utils import print_warning

_AGENT_VAR = re.compile(r"(SSH_AUTH_SOCK|SSH_AGENT_PID)=([^;\s]+)")


def parse_agent_output(output: str) -> dict[str, str]:
    """Extract ``SSH_AUTH_SOCK``/``SSH_AGENT_PID`` from ``ssh-agent -s`` output."""
    return dict(_AGENT_VAR.findall(output))


class SshAgent(ToolWrapper):
    async def ensure(self, key_path: Path, environ: dict[str, str] | None = None) -> dict[str, str]:
        """Start an agent if none is running and add *key_path* to it.

        Returns:
            Environment variables that later commands must inherit (empty
            when an agent was already running or could not be started).
        """
        environ = os.environ if environ is None else environ
        agent_env: dict[str, str] = {}

        if not environ.get("SSH_AUTH_SOCK"):
            returncode, stdout, stderr = await self._run(["ssh-agent", "-s"])
            if returncode != 0:
                print_warning(f"WARNING: could not start ssh-agent: {stderr or stdout}")
                return {}
            agent_env = parse_agent_output(stdout)

        if not key_path.is_file():
            print_warning(
                f"WARNING: SSH key not found at {key_path}. "
                "Please add your SSH key for passwordless Git operations."
            )
            return agent_env

        returncode, _, stderr = await self.runner(
            ["ssh-add", str(key_path)], env={**self.env, **agent_env} or None
        )
        if returncode != 0:
            print_warning(f"WARNING: ssh-add failed: {stderr}")
        return agent_env
