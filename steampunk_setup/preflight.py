"""Precondition checks run before anything is created on disk or remotely."""

from __future__ import annotations

import shutil
from collections.abc import Callable, Iterable
from pathlib import Path

from steampunk_setup.errors import TargetExists, ToolNotFound
from steampunk_setup.utils import print_warning

REQUIRED_TOOLS: tuple[str, ...] = ("npm", "npx", "git", "gh")

_INSTALL_HINTS: dict[str, str] = {
    "npm": "Install Node.js (https://nodejs.org) which ships npm and npx.",
    "npx": "Install Node.js (https://nodejs.org) which ships npm and npx.",
    "git": "Install git (https://git-scm.com).",
    "gh": "Install the GitHub CLI (https://cli.github.com).",
}


def resolve_base_dir(cwd: Path) -> Path:
    """Return the directory the new project is created in.

    When *cwd* is itself a git checkout the project goes next to it, in the
    parent directory, so it is never nested inside an unrelated repository.
    """
    if (cwd / ".git").exists():
        print_warning(
            "Detected .git folder here. Moving up one directory to create new project in parallel."
        )
        return cwd.parent
    return cwd


def check_required_tools(
    names: Iterable[str] = REQUIRED_TOOLS,
    which: Callable[[str], str | None] = shutil.which,
) -> dict[str, str]:
    """Locate every tool in *names* on ``PATH``.

    Returns:
        Mapping of tool name to resolved executable path.

    Raises:
        ToolNotFound: For the first tool that cannot be found.
    """
    found: dict[str, str] = {}
    for name in names:
        location = which(name)
        if location is None:
            hint = _INSTALL_HINTS.get(name, "")
            raise ToolNotFound(f"'{name}' is not installed or not in PATH. {hint}".strip())
        found[name] = location
    return found


def check_target_absent(base_dir: Path, app_name: str) -> Path:
    """Return the project directory path, refusing to reuse an existing one."""
    target = base_dir / app_name
    if target.exists():
        raise TargetExists(
            f"Directory '{target}' already exists. Aborting to avoid overwriting."
        )
    return target
