"""Explicit per-run state threaded through every pipeline step."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from steampunk_setup.config import RunConfiguration


@dataclass
class RunContext:
    """Where the run happens and what child processes inherit.

    ``base_dir`` is the directory the project folder is created in; it is the
    parent of ``invocation_dir`` when the latter is itself a git checkout.
    ``env`` holds extra environment variables (e.g. the ssh-agent socket)
    merged into every external command.
    """

    config: RunConfiguration
    invocation_dir: Path
    base_dir: Path
    env: dict[str, str] = field(default_factory=dict)

    @property
    def project_root(self) -> Path:
        return self.base_dir / self.config.app_name
