"""Shared pytest fixtures for the steampunk-setup test suite.

Provides reusable fixtures for:
- ``.env`` files and working directories under ``tmp_path``
- A recording command runner that scripts external tool results
- A recording spawner for the detached Storybook launch
- A stock Vite ``index.html`` and a fake ``create-vite`` side effect
- Pipelines wired to the fakes
"""

from __future__ import annotations

import json
import textwrap
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from steampunk_setup.config import PipelineOptions, RunConfiguration
from steampunk_setup.pipeline import Pipeline


VITE_INDEX_HTML = textwrap.dedent(
    """\
    <!doctype html>
    <html lang="en">
      <head>
        <meta charset="UTF-8" />
        <link rel="icon" type="image/svg+xml" href="/vite.svg" />
        <meta name="viewport" content="width=device-width, initial-scale=1.0" />
        <title>Vite + React + TS</title>
      </head>
      <body>
        <div id="root"></div>
        <script type="module" src="/src/main.tsx"></script>
      </body>
    </html>
    """
)

VITE_PACKAGE_JSON: dict[str, Any] = {
    "name": "placeholder",
    "private": True,
    "version": "0.0.0",
    "type": "module",
    "scripts": {
        "dev": "vite",
        "build": "tsc -b && vite build",
        "lint": "eslint .",
        "preview": "vite preview",
    },
}


# ---------------------------------------------------------------------------
# Recording fakes
# ---------------------------------------------------------------------------


@dataclass
class Call:
    cmd: list[str]
    cwd: Path | None
    env: dict[str, str] | None

    @property
    def line(self) -> str:
        return " ".join(self.cmd)


class RecordingRunner:
    """Fake ``run_command``: records every invocation, returns scripted results.

    Results are matched on command prefix; the most recently registered
    matching prefix wins. Unmatched commands succeed with empty output.
    """

    def __init__(self) -> None:
        self.calls: list[Call] = []
        self._responses: list[tuple[tuple[str, ...], tuple[int, str, str]]] = []
        self._effects: list[tuple[tuple[str, ...], Callable[[list[str], Path | None], None]]] = []

    def respond(self, *prefix: str, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self._responses.append((prefix, (returncode, stdout, stderr)))

    def on(self, *prefix: str, effect: Callable[[list[str], Path | None], None]) -> None:
        self._effects.append((prefix, effect))

    async def __call__(
        self,
        cmd: list[str],
        cwd: str | Path | None = None,
        env: dict[str, str] | None = None,
    ) -> tuple[int, str, str]:
        cwd_path = Path(cwd) if cwd else None
        self.calls.append(Call(list(cmd), cwd_path, dict(env) if env else None))
        for prefix, effect in self._effects:
            if tuple(cmd[: len(prefix)]) == prefix:
                effect(list(cmd), cwd_path)
        for prefix, result in reversed(self._responses):
            if tuple(cmd[: len(prefix)]) == prefix:
                return result
        return (0, "", "")

    @property
    def lines(self) -> list[str]:
        return [call.line for call in self.calls]

    def find(self, *prefix: str) -> Call | None:
        for call in self.calls:
            if tuple(call.cmd[: len(prefix)]) == prefix:
                return call
        return None


class RecordingSpawner:
    """Fake ``spawn_detached``: records the command, returns a fixed PID."""

    pid = 4242

    def __init__(self) -> None:
        self.calls: list[Call] = []

    def __call__(
        self,
        cmd: list[str],
        cwd: str | Path | None = None,
        env: dict[str, str] | None = None,
    ) -> int:
        self.calls.append(Call(list(cmd), Path(cwd) if cwd else None, env))
        return self.pid


def fake_create_vite(cmd: list[str], cwd: Path | None) -> None:
    """Side effect standing in for ``npm create vite@latest <name>``."""
    assert cwd is not None
    root = cwd / cmd[3]
    (root / "src" / "assets").mkdir(parents=True)
    (root / "index.html").write_text(VITE_INDEX_HTML, encoding="utf-8")
    package = dict(VITE_PACKAGE_JSON, name=cmd[3])
    (root / "package.json").write_text(json.dumps(package, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def recording_runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def recording_spawner() -> RecordingSpawner:
    return RecordingSpawner()


@pytest.fixture
def vite_index_html() -> str:
    return VITE_INDEX_HTML


@pytest.fixture
def run_config() -> RunConfiguration:
    return RunConfiguration(app_name="goggles-app", github_account="acme")


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """Directory the tool is "started" in. Not a git checkout."""
    work = tmp_path / "work"
    work.mkdir()
    return work


@pytest.fixture
def write_env(workdir: Path) -> Callable[..., Path]:
    """Write a ``.env`` into the working directory from keyword arguments."""

    def _write(content: str | None = None, **values: str) -> Path:
        path = workdir / ".env"
        if content is None:
            content = "".join(f"{key}={value}\n" for key, value in values.items())
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def scripted_runner(recording_runner: RecordingRunner) -> RecordingRunner:
    """A runner scripted for a clean, successful setup run."""
    recording_runner.respond("gh", "repo", "view", returncode=1, stderr="Could not resolve to a Repository")
    recording_runner.on("npm", "create", "vite@latest", effect=fake_create_vite)
    return recording_runner


@pytest.fixture
def make_pipeline(
    workdir: Path,
    tmp_path: Path,
    scripted_runner: RecordingRunner,
    recording_spawner: RecordingSpawner,
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[..., Pipeline]:
    """Build a Pipeline wired to the recording fakes."""
    monkeypatch.setenv("SSH_AUTH_SOCK", str(tmp_path / "agent.sock"))

    def _make(
        which: Callable[[str], str | None] = lambda name: f"/usr/bin/{name}",
        **option_overrides: Any,
    ) -> Pipeline:
        settings: dict[str, Any] = {"log_path": None, "ssh_key_path": tmp_path / "no-such-key"}
        settings.update(option_overrides)
        options = PipelineOptions(**settings)
        return Pipeline(
            ".env",
            options,
            workdir,
            runner=scripted_runner,
            spawner=recording_spawner,
            which=which,
        )

    return _make
