"""Unit tests for the npm and git wrappers.

Tests cover:
- create-vite invocation, working directory and post-condition
- Dependency installs and their failure mapping
- git command sequence and VersionControlFailed on any failure
- Extra environment forwarded to every command
"""

from __future__ import annotations

from pathlib import Path

import pytest

from steampunk_setup.errors import DependencyInstallFailed, VersionControlFailed
from steampunk_setup.tools import DEV_DEPENDENCIES, GitRepository, NpmScaffolder


# ---------------------------------------------------------------------------
# NpmScaffolder
# ---------------------------------------------------------------------------


class TestNpmScaffolder:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_create_project_runs_create_vite(self, recording_runner, tmp_path: Path):
        recording_runner.on(
            "npm", "create", effect=lambda cmd, cwd: (cwd / cmd[3]).mkdir()
        )
        npm = NpmScaffolder(recording_runner)

        root = await npm.create_project(tmp_path, "goggles-app")

        assert root == tmp_path / "goggles-app"
        call = recording_runner.calls[0]
        assert call.cmd == [
            "npm", "create", "vite@latest", "goggles-app",
            "--", "--template", "react-ts", "--no-interactive",
        ]
        assert call.cwd == tmp_path

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_create_project_failure(self, recording_runner, tmp_path: Path):
        recording_runner.respond("npm", "create", returncode=1, stderr="npm ERR! network")
        with pytest.raises(DependencyInstallFailed) as info:
            await NpmScaffolder(recording_runner).create_project(tmp_path, "goggles-app")
        assert info.value.stderr == "npm ERR! network"
        assert "npm ERR! network" in str(info.value)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_create_project_without_directory_fails(self, recording_runner, tmp_path: Path):
        with pytest.raises(DependencyInstallFailed, match="was not created"):
            await NpmScaffolder(recording_runner).create_project(tmp_path, "goggles-app")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_install_dev_passes_every_package(self, recording_runner, tmp_path: Path):
        await NpmScaffolder(recording_runner).install_dev(tmp_path, DEV_DEPENDENCIES)
        assert recording_runner.calls[0].cmd == ["npm", "install", "-D", *DEV_DEPENDENCIES]
        assert "@tailwindcss/postcss" in DEV_DEPENDENCIES
        assert "gh-pages" in DEV_DEPENDENCIES

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_install_failure(self, recording_runner, tmp_path: Path):
        recording_runner.respond("npm", "install", returncode=1, stderr="ERESOLVE")
        with pytest.raises(DependencyInstallFailed, match="ERESOLVE"):
            await NpmScaffolder(recording_runner).install(tmp_path)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_extra_env_forwarded(self, recording_runner, tmp_path: Path):
        env = {"SSH_AUTH_SOCK": "/tmp/agent"}
        await NpmScaffolder(recording_runner, env).install(tmp_path)
        assert recording_runner.calls[0].env == env

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_env_passes_none(self, recording_runner, tmp_path: Path):
        await NpmScaffolder(recording_runner).install(tmp_path)
        assert recording_runner.calls[0].env is None


# ---------------------------------------------------------------------------
# GitRepository
# ---------------------------------------------------------------------------


class TestGitRepository:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_command_sequence(self, recording_runner, tmp_path: Path):
        git = GitRepository(recording_runner)
        await git.init(tmp_path)
        await git.add_all(tmp_path)
        await git.commit(tmp_path, "Initial commit")
        await git.rename_branch(tmp_path, "main")

        assert [call.cmd for call in recording_runner.calls] == [
            ["git", "init"],
            ["git", "add", "."],
            ["git", "commit", "-m", "Initial commit"],
            ["git", "branch", "-M", "main"],
        ]
        assert all(call.cwd == tmp_path for call in recording_runner.calls)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_status_returns_stdout(self, recording_runner, tmp_path: Path):
        recording_runner.respond("git", "status", stdout="## main...origin/main")
        assert await GitRepository(recording_runner).status(tmp_path) == "## main...origin/main"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_commit_failure(self, recording_runner, tmp_path: Path):
        recording_runner.respond(
            "git", "commit", returncode=128, stderr="Please tell me who you are."
        )
        with pytest.raises(VersionControlFailed) as info:
            await GitRepository(recording_runner).commit(tmp_path, "Initial commit")
        assert info.value.code == "VersionControlFailed"
        assert "who you are" in info.value.stderr
