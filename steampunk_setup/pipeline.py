"""steampunk-setup pipeline orchestrator.

Runs the scaffolding of a steampunk-themed Vite + React + TypeScript project
as one ordered, fail-fast sequence of steps:

1. Load and validate ``.env`` configuration.
2. Check preconditions (tools, ``gh`` auth, target directory, remote repo).
3. Seed the SSH agent (warnings only).
4. Generate the Vite project and install dependencies.
5. Emit the template manifest and patch ``index.html``.
6. Commit, create the GitHub repository and push.
7. Deploy to GitHub Pages and report the URLs.
8. Initialize Storybook, write its main/preview config, and launch it.

Usage::

    steampunk-setup
    steampunk-setup --env-file ./my.env --no-preview --json
"""

from __future__ import annotations

import asyncio
import json
import shutil
import sys
import time
import traceback
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.markup import escape
from rich.panel import Panel

from steampunk_setup.config import (
    DEFAULT_ENV_FILE,
    DEFAULT_LOG_FILE,
    PipelineOptions,
    load_config,
)
from steampunk_setup.context import RunContext
from steampunk_setup.errors import RemoteRepoExists, SetupError
from steampunk_setup.preflight import (
    REQUIRED_TOOLS,
    check_required_tools,
    check_target_absent,
    resolve_base_dir,
)
from steampunk_setup.scaffolder import ProjectGenerator
from steampunk_setup.tools import (
    DEV_DEPENDENCIES,
    CommandRunner,
    GhPagesDeployer,
    GitHubHost,
    GitRepository,
    NpmScaffolder,
    PreviewLauncher,
    ProjectScaffolder,
    RepositoryHost,
    Spawner,
    SshAgent,
    StaticDeployer,
    StorybookLauncher,
    VersionControl,
)
from steampunk_setup.utils import (
    console,
    end_log,
    flush_log,
    format_duration,
    print_error,
    print_step_header,
    print_success,
    print_summary_table,
    print_warning,
    start_log,
)

INITIAL_COMMIT_MESSAGE = "Initial commit"


@dataclass(frozen=True)
class PipelineStep:
    """One ordered unit of work. Executed at most once per run."""

    name: str
    description: str
    action: Callable[[], Awaitable[None]]


class Pipeline:
    """Drives the setup steps in order and stops at the first failure.

    Attributes:
        env_file: The ``.env`` file to read the run configuration from.
        options: Command-line knobs (log file, preview launch, Pages polling).
        invocation_dir: Directory the tool was started in.
        state: Accumulated run results; returned by :meth:`run`.
        ctx: The run context, available once configuration is loaded.
    """

    def __init__(
        self,
        env_file: str | Path = DEFAULT_ENV_FILE,
        options: PipelineOptions | None = None,
        invocation_dir: Path | None = None,
        *,
        runner: CommandRunner | None = None,
        spawner: Spawner | None = None,
        which: Callable[[str], str | None] = shutil.which,
        scaffolder: ProjectScaffolder | None = None,
        vcs: VersionControl | None = None,
        host: RepositoryHost | None = None,
        deployer: StaticDeployer | None = None,
        preview: PreviewLauncher | None = None,
        ssh: SshAgent | None = None,
    ) -> None:
        self.invocation_dir = Path(invocation_dir or Path.cwd())
        env_path = Path(env_file)
        self.env_file = env_path if env_path.is_absolute() else self.invocation_dir / env_path
        self.options = options or PipelineOptions()
        self.which = which

        # Shared by every tool so variables exported by the SSH step reach
        # later git/gh commands.
        self.env: dict[str, str] = {}
        self.scaffolder = scaffolder or NpmScaffolder(runner, self.env)
        self.vcs = vcs or GitRepository(runner, self.env)
        self.host = host or GitHubHost(runner, self.env)
        self.deployer = deployer or GhPagesDeployer(runner, self.env)
        self.preview = preview or StorybookLauncher(runner, self.env, spawner)
        self.ssh = ssh or SshAgent(runner, self.env)

        self.ctx: RunContext | None = None
        self.generator: ProjectGenerator | None = None
        self.state: dict[str, Any] = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "steps_completed": [],
            "steps_failed": [],
            "success": False,
        }

    # ------------------------------------------------------------------
    # Step table
    # ------------------------------------------------------------------

    def steps(self) -> list[PipelineStep]:
        steps = [
            PipelineStep("load_config", "Load configuration", self.step_load_config),
            PipelineStep("locate_workspace", "Resolve working directory", self.step_locate_workspace),
            PipelineStep("check_tools", "Check required tools", self.step_check_tools),
            PipelineStep("check_auth", "Check GitHub CLI authentication", self.step_check_auth),
            PipelineStep("check_target", "Check target directory", self.step_check_target),
            PipelineStep("check_remote", "Check remote repository", self.step_check_remote),
            PipelineStep("ssh_agent", "Initialize SSH agent", self.step_ssh_agent),
            PipelineStep("create_project", "Create Vite + React (TypeScript) project", self.step_create_project),
            PipelineStep("install", "Install project dependencies", self.step_install),
            PipelineStep("install_dev", "Install dev dependencies", self.step_install_dev),
            PipelineStep("emit_templates", "Write configuration, styles and components", self.step_emit_templates),
            PipelineStep("patch_markup", "Insert Google Fonts links and title into index.html", self.step_patch_markup),
            PipelineStep("commit", "Initialize git repository and commit", self.step_commit),
            PipelineStep("publish", "Create GitHub repository and push", self.step_publish),
            PipelineStep("configure_deploy", "Add GitHub Pages deploy scripts", self.step_configure_deploy),
            PipelineStep("deploy", "Deploy to GitHub Pages", self.step_deploy),
        ]
        if self.options.wait_for_pages:
            steps.append(
                PipelineStep("wait_for_pages", "Wait for GitHub Pages to go live", self.step_wait_for_pages)
            )
        steps += [
            PipelineStep("init_preview", "Initialize Storybook with Vite builder", self.step_init_preview),
            PipelineStep("write_preview", "Write .storybook/main.ts and preview.ts", self.step_write_preview),
            PipelineStep("git_status", "Confirm git status", self.step_git_status),
        ]
        if self.options.launch_preview:
            steps.append(PipelineStep("launch_preview", "Launch Storybook", self.step_launch_preview))
        return steps

    # ------------------------------------------------------------------
    # Run loop
    # ------------------------------------------------------------------

    async def run(self) -> dict[str, Any]:
        """Execute every step in order, stopping at the first failure.

        Returns:
            The final state dictionary, including a top-level ``success``
            boolean and, on failure, an ``error`` entry with its code.
        """
        pipeline_start = time.monotonic()
        log_path = self.log_path
        start_log(log_path)
        if log_path is not None:
            self.state["log_file"] = str(log_path)
        console.print(
            Panel(
                f"[bold bright_yellow]Steampunk Vite + React + Tailwind Setup[/bold bright_yellow]\n"
                f"Config : {escape(str(self.env_file))}\n"
                f"Cwd    : {escape(str(self.invocation_dir))}",
                title="[bold]Setup Start[/bold]",
                border_style="yellow",
            )
        )

        steps = self.steps()
        try:
            for index, step in enumerate(steps, start=1):
                print_step_header(index, len(steps), step.description)
                flush_log()
                step_start = time.monotonic()
                try:
                    await step.action()
                except SetupError as exc:
                    if exc.step is None:
                        exc.step = step.name
                    self._record_failure(step, exc.code, str(exc))
                    print_error(f"ERROR: {exc}")
                    break
                except Exception as exc:
                    tb = traceback.format_exc()
                    self._record_failure(step, "UnexpectedError", f"{exc}\n{tb}")
                    print_error(f"ERROR: step '{step.name}' failed unexpectedly: {exc}")
                    console.print(tb, style="dim", markup=False)
                    break
                self.state["steps_completed"].append(step.name)
                console.print(
                    f"[dim]{step.name} done in {format_duration(time.monotonic() - step_start)}[/dim]"
                )
            else:
                self.state["success"] = True

            self.state["total_duration"] = format_duration(time.monotonic() - pipeline_start)
            self.state["finished_at"] = datetime.now(timezone.utc).isoformat()
            self._print_final_summary()
        finally:
            end_log()

        return self.state

    @property
    def log_path(self) -> Path | None:
        """The run log location, resolved against the invocation directory."""
        path = self.options.log_path
        if path is None or path.is_absolute():
            return path
        return self.invocation_dir / path

    def _record_failure(self, step: PipelineStep, code: str, message: str) -> None:
        self.state["steps_failed"].append(step.name)
        self.state["error"] = {"code": code, "step": step.name, "message": message}

    def _require_ctx(self) -> RunContext:
        if self.ctx is None:
            raise SetupError("configuration has not been loaded")
        return self.ctx

    # ------------------------------------------------------------------
    # Configuration & preconditions
    # ------------------------------------------------------------------

    async def step_load_config(self) -> None:
        config = load_config(self.env_file)
        self.ctx = RunContext(
            config=config,
            invocation_dir=self.invocation_dir,
            base_dir=self.invocation_dir,
            env=self.env,
        )
        self.generator = ProjectGenerator(config)
        self.state.update(
            {
                "app_name": config.app_name,
                "github_account": config.github_account,
                "repo_url": config.repo_url,
                "pages_url": config.pages_url,
            }
        )
        console.print(f"Using application name: [bold]{config.app_name}[/bold]")
        console.print(f"Using GitHub account: [bold]{config.github_account}[/bold]")

    async def step_locate_workspace(self) -> None:
        ctx = self._require_ctx()
        ctx.base_dir = resolve_base_dir(ctx.invocation_dir)
        self.state["project_root"] = str(ctx.project_root)
        console.print(f"Project will be created at [bold]{escape(str(ctx.project_root))}[/bold]")

    async def step_check_tools(self) -> None:
        found = check_required_tools(REQUIRED_TOOLS, which=self.which)
        for name, location in found.items():
            console.print(f"  [green]+[/green] {name}: [dim]{escape(location)}[/dim]")

    async def step_check_auth(self) -> None:
        await self.host.check_auth()
        console.print("  [green]+[/green] GitHub CLI authenticated")

    async def step_check_target(self) -> None:
        ctx = self._require_ctx()
        check_target_absent(ctx.base_dir, ctx.config.app_name)
        console.print(f"  [green]+[/green] {escape(str(ctx.project_root))} is free")

    async def step_check_remote(self) -> None:
        config = self._require_ctx().config
        if await self.host.repo_exists(config.repo_slug):
            raise RemoteRepoExists(
                f"Remote repository {config.repo_slug} already exists. "
                "Choose another APP_NAME or delete the repository."
            )
        console.print(f"  [green]+[/green] {config.repo_slug} is available")

    async def step_ssh_agent(self) -> None:
        exported = await self.ssh.ensure(self.options.ssh_key_path)
        self.env.update(exported)

    # ------------------------------------------------------------------
    # Project generation
    # ------------------------------------------------------------------

    async def step_create_project(self) -> None:
        ctx = self._require_ctx()
        await self.scaffolder.create_project(ctx.base_dir, ctx.config.app_name)

    async def step_install(self) -> None:
        await self.scaffolder.install(self._require_ctx().project_root)

    async def step_install_dev(self) -> None:
        await self.scaffolder.install_dev(self._require_ctx().project_root, list(DEV_DEPENDENCIES))

    async def step_emit_templates(self) -> None:
        ctx = self._require_ctx()
        assert self.generator is not None
        written = await self.generator.emit_all(ctx.project_root)
        self.state["files_written"] = len(written)
        if self.generator.unresolved:
            self.state["unresolved_placeholders"] = dict(self.generator.unresolved)

    async def step_patch_markup(self) -> None:
        assert self.generator is not None
        self.generator.patch_markup(self._require_ctx().project_root)

    # ------------------------------------------------------------------
    # Version control & publication
    # ------------------------------------------------------------------

    async def step_commit(self) -> None:
        ctx = self._require_ctx()
        root = ctx.project_root
        await self.vcs.init(root)
        await self.vcs.add_all(root)
        await self.vcs.commit(root, INITIAL_COMMIT_MESSAGE)
        await self.vcs.rename_branch(root, ctx.config.default_branch)

    async def step_publish(self) -> None:
        ctx = self._require_ctx()
        await self.host.create_and_push(
            ctx.config.repo_slug, ctx.project_root, ctx.config.repo_visibility
        )
        print_success(f"Pushed to {ctx.config.repo_url}")

    # ------------------------------------------------------------------
    # Deployment
    # ------------------------------------------------------------------

    async def step_configure_deploy(self) -> None:
        scripts = self.deployer.configure(self._require_ctx().project_root)
        console.print(f"  predeploy: [dim]{scripts['predeploy']}[/dim]")
        console.print(f"  deploy:    [dim]{scripts['deploy']}[/dim]")

    async def step_deploy(self) -> None:
        config = self._require_ctx().config
        await self.deployer.deploy(self._require_ctx().project_root)
        console.print(
            Panel(
                f"GitHub Repository:     {config.repo_url}\n"
                f"Deployed GitHub Pages: {config.pages_url}",
                border_style="green",
            )
        )

    async def step_wait_for_pages(self) -> None:
        config = self._require_ctx().config
        live = await self.deployer.wait_until_live(config.pages_url, self.options.pages_timeout)
        self.state["pages_live"] = live
        if live:
            print_success(f"{config.pages_url} is live")
        else:
            print_warning(
                f"{config.pages_url} did not answer within {self.options.pages_timeout}s; "
                "GitHub Pages can take a few minutes on first publish."
            )

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    async def step_init_preview(self) -> None:
        await self.preview.initialize(self._require_ctx().project_root)

    async def step_write_preview(self) -> None:
        assert self.generator is not None
        await self.generator.write_storybook_config(self._require_ctx().project_root)

    async def step_git_status(self) -> None:
        await self.vcs.status(self._require_ctx().project_root)

    async def step_launch_preview(self) -> None:
        pid = self.preview.launch(self._require_ctx().project_root)
        self.state["storybook_pid"] = pid
        console.print(f"Storybook starting in the background (pid {pid}).")

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _print_final_summary(self) -> None:
        summary = {
            "Status": "succeeded" if self.state["success"] else "FAILED",
            "Duration": self.state.get("total_duration", "N/A"),
            "Completed": str(len(self.state["steps_completed"])),
        }
        if self.state.get("project_root"):
            summary["Project"] = self.state["project_root"]
        if self.state["success"]:
            summary["Repository"] = self.state["repo_url"]
            summary["GitHub Pages"] = self.state["pages_url"]
        else:
            error = self.state.get("error", {})
            summary["Failed step"] = error.get("step", "?")
            summary["Error"] = error.get("code", "?")
        print_summary_table(summary, title="Setup Summary")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``steampunk-setup`` / ``python -m steampunk_setup``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="steampunk-setup",
        description="Scaffold, publish and deploy a steampunk Vite + React + Tailwind project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "The .env file must define APP_NAME and GITHUB_ACCOUNT.\n"
            "Examples:\n"
            "  steampunk-setup\n"
            "  steampunk-setup --env-file ./goggles.env --no-preview\n"
        ),
    )
    parser.add_argument(
        "--env-file",
        default=DEFAULT_ENV_FILE,
        help=f"Configuration file (default: {DEFAULT_ENV_FILE})",
    )
    parser.add_argument(
        "--log-file",
        default=DEFAULT_LOG_FILE,
        help=f"Log file, recreated on each run (default: {DEFAULT_LOG_FILE})",
    )
    parser.add_argument(
        "--no-log",
        action="store_true",
        help="Do not write a log file",
    )
    parser.add_argument(
        "--no-preview",
        action="store_true",
        help="Do not launch Storybook at the end",
    )
    parser.add_argument(
        "--wait-for-pages",
        action="store_true",
        help="Poll the GitHub Pages URL until it answers after deploying",
    )
    parser.add_argument(
        "--pages-timeout",
        type=int,
        default=300,
        help="Seconds to wait for GitHub Pages with --wait-for-pages (default: 300)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the final run state as JSON",
    )

    args = parser.parse_args(argv)

    try:
        options = PipelineOptions(
            log_path=None if args.no_log else Path(args.log_file),
            launch_preview=not args.no_preview,
            wait_for_pages=args.wait_for_pages,
            pages_timeout=args.pages_timeout,
        )
    except ValidationError as exc:
        parser.error(str(exc))
    pipeline = Pipeline(args.env_file, options)
    state = asyncio.run(pipeline.run())

    if args.json:
        print(json.dumps(state, indent=2, default=str))

    return 0 if state.get("success") else 1


if __name__ == "__main__":
    sys.exit(main())
