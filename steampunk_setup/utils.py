"""Shared utility functions for steampunk-setup.

Provides async command execution, detached process spawning, JSON I/O,
Rich-based console reporting (recorded so it can be saved as the run log),
duration formatting, and URL polling.
"""

from __future__ import annotations

import asyncio
import json
import os
import subprocess
import time
from pathlib import Path
from typing import Any

import httpx
from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

# Everything printed during a run is recorded and mirrored to the run log
# file (see start_log / flush_log).
console = Console(record=True)

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


def format_command(cmd: list[str]) -> str:
    """Return a copy-pasteable rendering of *cmd*."""
    return " ".join(arg if arg and " " not in arg else repr(arg) for arg in cmd)


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    env: dict[str, str] | None = None,
    timeout: float | None = None,
    echo: bool = True,
) -> tuple[int, str, str]:
    """Run an external command and wait for it to exit.

    Args:
        cmd: Program and arguments (no shell is involved).
        cwd: Working directory for the child process.
        env: Optional extra environment variables merged on top of ``os.environ``.
        timeout: Maximum wall-clock seconds. ``None`` waits indefinitely.
        echo: Print the command line and its captured output to the console.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple. A program that cannot be
        found yields return code 127.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    if echo:
        where = f" [dim](in {cwd})[/dim]" if cwd else ""
        console.print(f"[bold blue]$[/bold blue] {escape(format_command(cmd))}{where}", highlight=False)
        flush_log()

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )
    except FileNotFoundError:
        return (127, "", f"command not found: {cmd[0]}")

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (-1, "", f"Command timed out after {timeout}s: {format_command(cmd)}")

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()

    if echo:
        for stream in (stdout_str, stderr_str):
            if stream:
                console.print(stream, style="dim", markup=False, highlight=False)
        flush_log()

    return (process.returncode or 0, stdout_str, stderr_str)


def spawn_detached(
    cmd: list[str],
    cwd: str | Path | None = None,
    env: dict[str, str] | None = None,
) -> int:
    """Start *cmd* in its own session and return its PID without waiting."""
    merged_env = {**os.environ, **env} if env else None
    console.print(f"[bold blue]$[/bold blue] {escape(format_command(cmd))} &", highlight=False)
    flush_log()
    process = subprocess.Popen(
        cmd,
        cwd=str(cwd) if cwd else None,
        env=merged_env,
        stdin=subprocess.DEVNULL,
        start_new_session=True,
    )
    return process.pid


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file that holds a top-level object.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the top-level value is not an object.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return data


def save_json(data: dict[str, Any], path: str | Path) -> None:
    """Save data as 2-space indented JSON with a trailing newline."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Render *seconds* as ``3.7s``, ``1m 5s`` or ``1h 1m 1s``.

    Sub-minute durations keep one decimal; longer ones are truncated to whole
    seconds. Negative input is clamped to zero.
    """
    seconds = max(seconds, 0.0)
    if seconds < 60:
        return f"{seconds:.1f}s"

    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_step_header(index: int, total: int, description: str) -> None:
    """Print a full-width rule announcing pipeline step *index* of *total*."""
    console.print()
    console.print(
        Rule(f"[bold bright_yellow] {index}/{total} {description} [/bold bright_yellow]", style="yellow")
    )


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]", highlight=False)


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]", highlight=False)


# ---------------------------------------------------------------------------
# Run log
# ---------------------------------------------------------------------------

# File the recorded console is mirrored to while a run is active.
_log_path: Path | None = None


def reset_log() -> None:
    """Drop everything recorded so far so the next log starts empty."""
    console.export_text(clear=True)


def start_log(path: str | Path | None) -> Path | None:
    """Begin a fresh run log at *path*, truncating any previous file.

    With ``None`` the console is still reset but nothing is written to disk.
    """
    global _log_path
    reset_log()
    _log_path = Path(path) if path is not None else None
    if _log_path is not None:
        _log_path.parent.mkdir(parents=True, exist_ok=True)
        _log_path.write_text("", encoding="utf-8")
    return _log_path


def flush_log() -> None:
    """Rewrite the active log file with everything recorded so far."""
    if _log_path is not None:
        console.save_text(str(_log_path), clear=False)


def end_log() -> Path | None:
    """Flush the active log one last time and detach it."""
    global _log_path
    flush_log()
    path, _log_path = _log_path, None
    return path


# ---------------------------------------------------------------------------
# URL polling
# ---------------------------------------------------------------------------


async def wait_for_url(
    url: str,
    timeout: int = 300,
    interval: int = 5,
) -> bool:
    """Poll *url* until it answers HTTP 200 or *timeout* seconds pass.

    Returns:
        ``True`` if a 200 response was received within the timeout window,
        ``False`` otherwise.
    """
    deadline = time.monotonic() + timeout

    async with httpx.AsyncClient(
        timeout=httpx.Timeout(10.0, connect=5.0), follow_redirects=True
    ) as client:
        while time.monotonic() < deadline:
            try:
                response = await client.get(url)
                if response.status_code == 200:
                    return True
            except httpx.HTTPError:
                pass

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            await asyncio.sleep(min(interval, remaining))

    return False
