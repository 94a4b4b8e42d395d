"""Shared utility functions for the modular monolith scaffolder.

Provides async command execution, tool discovery on ``PATH``, the tee-style
setup log, and Rich-based console helpers.
"""

from __future__ import annotations

import asyncio
import os
import shutil
from collections.abc import Callable
from pathlib import Path

from rich.console import Console
from rich.rule import Rule
from rich.table import Table

console = Console()

# asyncio.StreamReader line limit for streamed tool output.
_STREAM_LINE_LIMIT = 1024 * 1024

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: float | None = None,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously and wait for it to finish.

    Args:
        cmd: Executable followed by its arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
            ``None`` waits for as long as the tool needs.
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  A timed-out process
        reports ``-1`` and a timeout message on stderr.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=str(cwd) if cwd else None,
        env=merged_env,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (-1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}")

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


async def run_command_streaming(
    cmd: list[str],
    on_line: Callable[[str], None],
    cwd: str | Path | None = None,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command, handing each output line to *on_line* as it arrives.

    Stdout and stderr are read concurrently, so a long ``npm install`` shows
    progress while it runs instead of after it exits.

    Args:
        cmd: Executable followed by its arguments.
        on_line: Called once per line (without the line terminator).
        cwd: Working directory for the child process.
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple with the full captured text,
        as :func:`run_command` returns it.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=str(cwd) if cwd else None,
        env=merged_env,
        limit=_STREAM_LINE_LIMIT,
    )
    assert process.stdout is not None and process.stderr is not None  # guaranteed by PIPE

    async def pump(stream: asyncio.StreamReader, lines: list[str]) -> None:
        while True:
            line_bytes = await stream.readline()
            if not line_bytes:
                break
            line = line_bytes.decode("utf-8", errors="replace").rstrip("\r\n")
            lines.append(line)
            on_line(line)

    stdout_lines: list[str] = []
    stderr_lines: list[str] = []
    try:
        await asyncio.gather(
            pump(process.stdout, stdout_lines),
            pump(process.stderr, stderr_lines),
        )
    except asyncio.CancelledError:
        process.kill()
        await process.wait()
        raise

    returncode = await process.wait()
    return (
        returncode,
        "\n".join(stdout_lines).strip(),
        "\n".join(stderr_lines).strip(),
    )


def find_missing_tools(tools: list[str]) -> list[str]:
    """Return the subset of *tools* that cannot be resolved on ``PATH``."""
    return [tool for tool in tools if shutil.which(tool) is None]


# ---------------------------------------------------------------------------
# Setup log
# ---------------------------------------------------------------------------


class SetupLog:
    """Tee every message to the console and to an append-only log file.

    The file copy is plain text: markup and colour are never written to it.
    The log is write-only; nothing in the scaffolder reads it back.  While
    the file's directory does not exist yet, messages go to the console only.
    """

    def __init__(self, path: str | Path, out: Console | None = None) -> None:
        self.path = Path(path)
        self.console = out or console

    def info(self, message: str) -> None:
        self._emit(message, style=None)

    def success(self, message: str) -> None:
        self._emit(message, style="green")

    def skipped(self, message: str) -> None:
        self._emit(message, style="dim")

    def error(self, message: str) -> None:
        self._emit(message, style="bold red")

    def output(self, text: str) -> None:
        """Record captured tool output (stdout/stderr of a child process)."""
        if text:
            self._emit(text, style="dim")

    def _emit(self, message: str, style: str | None) -> None:
        self.console.print(
            message, style=style, markup=False, highlight=False, emoji=False
        )
        self._append(message)

    def _append(self, message: str) -> None:
        # Console only until the log's directory exists; the log never creates it.
        if not self.path.parent.is_dir():
            return
        with self.path.open("a", encoding="utf-8") as fh:
            Console(file=fh, color_system=None, soft_wrap=True).print(
                message, markup=False, highlight=False, emoji=False
            )


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_step_header(number: int, name: str) -> None:
    """Print a full-width rule announcing a pipeline step."""
    console.print(
        Rule(f"[bold cyan] Step {number}: {name} [/bold cyan]", style="cyan")
    )


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")

