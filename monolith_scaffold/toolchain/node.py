"""npm / npx invocations used to bootstrap the Node.js side of the project."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from monolith_scaffold.utils import run_command, run_command_streaming


class ToolchainError(Exception):
    """Raised when an npm or npx command exits with a non-zero status."""

    def __init__(
        self,
        message: str,
        command: str = "",
        stderr: str = "",
        returncode: int = 1,
    ):
        self.command = command
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(message)


class NodeToolchain:
    """Runs the package manager and framework generators inside a project root.

    Every method returns the combined stdout/stderr of the command so the
    caller can append it to the setup log.  When *on_output* is given, each
    line is passed to it while the command runs and the methods return an
    empty string instead.
    """

    def __init__(
        self,
        project_root: str | Path,
        on_output: Callable[[str], None] | None = None,
    ):
        self.project_root = Path(project_root)
        self.on_output = on_output

    async def init_manifest(self) -> str:
        """``npm init -y``: write a package.json with default fields."""
        return await self._run(
            ["npm", "init", "-y"], "Error initializing Node.js project."
        )

    async def install(self, packages: list[str]) -> str:
        return await self._run(
            ["npm", "install", *packages], "Error installing dependencies."
        )

    async def init_typescript(self) -> str:
        """``npx tsc --init``. The generated tsconfig.json is overwritten later."""
        return await self._run(
            ["npx", "tsc", "--init"], "Error setting up TypeScript."
        )

    async def create_react_app(self, target: str) -> str:
        return await self._run(
            [
                "npx",
                "--yes",
                "create-react-app",
                target,
                "--template",
                "typescript",
                "--use-npm",
            ],
            "Error creating the React frontend.",
        )

    async def _run(self, cmd: list[str], failure_message: str) -> str:
        if self.on_output is not None:
            returncode, stdout, stderr = await run_command_streaming(
                cmd, self.on_output, cwd=self.project_root
            )
        else:
            returncode, stdout, stderr = await run_command(cmd, cwd=self.project_root)
        if returncode != 0:
            raise ToolchainError(
                f"{failure_message} (exit {returncode}: {' '.join(cmd)})\n{stderr}".rstrip(),
                command=" ".join(cmd),
                stderr=stderr,
                returncode=returncode,
            )
        if self.on_output is not None:
            return ""
        return "\n".join(part for part in (stdout, stderr) if part)
