"""Git operations for the scaffolded repository.

Covers the handful of commands the scaffolder needs: initialising the
repository, staging everything, committing only when the index differs from
HEAD, and switching to the development branch.
"""

from __future__ import annotations

from pathlib import Path

from monolith_scaffold.utils import run_command


class GitError(Exception):
    """Raised when a git command exits with a non-zero status."""

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


async def _run_git(*args: str, cwd: str | Path | None = None) -> tuple[str, str]:
    """Run a git command and return ``(stdout, stderr)``.

    Raises GitError if the command exits with a non-zero code.
    """
    cmd = ["git", *args]
    cmd_str = " ".join(cmd)

    returncode, stdout, stderr = await run_command(cmd, cwd=cwd)
    if returncode != 0:
        raise GitError(
            f"Git command failed (exit {returncode}): {cmd_str}\n{stderr}",
            command=cmd_str,
            stderr=stderr,
            returncode=returncode,
        )
    return stdout, stderr


class GitRepository:
    """Thin async wrapper around the git CLI for one working tree."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def init(self) -> str:
        """Run ``git init``. Re-initialising an existing repository is allowed."""
        stdout, _ = await _run_git("init", cwd=self.path)
        return stdout

    async def add_all(self) -> str:
        stdout, _ = await _run_git("add", ".", cwd=self.path)
        return stdout

    async def has_changes_against_head(self) -> bool:
        """Return ``True`` unless the staged tree is identical to HEAD.

        ``git diff-index --quiet HEAD --`` exits 0 only when nothing differs.
        Any other status, including the missing-HEAD error of a repository
        without commits, counts as "changed".
        """
        returncode, _, _ = await run_command(
            ["git", "diff-index", "--quiet", "HEAD", "--"], cwd=self.path
        )
        return returncode != 0

    async def commit(self, message: str) -> str:
        stdout, _ = await _run_git("commit", "-m", message, cwd=self.path)
        return stdout

    async def create_branch(self, name: str) -> str:
        """Create *name* and switch to it. Fails if the branch already exists."""
        stdout, stderr = await _run_git("checkout", "-b", name, cwd=self.path)
        # git reports the switch on stderr
        return "\n".join(part for part in (stdout, stderr) if part)

    async def current_branch(self) -> str:
        stdout, _ = await _run_git("rev-parse", "--abbrev-ref", "HEAD", cwd=self.path)
        return stdout

    async def commit_count(self) -> int:
        """Number of commits reachable from HEAD (0 for an unborn branch)."""
        returncode, stdout, _ = await run_command(
            ["git", "rev-list", "--count", "HEAD"], cwd=self.path
        )
        if returncode != 0:
            return 0
        return int(stdout or "0")
