"""Shared pytest fixtures for the scaffolder test suite.

Provides reusable fixtures for:
- Scaffold configurations rooted in a temporary directory
- A SetupLog whose console output is swallowed
- Isolated git identity/config for tests that run real git
- Mock subprocess helpers
"""

from __future__ import annotations

import io
import os
import subprocess
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from rich.console import Console

from monolith_scaffold.config import ScaffoldConfig
from monolith_scaffold.utils import SetupLog

# ---------------------------------------------------------------------------
# Config & log
# ---------------------------------------------------------------------------

@pytest.fixture
def scaffold_config(tmp_path: Path) -> ScaffoldConfig:
    """Config for a project named ``acme`` scaffolded inside ``tmp_path``."""
    return ScaffoldConfig(project_name="acme", output_dir=tmp_path)


@pytest.fixture
def quiet_log(scaffold_config: ScaffoldConfig) -> SetupLog:
    """SetupLog writing to the config's log file with console output captured."""
    return SetupLog(scaffold_config.log_path, out=Console(file=io.StringIO()))


# ---------------------------------------------------------------------------
# Git
# ---------------------------------------------------------------------------

@pytest.fixture
def git_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Give git a deterministic identity and ignore the user's global config."""
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Scaffold Test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@scaffold.local")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Scaffold Test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@scaffold.local")


@pytest.fixture
def tmp_git_repo(tmp_path: Path, git_env: None) -> Path:
    """Temporary git repository with one initial commit."""
    repo_dir = tmp_path / "test-repo"
    repo_dir.mkdir()
    subprocess.run(["git", "init"], cwd=repo_dir, check=True, capture_output=True)
    readme = repo_dir / "README.md"
    readme.write_text("# Test Project\n", encoding="utf-8")
    subprocess.run(["git", "add", "."], cwd=repo_dir, check=True, capture_output=True)
    subprocess.run(
        ["git", "commit", "-m", "Initial commit"],
        cwd=repo_dir, check=True, capture_output=True,
    )
    yield repo_dir


# ---------------------------------------------------------------------------
# Mock Subprocess (generic)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


@pytest.fixture
def fake_node() -> MagicMock:
    """A NodeToolchain stand-in whose commands all succeed without running npm."""
    node = MagicMock()
    node.init_manifest = AsyncMock(return_value="Wrote to package.json")
    node.install = AsyncMock(return_value="added 6 packages")
    node.init_typescript = AsyncMock(return_value="Created a new tsconfig.json")
    node.create_react_app = AsyncMock(return_value="Success! Created frontend")
    return node
