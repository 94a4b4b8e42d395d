"""Tests for npm / npx invocations (monolith_scaffold.toolchain.node).

All subprocesses are mocked; nothing here needs Node.js installed.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from monolith_scaffold.toolchain.node import NodeToolchain, ToolchainError

pytestmark = pytest.mark.unit


@pytest.fixture
def toolchain(tmp_path: Path) -> NodeToolchain:
    return NodeToolchain(tmp_path)


class TestCommands:
    async def test_init_manifest(self, toolchain, tmp_path, mock_subprocess):
        proc = mock_subprocess(stdout="Wrote to package.json")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)) as exec_:
            out = await toolchain.init_manifest()
        assert out == "Wrote to package.json"
        assert exec_.call_args.args == ("npm", "init", "-y")
        assert exec_.call_args.kwargs["cwd"] == str(tmp_path)

    async def test_install(self, toolchain, mock_subprocess):
        proc = mock_subprocess(stdout="added 6 packages")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)) as exec_:
            await toolchain.install(["express", "react", "pg"])
        assert exec_.call_args.args == ("npm", "install", "express", "react", "pg")

    async def test_init_typescript(self, toolchain, mock_subprocess):
        proc = mock_subprocess(stdout="Created a new tsconfig.json")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)) as exec_:
            await toolchain.init_typescript()
        assert exec_.call_args.args == ("npx", "tsc", "--init")

    async def test_create_react_app(self, toolchain, mock_subprocess):
        proc = mock_subprocess(stdout="Success!")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)) as exec_:
            await toolchain.create_react_app("src/modules/frontend")
        args = exec_.call_args.args
        assert args[:3] == ("npx", "--yes", "create-react-app")
        assert "src/modules/frontend" in args
        assert args[-3:] == ("--template", "typescript", "--use-npm")

    async def test_output_combines_stdout_and_stderr(self, toolchain, mock_subprocess):
        proc = mock_subprocess(stdout="added 6 packages", stderr="npm WARN deprecated")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            out = await toolchain.install(["express"])
        assert out == "added 6 packages\nnpm WARN deprecated"


class TestFailures:
    async def test_init_failure(self, toolchain, mock_subprocess):
        proc = mock_subprocess(stderr="npm ERR! invalid package.json", returncode=1)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            with pytest.raises(ToolchainError, match="Error initializing Node.js project.") as exc_info:
                await toolchain.init_manifest()
        assert exc_info.value.command == "npm init -y"
        assert exc_info.value.returncode == 1

    async def test_install_failure_keeps_status(self, toolchain, mock_subprocess):
        proc = mock_subprocess(stderr="npm ERR! network", returncode=243)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            with pytest.raises(ToolchainError, match="Error installing dependencies.") as exc_info:
                await toolchain.install(["express"])
        assert exc_info.value.returncode == 243
        assert exc_info.value.stderr == "npm ERR! network"

    async def test_typescript_failure(self, toolchain, mock_subprocess):
        proc = mock_subprocess(returncode=2)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            with pytest.raises(ToolchainError, match="Error setting up TypeScript."):
                await toolchain.init_typescript()

    async def test_missing_executable_propagates(self, toolchain):
        with patch(
            "asyncio.create_subprocess_exec",
            AsyncMock(side_effect=FileNotFoundError("npm")),
        ):
            with pytest.raises(FileNotFoundError):
                await toolchain.init_manifest()


class TestStreaming:
    async def test_lines_forwarded_while_running(self, tmp_path):
        seen: list[str] = []
        toolchain = NodeToolchain(tmp_path, on_output=seen.append)

        async def fake_stream(cmd, on_line, cwd=None, env=None):
            on_line("added 6 packages")
            return (0, "added 6 packages", "")

        with patch(
            "monolith_scaffold.toolchain.node.run_command_streaming",
            AsyncMock(side_effect=fake_stream),
        ) as stream:
            out = await toolchain.install(["express"])

        assert seen == ["added 6 packages"]
        assert out == ""
        assert stream.call_args.args[0] == ["npm", "install", "express"]
        assert stream.call_args.kwargs["cwd"] == tmp_path

    async def test_streamed_failure_still_raises(self, tmp_path):
        toolchain = NodeToolchain(tmp_path, on_output=lambda line: None)
        with patch(
            "monolith_scaffold.toolchain.node.run_command_streaming",
            AsyncMock(return_value=(243, "", "npm ERR! network")),
        ):
            with pytest.raises(ToolchainError, match="Error installing dependencies.") as exc_info:
                await toolchain.install(["express"])
        assert exc_info.value.returncode == 243
