"""Modular monolith setup pipeline.

Runs the scaffolding steps strictly in order:

 1. Module directories    -- ``src/modules/<module>`` for each module.
 2. Shared directories    -- utilities, types, tests, scripts, assets.
 3. Git repository        -- ``git init`` at the project root.
 4. Placeholder files     -- empty entry point, Dockerfile, SQL scripts, ...
 5. Package manifest      -- ``npm init -y``.
 6. Dependencies          -- ``npm install`` of the runtime stack.
 7. TypeScript config     -- ``npx tsc --init`` then the fixed tsconfig.json.
 8. Static templates      -- backend stub, env files, Dockerfile, manifest, README.
 9. Frontend              -- create-react-app into the frontend module; a
                             failure is logged and the run continues.
10. Initial commit        -- only when the staged tree differs from HEAD.
11. Development branch    -- create and switch.

Any other failing step aborts the run.  Nothing is rolled back.

Usage::

    python -m monolith_scaffold.pipeline acme
    modmono-setup            # project named "modular-monolith"
"""

from __future__ import annotations

import asyncio
import sys
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any

from jinja2 import TemplateError
from rich.markup import escape

from monolith_scaffold.config import DEFAULT_PROJECT_NAME, ScaffoldConfig
from monolith_scaffold.scaffolder import ProjectGenerator
from monolith_scaffold.toolchain import GitError, GitRepository, NodeToolchain, ToolchainError
from monolith_scaffold.utils import (
    SetupLog,
    find_missing_tools,
    format_duration,
    print_error,
    print_step_header,
    print_success,
    print_summary_table,
    print_warning,
)

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class PrerequisiteError(Exception):
    """Raised when a required executable cannot be found on ``PATH``."""

    exit_code = 1

    def __init__(self, tools: list[str]) -> None:
        self.tools = tools
        super().__init__(f"Missing required tools: {', '.join(tools)}")


class StepError(Exception):
    """Raised when a pipeline step fails.

    ``exit_code`` carries the failing command's status when there is one,
    otherwise 1.
    """

    def __init__(self, step: str, message: str, exit_code: int = 1) -> None:
        self.step = step
        self.message = message
        self.exit_code = exit_code if exit_code > 0 else 1
        super().__init__(f"{step}: {message}")


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class Pipeline:
    """Drives the setup steps for one project.

    Attributes:
        config: Scaffold configuration.
        log: Tee to the console and the side-channel log file.
        state: Accumulates completed step names and run metadata.
    """

    def __init__(
        self,
        config: ScaffoldConfig,
        log: SetupLog | None = None,
        git: GitRepository | None = None,
        node: NodeToolchain | None = None,
    ) -> None:
        self.config = config
        self.log = log or SetupLog(config.log_path)
        self.generator = ProjectGenerator(config, self.log)
        self.git = git or GitRepository(config.project_root)
        self.node = node or NodeToolchain(config.project_root, on_output=self.log.output)
        self.state: dict[str, Any] = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "steps_completed": [],
            "committed": False,
            "frontend_failed": False,
            "success": False,
        }

    def steps(self) -> list[tuple[str, Callable[[], Awaitable[None]]]]:
        """The ordered ``(name, coroutine function)`` pairs of a run."""
        return [
            ("Module directories", self.create_module_directories),
            ("Shared directories", self.create_shared_directories),
            ("Git repository", self.init_repository),
            ("Placeholder files", self.create_placeholder_files),
            ("Package manifest", self.init_manifest),
            ("Dependencies", self.install_dependencies),
            ("TypeScript config", self.configure_typescript),
            ("Static templates", self.emit_templates),
            ("Frontend", self.scaffold_frontend),
            ("Initial commit", self.commit),
            ("Development branch", self.create_branch),
        ]

    async def run(self) -> dict[str, Any]:
        """Execute every step in order.

        Raises:
            PrerequisiteError: A required tool is missing. Raised before
                anything is created on disk.
            StepError: A step failed; later steps were not run.
        """
        started = time.monotonic()
        self.check_prerequisites()

        self.log.info(
            f"Setting up modular monolith for project: {self.config.project_name}"
        )

        for number, (name, step) in enumerate(self.steps(), start=1):
            print_step_header(number, name)
            try:
                await step()
            except (GitError, ToolchainError) as exc:
                raise StepError(name, str(exc), exc.returncode) from exc
            except (OSError, TemplateError) as exc:
                raise StepError(name, str(exc)) from exc
            self.state["steps_completed"].append(name)

        self.state["success"] = True
        self.state["duration"] = format_duration(time.monotonic() - started)
        self._print_checklist()
        return self.state

    # ------------------------------------------------------------------
    # Pre-flight
    # ------------------------------------------------------------------

    def check_prerequisites(self) -> None:
        missing = find_missing_tools(self.config.required_tools)
        for tool in missing:
            self.log.error(f"{tool} is required but it's not installed. Aborting.")
        if missing:
            raise PrerequisiteError(missing)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def create_module_directories(self) -> None:
        await self.generator.create_module_directories()

    async def create_shared_directories(self) -> None:
        await self.generator.create_shared_directories()

    async def init_repository(self) -> None:
        self.log.output(await self.git.init())

    async def create_placeholder_files(self) -> None:
        await self.generator.create_placeholder_files()

    async def init_manifest(self) -> None:
        self.log.output(await self.node.init_manifest())

    async def install_dependencies(self) -> None:
        self.log.output(await self.node.install(self.config.dependencies))

    async def configure_typescript(self) -> None:
        self.log.output(await self.node.init_typescript())
        await self.generator.write_tsconfig()

    async def emit_templates(self) -> None:
        await self.generator.emit_static_templates()

    async def scaffold_frontend(self) -> None:
        """Run create-react-app; a nonzero exit is logged but does not stop the run.

        create-react-app refuses an already populated target, so this fails on
        every re-run.
        """
        try:
            self.log.output(await self.node.create_react_app("src/modules/frontend"))
        except ToolchainError as exc:
            self.log.error(str(exc))
            self.state["frontend_failed"] = True

    async def commit(self) -> None:
        """Stage everything; commit only if the index differs from HEAD."""
        self.log.output(await self.git.add_all())
        if not await self.git.has_changes_against_head():
            self.log.info("No changes to commit.")
            return
        self.log.output(await self.git.commit(self.config.git.commit_message))
        self.state["committed"] = True

    async def create_branch(self) -> None:
        self.log.output(await self.git.create_branch(self.config.git.development_branch))

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _print_checklist(self) -> None:
        branch = self.config.git.development_branch
        for line in (
            "",
            f"Project setup complete. Switched to {branch} branch.",
            "",
            "Next steps:",
            "  - Review .env and set DB_CONNECTION_STRING for your database.",
            "  - Fill in scripts/db_init.sql and scripts/tables_init.sql.",
            f"  - Build the image: docker build -t {self.config.project_name} .",
            "  - Deploy: kubectl apply -f kubernetes-config.yaml",
            "",
        ):
            self.log.info(line)

        print_summary_table(
            {
                "Project root": str(self.config.project_root),
                "Modules": ", ".join(self.config.modules),
                "Branch": branch,
                "Frontend": "failed" if self.state["frontend_failed"] else "created",
                "Initial commit": "created" if self.state["committed"] else "skipped",
                "Duration": self.state["duration"],
            },
            title="Setup Summary",
        )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``modmono-setup``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="modmono-setup",
        description="Scaffold a modular monolith project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  modmono-setup\n"
            "  modmono-setup my-project\n"
        ),
    )
    parser.add_argument(
        "project_name",
        nargs="?",
        default=DEFAULT_PROJECT_NAME,
        help=f"Name of the project directory (default: {DEFAULT_PROJECT_NAME})",
    )
    args = parser.parse_args(argv)

    config = ScaffoldConfig.from_env()
    config.project_name = args.project_name

    pipeline = Pipeline(config)
    log_path = escape(str(config.log_path))
    try:
        state = asyncio.run(pipeline.run())
    except PrerequisiteError as exc:
        sys.exit(exc.exit_code)
    except StepError as exc:
        pipeline.log.error(f"Error occurred in step '{exc.step}': {exc.message}")
        print_error(f"Setup aborted. Full log: {log_path}")
        sys.exit(exc.exit_code)

    if state.get("frontend_failed"):
        print_warning(f"Frontend scaffolding failed; see {log_path}")
    print_success(f"Scaffolded {escape(str(config.project_root))}")


if __name__ == "__main__":
    main()
