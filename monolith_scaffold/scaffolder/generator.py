"""Filesystem side of the scaffold: directories, placeholder files, templates.

Directory and placeholder-file creation is idempotent (existing paths are
reported and left alone).  Template emission is not: every templated file is
rewritten on each run.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from monolith_scaffold.config import ScaffoldConfig
from monolith_scaffold.utils import SetupLog

from .deploy_gen import DeploymentGenerator
from .templates import TemplateRenderer


@dataclass
class ScaffoldEntry:
    """Outcome of one idempotent create: the path and whether it was new."""

    path: Path
    created: bool


class ProjectGenerator:
    """Creates the project tree and writes the templated files.

    The git and npm steps live in :mod:`monolith_scaffold.toolchain`; this
    class only touches the filesystem.
    """

    def __init__(self, config: ScaffoldConfig, log: SetupLog) -> None:
        self.config = config
        self.log = log
        self.renderer = TemplateRenderer()
        self.deploy_gen = DeploymentGenerator(self.renderer)

    @property
    def root(self) -> Path:
        return self.config.project_root

    # -- Context building --------------------------------------------------

    def build_context(self) -> dict[str, Any]:
        """Build the Jinja2 template context from the config."""
        deployment = self.config.deployment
        return {
            "project_name": self.config.project_name,
            "app_port": deployment.app_port,
            "node_image": deployment.node_image,
            "replicas": deployment.replicas,
            "db_connection_string": deployment.db_connection_string,
        }

    # -- Directory structure -----------------------------------------------

    async def create_module_directories(self) -> list[ScaffoldEntry]:
        """Ensure ``src/modules/<module>`` exists for every configured module."""
        return [await self._ensure_directory(d) for d in self.config.module_dirs]

    async def create_shared_directories(self) -> list[ScaffoldEntry]:
        """Ensure the shared, test, script and asset directories exist."""
        return [await self._ensure_directory(d) for d in self.config.shared_dirs]

    async def _ensure_directory(self, path: Path) -> ScaffoldEntry:
        if path.is_dir():
            self.log.skipped(f"Directory already exists: {path}")
            return ScaffoldEntry(path, created=False)
        await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)
        self.log.success(f"Created directory: {path}")
        return ScaffoldEntry(path, created=True)

    # -- Placeholder files -------------------------------------------------

    async def create_placeholder_files(self) -> list[ScaffoldEntry]:
        """Touch every placeholder file that does not exist yet.

        Paths are logged relative to the project root.
        """
        entries: list[ScaffoldEntry] = []
        for name in self.config.placeholder_files:
            path = self.root / name
            if path.is_file():
                self.log.skipped(f"File already exists: {name}")
                entries.append(ScaffoldEntry(path, created=False))
                continue
            await asyncio.to_thread(_touch, path)
            self.log.success(f"Created file: {name}")
            entries.append(ScaffoldEntry(path, created=True))
        return entries

    # -- Templated files ---------------------------------------------------

    async def write_tsconfig(self) -> Path:
        """Overwrite whatever ``tsc --init`` produced with the fixed tsconfig."""
        path = await self.renderer.render_to_file(
            "tsconfig.json.j2", self.root / "tsconfig.json", self.build_context()
        )
        self.log.success("Wrote tsconfig.json")
        return path

    async def emit_static_templates(self) -> dict[str, Path]:
        """Write the backend stub, env files, deployment artifacts and README.

        Each file is overwritten unconditionally, including on re-runs.
        """
        ctx = self.build_context()
        written: dict[str, Path] = {}

        written["backend"] = await self.renderer.render_to_file(
            "backend_index.ts.j2",
            self.root / "src" / "modules" / "backend" / "index.ts",
            ctx,
        )
        for env_name in (".env", "sample.env"):
            written[env_name] = await self.renderer.render_to_file(
                "env.j2", self.root / env_name, ctx
            )
        written.update(await self.deploy_gen.generate_all(self.root, ctx))
        written["readme"] = await self.renderer.render_to_file(
            "README.md.j2", self.root / "README.md", ctx
        )

        for path in written.values():
            self.log.success(f"Wrote {path.relative_to(self.root)}")
        return written


def _touch(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch()
