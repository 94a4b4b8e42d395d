"""Container and cluster artifacts: the Dockerfile and Kubernetes manifest.

Both files are rendered from ``Dockerfile.j2`` and
``kubernetes-config.yaml.j2`` and always overwrite whatever placeholder
already sits at the project root.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .templates import TemplateRenderer


class DeploymentGenerator:
    """Generates the Dockerfile and the Kubernetes Deployment manifest."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    async def generate_all(
        self,
        project_root: Path,
        context: dict[str, Any],
    ) -> dict[str, Path]:
        """Write both deployment artifacts into *project_root*.

        Args:
            project_root: Root of the scaffolded project.
            context: Template context (project_name, app_port, node_image,
                replicas).

        Returns:
            ``{"dockerfile": Path(...), "kubernetes": Path(...)}``.
        """
        return {
            "dockerfile": await self.generate_dockerfile(project_root, context),
            "kubernetes": await self.generate_kubernetes_manifest(
                project_root, context
            ),
        }

    async def generate_dockerfile(
        self, project_root: Path, context: dict[str, Any]
    ) -> Path:
        return await self.renderer.render_to_file(
            "Dockerfile.j2", project_root / "Dockerfile", context
        )

    async def generate_kubernetes_manifest(
        self, project_root: Path, context: dict[str, Any]
    ) -> Path:
        return await self.renderer.render_to_file(
            "kubernetes-config.yaml.j2",
            project_root / "kubernetes-config.yaml",
            context,
        )
