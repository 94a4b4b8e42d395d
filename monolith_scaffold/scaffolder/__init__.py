"""Filesystem scaffolding for a modular monolith project.

Quick usage::

    from monolith_scaffold.config import ScaffoldConfig
    from monolith_scaffold.scaffolder import ProjectGenerator
    from monolith_scaffold.utils import SetupLog

    config = ScaffoldConfig(project_name="acme")
    generator = ProjectGenerator(config, SetupLog(config.log_path))
    await generator.create_module_directories()
    await generator.emit_static_templates()
"""

from monolith_scaffold.scaffolder.deploy_gen import DeploymentGenerator
from monolith_scaffold.scaffolder.generator import ProjectGenerator, ScaffoldEntry
from monolith_scaffold.scaffolder.templates import TemplateRenderer

__all__ = [
    "DeploymentGenerator",
    "ProjectGenerator",
    "ScaffoldEntry",
    "TemplateRenderer",
]
