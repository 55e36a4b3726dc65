"""Project materialization -- writes generated apps to disk.

Quick usage::

    from appgen.scaffolder import ProjectMaterializer

    materializer = ProjectMaterializer("projects")
    artifact = await materializer.materialize(result)
    print(artifact.path)
"""

from appgen.scaffolder.materializer import (
    ProjectArtifact,
    ProjectMaterializer,
    project_dir_name,
    safe_relative_path,
)
from appgen.scaffolder.templates import TemplateRenderer

__all__ = [
    "ProjectArtifact",
    "ProjectMaterializer",
    "TemplateRenderer",
    "project_dir_name",
    "safe_relative_path",
]
