"""Write a parsed ``GenerationResult`` to disk as a project directory.

The materializer owns every filesystem write of a request: it creates the
output root and the project directory, writes the described files in order
and finishes with a generated ``README.md``.  Filenames are validated before
the first write, but there is no atomicity across the multi-file write, so an
``OSError`` or an unencodable content string partway through leaves a partially written project behind.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Callable, Optional

from pydantic import BaseModel, Field

from appgen.errors import MaterializeError
from appgen.parser.models import GenerationResult
from appgen.scaffolder.templates import TemplateRenderer
from appgen.utils import ensure_dir, sanitize_name, write_text_file

DEFAULT_APP_NAME = "my-app"
README_NAME = "README.md"


class ProjectArtifact(BaseModel):
    """The on-disk realization of one generation."""

    name: str = Field(..., description="Project directory name")
    path: Path = Field(..., description="Project directory")
    files: list[str] = Field(default_factory=list, description="Written filenames in order")
    readme_path: Path = Field(..., description="Generated README")


def project_dir_name(app_name: Optional[str]) -> str:
    """Derive the project directory name, falling back to ``my-app``."""
    if not app_name:
        return DEFAULT_APP_NAME
    return sanitize_name(app_name) or DEFAULT_APP_NAME


def safe_relative_path(filename: str) -> PurePosixPath:
    """Validate a described filename and return it as a relative path.

    Raises:
        MaterializeError: For empty, absolute or parent-escaping names, or
            names holding a NUL byte.
    """
    if "\x00" in filename:
        raise MaterializeError(f"Filename contains a NUL byte: {filename!r}", path=filename)
    normalized = filename.replace("\\", "/").strip()
    path = PurePosixPath(normalized)
    if not normalized or normalized in (".", "./"):
        raise MaterializeError("Empty filename in generated project", path=filename)
    if path.is_absolute() or (len(normalized) > 1 and normalized[1] == ":"):
        raise MaterializeError(f"Absolute filename not allowed: {filename}", path=filename)
    if ".." in path.parts:
        raise MaterializeError(f"Filename escapes the project directory: {filename}", path=filename)
    return path


class ProjectMaterializer:
    """Creates ``<output_root>/<app name>/`` and writes the project into it."""

    def __init__(
        self,
        output_root: str | Path = Path("projects"),
        renderer: Optional[TemplateRenderer] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.output_root = Path(output_root)
        self.renderer = renderer or TemplateRenderer()
        self.clock = clock

    def render_readme(self, result: GenerationResult, name: str) -> str:
        return self.renderer.render_readme(
            {
                "app_name": result.app_name or name,
                "description": result.description,
                "files": result.filenames,
                "generated_on": self.clock().date().isoformat(),
            }
        )

    async def materialize(self, result: GenerationResult) -> ProjectArtifact:
        """Write every file of *result* and the README.

        Returns:
            The ``ProjectArtifact`` describing what was written.

        Raises:
            MaterializeError: On invalid filenames or any filesystem error.
        """
        name = project_dir_name(result.app_name)
        targets = [(safe_relative_path(f.filename), f.content) for f in result.files]
        project_path = self.output_root / name
        readme = self.render_readme(result, name)

        written: list[str] = []
        try:
            await asyncio.to_thread(ensure_dir, self.output_root)
            await asyncio.to_thread(ensure_dir, project_path)
            for relative, content in targets:
                await asyncio.to_thread(
                    write_text_file, project_path.joinpath(*relative.parts), content
                )
                written.append(str(relative))
            readme_path = project_path / README_NAME
            await asyncio.to_thread(write_text_file, readme_path, readme)
        except (OSError, ValueError) as exc:
            failed = getattr(exc, "filename", None) or project_path
            raise MaterializeError(
                f"Could not write project files ({len(written)} of {len(targets)} written): {exc}",
                path=str(failed),
            ) from exc

        return ProjectArtifact(
            name=name,
            path=project_path,
            files=written,
            readme_path=readme_path,
        )
