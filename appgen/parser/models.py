"""Pydantic v2 models for the generation document returned by the service.

The wire format uses camelCase (``appName``); Python code uses the snake_case
attribute names.  Both are accepted on input.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GeneratedFile(BaseModel):
    """A single file described by the service."""
    filename: str = Field(..., description="Path relative to the project directory")
    content: str = Field(default="", description="Full file content")


class GenerationResult(BaseModel):
    """The parsed app description: name, summary and ordered files."""

    model_config = ConfigDict(populate_by_name=True)

    app_name: Optional[str] = Field(
        default=None, alias="appName", description="App name, used as the directory name"
    )
    description: str = Field(default="", description="Brief description of the app")
    files: list[GeneratedFile] = Field(
        default_factory=list, description="Files in write order"
    )

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, value: Optional[str]) -> str:
        return "" if value is None else value

    @field_validator("files")
    @classmethod
    def _unique_filenames(cls, files: list[GeneratedFile]) -> list[GeneratedFile]:
        seen: set[str] = set()
        for item in files:
            if item.filename in seen:
                raise ValueError(f"duplicate filename: {item.filename}")
            seen.add(item.filename)
        return files

    @property
    def filenames(self) -> list[str]:
        return [f.filename for f in self.files]

    def to_wire(self) -> dict:
        """Dump using the camelCase keys the service produces."""
        return self.model_dump(by_alias=True)
