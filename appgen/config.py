"""App generator configuration.

Typed configuration for the CLI and the generation pipeline.  All settings use
Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from appgen.errors import ConfigError

API_KEY_ENV = "GEMINI_API_KEY"


class GeminiConfig(BaseModel):
    """Configuration for the Gemini completion service."""

    api_key: str = Field(default="", repr=False)
    model: str = Field(default="gemini-2.0-flash-001")
    base_url: str = Field(default="https://generativelanguage.googleapis.com/v1beta")
    timeout: Optional[float] = Field(
        default=None, gt=0, description="Per-request timeout in seconds; None waits forever"
    )


class RunConfig(BaseModel):
    """Tuning knobs for the interactive and batch drivers."""

    example_delay: float = Field(
        default=1.0, ge=0, description="Pause in seconds between example generations"
    )
    preview_chars: int = Field(
        default=200, ge=0, description="How much of an unparseable response to echo"
    )


class Config(BaseModel):
    """Global app generator configuration.

    Instances are typically created once by the CLI entry point and then
    passed to ``AppGenerator`` and the client it uses.
    """

    output_dir: Path = Field(default=Path("projects"))
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    run: RunConfig = Field(default_factory=RunConfig)

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def require_api_key(self) -> str:
        """Return the API key or raise ``ConfigError`` when it is missing."""
        key = self.gemini.api_key.strip()
        if not key:
            raise ConfigError(f"{API_KEY_ENV} not found in environment variables")
        return key

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file (the API key is left out)."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(
            self.model_dump_json(indent=2, exclude={"gemini": {"api_key"}}),
            encoding="utf-8",
        )
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables:
            GEMINI_API_KEY (required at run time), APPGEN_MODEL,
            APPGEN_API_BASE_URL, APPGEN_TIMEOUT, APPGEN_OUTPUT_DIR,
            APPGEN_EXAMPLE_DELAY, APPGEN_PREVIEW_CHARS.
        """
        gemini_kwargs: dict[str, Any] = {"api_key": os.environ.get(API_KEY_ENV, "")}
        if os.environ.get("APPGEN_MODEL"):
            gemini_kwargs["model"] = os.environ["APPGEN_MODEL"]
        if os.environ.get("APPGEN_API_BASE_URL"):
            gemini_kwargs["base_url"] = os.environ["APPGEN_API_BASE_URL"]
        if os.environ.get("APPGEN_TIMEOUT"):
            gemini_kwargs["timeout"] = float(os.environ["APPGEN_TIMEOUT"])

        run_kwargs: dict[str, Any] = {}
        if os.environ.get("APPGEN_EXAMPLE_DELAY"):
            run_kwargs["example_delay"] = float(os.environ["APPGEN_EXAMPLE_DELAY"])
        if os.environ.get("APPGEN_PREVIEW_CHARS"):
            run_kwargs["preview_chars"] = int(os.environ["APPGEN_PREVIEW_CHARS"])

        return cls(
            output_dir=Path(os.environ.get("APPGEN_OUTPUT_DIR", "projects")),
            gemini=GeminiConfig(**gemini_kwargs),
            run=RunConfig(**run_kwargs),
        )
