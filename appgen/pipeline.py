"""App generator pipeline and command-line driver.

Each request runs through the same five steps:

1. SAFETY    -- reject requests that match the denylist.
2. COMPOSE   -- wrap the request in the instruction template.
3. GENERATE  -- one call to the completion service.
4. EXTRACT   -- strip code fences and parse the JSON app description.
5. WRITE     -- materialize the files under ``projects/<app name>/``.

Failures of any step are reported on the console and returned as a failed
``GenerationOutcome``; they never stop the interactive loop or the example
batch.

Usage::

    appgen                              # interactive mode
    appgen --interactive                # same
    appgen --examples                   # run the four example requests
    appgen create a pomodoro timer      # single request
"""

from __future__ import annotations

import asyncio
import contextlib
import sys
import threading
import time
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence

from dotenv import load_dotenv
from pydantic import BaseModel, Field
from rich.markup import escape

from appgen.config import API_KEY_ENV, Config
from appgen.errors import (
    AppGenError,
    ConfigError,
    ErrorKind,
    ParseError,
    ServiceError,
    UnsafeInputError,
)
from appgen.gemini_client import CompletionClient, GeminiClient
from appgen.parser import extract
from appgen.prompts import compose_prompt
from appgen.safety import SafetyFilter
from appgen.scaffolder import ProjectArtifact, ProjectMaterializer
from appgen.utils import (
    console,
    format_duration,
    preview,
    print_banner,
    print_error,
    print_separator,
    print_success,
    print_warning,
)
from appgen.worker import RequestWorker

EXAMPLE_REQUESTS: tuple[str, ...] = (
    "create a todo app with dark mode",
    "create a simple calculator",
    "create a weather dashboard",
    "create a notes app with categories",
)

EXIT_KEYWORDS = frozenset({"exit", "quit", "q"})

INPUT_PROMPT = "What app would you like to create? "


class Mode(str, Enum):
    """Driver mode selected from the command line."""
    INTERACTIVE = "interactive"
    EXAMPLES = "examples"
    SINGLE = "single"


class GenerationOutcome(BaseModel):
    """Structured result of one request, successful or not."""

    success: bool
    request: str
    project_name: Optional[str] = None
    project_path: Optional[Path] = None
    files: list[str] = Field(default_factory=list)
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, request: str, exc: AppGenError) -> "GenerationOutcome":
        return cls(success=False, request=request, error_kind=exc.kind, error=str(exc))

    @classmethod
    def from_artifact(cls, request: str, artifact: ProjectArtifact) -> "GenerationOutcome":
        return cls(
            success=True,
            request=request,
            project_name=artifact.name,
            project_path=artifact.path,
            files=artifact.files,
        )


async def _read_line(ask: Callable[[str], str], prompt: str) -> str:
    """Call the blocking *ask* on a daemon thread and await its answer.

    Cancelling the await (Ctrl-C under ``asyncio.run``) returns immediately;
    the thread stays parked in ``ask`` but never holds up interpreter exit.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future = loop.create_future()

    def _settle(result: Optional[str], error: Optional[Exception]) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)

    def _target() -> None:
        try:
            answer = ask(prompt)
        except Exception as exc:  # noqa: BLE001
            outcome: tuple[Optional[str], Optional[Exception]] = (None, exc)
        else:
            outcome = (answer, None)
        # loop already closed after a cancelled prompt
        with contextlib.suppress(RuntimeError):
            loop.call_soon_threadsafe(_settle, *outcome)

    threading.Thread(target=_target, name="appgen-input", daemon=True).start()
    return await future


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class AppGenerator:
    """Runs requests through the generation pipeline.

    Attributes:
        client: Completion client; anything with ``async complete(prompt)``.
        config: Global configuration.
        safety: Denylist filter applied before any external call.
        materializer: Writes parsed results to ``config.output_dir``.
    """

    def __init__(
        self,
        client: CompletionClient,
        config: Optional[Config] = None,
        safety: Optional[SafetyFilter] = None,
        materializer: Optional[ProjectMaterializer] = None,
    ) -> None:
        self.client = client
        self.config = config or Config()
        self.safety = safety or SafetyFilter()
        self.materializer = materializer or ProjectMaterializer(self.config.output_dir)

    # ------------------------------------------------------------------
    # Single request
    # ------------------------------------------------------------------

    async def create_app(self, request: str) -> GenerationOutcome:
        """Process one request end to end and report the outcome."""
        try:
            verdict = self.safety.check(request)
            if not verdict.safe:
                raise UnsafeInputError(verdict.rule.pattern, verdict.rule.reason)

            start = time.monotonic()
            console.print(f'\nCreating app based on: "{escape(request)}"')
            console.print("[dim]Generating files...[/dim]\n")

            raw_text = await self.client.complete(compose_prompt(request))
            result = extract(raw_text)
            artifact = await self.materializer.materialize(result)

        except UnsafeInputError as exc:
            print_error("Unsafe or forbidden command detected in your request.")
            print_warning(
                f'Please avoid using dangerous commands or flags like "sudo", "-f", "rm", etc. '
                f"(matched {escape(repr(exc.pattern))})"
            )
            return GenerationOutcome.failure(request, exc)

        except ServiceError as exc:
            print_error(f"Error creating app: {escape(str(exc))}")
            return GenerationOutcome.failure(request, exc)

        except ParseError as exc:
            print_error(f"Error creating app: {escape(str(exc))}")
            if exc.raw_text:
                console.print(
                    "[dim]Response text preview: "
                    f"{escape(preview(exc.raw_text, self.config.run.preview_chars))}[/dim]"
                )
            return GenerationOutcome.failure(request, exc)

        except AppGenError as exc:
            print_error(f"Error creating app: {escape(str(exc))}")
            return GenerationOutcome.failure(request, exc)

        self._report_artifact(artifact, time.monotonic() - start)
        return GenerationOutcome.from_artifact(request, artifact)

    def _report_artifact(self, artifact: ProjectArtifact, elapsed: float) -> None:
        console.print(f"Creating project: [bold]{escape(artifact.name)}[/bold]")
        console.print(f"Project path: {escape(str(artifact.path))}\n")
        for filename in artifact.files:
            console.print(f"  [green]+[/green] Created: {escape(filename)}")
        console.print(f"  [green]+[/green] Created: {artifact.readme_path.name}")
        print_success(
            f'\nApp "{escape(artifact.name)}" created successfully in {format_duration(elapsed)}!'
        )
        console.print(f"Location: {escape(str(artifact.path))}")
        console.print(
            f"Open {escape(str(artifact.path / 'index.html'))} in your browser to view the app\n"
        )

    # ------------------------------------------------------------------
    # Driver modes
    # ------------------------------------------------------------------

    async def run_single(self, request: str) -> GenerationOutcome:
        """Run one request and return its outcome."""
        async with RequestWorker(self.create_app) as worker:
            return await worker.submit(request)

    async def run_examples(
        self, examples: Sequence[str] = EXAMPLE_REQUESTS
    ) -> list[GenerationOutcome]:
        """Run the example requests one after another with a short pause."""
        console.print("[bold]Running example app generations...[/bold]\n")
        outcomes: list[GenerationOutcome] = []
        delay = self.config.run.example_delay
        async with RequestWorker(self.create_app) as worker:
            for index, example in enumerate(examples):
                outcomes.append(await worker.submit(example))
                print_separator()
                if delay and index < len(examples) - 1:
                    await asyncio.sleep(delay)
        return outcomes

    async def run_interactive(
        self, input_fn: Optional[Callable[[str], str]] = None
    ) -> list[GenerationOutcome]:
        """Prompt for requests until an exit keyword or end of input.

        Args:
            input_fn: Line reader, ``console.input`` by default.  It is called
                on a daemon thread and may raise ``EOFError`` to end the loop.
        """
        ask = input_fn or console.input
        print_banner(
            "AI App Generator",
            'Examples: "create a todo app", "create a weather app", "create a calculator"\n'
            'Type "exit" to quit',
        )

        outcomes: list[GenerationOutcome] = []
        async with RequestWorker(self.create_app) as worker:
            while True:
                try:
                    answer = await _read_line(ask, INPUT_PROMPT)
                except EOFError:
                    console.print()
                    break

                text = answer.strip()
                if text.lower() in EXIT_KEYWORDS:
                    break
                if text:
                    outcomes.append(await worker.submit(text))
                else:
                    print_warning("Please enter a valid app description")
                print_separator()

        console.print("Goodbye!")
        return outcomes


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def parse_mode(argv: Sequence[str]) -> tuple[Mode, str]:
    """Select the driver mode from raw command-line arguments.

    All arguments are joined by spaces first, so a request may contain words
    that look like flags; only the exact strings ``--interactive``, ``-i`` and
    ``--examples`` select a mode.
    """
    if not argv:
        return Mode.INTERACTIVE, ""
    command = " ".join(argv)
    if command in ("--interactive", "-i"):
        return Mode.INTERACTIVE, ""
    if command == "--examples":
        return Mode.EXAMPLES, ""
    return Mode.SINGLE, command


def build_generator(config: Config) -> AppGenerator:
    """Construct the production ``AppGenerator`` from *config*."""
    client = GeminiClient(
        api_key=config.require_api_key(),
        model=config.gemini.model,
        base_url=config.gemini.base_url,
        timeout=config.gemini.timeout,
    )
    return AppGenerator(client, config)


async def _dispatch(generator: AppGenerator, mode: Mode, request: str) -> None:
    if mode is Mode.EXAMPLES:
        await generator.run_examples()
    elif mode is Mode.SINGLE:
        await generator.run_single(request)
    else:
        await generator.run_interactive()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for ``appgen`` / ``python -m appgen``."""
    load_dotenv()
    args = list(sys.argv[1:] if argv is None else argv)
    mode, request = parse_mode(args)

    try:
        config = Config.from_env()
    except ValueError as exc:
        print_error(f"Invalid configuration: {exc}")
        return 1

    try:
        generator = build_generator(config)
    except ConfigError as exc:
        print_error(str(exc))
        console.print(f"Please add {API_KEY_ENV} to your .env file")
        return 1

    try:
        asyncio.run(_dispatch(generator, mode, request))
    except KeyboardInterrupt:
        console.print("\nGoodbye!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
