"""Generate small web apps from a natural-language request.

Usage::

    from appgen import AppGenerator, GeminiClient

    generator = AppGenerator(GeminiClient(api_key="..."))
    outcome = await generator.create_app("create a pomodoro timer")
"""

from appgen.config import Config
from appgen.gemini_client import GeminiClient
from appgen.pipeline import AppGenerator, GenerationOutcome

__all__ = [
    "AppGenerator",
    "Config",
    "GeminiClient",
    "GenerationOutcome",
]

__version__ = "0.1.0"
