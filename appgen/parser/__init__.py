"""Response parsing for the app generator.

Turns the raw text returned by the completion service into a validated
``GenerationResult``.

Usage::

    from appgen.parser import extract

    result = extract(response_text)
    print(result.app_name, result.filenames)
"""

from appgen.parser.extractor import extract, scan_fences, strip_fences
from appgen.parser.models import GeneratedFile, GenerationResult

__all__ = [
    "extract",
    "scan_fences",
    "strip_fences",
    "GeneratedFile",
    "GenerationResult",
]
