"""Recover the generation document from raw service text.

The model is told to answer with bare JSON, but answers frequently arrive
wrapped in a markdown code fence.  ``strip_fences`` removes that wrapping with
a two-state lexer (``NONE`` / ``IN_FENCE``) that recognises three delimiter
forms:

* a language-tagged backtick fence (```` ```json ````),
* a plain backtick fence (```` ``` ````),
* a tilde fence (``~~~``, tagged or not).

Behaviour for the edge cases:

* Text that already starts with ``{`` or ``[`` is returned as-is, so fence
  markers that appear inside JSON string values are left alone.
* Text without any delimiter is returned trimmed.
* Prose before the opening fence and anything after the closing fence is
  discarded.
* An opener is a run of three or more backticks or tildes; longer runs
  (```` ````json ````) are accepted.
* A closing fence is a line holding only a run of the fence character at
  least as long as the opener, or the opener at the very end of the last line.
* A fence that is never closed (truncated answer) yields everything after the
  opener; ``extract`` then reports the truncation as a ``ParseError``.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import ValidationError

from appgen.errors import ParseError
from appgen.parser.models import GenerationResult

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_DELIMITERS = ("```", "~~~")
_TAG_PATTERN = re.compile(r"[A-Za-z0-9_+.\-]*")


class FenceForm(str, Enum):
    """The delimiter form that opened a fence."""
    TAGGED = "tagged"
    PLAIN = "plain"
    TILDE = "tilde"


class _State(Enum):
    NONE = "none"
    IN_FENCE = "in_fence"


@dataclass(frozen=True)
class FenceScan:
    """Outcome of scanning a response for a fenced block."""

    document: str
    form: Optional[FenceForm] = None
    tag: str = ""
    closed: bool = False


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _find_opener(line: str) -> Optional[tuple[int, str]]:
    """Return ``(index, delimiter)`` of the earliest delimiter in *line*."""
    hits = [(line.find(d), d) for d in _DELIMITERS if d in line]
    if not hits:
        return None
    return min(hits)


def _is_closer(line: str, delimiter: str) -> bool:
    """A line holding only a run of the fence character, at least as long as the opener."""
    run = line.strip()
    return len(run) >= len(delimiter) and run == delimiter[0] * len(run)


def _classify(delimiter: str, tag: str) -> FenceForm:
    if delimiter.startswith("~"):
        return FenceForm.TILDE
    return FenceForm.TAGGED if tag else FenceForm.PLAIN


# ---------------------------------------------------------------------------
# Lexer
# ---------------------------------------------------------------------------

def scan_fences(text: str) -> FenceScan:
    """Run the fence lexer over *text*."""
    stripped = text.strip()
    if not stripped or stripped[0] in "{[" or _find_opener(stripped) is None:
        return FenceScan(document=stripped)

    lines = stripped.splitlines()
    last = len(lines) - 1
    state = _State.NONE
    delimiter = ""
    tag = ""
    collected: list[str] = []
    closed = False

    for index, line in enumerate(lines):
        if state is _State.NONE:
            found = _find_opener(line)
            if found is None:
                continue
            position, delimiter = found
            end = position + len(delimiter)
            while end < len(line) and line[end] == delimiter[0]:
                end += 1
            delimiter = line[position:end]
            rest = line[end:]
            tag = _TAG_PATTERN.match(rest).group(0)
            rest = rest[len(tag):].strip()
            state = _State.IN_FENCE
            if rest.endswith(delimiter):
                collected.append(rest[: -len(delimiter)])
                closed = True
                break
            if rest:
                collected.append(rest)
            continue

        if _is_closer(line, delimiter):
            closed = True
            break
        trimmed = line.rstrip()
        if index == last and trimmed.endswith(delimiter):
            collected.append(trimmed[: -len(delimiter)])
            closed = True
            break
        collected.append(line)

    return FenceScan(
        document="\n".join(collected).strip(),
        form=_classify(delimiter, tag),
        tag=tag,
        closed=closed,
    )


def strip_fences(text: str) -> str:
    """Return *text* with its surrounding code fence removed."""
    return scan_fences(text).document


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract(raw_text: str) -> GenerationResult:
    """Parse raw service text into a ``GenerationResult``.

    Raises:
        ParseError: If no JSON object can be parsed after fence stripping, or
            the object does not have the expected shape.
    """
    scan = scan_fences(raw_text)
    if not scan.document:
        raise ParseError("Response contained no JSON document", raw_text)

    try:
        data = json.loads(scan.document)
    except json.JSONDecodeError as exc:
        hint = " (unterminated code fence, response may be truncated)" if (
            scan.form is not None and not scan.closed
        ) else ""
        raise ParseError(
            f"Response is not valid JSON: {exc.msg} at line {exc.lineno} column {exc.colno}{hint}",
            raw_text,
        ) from exc
    except RecursionError as exc:
        raise ParseError("Response JSON is nested too deeply to parse", raw_text) from exc

    if not isinstance(data, dict):
        raise ParseError(
            f"Expected a JSON object, got {type(data).__name__}", raw_text
        )

    try:
        return GenerationResult.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or "document"
        raise ParseError(
            f"Response does not describe an app: {location}: {first.get('msg', 'invalid')}",
            raw_text,
        ) from exc
