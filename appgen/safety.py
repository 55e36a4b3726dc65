"""Denylist filter applied to every request before the service is called.

The denylist is a tuple of explicit ``SafetyRule`` objects so the coverage can
be audited in one place.  This is a coarse heuristic and not a security
boundary: substring matching blocks harmless text (any request containing
``&`` is rejected) and misses dangerous phrasing that avoids the listed tokens.

Match policy:

* The input is lower-cased once; rule patterns are compared lower-cased.
* ``LITERAL`` rules match when the pattern occurs anywhere in the input.
* ``PREFIX`` rules match when some whitespace-separated word of the input
  starts with the pattern.
* ``REGEX`` rules match when ``re.search`` finds the pattern in the input.
* Rules are evaluated in declaration order and the first match decides.
  No match means the input is safe.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional


class RuleKind(str, Enum):
    """How a ``SafetyRule`` pattern is compared against the input."""
    LITERAL = "literal"
    PREFIX = "prefix"
    REGEX = "regex"


@dataclass(frozen=True)
class SafetyRule:
    """A single denylist entry."""

    pattern: str
    kind: RuleKind = RuleKind.LITERAL
    reason: str = ""

    def matches(self, normalized: str) -> bool:
        """Return ``True`` if this rule matches already lower-cased text."""
        if self.kind is RuleKind.LITERAL:
            return self.pattern.lower() in normalized
        if self.kind is RuleKind.PREFIX:
            prefix = self.pattern.lower()
            return any(word.startswith(prefix) for word in normalized.split())
        return re.search(self.pattern, normalized) is not None


@dataclass(frozen=True)
class SafetyVerdict:
    """Result of checking one input against the denylist."""

    safe: bool
    rule: Optional[SafetyRule] = None


DEFAULT_RULES: tuple[SafetyRule, ...] = (
    SafetyRule("sudo", reason="privilege escalation"),
    SafetyRule("--force", reason="force flag"),
    SafetyRule("-f", reason="force flag"),
    SafetyRule("rm ", reason="file deletion"),
    SafetyRule("del ", reason="file deletion"),
    SafetyRule("shutdown", reason="system shutdown"),
    SafetyRule("reboot", reason="system reboot"),
    SafetyRule("mkfs", reason="filesystem format"),
    SafetyRule(":(){", reason="fork bomb"),
    SafetyRule("fork", reason="process spawning"),
    SafetyRule("dd ", reason="raw disk write"),
    SafetyRule("chmod 777", reason="permission change"),
    SafetyRule("chown", reason="ownership change"),
    SafetyRule(">", reason="output redirect"),
    SafetyRule("2>", reason="error redirect"),
    SafetyRule("|", reason="pipe operator"),
    SafetyRule("&", reason="background operator"),
    SafetyRule(";", reason="command separator"),
)


class SafetyFilter:
    """Checks requests against an ordered set of denylist rules."""

    def __init__(self, rules: Iterable[SafetyRule] = DEFAULT_RULES) -> None:
        self.rules = tuple(rules)

    def check(self, text: str) -> SafetyVerdict:
        normalized = text.lower()
        for rule in self.rules:
            if rule.matches(normalized):
                return SafetyVerdict(safe=False, rule=rule)
        return SafetyVerdict(safe=True)

    def is_safe(self, text: str) -> bool:
        return self.check(text).safe


_default_filter = SafetyFilter()


def is_safe(text: str) -> bool:
    """Check *text* against the default denylist."""
    return _default_filter.is_safe(text)
