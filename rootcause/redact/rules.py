"""Redaction rule table.

Rules are independent, immutable entries in an ordered table. Two kinds:

    KeyRule      -- a mapping key whose lower-cased name contains one of the
                    configured terms has its whole value replaced, whatever
                    its shape.
    ContentRule  -- a regex run over every leaf string; each match is
                    replaced by the marker, optionally keeping a prefix
                    group (``token=`` in ``token=abc``).

Content rules run in table order. Signed tokens go first so that their
long header segment is not half-eaten by the opaque-token rule. No rule
matches text that is already the marker, which keeps redaction idempotent.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Final

MARKER: Final[str] = "[REDACTED]"

_NOT_MARKER: Final[str] = re.escape(MARKER)


@dataclass(frozen=True)
class KeyRule:
    """Redact a mapping value by the name of its key."""

    terms: tuple[str, ...]

    def matches(self, key: str) -> bool:
        lower = key.lower()
        return any(term in lower for term in self.terms)


@dataclass(frozen=True)
class ContentRule:
    """Redact spans of a string that match *pattern*."""

    name: str
    pattern: re.Pattern[str]
    keep_group: int = 0
    accept: Callable[[str], bool] | None = None

    def _replace(self, match: re.Match[str]) -> str:
        if self.accept is not None and not self.accept(match.group(0)):
            return match.group(0)
        prefix = match.group(self.keep_group) if self.keep_group else ""
        return prefix + MARKER

    def apply(self, text: str) -> str:
        return self.pattern.sub(self._replace, text)


Rule = KeyRule | ContentRule

# ---------------------------------------------------------------------------
# Key denylist
# ---------------------------------------------------------------------------

SENSITIVE_KEY_TERMS: Final[tuple[str, ...]] = (
    "token",
    "secret",
    "password",
    "passwd",
    "key",
    "authorization",
    "credential",
)

# ---------------------------------------------------------------------------
# Compiled content patterns
# ---------------------------------------------------------------------------

_B64URL = r"[A-Za-z0-9_-]"

# JWT-like: "eyJ" JSON header plus payload and signature, or any three long
# base64url segments.
_RE_SIGNED_TOKEN: Final[re.Pattern[str]] = re.compile(
    rf"(?<![A-Za-z0-9_-])(?:eyJ{_B64URL}+\.{_B64URL}+\.{_B64URL}+"
    rf"|{_B64URL}{{20,}}\.{_B64URL}{{20,}}\.{_B64URL}{{20,}})"
)

# name=value / name:value where the name ends in a sensitive term.
# Group 1 (the name and separator) is kept. An authorization scheme in
# front of the value is redacted with it.
_RE_ASSIGNMENT: Final[re.Pattern[str]] = re.compile(
    r"(?<![A-Za-z0-9])([A-Za-z0-9_.-]{0,64}(?:" + "|".join(SENSITIVE_KEY_TERMS) + r")s?"
    r"(?:\s*=\s*|:(?=\S)))"
    r"(?:(?:bearer|basic|token)[ \t]+)?"
    rf"(?!{_NOT_MARKER})[^\s&,;\"'<>]+",
    re.IGNORECASE | re.ASCII,
)

# Authorization scheme followed by a credential containing a digit or
# base64 punctuation. Group 1 (the scheme) is kept.
_RE_AUTH_SCHEME: Final[re.Pattern[str]] = re.compile(
    r"\b((?:[Bb]earer|[Bb]asic|Token)\s+)"
    rf"(?!{_NOT_MARKER})(?=[A-Za-z0-9._~+/=-]*[0-9+/=])[A-Za-z0-9._~+/=-]{{8,}}",
    re.ASCII,
)

# Long opaque credential: 24+ letters/digits with no separators.
_RE_OPAQUE_TOKEN: Final[re.Pattern[str]] = re.compile(r"(?<![A-Za-z0-9])[A-Za-z0-9]{24,}(?![A-Za-z0-9])")

_MIN_CASE_SHARE: Final[float] = 0.25


def looks_opaque(run: str) -> bool:
    """Tell random-looking runs apart from long CamelCase words.

    A run qualifies when it mixes letters and digits, or when both upper-
    and lower-case letters each make up at least a quarter of it
    ("ProgressDeadlineExceeded" does not; "aBcDeFgHiJkLmNoPqRsTuVwX" does).
    """
    has_digit = any(c.isdigit() for c in run)
    has_alpha = any(c.isalpha() for c in run)
    if has_digit:
        return has_alpha
    upper = sum(1 for c in run if c.isupper())
    lower = len(run) - upper
    return min(upper, lower) >= _MIN_CASE_SHARE * len(run)


DEFAULT_RULES: Final[tuple[Rule, ...]] = (
    KeyRule(terms=SENSITIVE_KEY_TERMS),
    ContentRule(name="signed_token", pattern=_RE_SIGNED_TOKEN),
    ContentRule(name="assignment", pattern=_RE_ASSIGNMENT, keep_group=1),
    ContentRule(name="auth_scheme", pattern=_RE_AUTH_SCHEME, keep_group=1),
    ContentRule(name="opaque_token", pattern=_RE_OPAQUE_TOKEN, accept=looks_opaque),
)
