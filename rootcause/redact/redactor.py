"""Output redaction for tool results.

Walks an arbitrary JSON-shaped value (mappings, sequences, scalars) and
returns a new value with sensitive data replaced by "[REDACTED]":

1. Key rules   -- a mapping value whose key names a secret (token, password,
   ...) is replaced whole, whether it is a scalar, a list or a sub-tree.
   The same applies to the ``value`` of a ``{"name": ..., "value": ...}``
   pair whose name is a secret, the shape of container env entries.
2. Content rules -- every other leaf string is scanned for secret-shaped
   substrings (signed tokens, ``name=value`` credentials, authorization
   schemes, long opaque tokens); only the matched spans are replaced.

The input is never mutated. Unsupported leaf types pass through unchanged,
and nothing here raises on unexpected shapes: a partially scrubbed result is
preferable to failing a whole diagnostic call. Branches nested deeper than
_MAX_DEPTH are replaced by the marker rather than walked.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Final

from rootcause.redact.rules import DEFAULT_RULES, MARKER, ContentRule, KeyRule, Rule

_MAX_DEPTH: Final[int] = 256

_PAIR_NAME: Final[str] = "name"
_PAIR_VALUE: Final[str] = "value"


class Redactor:
    """Applies an ordered rule table to nested values.

    Args:
        rules: Rule table; defaults to DEFAULT_RULES. Key rules and content
               rules are applied separately, each in table order.
    """

    def __init__(self, rules: Iterable[Rule] = DEFAULT_RULES) -> None:
        table = tuple(rules)
        self._key_rules: tuple[KeyRule, ...] = tuple(r for r in table if isinstance(r, KeyRule))
        self._content_rules: tuple[ContentRule, ...] = tuple(r for r in table if isinstance(r, ContentRule))

    def is_sensitive_key(self, key: object) -> bool:
        name = key if isinstance(key, str) else str(key)
        return any(rule.matches(name) for rule in self._key_rules)

    def redact_string(self, value: str) -> str:
        """Replace secret-shaped spans in *value*.

        Returns *value* itself when no rule matches.
        """
        result = value
        for rule in self._content_rules:
            result = rule.apply(result)
        return value if result == value else result

    def redact_value(self, value: object) -> object:
        """Return a redacted deep copy of *value*."""
        return self._walk(value, 0)

    def redact_map(self, value: Mapping[object, object]) -> dict[object, object]:
        """Redact a mapping, always returning a plain dict."""
        return self._walk_mapping(value, 0)

    def _walk(self, value: object, depth: int) -> object:
        if isinstance(value, str):
            return self.redact_string(value)
        if depth >= _MAX_DEPTH and isinstance(value, (Mapping, list, tuple)):
            return MARKER
        if isinstance(value, Mapping):
            return self._walk_mapping(value, depth)
        if isinstance(value, (list, tuple)):
            return [self._walk(item, depth + 1) for item in value]
        return value

    def _names_secret(self, value: Mapping[object, object]) -> bool:
        # {"name": "DB_PASSWORD", "value": "..."}: env entries, header lists, params
        name = value.get(_PAIR_NAME)
        return isinstance(name, str) and self.is_sensitive_key(name)

    def _walk_mapping(self, value: Mapping[object, object], depth: int) -> dict[object, object]:
        result: dict[object, object] = {}
        named_secret = self._names_secret(value)
        for key, item in value.items():
            if self.is_sensitive_key(key) or (named_secret and key == _PAIR_VALUE):
                result[key] = MARKER
            else:
                result[key] = self._walk(item, depth + 1)
        return result


_DEFAULT: Final[Redactor] = Redactor()


def redact_string(value: str) -> str:
    """Redact secret-shaped spans in a single string using the default rules."""
    return _DEFAULT.redact_string(value)


def redact_value(value: object) -> object:
    """Redact a nested tool result using the default rules."""
    return _DEFAULT.redact_value(value)


def redact_map(value: Mapping[object, object]) -> dict[object, object]:
    """Redact a mapping using the default rules."""
    return _DEFAULT.redact_map(value)


def redacted_json(value: object) -> str:
    """Return a JSON string of *value* after full redaction.

    Useful for logging and evidence assembly where a compact, safe
    representation is required.
    """
    return json.dumps(_DEFAULT.redact_value(value), default=str)
