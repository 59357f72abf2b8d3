"""Redaction of secrets from tool results.

Every record built from a live API response passes through redact_value()
before it is returned to a caller.

Submodules:
    rules    -- the ordered key/content rule table and the marker.
    redactor -- recursive traversal applying the table.
"""

from rootcause.redact.redactor import Redactor, redact_map, redact_string, redact_value, redacted_json
from rootcause.redact.rules import DEFAULT_RULES, MARKER, ContentRule, KeyRule

__all__ = [
    "DEFAULT_RULES",
    "MARKER",
    "ContentRule",
    "KeyRule",
    "Redactor",
    "redact_map",
    "redact_string",
    "redact_value",
    "redacted_json",
]
