"""rootcause: resource resolution and output redaction for diagnostic tooling."""

__version__ = "0.3.0"
