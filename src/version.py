# src/version.py — v1
"""Package version, shared by the CLI and the HTTP app."""

__version__ = "0.1.0"
