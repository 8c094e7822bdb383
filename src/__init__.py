# src/__init__.py — v1
"""reelforge: daily short-video production pipeline."""
