# src/stages/__init__.py — v1
