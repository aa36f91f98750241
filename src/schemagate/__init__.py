"""Pre-commit gate blocking schema changes that break compatibility with mainline."""

__version__ = "0.1.0"
