"""Backport merged GitHub pull requests onto release branches."""

__version__ = "0.1.0"
