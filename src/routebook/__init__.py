"""Routebook: client routes with a weekly attendance checklist."""

__version__ = "0.1.0"
