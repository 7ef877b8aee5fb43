"""Hugin: Discord bot for supervising containerized servers."""

__version__ = "0.1.0"
