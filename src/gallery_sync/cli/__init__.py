"""Command-line interface for the gallery synchronization application."""

from .main import cli

__all__ = ["cli"]
