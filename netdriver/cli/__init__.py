"""CLI entry point for netdriver."""

from .run import app

__all__ = ["app"]
