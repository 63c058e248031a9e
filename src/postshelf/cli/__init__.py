"""Command-line interface for Postshelf."""

from postshelf.cli.main import app, main

__all__ = ["app", "main"]
