"""Postshelf - content tooling for an MDX-like blog post collection."""

__version__ = "0.1.0"
