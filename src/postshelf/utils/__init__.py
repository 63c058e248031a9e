"""Utility modules for Postshelf."""

from postshelf.utils.slugify import SLUG_PATTERN, is_url_safe_slug, slugify

__all__ = ["SLUG_PATTERN", "is_url_safe_slug", "slugify"]
