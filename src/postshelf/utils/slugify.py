"""Canonical slugify implementation for Postshelf."""

import re
from unicodedata import normalize

from pymdownx.slugs import slugify as _md_slugify

# Pre-configure a slugify instance for reuse.
slugify_lower = _md_slugify(case="lower", separator="-")

# Lowercase ASCII words joined by single hyphens or underscores.
SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:[-_][a-z0-9]+)*$")

_HYPHEN_RUN = re.compile(r"[-_]*-[-_]*")
_UNDERSCORE_RUN = re.compile(r"_{2,}")


def slugify(text: str, max_len: int = 60) -> str:
    """Convert text to a URL-safe slug using MkDocs/Python Markdown semantics.

    Args:
        text: Input text to slugify
        max_len: Maximum length of output slug (default 60)

    Returns:
        Slug that satisfies :data:`SLUG_PATTERN`

    Examples:
        >>> slugify("Props vs. State in React")
        'props-vs-state-in-react'
        >>> slugify("Café à Paris")
        'cafe-a-paris'
        >>> slugify("../../etc/passwd")
        'etcpasswd'
        >>> slugify("A" * 100, max_len=20)
        'aaaaaaaaaaaaaaaaaaaa'

    """
    if text is None:
        return ""

    # Normalize Unicode to ASCII using NFKD (preserves transliteration).
    normalized = normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")

    slug = slugify_lower(normalized, sep="-")
    slug = _HYPHEN_RUN.sub("-", slug)
    slug = _UNDERSCORE_RUN.sub("_", slug).strip("-_")

    slug = slug or "post"
    if len(slug) > max_len:
        slug = slug[:max_len].rstrip("-_")

    return slug


def is_url_safe_slug(value: str) -> bool:
    """Return True when ``value`` can be used verbatim as a URL path segment."""
    return bool(SLUG_PATTERN.fullmatch(value))
