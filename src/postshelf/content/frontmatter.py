"""Helpers for parsing and writing the YAML metadata header of a post."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from contextlib import suppress
from typing import TYPE_CHECKING, Any

import yaml
from frontmatter import YAMLHandler

from postshelf.content.exceptions import FrontmatterParsingError
from postshelf.content.types import coerce_calendar_date

if TYPE_CHECKING:
    from postshelf.content.types import PostMetadata

logger = logging.getLogger(__name__)

DELIMITER = "---"
BOM = "\ufeff"

_YAML_HANDLER = YAMLHandler()


def split_header(content: str) -> tuple[str | None, str]:
    """Split a post into its raw header text and body without parsing YAML.

    Returns:
        Tuple of (header text, body). The header text is None when the
        document has no header.

    Raises:
        FrontmatterParsingError: If the header is opened but never closed.

    """
    text = content.removeprefix(BOM).strip()
    if not _YAML_HANDLER.detect(text):
        return None, text

    try:
        raw_header, body = _YAML_HANDLER.split(text)
    except ValueError as exc:
        msg = f"header opened with '{DELIMITER}' is never closed"
        raise FrontmatterParsingError(msg) from exc
    return raw_header, body.strip("\n")


def load_header(raw_header: str) -> dict[str, Any]:
    """Parse header text into a mapping with string keys.

    Raises:
        FrontmatterParsingError: If the header is not valid YAML or not a mapping.

    """
    try:
        raw_metadata = _YAML_HANDLER.load(raw_header)
    except yaml.YAMLError as exc:
        raise FrontmatterParsingError(str(exc)) from exc
    except ValueError as exc:
        # PyYAML resolves 2021-02-30 as a timestamp and then fails to build it.
        msg = f"invalid value in header: {exc}"
        raise FrontmatterParsingError(msg) from exc

    if raw_metadata is None:
        return {}
    if not isinstance(raw_metadata, Mapping):
        msg = f"header must be a mapping, got {type(raw_metadata).__name__}"
        raise FrontmatterParsingError(msg)
    return {str(key): value for key, value in raw_metadata.items()}


def split_document(content: str) -> tuple[dict[str, Any], str]:
    """Split a post into its metadata header and body.

    Uses python-frontmatter's YAML handler directly, so a header that is not a
    mapping is reported instead of being silently dropped.

    Args:
        content: Full text of a post file.

    Returns:
        Tuple of (metadata dict, body string). A document without a header
        yields an empty dict and the whole text as body.

    Raises:
        FrontmatterParsingError: If the header is unterminated, not valid YAML
            or not a mapping.

    """
    raw_header, body = split_header(content)
    if raw_header is None:
        return {}, body
    return load_header(raw_header), body

def body_start_line(content: str, body: str) -> int:
    """Return the 1-based line of ``content`` on which ``body`` begins.

    ``body`` must come from :func:`split_document` called on ``content``.
    """
    text = content.strip()
    lead = len(content) - len(content.lstrip())
    if not body:
        return content.count("\n", 0, lead + len(text)) + 1
    if not text.endswith(body):
        logger.debug("Body is not a suffix of the document; numbering lines from the body")
        return 1
    offset = lead + len(text) - len(body)
    return content.count("\n", 0, offset) + 1


def dump_frontmatter(metadata: PostMetadata) -> str:
    """Render the canonical header block, delimiters included."""
    yaml_front = yaml.safe_dump(
        metadata.to_frontmatter(),
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
        width=1000,
    )
    return f"{DELIMITER}\n{yaml_front}{DELIMITER}\n"


def render_document(metadata: PostMetadata, body: str) -> str:
    """Combine a canonical header and a body into the full text of a post."""
    header = dump_frontmatter(metadata)
    body = body.strip("\n")
    if not body:
        return header
    return f"{header}\n{body}\n"


def _normalize_header(header: Mapping[str, Any]) -> dict[str, Any]:
    normalized = dict(header)
    tags = normalized.pop("tags", None)
    if tags:
        normalized["tags"] = frozenset(tags) if isinstance(tags, (list, tuple, set, frozenset)) else tags
    if "date" in normalized:
        # Quoted ISO strings, midnight datetimes and dates compare by value.
        with suppress(ValueError):
            normalized["date"] = coerce_calendar_date(normalized["date"])
    return normalized


def headers_equivalent(first: Mapping[str, Any], second: Mapping[str, Any]) -> bool:
    """Compare two header mappings, ignoring key order and tag order.

    Dates are compared by calendar value, whichever YAML form they were written in.
    """
    return _normalize_header(first) == _normalize_header(second)
