"""Filesystem helpers for creating and normalising post files."""

from __future__ import annotations

import datetime as dt
import logging
from typing import TYPE_CHECKING

from postshelf.content.exceptions import (
    ContentError,
    DirectoryCreationError,
    DocumentParsingError,
    FileWriteError,
    PostExistsError,
)
from postshelf.content.frontmatter import BOM, render_document, split_document
from postshelf.content.types import PostMetadata
from postshelf.utils.slugify import slugify

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

logger = logging.getLogger(__name__)

NEW_POST_BODY = "Write the introduction here.\n"


def build_metadata(
    title: str,
    author: str,
    *,
    date: dt.date | None = None,
    tags: Iterable[str] = (),
    slug: str | None = None,
) -> PostMetadata:
    """Assemble validated metadata for a new post.

    The slug is derived from the title when none is given, and the date
    defaults to today.
    """
    return PostMetadata.from_frontmatter(
        {
            "slug": slug or slugify(title),
            "title": title,
            "date": date or dt.date.today(),
            "author": author,
            "tags": list(tags),
        }
    )


def _write_text(filepath: Path, content: str, encoding: str, *, newline: str = "\n") -> None:
    try:
        filepath.write_text(content, encoding=encoding, newline=newline)
    except OSError as e:
        raise FileWriteError(str(filepath), e) from e


def write_post(
    metadata: PostMetadata,
    body: str,
    output_dir: Path,
    *,
    extension: str = ".mdx",
    encoding: str = "utf-8",
) -> Path:
    """Save a post as ``<slug><extension>`` with a canonical header.

    The file is opened in exclusive-create mode, so an existing post is never
    overwritten, even one created after this call started.

    Raises:
        PostExistsError: If the target file already exists.
        DirectoryCreationError: If ``output_dir`` cannot be created.
        FileWriteError: If the file cannot be written.

    """
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationError(str(output_dir), e) from e

    filepath = output_dir / f"{metadata.slug}{extension}"
    content = render_document(metadata, body)
    try:
        with filepath.open("x", encoding=encoding, newline="\n") as handle:
            handle.write(content)
    except FileExistsError as e:
        raise PostExistsError(str(filepath)) from e
    except OSError as e:
        raise FileWriteError(str(filepath), e) from e

    logger.info("Wrote post %s to %s", metadata.slug, filepath)
    return filepath


def reformat_post(path: Path, *, encoding: str = "utf-8", check: bool = False) -> bool:
    """Rewrite ``path`` with a canonical header, leaving the body as-is.

    The file keeps its line endings (LF or CRLF) and a leading byte-order
    mark if it has one.

    Args:
        path: Post file to normalise.
        encoding: File encoding.
        check: Only report whether the file would change; never write.

    Returns:
        True if the file content differs from its canonical form.

    Raises:
        DocumentParsingError: If the file cannot be read or its header is invalid.
        FileWriteError: If the file cannot be written.

    """
    try:
        raw = path.read_bytes().decode(encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentParsingError(str(path), str(exc)) from exc

    newline = "\r\n" if "\r\n" in raw else "\n"
    original = raw.replace("\r\n", "\n")

    try:
        raw_metadata, body = split_document(original)
        metadata = PostMetadata.from_frontmatter(raw_metadata)
    except ContentError as exc:
        raise DocumentParsingError(str(path), str(exc)) from exc

    bom = BOM if original.startswith(BOM) else ""
    formatted = bom + render_document(metadata, body)
    if formatted == original:
        return False

    if not check:
        _write_text(path, formatted, encoding, newline=newline)
        logger.info("Reformatted %s", path)
    return True
