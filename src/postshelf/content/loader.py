"""Load post files into :class:`Post` objects and slug-addressable collections."""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from typing import TYPE_CHECKING

from postshelf.content.blocks import parse_body
from postshelf.content.exceptions import (
    ContentError,
    DocumentParsingError,
    DuplicateSlugError,
    PostNotFoundError,
)
from postshelf.content.frontmatter import body_start_line, split_document
from postshelf.content.types import Post, PostMetadata

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from postshelf.config import PostshelfConfig

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".mdx", ".md")


def parse_post(text: str, *, source_path: Path | None = None) -> Post:
    """Parse the full text of a post.

    Raises:
        FrontmatterParsingError: If the header is malformed.
        MissingMetadataError: If a required header field is missing or empty.
        InvalidMetadataError: If a header field has an invalid value.
        UnclosedCodeFenceError: If a fenced code block is never closed.

    """
    raw_metadata, body = split_document(text)
    metadata = PostMetadata.from_frontmatter(raw_metadata)
    blocks = parse_body(body, start_line=body_start_line(text, body))
    return Post(metadata=metadata, body=tuple(blocks), source_path=source_path)


def load_post(path: Path, *, encoding: str = "utf-8") -> Post:
    """Read and parse a single post file.

    Raises:
        DocumentParsingError: If the file cannot be read or is not a valid post.

    """
    try:
        text = path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentParsingError(str(path), str(exc)) from exc

    try:
        return parse_post(text, source_path=path)
    except ContentError as exc:
        raise DocumentParsingError(str(path), str(exc)) from exc


def iter_post_paths(directory: Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> Iterator[Path]:
    """Yield post files below ``directory`` in sorted order.

    Hidden files and anything inside hidden directories are skipped.
    """
    suffixes = {ext.lower() for ext in extensions}
    for path in sorted(directory.rglob("*")):
        relative = path.relative_to(directory)
        if any(part.startswith(".") for part in relative.parts):
            continue
        if path.is_file() and path.suffix.lower() in suffixes:
            yield path


class PostCollection:
    """An immutable set of posts addressable by slug."""

    def __init__(self, posts: Iterable[Post]) -> None:
        by_slug: dict[str, list[Post]] = defaultdict(list)
        for post in posts:
            by_slug[post.slug].append(post)

        for slug, matches in by_slug.items():
            if len(matches) > 1:
                raise DuplicateSlugError(slug, [post.source_path or Path(slug) for post in matches])

        self._posts: dict[str, Post] = {slug: matches[0] for slug, matches in by_slug.items()}

    @classmethod
    def from_directory(
        cls,
        directory: Path,
        *,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        encoding: str = "utf-8",
    ) -> PostCollection:
        """Load every post below ``directory``.

        Raises:
            DocumentParsingError: If any post file is invalid.
            DuplicateSlugError: If two files declare the same slug.

        """
        posts = [load_post(path, encoding=encoding) for path in iter_post_paths(directory, extensions)]
        logger.debug("Loaded %d posts from %s", len(posts), directory)
        return cls(posts)

    @classmethod
    def from_config(cls, config: PostshelfConfig) -> PostCollection:
        return cls.from_directory(
            config.paths.abs_posts_dir,
            extensions=config.content.extensions,
            encoding=config.content.encoding,
        )

    def get(self, slug: str) -> Post:
        """Return the post with ``slug``.

        Raises:
            PostNotFoundError: If no post has that slug.

        """
        try:
            return self._posts[slug]
        except KeyError:
            raise PostNotFoundError(slug) from None

    def with_tag(self, tag: str) -> list[Post]:
        """Return posts labelled ``tag``, newest first."""
        return [post for post in self if tag in post.tags]

    @property
    def slugs(self) -> frozenset[str]:
        return frozenset(self._posts)

    def __contains__(self, slug: object) -> bool:
        return slug in self._posts

    def __len__(self) -> int:
        return len(self._posts)

    def __iter__(self) -> Iterator[Post]:
        # Newest first, slug as a stable tie-breaker.
        ordered = sorted(self._posts.values(), key=lambda post: post.slug)
        return iter(sorted(ordered, key=lambda post: post.date, reverse=True))
