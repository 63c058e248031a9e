"""Custom exceptions for reading, validating and writing posts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from postshelf.exceptions import PostshelfError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


class ContentError(PostshelfError):
    """Base class for content errors."""


class FrontmatterParsingError(ContentError):
    """Raised when the YAML metadata header is invalid."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid YAML frontmatter: {reason}")


class MissingMetadataError(ContentError):
    """Raised when required metadata fields are absent or empty."""

    def __init__(self, missing_keys: Sequence[str]) -> None:
        self.missing_keys = list(missing_keys)
        super().__init__(f"Missing required metadata keys: {', '.join(self.missing_keys)}")


class InvalidMetadataError(ContentError):
    """Raised when metadata fields are present but have invalid values."""

    def __init__(self, problems: Sequence[tuple[str, str]]) -> None:
        self.problems = list(problems)
        details = "; ".join(f"{field}: {reason}" for field, reason in self.problems)
        super().__init__(f"Invalid metadata: {details}")

    @property
    def fields(self) -> list[str]:
        return [field for field, _ in self.problems]


class UnclosedCodeFenceError(ContentError):
    """Raised when a fenced code block has no closing delimiter."""

    def __init__(self, line: int, fence: str) -> None:
        self.line = line
        self.fence = fence
        super().__init__(f"Code fence '{fence}' opened on line {line} is never closed")


class DocumentParsingError(ContentError):
    """Raised when a post file cannot be loaded."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse document at '{path}': {reason}")


class DuplicateSlugError(ContentError):
    """Raised when two or more posts share a slug."""

    def __init__(self, slug: str, paths: Sequence[Path]) -> None:
        self.slug = slug
        self.paths = list(paths)
        listing = ", ".join(str(path) for path in self.paths)
        super().__init__(f"Slug '{slug}' is used by more than one post: {listing}")


class PostNotFoundError(ContentError):
    """Raised when no post has the requested slug."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"Post with slug '{slug}' not found.")


class WriterError(PostshelfError):
    """Base exception for filesystem errors while writing posts."""


class PostExistsError(WriterError):
    """Raised instead of overwriting an existing post file."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Refusing to overwrite existing post at: {path}")


class FilesystemOperationError(WriterError):
    """Base exception for file I/O errors."""

    def __init__(self, path: str, original_exception: Exception, message: str | None = None) -> None:
        self.path = path
        self.original_exception = original_exception
        if message is None:
            message = f"An error occurred at path: {self.path}. Original error: {original_exception}"
        super().__init__(message)


class DirectoryCreationError(FilesystemOperationError):
    """Raised when creating a directory fails."""

    def __init__(self, path: str, original_exception: Exception) -> None:
        message = f"Failed to create directory at: {path}. Original error: {original_exception}"
        super().__init__(path, original_exception, message=message)


class FileWriteError(FilesystemOperationError):
    """Raised when writing a file fails."""

    def __init__(self, path: str, original_exception: Exception) -> None:
        message = f"Failed to write file to: {path}. Original error: {original_exception}"
        super().__init__(path, original_exception, message=message)
