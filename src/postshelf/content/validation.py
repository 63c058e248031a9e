"""Content-integrity checks for a post collection.

Unlike :mod:`postshelf.content.loader`, which stops at the first problem, the
checks here never raise for bad content. Every problem in every file is
collected into a :class:`ValidationReport` so an author can fix them in one
pass. The one exception is a header that is never closed: the body cannot be
located, so nothing after the ``frontmatter`` check runs for that file. Used
by the ``postshelf check`` CLI command.

Checks:

- ``read``: the file can be read and decoded
- ``frontmatter``: the header is valid YAML and a mapping
- ``required-fields``: slug, title, date and author are present and non-empty
- ``metadata``: field values are well-typed (URL-safe slug, ISO date, tag list)
- ``code-fences``: every fenced code block is closed
- ``unique-slug``: no two files declare the same slug
- ``render-annotation``: live-render annotations are well-formed (warning)
- ``slug-length``: slug is not overly long (warning)
- ``slug-filename``: file name matches the slug (opt-in)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from postshelf.content.blocks import iter_code_blocks, parse_body
from postshelf.content.exceptions import (
    FrontmatterParsingError,
    InvalidMetadataError,
    MissingMetadataError,
    UnclosedCodeFenceError,
)
from postshelf.content.frontmatter import body_start_line, load_header, split_header
from postshelf.content.loader import DEFAULT_EXTENSIONS, iter_post_paths
from postshelf.content.types import Post, PostMetadata

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from postshelf.config import PostshelfConfig, ValidationSettings
    from postshelf.content.types import Block

logger = logging.getLogger(__name__)

_RENDER_VALUES = frozenset({"true", "false"})


class Severity(str, Enum):
    """How serious a validation issue is."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """A single problem found in a post file.

    Attributes:
        path: File the issue was found in
        check: Name of the check that failed (e.g., "code-fences")
        severity: ERROR or WARNING
        message: Human-readable message
        line: 1-based line number, when the problem has a location

    """

    path: Path
    check: str
    severity: Severity
    message: str
    line: int | None = None

    @property
    def location(self) -> str:
        return f"{self.path}:{self.line}" if self.line is not None else str(self.path)


@dataclass(slots=True)
class DocumentResult:
    """Outcome of validating a single file."""

    path: Path
    metadata: PostMetadata | None = None
    post: Post | None = None
    issues: list[ValidationIssue] = field(default_factory=list)

    def add(self, check: str, message: str, *, severity: Severity = Severity.ERROR, line: int | None = None) -> None:
        self.issues.append(ValidationIssue(self.path, check, severity, message, line))


@dataclass(slots=True)
class ValidationReport:
    """Issues found across a collection, plus the posts that passed."""

    files_checked: int = 0
    issues: list[ValidationIssue] = field(default_factory=list)
    posts: list[Post] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity is Severity.WARNING]

    def failed(self, *, fail_on_warnings: bool = False) -> bool:
        if self.errors:
            return True
        return fail_on_warnings and bool(self.warnings)


def _check_render_annotations(result: DocumentResult, blocks: Iterable[Block]) -> None:
    for block in iter_code_blocks(blocks):
        if "render" not in block.attributes:
            continue
        value = block.attributes["render"]
        if value.lower() not in _RENDER_VALUES:
            result.add(
                "render-annotation",
                f"render={value!r} is not 'true' or 'false'; the block will not be rendered live",
                severity=Severity.WARNING,
                line=block.line,
            )
        elif block.render and not block.language:
            result.add(
                "render-annotation",
                "live-render code block has no language tag",
                severity=Severity.WARNING,
                line=block.line,
            )


def _check_slug_conventions(result: DocumentResult, settings: ValidationSettings) -> None:
    metadata = result.metadata
    if metadata is None:
        return
    if len(metadata.slug) > settings.slug_max_length:
        result.add(
            "slug-length",
            f"slug is {len(metadata.slug)} characters long (limit {settings.slug_max_length})",
            severity=Severity.WARNING,
        )
    if settings.require_slug_matches_filename and result.path.stem != metadata.slug:
        result.add("slug-filename", f"file name '{result.path.stem}' does not match slug '{metadata.slug}'")


def _check_metadata(result: DocumentResult, raw_metadata: dict[str, Any]) -> None:
    try:
        result.metadata = PostMetadata.from_frontmatter(raw_metadata)
    except MissingMetadataError as exc:
        result.add("required-fields", f"missing or empty: {', '.join(exc.missing_keys)}")
    except InvalidMetadataError as exc:
        for field_name, reason in exc.problems:
            result.add("metadata", f"{field_name}: {reason}")


def validate_document(text: str, path: Path, settings: ValidationSettings | None = None) -> DocumentResult:
    """Run every single-file check on ``text``, read from ``path``."""
    result = DocumentResult(path=path)

    try:
        raw_header, body = split_header(text)
    except FrontmatterParsingError as exc:
        # Without a closing delimiter there is no telling where the body starts.
        result.add("frontmatter", exc.reason)
        return result

    try:
        raw_metadata = load_header(raw_header) if raw_header is not None else {}
    except FrontmatterParsingError as exc:
        result.add("frontmatter", exc.reason)
    else:
        _check_metadata(result, raw_metadata)

    blocks: list[Block] | None = None
    try:
        blocks = parse_body(body, start_line=body_start_line(text, body))
    except UnclosedCodeFenceError as exc:
        result.add("code-fences", f"code fence '{exc.fence}' is never closed", line=exc.line)
    else:
        _check_render_annotations(result, blocks)

    if settings is not None:
        _check_slug_conventions(result, settings)

    if result.metadata is not None and blocks is not None:
        result.post = Post(metadata=result.metadata, body=tuple(blocks), source_path=path)
    return result


def _check_unique_slugs(results: Iterable[DocumentResult]) -> list[ValidationIssue]:
    by_slug: dict[str, list[Path]] = defaultdict(list)
    for result in results:
        if result.metadata is not None:
            by_slug[result.metadata.slug].append(result.path)

    issues = []
    for slug, paths in by_slug.items():
        if len(paths) < 2:
            continue
        for path in paths:
            others = ", ".join(str(other) for other in paths if other != path)
            issues.append(
                ValidationIssue(path, "unique-slug", Severity.ERROR, f"slug '{slug}' is also used by {others}")
            )
    return issues


def validate_collection(
    directory: Path,
    *,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    encoding: str = "utf-8",
    settings: ValidationSettings | None = None,
) -> ValidationReport:
    """Validate every post file below ``directory``."""
    report = ValidationReport()
    results: list[DocumentResult] = []

    for path in iter_post_paths(directory, extensions):
        report.files_checked += 1
        try:
            text = path.read_text(encoding=encoding)
        except (OSError, UnicodeDecodeError) as exc:
            result = DocumentResult(path=path)
            result.add("read", f"cannot read file: {exc}")
        else:
            result = validate_document(text, path, settings)
        results.append(result)

    duplicate_issues = _check_unique_slugs(results)
    duplicated = {issue.path for issue in duplicate_issues}

    for result in results:
        report.issues.extend(result.issues)
        if result.post is not None and result.path not in duplicated and not _has_errors(result):
            report.posts.append(result.post)
    report.issues.extend(duplicate_issues)
    report.issues.sort(key=lambda issue: (str(issue.path), issue.line or 0, issue.check))

    logger.info(
        "Checked %d files: %d errors, %d warnings",
        report.files_checked,
        len(report.errors),
        len(report.warnings),
    )
    return report


def validate_config(config: PostshelfConfig) -> ValidationReport:
    """Validate the collection described by ``config``."""
    return validate_collection(
        config.paths.abs_posts_dir,
        extensions=config.content.extensions,
        encoding=config.content.encoding,
        settings=config.validation,
    )


def _has_errors(result: DocumentResult) -> bool:
    return any(issue.severity is Severity.ERROR for issue in result.issues)
