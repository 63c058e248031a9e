"""Core data types for posts and their body blocks."""

from __future__ import annotations

import datetime as dt
import re
from pathlib import Path
from typing import Annotated, Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from postshelf.content.exceptions import InvalidMetadataError, MissingMetadataError
from postshelf.utils.slugify import is_url_safe_slug

REQUIRED_FIELDS: Final[tuple[str, ...]] = ("slug", "title", "date", "author")
OPTIONAL_FIELDS: Final[tuple[str, ...]] = ("tags",)
CANONICAL_ORDER: Final[tuple[str, ...]] = REQUIRED_FIELDS + OPTIONAL_FIELDS

_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def coerce_calendar_date(value: Any) -> dt.date:
    """Return ``value`` as a calendar date.

    Accepts a ``date``, a naive ``datetime`` at midnight, or a ``YYYY-MM-DD``
    string.

    Raises:
        ValueError: If ``value`` is anything else.

    """
    # datetime is a date subclass, so it must be checked first.
    if isinstance(value, dt.datetime):
        if value.tzinfo is not None or value.time() != dt.time(0):
            msg = "must be an ISO calendar date (YYYY-MM-DD), not a timestamp"
            raise ValueError(msg)
        return value.date()
    if isinstance(value, str):
        text = value.strip()
        msg = f"'{value}' is not an ISO date (YYYY-MM-DD)"
        if not _ISO_DATE.fullmatch(text):
            raise ValueError(msg)
        try:
            return dt.date.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(msg) from exc
    if not isinstance(value, dt.date):
        msg = f"expected an ISO date (YYYY-MM-DD), got {type(value).__name__}"
        raise ValueError(msg)
    return value


class PostMetadata(BaseModel):
    """Validated metadata header of a post.

    Header keys outside :data:`CANONICAL_ORDER` are kept as extra fields so that
    re-serialising a header does not drop anything an author wrote.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    slug: str
    title: str
    date: dt.date
    author: str
    tags: frozenset[str] = frozenset()

    @field_validator("slug", "title", "author", mode="before")
    @classmethod
    def _require_text(cls, value: Any) -> str:
        if not isinstance(value, str):
            msg = f"expected a string, got {type(value).__name__}"
            raise ValueError(msg)
        value = value.strip()
        if not value:
            msg = "must not be empty"
            raise ValueError(msg)
        if "\n" in value or "\r" in value:
            msg = "must be a single line"
            raise ValueError(msg)
        return value

    @field_validator("slug")
    @classmethod
    def _require_url_safe(cls, value: str) -> str:
        if not is_url_safe_slug(value):
            msg = f"'{value}' is not URL-safe (lowercase letters, digits, single '-' or '_' separators)"
            raise ValueError(msg)
        return value

    @field_validator("date", mode="before")
    @classmethod
    def _require_calendar_date(cls, value: Any) -> dt.date:
        return coerce_calendar_date(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _require_tag_list(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        if isinstance(value, str) or not isinstance(value, (list, tuple, set, frozenset)):
            msg = f"expected a list of strings, got {type(value).__name__}"
            raise ValueError(msg)
        tags = set()
        for tag in value:
            if not isinstance(tag, str) or not tag.strip() or "\n" in tag or "\r" in tag:
                msg = f"tag {tag!r} must be a non-empty single-line string"
                raise ValueError(msg)
            tags.add(tag.strip())
        return frozenset(tags)

    @classmethod
    def from_frontmatter(cls, data: dict[str, Any]) -> PostMetadata:
        """Build metadata from a raw header mapping.

        Raises:
            MissingMetadataError: If a required field is absent or blank.
            InvalidMetadataError: If a field has an invalid value.

        """
        missing = [key for key in REQUIRED_FIELDS if _is_blank(data.get(key))]
        if missing:
            raise MissingMetadataError(missing)

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            problems = [
                (".".join(str(part) for part in error["loc"]) or "header", _clean_message(error["msg"]))
                for error in exc.errors()
            ]
            raise InvalidMetadataError(problems) from exc

    @property
    def extras(self) -> dict[str, Any]:
        return dict(self.model_extra or {})

    def to_frontmatter(self) -> dict[str, Any]:
        """Return the header as an ordered mapping in canonical key order."""
        header: dict[str, Any] = {
            "slug": self.slug,
            "title": self.title,
            "date": self.date,
            "author": self.author,
        }
        if self.tags:
            header["tags"] = sorted(self.tags)
        header.update(self.extras)
        return header


def _clean_message(message: str) -> str:
    # pydantic prefixes messages raised from validators.
    return message.removeprefix("Value error, ")


class Heading(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["heading"] = "heading"
    line: int
    level: int = Field(ge=1, le=6)
    text: str


class Prose(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["prose"] = "prose"
    line: int
    text: str


class CodeBlock(BaseModel):
    """A fenced code block.

    ``render`` marks a snippet that the consuming site should also evaluate
    and display as a live example.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["code"] = "code"
    line: int
    fence: str
    language: str | None = None
    attributes: dict[str, str] = Field(default_factory=dict)
    code: str = ""

    @property
    def render(self) -> bool:
        return self.attributes.get("render", "").lower() == "true"


Block = Annotated[Heading | Prose | CodeBlock, Field(discriminator="kind")]


class Post(BaseModel):
    """A single content entry: metadata header plus ordered body blocks."""

    model_config = ConfigDict(frozen=True)

    metadata: PostMetadata
    body: tuple[Block, ...] = ()
    source_path: Path | None = None

    @property
    def slug(self) -> str:
        return self.metadata.slug

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def date(self) -> dt.date:
        return self.metadata.date

    @property
    def author(self) -> str:
        return self.metadata.author

    @property
    def tags(self) -> frozenset[str]:
        return self.metadata.tags

    @property
    def headings(self) -> list[Heading]:
        return [block for block in self.body if isinstance(block, Heading)]

    @property
    def code_blocks(self) -> list[CodeBlock]:
        return [block for block in self.body if isinstance(block, CodeBlock)]

    @property
    def live_examples(self) -> list[CodeBlock]:
        return [block for block in self.code_blocks if block.render]
