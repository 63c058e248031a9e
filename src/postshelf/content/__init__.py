"""Reading, validating and writing MDX-like blog posts."""

from postshelf.content.loader import PostCollection, load_post, parse_post
from postshelf.content.types import CodeBlock, Heading, Post, PostMetadata, Prose
from postshelf.content.validation import ValidationReport, validate_collection

__all__ = [
    "CodeBlock",
    "Heading",
    "Post",
    "PostCollection",
    "PostMetadata",
    "Prose",
    "ValidationReport",
    "load_post",
    "parse_post",
    "validate_collection",
]
