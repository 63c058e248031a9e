"""Split a post body into headings, prose and fenced code blocks.

The body is tokenised with markdown-it-py's CommonMark parser; nothing is
rendered. Only the block structure needed for integrity checks is kept:
headings for outlines, fenced code blocks with their info string, and
paragraphs and HTML blocks as prose. Fences nested in block quotes and list
items are found as well as top-level ones.

A fence that is still open when its container ends (or at the end of the
body) is an error, although CommonMark would close it implicitly.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from markdown_it import MarkdownIt

from postshelf.content.exceptions import UnclosedCodeFenceError
from postshelf.content.types import Block, CodeBlock, Heading, Prose

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from markdown_it.token import Token

logger = logging.getLogger(__name__)

_md = MarkdownIt("commonmark", {"html": True})

_PROSE_TOKENS = frozenset({"html_block", "code_block"})


def parse_info_string(info: str) -> tuple[str | None, dict[str, str]]:
    """Parse a fence info string into a language tag and attributes.

    The first token is the language unless it is a ``key=value`` pair.
    Remaining ``key=value`` tokens become attributes; a bare token is kept
    with an empty value.

    Examples:
        >>> parse_info_string("jsx render=true")
        ('jsx', {'render': 'true'})
        >>> parse_info_string("render=true")
        (None, {'render': 'true'})
        >>> parse_info_string("")
        (None, {})

    """
    tokens = info.split()
    if not tokens:
        return None, {}

    language: str | None = None
    if "=" not in tokens[0]:
        language = tokens.pop(0)

    attributes: dict[str, str] = {}
    for token in tokens:
        key, _, value = token.partition("=")
        if key:
            attributes[key] = value.strip("\"'")
    return language, attributes


def _fence_is_closed(token: Token) -> bool:
    # A closed fence spans its opening line, one line per content line and
    # the closing line. An unclosed one stops where its container ends.
    start, end = token.map
    return end - start == token.content.count("\n") + 2


def _code_block(token: Token, line: int) -> CodeBlock:
    if not _fence_is_closed(token):
        raise UnclosedCodeFenceError(line, token.markup)
    language, attributes = parse_info_string(token.info)
    return CodeBlock(
        line=line,
        fence=token.markup,
        language=language,
        attributes=attributes,
        code=token.content.removesuffix("\n"),
    )


def parse_body(text: str, *, start_line: int = 1) -> list[Block]:
    """Parse ``text`` into body blocks.

    Args:
        text: Body of a post, header excluded.
        start_line: Line number of the first body line in its file.

    Returns:
        Blocks in document order.

    Raises:
        UnclosedCodeFenceError: If a fenced code block is never closed.

    """
    # Every line must end in a newline for the fence line count to hold.
    source = text if not text or text.endswith("\n") else f"{text}\n"
    tokens = _md.parse(source)

    blocks: list[Block] = []
    for index, token in enumerate(tokens):
        if token.map is None:
            continue
        line = start_line + token.map[0]
        if token.type == "fence":
            blocks.append(_code_block(token, line))
        elif token.type == "heading_open":
            text_token = tokens[index + 1]
            blocks.append(Heading(line=line, level=int(token.tag[1:]), text=text_token.content.strip()))
        elif token.type == "paragraph_open":
            blocks.append(Prose(line=line, text=tokens[index + 1].content))
        elif token.type in _PROSE_TOKENS:
            blocks.append(Prose(line=line, text=token.content.strip("\n")))

    logger.debug("Parsed %d blocks from %d tokens", len(blocks), len(tokens))
    return blocks


def iter_code_blocks(blocks: Iterable[Block]) -> Iterator[CodeBlock]:
    """Yield only the fenced code blocks from ``blocks``."""
    for block in blocks:
        if isinstance(block, CodeBlock):
            yield block
