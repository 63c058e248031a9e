"""Unit tests for body segmentation and fence well-formedness."""

import pytest

from postshelf.content.blocks import iter_code_blocks, parse_body, parse_info_string
from postshelf.content.exceptions import UnclosedCodeFenceError
from postshelf.content.types import CodeBlock, Heading, Prose


# region: parse_info_string
@pytest.mark.parametrize(
    ("info", "expected"),
    [
        ("", (None, {})),
        ("jsx", ("jsx", {})),
        ("jsx render=true", ("jsx", {"render": "true"})),
        ("  tsx   render=true  title=App.tsx ", ("tsx", {"render": "true", "title": "App.tsx"})),
        ("render=true", (None, {"render": "true"})),
        ('jsx render="true"', ("jsx", {"render": "true"})),
        ("js noInline", ("js", {"noInline": ""})),
    ],
)
def test_parse_info_string(info, expected):
    assert parse_info_string(info) == expected


# endregion


def test_parse_body_splits_headings_prose_and_code():
    body = (
        "# Props vs. State\n"
        "\n"
        "Props come from the parent.\n"
        "State belongs to the component.\n"
        "\n"
        "```jsx render=true\n"
        "function App() {\n"
        "  return <Counter />;\n"
        "}\n"
        "```\n"
        "\n"
        "## Summary ##\n"
        "Start with props.\n"
    )

    blocks = parse_body(body)

    assert blocks == [
        Heading(line=1, level=1, text="Props vs. State"),
        Prose(line=3, text="Props come from the parent.\nState belongs to the component."),
        CodeBlock(
            line=6,
            fence="```",
            language="jsx",
            attributes={"render": "true"},
            code="function App() {\n  return <Counter />;\n}",
        ),
        Heading(line=12, level=2, text="Summary"),
        Prose(line=13, text="Start with props."),
    ]


def test_parse_body_offsets_line_numbers():
    blocks = parse_body("## Title\n\ntext", start_line=12)
    assert [block.line for block in blocks] == [12, 14]


def test_hash_without_space_is_prose():
    blocks = parse_body("#hashtag is not a heading")
    assert blocks == [Prose(line=1, text="#hashtag is not a heading")]


def test_heading_markers_inside_code_are_code():
    blocks = parse_body("```bash\n# install\nnpm i react\n```")
    assert len(blocks) == 1
    assert blocks[0].code == "# install\nnpm i react"


def test_tilde_fence_with_backticks_inside():
    body = "~~~md\nUse ```jsx to open a block.\n```\n~~~"
    (block,) = parse_body(body)
    assert block.fence == "~~~"
    assert block.language == "md"
    assert block.code == "Use ```jsx to open a block.\n```"


def test_longer_fence_needs_longer_close():
    body = "````md\n```jsx\n<App />\n```\n````"
    (block,) = parse_body(body)
    assert block.code == "```jsx\n<App />\n```"


def test_closing_fence_may_be_longer_than_opening():
    (block,) = parse_body("```\ncode\n`````")
    assert block.code == "code"


def test_line_with_text_after_fence_does_not_close():
    with pytest.raises(UnclosedCodeFenceError):
        parse_body("```js\nconst a = 1;\n```js\n")


def test_backtick_info_string_is_not_a_fence():
    blocks = parse_body("``` inline `code` here ```")
    assert blocks == [Prose(line=1, text="``` inline `code` here ```")]


def test_indented_fence_strips_indentation_from_code():
    (block,) = parse_body("  ```js\n  const a = 1;\n    nested();\n  ```")
    assert block.code == "const a = 1;\n  nested();"


def test_four_space_indent_is_not_a_fence():
    blocks = parse_body("    ```js\n    code")
    assert not list(iter_code_blocks(blocks))


def test_empty_code_block():
    (block,) = parse_body("```\n```")
    assert block.code == ""
    assert block.language is None


# region: well-formedness
def test_unclosed_fence_raises_with_opening_line():
    body = "Intro\n\n```jsx render=true\nfunction App() {}\n"

    with pytest.raises(UnclosedCodeFenceError) as excinfo:
        parse_body(body, start_line=20)

    assert excinfo.value.line == 22
    assert excinfo.value.fence == "```"


def test_mismatched_fence_character_does_not_close():
    with pytest.raises(UnclosedCodeFenceError):
        parse_body("```js\ncode\n~~~")


def test_shorter_fence_does_not_close():
    with pytest.raises(UnclosedCodeFenceError):
        parse_body("````js\ncode\n```")


# endregion


def test_iter_code_blocks_filters_other_blocks():
    blocks = parse_body("# A\n\ntext\n\n```js\none\n```\n\n```py\ntwo\n```")
    assert [block.language for block in iter_code_blocks(blocks)] == ["js", "py"]


# region: fences inside containers
def test_fence_in_block_quote_is_found():
    (block,) = parse_body("Intro\n\n> ```js\n> const a = 1;\n> ```\n")[1:]
    assert block.line == 3
    assert block.code == "const a = 1;"


def test_unclosed_fence_in_block_quote_raises():
    with pytest.raises(UnclosedCodeFenceError) as excinfo:
        parse_body("> ```jsx render=true\n> <App />\n")
    assert excinfo.value.line == 1


def test_unclosed_fence_ends_with_its_list_item():
    with pytest.raises(UnclosedCodeFenceError) as excinfo:
        parse_body("- Install it:\n\n  ```bash\n  npm i react\n\nBack outside the list.\n", start_line=5)
    assert excinfo.value.line == 7


def test_live_example_in_list_item():
    blocks = parse_body("1. Step one\n\n    ```jsx render=true\n    <App />\n    ```\n")

    (block,) = list(iter_code_blocks(blocks))
    assert block.render
    assert block.line == 3
    assert block.code == "<App />"
    assert Prose(line=1, text="Step one") in blocks


# endregion


def test_html_block_is_prose():
    blocks = parse_body("<Callout>\nAsk who owns the value.\n</Callout>\n\n## Next")
    assert blocks == [
        Prose(line=1, text="<Callout>\nAsk who owns the value.\n</Callout>"),
        Heading(line=5, level=2, text="Next"),
    ]


def test_setext_heading():
    assert parse_body("Props\n=====\n") == [Heading(line=1, level=1, text="Props")]
