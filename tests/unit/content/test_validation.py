"""Unit tests for collection-wide content-integrity checks."""

from pathlib import Path

import pytest

from postshelf.config import PostshelfConfig, ValidationSettings
from postshelf.content.validation import (
    Severity,
    ValidationIssue,
    ValidationReport,
    validate_collection,
    validate_config,
    validate_document,
)


def _checks(result_or_report) -> list[str]:
    return [issue.check for issue in result_or_report.issues]


# region: validate_document
def test_valid_document_has_no_issues(post_text):
    result = validate_document(post_text(), Path("props-and-state.mdx"))

    assert result.issues == []
    assert result.post is not None
    assert result.post.slug == "props-and-state"


def test_frontmatter_error_still_checks_the_body():
    result = validate_document("---\ntitle: [oops\n---\n```js\n", Path("bad.mdx"))

    assert _checks(result) == ["frontmatter", "code-fences"]
    assert result.issues[1].line == 4
    assert result.post is None


def test_unterminated_header_stops_further_checks():
    result = validate_document("---\ntitle: Open\n\n```js\n", Path("bad.mdx"))

    assert _checks(result) == ["frontmatter"]
    assert "never closed" in result.issues[0].message


@pytest.mark.parametrize("date", ["2021-02-30", "2021-13-01"])
def test_impossible_calendar_date_is_reported(date):
    text = f"---\nslug: a\ntitle: A\ndate: {date}\nauthor: x\n---\nBody\n"

    result = validate_document(text, Path("a.mdx"))

    assert _checks(result) == ["frontmatter"]
    assert result.issues[0].severity is Severity.ERROR
    assert result.post is None


def test_missing_fields_and_unclosed_fence_are_both_reported():
    text = "---\ntitle: Half a post\ndate: 2021-01-01\n---\n\nIntro\n\n```jsx\n<App />\n"

    result = validate_document(text, Path("half.mdx"))

    assert _checks(result) == ["required-fields", "code-fences"]
    assert "slug" in result.issues[0].message
    assert "author" in result.issues[0].message
    assert result.issues[1].line == 8
    assert result.metadata is None
    assert result.post is None


def test_each_invalid_field_is_its_own_issue(post_text):
    text = post_text(slug="Not A Slug").replace("2021-03-14", "March 14")

    result = validate_document(text, Path("x.mdx"))

    assert _checks(result) == ["metadata", "metadata"]
    messages = " ".join(issue.message for issue in result.issues)
    assert "slug:" in messages
    assert "date:" in messages


def test_render_annotation_warnings(post_text):
    body = "```jsx render=yes\n<App />\n```\n\n```render=true\n<App />\n```\n\n```jsx render=false\n<App />\n```\n"

    result = validate_document(post_text(body=body), Path("x.mdx"))

    assert [(issue.check, issue.severity) for issue in result.issues] == [
        ("render-annotation", Severity.WARNING),
        ("render-annotation", Severity.WARNING),
    ]
    assert "render='yes'" in result.issues[0].message
    assert "no language tag" in result.issues[1].message
    # Warnings do not make a post invalid.
    assert result.post is not None


def test_slug_conventions_need_settings(post_text):
    text = post_text(slug="a-very-long-slug-for-a-post")
    settings = ValidationSettings(slug_max_length=10, require_slug_matches_filename=True)

    assert validate_document(text, Path("other.mdx")).issues == []

    result = validate_document(text, Path("other.mdx"), settings)

    assert _checks(result) == ["slug-length", "slug-filename"]
    assert result.issues[0].severity is Severity.WARNING
    assert result.issues[1].severity is Severity.ERROR


# endregion


# region: validate_collection
def test_duplicate_slugs_flag_every_file(posts_dir, write_post_file, post_text):
    first = write_post_file("a.mdx", post_text(slug="same"))
    second = write_post_file("b.mdx", post_text(slug="same"))
    write_post_file("c.mdx", post_text(slug="unique"))

    report = validate_collection(posts_dir)

    assert report.files_checked == 3
    duplicates = [issue for issue in report.issues if issue.check == "unique-slug"]
    assert [issue.path for issue in duplicates] == [first, second]
    assert str(second) in duplicates[0].message
    assert [post.slug for post in report.posts] == ["unique"]
    assert report.failed()


def test_duplicates_are_detected_even_when_body_is_broken(posts_dir, write_post_file, post_text):
    write_post_file("a.mdx", post_text(slug="same"))
    write_post_file("b.mdx", post_text(slug="same", body="```js\nopen\n"))

    report = validate_collection(posts_dir)

    assert sorted(_checks(report)) == ["code-fences", "unique-slug", "unique-slug"]


def test_unreadable_file_is_an_error(posts_dir):
    (posts_dir / "latin1.mdx").write_bytes("---\ntitle: caf\xe9\n---\n".encode("latin-1"))

    report = validate_collection(posts_dir)

    assert _checks(report) == ["read"]
    assert report.failed()


def test_issues_are_sorted_by_location(posts_dir, write_post_file, post_text):
    write_post_file("b.mdx", post_text(slug="b", body="```js\nopen\n"))
    write_post_file("a.mdx", "---\ntitle: only a title\n---\n")

    report = validate_collection(posts_dir)

    assert [issue.path.name for issue in report.issues] == ["a.mdx", "b.mdx"]


def test_empty_directory_passes(posts_dir):
    report = validate_collection(posts_dir)
    assert report.files_checked == 0
    assert not report.failed()


def test_validate_config_uses_settings(site_root, write_post_file, post_text):
    (site_root / ".postshelf.toml").write_text("[validation]\nrequire_slug_matches_filename = true\n")
    write_post_file("wrong-name.mdx", post_text())

    report = validate_config(PostshelfConfig.load(site_root))

    assert _checks(report) == ["slug-filename"]


# endregion


def test_report_failure_modes():
    warning = ValidationIssue(Path("a.mdx"), "slug-length", Severity.WARNING, "long")
    error = ValidationIssue(Path("a.mdx"), "code-fences", Severity.ERROR, "open", line=3)

    assert not ValidationReport(issues=[warning]).failed()
    assert ValidationReport(issues=[warning]).failed(fail_on_warnings=True)
    assert ValidationReport(issues=[error]).failed()
    assert error.location == "a.mdx:3"
    assert warning.location == "a.mdx"
