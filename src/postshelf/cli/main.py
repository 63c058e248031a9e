"""Main CLI application for Postshelf."""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from postshelf.cli.errorhandler import handle_cli_errors
from postshelf.config import PostshelfConfig
from postshelf.content.exceptions import PostExistsError
from postshelf.content.loader import PostCollection, iter_post_paths
from postshelf.content.types import CodeBlock, Heading, Post
from postshelf.content.validation import Severity, ValidationReport, validate_config
from postshelf.content.writer import NEW_POST_BODY, build_metadata, reformat_post, write_post
from postshelf.logging_setup import configure_logging

app = typer.Typer(
    name="postshelf",
    help="Check, list and author MDX-like blog posts",
    add_completion=False,
)

console = Console()
logger = logging.getLogger(__name__)

RootArgument = Annotated[
    Path,
    typer.Argument(help="Content repository root (where .postshelf.toml lives)", file_okay=False),
]
DebugOption = Annotated[bool, typer.Option("--debug", help="Enable debug logging and show tracebacks")]


def main() -> None:
    """Entry point for the ``postshelf`` console script."""
    app()


def _load_config(root: Path, *, debug: bool) -> PostshelfConfig:
    configure_logging(debug=debug)
    config = PostshelfConfig.load(root.resolve())
    logger.debug("Posts directory: %s", config.paths.abs_posts_dir)
    return config


def _format_tags(tags: frozenset[str]) -> str:
    return ", ".join(sorted(tags))


def _print_report(report: ValidationReport, *, fail_on_warnings: bool) -> None:
    if report.issues:
        table = Table(title="Content Issues")
        table.add_column("Location", style="bold cyan")
        table.add_column("Check")
        table.add_column("Severity")
        table.add_column("Message")
        for issue in report.issues:
            color = "red" if issue.severity is Severity.ERROR else "yellow"
            table.add_row(
                escape(issue.location),
                issue.check,
                f"[{color}]{issue.severity.value}[/{color}]",
                escape(issue.message),
            )
        console.print(table)
        console.print()

    error_count = len(report.errors)
    warning_count = len(report.warnings)
    if not report.failed(fail_on_warnings=fail_on_warnings):
        if warning_count:
            console.print(f"[bold yellow]⚠️  {warning_count} warning(s); content is publishable.[/bold yellow]")
        else:
            console.print("[bold green]✅ All posts passed.[/bold green]")
    else:
        console.print(f"[bold red]❌ {error_count} error(s), {warning_count} warning(s) found.[/bold red]")

    console.print(
        f"[dim]Summary: {report.files_checked} file(s) checked, {len(report.posts)} valid post(s), "
        f"{error_count} errors, {warning_count} warnings[/dim]"
    )


@app.command()
def check(
    root: RootArgument = Path(),
    *,
    strict: Annotated[bool, typer.Option("--strict", help="Fail on warnings as well as errors")] = False,
    debug: DebugOption = False,
) -> None:
    """Validate every post: metadata, unique slugs and closed code fences."""
    with handle_cli_errors(debug=debug):
        config = _load_config(root, debug=debug)
        posts_dir = config.paths.abs_posts_dir
        if not posts_dir.is_dir():
            console.print(f"[bold red]Posts directory not found:[/bold red] {escape(str(posts_dir))}")
            raise typer.Exit(1)

        report = validate_config(config)
        fail_on_warnings = strict or config.validation.fail_on_warnings
        _print_report(report, fail_on_warnings=fail_on_warnings)

    if report.failed(fail_on_warnings=fail_on_warnings):
        raise typer.Exit(1)


@app.command(name="list")
def list_posts(
    root: RootArgument = Path(),
    *,
    tag: Annotated[str | None, typer.Option("--tag", "-t", help="Only show posts with this tag")] = None,
    debug: DebugOption = False,
) -> None:
    """List posts, newest first."""
    with handle_cli_errors(debug=debug):
        config = _load_config(root, debug=debug)
        collection = PostCollection.from_config(config)
        posts = collection.with_tag(tag) if tag else list(collection)

    if not posts:
        console.print("[dim]No posts found.[/dim]")
        return

    table = Table(title=f"Posts tagged '{escape(tag)}'" if tag else "Posts")
    table.add_column("Date", style="dim")
    table.add_column("Slug", style="bold cyan")
    table.add_column("Title")
    table.add_column("Author")
    table.add_column("Tags", style="magenta")
    for post in posts:
        table.add_row(
            post.date.isoformat(),
            post.slug,
            escape(post.title),
            escape(post.author),
            escape(_format_tags(post.tags)),
        )
    console.print(table)


def _print_outline(post: Post) -> None:
    for block in post.body:
        if isinstance(block, Heading):
            indent = "  " * (block.level - 1)
            console.print(f"{indent}[bold]{escape(block.text)}[/bold] [dim](line {block.line})[/dim]")
        elif isinstance(block, CodeBlock):
            language = block.language or "text"
            live = " [green]live[/green]" if block.render else ""
            lines = block.code.count("\n") + 1 if block.code else 0
            console.print(f"  [cyan]``` {escape(language)}[/cyan]{live} [dim]({lines} lines, line {block.line})[/dim]")


@app.command()
def show(
    slug: Annotated[str, typer.Argument(help="Slug of the post to show")],
    root: RootArgument = Path(),
    *,
    debug: DebugOption = False,
) -> None:
    """Show a post's metadata and an outline of its body."""
    with handle_cli_errors(debug=debug):
        config = _load_config(root, debug=debug)
        post = PostCollection.from_config(config).get(slug)

    console.print(f"[bold]{escape(post.title)}[/bold]")
    console.print(f"[dim]slug:[/dim]   {post.slug}")
    console.print(f"[dim]date:[/dim]   {post.date.isoformat()}")
    console.print(f"[dim]author:[/dim] {escape(post.author)}")
    if post.tags:
        console.print(f"[dim]tags:[/dim]   {escape(_format_tags(post.tags))}")
    for key, value in post.metadata.extras.items():
        console.print(f"[dim]{escape(key)}:[/dim] {escape(str(value))}")
    if post.source_path is not None:
        console.print(f"[dim]file:[/dim]   {escape(str(post.source_path))}")
    console.print()
    _print_outline(post)
    console.print()
    console.print(
        f"[dim]{len(post.headings)} heading(s), {len(post.code_blocks)} code block(s), "
        f"{len(post.live_examples)} live example(s)[/dim]"
    )


def _parse_date(value: str | None) -> dt.date | None:
    if value is None:
        return None
    try:
        return dt.date.fromisoformat(value)
    except ValueError as exc:
        msg = f"'{value}' is not an ISO date (YYYY-MM-DD)"
        raise typer.BadParameter(msg, param_hint="--date") from exc


@app.command()
def new(
    title: Annotated[str, typer.Argument(help="Title of the new post")],
    root: RootArgument = Path(),
    *,
    author: Annotated[str, typer.Option("--author", "-a", help="Author identifier")],
    tags: Annotated[list[str] | None, typer.Option("--tag", "-t", help="Topic tag (repeatable)")] = None,
    slug: Annotated[str | None, typer.Option("--slug", help="Slug (derived from the title if omitted)")] = None,
    date: Annotated[str | None, typer.Option("--date", help="Publication date (YYYY-MM-DD), default today")] = None,
    debug: DebugOption = False,
) -> None:
    """Scaffold a new post with a valid metadata header."""
    publish_date = _parse_date(date)
    with handle_cli_errors(debug=debug):
        config = _load_config(root, debug=debug)
        metadata = build_metadata(title, author, date=publish_date, tags=tags or (), slug=slug)

        posts_dir = config.paths.abs_posts_dir
        if posts_dir.is_dir():
            collection = PostCollection.from_config(config)
            if metadata.slug in collection:
                existing = collection.get(metadata.slug).source_path
                raise PostExistsError(str(existing or metadata.slug))

        path = write_post(
            metadata,
            NEW_POST_BODY,
            posts_dir,
            extension=config.content.default_extension,
            encoding=config.content.encoding,
        )

    console.print(f"[bold green]✅ Created[/bold green] {escape(str(path))}")


@app.command()
def fmt(
    root: RootArgument = Path(),
    *,
    check_only: Annotated[
        bool, typer.Option("--check", help="Report files that would change without writing them")
    ] = False,
    debug: DebugOption = False,
) -> None:
    """Rewrite post headers in canonical form (key order, sorted tags)."""
    with handle_cli_errors(debug=debug):
        config = _load_config(root, debug=debug)
        changed: list[Path] = []
        for path in iter_post_paths(config.paths.abs_posts_dir, config.content.extensions):
            if reformat_post(path, encoding=config.content.encoding, check=check_only):
                changed.append(path)

    verb = "would reformat" if check_only else "reformatted"
    for path in changed:
        console.print(f"{verb} {escape(str(path))}")

    if not changed:
        console.print("[bold green]✅ All headers are canonical.[/bold green]")
        return
    console.print(f"[dim]{len(changed)} file(s) {verb}[/dim]")
    if check_only:
        raise typer.Exit(1)
