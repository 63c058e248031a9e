"""CLI error handling utilities."""

from collections.abc import Generator
from contextlib import contextmanager

import typer
from rich.console import Console
from rich.markup import escape

from postshelf.content.exceptions import (
    ContentError,
    DocumentParsingError,
    DuplicateSlugError,
    PostExistsError,
    PostNotFoundError,
    WriterError,
)
from postshelf.exceptions import ConfigError, PostshelfError

console = Console(stderr=True)


@contextmanager
def handle_cli_errors(*, debug: bool = False) -> Generator[None, None, None]:
    """Context manager to handle CLI errors gracefully.

    Args:
        debug: If True, re-raise with the full traceback. If False, print a
            user-friendly error and exit with code 1.

    """
    try:
        yield
    except (KeyboardInterrupt, SystemExit, typer.Exit):
        raise
    except ConfigError as e:
        if debug:
            raise
        console.print(f"[bold red]Configuration Error:[/bold red] {escape(e.reason)}")
        console.print(f"Check [bold]{e.path}[/bold] and any POSTSHELF_* environment variables.")
        raise typer.Exit(1) from e
    except PostNotFoundError as e:
        if debug:
            raise
        console.print(f"[bold red]Post Not Found:[/bold red] no post has slug '{e.slug}'")
        raise typer.Exit(1) from e
    except DuplicateSlugError as e:
        if debug:
            raise
        console.print(f"[bold red]Duplicate Slug:[/bold red] '{e.slug}' is declared by:")
        for path in e.paths:
            console.print(f"  - {path}")
        console.print("Run [bold]postshelf check[/bold] for a full report.")
        raise typer.Exit(1) from e
    except DocumentParsingError as e:
        if debug:
            raise
        console.print(f"[bold red]Invalid Post:[/bold red] {e.path}")
        console.print(f"  {escape(e.reason)}")
        console.print("Run [bold]postshelf check[/bold] for a full report.")
        raise typer.Exit(1) from e
    except PostExistsError as e:
        if debug:
            raise
        console.print(f"[bold red]Post Exists:[/bold red] {e.path}")
        console.print("Choose another slug with [bold]--slug[/bold].")
        raise typer.Exit(1) from e
    except (ContentError, WriterError) as e:
        if debug:
            raise
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except PostshelfError as e:
        if debug:
            raise
        console.print(f"[bold red]Unexpected Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
