"""
Command-line interface for rendering forms.

Usage:
    clausework render BUNDLE [--out FILE]       # Interactive HTML
    clausework print BUNDLE [--out FILE]        # Printable document markup
    clausework digest FORM_OR_BUNDLE            # Content digest of a form
    clausework inspect BUNDLE                   # Show overlays and table of contents
    clausework build SOURCE_DIR [--out DIR]     # Render every bundle in a directory
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.tree import Tree

from clausework_core.errors import IntegrityError
from clausework_core.hashing import form_digest
from clausework_render.compose import TocEntry
from clausework_render.threads import thread_comments
from render_pipeline.bundle import RenderBundle, load_bundle, load_form
from render_pipeline.render import build_directory, compose_bundle, print_styles, render_interactive, render_print
from render_pipeline.settings import get_settings

app = typer.Typer(
    name="clausework",
    help="Render forms with lint annotations, comments and filled blanks.",
)
console = Console()
err_console = Console(stderr=True)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log composition details"),
):
    settings = get_settings()
    level = logging.DEBUG if verbose else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _load(bundle_path: Path) -> RenderBundle:
    try:
        return load_bundle(bundle_path)
    except ValidationError as e:
        err_console.print(f"[red]Invalid bundle {bundle_path}:[/red]\n{e}")
        raise typer.Exit(1)


def _write(output: Optional[Path], text: str) -> None:
    if output is None:
        typer.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    err_console.print(f"[green]✓ Wrote {output}[/green]")


@app.command()
def render(
    bundle_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Render bundle JSON"),
    output: Optional[Path] = typer.Option(None, "-o", "--out", help="Output HTML file (default: stdout)"),
    annotated: bool = typer.Option(True, "--annotated/--plain", help="Include lint and critique annotations"),
    child_links: Optional[bool] = typer.Option(
        None, "--child-links/--no-child-links", help="Link child forms by digest"
    ),
):
    """
    Render a bundle as interactive HTML.
    """
    bundle = _load(bundle_path)
    try:
        html = render_interactive(bundle, get_settings(), annotated=annotated, child_links=child_links)
    except IntegrityError as e:
        err_console.print(f"[red]Render aborted:[/red] {e.report.to_log_message()}")
        raise typer.Exit(1)
    _write(output, html)


@app.command("print")
def print_document(
    bundle_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Render bundle JSON"),
    output: Optional[Path] = typer.Option(None, "-o", "--out", help="Output file (default: stdout)"),
    numbering: Optional[str] = typer.Option(None, "--numbering", "-n", help="Numbering scheme: outline or decimal"),
    title: Optional[str] = typer.Option(None, "--title", help="Document title"),
    edition: Optional[str] = typer.Option(None, "--edition", help="Edition shown under the title"),
):
    """
    Render a bundle as printable document markup.
    """
    settings = get_settings()
    bundle = _load(bundle_path)
    try:
        styles = print_styles(bundle, settings, numbering=numbering, title=title, edition=edition)
        markup = render_print(bundle, settings, styles)
    except KeyError as e:
        raise typer.BadParameter(str(e.args[0]), param_hint="--numbering")
    except IntegrityError as e:
        err_console.print(f"[red]Render aborted:[/red] {e.report.to_log_message()}")
        raise typer.Exit(1)
    _write(output, markup)


@app.command()
def digest(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Form or bundle JSON"),
):
    """
    Print the content digest of a form.
    """
    try:
        form = load_form(path)
    except ValidationError as e:
        err_console.print(f"[red]Not a form or bundle: {path}[/red]\n{e}")
        raise typer.Exit(1)
    typer.echo(form_digest(form))


def _toc_tree(tree: Tree, entries: tuple[TocEntry, ...]) -> None:
    for entry in entries:
        branch = tree.add(entry.label if entry.heading is not None else f"[dim]{entry.label}[/dim]")
        _toc_tree(branch, entry.children)


@app.command()
def inspect(
    bundle_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Render bundle JSON"),
):
    """
    Show what a bundle overlays on its form.

    Displays:
    - Component resolutions and upgrades
    - Annotations by level
    - Comment threads
    - Blank values
    - Table of contents
    """
    settings = get_settings()
    bundle = _load(bundle_path)
    try:
        document = compose_bundle(bundle, settings)
    except IntegrityError as e:
        err_console.print(f"[red]Render aborted:[/red] {e.report.to_log_message()}")
        raise typer.Exit(1)

    console.print(f"\n[bold cyan]Form {document.address.digest}[/bold cyan]\n")

    table = Table(title="Resolutions", show_header=True, header_style="bold cyan")
    table.add_column("Path", style="cyan")
    table.add_column("Publication")
    table.add_column("Upgraded from", justify="center")
    for resolution in bundle.loaded.resolutions:
        table.add_row(
            str(resolution.form_path),
            f"{resolution.publisher}/{resolution.project} {resolution.edition}",
            resolution.upgraded_from or "",
        )
    console.print(table)

    table = Table(title="Annotations", show_header=True, header_style="bold cyan")
    table.add_column("Level", justify="center")
    table.add_column("Path", style="cyan")
    table.add_column("Message")
    colors = {"error": "red", "warning": "yellow"}
    for annotation in bundle.annotations:
        color = colors.get(annotation.level.value, "white")
        table.add_row(f"[{color}]{annotation.level.value}[/{color}]", str(annotation.form_path), annotation.message)
    console.print(table)

    forest = thread_comments(bundle.comments, max_depth=settings.max_thread_depth)
    table = Table(title="Comments", show_header=True, header_style="bold cyan")
    table.add_column("Form", style="cyan")
    table.add_column("Author")
    table.add_column("Text")
    for depth, comment in forest.walk():
        table.add_row(comment.form[:12], comment.author, "  " * depth + comment.text)
    console.print(table)
    if forest.dropped:
        console.print(f"[dim]{len(forest.dropped)} comments with unknown reply targets not shown[/dim]")

    table = Table(title="Blanks", show_header=True, header_style="bold cyan")
    table.add_column("Path", style="cyan")
    table.add_column("Value")
    for mapping in bundle.mappings:
        table.add_row(str(mapping.form_path), mapping.value)
    console.print(table)

    toc = Tree("[bold]Table of Contents[/bold]")
    _toc_tree(toc, document.toc)
    console.print(toc)


@app.command()
def build(
    source_dir: Path = typer.Argument(..., exists=True, file_okay=False, help="Directory of bundle JSON files"),
    output_dir: Optional[Path] = typer.Option(None, "-o", "--out", help="Output directory"),
):
    """
    Render every bundle in a directory: plain, annotated and print pages.
    """
    settings = get_settings()
    target = output_dir or settings.output_dir
    try:
        results = build_directory(source_dir, target, settings)
    except (IntegrityError, ValidationError) as e:
        err_console.print(f"[red]Build aborted:[/red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]✓ Rendered {len(results)} bundles into {target}[/green]")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
