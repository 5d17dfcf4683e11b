"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from mdsite.config import Settings, load_config
from mdsite.core.errors import BuildError
from mdsite.core.pipeline import BuildReport, collect, run_build


ContentDir = Annotated[Optional[str], typer.Argument(help="Content directory (default: content_dir setting)")]


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _echo_report(report: BuildReport) -> None:
    """Print per-collection counts and a summary line."""
    for name, count in report.collections.items():
        typer.echo(f"  {name}: {count}")
    typer.echo(
        f"{report.items} item(s), "
        f"{report.documents} document(s), "
        f"{report.redirects} redirect(s), "
        f"{report.tags} tag(s)"
    )
    if report.skipped:
        typer.echo(f"Skipped {report.skipped} unpublished item(s)")


def build_cmd(
    content: ContentDir = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    templates: Annotated[Optional[str], typer.Option("--templates-dir", help="Templates searched before the defaults")] = None,
    base_url: Annotated[Optional[str], typer.Option("--base-url", help="Absolute URL prefix for links")] = None,
    workers: Annotated[Optional[int], typer.Option("--workers", help="Parser threads")] = None,
    unpublished: Annotated[Optional[bool], typer.Option("--unpublished/--published-only", help="Include published: false items")] = None,
    ):
    """Run the full pipeline: parse -> resolve -> index -> render -> write."""
    settings = _settings(overrides={
        "content_dir": content, "output_dir": out, "templates_dir": templates,
        "base_url": base_url, "workers": workers, "include_unpublished": unpublished,
    })
    try:
        report = run_build(settings)
    except (BuildError, ValueError) as e:
        _fail(str(e))
    _echo_report(report)
    typer.echo(f"Wrote {len(report.written)} file(s) to {settings.output_dir}/")


def check_cmd(
    content: ContentDir = None,
    templates: Annotated[Optional[str], typer.Option("--templates-dir", help="Templates searched before the defaults")] = None,
    workers: Annotated[Optional[int], typer.Option("--workers", help="Parser threads")] = None,
    ):
    """Validate content, links and templates without writing any output."""
    settings = _settings(overrides={"content_dir": content, "templates_dir": templates, "workers": workers})
    try:
        report = run_build(settings, write=False)
    except (BuildError, ValueError) as e:
        _fail(str(e))
    _echo_report(report)
    typer.echo("OK")


def list_cmd(
    content: ContentDir = None,
    ):
    """List collections and their items."""
    settings = _settings(overrides={"content_dir": content})
    try:
        store, _ = collect(
            Path(settings.content_dir), settings.default_collection,
            settings.workers, settings.include_unpublished,
        )
    except BuildError as e:
        _fail(str(e))
    if not len(store):
        typer.echo("No content found.")
        raise typer.Exit(1)
    for name in store.collections():
        typer.echo(name)
        for item in store.all(name):
            typer.echo(f"  {item.identifier}  {item.title}")
