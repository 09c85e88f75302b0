"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from postpub.config import Settings, load_config
from postpub.core.export import write_site
from postpub.core.models import Severity, Site, Violation
from postpub.core.pipeline import run_pipeline
from postpub.core.validate import has_errors


PathArg = Annotated[Optional[str], typer.Argument(help="Post file or directory (default: source_dir)")]
TimezoneOpt = Annotated[Optional[str], typer.Option("--timezone", help="IANA zone for dates without an offset")]
StrictOpt = Annotated[Optional[bool], typer.Option("--strict/--no-strict", help="Fail on warnings too")]


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


def _run(path: Optional[str], settings: Settings) -> Site:
    try:
        return run_pipeline(path or settings.source_dir, settings)
    except FileNotFoundError as e:
        _fail(str(e))
    except RuntimeError as e:
        _fail("Build failed", e)


def _echo_report(violations: tuple[Violation, ...], posts: int) -> None:
    """Print every violation and a summary line."""
    for v in violations:
        typer.echo(f"  {v}")
    counts = {s: sum(v.severity == s for v in violations) for s in Severity}
    typer.echo(
        f"{posts} post(s) - "
        f"{counts[Severity.error]} error(s), "
        f"{counts[Severity.warning]} warning(s), "
        f"{counts[Severity.info]} info"
    )


def build_cmd(
    path: PathArg = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    workers: Annotated[Optional[int], typer.Option("--workers", help="Parallel parse workers")] = None,
    timezone: TimezoneOpt = None,
    strict: StrictOpt = None,
    ):
    """Run the pipeline and export posts, sidecars and site.json."""
    settings = _settings(overrides={
        "output_dir": out, "workers": workers, "default_timezone": timezone, "strict": strict,
    })
    site = _run(path, settings)
    _echo_report(site.violations, len(site.posts))

    output_dir = Path(settings.output_dir)
    try:
        results = write_site(site, output_dir)
    except OSError as e:
        _fail("Export failed", e)
    for slug, md_path in results:
        typer.echo(f"  {slug} -> {md_path}")
    typer.echo(f"Exported {len(results)} post(s) to {output_dir}/")

    if has_errors(site.violations, settings.strict):
        raise typer.Exit(1)


def check_cmd(
    path: PathArg = None,
    timezone: TimezoneOpt = None,
    strict: StrictOpt = None,
    ):
    """Validate posts and report every violation without writing output."""
    settings = _settings(overrides={"default_timezone": timezone, "strict": strict})
    site = _run(path, settings)
    _echo_report(site.violations, len(site.posts))
    if has_errors(site.violations, settings.strict):
        raise typer.Exit(1)


def feed_cmd(
    path: PathArg = None,
    timezone: TimezoneOpt = None,
    ):
    """List posts newest first with their previous/next neighbours."""
    settings = _settings(overrides={"default_timezone": timezone})
    site = _run(path, settings)
    if not site.posts:
        typer.echo("No posts found.")
        raise typer.Exit(1)
    for post in site.posts:
        nav = site.navigation[post.slug]
        typer.echo(f"{post.published_at.isoformat()}  {post.slug}  {post.title}")
        typer.echo(f"    previous: {nav.previous or '-'}  next: {nav.next or '-'}")


def tags_cmd(
    path: PathArg = None,
    categories: Annotated[bool, typer.Option("--categories", help="Show the category index instead")] = False,
    timezone: TimezoneOpt = None,
    ):
    """Print the tag (or category) index with post counts."""
    settings = _settings(overrides={"default_timezone": timezone})
    site = _run(path, settings)
    index = site.category_index if categories else site.tag_index
    if not index:
        typer.echo("No categories found." if categories else "No tags found.")
        raise typer.Exit(1)
    for label, slugs in index.items():
        typer.echo(f"{label} ({len(slugs)}): {', '.join(slugs)}")
