"""
CLI for pagekit.

Usage:
    pagekit render content/python.md -o build/python.html
    pagekit build --source-dir content --output-dir build
    pagekit meta content/python.md
    pagekit review --json
    pagekit check
"""

from __future__ import annotations

import functools
import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pagekit import __version__, frontmatter
from pagekit.builder import SiteBuilder
from pagekit.config import PagekitSettings, SiteConfig, load_site_config
from pagekit.errors import PagekitError, ReviewIntervalError
from pagekit.logging import configure_logging
from pagekit.metadata import PageMetadata, ReviewState
from pagekit.renderer import PageRenderer

console = Console()
err_console = Console(stderr=True)

_STATE_STYLE = {
    ReviewState.EXPIRED: "bold red",
    ReviewState.DUE_SOON: "yellow",
    ReviewState.OK: "green",
    ReviewState.UNKNOWN: "dim",
}


def handle_errors(func):
    """Report ``PagekitError`` as a one-line message and exit 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PagekitError as e:
            err_console.print(f"[bold red]Error[/bold red] ({e.category.value}): {escape(str(e))}", soft_wrap=True)
            sys.exit(1)

    return wrapper


def _site_config(ctx: click.Context, source_dir: str | None = None, output_dir: str | None = None) -> SiteConfig:
    config: SiteConfig = ctx.obj["config"]
    if source_dir is not None:
        config.source_dir = Path(source_dir)
    if output_dir is not None:
        config.output_dir = Path(output_dir)
    return config


@click.group()
@click.version_option(version=__version__, prog_name="pagekit")
@click.option(
    "--config", "-c", "config_path",
    type=click.Path(),
    default=None,
    help="YAML site configuration (default: $PAGEKIT_CONFIG_FILE or pagekit.yaml if present).",
)
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR).")
@click.option("--json-logs/--console-logs", default=None, help="Force JSON or console log output.")
@click.pass_context
@handle_errors
def cli(ctx: click.Context, config_path: str | None, log_level: str | None, json_logs: bool | None):
    """Render front-matter documentation pages to HTML."""
    settings = PagekitSettings()
    configure_logging(
        level=log_level or settings.log_level,
        json_format=json_logs if json_logs is not None else settings.log_json,
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_site_config(config_path)


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write HTML here instead of stdout.")
@click.pass_context
@handle_errors
def render(ctx: click.Context, file_path: str, output: str | None):
    """Render a single page."""
    config = _site_config(ctx)
    renderer = PageRenderer(
        template_dir=config.template_dir,
        layout=config.layout,
        warn_within_days=config.warn_within_days,
    )
    page = renderer.render_file(file_path)

    if output is None:
        click.echo(page.html, nl=False)
        return

    out = Path(output)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(page.html, encoding="utf-8")
    err_console.print(f"✅ {file_path} → {out} ({len(page.html.encode('utf-8')):,} bytes)")


@cli.command()
@click.option("--source-dir", "-s", type=click.Path(), default=None, help="Directory of page sources.")
@click.option("--output-dir", "-o", type=click.Path(), default=None, help="Directory to write HTML to.")
@click.pass_context
@handle_errors
def build(ctx: click.Context, source_dir: str | None, output_dir: str | None):
    """Render every page in the source directory."""
    config = _site_config(ctx, source_dir, output_dir)
    results = SiteBuilder(config).build_all()

    table = Table(title="Build Summary")
    table.add_column("Page", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Status", justify="center")

    for result in results:
        name = result.source.relative_to(config.source_dir).as_posix()
        if result.ok:
            table.add_row(name, f"{result.size:,} bytes", "✅")
        else:
            table.add_row(name, "-", "❌")

    console.print(table)

    failed = [r for r in results if not r.ok]
    for result in failed:
        err_console.print(f"[red]❌ {escape(str(result.error))}[/red]", soft_wrap=True)

    console.print(f"Built {len(results) - len(failed)} of {len(results)} pages into {config.output_dir}", soft_wrap=True)
    if failed:
        sys.exit(1)


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
@handle_errors
def meta(ctx: click.Context, file_path: str, as_json: bool):
    """Show a page's front matter and review status."""
    config = _site_config(ctx)
    document = frontmatter.read(file_path)
    metadata = PageMetadata.from_mapping(document.metadata)
    try:
        status = metadata.review_status(warn_within_days=config.warn_within_days)
    except ReviewIntervalError as e:
        raise e.with_context(source_path=file_path)

    if as_json:
        payload = {"metadata": metadata.data, "review": status.to_dict()}
        click.echo(json.dumps(payload, indent=2, default=str))
        return

    table = Table(title=file_path)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in metadata.data.items():
        table.add_row(key, "" if value is None else str(value))
    console.print(table)

    style = _STATE_STYLE[status.state]
    review_by = status.review_by.isoformat() if status.review_by else "-"
    console.print(f"Review: [{style}]{status.state.value}[/{style}] (review by {review_by})")


@cli.command()
@click.option("--source-dir", "-s", type=click.Path(), default=None, help="Directory of page sources.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
@handle_errors
def review(ctx: click.Context, source_dir: str | None, as_json: bool):
    """List pages by review date, most overdue first."""
    config = _site_config(ctx, source_dir)
    reviews = SiteBuilder(config).review_report()

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in reviews], indent=2))
        return

    table = Table(title="Page Reviews")
    table.add_column("Page", style="cyan")
    table.add_column("Title")
    table.add_column("Owner")
    table.add_column("Review by", justify="right")
    table.add_column("Status", justify="center")

    for item in reviews:
        style = _STATE_STYLE[item.status.state]
        review_by = item.status.review_by.isoformat() if item.status.review_by else "-"
        table.add_row(
            item.path.relative_to(config.source_dir).as_posix(),
            item.title,
            item.owner_slack or "",
            review_by,
            f"[{style}]{item.status.state.value}[/{style}]",
        )
    console.print(table)


@cli.command()
@click.option("--source-dir", "-s", type=click.Path(), default=None, help="Directory of page sources.")
@click.pass_context
@handle_errors
def check(ctx: click.Context, source_dir: str | None):
    """Validate front matter on every page."""
    config = _site_config(ctx, source_dir)
    result = SiteBuilder(config).check()

    if result["valid"]:
        console.print("[bold green]✅ Front matter is valid[/bold green]")
    else:
        console.print("[bold red]❌ Front matter check failed[/bold red]")

    for issue in result["issues"]:
        console.print(f"  ❌ {escape(issue)}", soft_wrap=True)
    for warning in result["warnings"]:
        console.print(f"  ⚠️  {escape(warning)}", soft_wrap=True)

    if not result["valid"]:
        sys.exit(1)


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
