"""Main CLI entry point for ghcncache.

Provides commands to fetch GHCN files through the cache and to report on,
prune or clean the cache directory.
"""

import dataclasses
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from ghcncache.cache.config import CacheConfig
from ghcncache.cache.errors import InvalidPolicy
from ghcncache.cache.fetcher import CachedFetcher
from ghcncache.cache.maintenance import (
    FileKind,
    FilterCriteria,
    classify,
    clean,
    filter_records,
    remove_records,
    report,
)
from ghcncache.cache.stations import load_protected_ids

# Global consoles for Rich output
console = Console()
err_console = Console(stderr=True)

KIND_CHOICES = [kind.value for kind in FileKind if kind is not FileKind.UNCLASSIFIED]


def get_config(ctx: click.Context) -> CacheConfig:
    """Build configuration from the environment and global CLI options.

    Priority:
    1. Explicit --cachedir/-C and --profile flags
    2. GHCN_CACHE_DIR, GHCN_PROFILE and related environment variables
    3. Defaults
    """
    config = CacheConfig.from_env()
    overrides = {}
    if ctx.obj.get("cachedir"):
        overrides["cache_dir"] = Path(ctx.obj["cachedir"])
    if ctx.obj.get("profile"):
        overrides["profile"] = Path(ctx.obj["profile"])
    return dataclasses.replace(config, **overrides) if overrides else config


def require_cache_dir(config: CacheConfig) -> Path:
    if config.cache_dir is None:
        raise click.ClickException(
            "No cache directory given (use --cachedir or GHCN_CACHE_DIR)"
        )
    if not config.cache_dir.is_dir():
        raise click.ClickException(f"Cache directory not found: {config.cache_dir}")
    return config.cache_dir


def filter_options(command):
    """Attach the record selection options shared by report and remove."""
    options = [
        click.option("--country", help="Select stations in this country (e.g. CA)"),
        click.option("--state", "--prov", "state", help="Select stations in this state or province"),
        click.option("--location", help="Select stations whose name matches this regex"),
        click.option("--invert", "-v", is_flag=True, help="Invert the --location selection"),
        click.option("--above", type=int, help="Select files larger than this many KB (0: no bound)"),
        click.option("--below", type=int, help="Select files smaller than this many KB (0: no bound)"),
        click.option("--age", type=int, help="Select files at least this many days old"),
        click.option(
            "--type",
            "kinds",
            multiple=True,
            type=click.Choice(KIND_CHOICES, case_sensitive=False),
            help="File kinds to select (default: active and discardable data files)",
        ),
    ]
    for option in reversed(options):
        command = option(command)
    return command


def build_criteria(country, state, location, invert, above, below, age, kinds) -> FilterCriteria:
    selected = (
        frozenset(FileKind(kind.lower()) for kind in kinds)
        if kinds
        else frozenset({FileKind.ACTIVE, FileKind.DISCARDABLE})
    )
    return FilterCriteria(
        kinds=selected,
        country=country,
        state=state,
        location=location,
        invert=invert,
        above=above,
        below=below,
        age=age,
    )


def select_records(config: CacheConfig, criteria: FilterCriteria):
    cache_dir = require_cache_dir(config)
    protected = load_protected_ids(config.profile)
    records = classify(cache_dir, protected_ids=protected)
    return filter_records(records, criteria)


@click.group()
@click.option(
    "--cachedir",
    "-C",
    type=click.Path(),
    help="Cache directory (default: GHCN_CACHE_DIR env var)",
)
@click.option(
    "--profile",
    type=click.Path(),
    help="YAML profile whose aliases are protected (default: ~/.ghcn_fetch.yaml)",
)
@click.pass_context
def cli(ctx, cachedir, profile):
    """ghcn-cache - Fetch GHCN-Daily files through a local cache and manage it.

    Use --cachedir/-C to specify the cache, or set GHCN_CACHE_DIR.
    """
    ctx.ensure_object(dict)
    ctx.obj["cachedir"] = cachedir
    ctx.obj["profile"] = profile


@cli.command("fetch")
@click.argument("uri")
@click.option(
    "--refresh",
    "-r",
    help="Refresh policy: always, never, yearly or a number of days (default: yearly)",
)
@click.option("--output", "-o", type=click.Path(), help="Write content to this file")
@click.pass_context
def fetch(ctx, uri, refresh, output):
    """Fetch a file, using the cache according to the refresh policy.

    URI may be a full URL or a path relative to the GHCN-Daily archive.

    Example:
        ghcn-cache -C ~/ghcn fetch ghcnd-stations.txt
        ghcn-cache -C ~/ghcn fetch all/CA006105887.dly -r 7 -o yow.dly
    """
    try:
        config = get_config(ctx)
        if "://" not in uri:
            uri = config.url_for(uri)

        with CachedFetcher.from_config(config) as fetcher:
            outcome = fetcher.fetch(uri, refresh)

        if outcome.content is None:
            err_console.print(f"[yellow]No content obtained for {uri}[/yellow]")
            sys.exit(1)

        source = "cache" if outcome.from_cache else "origin"
        err_console.print(
            f"[green]✓[/green] {len(outcome.content):,} bytes from {source}"
        )

        if output:
            Path(output).write_bytes(outcome.content)
        else:
            click.echo(outcome.content.decode("utf-8", errors="replace"), nl=False)

    except InvalidPolicy as e:
        console.print(f"[red]✗[/red] {e}", style="red")
        sys.exit(1)
    except click.ClickException:
        raise
    except Exception as e:
        console.print(f"[red]✗[/red] Error: {e}", style="red")
        sys.exit(1)


@cli.command("report")
@filter_options
@click.pass_context
def report_cmd(ctx, **options):
    """Report cached files selected by the filter options.

    Example:
        ghcn-cache -C ~/ghcn report --country CA --location ottawa
        ghcn-cache -C ~/ghcn report --age 365 --above 500
    """
    try:
        config = get_config(ctx)
        selected = report(select_records(config, build_criteria(**options)))

        if not selected.records:
            console.print("[yellow]No cached files selected[/yellow]")
            return

        table = Table(title=f"Cached files ({len(selected)})")
        table.add_column("StationId", style="cyan", no_wrap=True)
        table.add_column("Co", no_wrap=True)
        table.add_column("St", no_wrap=True)
        table.add_column("Kind", style="magenta")
        table.add_column("Kb", justify="right", style="green")
        table.add_column("Age", justify="right", style="blue")
        table.add_column("Location", style="white")

        for record in selected:
            table.add_row(
                record.id,
                record.country or "",
                record.state or "",
                record.kind.value,
                f"{record.size_kb:,}",
                str(record.age),
                record.location or "",
            )

        console.print(table)
        console.print(f"\nTotal cache size: {selected.total_kb:,} KB")
        console.print(f"Cache location: {config.cache_dir}")

    except click.ClickException:
        raise
    except Exception as e:
        console.print(f"[red]✗[/red] Error: {e}", style="red")
        sys.exit(1)


@cli.command("remove")
@filter_options
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def remove_cmd(ctx, yes, **options):
    """Remove selected daily-data files, keeping stations named by aliases.

    Example:
        ghcn-cache -C ~/ghcn remove --country US --age 30 -y
    """
    try:
        config = get_config(ctx)
        records = [
            r
            for r in select_records(config, build_criteria(**options))
            if r.kind is not FileKind.ACTIVE
        ]

        if not records:
            console.print("[yellow]No cached files selected[/yellow]")
            return

        if not yes:
            if not click.confirm(f"Remove {len(records)} cached file(s)?"):
                console.print("[yellow]Cancelled[/yellow]")
                return

        errors = remove_records(records)
        failed = {error.path for error in errors}

        console.print("Daily data removed:")
        for record in records:
            if record.path not in failed:
                console.print(f"  {record.id} {record.location or ''}".rstrip())

        if errors:
            for error in errors:
                err_console.print(f"[red]✗[/red] {error}")
            sys.exit(1)

    except click.ClickException:
        raise
    except Exception as e:
        console.print(f"[red]✗[/red] Error: {e}", style="red")
        sys.exit(1)


@cli.command("clean")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def clean_cmd(ctx, yes):
    """Remove all daily-data and catalog files from the cache.

    Example:
        ghcn-cache -C ~/ghcn clean -y
    """
    try:
        config = get_config(ctx)
        cache_dir = require_cache_dir(config)

        if not yes:
            if not click.confirm(f"Remove all cached GHCN files from {cache_dir}?"):
                console.print("[yellow]Cancelled[/yellow]")
                return

        errors = clean(cache_dir)
        if errors:
            for error in errors:
                err_console.print(f"[red]✗[/red] {error}")
            sys.exit(1)

        console.print(f"[green]✓[/green] Cleaned cache {cache_dir}")

    except click.ClickException:
        raise
    except Exception as e:
        console.print(f"[red]✗[/red] Error: {e}", style="red")
        sys.exit(1)


if __name__ == "__main__":
    cli()
