"""CLI command: flowbridge minify -- minify a stylesheet as embeds are."""

from __future__ import annotations

from pathlib import Path

import click

from flowbridge.css.minifier import minify_with_stats


@click.command()
@click.argument("cssfile", type=click.Path(exists=True, dir_okay=False))
def minify(cssfile: str) -> None:
    """Print the minified CSS; size statistics go to stderr."""
    text, stats = minify_with_stats(Path(cssfile).read_text(encoding="utf-8"))
    click.echo(text)
    click.echo(
        f"{stats.original_size} -> {stats.minified_size} bytes "
        f"({stats.reduction_percent}% smaller)",
        err=True,
    )
