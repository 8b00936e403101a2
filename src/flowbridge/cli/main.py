"""flowbridge CLI entry point: Click group with subcommands."""

import logging

import click

from flowbridge import __version__


@click.group()
@click.version_option(version=__version__, prog_name="flowbridge")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    show_default=True,
    help="Logging verbosity (logs go to stderr).",
)
def cli(log_level: str) -> None:
    """flowbridge - convert HTML + CSS into design-tool clipboard documents."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(levelname)s %(name)s: %(message)s",
    )


# Import and register subcommands
from flowbridge.cli.convert import convert  # noqa: E402
from flowbridge.cli.inspect import inspect  # noqa: E402
from flowbridge.cli.minify import minify  # noqa: E402
from flowbridge.cli.validate import validate  # noqa: E402

cli.add_command(convert)
cli.add_command(validate)
cli.add_command(inspect)
cli.add_command(minify)
