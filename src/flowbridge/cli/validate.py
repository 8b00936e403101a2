"""CLI command: flowbridge validate -- check a clipboard document."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from flowbridge.validation import validate as run_validate


@click.command()
@click.argument("jsonfile", type=click.Path(exists=True, dir_okay=False))
def validate(jsonfile: str) -> None:
    """Validate a clipboard document against the target format's schema.

    Prints violations and exits with code 0 if the document is valid, or
    code 1 otherwise.
    """
    path = Path(jsonfile)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        click.echo(f"Invalid JSON: {exc}", err=True)
        sys.exit(1)

    report = run_validate(document)
    if report.ok:
        nodes = len(document.get("payload", {}).get("nodes", []))
        click.echo(f"OK: {path.name} is valid ({nodes} node(s))")
        sys.exit(0)

    for violation in report.violations:
        click.echo(str(violation))
    click.echo()
    click.echo(f"Summary: {len(report.violations)} violation(s)")
    sys.exit(1)
