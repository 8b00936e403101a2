"""CLI command: flowbridge convert -- HTML (+ CSS/JS) to a clipboard document."""

from __future__ import annotations

import json
import sys
from dataclasses import replace
from pathlib import Path

import click

from flowbridge.config import ConverterConfig
from flowbridge.engine import Converter
from flowbridge.errors import EmptyInputError, SchemaValidationError
from flowbridge.events import EventBus, PhaseChanged, SectionFailed
from flowbridge.model.diagnostic import Severity
from flowbridge.parser import detect_sections, parse_document
from flowbridge.project import (
    FileTransport,
    HttpClassLookup,
    StaticClassLookup,
    StdoutTransport,
    build_clipboard_payload,
)


def _read(path: str | None) -> str:
    return Path(path).read_text(encoding="utf-8") if path else ""


def _load_existing_classes(path: str) -> StaticClassLookup:
    """Read class names from a JSON list or a file with one name per line."""
    text = _read(path)
    try:
        names = json.loads(text)
    except json.JSONDecodeError:
        names = text.splitlines()
    if not isinstance(names, list):
        raise click.BadParameter("expected a JSON list or one class name per line")
    return StaticClassLookup(str(n) for n in names)


def _print_progress(event: PhaseChanged) -> None:
    item = f" {event.current_item}" if event.current_item else ""
    click.echo(f"[{event.percentage:3d}%] {event.phase.value}{item}", err=True)


@click.command()
@click.argument("htmlfile", type=click.Path(exists=True, dir_okay=False))
@click.option("--css", "css_file", type=click.Path(exists=True, dir_okay=False),
              help="Stylesheet to convert with the HTML")
@click.option("--js", "js_file", type=click.Path(exists=True, dir_okay=False),
              help="JavaScript to attach as a script embed")
@click.option("--split-sections", is_flag=True, help="Convert each top-level block separately")
@click.option("--existing-classes", type=click.Path(exists=True, dir_okay=False),
              help="Class names already in the destination project")
@click.option("--project-api", default=None, help="Project API base URL for class lookup")
@click.option("--project-id", default=None, help="Project id for class lookup")
@click.option("--id-prefix", default=None, help="Prefix for generated node ids")
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None,
              help="Write the document here instead of stdout")
@click.option("--pretty", is_flag=True, help="Indent the JSON output")
@click.option("--progress", is_flag=True, help="Print progress events to stderr")
def convert(
    htmlfile: str,
    css_file: str | None,
    js_file: str | None,
    split_sections: bool,
    existing_classes: str | None,
    project_api: str | None,
    project_id: str | None,
    id_prefix: str | None,
    output: str | None,
    pretty: bool,
    progress: bool,
) -> None:
    """Convert an HTML file into a clipboard document.

    ``<style>`` and ``<script>`` blocks inside the HTML are picked up
    automatically. Warnings go to stderr; the document goes to stdout or
    --output.
    """
    config = ConverterConfig.from_env()
    overrides = {
        "id_prefix": id_prefix,
        "project_api": project_api,
        "project_id": project_id,
    }
    config = replace(config, **{k: v for k, v in overrides.items() if v})

    document = parse_document(_read(htmlfile))
    css = "\n".join(part for part in (document.css, _read(css_file)) if part)
    js = "\n\n".join(part for part in (document.js, _read(js_file)) if part)
    sections = detect_sections(document.body, css) if split_sections else None

    lookup = None
    if existing_classes:
        lookup = _load_existing_classes(existing_classes)
    elif config.project_api and config.project_id:
        lookup = HttpClassLookup(
            config.project_api,
            config.project_id,
            token=config.project_token,
            timeout=config.lookup_timeout,
        )

    bus = EventBus()
    if progress:
        bus.subscribe(PhaseChanged, _print_progress)
    bus.subscribe(
        SectionFailed,
        lambda event: click.echo(f"Section {event.section_id} failed: {event.error}", err=True),
    )

    converter = Converter(config, class_lookup=lookup, event_bus=bus)
    try:
        result = converter.start(document.body, css, js=js, sections=sections).run()
    except EmptyInputError as exc:
        click.echo(f"Nothing to convert: {exc}", err=True)
        sys.exit(1)
    except SchemaValidationError as exc:
        click.echo("Generated document failed validation:", err=True)
        for violation in exc.violations:
            click.echo(f"  {violation}", err=True)
        sys.exit(1)
    finally:
        if isinstance(lookup, HttpClassLookup):
            lookup.close()

    for diag in result.warnings:
        if diag.severity is Severity.WARNING:
            click.echo(f"  {diag}", err=True)
    for diag in result.errors:
        click.echo(f"  {diag}", err=True)

    payload = build_clipboard_payload(result, indent=2 if pretty else None)
    transport = FileTransport(output) if output else StdoutTransport()
    transport.write(payload)

    stats = result.size_stats
    click.echo(
        f"Converted {len(result.nodes)} node(s), {len(result.styles)} style(s), "
        f"{stats.embed_chunks} embed chunk(s); "
        f"{len(result.warnings)} warning(s), {len(result.errors)} error(s)",
        err=True,
    )
    if output:
        click.echo(f"Wrote {payload.size} bytes to {output}", err=True)
