"""CLI command: flowbridge inspect -- show parsed rules, routing and node tree."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from flowbridge.css.router import StyleRouter
from flowbridge.css.variables import VariableTable
from flowbridge.graph.builder import BuildResult, GraphBuilder
from flowbridge.model.context import ConversionContext
from flowbridge.parser import ParseError, parse_document, parse_fragment, parse_stylesheet


def _echo_tree(build: BuildResult, node_id: str, depth: int) -> None:
    node = build.node(node_id)
    if node is None:
        return
    indent = "  " * (depth + 1)
    if node.is_text:
        click.echo(f"{indent}\"{(node.text or '').strip()[:40]}\"")
        return
    parts = [f"{indent}{node.archetype.value}", f"<{node.tag}>", node.id]
    if node.classes:
        parts.append("." + ".".join(node.classes))
    if node.text:
        text = node.text if len(node.text) <= 40 else node.text[:40] + "..."
        parts.append(f'"{text}"')
    click.echo("  ".join(parts))
    for child in node.children:
        _echo_tree(build, child, depth + 1)


@click.command()
@click.argument("htmlfile", type=click.Path(exists=True, dir_okay=False))
@click.option("--css", "css_file", type=click.Path(exists=True, dir_okay=False),
              help="Stylesheet to route alongside the HTML")
def inspect(htmlfile: str, css_file: str | None) -> None:
    """Show how an HTML file and its CSS would be converted.

    Lists every parsed rule with its routing decision, then the node tree.
    """
    document = parse_document(Path(htmlfile).read_text(encoding="utf-8"))
    css = document.css
    if css_file:
        css = "\n".join([css, Path(css_file).read_text(encoding="utf-8")])

    try:
        tree = parse_fragment(document.body)
    except ParseError as exc:
        click.echo(f"Parse error: {exc} ({exc.location or 'unknown position'})", err=True)
        sys.exit(1)

    sheet = parse_stylesheet(css)
    context = ConversionContext()
    table = VariableTable.from_rules(sheet.rules)
    routing = StyleRouter(table, context).route(sheet.rules)

    click.echo(f"Rules: {len(sheet.rules)}  Variables: {len(table)}")
    for decision in routing.decisions:
        parts = [f"  {decision.selector}", f"-> {decision.target}"]
        if decision.variant:
            parts.append(f"variant={decision.variant}")
        if decision.reason:
            parts.append(f"({decision.reason})")
        click.echo("  ".join(parts))
    click.echo()

    build = GraphBuilder(context).build(tree)
    click.echo(f"Nodes: {len(build.nodes)}")
    for root in build.roots:
        _echo_tree(build, root, 0)

    messages = sheet.warnings + [str(d) for d in context.diagnostics]
    if messages:
        click.echo()
        click.echo("Diagnostics:")
        for message in messages:
            click.echo(f"  {message}")
