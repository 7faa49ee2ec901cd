"""Synopsis command-line interface."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import click

from synopsis import __version__
from synopsis.config import SynopsisConfig, discover_config
from synopsis.errors import DiagnosticRenderer
from synopsis.log import configure_logging
from synopsis.model import SynopsisResult

_INDEXERS = click.Choice(["sourcekitten", "sidecar"])


def _analyze(
    paths: tuple[Path, ...],
    config: SynopsisConfig,
    *,
    indexer: str | None = None,
    workers: int | None = None,
) -> SynopsisResult:
    """Discover Swift files under *paths* and parse them."""
    from synopsis.pipeline import Synopsis, discover_sources

    if indexer is not None:
        config.indexer.command = indexer
    if workers is not None:
        config.parser.workers = workers
    return Synopsis.from_config(config).specifications(discover_sources(paths))


def _report_errors(result: SynopsisResult, *, color: bool) -> None:
    renderer = DiagnosticRenderer(color=color)
    for error in result.errors:
        click.echo(renderer.render(error.to_diagnostic()), err=True)


@click.group()
@click.version_option(__version__, prog_name="synopsis")
def main() -> None:
    """Parse Swift declarations and regenerate canonical source."""


@main.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option("--workers", type=int, default=None, help="Files parsed in parallel.")
@click.option("--indexer", type=_INDEXERS, default=None, help="Where element trees come from.")
@click.option("--color/--no-color", default=None, help="Highlight output and diagnostics.")
@click.option("--verbose", is_flag=True, help="Log indexer calls and skipped files.")
def analyze(
    paths: tuple[Path, ...],
    workers: int | None,
    indexer: str | None,
    color: bool | None,
    verbose: bool,
) -> None:
    """Parse Swift files and print their canonical verse."""
    from synopsis.verse import VerseWriter

    configure_logging("DEBUG" if verbose else "WARNING")
    config = discover_config(paths[0])
    if color is None:
        color = config.output.color

    result = _analyze(paths, config, indexer=indexer, workers=workers)
    text = VerseWriter().write_specifications(result.specifications)
    if text:
        if color:
            from synopsis.highlight import highlight_swift

            text = highlight_swift(text)
        click.echo(text, nl=False)

    _report_errors(result, color=color)
    if result.errors:
        raise SystemExit(1)


@main.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.option("--indexer", type=_INDEXERS, default=None, help="Where element trees come from.")
def view(path: Path, indexer: str | None) -> None:
    """View the entity tree of a Swift source file."""
    configure_logging()
    config = discover_config(path)
    result = _analyze((path,), config, indexer=indexer)
    _report_errors(result, color=config.output.color)
    if result.errors:
        raise SystemExit(1)
    _dump_entity(result.specifications, 0)


@main.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option("--indexer", type=_INDEXERS, default=None, help="Where element trees come from.")
def consolidate(paths: tuple[Path, ...], indexer: str | None) -> None:
    """List every named composite together with its extensions."""
    configure_logging()
    config = discover_config(paths[0])
    result = _analyze(paths, config, indexer=indexer)
    _report_errors(result, color=config.output.color)

    for composite, extensions in result.specifications.consolidated().items():
        decl = composite.declaration
        click.echo(f"{composite.kind.value} {composite.name}  ({decl.file}:{decl.line})")
        for ext in extensions:
            inherited = f": {', '.join(ext.inherited_types)}" if ext.inherited_types else ""
            click.echo(
                f"  extension {ext.name}{inherited}  "
                f"({ext.declaration.file}:{ext.declaration.line})"
            )
    if result.errors:
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def lexemes(file: Path) -> None:
    """Dump the lexical context spans of a file."""
    from synopsis.lexemes import LexemeString

    text = LexemeString(file.read_text(encoding="utf-8"))
    for lexeme in text.lexemes:
        click.echo(
            f"{lexeme.start:>6} {lexeme.end:>6}  {lexeme.kind.name:<18} "
            f"{text.slice(lexeme)!r}"
        )


def _dump_entity(node: object, depth: int) -> None:
    """Print a readable entity dump."""
    indent = "  " * depth
    name = type(node).__name__

    if hasattr(node, "__dataclass_fields__"):
        fields = node.__dataclass_fields__  # type: ignore[union-attr]
        click.echo(f"{indent}{name}")
        for field_name in fields:
            if field_name == "declaration":
                continue
            value = getattr(node, field_name)
            if isinstance(value, tuple):
                if value:
                    click.echo(f"{indent}  {field_name}:")
                    for item in value:
                        _dump_entity(item, depth + 2)
            elif hasattr(value, "__dataclass_fields__"):
                click.echo(f"{indent}  {field_name}:")
                _dump_entity(value, depth + 2)
            elif isinstance(value, Enum):
                click.echo(f"{indent}  {field_name}: {value.name.lower()}")
            elif value is not None:
                click.echo(f"{indent}  {field_name}: {value!r}")
    else:
        click.echo(f"{indent}{name}: {node!r}")
