"""rubymap CLI - class/module dependency graphs for Ruby projects."""

from pathlib import Path
from typing import Optional
import typer
from rich.table import Table
from rich.markup import escape

from rubymap.config import __version__, get_config
from rubymap.utils.logger import configure_logging
from rubymap.utils.safe_console import SafeConsole
from rubymap.analyzer.cache import AnalysisCache
from rubymap.analyzer.graph_builder import DependencyGraph, RubyGraphBuilder
from rubymap.analyzer.models import join_namespace
from rubymap.formatter.json_formatter import JSONFormatter

app = typer.Typer(
    name="rubymap",
    help="Class/module dependency graphs for Ruby source trees",
    add_completion=False
)
console = SafeConsole()
err_console = SafeConsole(stderr=True)

# Cache management sub-command
cache_app = typer.Typer(name="cache", help="Manage the rubymap analysis cache")


def _load_config():
    """Load configuration, turning invalid settings into a clean exit."""
    try:
        config = get_config()
    except ValueError as e:
        err_console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)
    configure_logging(config.log_level)
    return config


def _require_path(project_path: str) -> Path:
    path = Path(project_path).absolute()
    if not path.exists():
        err_console.print(f"[bold red]Error:[/bold red] Project path does not exist: {escape(str(path))}")
        raise typer.Exit(1)
    return path


def analyze_project(project_path: Path, use_cache: bool = True) -> DependencyGraph:
    """Shared analysis for export and audit."""
    config = _load_config()
    builder = RubyGraphBuilder(project_path, config=config, use_cache=use_cache)
    return builder.build_graph()


@app.command()
def export(
    project_path: str = typer.Argument(".", help="Project root (or single file) to analyze"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON here instead of stdout"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Re-parse every file, ignoring the cache"),
    pretty: bool = typer.Option(False, "--pretty", help="Indent the JSON output"),
):
    """Export definitions and relations as JSON for the graph visualizer."""
    path = _require_path(project_path)
    graph = analyze_project(path, use_cache=not no_cache)
    formatter = JSONFormatter(graph, separator=get_config().namespace_separator,
                              indent=2 if pretty else None)
    document = formatter.call()

    if output is None:
        typer.echo(document)
        return

    output.write_text(document, encoding="utf-8")
    err_console.print(
        f"[green]✓ Wrote {len(graph.definitions)} definitions and "
        f"{len(graph.relations)} relations to {escape(str(output))}[/green]"
    )


@app.command()
def audit(
    project_path: str = typer.Argument(".", help="Project root (or single file) to analyze"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Re-parse every file, ignoring the cache"),
    show_relations: bool = typer.Option(False, "--show-relations", help="List every relation, not only circular ones"),
    limit: int = typer.Option(50, "--limit", help="Maximum number of relations to list"),
):
    """Summarize a project's dependency graph and its circular references."""
    path = _require_path(project_path)
    console.print(f"[bold blue]Analyzing project:[/bold blue] {escape(str(path))}\n")

    graph = analyze_project(path, use_cache=not no_cache)
    separator = get_config().namespace_separator
    circular = graph.circular_relations()

    summary = Table(title="Dependency Graph", show_header=True, header_style="bold cyan")
    summary.add_column("Metric", style="cyan")
    summary.add_column("Count", justify="right", style="green")
    summary.add_row("Files analyzed", str(len(graph.files) - len(graph.skipped)))
    summary.add_row("Files skipped", str(len(graph.skipped)))
    summary.add_row("Definitions", str(len(graph.definitions)))
    summary.add_row("Relations", str(len(graph.relations)))
    summary.add_row("Circular relations", str(len(circular)))
    console.print(summary)

    listed = graph.relations if show_relations else circular
    if not listed:
        console.print("\n[green]✓ No circular references found[/green]")
        return

    title = "Relations" if show_relations else "Circular Relations"
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Caller", style="cyan")
    table.add_column("Method", style="dim")
    table.add_column("→", justify="center")
    table.add_column("Resolved", style="yellow")
    table.add_column("Location", style="dim")

    for relation in listed[:limit]:
        target = join_namespace(graph.resolve(relation), separator)
        if relation.target_method:
            target = f"{target}#{relation.target_method}"
        table.add_row(
            escape(join_namespace(relation.caller_namespace, separator) or "(top level)"),
            escape(relation.def_name),
            "↻" if graph.is_circular(relation) else "→",
            escape(target),
            escape(f"{relation.file}:{relation.line}"),
        )

    if len(listed) > limit:
        table.add_row("", "", "", f"... and {len(listed) - limit} more", "")

    console.print(table)


# =========================================================================
# CACHE MANAGEMENT COMMANDS
# =========================================================================

@cache_app.command("clear")
def cache_clear(
    project_path: str = typer.Argument(".", help="Project root path"),
):
    """Clear the analysis cache for a project.

    This forces a full re-parse on the next export or audit.
    """
    path = _require_path(project_path)
    config = _load_config()

    with AnalysisCache(path, config.cache_path, config.cache_fingerprint) as cache:
        cache.clear_cache()

    console.print(f"[green]✓ Cache cleared for {escape(str(path))}[/green]")


@cache_app.command("stats")
def cache_stats(
    project_path: str = typer.Argument(".", help="Project root path"),
):
    """Display cache statistics for a project."""
    path = _require_path(project_path)
    config = _load_config()

    with AnalysisCache(path, config.cache_path, config.cache_fingerprint) as cache:
        stats = cache.get_cache_stats()

    table = Table(title=f"Cache Statistics: {escape(str(path))}", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right", style="green")

    table.add_row("Total Files Cached", str(stats['total_files']))
    table.add_row("Definitions", str(stats['definitions_cached']))
    table.add_row("Relations", str(stats['relations_cached']))

    console.print(table)


# Register cache sub-command
app.add_typer(cache_app)


def _version_callback(value: bool):
    if value:
        typer.echo(f"rubymap {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", callback=_version_callback,
                                 is_eager=True, help="Show the version and exit"),
):
    """rubymap - class/module dependency graphs for Ruby source trees."""


if __name__ == "__main__":
    app()
