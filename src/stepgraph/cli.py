# src/stepgraph/cli.py
"""stepgraph Command Line Interface.

Entry point for the stepgraph CLI tool: validate pipeline graph files,
inspect the step catalog, and browse saved version history.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import typer
import yaml
from pydantic import ValidationError

from stepgraph import __version__
from stepgraph.contracts.errors import IntegrityError, InvalidConnectionError, NotFoundError
from stepgraph.contracts.graph import GraphDocument
from stepgraph.contracts.results import StructuralReport
from stepgraph.core.catalog import InMemoryStepCatalog, builtin_catalog, load_catalog
from stepgraph.core.config import StepGraphSettings, default_settings, load_settings
from stepgraph.core.graph import (
    check_document,
    document_from_dict,
    document_from_pipeline_record,
    document_to_dict,
    validate_structure,
)
from stepgraph.core.logging import configure_logging
from stepgraph.core.versions import create_version_store

__all__ = [
    "app",
    "load_settings",  # Re-exported from config for convenience
]


@dataclass(frozen=True)
class _GlobalOptions:
    verbose: bool
    json_logs: bool


app = typer.Typer(
    name="stepgraph",
    help="stepgraph: build and check step-based pipeline graphs.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"stepgraph version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """stepgraph: build and check step-based pipeline graphs."""
    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")
    ctx.obj = _GlobalOptions(verbose=verbose, json_logs=json_logs)


def _format_error(
    title: str,
    message: str,
    hint: str | None = None,
    details: list[str] | None = None,
) -> None:
    """Display a formatted error with optional hint and details."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text

    console = Console(stderr=True)

    content = Text()
    content.append(message, style="white")

    if details:
        content.append("\n\n")
        for detail in details:
            content.append(f"  • {detail}\n", style="dim")

    if hint:
        content.append("\n")
        content.append("Hint: ", style="yellow bold")
        content.append(hint, style="yellow")

    panel = Panel(
        content,
        title=f"[red bold]❌ {title}[/]",
        border_style="red",
        padding=(0, 1),
    )
    console.print(panel)


def _resolve_settings(ctx: typer.Context, settings: str | None) -> StepGraphSettings:
    """Load settings (or defaults) and apply their logging section.

    Raises:
        typer.Exit: If the settings file is missing or invalid
    """
    if settings is None:
        return default_settings()

    settings_path = Path(settings).expanduser()
    try:
        config = load_settings(settings_path)
    except FileNotFoundError:
        _format_error(
            title="File Not Found",
            message=f"Settings file does not exist: {settings}",
            hint="Check the path and ensure the file exists.",
        )
        raise typer.Exit(1) from None
    except ValidationError as e:
        # Must be before ValueError - ValidationError inherits from it
        details = [f"{'.'.join(str(x) for x in error['loc'])}: {error['msg']}" for error in e.errors()]
        _format_error(
            title="Configuration Validation Failed",
            message=f"Invalid settings in {settings_path.name}",
            details=details,
            hint="Check field names, types, and allowed values.",
        )
        raise typer.Exit(1) from None

    options: _GlobalOptions | None = ctx.obj
    verbose = options.verbose if options is not None else False
    json_logs = options.json_logs if options is not None else False
    configure_logging(
        json_output=json_logs or config.logging.json_output,
        level="DEBUG" if verbose else config.logging.level,
    )
    return config


def _resolve_catalog(config: StepGraphSettings) -> InMemoryStepCatalog:
    """Catalog named by settings, or the built-in sample catalog.

    Raises:
        typer.Exit: If the catalog file is missing or invalid
    """
    if config.catalog.path is None:
        return builtin_catalog()
    try:
        return load_catalog(config.catalog.path)
    except FileNotFoundError:
        _format_error(
            title="Catalog Not Found",
            message=f"Catalog file does not exist: {config.catalog.path}",
            hint="Fix catalog.path in the settings file, or remove it to use the built-in catalog.",
        )
        raise typer.Exit(1) from None
    except (ValueError, yaml.YAMLError) as e:
        _format_error(title="Invalid Catalog", message=str(e))
        raise typer.Exit(1) from None


def _read_structured_file(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    return json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)


def _load_graph_file(path: Path, catalog: InMemoryStepCatalog, *, strict_port_kinds: bool = True) -> GraphDocument:
    """Parse a graph file.

    Accepts a document ({"nodes": ..., "edges": ...}) or a stored pipeline
    record ({"steps": ..., "step_connections": ...}).

    Raises:
        ValueError: If the content is neither shape
    """
    data = _read_structured_file(path)
    if not isinstance(data, dict):
        raise ValueError(f"expected a mapping at the top level, got {type(data).__name__}")
    if "steps" in data:
        try:
            return document_from_pipeline_record(
                data["steps"],
                data.get("step_connections") or [],
                catalog,
                strict_port_kinds=strict_port_kinds,
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Malformed pipeline record: {e!r}") from e
    return document_from_dict(data)


def _print_report(report: StructuralReport, document: GraphDocument, output_format: str) -> None:
    if output_format == "json":
        typer.echo(
            json.dumps(
                {
                    "runnable": report.runnable,
                    "issues": [
                        {"code": issue.code.value, "message": issue.message, "node_id": issue.node_id, "parameter": issue.parameter}
                        for issue in report.issues
                    ],
                    "warnings": list(report.warnings),
                },
                indent=2,
            )
        )
        return
    if report.runnable:
        typer.echo("✅ Pipeline graph is runnable!")
        typer.echo(f"  Graph: {document.node_count} nodes, {document.edge_count} edges")
    else:
        _format_error(
            title="Pipeline Not Runnable",
            message=f"{len(report.issues)} problem(s) found",
            details=[f"{issue.code.value}: {issue.message}" for issue in report.issues],
            hint="Connect every input, output, and processing step.",
        )
    for warning in report.warnings:
        typer.secho(f"Warning: {warning}", fg=typer.colors.YELLOW, err=True)


@app.command()
def validate(
    ctx: typer.Context,
    file: Path = typer.Argument(
        ...,
        help="Pipeline graph file (JSON or YAML document, or stored pipeline record).",
    ),
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    output_format: Literal["console", "json"] = typer.Option(
        "console",
        "--format",
        "-f",
        help="Report format.",
    ),
) -> None:
    """Check that a pipeline graph is well-formed and runnable."""
    config = _resolve_settings(ctx, settings)
    catalog = _resolve_catalog(config)

    if not file.exists():
        _format_error(
            title="File Not Found",
            message=f"Graph file does not exist: {file}",
            hint="Check the path and ensure the file exists.",
        )
        raise typer.Exit(1)

    try:
        document = _load_graph_file(file, catalog, strict_port_kinds=config.validation.strict_port_kinds)
    except yaml.YAMLError as e:
        _format_error(
            title="YAML Syntax Error",
            message=f"Failed to parse {file.name}",
            details=[str(e)],
            hint="Check for unclosed brackets, incorrect indentation, or invalid characters.",
        )
        raise typer.Exit(1) from None
    except json.JSONDecodeError as e:
        # Must be before ValueError - JSONDecodeError inherits from it
        _format_error(title="JSON Syntax Error", message=f"Failed to parse {file.name}", details=[e.msg])
        raise typer.Exit(1) from None
    except ValueError as e:
        _format_error(title="Malformed Graph", message=str(e))
        raise typer.Exit(1) from None

    try:
        check_document(document, catalog, strict_port_kinds=config.validation.strict_port_kinds)
    except InvalidConnectionError as e:
        _format_error(
            title="Invalid Connection",
            message=str(e),
            hint="Edges must join an existing output port to an existing input port of another step.",
        )
        raise typer.Exit(1) from None
    except ValueError as e:
        _format_error(title="Malformed Graph", message=str(e))
        raise typer.Exit(1) from None

    report = validate_structure(
        document,
        catalog,
        check_required_parameters=config.validation.check_required_parameters,
        detect_cycles=config.validation.detect_cycles,
    )
    _print_report(report, document, output_format)
    if not report.runnable:
        raise typer.Exit(1)


@app.command("catalog")
def catalog_list(
    ctx: typer.Context,
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """List available step definitions."""
    config = _resolve_settings(ctx, settings)
    catalog = _resolve_catalog(config)

    definitions = catalog.list_step_definitions()
    if not definitions:
        typer.echo("  (no step definitions)")
        return
    for definition in definitions:
        inputs = ", ".join(definition.input_ports) or "-"
        outputs = ", ".join(definition.output_ports) or "-"
        typer.echo(f"{definition.id:20} {definition.name} [{definition.category}]")
        typer.echo(f"  {'':18} in: {inputs}  out: {outputs}")


@app.command()
def versions(
    ctx: typer.Context,
    pipeline_id: str = typer.Argument(..., help="Pipeline identifier."),
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """List saved versions of a pipeline, newest first."""
    config = _resolve_settings(ctx, settings)
    store = create_version_store(config.persistence)

    history = store.list(pipeline_id)
    if not history:
        typer.echo(f"No versions saved for pipeline '{pipeline_id}'.")
        return
    typer.echo(f"Pipeline '{pipeline_id}': {len(history)} version(s)")
    for version in history:
        snapshot = version.snapshot
        typer.echo(
            f"  {version.version_id}  {version.timestamp.isoformat()}  "
            f"{snapshot.node_count} nodes, {snapshot.edge_count} edges"
        )


@app.command()
def pipelines(
    ctx: typer.Context,
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """List pipelines with saved history, most recently modified first."""
    config = _resolve_settings(ctx, settings)
    store = create_version_store(config.persistence)

    summaries = store.pipelines()
    if not summaries:
        typer.echo("No saved pipelines.")
        return
    for summary in summaries:
        typer.echo(f"  {summary.pipeline_id:30} {summary.version_count:4} version(s)  last modified {summary.last_modified.isoformat()}")


@app.command()
def show(
    ctx: typer.Context,
    pipeline_id: str = typer.Argument(..., help="Pipeline identifier."),
    version_id: str = typer.Argument(..., help="Version identifier."),
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """Print a saved version's snapshot as JSON."""
    config = _resolve_settings(ctx, settings)
    store = create_version_store(config.persistence)
    try:
        document = store.restore(pipeline_id, version_id)
    except NotFoundError as e:
        _format_error(title="Not Found", message=str(e), hint="Run 'stepgraph versions PIPELINE_ID' to list versions.")
        raise typer.Exit(1) from None
    except IntegrityError as e:
        _format_error(title="Integrity Check Failed", message=str(e))
        raise typer.Exit(1) from None
    typer.echo(json.dumps(document_to_dict(document), indent=2))


if __name__ == "__main__":
    app()
