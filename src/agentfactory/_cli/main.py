import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from agentfactory._errors import CompileError, InvalidSpecError
from agentfactory._graph import check_graph
from agentfactory._io import export_compiled, ir_digest, load_compiled, load_spec, to_canonical_json
from agentfactory._ir import check_compiled, compile_spec
from agentfactory._result import Err, Ok
from agentfactory._schema import ProjectSpec, validate_spec

from .config import AgentFactoryConfig, ConfigError, get_config

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)

_IR_SUFFIXES = (".json", ".toml")


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """AgentFactory spec compiler CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _load_config() -> AgentFactoryConfig:
    try:
        return get_config()
    except ConfigError as e:
        err_console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e


def _resolve_spec_path(spec: Path | None, config: AgentFactoryConfig) -> Path:
    if spec is not None:
        return spec
    if config.spec is not None:
        logger.debug(f"Using spec path from config: {config.spec}")
        return config.spec
    err_console.print(f"[red]No spec file given and no {escape('[tool.agentfactory]')}.spec configured[/red]")
    raise typer.Exit(code=1)


def _load_raw_spec(path: Path) -> dict:
    err_console.print(f"[cyan]Loading spec from:[/cyan] {path}")
    try:
        return load_spec(path)
    except (OSError, ValueError, TypeError) as e:
        err_console.print(f"[red]✗ Could not read spec:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e


def _print_error(error: CompileError) -> None:
    """Render a structured error as a panel on stderr."""
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="bold", no_wrap=True)
    table.add_column("Value")
    table.add_row("code", f"[red]{error.code.value}[/red]")
    table.add_row("message", escape(error.message))

    if isinstance(error, InvalidSpecError):
        for violation in error.violations:
            table.add_row(escape(violation.path or "<root>"), escape(violation.msg))
    else:
        for key, value in error.details.items():
            table.add_row(escape(key), escape(json.dumps(value)))

    err_console.print(Panel(table, title="[bold red]Compilation failed[/bold red]", border_style="red"))


@app.command(name="compile")
def compile_command(
    spec: Annotated[
        Path | None,
        typer.Argument(help="Path to the project spec (.json or .toml)"),
    ] = None,
    *,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Path to output IR file (.json or .toml); stdout if omitted"),
    ] = None,
    check_ir: Annotated[
        bool | None,
        typer.Option("--check-ir/--no-check-ir", help="Run the post-compile consistency check on the IR"),
    ] = None,
    digest: Annotated[
        bool,
        typer.Option("--digest", help="Print the content digest of the compiled IR"),
    ] = False,
) -> None:
    """Compile a project spec into a CompiledService IR."""
    config = _load_config()
    spec_path = _resolve_spec_path(spec, config)
    output = output if output is not None else config.output
    check_ir = check_ir if check_ir is not None else config.check_ir

    if output is not None and output.suffix.lower() not in _IR_SUFFIXES:
        err_console.print(f"[red]✗ Unsupported output file type:[/red] {escape(str(output))} (expected .json or .toml)")
        raise typer.Exit(code=1)

    raw = _load_raw_spec(spec_path)

    match compile_spec(raw):
        case Err(error=error):
            _print_error(error)
            raise typer.Exit(code=1)
        case Ok(value=compiled):
            pass

    err_console.print(f"[cyan]Compiled:[/cyan] [bold]{escape(compiled.name)}[/bold] ({len(compiled.agents)} agents)")

    if check_ir:
        match check_compiled(compiled):
            case Err(error=error):
                _print_error(error)
                raise typer.Exit(code=1)
            case Ok():
                err_console.print("[green]✓ Compiled IR is consistent[/green]")

    if digest:
        err_console.print(f"[cyan]Digest:[/cyan] {ir_digest(compiled)}")

    if output is None:
        typer.echo(to_canonical_json(compiled))
    else:
        err_console.print(f"[cyan]Writing IR to:[/cyan] {output}")
        try:
            export_compiled(compiled, output)
        except (OSError, ValueError, TypeError) as e:
            err_console.print(f"[red]✗ Could not write IR:[/red] {escape(str(e))}")
            raise typer.Exit(code=1) from e

    err_console.print("[green]✓ Compilation complete[/green]")


@app.command()
def check(
    spec: Annotated[
        Path | None,
        typer.Argument(help="Path to the project spec (.json or .toml)"),
    ] = None,
    *,
    strict: Annotated[
        bool | None,
        typer.Option("--strict/--no-strict", help="Treat warnings as failures"),
    ] = None,
) -> None:
    """Lint a project spec's graph without compiling, reporting all errors and warnings."""
    config = _load_config()
    spec_path = _resolve_spec_path(spec, config)
    strict = strict if strict is not None else config.strict

    raw = _load_raw_spec(spec_path)
    try:
        project: ProjectSpec = validate_spec(raw)
    except InvalidSpecError as e:
        _print_error(e)
        raise typer.Exit(code=1) from e

    result = check_graph(project.orchestration)

    if result.errors or result.warnings:
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Severity", no_wrap=True)
        table.add_column("Code", style="dim", no_wrap=True)
        table.add_column("Message")
        for error in result.errors:
            table.add_row("[red]error[/red]", error.code.value, escape(error.message))
        for warning in result.warnings:
            table.add_row("[yellow]warning[/yellow]", warning.code.value, escape(warning.message))
        err_console.print(
            Panel(
                table,
                title=f"[bold]Project: {escape(project.name)}[/bold]",
                subtitle=f"[dim]{len(result.errors)} errors, {len(result.warnings)} warnings[/dim]",
                border_style="cyan",
            ),
        )

    if not result.is_valid:
        err_console.print("[red]✗ Graph is invalid[/red]")
        raise typer.Exit(code=1)
    if strict and result.warnings:
        err_console.print("[red]✗ Warnings present (strict mode)[/red]")
        raise typer.Exit(code=1)

    err_console.print("[green]✓ Graph is valid[/green]")


@app.command()
def verify(
    ir: Annotated[
        Path,
        typer.Argument(help="Path to a compiled IR file (.json or .toml)"),
    ],
) -> None:
    """Check a compiled IR for internal consistency before handing it to a runtime."""
    err_console.print(f"[cyan]Loading IR from:[/cyan] {ir}")
    try:
        compiled = load_compiled(ir)
    except ValidationError as e:
        err_console.print(f"[red]✗ Not a valid compiled service ({e.error_count()} problems)[/red]")
        raise typer.Exit(code=1) from e
    except (OSError, ValueError, TypeError) as e:
        err_console.print(f"[red]✗ Could not read IR:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e

    match check_compiled(compiled):
        case Err(error=error):
            _print_error(error)
            raise typer.Exit(code=1)
        case Ok():
            err_console.print("[green]✓ Compiled IR is consistent[/green]")


@app.command()
def schema(
    *,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Path to output JSON schema file; stdout if omitted"),
    ] = None,
    indent: Annotated[
        int,
        typer.Option("--indent", help="JSON indentation spaces"),
    ] = 2,
) -> None:
    """Generate the JSON schema for project spec input files."""
    json_schema = ProjectSpec.model_json_schema(by_alias=True)

    if output is None:
        typer.echo(json.dumps(json_schema, indent=indent))
        return

    err_console.print(f"[cyan]Writing schema to:[/cyan] {output}")
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w") as f:
        json.dump(json_schema, f, indent=indent)
    err_console.print("[green]✓ Schema generation complete[/green]")


def main() -> None:
    app()
