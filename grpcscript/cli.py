#!/usr/bin/env python3
"""
grpcscript CLI - Scripted gRPC Request Runner

Usage:
    grpcscript run <file.grpc> -p <protos> [OPTIONS]
    grpcscript call -p <protos> --address <url> --service <svc> --method <m>
    grpcscript list -p <protos>
    grpcscript validate <file.grpc>
    grpcscript --version
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import LOG_LEVELS, Settings, load_settings
from .document import (
    CallRecord,
    ProtocolVariant,
    ValidationResult,
    parse_duration,
    read_document,
    validate_document,
    validate_document_file,
)
from .protos import ProtoLoadError, Registry, load_protos
from .reporting import Reporter
from .runner import CallError, Runner

PROTO_PATH_ENVVAR = "GRPCSCRIPT_PROTO_PATH"

app = typer.Typer(
    name="grpcscript",
    help="📡 grpcscript - Scripted gRPC Request Runner",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool):
    if value:
        console.print(f"📡 grpcscript v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True,
        help="Show version and exit"
    ),
):
    """
    📡 grpcscript - Scripted gRPC Request Runner

    Run sequences of gRPC calls from plain-text .grpc files.
    """
    pass


def setup_logging(level: str) -> None:
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def load_cli_settings(config_file: Optional[Path]) -> Settings:
    """Load the settings file or exit with its validation errors."""
    settings, validation = load_settings(config_file)
    if settings is None:
        console.print("\n[red]❌ Invalid settings:[/red]")
        console.print(escape(str(validation)))
        raise typer.Exit(code=1)
    return settings


def load_registry(proto_path: Optional[Path], import_paths: List[Path], settings: Settings) -> Registry:
    """Compile protos from the CLI option or the settings file."""
    path = proto_path or (Path(settings.proto_path) if settings.proto_path else None)
    if path is None:
        console.print(
            f"[red]❌ Error:[/red] proto path is required "
            f"(use --proto-path, {PROTO_PATH_ENVVAR} or proto_path in the settings file)"
        )
        raise typer.Exit(code=1)

    imports = [str(p) for p in import_paths] or settings.import_paths
    try:
        return load_protos(path, imports)
    except ProtoLoadError as e:
        console.print(f"[red]❌ Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)


def parse_header_option(value: str) -> tuple[str, str]:
    """Split a 'Key: Value' header option."""
    key, sep, val = value.partition(":")
    if not sep or not key.strip():
        raise typer.BadParameter(f"invalid header format: {value} (expected 'Key: Value')")
    return key.strip(), val.strip()


proto_path_option = typer.Option(
    None, "--proto-path", "-p",
    envvar=PROTO_PATH_ENVVAR,
    help="Directory containing .proto files",
)
import_path_option = typer.Option(
    [], "--import-path", "-I",
    help="Additional proto import directory (repeatable)",
)
config_option = typer.Option(
    None, "--config", "-c",
    help="Settings file (default: ./grpcscript.yaml if present)",
)
log_level_option = typer.Option(
    None, "--log-level",
    help=f"Log level: {', '.join(LOG_LEVELS)}",
)


@app.command()
def run(
    document_file: Path = typer.Argument(
        ...,
        help="Path to the .grpc request file",
        exists=True,
        readable=True,
    ),
    proto_path: Optional[Path] = proto_path_option,
    import_paths: List[Path] = import_path_option,
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Only show errors and final status"
    ),
    output: str = typer.Option(
        "text", "--output", "-o",
        help="Output format: text or json"
    ),
    report_dir: Optional[Path] = typer.Option(
        None, "--report-dir", "-r",
        help="Directory to save JSON reports"
    ),
    no_report: bool = typer.Option(
        False, "--no-report",
        help="Don't save a JSON report file"
    ),
    config_file: Optional[Path] = config_option,
    log_level: Optional[str] = log_level_option,
):
    """
    Run a .grpc request file.

    Execute every request in order, capture variables, check assertions
    and generate a run report. Stops at the first request that fails.
    """
    if output not in ("text", "json"):
        raise typer.BadParameter("output must be 'text' or 'json'", param_hint="--output")

    settings = load_cli_settings(config_file)
    setup_logging(log_level or settings.log_level)

    if not quiet:
        console.print(f"\n📄 Loading requests: {document_file}")

    try:
        text = read_document(document_file)
    except UnicodeDecodeError as e:
        records, validation = None, ValidationResult()
        validation.add_error(str(document_file), f"File is not valid UTF-8: {e}")
    else:
        records, validation = validate_document(text)
    if records is None:
        console.print("\n[red]❌ Validation failed:[/red]")
        console.print(escape(str(validation)))
        raise typer.Exit(code=1)

    registry = load_registry(proto_path, import_paths, settings)
    if not quiet:
        console.print(
            f"   [green]✅ {len(records)} request(s), "
            f"{len(registry.service_names)} service(s) loaded[/green]\n"
        )

    runner = Runner(registry, console=console, quiet=quiet or output == "json")
    try:
        report = asyncio.run(runner.run(
            records,
            document_name=str(document_file),
            document_text=text,
        ))
    except Exception as e:
        console.print(f"\n[red]❌ Fatal error:[/red] {type(e).__name__}: {escape(str(e))}")
        raise typer.Exit(code=1)

    # Output results
    if output == "json":
        console.print_json(data=report.to_dict())
    elif not quiet:
        console.print("\n" + escape(report.summary()))

    # Save report
    if not no_report and settings.save_reports:
        target_dir = report_dir or Path(settings.report_dir)
        report_path = target_dir / f"{report.run_id}.json"
        Reporter(report).save_json(report_path)
        if not quiet and output != "json":
            console.print(f"\n📁 Report saved: {report_path}")

    raise typer.Exit(code=0 if report.passed else 1)


@app.command()
def call(
    address: str = typer.Option(
        ..., "--address", "-a",
        help="Server address, e.g. http://localhost:8080"
    ),
    service: str = typer.Option(
        ..., "--service", "-s",
        help="Fully qualified service name"
    ),
    method: str = typer.Option(
        ..., "--method", "-m",
        help="Method name"
    ),
    data: str = typer.Option(
        "{}", "--data", "-d",
        help="Request body as JSON"
    ),
    prefix: str = typer.Option(
        "", "--prefix",
        help="Path prefix prepended to the RPC path"
    ),
    headers: List[str] = typer.Option(
        [], "--header", "-H",
        help="Request header 'Key: Value' (repeatable)"
    ),
    protocol: str = typer.Option(
        ProtocolVariant.GRPC_WEB.value, "--protocol",
        help="Protocol: grpc, grpc-web or connect"
    ),
    timeout: str = typer.Option(
        "30s", "--timeout", "-t",
        help="Request timeout, e.g. 500ms, 10s, 1m"
    ),
    proto_path: Optional[Path] = proto_path_option,
    import_paths: List[Path] = import_path_option,
    config_file: Optional[Path] = config_option,
    log_level: Optional[str] = log_level_option,
):
    """
    Make a single gRPC call and print the response JSON.
    """
    settings = load_cli_settings(config_file)
    setup_logging(log_level or settings.log_level)

    try:
        variant = ProtocolVariant.parse(protocol)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--protocol")
    try:
        timeout_seconds = parse_duration(timeout)
    except ValueError as e:
        raise typer.BadParameter(f"invalid timeout '{timeout}': {e}", param_hint="--timeout")

    if prefix.strip("/"):
        address = f"{address.rstrip('/')}/{prefix.strip('/')}"

    record = CallRecord(
        address=address,
        service=service,
        method=method,
        protocol=variant,
        timeout=timeout_seconds,
        headers=dict(parse_header_option(h) for h in headers),
        body=data,
    )

    registry = load_registry(proto_path, import_paths, settings)
    runner = Runner(registry, console=console)
    try:
        response_json = asyncio.run(runner.call(record))
    except CallError as e:
        console.print(f"[red]❌ Error:[/red] {escape(e.message)}")
        raise typer.Exit(code=1)

    console.print(response_json, markup=False, highlight=False)


@app.command("list")
def list_services(
    proto_path: Optional[Path] = proto_path_option,
    import_paths: List[Path] = import_path_option,
    config_file: Optional[Path] = config_option,
):
    """
    List services and methods defined in the proto files.
    """
    settings = load_cli_settings(config_file)
    registry = load_registry(proto_path, import_paths, settings)

    services = registry.list_services()
    if not services:
        console.print("[yellow]No services found[/yellow]")
        raise typer.Exit(code=0)

    table = Table(title="Services")
    table.add_column("Service", style="cyan")
    table.add_column("Method", style="magenta")
    table.add_column("Request")
    table.add_column("Response")

    for info in services:
        for i, m in enumerate(info.methods):
            table.add_row(info.full_name if i == 0 else "", m.name, m.input_type, m.output_type)

    console.print()
    console.print(table)


@app.command()
def validate(
    document_file: Path = typer.Argument(
        ...,
        help="Path to the .grpc request file",
        exists=True,
        readable=True,
    ),
):
    """
    Validate a .grpc request file.

    Parse every request and report all errors without making any calls.
    """
    console.print(f"\n📄 Validating: {document_file}")

    records, validation = validate_document_file(document_file)

    if records is None:
        console.print("\n[red]❌ Validation failed:[/red]")
        console.print(escape(str(validation)))
        raise typer.Exit(code=1)

    console.print(f"\n[green]✅ Valid document:[/green] {len(records)} request(s)")

    table = Table(title="Requests")
    table.add_column("#", style="cyan")
    table.add_column("Name")
    table.add_column("Operation", style="magenta")
    table.add_column("Protocol")
    table.add_column("Captures", justify="right")
    table.add_column("Asserts", justify="right")

    for record in records:
        table.add_row(
            str(record.index),
            escape(record.title),
            escape(record.operation),
            record.protocol.value,
            str(len(record.captures)),
            str(len(record.assertions)),
        )

    console.print()
    console.print(table)
    raise typer.Exit(code=0)


@app.command()
def info():
    """
    Show information about grpcscript.
    """
    console.print(f"""
📡 [bold]grpcscript[/bold] v{__version__}

Scripted gRPC Request Runner

[bold]Features:[/bold]
  • Plain-text .grpc request files
  • gRPC, gRPC-Web and Connect protocols
  • Runtime .proto compilation (no generated code)
  • Variable capture and {{{{name}}}} substitution
  • JSONPath assertions
  • Detailed JSON run reports

[bold]Quick Start:[/bold]
  grpcscript run flows/users.grpc -p ./protos
  grpcscript validate flows/users.grpc
  grpcscript list -p ./protos
""")


if __name__ == "__main__":
    app()
