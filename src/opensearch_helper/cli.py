"""Command-line interface for opensearch-helper.

Commands:
    serve      Serve the discovery page and descriptors, then open the browser
    list       Show the configured search engines
    describe   Print the OpenSearch XML of one engine
"""

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import Config, ConfigError, load_config
from .descriptor import DescriptorValidationError, display_name, validate
from .loader import build_registry, resolve_engines
from .registry import RegistryValidationError
from .renderers import RenderError, render_descriptor_xml
from .server import base_url, create_app, run_server
from .utils.logger import VerbosityLevel, setup_logger

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="opensearch-helper",
    help="Advertise search engine shortcuts to your browser via OpenSearch",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


# ============================================================================
# Validation Functions
# ============================================================================


def validate_verbosity(value: str) -> str:
    """
    Validate verbosity level.

    Raises:
        typer.BadParameter: If verbosity is invalid
    """
    valid_levels = [level.value for level in VerbosityLevel]
    if value.lower() not in valid_levels:
        raise typer.BadParameter(
            f"Invalid verbosity: {value}. Must be one of: {', '.join(valid_levels)}"
        )
    return value.lower()


# ============================================================================
# Helper Functions
# ============================================================================


def _load(config_file: Path | None) -> Config:
    """Load configuration or exit with an error message."""
    try:
        return load_config(extra_paths=[config_file] if config_file else None)
    except ConfigError as e:
        console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        raise typer.Exit(1)


ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
        dir_okay=False,
    ),
]

VerbosityOption = Annotated[
    str,
    typer.Option(
        "--verbosity",
        "-v",
        help="Output verbosity: quiet, normal, verbose, debug",
        callback=validate_verbosity,
    ),
]


# ============================================================================
# CLI Commands
# ============================================================================


@app.command()
def serve(
    host: Annotated[str | None, typer.Option(help="Host to listen on")] = None,
    port: Annotated[int | None, typer.Option(help="Port to listen on")] = None,
    tls_cert: Annotated[
        Path | None,
        typer.Option("--tls-cert", help="TLS certificate file (enables HTTPS with --tls-key)"),
    ] = None,
    tls_key: Annotated[
        Path | None,
        typer.Option("--tls-key", help="TLS private key file"),
    ] = None,
    config_file: ConfigOption = None,
    no_browser: Annotated[
        bool,
        typer.Option("--no-browser", help="Do not open the discovery page in a browser"),
    ] = False,
    no_favicons: Annotated[
        bool,
        typer.Option("--no-favicons", help="Do not fetch and embed favicons"),
    ] = False,
    verbosity: VerbosityOption = "normal",
):
    """
    Serve the discovery page and the OpenSearch descriptors.

    Open the page in your browser and add the engines from the address bar
    or the search settings.

    Examples:
        opensearch-helper serve
        opensearch-helper serve --port 8080 --no-browser
        opensearch-helper serve --tls-cert cert.pem --tls-key key.pem
    """
    setup_logger(level=VerbosityLevel(verbosity))

    config = _load(config_file)

    tls_enabled = True if (tls_cert or tls_key) else None
    try:
        config = config.with_server_overrides(
            host=host,
            port=port,
            tls_enabled=tls_enabled,
            tls_cert_file=tls_cert,
            tls_key_file=tls_key,
        )
    except ConfigError as e:
        console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    fetch_favicons = False if no_favicons else None
    try:
        registry = build_registry(config, fetch_favicons=fetch_favicons)
    except RegistryValidationError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    url = base_url(config.server)
    if verbosity != "quiet":
        console.print(f"[bold blue]Starting server on {url}...[/bold blue]")
        console.print(f"[dim]Serving {len(registry)} search engine(s)[/dim]")

    try:
        run_server(
            create_app(registry),
            config.server,
            open_browser=config.server.open_browser and not no_browser,
        )
    except ConfigError as e:
        console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except OSError as e:
        console.print(f"[red]Server error: {e}[/red]")
        raise typer.Exit(1)


@app.command("list")
def list_engines(
    config_file: ConfigOption = None,
    resolve: Annotated[
        bool,
        typer.Option("--resolve", help="Fetch favicons before validating"),
    ] = False,
    verbosity: VerbosityOption = "normal",
):
    """
    Show the configured search engines and whether they are valid.

    Examples:
        opensearch-helper list
        opensearch-helper list --resolve --config engines.toml
    """
    setup_logger(level=VerbosityLevel(verbosity))

    config = _load(config_file)
    resolutions = resolve_engines(config, fetch_favicons=resolve)

    if not resolutions:
        console.print("[yellow]No search engines configured[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Search engines")
    table.add_column("Short name", style="cyan")
    table.add_column("Name")
    table.add_column("Query URL")
    table.add_column("Status")

    failed = 0
    for resolution in resolutions:
        descriptor = resolution.descriptor
        try:
            validate(descriptor, resolution.error)
            status = "[green]✓ valid[/green]"
        except DescriptorValidationError as e:
            failed += 1
            status = f"[red]✗ {escape(str(e))}[/red]"

        template = descriptor.query_url.template if descriptor.query_url else ""
        table.add_row(descriptor.short_name, display_name(descriptor), template, status)

    console.print(table)

    if failed:
        console.print(f"\n[red]✗ {failed} engine(s) failed validation[/red]")
        raise typer.Exit(1)


@app.command()
def describe(
    short_name: Annotated[str, typer.Argument(help="Short name of the search engine")],
    config_file: ConfigOption = None,
    resolve: Annotated[
        bool,
        typer.Option("--resolve", help="Fetch and embed the favicon"),
    ] = False,
    verbosity: VerbosityOption = "normal",
):
    """
    Print the OpenSearch description document of one search engine.

    Examples:
        opensearch-helper describe "Search Go packages"
        opensearch-helper describe go --resolve > go.xml
    """
    setup_logger(level=VerbosityLevel(verbosity))

    config = _load(config_file)

    try:
        registry = build_registry(config, fetch_favicons=resolve)
    except RegistryValidationError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    descriptor = registry.find_by_short_name(short_name)
    if descriptor is None:
        console.print(f"[red]Error: Unknown search engine: {short_name}[/red]")
        names = ", ".join(engine.short_name for engine in registry)
        console.print(f"\nAvailable search engines: {names}")
        raise typer.Exit(1)

    try:
        xml = render_descriptor_xml(descriptor)
    except RenderError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    typer.echo(xml.decode("utf-8"))


# ============================================================================
# Entry Point
# ============================================================================


def main() -> None:
    """Main entry point for CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        console.print(f"[red]Unexpected error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
