"""Command-line interface for crossref-client.

Built with Typer for commands and Rich for output.
"""

from dataclasses import replace
from pathlib import Path
from typing import Any, List, Optional

import typer
from rich.console import Console

from .api import ConfigurationError, CrossRefClient, CrossRefError, TransportError
from .config import get_config
from .logging_setup import configure_logging

app = typer.Typer(
    name="crossref",
    help="Query the Crossref REST API for bibliographic metadata.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def parse_pairs(items: Optional[List[str]], separator: str) -> dict[str, list[str]]:
    """Group ``name<sep>value`` strings by name, keeping the given order.

    Raises:
        typer.BadParameter: If an item has no separator or an empty name
    """
    pairs: dict[str, list[str]] = {}
    for item in items or []:
        name, sep, value = item.partition(separator)
        if not sep or not name:
            raise typer.BadParameter(f"Expected NAME{separator}VALUE, got {item!r}")
        pairs.setdefault(name, []).append(value)
    return pairs


def build_parameters(
    params: Optional[List[str]],
    filters: Optional[List[str]],
    facets: Optional[List[str]],
) -> dict[str, Any]:
    """Turn repeated command-line options into request parameters."""
    parameters: dict[str, Any] = {
        name: values[-1] for name, values in parse_pairs(params, "=").items()
    }
    if filters:
        parameters["filter"] = parse_pairs(filters, ":")
    if facets:
        parameters["facet"] = parse_pairs(facets, ":")
    return parameters


def build_client(
    api_version: Optional[str],
    user_agent: Optional[str],
    cache_dir: Optional[Path],
    cache_ttl: Optional[int],
) -> CrossRefClient:
    """Create a client from the environment, overridden by command-line options."""
    config = get_config()
    overrides: dict[str, Any] = {}
    if api_version is not None:
        overrides["api_version"] = api_version
    if user_agent is not None:
        overrides["user_agent"] = user_agent
    if cache_dir is not None:
        overrides["cache_dir"] = cache_dir
    if cache_ttl is not None:
        overrides["cache_ttl"] = cache_ttl

    return CrossRefClient.from_config(replace(config, **overrides))


def _report(error: CrossRefError) -> None:
    if isinstance(error, TransportError) and error.status_code is not None:
        print_error(f"Crossref returned HTTP {error.status_code}")
        if error.body:
            console.print(f"[dim]{error.body[:500]}[/dim]")
    else:
        print_error(str(error))


# ============================================================================
# Commands
# ============================================================================


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests, cache and rate-limit activity"),
) -> None:
    """Query the Crossref REST API for bibliographic metadata."""
    try:
        config = get_config()
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(1)

    problems = config.validate()
    if problems:
        for problem in problems:
            print_error(problem)
        raise typer.Exit(1)

    configure_logging("DEBUG" if verbose else config.log_level)


@app.command()
def get(
    path: str = typer.Argument(..., help="API path, e.g. works or works/10.5555/12345678"),
    param: Optional[List[str]] = typer.Option(None, "--param", "-p", help="Query parameter NAME=VALUE"),
    filter_: Optional[List[str]] = typer.Option(None, "--filter", "-f", help="Filter NAME:VALUE"),
    facet: Optional[List[str]] = typer.Option(None, "--facet", help="Facet NAME:VALUE"),
    api_version: Optional[str] = typer.Option(None, "--api-version", help="API version segment, e.g. v1"),
    user_agent: Optional[str] = typer.Option(None, "--user-agent", "-u", help="Identify your application"),
    cache_dir: Optional[Path] = typer.Option(None, "--cache-dir", help="Cache responses in this directory"),
    cache_ttl: Optional[int] = typer.Option(None, "--cache-ttl", help="Cache lifetime in seconds"),
) -> None:
    """Fetch PATH and print the JSON response."""
    parameters = build_parameters(param, filter_, facet)

    try:
        with build_client(api_version, user_agent, cache_dir, cache_ttl) as client:
            result = client.request(path, parameters)
    except CrossRefError as e:
        _report(e)
        raise typer.Exit(1)

    console.print_json(data=result)


@app.command()
def exists(
    path: str = typer.Argument(..., help="API path, e.g. works/10.5555/12345678"),
    api_version: Optional[str] = typer.Option(None, "--api-version", help="API version segment, e.g. v1"),
    user_agent: Optional[str] = typer.Option(None, "--user-agent", "-u", help="Identify your application"),
) -> None:
    """Check whether PATH exists. Exits with status 1 when it does not."""
    try:
        with build_client(api_version, user_agent, None, None) as client:
            found = client.exists(path)
    except CrossRefError as e:
        _report(e)
        raise typer.Exit(1)

    if not found:
        print_warning(f"Not found: {path}")
        raise typer.Exit(1)

    print_success(f"Found: {path}")


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__

    console.print(f"crossref-client version {__version__}")


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
