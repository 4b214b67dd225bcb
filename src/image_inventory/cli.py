"""CLI entry point for image inventory."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from . import analyzers  # noqa: F401  registers the built-in analyzers
from .analyzer import analyze as analyze_image
from .analyzer import analyze_from_file
from .config import AnalyzerSettings
from .errors import (
    ExtractionError,
    LibraryAnalysisError,
    UnknownOSError,
    UnknownPackageManagerError,
)
from .registry import default_registry
from .resolver import check_package, get_libraries, get_os, get_packages
from .types import FileMap

console = Console()


def _setup_logging(level: str) -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


@click.group()
def cli() -> None:
    """Image Inventory - detect OS, packages and libraries in container images."""
    pass


@cli.command()
@click.argument("image", required=False)
@click.option(
    "--input",
    "-i",
    "input_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Image archive produced by 'docker save' (instead of IMAGE)",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Settings file (JSON)",
)
@click.option(
    "--timeout",
    "-t",
    type=float,
    default=None,
    help="Extraction timeout in seconds (overrides config)",
)
@click.option(
    "--platform",
    "-p",
    default=None,
    help="Platform to pull, e.g. linux/amd64 (overrides config)",
)
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level (overrides config)",
)
def analyze(
    image: Optional[str],
    input_path: Optional[Path],
    config: Optional[Path],
    timeout: Optional[float],
    platform: Optional[str],
    log_level: Optional[str],
) -> None:
    """
    Analyze IMAGE, or an exported image archive given with --input.

    Prints the detected OS, the installed packages and the libraries found
    in lockfiles.
    """
    if bool(image) == bool(input_path):
        raise click.UsageError("Provide exactly one of IMAGE or --input")

    try:
        settings = AnalyzerSettings.from_json(config) if config else AnalyzerSettings()

        # Apply CLI overrides
        overrides = {}
        if timeout is not None:
            overrides["timeout"] = timeout
        if platform:
            overrides["platform"] = platform
        if log_level:
            overrides["log_level"] = log_level
        if overrides:
            settings = AnalyzerSettings.model_validate(
                {**settings.model_dump(), **overrides}
            )

        _setup_logging(settings.log_level)

        if input_path:
            file_map = analyze_from_file(input_path.open("rb"))
        else:
            file_map = analyze_image(image, settings=settings)

        _print_report(file_map)

    except FileNotFoundError as e:
        click.echo(f"❌ Configuration file not found: {e}", err=True)
        sys.exit(1)

    except ValueError as e:
        click.echo(f"❌ Configuration error: {e}", err=True)
        sys.exit(1)

    except ExtractionError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    except LibraryAnalysisError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    except KeyboardInterrupt:
        click.echo("\n⚠️ Analysis interrupted by user", err=True)
        sys.exit(1)


def _print_report(file_map: FileMap) -> None:
    """Print OS, packages and libraries for an extracted file map."""
    try:
        os_info = get_os(file_map)
        console.print(f"[bold]OS:[/bold] {os_info.family} {os_info.name}")
    except UnknownOSError:
        console.print("[yellow]OS: unknown[/yellow]")

    try:
        packages = [pkg for pkg in get_packages(file_map) if check_package(pkg)]
    except UnknownPackageManagerError:
        console.print("[yellow]Packages: unknown package manager[/yellow]")
    else:
        table = Table(title=f"Packages ({len(packages)})")
        table.add_column("Name", style="cyan")
        table.add_column("Version", style="green")
        for pkg in packages:
            table.add_row(pkg.name, pkg.version)
        console.print(table)

    libraries = get_libraries(file_map)
    for file_path, libs in sorted(libraries.items()):
        table = Table(title=f"{file_path} ({len(libs)})")
        table.add_column("Library", style="cyan")
        table.add_column("Version", style="green")
        for lib in libs:
            table.add_row(lib.name, lib.version)
        console.print(table)


@cli.command("analyzers")
def list_analyzers() -> None:
    """List registered analyzers and the files they need."""
    registry = default_registry()
    table = Table(title="Registered Analyzers")
    table.add_column("Kind", style="dim")
    table.add_column("Analyzer", style="cyan")
    table.add_column("Required Files", style="green")

    for kind, group in (
        ("os", registry.os_analyzers),
        ("package", registry.pkg_analyzers),
        ("library", registry.library_analyzers),
    ):
        for analyzer in group:
            table.add_row(
                kind, type(analyzer).__name__, ", ".join(analyzer.required_files())
            )

    console.print(table)


if __name__ == "__main__":
    cli()
