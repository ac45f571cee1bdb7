"""
CLI for repo-health.

Provides the command-line interface for health checks and pattern search.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from repohealth import __version__
from repohealth.cli.ui import render_error, render_matches, render_report, write_report
from repohealth.core.config import ConfigError, HealthConfig, load_config
from repohealth.core.file_scanner import ScanError
from repohealth.core.report import filter_issues_by_severity
from repohealth.infrastructure import PatternSearcherError
from repohealth.services import AnalysisOptions, create_services, run_health_check

# Initialize Rich Console
console = Console()

app = typer.Typer(
    name="repohealth",
    help="Repository health checker - security, performance, quality and maintenance checks",
    add_completion=False,
)

VALID_FORMATS = ("table", "json")


def setup_logging(config: HealthConfig, verbose: bool = False) -> None:
    """
    Configure the root logger to write to stderr through Rich.

    Args:
        config: Configuration providing the default level and format
        verbose: Force DEBUG level
    """
    level = logging.DEBUG if verbose else getattr(logging, config.logging.level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format=config.logging.format,
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config_or_exit(config_path: Optional[Path], repo_root: Path) -> HealthConfig:
    try:
        return load_config(config_path, repo_root=repo_root)
    except (ConfigError, ValueError, FileNotFoundError) as e:
        render_error(f"Invalid configuration: {e}", console)
        raise typer.Exit(1)


@app.command()
def check(
    path: Path = typer.Argument(Path("."), help="Repository to check"),
    security: bool = typer.Option(False, "--security", help="Run security checks"),
    performance: bool = typer.Option(False, "--performance", help="Run performance checks"),
    quality: bool = typer.Option(False, "--quality", help="Run code quality checks"),
    maintenance: bool = typer.Option(False, "--maintenance", help="Run maintenance checks"),
    stats: bool = typer.Option(False, "--stats", help="Compute code statistics"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table or json"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the report to a file in the chosen --format"
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file"),
    fail_on_issues: bool = typer.Option(
        False, "--fail-on-issues", help="Exit with code 1 if issues at or above --severity are found"
    ),
    severity: str = typer.Option(
        "low", "--severity", "-s", help="Minimum severity that fails --fail-on-issues: low, medium, high, critical"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Run a health check on a repository. With no check flags, all checks run."""
    output_format = output_format.lower()
    if output_format not in VALID_FORMATS:
        render_error(
            f"Invalid format: {output_format}. Valid formats: {', '.join(VALID_FORMATS)}", console
        )
        raise typer.Exit(1)

    cfg = _load_config_or_exit(config_path, path)
    setup_logging(cfg, verbose)

    options = AnalysisOptions(
        security=security,
        performance=performance,
        quality=quality,
        maintenance=maintenance,
        code_stats=stats,
    )

    try:
        report = run_health_check(path, cfg, options)
    except ScanError as e:
        render_error(str(e), console)
        raise typer.Exit(1)

    if output is not None:
        write_report(report, output, output_format)
        console.print(f"[green]Report written to[/green] {escape(str(output))}")
    elif output_format == "json":
        typer.echo(report.to_json())
    else:
        render_report(report, console)

    if fail_on_issues and filter_issues_by_severity(report.issues, severity):
        raise typer.Exit(1)


@app.command()
def search(
    pattern: str = typer.Argument(..., help="Regular expression to search for"),
    path: Path = typer.Argument(Path("."), help="Repository to search"),
    ext: Optional[list[str]] = typer.Option(
        None, "--ext", "-e", help="Only search files with this extension. Can be given multiple times."
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Search repository files line by line for a regular expression."""
    cfg = _load_config_or_exit(config_path, path)
    setup_logging(cfg, verbose)

    try:
        services = create_services(path, cfg)
        with console.status(f"[bold blue]Searching for[/bold blue] '{escape(pattern)}'..."):
            matches = services.searcher.search(pattern, ext or [])
    except (ScanError, PatternSearcherError) as e:
        render_error(str(e), console)
        raise typer.Exit(1)

    render_matches(matches, console)


@app.command()
def version():
    """Show the repo-health version."""
    console.print(f"repo-health {__version__}")


if __name__ == "__main__":
    app()
