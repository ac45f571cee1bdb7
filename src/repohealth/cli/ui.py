"""
UI components for the repohealth CLI.

Renders health reports and search matches with Rich.
"""

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from repohealth.core.file_scanner import MatchRecord
from repohealth.core.report import HealthReport, Issue, Severity

SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "cyan",
}

GRADE_STYLES = {"A": "green", "B": "green", "C": "yellow", "D": "red", "F": "bold red"}

# Width of table reports written to files
REPORT_FILE_WIDTH = 120


def render_error(message: str, console: Console) -> None:
    """
    Render an error message.

    Args:
        message: Error message to display.
        console: Rich Console instance for output.
    """
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def render_summary(report: HealthReport, console: Console) -> None:
    """Render the score, grade and counts as a panel."""
    summary = report.summary
    grade_style = GRADE_STYLES.get(summary.grade, "white")

    grid = Table.grid(padding=1)
    grid.add_column(style="bold")
    grid.add_column()
    grid.add_row("Repository:", Text(report.repository))
    grid.add_row("Files Scanned:", str(report.files_scanned))
    grid.add_row("Score:", f"[{grade_style}]{summary.score}/100 ({summary.grade})[/{grade_style}]")
    grid.add_row("Issues:", str(summary.total_issues))
    for severity in sorted(Severity, key=lambda s: s.rank, reverse=True):
        count = summary.issues_by_severity.get(severity, 0)
        if count:
            style = SEVERITY_STYLES[severity]
            grid.add_row(f"  {severity.value.title()}:", f"[{style}]{count}[/{style}]")
    grid.add_row("Duration:", f"{report.duration_seconds:.2f}s")

    console.print(
        Panel(grid, title="[bold blue]Repository Health[/bold blue]", border_style="blue", expand=False)
    )


def render_issues(issues: list[Issue], console: Console) -> None:
    """Render issues as a table, most severe first."""
    if not issues:
        console.print("[green]No issues found.[/green]")
        return

    table = Table(title="Issues", border_style="blue", show_header=True, header_style="bold white")
    table.add_column("Severity", no_wrap=True)
    table.add_column("Category", style="magenta", no_wrap=True)
    table.add_column("Location", style="cyan")
    table.add_column("Title")
    table.add_column("Rule", style="dim")

    for issue in sorted(issues, key=lambda i: (-i.severity.rank, i.file, i.line)):
        location = issue.file
        if issue.line:
            location = f"{location}:{issue.line}"
        table.add_row(
            Text(issue.severity.value, style=SEVERITY_STYLES[issue.severity]),
            issue.category.value,
            Text(location),
            Text(issue.title),
            issue.rule,
        )

    console.print(table)


def render_code_stats(report: HealthReport, console: Console) -> None:
    """Render the per-language line breakdown."""
    stats = report.code_stats
    if not stats.language_breakdown:
        return

    table = Table(title="Languages", box=None, show_header=True)
    table.add_column("Language", style="cyan")
    table.add_column("Lines", justify="right")
    table.add_column("%", justify="right")

    for language, lines in sorted(
        stats.language_breakdown.items(), key=lambda item: item[1], reverse=True
    ):
        percent = stats.language_percent.get(language, 0.0)
        table.add_row(escape(language), str(lines), f"{percent:.1f}")

    console.print(
        Panel(
            table,
            title=f"Code Statistics: {stats.total_files} files, {stats.total_lines} lines",
            border_style="blue",
            expand=False,
        )
    )


def render_report(report: HealthReport, console: Console) -> None:
    """Render a full report as tables."""
    render_summary(report, console)
    render_issues(report.issues, console)
    render_code_stats(report, console)


def write_report(report: HealthReport, path: Path, output_format: str) -> None:
    """
    Write a report to a file in the given format.

    Args:
        report: Report to write
        path: Destination file; parent directories are created
        output_format: "json", or "table" for the plain-text tables
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if output_format == "json":
        path.write_text(report.to_json(), encoding="utf-8")
        return

    with path.open("w", encoding="utf-8") as f:
        render_report(report, Console(file=f, width=REPORT_FILE_WIDTH, color_system=None))


def render_matches(matches: list[MatchRecord], console: Console) -> None:
    """Render search matches as 'file:line: content' lines."""
    if not matches:
        console.print("[yellow]No matches found.[/yellow]")
        return

    for match in matches:
        line = Text()
        line.append(match.file, style="cyan")
        line.append(f":{match.line}: ", style="dim")
        line.append(match.content)
        console.print(line, soft_wrap=True)

    console.print(f"\nFound [bold]{len(matches)}[/bold] matches")
