"""
Output formatting for optimization reports.

Provides two output formats:
- JSON: Machine-readable full report
- Human-readable: Rich terminal table and summary
"""

import json
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .models import OptimizationReport
from .statistics import StatisticsEngine


class JSONOutput:
    """JSON output formatter."""

    @staticmethod
    def format(report: OptimizationReport, indent: int = 2) -> str:
        """
        Format an optimization report as JSON.

        Args:
            report: OptimizationReport to format
            indent: JSON indentation level

        Returns:
            JSON string
        """
        data = {
            "metadata": {
                "target": report.target.value,
                "started_at": report.started_at.isoformat(),
                "completed_at": report.completed_at.isoformat(),
                "duration_seconds": report.duration_seconds,
                "timed_out": report.timed_out,
                "hosts_path": report.hosts_path,
            },
            "entries": [
                {
                    "domain": entry.domain,
                    "ip": entry.ip,
                    "latency_ms": round(entry.latency_ms, 3),
                    "core": entry.is_core,
                }
                for entry in report.entries
            ],
            "resolution": report.resolution,
            "missing_optional": report.missing_optional,
            "latency_ms": {
                k: round(v, 3) if isinstance(v, float) else v
                for k, v in StatisticsEngine.summarize(report).items()
            },
            "summary": report.summary,
        }
        return json.dumps(data, indent=indent)

    @staticmethod
    def save(report: OptimizationReport, path: Path) -> None:
        """Save an optimization report to a JSON file."""
        with open(path, "w") as f:
            f.write(JSONOutput.format(report))


class RichConsoleOutput:
    """Rich library console output with colors and tables."""

    @staticmethod
    def print(report: OptimizationReport, console: Optional[Console] = None) -> None:
        """Print an optimization report using rich."""
        console = console or Console()

        console.print()
        console.print(Panel.fit(
            f"[bold blue]{report.target.value.upper()} HOSTS OPTIMIZATION[/bold blue]",
            border_style="blue",
        ))
        console.print()

        console.print(f"  [dim]Duration:[/dim] {report.duration_seconds:.1f}s")
        fastest = report.fastest
        if fastest:
            console.print(
                f"  [dim]Fastest:[/dim] {fastest.domain} -> {fastest.ip} "
                f"({fastest.latency_ms:.1f}ms)"
            )
        if report.hosts_path:
            console.print(f"  [dim]Hosts file:[/dim] {report.hosts_path}")
        console.print()

        table = Table(
            title="Selected Addresses",
            box=box.ROUNDED,
            header_style="bold magenta",
        )

        table.add_column("Domain", style="cyan")
        table.add_column("IP", style="green")
        table.add_column("Latency (ms)", justify="right", style="yellow")
        table.add_column("Tier", style="dim")

        for entry in report.entries:
            table.add_row(
                entry.domain,
                entry.ip,
                f"{entry.latency_ms:.1f}",
                "core" if entry.is_core else "optional",
            )

        console.print(table)
        console.print()

        if report.missing_optional:
            console.print(
                f"  [yellow]Skipped optional domains:[/yellow] "
                f"{', '.join(report.missing_optional)}"
            )
        if report.timed_out:
            console.print("  [yellow]Deadline reached; unfinished domains were skipped.[/yellow]")

        console.print(Panel(
            f"[bold green]{report.summary}[/bold green]",
            border_style="green",
        ))
        console.print()
