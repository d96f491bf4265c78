"""
Command-line interface for HostPreferred.

Runs an optimization pass for a target and manages the hosts file
backup from the terminal.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .cache_utils import check_elevated_privileges, flush_dns_cache
from .catalog import PROFILES, list_targets
from .errors import HostPreferredError
from .hosts_file import get_hosts_dir, revert_hosts, save_content_to_file, save_current_hosts
from .models import OptimizationTarget, OptimizerConfig
from .output import JSONOutput, RichConsoleOutput
from .resolvers import RESOLVERS, DEFAULT_RESOLVERS
from .runner import optimize_hosts_async


def configure_logging(level: str) -> None:
    """Send package logs to stderr through rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def create_progress_callback():
    """Create a progress callback using rich."""
    console = Console(stderr=True)
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn("{task.completed}/{task.total}"),
        console=console,
        transient=True,
    )

    task_id = None

    def callback(message: str, current: int, total: int):
        nonlocal task_id
        if task_id is None:
            task_id = progress.add_task(message, total=total)
        progress.update(task_id, description=message, completed=current)

    return progress, callback


def fail(error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def parse_target(ctx, param, value: str) -> OptimizationTarget:
    try:
        return OptimizationTarget.parse(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


hosts_file_option = click.option(
    "--hosts-file",
    type=click.Path(dir_okay=False),
    envvar="HOSTPREFERRED_HOSTS_FILE",
    help="Hosts file to manage (default: the system hosts file)",
)


@click.group()
@click.version_option(__version__)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    envvar="HOSTPREFERRED_LOG_LEVEL",
    help="Logging level",
)
@click.option("--verbose", "-v", is_flag=True, help="Shortcut for --log-level info")
def main(log_level: str, verbose: bool):
    """
    HostPreferred - pick the fastest IPs for a domain group and pin them in hosts.

    Resolves every domain through several DNS-over-HTTPS resolvers, pings
    the candidates and writes the lowest-latency address of each domain
    into a dedicated block of the hosts file.
    """
    if verbose and log_level.lower() == "warning":
        log_level = "info"
    configure_logging(log_level)


@main.command()
@click.argument("target", callback=parse_target)
@hosts_file_option
@click.option(
    "--deadline",
    type=float,
    default=OptimizerConfig.deadline,
    envvar="HOSTPREFERRED_DEADLINE",
    show_default=True,
    help="Global time budget for resolution and probing, in seconds",
)
@click.option(
    "--resolver-timeout",
    type=float,
    default=OptimizerConfig.resolver_timeout,
    envvar="HOSTPREFERRED_RESOLVER_TIMEOUT",
    show_default=True,
    help="Timeout per DoH resolver attempt, in seconds",
)
@click.option(
    "--probe-timeout",
    type=float,
    default=OptimizerConfig.probe_timeout,
    envvar="HOSTPREFERRED_PROBE_TIMEOUT",
    show_default=True,
    help="Timeout per ping, in seconds",
)
@click.option(
    "--output", "-o",
    type=click.Path(),
    help="Also save the report as JSON",
)
@click.option(
    "--export-report",
    is_flag=True,
    help="Save the JSON report next to the hosts file",
)
@click.option(
    "--flush-cache",
    is_flag=True,
    help="Flush the OS DNS cache after writing the hosts file",
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    help="Only print the summary line",
)
@click.option(
    "--json",
    is_flag=True,
    help="Output the report as JSON to stdout",
)
def optimize(
    target: OptimizationTarget,
    hosts_file: Optional[str],
    deadline: float,
    resolver_timeout: float,
    probe_timeout: float,
    output: Optional[str],
    export_report: bool,
    flush_cache: bool,
    quiet: bool,
    json: bool,
):
    """
    Optimize TARGET and update its block in the hosts file.

    TARGET is one of the names shown by list-targets.

    Examples:

    \b
      # Optimize GitHub domains (needs administrator privileges)
      sudo hostpreferred optimize github

    \b
      # Work on a copy of the hosts file
      hostpreferred optimize cloudflare --hosts-file ./hosts
    """
    config = OptimizerConfig(
        resolver_timeout=resolver_timeout,
        probe_timeout=probe_timeout,
        deadline=deadline,
        hosts_path=hosts_file,
    )

    if not hosts_file and not check_elevated_privileges():
        click.echo("Warning: Elevated privileges are usually required to write the hosts file", err=True)

    progress_ctx, progress_callback = None, None
    if not quiet and not json:
        progress_ctx, progress_callback = create_progress_callback()

    try:
        if progress_ctx:
            with progress_ctx:
                report = asyncio.run(optimize_hosts_async(target, config, progress_callback))
        else:
            report = asyncio.run(optimize_hosts_async(target, config))
    except HostPreferredError as e:
        fail(e)

    if json:
        click.echo(JSONOutput.format(report))
    elif quiet:
        click.echo(report.summary)
    else:
        RichConsoleOutput.print(report)

    if output:
        JSONOutput.save(report, Path(output))
        if not quiet and not json:
            click.echo(f"Report saved to {output}")

    if export_report:
        filename = f"hostpreferred-{target.name.lower()}.json"
        try:
            path = save_content_to_file(filename, JSONOutput.format(report), hosts_file)
        except HostPreferredError as e:
            fail(e)
        if not quiet and not json:
            click.echo(f"Report exported to {path}")

    if flush_cache:
        success, message = flush_dns_cache()
        click.echo(f"Cache flush: {message}", err=not success)


@main.command()
@hosts_file_option
def backup(hosts_file: Optional[str]):
    """Save the current hosts file next to it."""
    try:
        path = save_current_hosts(hosts_file)
    except HostPreferredError as e:
        fail(e)
    click.echo(f"✓ Hosts file backed up to {path}")


@main.command()
@hosts_file_option
def restore(hosts_file: Optional[str]):
    """Restore the hosts file from its backup."""
    try:
        message = revert_hosts(hosts_file)
    except HostPreferredError as e:
        fail(e)
    click.echo(f"✓ {message}")


@main.command("hosts-dir")
@hosts_file_option
def hosts_dir(hosts_file: Optional[str]):
    """Print the directory containing the hosts file."""
    try:
        click.echo(get_hosts_dir(hosts_file))
    except HostPreferredError as e:
        fail(e)


@main.command("list-targets")
def list_targets_command():
    """List optimization targets and their domains."""
    console = Console()
    table = Table(
        title="Optimization Targets",
        box=box.ROUNDED,
        header_style="bold cyan",
    )

    table.add_column("Target", style="green")
    table.add_column("Core", style="cyan")
    table.add_column("Optional", justify="right")
    table.add_column("Block marker", style="dim")

    for name in list_targets():
        profile = PROFILES[OptimizationTarget(name)]
        table.add_row(
            name,
            "\n".join(profile.domains.core),
            str(len(profile.domains.optional)),
            profile.start_marker,
        )

    console.print(table)


@main.command("list-resolvers")
def list_resolvers_command():
    """List DoH resolvers in the order they are tried."""
    for position, name in enumerate(DEFAULT_RESOLVERS, 1):
        resolver = RESOLVERS[name]
        click.echo(f"  {position}. {name:12} {resolver.doh_url}")


@main.command()
def flush():
    """Flush the OS DNS cache."""
    if not check_elevated_privileges():
        click.echo("Warning: This may require elevated privileges", err=True)

    success, message = flush_dns_cache()
    if success:
        click.echo(f"✓ {message}")
    else:
        click.echo(f"✗ {message}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
