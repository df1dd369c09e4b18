#!/usr/bin/env python3
"""
filekit - file-system helpers

Main entry point for the filekit CLI application.
"""

import sys
from functools import wraps

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from core import AuditLogger, FileOpsError, Settings, load_settings
from modules.fileops import DeleteStatus, FileOperator


console = Console()


def get_settings(config_path: str) -> Settings:
    """Load settings from the given config file."""
    return load_settings(config_path)


def get_operator(config_path: str) -> FileOperator:
    """Get a FileOperator configured from the given config file."""
    settings = get_settings(config_path)
    logger = AuditLogger(log_path=settings.audit_log_path) if settings.audit_enabled else None
    return FileOperator(settings=settings, logger=logger)


def reports_errors(func):
    """Print filekit errors in red and exit with status 1."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except FileOpsError as e:
            console.print(f"[red]Error:[/red] {e}")
            sys.exit(1)
    return wrapper


config_option = click.option(
    "--config", "config_path", default="config.yaml", show_default=True,
    help="Path to the YAML configuration file."
)


@click.group()
@click.version_option(version="0.1.0", prog_name="filekit")
def filekit():
    """
    filekit - file-system helpers

    Copy, delete, create and list files with checked preconditions.
    """
    pass


@filekit.command()
@click.argument("src")
@click.argument("dst")
@click.option("--preserve-timestamp/--no-preserve-timestamp", default=None,
              help="Keep the source modification time (default from config).")
@config_option
@reports_errors
def copy(src: str, dst: str, preserve_timestamp, config_path: str):
    """Copy SRC to DST."""
    operator = get_operator(config_path)
    operator.copy_file(src, dst, preserve_timestamp=preserve_timestamp)
    console.print(f"[green]Copied[/green] {src} → {dst}")


@filekit.command()
@click.argument("path")
@click.option("--quiet", is_flag=True, help="Never fail; report the outcome instead.")
@config_option
@reports_errors
def delete(path: str, quiet: bool, config_path: str):
    """Delete PATH, recursively if it is a directory."""
    operator = get_operator(config_path)

    if quiet:
        status = operator.try_delete(path)
        color = "green" if status is DeleteStatus.DELETED else "yellow"
        console.print(f"[{color}]{status.value}[/{color}] {path}")
        return

    operator.force_delete(path)
    console.print(f"[green]Deleted[/green] {path}")


@filekit.command()
@click.argument("directory")
@config_option
@reports_errors
def clean(directory: str, config_path: str):
    """Delete everything inside DIRECTORY, keeping the directory."""
    operator = get_operator(config_path)
    operator.clean_directory(directory)
    console.print(f"[green]Cleaned[/green] {directory}")


@filekit.command()
@click.argument("path")
@config_option
@reports_errors
def mkdir(path: str, config_path: str):
    """Create PATH and any missing parents."""
    operator = get_operator(config_path)
    operator.force_mkdir(path)
    console.print(f"[green]Directory ready:[/green] {path}")


@filekit.command("ls")
@click.argument("directory")
@click.argument("suffix")
@config_option
@reports_errors
def list_command(directory: str, suffix: str, config_path: str):
    """List files under DIRECTORY ending in .SUFFIX."""
    operator = get_operator(config_path)
    files = operator.list_files(directory, suffix)

    if not files:
        console.print(f"[dim]No *.{suffix} files found.[/dim]")
        return

    for path in files:
        console.print(f"  {path}")
    console.print(f"\n[dim]{len(files)} file(s)[/dim]")


@filekit.command("is-symlink")
@click.argument("path")
@config_option
@reports_errors
def is_symlink(path: str, config_path: str):
    """Tell whether PATH is a symbolic link."""
    operator = get_operator(config_path)
    if operator.is_symlink(path):
        console.print(f"[cyan]symlink[/cyan] {path}")
    else:
        console.print(f"[dim]not a symlink[/dim] {path}")


@filekit.command()
@click.argument("destination")
@config_option
@reports_errors
def write(destination: str, config_path: str):
    """Write standard input to DESTINATION."""
    operator = get_operator(config_path)
    operator.copy_input_stream_to_file(click.get_binary_stream("stdin"), destination)
    console.print(f"[green]Wrote[/green] {destination}")


@filekit.command()
@click.option("--limit", default=20, show_default=True, help="Number of entries to show.")
@config_option
def audit(limit: int, config_path: str):
    """View the audit log."""
    settings = get_settings(config_path)
    logger = AuditLogger(log_path=settings.audit_log_path)
    entries = logger.get_recent(limit=limit)

    if not entries:
        console.print("[dim]No audit entries found.[/dim]")
        return

    table = Table(title="Recent Audit Log")
    table.add_column("Time", style="dim")
    table.add_column("Type")
    table.add_column("Action")
    table.add_column("Status")

    for entry in entries:
        time_str = entry.timestamp.split("T")[1].split(".")[0] if "T" in entry.timestamp else entry.timestamp

        status_str = entry.status
        if entry.status == "executed":
            status_str = f"[green]{entry.status}[/green]"
        elif entry.status == "failed":
            status_str = f"[red]{entry.status}[/red]"

        table.add_row(
            time_str,
            entry.action_type,
            entry.action_description[:50] + "..." if len(entry.action_description) > 50 else entry.action_description,
            status_str
        )

    console.print(table)


@filekit.command("config")
@config_option
def show_config(config_path: str):
    """Show the effective settings."""
    settings = get_settings(config_path)
    console.print(Panel.fit(
        f"chunk_size: {settings.chunk_size}\n"
        f"preserve_timestamp: {settings.preserve_timestamp}\n"
        f"audit_enabled: {settings.audit_enabled}\n"
        f"audit_log_path: {settings.audit_log_path}",
        title=f"⚙️  {config_path}"
    ))


if __name__ == "__main__":
    filekit()
