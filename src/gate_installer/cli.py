"""
Command-line interface for Gate Installer.

Running the command without arguments installs the latest Gate release.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from gate_installer import __version__
from gate_installer.config import Config, ConfigError
from gate_installer.core import Installer, InstallResult
from gate_installer.errors import InstallerError

console = Console()


def setup_logging(level: str) -> None:
    """Configure logging with rich handler."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="gate-installer")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "-V",
    "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.pass_context
def main(ctx: click.Context, config: Path | None, verbose: bool) -> None:
    """
    Gate Installer - Install the latest Gate release binary.

    Without a command, downloads, verifies and installs Gate.
    """
    ctx.ensure_object(dict)

    # Load configuration
    try:
        ctx.obj["config"] = Config.load(config)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    if not ctx.obj["config"].color:
        console.no_color = True

    # Set log level
    log_level = "DEBUG" if verbose else ctx.obj["config"].log_level
    setup_logging(log_level)
    ctx.obj["verbose"] = verbose

    if ctx.invoked_subcommand is None:
        ctx.invoke(install)


@main.command()
@click.pass_context
def install(ctx: click.Context) -> None:
    """
    Install or update Gate.

    Detects the platform, resolves the latest release, verifies its checksum
    and installs the binary into the install directory.
    """
    config: Config = ctx.obj["config"]

    console.print()
    console.print(
        Panel.fit(
            f"[bold blue]Gate Installer v{__version__}[/]\n"
            f"Installing to {escape(str(config.install_path))}",
            border_style="blue",
        )
    )
    console.print()

    installer = Installer(config)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Installing...", total=None)
            result = installer.install()
            progress.update(task, completed=True)
    except InstallerError as e:
        console.print(f"[red]✗ {escape(str(e))}[/]", soft_wrap=True)
        sys.exit(e.exit_code)

    _display_result(result)


def _display_result(result: InstallResult) -> None:
    """Display the outcome of an install run."""
    if result.updated:
        console.print(
            f"[cyan]Updated from {escape(result.previous_version or 'unknown')} "
            f"to {escape(result.version)}[/]"
        )
    if not result.checksum_verified:
        console.print("[yellow]Warning: checksum verification was skipped[/]")

    console.print(
        f"[green]✓ Installed gate {escape(result.version)} to {escape(str(result.path))}[/]",
        soft_wrap=True,
    )

    if not result.on_path:
        from gate_installer.shell import detect_shell, path_export_line

        directory = str(result.path.parent)
        console.print()
        console.print(f"[yellow]{escape(directory)} is not on your PATH.[/]", soft_wrap=True)
        console.print("Add it for the current shell:")
        export_line = path_export_line(directory, detect_shell())
        console.print(f"  [cyan]{escape(export_line)}[/]", soft_wrap=True)
        console.print("Or add it permanently:")
        console.print("  [cyan]gate-install add-to-path[/]")


@main.command("add-to-path")
@click.option(
    "--shell",
    type=click.Choice(["bash", "zsh", "fish"]),
    help="Shell whose startup file to modify (default: detected from $SHELL)",
)
@click.pass_context
def add_to_path_command(ctx: click.Context, shell: str | None) -> None:
    """
    Add the install directory to PATH permanently.

    Appends an export line to the shell startup file.
    """
    from gate_installer.shell import add_to_path, detect_shell, rc_file

    config: Config = ctx.obj["config"]
    directory = str(config.install_path.parent)
    shell = shell or detect_shell()

    modified = add_to_path(directory, shell)
    if modified:
        console.print(
            f"[green]✓ Added {escape(directory)} to PATH in {escape(str(modified))}[/]",
            soft_wrap=True,
        )
        console.print(f"[dim]Restart your shell or run: source {escape(str(modified))}[/]")
    else:
        console.print(
            f"[dim]{escape(directory)} is already configured in {escape(str(rc_file(shell)))}[/]",
            soft_wrap=True,
        )


@main.command("version", short_help="Display version information")
@click.pass_context
def version(ctx: click.Context) -> None:
    """Display version information for Gate Installer and the installed Gate."""
    from gate_installer.core import installed_version

    config: Config = ctx.obj["config"]

    console.print()
    console.print(
        Panel.fit(
            f"[bold blue]Gate Installer[/]\nVersion: [cyan]{__version__}[/]",
            border_style="blue",
            title="Version Information",
        )
    )
    console.print()

    table = Table(show_header=False, box=None)
    table.add_column("Component", style="dim", width=20)
    table.add_column("Version", style="cyan")

    table.add_row("Gate Installer", __version__)
    table.add_row("Python", f"{sys.version.split()[0]}")
    if config.install_path.exists():
        table.add_row("Gate", installed_version(config.install_path))
    else:
        table.add_row("Gate", "[dim]Not installed[/]")

    console.print(table)
    console.print()


@main.command("init-config")
@click.argument("output_path", type=click.Path(path_type=Path))
def init_config(output_path: Path) -> None:
    """
    Generate a sample configuration file.

    Creates a YAML configuration file with all available options
    and helpful comments.
    """
    sample_config = """# Gate Installer Configuration
# Environment variables (GATE_*) take precedence over this file

# Release source
release:
  # GitHub owner and repository publishing the releases
  repo_owner: minekube
  repo_name: gate

  # Binary name prefix of release assets (gate_<version>_<os>_<arch>)
  binary: gate

  # Checksum manifest published with every release
  checksum_file: checksums.txt

  # HTTP timeout in seconds (null = no timeout)
  request_timeout: null

# Install target
install:
  # Directory for the gate executable (GATE_INSTALL_DIR)
  install_dir: ~/.local/bin

  # Scratch directory for downloads (GATE_TEMP_DIR)
  temp_dir: /tmp/gate-install

  # Minimum free disk space in MB (GATE_MIN_FREE_MB)
  min_free_mb: 50

  # Checksum algorithm used by the manifest
  hash_algorithm: sha256

# Output
output:
  # Log level: DEBUG, INFO, WARNING, ERROR
  log_level: INFO

  # Disable colored output (NO_COLOR)
  no_color: false
"""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(sample_config)
    console.print(f"[green]✓ Configuration file created: {escape(str(output_path))}[/]")


@main.command("collector-config")
@click.argument("output_path", type=click.Path(path_type=Path))
@click.option("--tempo", default="tempo:4317", help="Tempo OTLP gRPC endpoint for traces")
@click.option(
    "--prometheus",
    default="http://prometheus:9090/api/v1/write",
    help="Prometheus remote write endpoint for metrics",
)
def collector_config(output_path: Path, tempo: str, prometheus: str) -> None:
    """
    Write an OpenTelemetry collector config for Gate.

    Receives OTLP from Gate and forwards traces to Tempo and metrics to Prometheus.
    """
    from gate_installer.collector import write_collector_config

    write_collector_config(output_path, tempo_endpoint=tempo, prometheus_endpoint=prometheus)
    console.print(f"[green]✓ Collector configuration created: {escape(str(output_path))}[/]")


@main.command("validate-collector-config")
@click.argument("config_path", type=click.Path(exists=True, path_type=Path))
def validate_collector_config_command(config_path: Path) -> None:
    """Check an OpenTelemetry collector config for wiring problems."""
    from gate_installer.collector import (
        CollectorConfigError,
        load_collector_config,
        validate_collector_config,
    )

    try:
        data = load_collector_config(config_path)
    except CollectorConfigError as e:
        console.print(f"[red]✗ {escape(str(e))}[/]", soft_wrap=True)
        sys.exit(1)

    problems = validate_collector_config(data)
    if problems:
        console.print(f"[red]✗ {len(problems)} problem(s) in {escape(str(config_path))}[/]")
        for problem in problems:
            console.print(f"  • {escape(problem)}", soft_wrap=True)
        sys.exit(1)

    console.print(f"[green]✓ {escape(str(config_path))} is valid[/]")


if __name__ == "__main__":
    main()
