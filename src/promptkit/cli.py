"""promptkit CLI - install the toolkit into the Claude config dir."""

import logging
import os
from pathlib import Path
from typing import Annotated, Optional

import click
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from promptkit import __version__, config
from promptkit.files.materializer import ConflictPolicy
from promptkit.install.orchestrator import Installer, InstallReport, Level

app = typer.Typer(
    name="promptkit",
    help="Install skills, commands, agents and hooks for Claude Code.",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

LABELS = {
    Level.INFO: "[blue]\\[INFO][/blue]",
    Level.OK: "[green]\\[OK][/green]",
    Level.WARN: "[yellow]\\[WARN][/yellow]",
    Level.ERROR: "[red]\\[ERROR][/red]",
}

USAGE = """\
Available commands in Claude Code:
  /start             - Analyze context and propose next action
  /coaching          - Start a guided implementation session
  /planning          - Create Implementation Plan from Feature Shape
  /pragmatic-review  - Pragmatic code review

Skills are auto-loaded based on context."""


def setup_logging(verbose: bool) -> None:
    level_name = os.getenv(config.LOG_LEVEL_ENV, "DEBUG" if verbose else "WARNING")
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.WARNING),
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def notify(level: Level, text: str) -> None:
    target = err_console if level == Level.ERROR else console
    target.print(f"{LABELS[level]} {escape(text)}", highlight=False)


def confirm_overwrite(path: Path) -> bool:
    notify(Level.WARN, f"Already exists: {path}")
    typer.echo("Overwrite? (y/N): ", nl=False)
    answer = click.getchar()
    typer.echo()
    return answer in ("y", "Y")


def print_header() -> None:
    console.print("=============================================")
    console.print("  Claude Code Tool Kit")
    console.print(f"  Installation Script v{__version__}")
    console.print("=============================================")
    console.print()


def print_summary(report: InstallReport, installer: Installer) -> None:
    console.print()
    console.print("=============================================")
    if report.success:
        console.print("[green]  Installation completed![/green]")
    else:
        console.print("[red]  Installation failed![/red]")
    console.print("=============================================")
    console.print()

    if report.completed:
        console.print("[bold]Completed:[/bold]")
        for name in report.completed:
            console.print(f"  [green]✓[/green] {name}")
    if report.incomplete:
        console.print("[bold]Not completed:[/bold]")
        for name in report.incomplete:
            step = report.step(name)
            icon = "[red]✗[/red]" if step is not None and step.failed else "[dim]-[/dim]"
            console.print(f"  {icon} {name}")
    console.print()

    if report.success:
        console.print("Installed:")
        console.print(f"  - Skills: {installer.skills_dir}/")
        console.print(f"  - Commands: {installer.commands_dir}/")
        console.print(f"  - Agents: {installer.agents_dir}/")
        console.print(f"  - Settings: {installer.settings_path}")
        console.print(f"  - Config: {installer.base_config_path}")
        console.print()
        console.print(USAGE, highlight=False)
        if report.has_warnings:
            console.print()
            notify(Level.WARN, "Some warnings occurred. Check messages above.")
    else:
        console.print("Check error messages above.")


def version_callback(value: bool) -> None:
    if value:
        console.print(f"promptkit {__version__}")
        raise typer.Exit()


@app.command()
def install(
    source: Annotated[
        Path, typer.Option("--source", "-s", help="Toolkit checkout to install from")
    ] = Path("."),
    target: Annotated[
        Optional[Path], typer.Option("--target", "-t", help="Claude config dir")
    ] = None,
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Overwrite existing files without asking")
    ] = False,
    skip_existing: Annotated[
        bool, typer.Option("--skip-existing", help="Never overwrite existing files")
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging")] = False,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Install the toolkit into the Claude config dir."""
    if yes and skip_existing:
        err_console.print("[red]Error:[/red] --yes and --skip-existing are exclusive")
        raise typer.Exit(2)
    setup_logging(verbose)

    if yes:
        policy = ConflictPolicy.OVERWRITE
    elif skip_existing:
        policy = ConflictPolicy.SKIP
    else:
        policy = ConflictPolicy.PROMPT

    installer = Installer(
        source_dir=source.resolve(),
        claude_dir=target.expanduser().resolve() if target else config.CLAUDE_DIR,
        on_conflict=policy,
        confirm=confirm_overwrite,
        notify=notify,
    )

    print_header()
    report = installer.run()
    print_summary(report, installer)

    if not report.success:
        raise typer.Exit(1)