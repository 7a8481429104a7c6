"""
Main CLI application for ProDoc.

Provides a Typer-based command-line interface over the stored document:
inspection, import, export and configuration.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import ConfigManager
from ..editor import Editor
from ..notifications import ConsoleNotifier

# Initialize Typer app
app = typer.Typer(
    name="prodoc",
    help="Rich-text document engine: inspect, import and export the stored document",
    add_completion=False,
    rich_markup_mode="rich"
)

# Global console for rich output
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed log output"),
) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def open_editor() -> Editor:
    """Build an editor session over the configured storage."""
    config = ConfigManager().load_config()
    editor = Editor(config, notifier=ConsoleNotifier(console))
    editor.start()
    return editor


def _format_time(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


@app.command()
def info() -> None:
    """
    Show information about the stored document.
    """
    editor = open_editor()
    record = editor.store.record
    stats = editor.store.get_stats()

    info_table = Table(title="Document Information", show_header=False)
    info_table.add_column("Property", style="cyan")
    info_table.add_column("Value", style="green")

    info_table.add_row("Title", editor.store.effective_title(editor.config.default_title))
    info_table.add_row("Storage", str(editor.storage.path))
    info_table.add_row("Words", str(stats.words))
    info_table.add_row("Paragraphs", str(stats.paragraphs))
    info_table.add_row("Created", _format_time(record.created_at))
    info_table.add_row("Modified", _format_time(record.modified_at))
    info_table.add_row("Version", record.version)

    console.print(info_table)

    issues = editor.store.validate_integrity()
    if issues:
        console.print("\n[yellow]Structure Issues:[/yellow]")
        for issue in issues:
            console.print(f"  • {issue}")


@app.command()
def stats() -> None:
    """
    Show word, character and paragraph counts and reading time.
    """
    editor = open_editor()
    document_stats = editor.store.get_stats()

    stats_table = Table(title="Document Statistics", show_header=False)
    stats_table.add_column("Statistic", style="cyan")
    stats_table.add_column("Value", style="green")

    stats_table.add_row("Words", str(document_stats.words))
    stats_table.add_row("Characters", str(document_stats.characters))
    stats_table.add_row("Paragraphs", str(document_stats.paragraphs))
    stats_table.add_row("Reading time", f"{document_stats.reading_minutes} min")

    console.print(stats_table)


@app.command()
def outline() -> None:
    """
    Show the heading outline of the document.
    """
    editor = open_editor()
    entries = editor.store.get_outline()

    if not entries:
        console.print("[dim]Use heading formats to generate an outline[/dim]")
        return

    for entry in entries:
        indent = " " * (entry.indent // 8)
        console.print(f"{indent}[cyan]H{entry.level}[/cyan] {entry.text}")


@app.command()
def export(
    export_format: str = typer.Argument(..., help="Format: docx, pdf, html, txt, md or json"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory (default: export_dir or current directory)"),
) -> None:
    """
    Export the stored document to a file.
    """
    editor = open_editor()
    path = editor.export_to(export_format.lower(), output)
    if path is None:
        raise typer.Exit(1)
    console.print(f"[green]Written to {path}[/green]")


@app.command("import")
def import_document(
    file_path: Path = typer.Argument(..., help="File to import (.json, .txt, .md or .html)"),
) -> None:
    """
    Import a file, replacing the stored document.
    """
    if not file_path.exists():
        console.print(f"[red]Error: File not found: {file_path}[/red]")
        raise typer.Exit(1)

    editor = open_editor()
    if not editor.import_file(file_path):
        raise typer.Exit(1)

    console.print(f"[green]Imported '{editor.store.title}'[/green]")


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    create_default: bool = typer.Option(False, "--create-default", help="Create default config file"),
) -> None:
    """
    Manage ProDoc configuration.
    """
    config_manager = ConfigManager()

    if create_default:
        path = config_manager.create_default_config()
        console.print(f"[green]Created default configuration at {path}[/green]")
        return

    if show:
        config_info = config_manager.get_config_info()
        current_config = config_manager.load_config()

        config_display = f"""[bold]ProDoc Configuration[/bold]

[bold cyan]Storage:[/bold cyan]
• Directory: {config_info['storage_dir']}
• Key: {config_info['storage_key']}
• Export Directory: {config_info['export_dir'] or 'current directory'}

[bold yellow]Editing:[/bold yellow]
• Default Title: {current_config.default_title}
• History Limit: {config_info['history_limit']}
• Zoom: {current_config.zoom.minimum}-{current_config.zoom.maximum}% (step {current_config.zoom.step})

[bold green]Auto Save:[/bold green]
• Enabled: {'Yes' if config_info['autosave_enabled'] else 'No'}
• Debounce: {current_config.autosave.debounce_seconds}s
• Interval: {current_config.autosave.interval_seconds}s

[bold magenta]Files:[/bold magenta]
• Config File: {config_info['config_file']}
• Exists: {'Yes' if config_info['config_exists'] else 'No'}"""

        console.print(Panel(config_display, border_style="green"))
        return

    # Default: show basic info
    console.print("Use [cyan]prodoc config --show[/cyan] to see full configuration")
    console.print("Use [cyan]prodoc config --create-default[/cyan] to create a default config file")


if __name__ == "__main__":
    app()
