# code_viewer/cli/main.py

import logging
import sys
from pathlib import Path
from typing import List, Optional

import click
# The 'rich' library gives the CLI its tables and syntax-highlighted code.
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from tqdm import tqdm

from code_viewer.core.config_manager import load_settings
from code_viewer.core.formatting import detect_language, format_title
from code_viewer.core.search import filter_snippets
from code_viewer.core.snippet_loader import (
    Snippet, SnippetLoadError, load_snippets, load_snippets_from_directory, save_snippets
)

# --- Setup ---
console = Console()
logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_DATA_FILE = PROJECT_ROOT / 'config' / 'snippets.json'
SETTINGS_FILE = PROJECT_ROOT / 'config' / 'settings.json'

# Long descriptions would wrap the table into an unreadable block.
DESCRIPTION_PREVIEW_LENGTH = 60

data_option = click.option(
    '--data', 'data_file', type=click.Path(dir_okay=False, path_type=Path), default=None,
    help="Path to a snippet JSON data file. Defaults to the configured or bundled data."
)


def _load_or_exit(data_file: Optional[Path]) -> List[Snippet]:
    """Loads the snippets, or prints the error and exits with status 1."""
    if data_file is None:
        configured = load_settings(SETTINGS_FILE).data_file
        data_file = Path(configured) if configured else DEFAULT_DATA_FILE
    try:
        return load_snippets(data_file)
    except SnippetLoadError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        logger.error("CLI could not load snippets.", exc_info=True)
        sys.exit(1)


def _snippet_table(snippets: List[Snippet], title: str) -> Table:
    table = Table(title=title, style="cyan", title_style="bold magenta")
    table.add_column("ID", style="green", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Description", style="yellow")
    for snippet in snippets:
        description = snippet.description
        if len(description) > DESCRIPTION_PREVIEW_LENGTH:
            description = description[:DESCRIPTION_PREVIEW_LENGTH - 3] + "..."
        table.add_row(snippet.id, format_title(snippet.title) or snippet.id, description)
    return table


# --- Main Command Group ---
@click.group(context_settings=dict(help_option_names=['-h', '--help']))
@click.version_option(version="1.0", prog_name="Code Snippet Viewer")
def cv():
    """
    📚 Code Snippet Viewer - browse, search and print your study snippets.

    Use `[COMMAND] --help` for more information on a specific command.
    """
    pass


@cv.command(name="list")
@data_option
def list_snippets(data_file: Optional[Path]):
    """📋 Lists every snippet in the collection."""
    snippets = _load_or_exit(data_file)
    if not snippets:
        console.print("[yellow]The collection is empty.[/yellow]")
        return
    console.print(_snippet_table(snippets, f"{len(snippets)} Snippets"))


@cv.command()
@click.argument('query')
@data_option
def search(query: str, data_file: Optional[Path]):
    """🔍 Finds snippets whose id, title, description or code contain QUERY."""
    snippets = _load_or_exit(data_file)
    results = filter_snippets(snippets, query)
    if not results:
        console.print(f"[yellow]No snippets match '{query}'.[/yellow]")
        return
    console.print(_snippet_table(results, f"{len(results)} of {len(snippets)} snippets match '{query}'"))


@cv.command()
@click.argument('snippet_id')
@data_option
@click.option('--theme', default="monokai", show_default=True, help="Pygments color theme for the code.")
def show(snippet_id: str, data_file: Optional[Path], theme: str):
    """🖥️ Prints a single snippet with syntax highlighting."""
    snippets = _load_or_exit(data_file)
    snippet = next((s for s in snippets if s.id == snippet_id), None)
    if snippet is None:
        console.print(f"[bold red]❌ No snippet with id '{snippet_id}'.[/bold red]")
        sys.exit(1)

    header = f"[bold cyan]{format_title(snippet.title) or snippet.id}[/bold cyan]"
    if snippet.description:
        header += f"\n{snippet.description}"
    console.print(Panel(header, title=snippet.id, expand=False))
    console.print(Syntax(snippet.code, detect_language(snippet.code), theme=theme, line_numbers=True))


@cv.command()
@click.argument('source_dir', type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path))
@click.option('-o', '--output', type=click.Path(dir_okay=False, path_type=Path), required=True,
              help="Where to write the snippet JSON data file.")
@click.option('--pattern', default="*.js", show_default=True, help="Glob pattern of the source files to include.")
def build(source_dir: Path, output: Path, pattern: str):
    """🛠️ Builds a snippet data file from a directory of source files."""
    console.print(f"[bold cyan]Building snippets from '{source_dir}'...[/bold cyan]")
    total = sum(1 for p in source_dir.glob(pattern) if p.is_file())
    if total == 0:
        console.print(f"[yellow]No files matching '{pattern}' in {source_dir}.[/yellow]")
        return

    try:
        with tqdm(total=total, desc="Reading sources", unit="file") as progress:
            snippets = load_snippets_from_directory(source_dir, pattern, progress=lambda _path: progress.update(1))
        save_snippets(snippets, output)
    except (SnippetLoadError, OSError) as e:
        console.print(f"[bold red]❌ Build failed: {e}[/bold red]")
        logger.error("CLI build command failed.", exc_info=True)
        sys.exit(1)

    console.print(f"[bold green]✅ Wrote {len(snippets)} snippets to {output}.[/bold green]")
