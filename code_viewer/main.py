# code_viewer/main.py

from pathlib import Path

import click

# The CLI group and the GUI entry point live in their own modules;
# this file only routes to them.
from code_viewer.cli.main import cv


@click.group(context_settings=dict(help_option_names=['-h', '--help']))
def main():
    """
    Code Snippet Viewer: a searchable, highlighted viewer for study snippets.

    Example (GUI): python -m code_viewer.main gui
    Example (CLI): python -m code_viewer.main cli --help
    """
    pass


@click.command()
@click.option('--data', 'data_file', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Path to a snippet JSON data file.")
def gui(data_file: Path):
    """🎨 Launches the graphical snippet viewer."""
    # Imported here so the CLI keeps working on machines without a display.
    from code_viewer.gui.main_window import run_gui
    run_gui(data_file)


# --- Command Registration ---
main.add_command(gui)
main.add_command(cv, name='cli')

if __name__ == '__main__':
    main()
