"""Central UI handler for scriptnav.

Single source of truth for Rich console styling. Import this instead of
instantiating Console() in every command file.

Usage:
    from scriptnav.ui import console, print_success

    console.print("[success]Indexed 12 manifests[/success]")
"""

import os
import sys
from collections.abc import Sequence

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

SCRIPTNAV_THEME = Theme({
    "info": "bold cyan",
    "warning": "bold yellow",
    "error": "bold red",
    "success": "bold green",
    "cmd": "bold magenta",
    "path": "bold cyan",
    "reason": "yellow",
    "dim": "dim white",
})

# Single console instance - import this, don't create your own
console = Console(
    theme=SCRIPTNAV_THEME,
    force_terminal=sys.stdout.isatty()
)


def print_warning(msg: str) -> None:
    console.print(f"[warning]WARNING:[/warning] {msg}")


def print_success(msg: str) -> None:
    console.print(f"[success]OK:[/success] {msg}")


def print_locations(locations: Sequence, root: str | None = None) -> None:
    """Render resolved locations as a table, paths relative to ``root`` when possible."""
    if not locations:
        print_warning("No definition found")
        return

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2, 0, 0))
    table.add_column("Location", style="path")
    table.add_column("Reason", style="reason")

    for loc in locations:
        path = loc.path
        if root:
            try:
                path = os.path.relpath(loc.path, root)
            except ValueError:
                pass
        if loc.line is not None:
            path = f"{path}:{loc.line + 1}:{(loc.column or 0) + 1}"
        table.add_row(path, loc.reason)

    console.print(table)
