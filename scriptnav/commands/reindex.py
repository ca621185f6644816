"""Rebuild the package.json index for a workspace."""

import time

import click

from scriptnav.cli import RichCommand
from scriptnav.navigator import Navigator
from scriptnav.ui import print_success
from scriptnav.utils.error_handler import handle_exceptions


@click.command("reindex", cls=RichCommand)
@handle_exceptions
@click.option(
    "--root",
    default=".",
    type=click.Path(exists=True, file_okay=False),
    help="Workspace root to scan",
)
@click.option("--no-persist", is_flag=True, help="Do not write the cache.json snapshot")
@click.option("--quiet", is_flag=True, help="Print only the entry count")
def reindex(root, no_persist, quiet):
    """Rescan every package.json outside node_modules and rebuild the index.

    Manifests that fail to parse are skipped with a warning; the command
    itself always completes and reports how many manifests are indexed.
    The snapshot is written to <root>/.scriptnav/cache.json unless
    --no-persist is given or cache.persist is disabled in the config.
    """
    navigator = Navigator(root, persist=False if no_persist else None)

    start = time.time()
    count = navigator.reindex()
    elapsed = time.time() - start

    if quiet:
        click.echo(count)
    else:
        print_success(f"Indexed {count} package.json files in {elapsed:.2f}s")
