"""Keep the index current while package.json files change."""

import time
from pathlib import Path

import click

from scriptnav.cli import RichCommand
from scriptnav.navigator import Navigator
from scriptnav.ui import console, print_success
from scriptnav.utils.error_handler import handle_exceptions
from scriptnav.utils.logging import configure_file_logging, logger


@click.command("watch", cls=RichCommand)
@handle_exceptions
@click.option(
    "--root",
    default=".",
    type=click.Path(exists=True, file_okay=False),
    help="Workspace root to watch",
)
@click.option(
    "--duration",
    type=float,
    default=0,
    help="Stop after this many seconds (0 = until Ctrl+C)",
)
@click.option("--poll", type=float, default=1.0, help="Seconds to wait for each batch of events")
def watch(root, duration, poll):
    """Index the workspace, then apply package.json changes as they happen.

    Created and modified manifests are re-parsed, deleted ones are dropped.
    Events are applied one at a time in the order they arrive; the snapshot
    is written after every batch and on exit.
    """
    navigator = Navigator(root)
    handler_id = configure_file_logging(Path(navigator.config["cache"]["dir"]))

    count = navigator.start(restore=False)
    print_success(f"Indexed {count} package.json files")
    navigator.watch()
    console.print("[dim]Watching for changes (Ctrl+C to stop)...[/dim]")

    deadline = time.monotonic() + duration if duration > 0 else None
    try:
        while deadline is None or time.monotonic() < deadline:
            applied = navigator.indexer.process_pending(timeout=poll)
            if applied:
                logger.info("Applied {count} change(s); {size} manifests indexed",
                            count=applied, size=len(navigator.index))
                navigator.index.persist()
    except KeyboardInterrupt:
        pass
    finally:
        navigator.close()
        logger.remove(handler_id)

    print_success(f"Stopped watching; {len(navigator.index)} package.json files indexed")
