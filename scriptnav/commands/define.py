"""Go-to-definition for scripts and binaries, as an editor would ask for it."""

import json
import os

import click

from scriptnav.cli import RichCommand
from scriptnav.navigator import Navigator
from scriptnav.ui import print_locations
from scriptnav.utils.constants import MANIFEST_NAME
from scriptnav.utils.error_handler import handle_exceptions


@click.command("define", cls=RichCommand)
@handle_exceptions
@click.argument("token")
@click.option(
    "--origin",
    "-o",
    required=True,
    type=click.Path(dir_okay=False),
    help="File the token was found in",
)
@click.option(
    "--root",
    default=".",
    type=click.Path(exists=True, file_okay=False),
    help="Workspace root",
)
@click.option("--line-text", default=None, help="Full source line (Jenkinsfile/Groovy origins)")
@click.option(
    "--offset",
    type=int,
    default=None,
    help="Character offset of the cursor (package.json origins)",
)
@click.option("--fresh", is_flag=True, help="Ignore the snapshot and index from disk only")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
def define(token, origin, root, line_text, offset, fresh, as_json):
    """Find where TOKEN is defined, as seen from ORIGIN.

    \b
    EXAMPLES:
      scriptnav define "npm run lint" -o src/index.js
          -> scripts.lint in the nearest package.json that defines it
      scriptnav define eslint -o package.json --offset 120
          -> the file the script value under offset 120 runs
      scriptnav define build -o Jenkinsfile --line-text "npm run build -- --prod"
    """
    navigator = Navigator(root)
    navigator.start(restore=not fresh)

    text = None
    if offset is not None and os.path.basename(origin) == MANIFEST_NAME:
        text = navigator.fs.read_text(origin)

    locations = navigator.define(token, origin, line_text=line_text, offset=offset, text=text)

    if as_json:
        click.echo(json.dumps([loc.to_dict() for loc in locations], indent=2))
    else:
        print_locations(locations, navigator.root)
