"""Resolve a token to the file that defines it."""

import json

import click

from scriptnav.cli import RichCommand
from scriptnav.navigator import Navigator
from scriptnav.ui import print_locations
from scriptnav.utils.error_handler import handle_exceptions


@click.command("resolve", cls=RichCommand)
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
@click.option("--fresh", is_flag=True, help="Ignore the snapshot and index from disk only")
@click.option(
    "--ext",
    "extensions",
    multiple=True,
    help="Probe extension (repeatable, replaces the configured list)",
)
@click.option(
    "--farthest-first",
    is_flag=True,
    help="Walk node_modules from the outermost ancestor inwards",
)
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
def resolve(token, origin, root, fresh, extensions, farthest_first, as_json):
    """Resolve TOKEN (path, module specifier or binary name) seen in ORIGIN.

    \b
    Strategies, first hit wins:
      1. relative path       ./lib/x  -> lib/x.js, lib/x/index.ts, ...
      2. module subpath      pkg/sub  -> node_modules/pkg/sub.js
      3. binary name         eslint   -> bin fields, module manifests, .bin shims
      4. workspace search    token*   -> up to 10 files outside node_modules

    The reason column names the strategy that produced each result.
    """
    navigator = Navigator(root)
    if extensions:
        navigator.options.extensions = tuple(extensions)
    if farthest_first:
        navigator.options.prefer_nearest_dependency = False
    navigator.start(restore=not fresh)

    locations = navigator.resolve(token, origin)

    if as_json:
        click.echo(json.dumps([loc.to_dict() for loc in locations], indent=2))
    else:
        print_locations(locations, navigator.root)
