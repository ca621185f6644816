"""scriptnav CLI - Main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

import click
from rich.table import Table
from rich.text import Text

from scriptnav import __version__
from scriptnav.ui import console


class RichCommand(click.Command):
    """Command whose options section is rendered as a rich table."""

    def format_options(self, ctx, formatter):
        records = [p.get_help_record(ctx) for p in self.get_params(ctx)]
        records = [r for r in records if r]
        if not records:
            return

        table = Table(show_header=False, box=None, padding=(0, 2, 0, 2))
        table.add_column("Option", style="cmd", no_wrap=True)
        table.add_column("Description")
        for opts, help_text in records:
            # Help strings carry click's "[default: ...]" suffix; keep it literal
            table.add_row(Text(opts), Text(help_text))

        with console.capture() as capture:
            console.print(table)

        formatter.write_paragraph()
        formatter.write_heading("Options")
        formatter.write(capture.get())


class VerboseGroup(click.Group):
    """Help output grouped by category instead of click's flat command list."""

    COMMAND_CATEGORIES = {
        "INDEX": {
            "title": "INDEX",
            "description": "Build and maintain the package.json index",
            "commands": ["reindex", "watch"],
        },
        "LOOKUP": {
            "title": "LOOKUP",
            "description": "Resolve tokens to the files that define them",
            "commands": ["resolve", "define"],
        },
    }

    def format_commands(self, ctx, formatter):
        """Suppress the default listing; format_help prints the categorized one."""
        pass

    def format_help(self, ctx, formatter):
        super().format_help(ctx, formatter)

        registered = {
            name: cmd
            for name, cmd in self.commands.items()
            if not getattr(cmd, "hidden", False)
        }

        console.print()
        console.rule("[bold]COMMANDS[/bold]")

        for category_data in self.COMMAND_CATEGORIES.values():
            console.print(f"\n[bold cyan]{category_data['title']}[/bold cyan]")
            console.print(f"[dim]{category_data['description']}[/dim]")

            table = Table(show_header=False, box=None, padding=(0, 2, 0, 0))
            table.add_column("Command", style="cmd", width=12)
            table.add_column("Description", style="white")

            for cmd_name in category_data["commands"]:
                if cmd_name not in registered:
                    continue
                first_line = (registered[cmd_name].help or "").split("\n")[0].strip()
                table.add_row(cmd_name, first_line)

            console.print(table)

        console.print()
        console.rule()
        console.print("For detailed options: [cmd]scriptnav <command> --help[/cmd]")


@click.group(cls=VerboseGroup)
@click.version_option(version=__version__, prog_name="scriptnav")
@click.help_option("-h", "--help")
def cli():
    """scriptnav - jump from npm scripts, binaries and module paths to their definitions.

    \b
    QUICK START:
      scriptnav reindex                               # Index every package.json
      scriptnav define lint --origin src/index.js     # Where is "npm run lint" defined?
      scriptnav resolve eslint --origin package.json  # Which file does "eslint" run?
    """
    pass


from scriptnav.commands.define import define
from scriptnav.commands.reindex import reindex
from scriptnav.commands.resolve import resolve
from scriptnav.commands.watch import watch

cli.add_command(reindex)
cli.add_command(watch)
cli.add_command(resolve)
cli.add_command(define)


def main():
    cli()


if __name__ == "__main__":
    main()
