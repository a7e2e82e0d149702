"""Main CLI entry point."""

import logging

import click
from planner.database.factories import create_sqlite_storage

# Import and register all commands at module level
from planner.cli.commands import currency, data, habit, note


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides PLANNER_DB_PATH environment variable)",
    envvar="PLANNER_DB_PATH",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Planner - local-first notes, habits and money tracking.

    All data lives in a single SQLite file, one JSON document per collection.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Open storage only when actually running a command (not when showing help)
    if ctx.invoked_subcommand is not None:
        storage = create_sqlite_storage(database_path=db_path)
        storage.connect()
        ctx.obj["storage"] = storage
        ctx.call_on_close(storage.disconnect)


# Register all commands
note.register_commands(cli)
habit.register_commands(cli)
currency.register_commands(cli)
data.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
