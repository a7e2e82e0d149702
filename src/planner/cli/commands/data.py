"""Backup and reset commands."""

import json

import click
from planner.cli.error_handling import handle_domain_error
from planner.domain.data_transfer import export_all, import_all
from planner.domain.errors import StorageError
from planner.domain.store import Store


@click.group()
def data_group():
    """Export, import or erase all planner data."""
    pass


@data_group.command("export")
@click.argument("output", type=click.File("w", encoding="utf-8"))
@click.pass_context
def export_data(ctx, output):
    """Write a JSON backup of all planner data to OUTPUT ('-' for stdout)."""
    data = export_all(ctx.obj["storage"])
    json.dump(data, output, indent=2, ensure_ascii=False)
    click.echo(f"Exported {len(data)} items", err=True)


@data_group.command("import")
@click.argument("backup", type=click.File("r", encoding="utf-8"))
@click.pass_context
def import_data(ctx, backup):
    """Replace all planner data with the contents of BACKUP."""
    try:
        result = import_all(ctx.obj["storage"], json.load(backup))
    except (ValueError, StorageError) as e:
        handle_domain_error(ctx, e)
        return
    click.echo(result.message)


@data_group.command("clear")
@click.confirmation_option(prompt="Erase all notes, plans, invoices and transactions?")
@click.pass_context
def clear_data(ctx):
    """Erase every collection and reset budget settings."""
    store = Store(ctx.obj["storage"]).load()
    store.clear_all_data()
    click.echo("All data cleared.")


def register_commands(cli):
    """Register data commands with main CLI."""
    cli.add_command(data_group, name="data")
