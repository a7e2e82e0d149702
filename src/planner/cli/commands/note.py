"""Note management commands."""

import click
from planner.cli.error_handling import handle_domain_error
from planner.domain.errors import NotFoundError, note_not_found
from planner.domain.store import open_store


@click.group()
def note_group():
    """Manage notes."""
    pass


@note_group.command("add")
@click.argument("title")
@click.option("--content", default="", help="Note body")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.pass_context
def add_note(ctx, title: str, content: str, tags: tuple[str, ...]):
    """Create a note.

    Examples:
        planner note add "Groceries" --content "milk, eggs" --tag home
    """
    store = open_store(ctx.obj["storage"])
    created = store.notes.add(title=title, content=content, tags=tags)
    click.echo(f"Created note '{title}' (ID: {created.id})")


@note_group.command("list")
@click.option("--tag", help="Only notes with this tag")
@click.pass_context
def list_notes(ctx, tag: str | None):
    """List notes, oldest first."""
    store = open_store(ctx.obj["storage"])
    notes = [n for n in store.notes if tag is None or tag in n.tags]
    if not notes:
        click.echo("No notes found.")
        return

    click.echo("\nNotes:")
    click.echo("-" * 60)
    for n in notes:
        tags = f" [{', '.join(n.tags)}]" if n.tags else ""
        click.echo(f"{n.id} | {n.created_at:%Y-%m-%d} | {n.title}{tags}")


@note_group.command("delete")
@click.argument("note_id")
@click.pass_context
def delete_note(ctx, note_id: str):
    """Delete a note by ID."""
    store = open_store(ctx.obj["storage"])
    if note_id not in store.notes:
        handle_domain_error(ctx, NotFoundError(note_not_found(note_id)))
        return
    store.notes.delete(note_id)
    click.echo(f"Deleted note {note_id}")


def register_commands(cli):
    """Register note commands with main CLI."""
    cli.add_command(note_group, name="note")
