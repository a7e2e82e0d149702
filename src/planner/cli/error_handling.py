"""CLI error handling helpers."""

import logging

import click

from planner.domain.errors import DomainError, StorageError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError | StorageError) -> None:
    """Print error to stderr and exit with status 1.

    Storage failures are labelled separately from invalid input so a full
    or unreadable database is not mistaken for a typo.
    """
    if isinstance(error, StorageError):
        logger.error("Storage failure in '%s': %s", ctx.command_path, error)
        click.echo(f"Storage error: {error}", err=True)
    else:
        click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
