"""Repository lookup shared by CLI commands."""

import click

from gitobj.core.repository import Repository
from gitobj.cli.output import error


def require_repository() -> Repository:
    """Find the enclosing repository or abort the command."""
    repo = Repository.find_repository()
    if not repo:
        click.echo(error("Not a git repository (or any of the parent directories)"), err=True)
        raise click.Abort()
    return repo
