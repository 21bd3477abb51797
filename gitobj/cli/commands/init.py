"""Initialize a new repository."""

import click
from pathlib import Path

from gitobj.core.errors import RepositoryExistsError
from gitobj.core.repository import Repository
from gitobj.cli.output import success, error


@click.command('init')
@click.argument('path', default='.')
def init_cmd(path):
    """
    Initialize an empty repository.

    Creates a .git directory holding the object database.

    Examples:
        gitobj init                 # Initialize in current directory
        gitobj init my-project      # Initialize in my-project directory
    """
    repo = Repository(str(Path(path)))

    try:
        repo.init()
    except RepositoryExistsError as e:
        click.echo(error(str(e)), err=True)
        raise click.Abort()
    except PermissionError:
        click.echo(error(f"Permission denied: Cannot create repository at {path}"), err=True)
        raise click.Abort()

    click.echo(success(f"Initialized empty Git repository in {repo.git_dir}"))
