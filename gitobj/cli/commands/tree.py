"""Tree and commit plumbing: ls-tree, write-tree and commit-tree."""

import click

from gitobj.core.errors import ObjectError
from gitobj.core.objects import ObjectKind
from gitobj.cli.commands.objects import echo_tree
from gitobj.cli.context import require_repository
from gitobj.cli.output import error


@click.command('ls-tree')
@click.option('--name-only', is_flag=True, help='Show only entry names')
@click.argument('tree_hash')
def ls_tree_cmd(name_only, tree_hash):
    """
    List contents of a tree object.

    Examples:
        gitobj ls-tree <hash>              # mode, type, hash and name
        gitobj ls-tree --name-only <hash>  # names only
    """
    repo = require_repository()

    try:
        with repo.read_object(tree_hash, ObjectKind.TREE) as obj:
            out = click.get_binary_stream('stdout')
            echo_tree(obj.reader, out, name_only=name_only)
            out.flush()
    except (ObjectError, OSError, ValueError) as e:
        click.echo(error(f"ls-tree failed: {e}"), err=True)
        raise click.Abort()


@click.command('write-tree')
def write_tree_cmd():
    """
    Store the working directory as a tree and print its hash.

    Every file and directory below the repository root is stored,
    except the .git directory itself.
    """
    repo = require_repository()

    try:
        click.echo(repo.build_tree())
    except (ObjectError, OSError, ValueError) as e:
        click.echo(error(f"write-tree failed: {e}"), err=True)
        raise click.Abort()


@click.command('commit-tree')
@click.option('-m', '--message', required=True, help='Commit message')
@click.option('-p', '--parent', help='Parent commit hash')
@click.argument('tree_hash')
def commit_tree_cmd(message, parent, tree_hash):
    """
    Create a commit object for a stored tree and print its hash.

    Examples:
        gitobj commit-tree <tree> -m "Initial commit"
        gitobj commit-tree <tree> -m "Second commit" -p <parent>
    """
    repo = require_repository()

    try:
        click.echo(repo.build_commit(tree_hash, message, parent_hash=parent))
    except (ObjectError, OSError, ValueError) as e:
        click.echo(error(f"commit-tree failed: {e}"), err=True)
        raise click.Abort()
