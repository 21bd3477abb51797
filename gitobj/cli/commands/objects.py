"""Plumbing commands for single objects: cat-file and hash-object."""

import shutil

import click

from gitobj.core.errors import ObjectError
from gitobj.core.hash import hash_file
from gitobj.core.objects import ObjectKind
from gitobj.core.tree import iterate_tree
from gitobj.cli.context import require_repository
from gitobj.cli.output import error


def echo_tree(reader, out, name_only: bool = False) -> None:
    """Write one line per tree entry to a binary stream."""
    for entry in iterate_tree(reader):
        if not name_only:
            out.write(f"{int(entry.mode):06o} {entry.object_type} {entry.hex}\t".encode('ascii'))
        out.write(entry.name + b'\n')


@click.command('cat-file')
@click.option('-t', '--type', 'show_type', is_flag=True, help='Show object type')
@click.option('-s', '--size', 'show_size', is_flag=True, help='Show object size')
@click.option('-p', '--pretty', is_flag=True, help='Pretty-print object content')
@click.argument('object_hash')
def cat_file_cmd(show_type, show_size, pretty, object_hash):
    """
    Show object content, type, or size.

    Blob content is written to stdout unchanged. Trees are listed one
    entry per line, commits are printed as stored.

    Examples:
        gitobj cat-file -p <hash>     # Print object content
        gitobj cat-file -t <hash>     # Show object type
        gitobj cat-file -s <hash>     # Show object size
    """
    if [show_type, show_size, pretty].count(True) != 1:
        raise click.UsageError("Exactly one of -t, -s or -p is required")

    repo = require_repository()

    try:
        with repo.read_object(object_hash) as obj:
            if show_type:
                click.echo(str(obj.kind))
            elif show_size:
                click.echo(obj.size)
            else:
                out = click.get_binary_stream('stdout')
                if obj.kind is ObjectKind.TREE:
                    echo_tree(obj.reader, out)
                else:
                    shutil.copyfileobj(obj.reader, out)
                out.flush()
    except (ObjectError, OSError, ValueError) as e:
        click.echo(error(f"cat-file failed: {e}"), err=True)
        raise click.Abort()


@click.command('hash-object')
@click.option('-w', '--write', is_flag=True, help='Write the object into the object database')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
def hash_object_cmd(write, path):
    """
    Compute the object hash of a file, optionally storing it as a blob.

    Examples:
        gitobj hash-object README.md      # Print hash only
        gitobj hash-object -w README.md   # Store blob and print hash
    """
    try:
        if write:
            repo = require_repository()
            click.echo(repo.store_blob(path))
        else:
            click.echo(hash_file(path))
    except (ObjectError, OSError, ValueError) as e:
        click.echo(error(f"hash-object failed: {e}"), err=True)
        raise click.Abort()
