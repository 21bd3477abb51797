"""Config command - manage repository and global options."""

import click

from gitobj.core.config import get_config
from gitobj.core.repository import Repository
from gitobj.cli.output import success, error, info, warning


def _split_key(key: str):
    """Split 'section.key' into its parts; a bare key belongs to [core]."""
    return key.split('.', 1) if '.' in key else ('core', key)


def _load(is_global: bool):
    repo = None if is_global else Repository.find_repository()
    return get_config(repo)


@click.group('config')
def config_cmd():
    """Get and set repository or global options."""
    pass


@config_cmd.command('set')
@click.argument('key')
@click.argument('value')
@click.option('--global', 'is_global', is_flag=True, help='Set global config')
def config_set(key, value, is_global):
    """
    Set a config value.

    Examples:
        gitobj config set user.name "Your Name"
        gitobj config set core.compression 9
        gitobj config set --global user.email "you@example.com"
    """
    if not is_global and not Repository.find_repository():
        click.echo(error("Not a git repository (use --global for global config)"), err=True)
        raise click.Abort()

    section, option = _split_key(key)
    _load(is_global).set(section, option, value, global_config=is_global)

    scope = "global" if is_global else "repository"
    click.echo(success(f"Set {scope} config: {key} = {value}"))


@config_cmd.command('get')
@click.argument('key')
@click.option('--global', 'is_global', is_flag=True, help='Get global config only')
def config_get(key, is_global):
    """
    Get a config value.

    Examples:
        gitobj config get user.name
        gitobj config get core.compression
    """
    section, option = _split_key(key)
    value = _load(is_global).get(section, option)

    if value is None:
        click.echo(error(f"Config key not found: {key}"), err=True)
        raise click.Abort()
    click.echo(value)


@config_cmd.command('unset')
@click.argument('key')
@click.option('--global', 'is_global', is_flag=True, help='Unset global config')
def config_unset(key, is_global):
    """
    Remove a config value.

    Examples:
        gitobj config unset user.email
        gitobj config unset --global user.name
    """
    section, option = _split_key(key)

    if _load(is_global).unset(section, option, global_config=is_global):
        click.echo(success(f"Removed config: {key}"))
    else:
        click.echo(warning(f"Config key not set: {key}"))


@config_cmd.command('list')
@click.option('--global', 'is_global', is_flag=True, help='List global config only')
def config_list(is_global):
    """
    List all config values.

    Repository values shadow global ones of the same name.

    Examples:
        gitobj config list
        gitobj config list --global
    """
    values = _load(is_global).list_all()

    if not values:
        click.echo(info("No configuration set"))
        return

    for section, options in values.items():
        for option, value in options.items():
            click.echo(f"{section}.{option}={value}")
