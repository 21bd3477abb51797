"""CLI commands for gitobj."""

from gitobj.cli.commands.init import init_cmd
from gitobj.cli.commands.config import config_cmd
from gitobj.cli.commands.objects import cat_file_cmd, hash_object_cmd
from gitobj.cli.commands.tree import ls_tree_cmd, write_tree_cmd, commit_tree_cmd

__all__ = ['init_cmd', 'config_cmd', 'cat_file_cmd', 'hash_object_cmd',
           'ls_tree_cmd', 'write_tree_cmd', 'commit_tree_cmd']
