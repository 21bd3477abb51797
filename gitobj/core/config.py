"""Configuration management for gitobj.

This module provides a clean interface for reading and writing
both repository-local and global configuration files.
"""

import os
import configparser
from pathlib import Path
from typing import Optional, Dict

from .commit import DEFAULT_IDENTITY


class Config:
    """
    Manages gitobj configuration files.

    Configuration is stored in INI format:
    - Global config: ~/.gitobjconfig
    - Repository config: .git/config

    Repository config takes precedence over global config.
    Environment variables take highest precedence.
    """

    GLOBAL_CONFIG_PATH = Path.home() / '.gitobjconfig'

    def __init__(self, repo_config_path: Optional[Path] = None,
                 global_config_path: Optional[Path] = None):
        """
        Initialize Config manager.

        Args:
            repo_config_path: Path to repository config file, if in a repo
            global_config_path: Override for the global config location
        """
        self.repo_config_path = repo_config_path
        self.global_config_path = global_config_path or self.GLOBAL_CONFIG_PATH
        self._global_config = None
        self._repo_config = None

    @property
    def global_config(self) -> configparser.ConfigParser:
        """Load and return global configuration."""
        if self._global_config is None:
            self._global_config = configparser.ConfigParser()
            if self.global_config_path.exists():
                self._global_config.read(self.global_config_path)
        return self._global_config

    @property
    def repo_config(self) -> Optional[configparser.ConfigParser]:
        """Load and return repository configuration."""
        if self._repo_config is None and self.repo_config_path:
            self._repo_config = configparser.ConfigParser()
            if self.repo_config_path.exists():
                self._repo_config.read(self.repo_config_path)
        return self._repo_config

    def get(self, section: str, key: str, fallback: Optional[str] = None) -> Optional[str]:
        """
        Get a configuration value.

        Priority order (highest to lowest):
        1. Environment variables (GITOBJ_<SECTION>_<KEY>)
        2. Repository config
        3. Global config
        4. Fallback value

        Args:
            section: Config section (e.g., 'user', 'core')
            key: Config key (e.g., 'name', 'compression')
            fallback: Default value if not found

        Returns:
            Configuration value or fallback
        """
        # Check environment variable first
        env_value = os.environ.get(f"GITOBJ_{section.upper()}_{key.upper()}")
        if env_value is not None:
            return env_value

        # Check repository config
        if self.repo_config and self.repo_config.has_option(section, key):
            return self.repo_config.get(section, key)

        # Check global config
        if self.global_config.has_option(section, key):
            return self.global_config.get(section, key)

        return fallback

    def set(self, section: str, key: str, value: str, global_config: bool = False) -> None:
        """
        Set a configuration value.

        Args:
            section: Config section
            key: Config key
            value: Value to set
            global_config: If True, write to global config; otherwise repo config
        """
        if global_config:
            config = self.global_config
            config_path = self.global_config_path
        else:
            if not self.repo_config_path:
                raise ValueError("No repository config path available")
            config = self.repo_config
            config_path = self.repo_config_path

        if not config.has_section(section):
            config.add_section(section)

        config.set(section, key, value)

        with open(config_path, 'w') as f:
            config.write(f)

    def unset(self, section: str, key: str, global_config: bool = False) -> bool:
        """
        Remove a configuration value.

        Returns:
            True if value was removed, False if it didn't exist
        """
        if global_config:
            config = self.global_config
            config_path = self.global_config_path
        else:
            if not self.repo_config:
                return False
            config = self.repo_config
            config_path = self.repo_config_path

        if not config.has_option(section, key):
            return False

        config.remove_option(section, key)

        # Remove empty sections
        if not config.options(section):
            config.remove_section(section)

        with open(config_path, 'w') as f:
            config.write(f)

        return True

    def list_all(self) -> Dict[str, Dict[str, str]]:
        """List all configuration values, repository values overriding global ones."""
        result: Dict[str, Dict[str, str]] = {}

        for section in self.global_config.sections():
            result.setdefault(section, {}).update(self.global_config.items(section))

        if self.repo_config:
            for section in self.repo_config.sections():
                result.setdefault(section, {}).update(self.repo_config.items(section))

        return result

    def get_user_identity(self) -> str:
        """
        Get the identity recorded as commit author and committer.

        Returns:
            "Name <email>" when both are configured, the default identity otherwise
        """
        name = self.get('user', 'name')
        email = self.get('user', 'email')
        if name and email:
            return f"{name} <{email}>"
        return DEFAULT_IDENTITY

    def get_compression_level(self) -> int:
        """
        Get the zlib level used for new objects.

        Raises:
            ValueError: If core.compression is not an integer from -1 to 9
        """
        value = self.get('core', 'compression', '-1')
        try:
            level = int(value)
        except ValueError:
            raise ValueError(f"Invalid core.compression: {value!r}") from None
        if not -1 <= level <= 9:
            raise ValueError(f"Invalid core.compression: {value!r}")
        return level


def get_config(repo=None) -> Config:
    """
    Get a Config instance.

    Args:
        repo: Repository instance, or None for global-only config

    Returns:
        Config instance
    """
    if repo:
        return Config(repo.config_file)
    return Config()
