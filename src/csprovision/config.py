#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Configuration management for csprovision.

Provides centralized configuration with sensible defaults.

Configuration priority (highest to lowest):
1. Runtime arguments passed to load_config()
2. Environment variables (CSP_*)
3. config.yaml file in current working directory
4. Default values (relative to current working directory)

Example config.yaml:
    warehouse_file: config/warehouse.yaml
    transfers_file: config/collection_system_transfers.tsv
    template_dir: /etc/csprovision/collection_system_templates
    max_workers: 4
    smb_timeout: 60
    smbclient: /usr/bin/smbclient
    smb_protocol: SMB3
"""

import os

import yaml

from csprovision.errors import ConfigError


# Default config file names to search for
CONFIG_FILE_NAMES = ['config.yaml', 'config.yml', 'csprovision.yaml', 'csprovision.yml']

# Subdirectories to search for config files
CONFIG_SEARCH_DIRS = ['.', 'config']

DEFAULT_TEMPLATE_DIR = '/etc/csprovision/collection_system_templates'


def _expand_path(path):
    """Expand environment variables and user home in path"""
    if path and isinstance(path, str):
        return os.path.expandvars(os.path.expanduser(path))
    return path


def _read_yaml(stream, config_path):
    """Parse a config file, which must hold a mapping"""
    try:
        data = yaml.safe_load(stream) or {}
    except yaml.YAMLError as e:
        raise ConfigError("Cannot parse config file {0}: {1}".format(config_path, e),
                          context={'file': config_path})
    if not isinstance(data, dict):
        raise ConfigError("Config file {0} must contain a mapping".format(config_path),
                          context={'file': config_path})
    return data


def _load_yaml_config(config_file=None):
    """Load configuration from a YAML file.

    Args:
        config_file: Path to config file. If None, searches for default names in CWD.

    Returns:
        dict: Configuration values from YAML, or empty dict if not found.
    """
    if config_file:
        config_path = _expand_path(config_file)
        if os.path.exists(config_path):
            with open(config_path, 'r') as f:
                return _read_yaml(f, config_path)
        return {}

    # Search for default config file names in CWD and config/ subdirectory
    cwd = os.getcwd()
    for search_dir in CONFIG_SEARCH_DIRS:
        for name in CONFIG_FILE_NAMES:
            if search_dir == '.':
                config_path = os.path.join(cwd, name)
            else:
                config_path = os.path.join(cwd, search_dir, name)
            if os.path.exists(config_path):
                with open(config_path, 'r') as f:
                    return _read_yaml(f, config_path)

    return {}


class Config:
    """Configuration settings for csprovision.

    Configuration priority (highest to lowest):
    1. Values set via load_config()
    2. Environment variables (CSP_*)
    3. config.yaml file
    4. Default values

    Environment variables:
        - CSP_CONFIG_FILE: Path to config.yaml file
        - CSP_WAREHOUSE_FILE: Path to warehouse.yaml
        - CSP_TRANSFERS_FILE: Path to collection_system_transfers.tsv
        - CSP_TEMPLATE_DIR: Template root directory
        - CSP_MAX_WORKERS: Number of transfers provisioned in parallel
        - CSP_SMB_TIMEOUT: Seconds before an smbclient call is killed
        - CSP_SMBCLIENT: smbclient executable
        - CSP_SMB_PROTOCOL: Maximum SMB protocol passed to smbclient -m
    """

    def __init__(self):
        self._yaml_config = None
        self._runtime_config = {}
        self._config_file = None

    def _load_yaml(self, config_file=None):
        """Load YAML configuration file."""
        if config_file is None:
            config_file = os.environ.get('CSP_CONFIG_FILE')

        self._config_file = config_file
        self._yaml_config = _load_yaml_config(config_file)

    def _yaml(self):
        if self._yaml_config is None:
            self._load_yaml()
        return self._yaml_config

    def load_config(self, config_file=None, **kwargs):
        """Load configuration from file and/or runtime arguments.

        Args:
            config_file: Path to YAML config file (optional)
            **kwargs: Runtime configuration overrides:
                - warehouse_file
                - transfers_file
                - template_dir
                - max_workers
                - smb_timeout
                - smbclient
                - smb_protocol

        Example:
            config.load_config(
                config_file='my_config.yaml',
                template_dir='/srv/templates',
                max_workers=4
            )
        """
        if config_file:
            self._load_yaml(config_file)

        for key, value in kwargs.items():
            if value is not None:
                self._runtime_config[key] = value

    def _get_value(self, key, env_var, default):
        """Get configuration value with priority: runtime > env > yaml > default."""
        if key in self._runtime_config:
            return _expand_path(self._runtime_config[key])

        env_value = os.environ.get(env_var)
        if env_value:
            return _expand_path(env_value)

        yaml_config = self._yaml()
        if key in yaml_config:
            return _expand_path(yaml_config[key])

        return _expand_path(default)

    def _get_int(self, key, env_var, default):
        """Get an integer configuration value, rejecting values below 1"""
        value = self._get_value(key, env_var, default)
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise ValueError("{0} must be an integer, got {1!r}".format(key, value))
        if number < 1:
            raise ValueError("{0} must be at least 1, got {1}".format(key, number))
        return number

    @property
    def config_file(self):
        """Path to the loaded config file, if any"""
        self._yaml()
        return self._config_file

    @property
    def warehouse_file(self):
        """Path to the warehouse settings (cruise/lowering IDs, owner)"""
        return self._get_value('warehouse_file', 'CSP_WAREHOUSE_FILE', 'config/warehouse.yaml')

    @property
    def transfers_file(self):
        """Path to the collection system transfers table"""
        return self._get_value('transfers_file', 'CSP_TRANSFERS_FILE',
                               'config/collection_system_transfers.tsv')

    @property
    def template_dir(self):
        """Root of the collection system template tree"""
        return self._get_value('template_dir', 'CSP_TEMPLATE_DIR', DEFAULT_TEMPLATE_DIR)

    @property
    def max_workers(self):
        """Number of transfers provisioned in parallel (1 = sequential)"""
        return self._get_int('max_workers', 'CSP_MAX_WORKERS', 1)

    @property
    def smb_timeout(self):
        """Wall-clock limit in seconds for a single smbclient call"""
        return self._get_int('smb_timeout', 'CSP_SMB_TIMEOUT', 60)

    @property
    def smbclient(self):
        """smbclient executable"""
        return self._get_value('smbclient', 'CSP_SMBCLIENT', 'smbclient')

    @property
    def smb_protocol(self):
        """Maximum protocol passed to smbclient -m"""
        return self._get_value('smb_protocol', 'CSP_SMB_PROTOCOL', 'SMB3')

    def to_dict(self):
        """Return all configuration values as a dictionary."""
        return {
            'config_file': self.config_file,
            'warehouse_file': self.warehouse_file,
            'transfers_file': self.transfers_file,
            'template_dir': self.template_dir,
            'max_workers': self.max_workers,
            'smb_timeout': self.smb_timeout,
            'smbclient': self.smbclient,
            'smb_protocol': self.smb_protocol,
        }

    def __repr__(self):
        return "Config({})".format(self.to_dict())


# Global config instance
config = Config()
