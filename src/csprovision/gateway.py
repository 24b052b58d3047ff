#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Read-only access to the warehouse configuration.

The warehouse settings (current cruise and lowering, data warehouse user,
file modes) come from a YAML file. The collection system transfers come
from a tab separated table with a header line, one transfer per row:

    name  enable  transferType  cruiseOrLowering  sourceDir  smbServer  smbDomain  smbUser  smbPass

Rows whose name starts with # are ignored.
"""

import os
import logging

import pandas as pd
import yaml

from csprovision.errors import ConfigError
from csprovision.models import (
    CollectionSystemTransfer,
    Scope,
    TransferType,
    WarehouseConfig,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ['name', 'transferType', 'sourceDir']
OPTIONAL_COLUMNS = ['enable', 'cruiseOrLowering', 'smbServer', 'smbDomain', 'smbUser', 'smbPass']

TRUE_VALUES = ('1', 'true', 'yes', 'y', 'on')
FALSE_VALUES = ('0', 'false', 'no', 'n', 'off')


def _parse_enable(value):
    text = str(value).strip().lower()
    if text in TRUE_VALUES or text == '':
        return True
    if text in FALSE_VALUES:
        return False
    raise ConfigError("Invalid enable value: {0!r}".format(value), context={'value': value})


def _parse_mode(value, default):
    """Parse an octal mode given as '0755', '755' or an int"""
    if value is None or value == '':
        return default
    if isinstance(value, int):
        return value
    try:
        return int(str(value), 8)
    except ValueError:
        raise ConfigError("Invalid file mode: {0!r}".format(value), context={'value': value})


def _optional_id(value):
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_transfers_file(filename):
    """Parse the collection system transfers table and return a pandas DataFrame"""
    if not os.path.exists(filename):
        raise ConfigError("Transfers file not found: {0}".format(filename),
                          context={'transfers_file': filename})

    try:
        df = pd.read_csv(filename, sep='\t', dtype=str, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ConfigError("Cannot read {0}: {1}".format(filename, e),
                          context={'transfers_file': filename})

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ConfigError("Missing column(s) in {0}: {1}".format(filename, ', '.join(missing)),
                          context={'transfers_file': filename})

    for col in OPTIONAL_COLUMNS:
        if col not in df.columns:
            df[col] = ''

    # Clean up any extra whitespace, then drop commented rows
    for col in df.columns:
        df[col] = df[col].fillna('').astype(str).str.strip()
    df = df[~df['name'].str.startswith('#')]
    df = df[df['name'] != '']

    duplicated = df['name'][df['name'].duplicated()].unique()
    if len(duplicated) > 0:
        raise ConfigError("Duplicate transfer name(s) in {0}: {1}".format(
            filename, ', '.join(duplicated)), context={'transfers_file': filename})

    return df.reset_index(drop=True)


def transfer_from_row(row):
    """Build a CollectionSystemTransfer from one row of the transfers table"""
    return CollectionSystemTransfer(
        name=row['name'],
        transfer_type=TransferType.parse(row['transferType']),
        scope=Scope.parse(row['cruiseOrLowering']),
        source_dir=row['sourceDir'],
        smb_server=row['smbServer'],
        smb_domain=row['smbDomain'],
        smb_user=row['smbUser'],
        smb_pass=row['smbPass'],
        enable=_parse_enable(row['enable']),
        raw_transfer_type=row['transferType'],
    )


def load_warehouse_file(filename):
    """Load the warehouse settings YAML file"""
    if not os.path.exists(filename):
        raise ConfigError("Warehouse file not found: {0}".format(filename),
                          context={'warehouse_file': filename})
    try:
        with open(filename, 'r') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError("Cannot read {0}: {1}".format(filename, e),
                          context={'warehouse_file': filename})
    if not isinstance(data, dict):
        raise ConfigError("{0} must contain a mapping".format(filename),
                          context={'warehouse_file': filename})
    return data


class FileConfigurationGateway:
    """Configuration gateway backed by a warehouse YAML and a transfers TSV.

    All values are loaded once at construction, so a run sees one consistent
    snapshot of the configuration.
    """

    def __init__(self, warehouse_file, transfers_file):
        self.warehouse_file = warehouse_file
        self.transfers_file = transfers_file
        self._settings = load_warehouse_file(warehouse_file)
        df = parse_transfers_file(transfers_file)
        self._transfers = [transfer_from_row(row) for _, row in df.iterrows()]
        logger.debug("Loaded %d collection system transfer(s) from %s",
                     len(self._transfers), transfers_file)

    @classmethod
    def from_config(cls, cfg):
        """Create a gateway from a csprovision.config.Config"""
        return cls(cfg.warehouse_file, cfg.transfers_file)

    def get_warehouse_config(self):
        return WarehouseConfig(
            username=str(self._settings.get('shipboardDataWarehouseUsername') or ''),
            dir_mode=_parse_mode(self._settings.get('dirMode'), 0o755),
            file_mode=_parse_mode(self._settings.get('fileMode'), 0o644),
        )

    def get_cruise_id(self):
        cruise_id = _optional_id(self._settings.get('cruiseID'))
        if not cruise_id:
            raise ConfigError("No cruise ID defined in {0}".format(self.warehouse_file),
                              context={'warehouse_file': self.warehouse_file})
        return cruise_id

    def get_lowering_id(self):
        return _optional_id(self._settings.get('loweringID'))

    def get_transfer_by_name(self, name):
        for transfer in self._transfers:
            if transfer.name == name:
                return transfer
        return None

    def get_active_transfers(self, scope):
        return [t for t in self._transfers if t.enable and t.scope is scope]

    def get_transfers(self):
        return list(self._transfers)
