#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Shared fixtures for the csprovision test suite"""

import pytest

from csprovision.gateway import FileConfigurationGateway
from csprovision.runner import CommandResult

TSV_HEADER = ['name', 'enable', 'transferType', 'cruiseOrLowering', 'sourceDir',
              'smbServer', 'smbDomain', 'smbUser', 'smbPass']


class FakeRunner:
    """Command runner recording every call instead of running smbclient"""

    def __init__(self, results=None):
        self.calls = []
        self.results = list(results or [])

    def run(self, cmd, env=None):
        self.calls.append((cmd, env))
        if self.results:
            return self.results.pop(0)
        return CommandResult(returncode=0)

    @property
    def commands(self):
        """The -c command string of each call"""
        return [cmd[cmd.index('-c') + 1] for cmd, _ in self.calls]


class RecordingFixer:
    """Permission fixer recording (username, path) pairs"""

    def __init__(self):
        self.calls = []

    def __call__(self, username, path):
        self.calls.append((username, path))
        return True

    @property
    def paths(self):
        return [path for _, path in self.calls]


def write_transfers(path, rows):
    lines = ['\t'.join(TSV_HEADER)]
    for row in rows:
        lines.append('\t'.join(str(row.get(col, '')) for col in TSV_HEADER))
    path.write_text('\n'.join(lines) + '\n')
    return path


def write_warehouse(path, cruise_id='RV1001', lowering_id=None, username='survey'):
    content = "cruiseID: {0}\nshipboardDataWarehouseUsername: {1}\n".format(
        cruise_id if cruise_id else "''", username)
    if lowering_id:
        content += "loweringID: {0}\n".format(lowering_id)
    path.write_text(content)
    return path


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def fixer():
    return RecordingFixer()


@pytest.fixture
def make_gateway(tmp_path):
    """Factory writing warehouse.yaml and transfers.tsv and loading them"""
    def _make(rows, cruise_id='RV1001', lowering_id=None, username='survey'):
        warehouse = write_warehouse(tmp_path / 'warehouse.yaml', cruise_id, lowering_id, username)
        transfers = write_transfers(tmp_path / 'transfers.tsv', rows)
        return FileConfigurationGateway(str(warehouse), str(transfers))
    return _make


@pytest.fixture
def template_dir(tmp_path):
    """Template tree with an XBT template and a lowering-scoped camera template"""
    root = tmp_path / 'templates'
    xbt = root / 'XBT' / '{cruiseID}'
    (xbt / 'raw_data').mkdir(parents=True)
    (xbt / '{cruiseID}_XBT_log.csv').write_text('cast,time,lat,lon\n')

    cam = root / 'CAM' / '{loweringID}'
    (cam / 'stills').mkdir(parents=True)
    (cam / '{loweringID}_dive_notes.txt').write_text('Dive notes\n')
    (root / 'CAM' / 'README.txt').write_text('Camera share\n')
    return root
