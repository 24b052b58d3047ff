#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Provision collection system templates.

For every eligible transfer:
1. Resolve the transfer's source directory for the current cruise/lowering
2. Optionally create the source directory itself
3. Walk the transfer's template subtree
4. Create each directory and copy each file through the transfer's adapter

Configuration problems are raised before anything is created. After that,
a local filesystem error aborts only the transfer it happened in, and a
remote share error only the single directory or file it happened on.
Nothing is rolled back; running again picks up where a run stopped.
"""

import enum
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List

from csprovision.eligibility import select_transfers
from csprovision.errors import FilesystemError, RemoteTransportError
from csprovision.models import CruiseContext, substitute
from csprovision.permissions import OwnershipFixer
from csprovision.runner import CommandRunner
from csprovision.template import check_template_root, find_template, walk_template
from csprovision.transports import adapter_for

logger = logging.getLogger(__name__)


class TransferStatus(enum.Enum):
    SKIPPED = 'skipped'
    COMPLETED = 'completed'
    ABORTED = 'aborted'


@dataclass
class TransferReport:
    """What happened to one transfer during a run"""
    name: str
    status: TransferStatus = TransferStatus.COMPLETED
    root: str = ''
    directories: int = 0
    files: int = 0
    existing_files: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def soft_failures(self):
        return len(self.errors) if self.status is TransferStatus.COMPLETED else 0


@dataclass
class Plan:
    """A transfer, its resolved source directory and its instructions"""
    name: str
    root: str
    instructions: list


class Provisioner:
    """Drive template provisioning for a set of collection system transfers.

    Args:
        gateway: Configuration gateway
        template_dir: Template root directory
        runner: Command runner for smbclient calls (default: CommandRunner())
        fixer: Callable(username, path) for local ownership fix-up
            (default: OwnershipFixer built from the warehouse config)
        max_workers: Transfers provisioned in parallel
        create_source_dir: Also create each transfer's source directory
        smbclient: smbclient executable
        smb_protocol: Maximum SMB protocol
    """

    def __init__(self, gateway, template_dir, runner=None, fixer=None, max_workers=1,
                 create_source_dir=False, smbclient='smbclient', smb_protocol='SMB3'):
        self.gateway = gateway
        self.template_dir = template_dir
        self.runner = runner or CommandRunner()
        self.fixer = fixer
        self.max_workers = max_workers
        self.create_source_dir = create_source_dir
        self.smbclient = smbclient
        self.smb_protocol = smb_protocol

    def context(self):
        """CruiseContext for this run, read fresh from the gateway"""
        return CruiseContext(self.gateway.get_cruise_id(), self.gateway.get_lowering_id())

    def prepare(self, name=None, lowering=False):
        """Validate everything a run needs and return its working set.

        Returns:
            tuple: (context, list of (transfer, resolved source directory))

        Raises:
            ConfigError, TemplateNotFoundError, NotFoundError,
            UnsupportedTransportError, MissingLoweringError
        """
        check_template_root(self.template_dir)
        context = self.context()
        transfers = select_transfers(self.gateway, context, name=name, lowering=lowering)
        # Resolve every source directory up front so a bad pattern fails the
        # run before anything is created
        work = [(transfer, substitute(transfer.source_dir, context)) for transfer in transfers]
        return context, work

    def plan(self, name=None, lowering=False):
        """List the instructions a run would dispatch, without creating anything"""
        context, work = self.prepare(name=name, lowering=lowering)
        return [Plan(transfer.name, root, list(walk_template(self.template_dir, transfer.name, context)))
                for transfer, root in work]

    def run(self, name=None, lowering=False):
        """Provision one named transfer or all active transfers of a scope.

        Returns:
            list of TransferReport, in working-set order
        """
        context, work = self.prepare(name=name, lowering=lowering)
        warehouse = self.gateway.get_warehouse_config()
        fixer = self.fixer or OwnershipFixer.from_warehouse(warehouse)

        if not work:
            logger.info("No collection system transfers to provision")
            return []

        def provision(item):
            transfer, root = item
            return self.provision_transfer(transfer, root, context, warehouse, fixer)

        if self.max_workers > 1 and len(work) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                return list(executor.map(provision, work))
        return [provision(item) for item in work]

    def provision_transfer(self, transfer, root, context, warehouse, fixer):
        """Provision a single transfer and report the outcome"""
        report = TransferReport(name=transfer.name, root=root)
        adapter = adapter_for(transfer, root, warehouse, self.runner, fixer,
                              smbclient=self.smbclient, protocol=self.smb_protocol)

        try:
            if self.create_source_dir:
                logger.info("%s: creating source directory %s", transfer.name, adapter.describe())
                self._dispatch(report, adapter.ensure_directory, '', recursive=True)

            if find_template(self.template_dir, transfer.name) is None:
                logger.info("%s: no template found, skipping", transfer.name)
                report.status = TransferStatus.SKIPPED
                return report

            logger.info("%s: provisioning template into %s", transfer.name, adapter.describe())
            for instruction in walk_template(self.template_dir, transfer.name, context):
                if instruction.is_directory:
                    if self._dispatch(report, adapter.ensure_directory, instruction.destination):
                        report.directories += 1
                elif adapter.exists(instruction.destination):
                    logger.debug("%s: %s already present", transfer.name,
                                 adapter.describe(instruction.destination))
                    report.existing_files += 1
                elif self._dispatch(report, adapter.put_file, instruction.source,
                                    instruction.destination):
                    report.files += 1

        except FilesystemError as e:
            logger.error("%s: aborted: %s", transfer.name, e.message)
            report.errors.append(e.message)
            report.status = TransferStatus.ABORTED
            return report

        if report.errors:
            logger.warning("%s: completed with %d error(s)", transfer.name, len(report.errors))
        else:
            logger.info("%s: completed", transfer.name)
        return report

    def _dispatch(self, report, operation, *args, **kwargs):
        """Run one adapter operation; remote share failures are recorded, not raised"""
        try:
            operation(*args, **kwargs)
        except RemoteTransportError as e:
            logger.error("%s: %s", report.name, e.message)
            report.errors.append(e.message)
            return False
        return True
