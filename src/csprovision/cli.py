#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Provision collection system directory templates for the current cruise.

Examples:
    cs-provision                      # all active cruise-scoped transfers
    cs-provision --lowering           # all active lowering-scoped transfers
    cs-provision XBT -s               # only XBT, creating its source directory
    cs-provision --dry-run -v         # show what would be created
"""

import sys
import argparse

from csprovision.config import config
from csprovision.console import Colors, print_header, print_status, setup_logging
from csprovision.errors import ProvisionError
from csprovision.gateway import FileConfigurationGateway
from csprovision.orchestrator import Provisioner, TransferStatus
from csprovision.runner import CommandRunner


def build_parser():
    parser = argparse.ArgumentParser(
        description='Create collection system directory templates for the current cruise'
    )
    parser.add_argument(
        'collection_system',
        nargs='?',
        default=None,
        help='Provision only this collection system transfer (default: all active)'
    )
    parser.add_argument(
        '--lowering', '-L',
        action='store_true',
        help='Provision lowering-scoped transfers instead of cruise-scoped ones'
    )
    parser.add_argument(
        '--create-source-dir', '-s',
        action='store_true',
        help='Also create the source directory of each transfer'
    )
    parser.add_argument(
        '--template-dir', '-t',
        default=None,
        help='Template root directory (default: {0})'.format(config.template_dir)
    )
    parser.add_argument(
        '--config', '-c',
        default=None,
        help='Path to config.yaml file (default: auto-detect in current directory)'
    )
    parser.add_argument(
        '--warehouse',
        default=None,
        help='Path to warehouse.yaml (default: config/warehouse.yaml)'
    )
    parser.add_argument(
        '--transfers',
        default=None,
        help='Path to the collection system transfers table '
             '(default: config/collection_system_transfers.tsv)'
    )
    parser.add_argument(
        '--workers', '-w',
        type=int,
        default=None,
        help='Number of transfers provisioned in parallel (default: 1)'
    )
    parser.add_argument(
        '--dry-run', '-n',
        action='store_true',
        help='List what would be created without creating anything'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='count',
        default=0,
        help='Increase log detail (-v info, -vv debug)'
    )
    return parser


def print_plan(plans):
    for plan in plans:
        print_header("{0} → {1}".format(plan.name, plan.root))
        if not plan.instructions:
            print("  (no template)")
        for instruction in plan.instructions:
            suffix = '' if instruction.is_directory else '  ← {0}'.format(instruction.source)
            marker = '/' if instruction.is_directory else ''
            print("  {0}{1}{2}".format(instruction.destination, marker, suffix))


def print_summary(reports):
    print_header("Provisioning Summary")
    for report in reports:
        if report.status is TransferStatus.SKIPPED:
            print_status(report.name, "SKIP", "No template")
            continue

        details = "{0} director(ies), {1} file(s) copied, {2} already present".format(
            report.directories, report.files, report.existing_files)
        if report.status is TransferStatus.ABORTED:
            print_status(report.name, "ERROR", "Aborted: {0}".format(report.errors[-1]))
        elif report.soft_failures:
            print_status(report.name, "WARN", "{0}, {1} error(s)".format(
                details, report.soft_failures))
        else:
            print_status(report.name, "OK", details)


def main(argv=None):
    """Main function to provision collection system templates"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.collection_system and args.lowering:
        parser.error('a collection system name cannot be combined with --lowering')

    setup_logging(args.verbose)

    try:
        config.load_config(
            config_file=args.config,
            warehouse_file=args.warehouse,
            transfers_file=args.transfers,
            template_dir=args.template_dir,
            max_workers=args.workers,
        )
        gateway = FileConfigurationGateway.from_config(config)
        provisioner = Provisioner(
            gateway,
            config.template_dir,
            runner=CommandRunner(timeout=config.smb_timeout),
            max_workers=config.max_workers,
            create_source_dir=args.create_source_dir,
            smbclient=config.smbclient,
            smb_protocol=config.smb_protocol,
        )

        if args.dry_run:
            print_plan(provisioner.plan(name=args.collection_system, lowering=args.lowering))
            return 0

        reports = provisioner.run(name=args.collection_system, lowering=args.lowering)
    except ProvisionError as e:
        print("{0}Error: {1}{2}".format(Colors.RED, e.message, Colors.END), file=sys.stderr)
        return 1
    except ValueError as e:
        # Invalid numeric settings in config.yaml or the environment
        print("{0}Error: {1}{2}".format(Colors.RED, e, Colors.END), file=sys.stderr)
        return 1

    if not reports:
        print("No collection system transfers to provision")
        return 0

    print_summary(reports)
    return 0


if __name__ == "__main__":
    sys.exit(main())
