#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Pre-provisioning verification for csprovision.

Checks all prerequisites before templates are provisioned:
- smbclient is available when Samba transfers are configured
- Configuration files load and a cruise ID is defined
- The template root exists
- Each active transfer has a template and, for local transfers, a
  reachable source directory
"""

import os
import sys
import shutil
import argparse

from csprovision.config import config
from csprovision.console import Colors, print_header, print_status, setup_logging
from csprovision.errors import ProvisionError
from csprovision.gateway import FileConfigurationGateway
from csprovision.models import CruiseContext, Scope, TransferType, needs_lowering, substitute
from csprovision.template import find_template


def check_required_tools(transfers, smbclient='smbclient'):
    """Check that smbclient is available if any transfer needs it"""
    print_header("Checking Required Tools")

    needs_smb = any(t.transfer_type is TransferType.SMB for t in transfers)
    location = shutil.which(smbclient)
    if location:
        print_status("{0} available".format(smbclient), "OK", "Location: {0}".format(location))
        return True
    if needs_smb:
        print_status("{0} missing".format(smbclient), "ERROR",
                     "Please install smbclient, Samba transfers are configured")
        return False
    print_status("{0} missing".format(smbclient), "WARN",
                 "Not needed, no Samba transfers are configured")
    return True


def check_local_directory(path, description, check_writable=True):
    """Check if a local directory exists and is writable

    If the directory does not exist yet, its parent is checked instead, as
    the provisioning run can create it with --create-source-dir.
    """
    expanded_path = os.path.expandvars(os.path.expanduser(path))

    if os.path.isdir(expanded_path):
        check_path = expanded_path
        detail = "Path: {0}".format(check_path)
    else:
        if os.path.exists(expanded_path):
            print_status(description, "ERROR", "Path exists but is not a directory: {0}".format(path))
            return False
        check_path = os.path.dirname(expanded_path.rstrip('/'))
        if not os.path.isdir(check_path):
            print_status(description, "ERROR", "Directory does not exist: {0}".format(path))
            return False
        detail = "Missing, use --create-source-dir (parent: {0})".format(check_path)

    if check_writable and not os.access(check_path, os.W_OK):
        print_status(description, "ERROR", "Directory is not writable: {0}".format(check_path))
        return False

    status = "OK" if check_path == expanded_path else "WARN"
    print_status(description, status, detail)
    return True


def check_transfer(transfer, template_dir, context):
    """Check one transfer, returning True if it can be provisioned"""
    print_header("Transfer: {0} ({1})".format(transfer.name, transfer.transport_name))

    if not transfer.transfer_type.provisionable:
        print_status("Transfer type", "SKIP",
                     "{0} transfers cannot be provisioned".format(transfer.transport_name))
        return True

    if find_template(template_dir, transfer.name) is None:
        print_status("Template", "SKIP", "No template directory")
    else:
        print_status("Template", "OK", os.path.join(template_dir, transfer.name))

    if needs_lowering(transfer.source_dir) and not context.has_lowering:
        print_status("Source directory", "ERROR",
                     "{0} needs a lowering ID".format(transfer.source_dir))
        return False
    source_dir = substitute(transfer.source_dir, context)

    if transfer.transfer_type is TransferType.LOCAL:
        return check_local_directory(source_dir, "Source directory")

    if not transfer.smb_server:
        print_status("Samba server", "ERROR", "No smbServer configured")
        return False
    print_status("Samba share", "OK", "{0} {1}".format(transfer.smb_server, source_dir))
    return True


def main(argv=None):
    """Main verification function"""
    parser = argparse.ArgumentParser(
        description='Check readiness for provisioning collection system templates'
    )
    parser.add_argument(
        '--config', '-c',
        default=None,
        help='Path to config.yaml file (default: auto-detect in current directory)'
    )
    parser.add_argument(
        '--template-dir', '-t',
        default=None,
        help='Template root directory (overrides config file)'
    )
    parser.add_argument(
        '--lowering', '-L',
        action='store_true',
        help='Check lowering-scoped transfers instead of cruise-scoped ones'
    )
    args = parser.parse_args(argv)
    setup_logging(0)

    print("{0}{1}".format(Colors.BOLD, Colors.BLUE))
    print("╔══════════════════════════════════════════════════════════════╗")
    print("║          Collection System Provisioning Check                ║")
    print("╚══════════════════════════════════════════════════════════════╝")
    print("{0}".format(Colors.END))

    print_header("Configuration")
    try:
        config.load_config(config_file=args.config, template_dir=args.template_dir)
        gateway = FileConfigurationGateway.from_config(config)
        context = CruiseContext(gateway.get_cruise_id(), gateway.get_lowering_id())
    except ProvisionError as e:
        print_status("Configuration", "ERROR", e.message)
        return False
    print_status("Configuration files", "OK", "{0}, {1}".format(
        config.warehouse_file, config.transfers_file))
    print_status("Cruise ID", "OK", context.cruise_id)

    scope = Scope.LOWERING if args.lowering else Scope.CRUISE
    if context.has_lowering:
        print_status("Lowering ID", "OK", context.lowering_id)
    elif scope is Scope.LOWERING:
        print_status("Lowering ID", "ERROR", "No lowering ID defined")
        return False
    else:
        print_status("Lowering ID", "INFO", "No lowering defined")

    template_dir = config.template_dir
    if not os.path.isdir(template_dir):
        print_status("Template directory", "ERROR", "Directory does not exist: {0}".format(template_dir))
        return False
    print_status("Template directory", "OK", "Path: {0}".format(template_dir))

    transfers = gateway.get_active_transfers(scope)
    tools_ok = check_required_tools(transfers, config.smbclient)

    all_transfers_ok = True
    for transfer in transfers:
        if not check_transfer(transfer, template_dir, context):
            all_transfers_ok = False

    print_header("Provisioning Readiness Summary")
    overall_ok = tools_ok and all_transfers_ok
    if overall_ok:
        print_status("{0} {1} transfer(s)".format(len(transfers), scope.value), "OK",
                     "All checks passed")
        print("\n{0}{1}✓ READY TO PROVISION{2}".format(Colors.GREEN, Colors.BOLD, Colors.END))
    else:
        print_status("Provisioning readiness", "ERROR", "Please fix the issues above")
        print("\n{0}{1}✗ NOT READY{2}".format(Colors.RED, Colors.BOLD, Colors.END))
    return overall_ok


def run():
    """Console script entry point, exiting 0 when ready and 1 otherwise"""
    try:
        success = main()
    except KeyboardInterrupt:
        print("\n{0}Operation cancelled by user.{1}".format(Colors.YELLOW, Colors.END))
        sys.exit(1)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    run()
