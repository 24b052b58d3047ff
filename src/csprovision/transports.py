#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Transport adapters creating directories and files on collection systems.

Every adapter works relative to a root, the transfer's resolved source
directory, and offers the same three operations:

    ensure_directory(path, recursive=False)
    put_file(local_path, dest_path)
    exists(path)

An empty path means the root itself. The adapter is chosen once per
transfer by adapter_for().
"""

import os
import errno
import shutil
import logging
import posixpath
import tempfile

from csprovision.errors import (
    FilesystemError,
    RemoteTransportError,
    UnsupportedTransportError,
)
from csprovision.models import TransferType

logger = logging.getLogger(__name__)

# smbclient reports an already existing directory with this status
NAME_COLLISION = 'NT_STATUS_OBJECT_NAME_COLLISION'


class TransportAdapter:
    """Base class for transport adapters"""

    def __init__(self, root):
        self.root = root

    def ensure_directory(self, path, recursive=False):
        raise NotImplementedError

    def put_file(self, local_path, dest_path):
        raise NotImplementedError

    def exists(self, path):
        raise NotImplementedError

    def describe(self, path=''):
        """Human readable location of path, for logging"""
        raise NotImplementedError


class LocalDirectoryAdapter(TransportAdapter):
    """Create entries on a locally mounted collection system directory.

    Args:
        root: Absolute local path of the transfer's source directory
        username: Warehouse user that must own created entries
        fixer: Callable(username, path) setting ownership and mode
        dir_mode: Mode for new directories
    """

    def __init__(self, root, username, fixer, dir_mode=0o755):
        super().__init__(root)
        self.username = username
        self.fixer = fixer
        self.dir_mode = dir_mode

    def _local_path(self, path):
        if not path:
            return self.root
        return os.path.join(self.root, *path.split('/'))

    def describe(self, path=''):
        return self._local_path(path)

    def exists(self, path):
        return os.path.lexists(self._local_path(path))

    def ensure_directory(self, path, recursive=False):
        """Create a directory (and its missing parents if recursive).

        Returns:
            bool: True if something was created, False if it already existed
        """
        target = self._local_path(path)
        if os.path.isdir(target):
            return False

        created = []
        if recursive:
            # Remember which ancestors are new so only those get fixed up
            missing = target
            while missing and not os.path.isdir(missing):
                created.insert(0, missing)
                parent = os.path.dirname(missing)
                if parent == missing:
                    break
                missing = parent
        else:
            created = [target]

        for directory in created:
            try:
                os.mkdir(directory, self.dir_mode)
            except OSError as e:
                # Handle race condition where directory was created by another process
                if e.errno == errno.EEXIST and os.path.isdir(directory):
                    continue
                raise FilesystemError(
                    "Cannot create directory {0}: {1}".format(directory, e.strerror or e),
                    context={'path': directory})
            self.fixer(self.username, directory)
        return True

    def put_file(self, local_path, dest_path):
        """Copy a template file byte for byte into place.

        The copy is written to a temporary file next to the destination and
        renamed, so an interrupted run never leaves a truncated file behind.
        """
        target = self._local_path(dest_path)
        directory = os.path.dirname(target)
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix='.csprovision-', dir=directory)
            with os.fdopen(fd, 'wb') as dst, open(local_path, 'rb') as src:
                shutil.copyfileobj(src, dst)
            os.replace(tmp_path, target)
            tmp_path = None
        except OSError as e:
            raise FilesystemError(
                "Cannot copy {0} to {1}: {2}".format(local_path, target, e.strerror or e),
                context={'path': target, 'template': local_path})
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
        self.fixer(self.username, target)
        return True


def _quote(path):
    """Quote a path for an smbclient -c command string"""
    if '"' in path or ';' in path:
        raise RemoteTransportError("Unsupported character in remote path: {0}".format(path),
                                   context={'path': path})
    return '"{0}"'.format(path)


class SambaShareAdapter(TransportAdapter):
    """Create entries on a collection system share through smbclient.

    Every operation is exactly one smbclient invocation. Failures raise
    RemoteTransportError for the single operation that failed.

    Args:
        root: Path of the transfer's source directory inside the share
        server: Share in //server/share form
        domain: Workgroup/domain, may be empty
        user: User name; empty or 'guest' connects anonymously
        password: Password, passed through the environment
        runner: Object with run(cmd, env) returning a CommandResult
        smbclient: smbclient executable
        protocol: Maximum SMB protocol (-m)
    """

    def __init__(self, root, server, domain, user, password, runner,
                 smbclient='smbclient', protocol='SMB3'):
        super().__init__(root.strip('/'))
        self.server = server
        self.domain = domain
        self.user = user
        self.password = password
        self.runner = runner
        self.smbclient = smbclient
        self.protocol = protocol

    @property
    def anonymous(self):
        return not self.user or self.user.lower() == 'guest'

    def _remote_path(self, path):
        if not path:
            return self.root
        return posixpath.join(self.root, path) if self.root else path

    def describe(self, path=''):
        return '{0}/{1}'.format(self.server.rstrip('/'), self._remote_path(path))

    def _base_command(self):
        cmd = [self.smbclient, self.server]
        if self.domain:
            cmd.extend(['-W', self.domain])
        if self.anonymous:
            cmd.append('-N')
        else:
            cmd.extend(['-U', self.user])
        if self.protocol:
            cmd.extend(['-m', self.protocol])
        return cmd

    def _run(self, commands, what):
        """Run one smbclient call executing the given -c commands"""
        cmd = self._base_command() + ['-c', '; '.join(commands)]
        env = None
        if not self.anonymous:
            env = {'PASSWD': self.password}
        logger.debug("smbclient %s: %s", self.server, '; '.join(commands))

        result = self.runner.run(cmd, env=env)

        if result.stdout.strip():
            logger.debug("smbclient output: %s", result.stdout.strip())

        if result.timed_out:
            raise RemoteTransportError("Timed out while trying to {0}".format(what),
                                       context={'server': self.server})

        lines = [line.strip() for line in result.stderr.splitlines() if line.strip()]
        lines += [line.strip() for line in result.stdout.splitlines() if 'NT_STATUS_' in line]
        error_lines = [line for line in lines if NAME_COLLISION not in line]
        # smbclient exits non-zero when mkdir hits an existing directory
        only_collisions = bool(lines) and not error_lines

        if error_lines or (result.returncode != 0 and not only_collisions):
            details = '; '.join(error_lines) or 'exit status {0}'.format(result.returncode)
            raise RemoteTransportError("Failed to {0}: {1}".format(what, details),
                                       context={'server': self.server, 'errors': error_lines})
        return result

    def exists(self, path):
        remote = self._remote_path(path)
        try:
            self._run(['ls {0}'.format(_quote(remote))], 'list {0}'.format(remote))
        except RemoteTransportError:
            return False
        return True

    def ensure_directory(self, path, recursive=False):
        remote = self._remote_path(path)
        if recursive:
            parts = remote.split('/')
            targets = ['/'.join(parts[:i]) for i in range(1, len(parts) + 1)]
        else:
            targets = [remote]
        commands = ['mkdir {0}'.format(_quote(target)) for target in targets if target]
        if not commands:
            return False
        self._run(commands, 'create directory {0}'.format(self.describe(path)))
        return True

    def put_file(self, local_path, dest_path):
        """Upload under the template's file name, then rename to the final name.

        Remote names are full paths from the share root, so a missing parent
        directory fails the put rather than uploading somewhere else.
        """
        remote = self._remote_path(dest_path)
        remote_dir = posixpath.dirname(remote)
        template_name = os.path.basename(local_path)
        uploaded = posixpath.join(remote_dir, template_name) if remote_dir else template_name

        commands = ['put {0} {1}'.format(_quote(local_path), _quote(uploaded))]
        if uploaded != remote:
            commands.append('rename {0} {1}'.format(_quote(uploaded), _quote(remote)))

        self._run(commands, 'upload {0}'.format(self.describe(dest_path)))
        return True


def adapter_for(transfer, root, warehouse, runner, fixer,
                smbclient='smbclient', protocol='SMB3'):
    """Select the transport adapter for a transfer.

    Args:
        transfer: CollectionSystemTransfer
        root: Resolved (placeholder free) source directory
        warehouse: WarehouseConfig
        runner: Command runner for remote share calls
        fixer: Callable(username, path) for local ownership fix-up
    """
    if transfer.transfer_type is TransferType.LOCAL:
        return LocalDirectoryAdapter(root, warehouse.username, fixer,
                                     dir_mode=warehouse.dir_mode)
    if transfer.transfer_type is TransferType.SMB:
        return SambaShareAdapter(root, transfer.smb_server, transfer.smb_domain,
                                 transfer.smb_user, transfer.smb_pass, runner,
                                 smbclient=smbclient, protocol=protocol)
    raise UnsupportedTransportError(
        "Transfer type {0} is not supported for {1}".format(
            transfer.transport_name, transfer.name),
        context={'transfer': transfer.name})
