#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Ownership and mode fix-up for entries created on local filesystems.

Everything the provisioning process creates locally must end up owned by
the data warehouse user, not by whoever ran the provisioning.
"""

import os
import pwd
import logging

logger = logging.getLogger(__name__)


class OwnershipFixer:
    """Callable setting owner, group and mode of a created path.

    Args:
        dir_mode: Mode applied to directories
        file_mode: Mode applied to files
    """

    def __init__(self, dir_mode=0o755, file_mode=0o644):
        self.dir_mode = dir_mode
        self.file_mode = file_mode

    @classmethod
    def from_warehouse(cls, warehouse):
        return cls(dir_mode=warehouse.dir_mode, file_mode=warehouse.file_mode)

    def __call__(self, username, path):
        return self.set_owner_group_permissions(username, path)

    def set_owner_group_permissions(self, username, path):
        """Set ownership and mode of path. Failures are logged, never raised.

        Returns:
            bool: True if ownership and mode were applied
        """
        try:
            if os.path.isdir(path):
                os.chmod(path, self.dir_mode)
            else:
                os.chmod(path, self.file_mode)

            if not username:
                logger.warning("No warehouse user configured, leaving owner of %s unchanged", path)
                return False

            user = pwd.getpwnam(username)
            st = os.stat(path)
            if st.st_uid != user.pw_uid or st.st_gid != user.pw_gid:
                os.chown(path, user.pw_uid, user.pw_gid)
        except KeyError:
            logger.error("Unknown warehouse user %r, cannot set owner of %s", username, path)
            return False
        except OSError as e:
            logger.error("Cannot set owner/permissions of %s: %s", path, e)
            return False

        logger.debug("Set owner %s on %s", username, path)
        return True
