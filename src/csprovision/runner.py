#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Run external commands with a wall-clock timeout.

The Samba adapter talks to collection systems only through a runner, so
tests can replace it with a fake that records the commands.
"""

import os
import logging
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of one external command"""
    returncode: int
    stdout: str = ''
    stderr: str = ''
    timed_out: bool = False

    @property
    def ok(self):
        return self.returncode == 0 and not self.timed_out


class CommandRunner:
    """Run a command, killing it when it exceeds timeout seconds"""

    def __init__(self, timeout=60):
        self.timeout = timeout

    def run(self, cmd, env=None):
        """Run cmd (a list) with extra environment variables.

        Returns:
            CommandResult; a missing executable is reported as returncode 127
        """
        full_env = None
        if env:
            full_env = dict(os.environ)
            full_env.update(env)

        try:
            proc = subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE,
                                    env=full_env)
        except OSError as e:
            return CommandResult(returncode=127, stderr=str(e))

        try:
            stdout, stderr = proc.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            stdout, stderr = proc.communicate()
            logger.debug("%s killed after %s seconds", cmd[0], self.timeout)
            return CommandResult(
                returncode=proc.returncode,
                stdout=stdout.decode('utf-8', 'replace'),
                stderr=stderr.decode('utf-8', 'replace'),
                timed_out=True,
            )

        return CommandResult(
            returncode=proc.returncode,
            stdout=stdout.decode('utf-8', 'replace'),
            stderr=stderr.decode('utf-8', 'replace'),
        )
