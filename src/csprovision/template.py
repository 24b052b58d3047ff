#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Walk a collection system template tree.

The template root holds one directory per collection system transfer,
named exactly like the transfer. Everything below that directory is
reproduced on the collection system, with {cruiseID} and {loweringID}
replaced in every path segment:

    templates/
        XBT/
            {cruiseID}/
                raw_data/
                {cruiseID}_XBT_log.csv

Template entries whose name contains {loweringID} are skipped, together
with everything below them, when no lowering is defined.
"""

import os
import logging

from csprovision.errors import TemplateNotFoundError
from csprovision.models import (
    InstructionKind,
    ProvisioningInstruction,
    needs_lowering,
    substitute,
)

logger = logging.getLogger(__name__)


def check_template_root(template_dir):
    """Raise TemplateNotFoundError unless template_dir is a directory"""
    if not os.path.isdir(template_dir):
        raise TemplateNotFoundError(
            "Template directory does not exist: {0}".format(template_dir),
            context={'template_dir': template_dir})


def find_template(template_dir, name):
    """Return the template subtree for a collection system, or None"""
    path = os.path.join(template_dir, name)
    # Only direct children of the template root are collection system templates
    inside = os.path.dirname(os.path.normpath(path)) == os.path.normpath(template_dir)
    if name and inside and os.path.isdir(path):
        return path
    return None


def _resolve_segments(relative_dir, context):
    if relative_dir == '.':
        return []
    return [substitute(part, context) for part in relative_dir.split(os.sep)]


def walk_template(template_dir, name, context):
    """Yield ProvisioningInstructions for one collection system.

    Directories come before anything they contain, and within a directory
    subdirectories come before files. Entries are visited in name order.

    Args:
        template_dir: Template root directory
        name: Collection system transfer name (top-level template directory)
        context: CruiseContext used for placeholder substitution

    Yields:
        ProvisioningInstruction with a placeholder-free destination relative
        to the transfer's source directory
    """
    root = find_template(template_dir, name)
    if root is None:
        return

    for dirpath, dirnames, filenames in os.walk(root):
        relative_dir = os.path.relpath(dirpath, root)
        parent = _resolve_segments(relative_dir, context)

        if not context.has_lowering:
            skipped = [d for d in dirnames if needs_lowering(d)]
            skipped += [f for f in filenames if needs_lowering(f)]
            for entry in skipped:
                logger.debug("No lowering defined, skipping template entry %s",
                             os.path.join(dirpath, entry))
            dirnames[:] = [d for d in dirnames if not needs_lowering(d)]
            filenames = [f for f in filenames if not needs_lowering(f)]

        dirnames.sort()
        for dirname in dirnames:
            yield ProvisioningInstruction(
                kind=InstructionKind.DIRECTORY,
                destination='/'.join(parent + [substitute(dirname, context)]))

        for filename in sorted(filenames):
            yield ProvisioningInstruction(
                kind=InstructionKind.FILE,
                destination='/'.join(parent + [substitute(filename, context)]),
                source=os.path.join(dirpath, filename))
