#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Coloured console output shared by the command line tools."""

import logging

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


class Colors:
    """ANSI color codes for console output"""
    GREEN = '\033[92m'
    RED = '\033[91m'
    YELLOW = '\033[93m'
    BLUE = '\033[94m'
    GREY = '\033[90m'
    BOLD = '\033[1m'
    END = '\033[0m'


# status -> (icon, label, color)
STATUS_STYLES = {
    "OK": ("✓", "OK", Colors.GREEN),
    "WARN": ("⚠", "WARNING", Colors.YELLOW),
    "INFO": ("ℹ", "INFO", Colors.BLUE),
    "SKIP": ("-", "SKIPPED", Colors.GREY),
    "ERROR": ("✗", "ERROR", Colors.RED),
}


def print_status(message, status, details=None):
    """Print one status line, with optional indented details.

    Unknown statuses are shown as errors.
    """
    icon, label, color = STATUS_STYLES.get(status, STATUS_STYLES["ERROR"])
    print("{0}{1}{2} {3}: {0}{4}{2}".format(color, icon, Colors.END, message, label))
    if details:
        print("   {0}".format(details))


def print_header(title):
    """Print section header"""
    print("\n{0}{1}=== {2} ==={3}".format(Colors.BOLD, Colors.BLUE, title, Colors.END))


def setup_logging(verbosity):
    """Configure the root logger: 0 = warnings, 1 = info, 2+ = debug"""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    return level
