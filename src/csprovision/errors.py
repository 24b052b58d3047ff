#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Provisioning exceptions.

Configuration-level errors (ConfigError and its relatives) stop the whole
run. FilesystemError aborts a single transfer. RemoteTransportError is
reported per instruction and never stops the walk.
"""


class ProvisionError(Exception):
    """Base exception for provisioning operations."""

    def __init__(self, message, context=None):
        """Initialize with message and optional context.

        Args:
            message: Human-readable error message
            context: Optional dict with additional context (transfer, path, ...)
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ConfigError(ProvisionError):
    """Configuration is missing or invalid."""


class TemplateNotFoundError(ConfigError):
    """Template root directory does not exist."""


class NotFoundError(ProvisionError):
    """Collection system transfer not found."""


class UnsupportedTransportError(ProvisionError):
    """Transfer uses a transport that cannot be provisioned."""


class MissingLoweringError(ProvisionError):
    """Lowering-scoped work requested without a lowering ID."""


class FilesystemError(ProvisionError):
    """Local directory or file operation failed."""


class RemoteTransportError(ProvisionError):
    """Remote share command failed, timed out or wrote to stderr."""
