#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Data model for collection system provisioning.

Loosely typed values from the configuration service (transport codes,
scope flags) are turned into enums here, once, so nothing downstream has
to compare strings.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from csprovision.errors import ConfigError, MissingLoweringError

CRUISE_PLACEHOLDER = '{cruiseID}'
LOWERING_PLACEHOLDER = '{loweringID}'


class TransferType(enum.Enum):
    """Transport used to reach a collection system"""
    LOCAL = 'local'
    RSYNC = 'rsync'
    SMB = 'smb'
    SSH = 'ssh'
    OTHER = 'other'

    @classmethod
    def parse(cls, value):
        """Parse a numeric code (1-4) or a transport name.

        Anything else is OTHER, which is never provisionable.
        """
        text = str(value).strip().lower()
        if text in _TRANSFER_TYPE_CODES:
            return _TRANSFER_TYPE_CODES[text]
        for member in cls:
            if member.value == text:
                return member
        return cls.OTHER

    @property
    def provisionable(self):
        """Whether templates can be provisioned through this transport"""
        return self in (TransferType.LOCAL, TransferType.SMB)


_TRANSFER_TYPE_CODES = {
    '1': TransferType.LOCAL,
    '2': TransferType.RSYNC,
    '3': TransferType.SMB,
    '4': TransferType.SSH,
}


class Scope(enum.Enum):
    """Whether a transfer belongs to the cruise or to a lowering"""
    CRUISE = 'cruise'
    LOWERING = 'lowering'

    @classmethod
    def parse(cls, value):
        """Parse 0/1 or cruise/lowering"""
        text = str(value).strip().lower()
        if text in ('0', 'cruise', ''):
            return cls.CRUISE
        if text in ('1', 'lowering'):
            return cls.LOWERING
        raise ConfigError("Unknown cruiseOrLowering value: {0!r}".format(value),
                          context={'value': value})


class InstructionKind(enum.Enum):
    DIRECTORY = 'directory'
    FILE = 'file'


@dataclass(frozen=True)
class CollectionSystemTransfer:
    """A configured collection system and how to reach it"""
    name: str
    transfer_type: TransferType
    scope: Scope
    source_dir: str
    smb_server: str = ''
    smb_domain: str = ''
    smb_user: str = ''
    smb_pass: str = ''
    enable: bool = True
    raw_transfer_type: str = ''

    @property
    def transport_name(self):
        """Transport as configured, for messages"""
        if self.transfer_type is TransferType.OTHER and self.raw_transfer_type:
            return self.raw_transfer_type
        return self.transfer_type.value


@dataclass(frozen=True)
class CruiseContext:
    """Identifiers of the current cruise and, once defined, lowering"""
    cruise_id: str
    lowering_id: Optional[str] = None

    def __post_init__(self):
        if not self.cruise_id:
            raise ConfigError("Cruise ID must not be empty")

    @property
    def has_lowering(self):
        return bool(self.lowering_id)


@dataclass(frozen=True)
class WarehouseConfig:
    """Warehouse policy for entries created on local filesystems"""
    username: str = ''
    dir_mode: int = 0o755
    file_mode: int = 0o644


@dataclass(frozen=True)
class ProvisioningInstruction:
    """A resolved directory or file to create, relative to the transfer root"""
    kind: InstructionKind
    destination: str
    source: Optional[str] = None

    @property
    def is_directory(self):
        return self.kind is InstructionKind.DIRECTORY


def needs_lowering(text):
    """Return True if text contains the lowering placeholder"""
    return LOWERING_PLACEHOLDER in text


def substitute(text, context, strict=True):
    """Replace cruise and lowering placeholders in text.

    Args:
        text: Path or path segment that may contain placeholders
        context: CruiseContext supplying the identifiers
        strict: Raise MissingLoweringError if text needs a lowering ID that
            is not available. With strict=False the placeholder is left as is.

    Returns:
        str: The substituted text
    """
    result = text.replace(CRUISE_PLACEHOLDER, context.cruise_id)
    if needs_lowering(result):
        if context.has_lowering:
            result = result.replace(LOWERING_PLACEHOLDER, context.lowering_id)
        elif strict:
            raise MissingLoweringError(
                "No lowering ID defined, cannot substitute {0}".format(text),
                context={'text': text})
    return result
