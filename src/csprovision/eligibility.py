#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Decide which collection system transfers take part in a run.
"""

import logging

from csprovision.errors import (
    MissingLoweringError,
    NotFoundError,
    UnsupportedTransportError,
)
from csprovision.models import Scope

logger = logging.getLogger(__name__)


def select_named(gateway, context, name):
    """Return the single transfer called name, or raise why it cannot run"""
    transfer = gateway.get_transfer_by_name(name)
    if transfer is None:
        raise NotFoundError("Collection system transfer not found: {0}".format(name),
                            context={'transfer': name})

    if not transfer.transfer_type.provisionable:
        raise UnsupportedTransportError(
            "Transfer type {0} of {1} cannot be provisioned".format(
                transfer.transport_name, name),
            context={'transfer': name})

    if transfer.scope is Scope.LOWERING and not context.has_lowering:
        raise MissingLoweringError(
            "{0} is lowering-scoped but no lowering ID is defined".format(name),
            context={'transfer': name})

    if not transfer.enable:
        logger.info("%s is disabled, provisioning anyway as it was requested by name", name)

    return [transfer]


def select_scope(gateway, context, scope):
    """Return the active transfers for scope, skipping unsupported transports"""
    if scope is Scope.LOWERING and not context.has_lowering:
        raise MissingLoweringError("Lowering directories requested but no lowering ID is defined")

    selected = []
    for transfer in gateway.get_active_transfers(scope):
        if not transfer.transfer_type.provisionable:
            logger.warning("Skipping %s: transfer type %s cannot be provisioned",
                           transfer.name, transfer.transport_name)
            continue
        selected.append(transfer)
    return selected


def select_transfers(gateway, context, name=None, lowering=False):
    """Working set for a run: one named transfer, or all active for a scope.

    Args:
        gateway: Configuration gateway
        context: CruiseContext of the run
        name: Explicit collection system transfer name (optional)
        lowering: Select lowering-scoped instead of cruise-scoped transfers

    Raises:
        NotFoundError, UnsupportedTransportError, MissingLoweringError
    """
    if name:
        return select_named(gateway, context, name)
    scope = Scope.LOWERING if lowering else Scope.CRUISE
    return select_scope(gateway, context, scope)
