#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
csprovision - Collection System Template Provisioning

This package reproduces a template directory tree, with cruise and
lowering identifiers substituted into the names, on each collection
system workstation configured in the shipboard data warehouse.
"""

__version__ = '1.0.0'
__author__ = 'SSI-DK'
__description__ = 'Provision cruise directory templates on collection systems'

__all__ = [
    'config',
    'errors',
    'models',
    'gateway',
    'template',
    'permissions',
    'runner',
    'transports',
    'eligibility',
    'orchestrator',
    'cli',
    'check_readiness',
]
