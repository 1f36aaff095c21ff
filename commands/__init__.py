#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
命令模块
每个子模块提供 register(subparsers)，挂载对应的命令组
"""

from . import auth, contacts, conversations, notes, tags, teams, tickets
from .common import CommandContext, CommandError

COMMAND_MODULES = [auth, conversations, contacts, tickets, tags, teams, notes]


def register_all(subparsers):
    for module in COMMAND_MODULES:
        module.register(subparsers)


__all__ = ['CommandContext', 'CommandError', 'register_all']
