# -*- coding: UTF-8 -*-

import sys

from swdemangle.config import Config
from swdemangle.errors import DemangleException

from .base import Command, CommandsDispatcher
from .demangle import *

""" register all commands
"""
Command.RegisterAll()


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    try:
        Config.LoadEnviron()
        ok = CommandsDispatcher.Dispatch(argv)
    except DemangleException:
        return 1
    return 0 if ok else 1
