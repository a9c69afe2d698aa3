# -*- coding: UTF-8 -*-

import sys

from swdemangle.config import Config
from swdemangle.fmt import demangle_symbol, demangle_type_name
from swdemangle.utility import Logging as log, profiler

from .base import Command


def _read_names(argv):
    """ names from the command line, or one per line from stdin """
    if len(argv) > 0:
        return argv
    return [line.strip() for line in sys.stdin if line.strip()]


@profiler
def DemangleBatch(demangle, names):
    failed = 0
    for name in names:
        ast = demangle(name)
        if ast is None:
            print("<unknown> %s" % name)
            failed += 1
            continue
        print(ast.dump())
    if failed:
        log.verbose("%d of %d name(s) not demangled." % (failed, len(names)))
    return failed


class cli_symbol(Command):
    """ demangle swift symbols

    usage: symbol [name ...]
    prints the node tree of each '_T' symbol, names are read
    from stdin, one per line, when none is given.
    """
    _cxpr = "symbol"

    def invoke(self, argv):
        DemangleBatch(demangle_symbol, _read_names(argv))


class cli_type(Command):
    """ demangle swift type names

    usage: type [name ...]
    same as 'symbol' for bare type manglings, without the '_T' prefix.
    """
    _cxpr = "type"

    def invoke(self, argv):
        DemangleBatch(demangle_type_name, _read_names(argv))


class cli_config(Command):
    """ show the configuration """
    _cxpr = "config"

    def invoke(self, argv):
        Config.Show(argv[0] if len(argv) > 0 else None)


class cli_set(Command):
    """ set a configuration value

    usage: set KEY VALUE
    """
    _cxpr = "set"

    def invoke(self, argv):
        if len(argv) != 2:
            print(self.Help())
            return
        try:
            value = Config.Convert(argv[0], argv[1])
        except ValueError as e:
            log.error("bad value for %s: %s" % (argv[0], e))
            return
        Config.SetValue(argv[0], value)
