# -*- coding: UTF-8 -*-

import sys
import functools

from swdemangle.config import Config


def profiler(func):
    """ decorater for function profiling,
        the mode is read from cfgProfilerMode on every call.
    """
    from cProfile import Profile
    from time import time

    def timeit(*args):
        """ show only time cost """
        t = time()
        rc = func(*args)
        Logging.print('{}() takes {:.3f} second(s).'.format(func.__name__, time() - t))
        return rc

    def profile(*args):
        """ show detail profiling """
        pr = Profile()
        pr.enable()
        rc = func(*args)
        pr.disable()
        pr.print_stats(sort="cumulative")
        return rc

    @functools.wraps(func)
    def wrapper(*args):
        if Config.cfgProfilerMode == 2:
            return profile(*args)
        elif Config.cfgProfilerMode == 1:
            return timeit(*args)
        return func(*args)
    return wrapper


class Logging:
    """ control the logging output
    """

    # non-color levels
    NOTSET = 0
    DEBUG = 10
    VERBOSE = 20
    # color levels
    INFO = 30
    WARN = 40
    ERROR = 50
    CRITICAL = 60

    @classmethod
    def getLevel(cls):
        return Config.cfgLoggingLevel

    @classmethod
    def _output(cls, sz, level=None, color=None, pad=0):
        # omit low priority output
        if level and level < cls.getLevel():
            return

        if color is None or not Config.cfgLoggingColor:
            if pad > 0:
                out = "%*s%s" % (pad, ' ', sz)
            else:
                out = sz
        else:
            out = '\033[%dm' % color + sz + '\033[0m'

        # stdout belongs to the demangled output
        print(out, file=sys.stderr)

    @classmethod
    def error(cls, sz, level=0):
        cls._output(sz, cls.ERROR + level, color=31)

    @classmethod
    def warn(cls, sz, level=0):
        cls._output(sz, cls.WARN + level, color=33)

    @classmethod
    def verbose(cls, sz, level=0):
        cls._output(sz, cls.VERBOSE + level)

    @classmethod
    def debug(cls, sz, level=0):
        cls._output(sz, cls.DEBUG + level)

    @classmethod
    def print(cls, sz, pos=0):
        """ print is not controlled by level, always output. """
        cls._output(sz, pad=pos)


def TextShort(any_str, limit=-1):
    """ limit string length for shot brief """
    if limit < 0:
        limit = Config.cfgStringShortLength

    if isinstance(any_str, bytes):
        any_str = any_str.decode('utf-8', 'backslashreplace')

    def NoNewLine(src):
        return src.replace('\r', '').replace('\n', '')

    # Short string in one line
    if len(any_str) > limit:
        return NoNewLine(any_str[:limit] + '...')
    return NoNewLine(any_str)


def DCHECK(statement, *args):
    """ debug check
    """
    assert statement, args


def to_bool(value):
    """ convert string to bool
    """
    if str(value).lower() in ("yes", "on", "y", "true", "1"): return True
    if str(value).lower() in ("no",  "off", "n", "false", "0", "0.0", "", "none"): return False
    raise ValueError('Invalid value for boolean conversion: ' + str(value))
