# -*- coding: UTF-8 -*-

from swdemangle.utility import Logging as log, TextShort


class DemangleException(Exception):
    pass


class DepthExceeded(DemangleException):
    """ the recursion budget of a decode call ran out. """

    def __init__(self, depth):
        DemangleException.__init__(self, 'nesting deeper than %d' % depth)
        self.depth = depth


class DemangleError(object):

    @classmethod
    def DepthExceeded(cls, mangled, depth):
        log.warn('DepthExceeded %s (limit %d)' % (TextShort(mangled), depth))
        raise DepthExceeded(depth)

    @classmethod
    def BadConfig(cls, key):
        log.error('BadConfig unknown key %s' % key)
        raise DemangleException('unknown config key %s' % key)
