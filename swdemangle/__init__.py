# -*- coding: UTF-8 -*-

""" decoder for the legacy `_T` swift symbol mangling. """

from .config import Config
from .errors import DemangleException
from .node import Kind, Node, NodeFactory
from .fmt import demangle_symbol, demangle_type_name

__version__ = '0.1.0'
