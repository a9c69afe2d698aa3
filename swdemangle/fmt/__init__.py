# -*- coding: UTF-8 -*-

from .demangler import demangle_symbol, demangle_type_name
from .punycode import decode_swift_punycode
