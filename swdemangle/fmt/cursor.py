# -*- coding: UTF-8 -*-

""" input cursor and substitution table used by the demangler.

    The mangling counts identifier lengths in bytes, so the cursor works
    on bytes: the input is encoded as UTF-8 and held as a latin-1 string,
    one character per byte. `to_text` turns a slice back into `str`.
"""


def to_text(raw):
    """ decode a latin-1 slice of the cursor back into text """
    return raw.encode('latin-1').decode('utf-8', 'surrogateescape')


class NameSource:
    """ forward-only view over a mangled name """

    # returned by peek() on an exhausted cursor, never a grammar sigil.
    EMPTY = '.'

    def __init__(self, mangled):
        if isinstance(mangled, str):
            try:
                mangled = mangled.encode('utf-8', 'surrogateescape')
            except UnicodeEncodeError:
                # lone surrogates outside the escape range
                mangled = mangled.encode('utf-8', 'surrogatepass')
        self._raw = bytes(mangled).decode('latin-1')
        self._pos = 0

    def at_end(self):
        return self._pos >= len(self._raw)

    def __bool__(self):
        return not self.at_end()

    def has_at_least(self, n):
        return n <= len(self._raw) - self._pos

    def peek(self):
        if self.at_end():
            return self.EMPTY
        return self._raw[self._pos]

    def next(self):
        c = self.peek()
        if not self.at_end():
            self._pos += 1
        return c

    def accept(self, delim):
        if self._raw.startswith(delim, self._pos):
            self._pos += len(delim)
            return True
        return False

    def advance(self, amount):
        if not self.has_at_least(amount):
            return None
        result = self._raw[self._pos:self._pos + amount]
        self._pos += amount
        return result

    def match(self, pattern):
        match = pattern.match(self._raw, self._pos)
        if match:
            self._pos = match.end(0)
        return match

    def read_until(self, delim):
        """ consume up to, not including, delim.
            returns (text, found); text runs to the end when delim is missing.
        """
        end = self._raw.find(delim, self._pos)
        found = end >= 0
        if not found:
            end = len(self._raw)
        result = self._raw[self._pos:end]
        self._pos = end
        return result, found

    def rest(self):
        result = self._raw[self._pos:]
        self._pos = len(self._raw)
        return result

    def __repr__(self):
        return "NameSource({}, {})".format(
            self._raw[:self._pos] + '→' + self._raw[self._pos:], self._pos)


class SubstitutionTable:
    """ nodes a mangled name can refer back to, numbered from 0 """

    def __init__(self):
        self._substs = []

    def append(self, node):
        self._substs.append(node)

    def resolve(self, seq_id):
        if 0 <= seq_id < len(self._substs):
            return self._substs[seq_id]
        return None

    def reset(self):
        self._substs = []

    def __len__(self):
        return len(self._substs)
