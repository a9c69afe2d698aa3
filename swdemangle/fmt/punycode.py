# -*- coding: UTF-8 -*-

""" punycode as used by swift identifiers.

    Same algorithm as RFC 3492 with a different alphabet: digit values
    0..25 are 'a'..'z', 26..35 are 'A'..'J' and the delimiter between
    the basic code points and the encoded deltas is '_'. The input is
    rewritten into the RFC alphabet and handed to the standard codec.
"""

_SWIFT_DELIMITER = '_'


def _to_rfc_digit(c):
    if 'a' <= c <= 'z':
        return c
    if 'A' <= c <= 'J':
        return chr(ord(c) - ord('A') + ord('0'))
    return None


def decode_swift_punycode(encoded):
    """ returns the decoded text, or None for malformed input """
    if isinstance(encoded, bytes):
        encoded = encoded.decode('latin-1')

    pos = encoded.rfind(_SWIFT_DELIMITER)
    if pos >= 0:
        basic, extended = encoded[:pos], encoded[pos + 1:]
    else:
        basic, extended = '', encoded

    if any(ord(c) > 0x7f for c in basic):
        return None

    digits = []
    for c in extended:
        d = _to_rfc_digit(c)
        if d is None:
            return None
        digits.append(d)

    rfc = basic + '-' + ''.join(digits)
    try:
        decoded = rfc.encode('ascii').decode('punycode')
    except UnicodeError:
        return None

    if any(0xd800 <= ord(c) <= 0xdfff for c in decoded):
        return None
    return decoded
