# -*- coding: UTF-8 -*-

"""Tests for the name cursor and the substitution table."""

import re

from swdemangle.fmt.cursor import NameSource, SubstitutionTable, to_text


class TestNameSource:
    def test_peek_does_not_consume(self):
        src = NameSource('_T')
        assert src.peek() == '_'
        assert src.peek() == '_'
        assert src.next() == '_'
        assert src.next() == 'T'
        assert src.at_end()

    def test_peek_on_empty_returns_sentinel(self):
        src = NameSource('')
        assert src.at_end()
        assert not src
        assert src.peek() == NameSource.EMPTY
        assert src.next() == NameSource.EMPTY

    def test_accept_consumes_only_on_match(self):
        src = NameSource('_TtSi')
        assert not src.accept('_TT')
        assert src.peek() == '_'
        assert src.accept('_T')
        assert src.accept('t')
        assert src.rest() == 'Si'
        assert src.at_end()

    def test_advance_past_end_leaves_cursor(self):
        src = NameSource('abc')
        assert src.advance(4) is None
        assert src.peek() == 'a'
        assert src.advance(2) == 'ab'
        assert src.has_at_least(1)
        assert not src.has_at_least(2)

    def test_read_until_found(self):
        src = NameSource('42_rest')
        assert src.read_until('_') == ('42', True)
        assert src.accept('_')
        assert src.rest() == 'rest'

    def test_read_until_missing_drains(self):
        src = NameSource('4242')
        assert src.read_until('_') == ('4242', False)
        assert src.at_end()

    def test_match(self):
        src = NameSource('123abc')
        number = re.compile(r"[0-9]+")
        assert src.match(number).group(0) == '123'
        assert src.match(number) is None
        assert src.peek() == 'a'

    def test_counts_bytes(self):
        src = NameSource('é')
        assert src.has_at_least(2)
        assert to_text(src.advance(2)) == 'é'

    def test_bytes_input(self):
        src = NameSource(b'_T\xff')
        assert src.accept('_T')
        assert to_text(src.rest()) == '\udcff'

    def test_lone_surrogate_input(self):
        src = NameSource('_T\ud800')
        assert src.accept('_T')
        assert src.has_at_least(3)
        assert not src.has_at_least(4)


class TestSubstitutionTable:
    def test_resolve(self):
        table = SubstitutionTable()
        table.append('a')
        table.append('b')
        assert len(table) == 2
        assert table.resolve(0) == 'a'
        assert table.resolve(1) == 'b'

    def test_resolve_out_of_range(self):
        table = SubstitutionTable()
        assert table.resolve(0) is None
        table.append('a')
        assert table.resolve(1) is None
        assert table.resolve(-1) is None

    def test_reset(self):
        table = SubstitutionTable()
        table.append('a')
        table.reset()
        assert len(table) == 0
        assert table.resolve(0) is None
