# -*- coding: UTF-8 -*-

"""Tests for the node arena."""

import pytest

from swdemangle.node import Kind, NodeFactory


class TestNodeFactory:
    def test_create_payloads(self):
        factory = NodeFactory()
        ident = factory.create(Kind.Identifier, 'foo')
        num = factory.create(Kind.Number, index=3)
        assert ident.has_text() and not ident.has_index()
        assert num.has_index() and not num.has_text()
        assert ident.text == 'foo'
        assert num.index == 3
        assert len(factory) == 2

    def test_create_with_both_payloads_fails(self):
        factory = NodeFactory()
        with pytest.raises(AssertionError):
            factory.create(Kind.Identifier, 'foo', index=1)

    def test_children_keep_order(self):
        factory = NodeFactory()
        parent = factory.create(Kind.Structure)
        module = factory.create(Kind.Module, 'main')
        name = factory.create(Kind.Identifier, 'Foo')
        factory.add_child(parent, module)
        factory.add_child(parent, name)
        assert len(parent) == 2
        assert parent[0] is module
        assert parent.children == (module, name)
        assert [c.kind for c in parent] == [Kind.Module, Kind.Identifier]

    def test_shared_child(self):
        factory = NodeFactory()
        module = factory.create(Kind.Module, 'main')
        a = factory.create(Kind.Structure)
        b = factory.create(Kind.Class)
        factory.add_child(a, module)
        factory.add_child(b, module)
        assert a[0] is b[0]

    def test_child_from_other_arena_fails(self):
        factory = NodeFactory()
        parent = factory.create(Kind.Type)
        with pytest.raises(AssertionError):
            factory.add_child(parent, NodeFactory().create(Kind.Tuple))

    def test_structural_equality(self):
        def build():
            factory = NodeFactory()
            t = factory.create(Kind.Type)
            factory.add_child(t, factory.create(Kind.BuiltinTypeName, 'Builtin.Word'))
            return t

        assert build() == build()
        other = NodeFactory().create(Kind.Type)
        assert build() != other

    def test_dump(self):
        factory = NodeFactory()
        root = factory.create(Kind.Tuple)
        elt = factory.create(Kind.TupleElement)
        factory.add_child(root, elt)
        factory.add_child(elt, factory.create(Kind.TupleElementName, 'x'))
        factory.add_child(elt, factory.create(Kind.Index, index=0))
        assert root.dump() == '\n'.join([
            'kind=Tuple',
            '  kind=TupleElement',
            '    kind=TupleElementName, text="x"',
            '    kind=Index, index=0',
        ])

    def test_repr(self):
        factory = NodeFactory()
        assert repr(factory.create(Kind.Identifier, 'foo')) == "<Node Identifier 'foo'>"
        assert repr(factory.create(Kind.Number, index=2)) == "<Node Number 2>"
        assert repr(factory.create(Kind.Tuple)) == "<Node Tuple [0]>"
