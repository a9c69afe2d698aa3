# -*- coding: UTF-8 -*-

""" swdemangle.node : the symbol tree built by one decode call.

    Nodes live in a NodeFactory (the arena of that call) and refer to
    their children by arena index, so a node returned by the substitution
    table can be attached to several parents without copying.

    Every node has a `kind` and at most one payload:
        * `text` (`str`) for names, literals and attributes
        * `index` (`int`) for numbers, indices and flag sets
"""

import enum

from swdemangle.utility import DCHECK


Kind = enum.Enum('Kind', """
    Global Suffix
    ObjCAttribute NonObjCAttribute DynamicAttribute
    DirectMethodReferenceAttribute VTableAttribute
    TypeMangling Type TypeList TypeAlias
    Module Identifier PrefixOperator PostfixOperator InfixOperator
    LocalDeclName PrivateDeclName Number Index
    Class Structure Enum Protocol
    BoundGenericClass BoundGenericStructure BoundGenericEnum
    Extension Function Variable Initializer Subscript Static
    Allocator Constructor Deallocator Destructor
    IVarInitializer IVarDestroyer
    Getter GlobalGetter Setter MaterializeForSet WillSet DidSet
    ReadAccessor ModifyAccessor
    OwningAddressor NativeOwningAddressor NativePinningAddressor UnsafeAddressor
    OwningMutableAddressor NativeOwningMutableAddressor
    NativePinningMutableAddressor UnsafeMutableAddressor
    ExplicitClosure ImplicitClosure DefaultArgumentInitializer
    Tuple TupleElement TupleElementName VariadicMarker
    FunctionType UncurriedFunctionType ObjCBlock CFunctionPointer
    AutoClosureType ThinFunctionType ArgumentTuple ReturnType ThrowsAnnotation
    BuiltinTypeName DynamicSelf ErrorType InOut
    Metatype MetatypeRepresentation ExistentialMetatype
    ProtocolList ProtocolConformance
    Unowned Unmanaged Weak
    SILBoxType SILBoxTypeWithLayout SILBoxLayout
    SILBoxMutableField SILBoxImmutableField
    DependentGenericType DependentGenericSignature
    DependentPseudogenericSignature DependentGenericParamCount
    DependentGenericParamType DependentGenericSameTypeRequirement
    DependentGenericLayoutRequirement DependentGenericConformanceRequirement
    DependentMemberType DependentAssociatedTypeRef AssociatedTypeRef
    GenericTypeMetadataPattern TypeMetadataAccessFunction TypeMetadataLazyCache
    Metaclass NominalTypeDescriptor FullTypeMetadata ProtocolDescriptor
    TypeMetadata
    PartialApplyForwarder PartialApplyObjCForwarder
    ValueWitness ValueWitnessTable FieldOffset Directness
    ProtocolWitnessTable GenericProtocolWitnessTable
    GenericProtocolWitnessTableInstantiationFunction
    LazyProtocolWitnessTableAccessor LazyProtocolWitnessTableCacheVariable
    ProtocolWitnessTableAccessor
    AssociatedTypeMetadataAccessor AssociatedTypeWitnessTableAccessor
    ReabstractionThunk ReabstractionThunkHelper ProtocolWitness
    GenericSpecialization GenericSpecializationNotReAbstracted
    GenericSpecializationParam
    FunctionSignatureSpecialization FunctionSignatureSpecializationParam
    FunctionSignatureSpecializationParamKind
    FunctionSignatureSpecializationParamPayload
    SpecializationPassID IsSerialized
    ImplFunctionType ImplConvention ImplFunctionAttribute
    ImplParameter ImplResult ImplErrorResult
""", module=__name__)


class Node(object):
    """ a node of the symbol tree, created by NodeFactory.create """

    __slots__ = ('_factory', 'ref', 'kind', 'text', 'index', '_children')

    def __init__(self, factory, ref, kind, text=None, index=None):
        self._factory = factory
        self.ref = ref
        self.kind = kind
        self.text = text
        self.index = index
        self._children = []

    def has_text(self):
        return self.text is not None

    def has_index(self):
        return self.index is not None

    @property
    def children(self):
        return tuple(self._factory.get(r) for r in self._children)

    def child(self, i):
        return self._factory.get(self._children[i])

    def __len__(self):
        return len(self._children)

    def __iter__(self):
        for r in self._children:
            yield self._factory.get(r)

    def __getitem__(self, i):
        return self.child(i)

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        if (self.kind, self.text, self.index) != (other.kind, other.text, other.index):
            return False
        return self.children == other.children

    __hash__ = None

    def __repr__(self):
        if self.has_text():
            return "<Node {} {}>".format(self.kind.name, repr(self.text))
        if self.has_index():
            return "<Node {} {}>".format(self.kind.name, self.index)
        return "<Node {} [{}]>".format(self.kind.name, len(self._children))

    def dump(self):
        """ the tree as indented text, one node per line:

            kind=Global
              kind=TypeMangling
                kind=Type
                  kind=BuiltinTypeName, text="Builtin.FPIEEE32"
        """
        lines = []

        def walk(node, depth):
            line = '%*skind=%s' % (depth * 2, '', node.kind.name)
            if node.has_text():
                line += ', text="%s"' % node.text
            elif node.has_index():
                line += ', index=%d' % node.index
            lines.append(line)
            for c in node:
                walk(c, depth + 1)

        walk(self, 0)
        return '\n'.join(lines)


class NodeFactory(object):
    """ owns every node of one decode call """

    def __init__(self):
        self._nodes = []

    def create(self, kind, text=None, index=None):
        DCHECK(text is None or index is None, kind)
        node = Node(self, len(self._nodes), kind, text=text, index=index)
        self._nodes.append(node)
        return node

    def add_child(self, parent, child):
        DCHECK(child is not None, parent)
        DCHECK(child._factory is self, child)
        parent._children.append(child.ref)

    def get(self, ref):
        return self._nodes[ref]

    def __len__(self):
        return len(self._nodes)
