# -*- coding: UTF-8 -*-

"""
This module implements a demangler for the old (`_T` prefixed) Swift mangling.

The demangler provides two entry points, `demangle_symbol` and `demangle_type_name`,
and returns either `None` or the root `Node` of a symbol tree (see `swdemangle.node`).
Every production below returns a node or `None`; a `None` is never retried with
another interpretation of the consumed input, it unwinds to the entry point.

Top level:
    * `Global`: children are the optional specialization or thunk attributes,
      then the global entity, then a `Suffix` (`text`) holding any unparsed tail
    * `TypeMangling`: `_Tt` followed by a bare type

Names:
    * `Module`, `Identifier`, `PrefixOperator`, `InfixOperator`, `PostfixOperator`:
      `text` holds the decoded name
    * `LocalDeclName`: a `Number` discriminator and an identifier
    * `PrivateDeclName`: a file discriminator identifier and an identifier
    * `Class`, `Structure`, `Enum`, `Protocol`, `TypeAlias`: context and name

Types are always wrapped in a `Type` node. Generic parameters are
`DependentGenericParamType` nodes whose `text` is the archetype name (`A`, `B1`,
...) with `Index` children for depth and index.

https://github.com/apple/swift/blob/swift-4.0-branch/lib/Basic/Demangle.cpp
"""

import re
import functools

from swdemangle.config import Config
from swdemangle.errors import DemangleError, DepthExceeded
from swdemangle.node import Kind, NodeFactory
from swdemangle.utility import Logging as log, TextShort

from .cursor import NameSource, SubstitutionTable, to_text
from .punycode import decode_swift_punycode


MANGLING_MODULE_OBJC = '__ObjC'
MANGLING_MODULE_C = '__C'
STDLIB_NAME = 'Swift'


class Directness:
    Direct = 0
    Indirect = 1


class FunctionSigSpecializationParamKind:
    ConstantPropFunction = 0
    ConstantPropGlobal = 1
    ConstantPropInteger = 2
    ConstantPropFloat = 3
    ConstantPropString = 4
    ClosureProp = 5
    BoxToValue = 6
    BoxToStack = 7

    # option set, may be or'ed together
    Dead = 1 << 6
    OwnedToGuaranteed = 1 << 7
    SROA = 1 << 8
    GuaranteedToOwned = 1 << 9


# ValueWitness nodes carry the position of their code in this list.
VALUE_WITNESS_CODES = (
    'al',   # allocateBuffer
    'ca',   # assignWithCopy
    'ta',   # assignWithTake
    'de',   # deallocateBuffer
    'xx',   # destroy
    'XX',   # destroyBuffer
    'Xx',   # destroyArray
    'CP',   # initializeBufferWithCopyOfBuffer
    'Cp',   # initializeBufferWithCopy
    'cp',   # initializeWithCopy
    'TK',   # initializeBufferWithTakeOfBuffer
    'Tk',   # initializeBufferWithTake
    'tk',   # initializeWithTake
    'pr',   # projectBuffer
    'xs',   # storeExtraInhabitant
    'xg',   # getExtraInhabitantIndex
    'Cc',   # initializeArrayWithCopy
    'Tt',   # initializeArrayWithTakeFrontToBack
    'tT',   # initializeArrayWithTakeBackToFront
    'ug',   # getEnumTag
    'up',   # destructiveProjectEnumData
    'ui',   # destructiveInjectEnumTag
)


class _Cursor(NameSource):
    """ parser state of one decode call: input, substitutions, nodes, depth """

    def __init__(self, mangled):
        NameSource.__init__(self, mangled)
        self._mangled = mangled
        self._substs = SubstitutionTable()
        self._factory = NodeFactory()
        self._depth = 0

    def create(self, kind, text=None, index=None):
        return self._factory.create(kind, text=text, index=index)

    def add_child(self, parent, child):
        self._factory.add_child(parent, child)

    def add_subst(self, node):
        self._substs.append(node)

    def resolve_subst(self, seq_id):
        return self._substs.resolve(seq_id)

    def reset_substs(self):
        self._substs.reset()

    def enter(self):
        self._depth += 1
        if self._depth > Config.cfgDemangleMaxDepth:
            DemangleError.DepthExceeded(self._mangled, Config.cfgDemangleMaxDepth)

    def leave(self):
        self._depth -= 1


def _nested(func):
    """ charge one unit of the recursion budget while func runs """
    @functools.wraps(func)
    def wrapper(cursor, *args):
        cursor.enter()
        try:
            return func(cursor, *args)
        finally:
            cursor.leave()
    return wrapper


def _is_digit(c):
    return '0' <= c <= '9'


def _is_start_of_identifier(c):
    return _is_digit(c) or c == 'o'


_NOMINAL_TYPE_KINDS = {
    'C': Kind.Class,
    'V': Kind.Structure,
    'O': Kind.Enum,
}

def _is_start_of_entity(c):
    return c in ('F', 'I', 'v', 'P', 's', 'Z') or c in _NOMINAL_TYPE_KINDS


_NUMBER_RE = re.compile(r"[0-9]+")

def _demangle_natural(cursor):
    match = cursor.match(_NUMBER_RE)
    if match is None:
        return None
    digits = match.group(0).lstrip('0')
    if len(digits) > len(str(Config.cfgDemangleMaxNatural)):
        return None
    num = int(digits or '0')
    if num > Config.cfgDemangleMaxNatural:
        return None
    return num

def _demangle_builtin_size(cursor):
    size = _demangle_natural(cursor)
    if size is None or not cursor.accept('_'):
        return None
    return size

def _demangle_index(cursor):
    if cursor.accept('_'):
        return 0
    natural = _demangle_natural(cursor)
    if natural is None or not cursor.accept('_'):
        return None
    return natural + 1

def _demangle_index_as_node(cursor, kind=Kind.Number):
    index = _demangle_index(cursor)
    if index is None:
        return None
    return cursor.create(kind, index=index)


#              abcdefghijklmnopqrstuvwxyz
_OPERATOR_CHARS = "& @/= >    <*!|+?%-~   ^ ."

_OPERATOR_KINDS = {
    'p': Kind.PrefixOperator,
    'P': Kind.PostfixOperator,
    'i': Kind.InfixOperator,
}

def _decode_operator(name):
    result = []
    for c in name:
        if ord(c) >= 0x80:
            # unicode operator characters pass through
            result.append(c)
            continue
        if not 'a' <= c <= 'z':
            return None
        o = _OPERATOR_CHARS[ord(c) - ord('a')]
        if o == ' ':
            return None
        result.append(o)
    return ''.join(result)

def _demangle_identifier(cursor, kind=None):
    if cursor.at_end():
        return None

    is_punycoded = cursor.accept('X')

    is_operator = False
    if cursor.accept('o'):
        is_operator = True
        # operators cannot name modules, labels or associated types
        if kind is not None:
            return None
        kind = _OPERATOR_KINDS.get(cursor.next())
        if kind is None:
            return None

    if kind is None:
        kind = Kind.Identifier

    length = _demangle_natural(cursor)
    if length is None:
        return None
    name = cursor.advance(length)
    if name is None:
        return None

    if is_punycoded:
        name = decode_swift_punycode(name)
        if name is None:
            return None
    if not name:
        return None

    if is_operator:
        name = _decode_operator(name)
        if name is None:
            return None

    if not is_punycoded:
        name = to_text(name)
    return cursor.create(kind, name)

def _demangle_decl_name(cursor):
    # decl-name ::= 'L' index identifier
    if cursor.accept('L'):
        discriminator = _demangle_index_as_node(cursor)
        if discriminator is None:
            return None
        name = _demangle_identifier(cursor)
        if name is None:
            return None
        local_name = cursor.create(Kind.LocalDeclName)
        cursor.add_child(local_name, discriminator)
        cursor.add_child(local_name, name)
        return local_name

    # decl-name ::= 'P' identifier identifier
    if cursor.accept('P'):
        discriminator = _demangle_identifier(cursor)
        if discriminator is None:
            return None
        name = _demangle_identifier(cursor)
        if name is None:
            return None
        private_name = cursor.create(Kind.PrivateDeclName)
        cursor.add_child(private_name, discriminator)
        cursor.add_child(private_name, name)
        return private_name

    # decl-name ::= identifier
    return _demangle_identifier(cursor)


_STANDARD_TYPES = {
    'a': (Kind.Structure, 'Array'),
    'b': (Kind.Structure, 'Bool'),
    'c': (Kind.Structure, 'UnicodeScalar'),
    'd': (Kind.Structure, 'Double'),
    'f': (Kind.Structure, 'Float'),
    'i': (Kind.Structure, 'Int'),
    'V': (Kind.Structure, 'UnsafeRawPointer'),
    'v': (Kind.Structure, 'UnsafeMutableRawPointer'),
    'P': (Kind.Structure, 'UnsafePointer'),
    'p': (Kind.Structure, 'UnsafeMutablePointer'),
    'q': (Kind.Enum, 'Optional'),
    'Q': (Kind.Enum, 'ImplicitlyUnwrappedOptional'),
    'R': (Kind.Structure, 'UnsafeBufferPointer'),
    'r': (Kind.Structure, 'UnsafeMutableBufferPointer'),
    'S': (Kind.Structure, 'String'),
    'u': (Kind.Structure, 'UInt'),
}

def _create_swift_type(cursor, kind, name):
    type_ = cursor.create(kind)
    cursor.add_child(type_, cursor.create(Kind.Module, STDLIB_NAME))
    cursor.add_child(type_, cursor.create(Kind.Identifier, name))
    return type_

def _demangle_substitution_index(cursor):
    """ the 'S' has already been consumed """
    if cursor.at_end():
        return None
    if cursor.accept('o'):
        return cursor.create(Kind.Module, MANGLING_MODULE_OBJC)
    if cursor.accept('C'):
        return cursor.create(Kind.Module, MANGLING_MODULE_C)
    standard = _STANDARD_TYPES.get(cursor.peek())
    if standard is not None:
        cursor.next()
        return _create_swift_type(cursor, *standard)

    seq_id = _demangle_index(cursor)
    if seq_id is None:
        return None
    return cursor.resolve_subst(seq_id)

def _demangle_module(cursor):
    if cursor.accept('s'):
        return cursor.create(Kind.Module, STDLIB_NAME)
    if cursor.accept('S'):
        module = _demangle_substitution_index(cursor)
        if module is None or module.kind != Kind.Module:
            return None
        return module

    module = _demangle_identifier(cursor, Kind.Module)
    if module is None:
        return None
    cursor.add_subst(module)
    return module

def _demangle_declaration_name(cursor, kind):
    context = _demangle_context(cursor)
    if context is None:
        return None
    name = _demangle_decl_name(cursor)
    if name is None:
        return None

    decl = cursor.create(kind)
    cursor.add_child(decl, context)
    cursor.add_child(decl, name)
    cursor.add_subst(decl)
    return decl

def _demangle_protocol_name(cursor):
    proto = _demangle_protocol_name_impl(cursor)
    if proto is None:
        return None
    type_ = cursor.create(Kind.Type)
    cursor.add_child(type_, proto)
    return type_

def _demangle_protocol_name_given_context(cursor, context):
    name = _demangle_decl_name(cursor)
    if name is None:
        return None
    proto = cursor.create(Kind.Protocol)
    cursor.add_child(proto, context)
    cursor.add_child(proto, name)
    cursor.add_subst(proto)
    return proto

def _demangle_protocol_name_impl(cursor):
    # a substitution here is either the protocol itself or its module.
    if cursor.accept('S'):
        sub = _demangle_substitution_index(cursor)
        if sub is None:
            return None
        if sub.kind == Kind.Protocol:
            return sub
        if sub.kind != Kind.Module:
            return None
        return _demangle_protocol_name_given_context(cursor, sub)

    if cursor.accept('s'):
        stdlib = cursor.create(Kind.Module, STDLIB_NAME)
        return _demangle_protocol_name_given_context(cursor, stdlib)

    return _demangle_declaration_name(cursor, Kind.Protocol)

def _demangle_nominal_type(cursor):
    if cursor.accept('S'):
        return _demangle_substitution_index(cursor)
    if cursor.accept('V'):
        return _demangle_declaration_name(cursor, Kind.Structure)
    if cursor.accept('O'):
        return _demangle_declaration_name(cursor, Kind.Enum)
    if cursor.accept('C'):
        return _demangle_declaration_name(cursor, Kind.Class)
    if cursor.accept('P'):
        return _demangle_declaration_name(cursor, Kind.Protocol)
    return None


_BOUND_GENERIC_KINDS = {
    Kind.Class: Kind.BoundGenericClass,
    Kind.Structure: Kind.BoundGenericStructure,
    Kind.Enum: Kind.BoundGenericEnum,
}

@_nested
def _demangle_bound_generic_args(cursor, nominal_type):
    if len(nominal_type) == 0:
        return None

    # generic arguments for the outermost type come first.
    parent = nominal_type[0]
    if parent.kind not in (Kind.Module, Kind.Function, Kind.Extension):
        if len(nominal_type) < 2:
            return None
        parent = _demangle_bound_generic_args(cursor, parent)
        if parent is None:
            return None

        # rebuild this type on the parent that may have got its arguments.
        result = cursor.create(nominal_type.kind)
        cursor.add_child(result, parent)
        cursor.add_child(result, nominal_type[1])
        nominal_type = result

    args = cursor.create(Kind.TypeList)
    while not cursor.accept('_'):
        type_ = _demangle_type(cursor)
        if type_ is None:
            return None
        cursor.add_child(args, type_)
        if cursor.at_end():
            return None

    # not generic at this level
    if len(args) == 0:
        return nominal_type

    kind = _BOUND_GENERIC_KINDS.get(nominal_type.kind)
    if kind is None:
        return None
    unbound_type = cursor.create(Kind.Type)
    cursor.add_child(unbound_type, nominal_type)

    result = cursor.create(kind)
    cursor.add_child(result, unbound_type)
    cursor.add_child(result, args)
    return result

def _demangle_bound_generic_type(cursor):
    # bound-generic-type ::= 'G' nominal-type (args+ '_')+
    nominal_type = _demangle_nominal_type(cursor)
    if nominal_type is None:
        return None
    return _demangle_bound_generic_args(cursor, nominal_type)

@_nested
def _demangle_context(cursor):
    # context ::= module
    # context ::= entity
    # context ::= 'E' module context
    # context ::= 'e' module generic-signature context
    if cursor.at_end():
        return None

    if cursor.accept('E'):
        ext = cursor.create(Kind.Extension)
        def_module = _demangle_module(cursor)
        if def_module is None:
            return None
        type_ = _demangle_context(cursor)
        if type_ is None:
            return None
        cursor.add_child(ext, def_module)
        cursor.add_child(ext, type_)
        return ext

    if cursor.accept('e'):
        ext = cursor.create(Kind.Extension)
        def_module = _demangle_module(cursor)
        if def_module is None:
            return None
        sig = _demangle_generic_signature(cursor)
        if sig is None:
            return None
        type_ = _demangle_context(cursor)
        if type_ is None:
            return None
        cursor.add_child(ext, def_module)
        cursor.add_child(ext, type_)
        cursor.add_child(ext, sig)
        return ext

    if cursor.accept('S'):
        return _demangle_substitution_index(cursor)
    if cursor.accept('s'):
        return cursor.create(Kind.Module, STDLIB_NAME)
    if cursor.accept('G'):
        return _demangle_bound_generic_type(cursor)
    if _is_start_of_entity(cursor.peek()):
        return _demangle_entity(cursor)
    return _demangle_module(cursor)

def _demangle_protocol_list(cursor):
    proto_list = cursor.create(Kind.ProtocolList)
    type_list = cursor.create(Kind.TypeList)
    cursor.add_child(proto_list, type_list)
    while not cursor.accept('_'):
        proto = _demangle_protocol_name(cursor)
        if proto is None:
            return None
        cursor.add_child(type_list, proto)
    return proto_list

def _demangle_protocol_conformance(cursor):
    type_ = _demangle_type(cursor)
    if type_ is None:
        return None
    protocol = _demangle_protocol_name(cursor)
    if protocol is None:
        return None
    context = _demangle_context(cursor)
    if context is None:
        return None
    conformance = cursor.create(Kind.ProtocolConformance)
    cursor.add_child(conformance, type_)
    cursor.add_child(conformance, protocol)
    cursor.add_child(conformance, context)
    return conformance


_ENTITY_KINDS = {
    'F': Kind.Function,
    'v': Kind.Variable,
    'I': Kind.Initializer,
    'i': Kind.Subscript,
}

# entity names without a type
_UNTYPED_ENTITY_NAMES = {
    'D': Kind.Deallocator,
    'd': Kind.Destructor,
    'e': Kind.IVarInitializer,
    'E': Kind.IVarDestroyer,
}

_TYPED_ENTITY_NAMES = {
    'C': Kind.Allocator,
    'c': Kind.Constructor,
}

_ADDRESSORS = {
    'a': {
        'O': Kind.OwningMutableAddressor,
        'o': Kind.NativeOwningMutableAddressor,
        'p': Kind.NativePinningMutableAddressor,
        'u': Kind.UnsafeMutableAddressor,
    },
    'l': {
        'O': Kind.OwningAddressor,
        'o': Kind.NativeOwningAddressor,
        'p': Kind.NativePinningAddressor,
        'u': Kind.UnsafeAddressor,
    },
}

_ACCESSORS = {
    'g': Kind.Getter,
    'G': Kind.GlobalGetter,
    's': Kind.Setter,
    'm': Kind.MaterializeForSet,
    'w': Kind.WillSet,
    'W': Kind.DidSet,
    'r': Kind.ReadAccessor,
    'M': Kind.ModifyAccessor,
}

_CLOSURES = {
    'U': Kind.ExplicitClosure,
    'u': Kind.ImplicitClosure,
}

def _wrap_accessor(cursor, entity, context, name):
    """ accessors hang off a Variable, or a Subscript when the
        name is the reserved 'subscript' identifier.
    """
    is_subscript = False
    if name.kind == Kind.Identifier:
        if name.text == 'subscript':
            is_subscript = True
            name = None
    elif name.kind == Kind.PrivateDeclName:
        if len(name) > 1 and name[1].text == 'subscript':
            is_subscript = True
            discriminator = name[0]
            name = cursor.create(Kind.PrivateDeclName)
            cursor.add_child(name, discriminator)

    if is_subscript:
        wrapped = cursor.create(Kind.Subscript)
    else:
        wrapped = cursor.create(Kind.Variable)
    cursor.add_child(wrapped, context)

    # variables mangle their name before their type
    if not is_subscript:
        cursor.add_child(wrapped, name)

    type_ = _demangle_type(cursor)
    if type_ is None:
        return None
    cursor.add_child(wrapped, type_)

    # subscripts mangle their file discriminator after the type
    if is_subscript and name is not None:
        cursor.add_child(wrapped, name)

    cursor.add_child(entity, wrapped)
    return entity

@_nested
def _demangle_entity(cursor):
    # entity ::= 'Z'? entity-kind context entity-name
    # entity ::= nominal-type
    is_static = cursor.accept('Z')

    basic_kind = _ENTITY_KINDS.get(cursor.peek())
    if basic_kind is None:
        return _demangle_nominal_type(cursor)
    cursor.next()

    context = _demangle_context(cursor)
    if context is None:
        return None

    has_type = True
    wrap = False
    name = None
    c = cursor.peek()
    if c in _UNTYPED_ENTITY_NAMES:
        cursor.next()
        kind = _UNTYPED_ENTITY_NAMES[c]
        has_type = False
    elif c in _TYPED_ENTITY_NAMES:
        cursor.next()
        kind = _TYPED_ENTITY_NAMES[c]
    elif c in _ADDRESSORS:
        cursor.next()
        kind = _ADDRESSORS[c].get(cursor.next())
        if kind is None:
            return None
        wrap = True
        name = _demangle_decl_name(cursor)
        if name is None:
            return None
    elif c in _ACCESSORS:
        cursor.next()
        kind = _ACCESSORS[c]
        wrap = True
        name = _demangle_decl_name(cursor)
        if name is None:
            return None
    elif c in _CLOSURES:
        cursor.next()
        kind = _CLOSURES[c]
        name = _demangle_index_as_node(cursor)
        if name is None:
            return None
    elif basic_kind == Kind.Initializer:
        if cursor.accept('A'):
            # entity-name ::= 'A' index
            kind = Kind.DefaultArgumentInitializer
            name = _demangle_index_as_node(cursor)
            if name is None:
                return None
        elif cursor.accept('i'):
            kind = Kind.Initializer
        else:
            return None
        has_type = False
    else:
        kind = basic_kind
        name = _demangle_decl_name(cursor)
        if name is None:
            return None

    entity = cursor.create(kind)
    if wrap:
        if _wrap_accessor(cursor, entity, context, name) is None:
            return None
    else:
        cursor.add_child(entity, context)
        if name is not None:
            cursor.add_child(entity, name)
        if has_type:
            type_ = _demangle_type(cursor)
            if type_ is None:
                return None
            cursor.add_child(entity, type_)

    if is_static:
        static = cursor.create(Kind.Static)
        cursor.add_child(static, entity)
        return static
    return entity


def archetype_name(index, depth):
    """ A, B, ... Z, AB, BB, ... least significant letter first,
        with the depth appended when not 0.
    """
    name = ''
    while True:
        name += chr(ord('A') + index % 26)
        index //= 26
        if not index:
            break
    if depth != 0:
        name += str(depth)
    return name

def _get_dependent_generic_param_type(cursor, depth, index):
    param = cursor.create(Kind.DependentGenericParamType, archetype_name(index, depth))
    cursor.add_child(param, cursor.create(Kind.Index, index=depth))
    cursor.add_child(param, cursor.create(Kind.Index, index=index))
    return param

def _demangle_generic_param_index(cursor):
    if cursor.accept('d'):
        depth = _demangle_index(cursor)
        if depth is None:
            return None
        depth += 1
        index = _demangle_index(cursor)
        if index is None:
            return None
    elif cursor.accept('x'):
        depth = 0
        index = 0
    else:
        index = _demangle_index(cursor)
        if index is None:
            return None
        depth = 0
        index += 1
    return _get_dependent_generic_param_type(cursor, depth, index)

def _demangle_dependent_member_type_name(cursor, base):
    if cursor.accept('S'):
        assoc_ty = _demangle_substitution_index(cursor)
        if assoc_ty is None or assoc_ty.kind != Kind.DependentAssociatedTypeRef:
            return None
    else:
        protocol = None
        if cursor.accept('P'):
            protocol = _demangle_protocol_name(cursor)
            if protocol is None:
                return None

        assoc_ty = _demangle_identifier(cursor, Kind.DependentAssociatedTypeRef)
        if assoc_ty is None:
            return None
        if protocol is not None:
            cursor.add_child(assoc_ty, protocol)
        cursor.add_subst(assoc_ty)

    dep_ty = cursor.create(Kind.DependentMemberType)
    cursor.add_child(dep_ty, base)
    cursor.add_child(dep_ty, assoc_ty)
    return dep_ty

def _demangle_associated_type_simple(cursor):
    base = _demangle_generic_param_index(cursor)
    if base is None:
        return None
    node_type = cursor.create(Kind.Type)
    cursor.add_child(node_type, base)
    return _demangle_dependent_member_type_name(cursor, node_type)

def _demangle_associated_type_compound(cursor):
    base = _demangle_generic_param_index(cursor)
    if base is None:
        return None
    while not cursor.accept('_'):
        node_type = cursor.create(Kind.Type)
        cursor.add_child(node_type, base)
        base = _demangle_dependent_member_type_name(cursor, node_type)
        if base is None:
            return None
    return base

def _demangle_dependent_type(cursor):
    if cursor.at_end():
        return None

    # a dependent member type begins with a non-index, non-'d' character.
    c = cursor.peek()
    if c != 'd' and c != '_' and not _is_digit(c):
        base_type = _demangle_type(cursor)
        if base_type is None:
            return None
        return _demangle_dependent_member_type_name(cursor, base_type)

    return _demangle_generic_param_index(cursor)

def _demangle_constrained_type(cursor):
    # generic params appear here without their 'q' introducer
    if cursor.accept('w'):
        type_ = _demangle_associated_type_simple(cursor)
    elif cursor.accept('W'):
        type_ = _demangle_associated_type_compound(cursor)
    else:
        type_ = _demangle_generic_param_index(cursor)
    if type_ is None:
        return None
    node_type = cursor.create(Kind.Type)
    cursor.add_child(node_type, type_)
    return node_type

@_nested
def _demangle_generic_signature(cursor, is_pseudogeneric=False):
    if is_pseudogeneric:
        sig = cursor.create(Kind.DependentPseudogenericSignature)
    else:
        sig = cursor.create(Kind.DependentGenericSignature)

    # parameter counts at each depth
    count = None
    while cursor.peek() not in ('R', 'r'):
        if cursor.accept('z'):
            count = 0
        else:
            count = _demangle_index(cursor)
            if count is None:
                return None
            count += 1
        cursor.add_child(sig, cursor.create(Kind.DependentGenericParamCount, index=count))

    # no mangled parameters means exactly one
    if count is None:
        cursor.add_child(sig, cursor.create(Kind.DependentGenericParamCount, index=1))

    if cursor.accept('r'):
        return sig
    if not cursor.accept('R'):
        return None

    while not cursor.accept('r'):
        reqt = _demangle_generic_requirement(cursor)
        if reqt is None:
            return None
        cursor.add_child(sig, reqt)
    return sig


_METATYPE_REPRESENTATIONS = {
    't': '@thin',
    'T': '@thick',
    'o': '@objc_metatype',
}

def _demangle_metatype_representation(cursor):
    repr_ = _METATYPE_REPRESENTATIONS.get(cursor.peek())
    if repr_ is None:
        return None
    cursor.next()
    return cursor.create(Kind.MetatypeRepresentation, repr_)


_LAYOUT_CONSTRAINTS = {
    # code: (has size, has alignment)
    'U': (False, False),
    'R': (False, False),
    'N': (False, False),
    'T': (False, False),
    'E': (True, True),
    'e': (True, False),
    'M': (True, True),
    'm': (True, False),
}

def _demangle_layout_requirement(cursor, constrained_type):
    code = cursor.next()
    layout = _LAYOUT_CONSTRAINTS.get(code)
    if layout is None:
        return None
    has_size, has_alignment = layout

    size = alignment = None
    if has_size:
        size = _demangle_natural(cursor)
        if size is None:
            return None
    if has_alignment:
        if not cursor.accept('_'):
            return None
        alignment = _demangle_natural(cursor)
        if alignment is None:
            return None

    reqt = cursor.create(Kind.DependentGenericLayoutRequirement)
    cursor.add_child(reqt, constrained_type)
    cursor.add_child(reqt, cursor.create(Kind.Identifier, code))
    if size is not None:
        cursor.add_child(reqt, cursor.create(Kind.Number, index=size))
        if alignment is not None:
            cursor.add_child(reqt, cursor.create(Kind.Number, index=alignment))
    return reqt

def _demangle_generic_requirement(cursor):
    constrained_type = _demangle_constrained_type(cursor)
    if constrained_type is None:
        return None

    if cursor.accept('z'):
        second = _demangle_type(cursor)
        if second is None:
            return None
        reqt = cursor.create(Kind.DependentGenericSameTypeRequirement)
        cursor.add_child(reqt, constrained_type)
        cursor.add_child(reqt, second)
        return reqt

    if cursor.accept('l'):
        return _demangle_layout_requirement(cursor, constrained_type)

    # base class constraints start with a class mangling, 'C' or 'S'.
    if cursor.at_end():
        return None
    c = cursor.peek()
    if c == 'C':
        constraint = _demangle_type(cursor)
        if constraint is None:
            return None
    elif c == 'S':
        # either the module of a protocol or a full type name
        cursor.next()
        sub = _demangle_substitution_index(cursor)
        if sub is None:
            return None
        if sub.kind in (Kind.Protocol, Kind.Class):
            type_name = sub
        elif sub.kind == Kind.Module:
            type_name = _demangle_protocol_name_given_context(cursor, sub)
            if type_name is None:
                return None
        else:
            return None
        constraint = cursor.create(Kind.Type)
        cursor.add_child(constraint, type_name)
    else:
        constraint = _demangle_protocol_name(cursor)
        if constraint is None:
            return None

    reqt = cursor.create(Kind.DependentGenericConformanceRequirement)
    cursor.add_child(reqt, constrained_type)
    cursor.add_child(reqt, constraint)
    return reqt

@_nested
def _demangle_archetype_type(cursor):

    def make_associated_type(root):
        name = _demangle_identifier(cursor)
        if name is None:
            return None
        assoc_type = cursor.create(Kind.AssociatedTypeRef)
        cursor.add_child(assoc_type, root)
        cursor.add_child(assoc_type, name)
        cursor.add_subst(assoc_type)
        return assoc_type

    if cursor.accept('Q'):
        root = _demangle_archetype_type(cursor)
        if root is None:
            return None
        return make_associated_type(root)
    if cursor.accept('S'):
        sub = _demangle_substitution_index(cursor)
        if sub is None:
            return None
        return make_associated_type(sub)
    if cursor.accept('s'):
        return make_associated_type(cursor.create(Kind.Module, STDLIB_NAME))
    return None

def _demangle_tuple(cursor, is_variadic):
    tuple_ = cursor.create(Kind.Tuple)
    elt = None
    while not cursor.accept('_'):
        if cursor.at_end():
            return None
        elt = cursor.create(Kind.TupleElement)

        if _is_start_of_identifier(cursor.peek()):
            label = _demangle_identifier(cursor, Kind.TupleElementName)
            if label is None:
                return None
            cursor.add_child(elt, label)

        type_ = _demangle_type(cursor)
        if type_ is None:
            return None
        cursor.add_child(elt, type_)
        cursor.add_child(tuple_, elt)

    if is_variadic and elt is not None:
        cursor.add_child(elt, cursor.create(Kind.VariadicMarker))
    return tuple_

def _demangle_function_type(cursor, kind):
    throws = cursor.accept('z')
    in_args = _demangle_type(cursor)
    if in_args is None:
        return None
    out_args = _demangle_type(cursor)
    if out_args is None:
        return None

    block = cursor.create(kind)
    if throws:
        cursor.add_child(block, cursor.create(Kind.ThrowsAnnotation))

    in_node = cursor.create(Kind.ArgumentTuple)
    cursor.add_child(in_node, in_args)
    cursor.add_child(block, in_node)

    out_node = cursor.create(Kind.ReturnType)
    cursor.add_child(out_node, out_args)
    cursor.add_child(block, out_node)
    return block

@_nested
def _demangle_type(cursor):
    type_ = _demangle_type_impl(cursor)
    if type_ is None:
        return None
    node_type = cursor.create(Kind.Type)
    cursor.add_child(node_type, type_)
    return node_type


_BUILTIN_TYPES = {
    'b': 'Builtin.BridgeObject',
    'B': 'Builtin.UnsafeValueBuffer',
    'O': 'Builtin.UnknownObject',
    'o': 'Builtin.NativeObject',
    'p': 'Builtin.RawPointer',
    't': 'Builtin.SILToken',
    'w': 'Builtin.Word',
}

def _demangle_builtin_type(cursor):
    """ the 'B' has already been consumed """
    if cursor.at_end():
        return None
    c = cursor.next()
    if c in _BUILTIN_TYPES:
        return cursor.create(Kind.BuiltinTypeName, _BUILTIN_TYPES[c])

    if c == 'f':
        size = _demangle_builtin_size(cursor)
        if size is None:
            return None
        return cursor.create(Kind.BuiltinTypeName, 'Builtin.FPIEEE%d' % size)

    if c == 'i':
        size = _demangle_builtin_size(cursor)
        if size is None:
            return None
        return cursor.create(Kind.BuiltinTypeName, 'Builtin.Int%d' % size)

    if c == 'v':
        elts = _demangle_natural(cursor)
        if elts is None or not cursor.accept('B'):
            return None
        if cursor.accept('i'):
            size = _demangle_builtin_size(cursor)
            if size is None:
                return None
            return cursor.create(Kind.BuiltinTypeName, 'Builtin.Vec%dxInt%d' % (elts, size))
        if cursor.accept('f'):
            size = _demangle_builtin_size(cursor)
            if size is None:
                return None
            return cursor.create(Kind.BuiltinTypeName, 'Builtin.Vec%dxFloat%d' % (elts, size))
        if cursor.accept('p'):
            return cursor.create(Kind.BuiltinTypeName, 'Builtin.Vec%dxRawPointer' % elts)
    return None

def _demangle_wrapped_type(cursor, kind):
    type_ = _demangle_type(cursor)
    if type_ is None:
        return None
    node = cursor.create(kind)
    cursor.add_child(node, type_)
    return node

def _demangle_metatype(cursor, kind):
    repr_ = _demangle_metatype_representation(cursor)
    if repr_ is None:
        return None
    type_ = _demangle_type(cursor)
    if type_ is None:
        return None
    metatype = cursor.create(kind)
    cursor.add_child(metatype, repr_)
    cursor.add_child(metatype, type_)
    return metatype

def _demangle_sil_box_type_with_layout(cursor):
    signature = None
    if cursor.accept('G'):
        signature = _demangle_generic_signature(cursor)
        if signature is None:
            return None

    layout = cursor.create(Kind.SILBoxLayout)
    while not cursor.accept('_'):
        if cursor.accept('m'):
            kind = Kind.SILBoxMutableField
        elif cursor.accept('i'):
            kind = Kind.SILBoxImmutableField
        else:
            return None
        field = _demangle_wrapped_type(cursor, kind)
        if field is None:
            return None
        cursor.add_child(layout, field)

    generic_args = None
    if signature is not None:
        generic_args = cursor.create(Kind.TypeList)
        while not cursor.accept('_'):
            type_ = _demangle_type(cursor)
            if type_ is None:
                return None
            cursor.add_child(generic_args, type_)

    box_type = cursor.create(Kind.SILBoxTypeWithLayout)
    cursor.add_child(box_type, layout)
    if signature is not None:
        cursor.add_child(box_type, signature)
        cursor.add_child(box_type, generic_args)
    return box_type


_REFERENCE_STORAGE_KINDS = {
    'o': Kind.Unowned,
    'u': Kind.Unmanaged,
    'w': Kind.Weak,
}

def _demangle_extended_type(cursor):
    """ the 'X' has already been consumed """
    if cursor.accept('b'):
        return _demangle_wrapped_type(cursor, Kind.SILBoxType)
    if cursor.accept('B'):
        return _demangle_sil_box_type_with_layout(cursor)
    if cursor.accept('M'):
        return _demangle_metatype(cursor, Kind.Metatype)
    if cursor.accept('P'):
        if cursor.accept('M'):
            return _demangle_metatype(cursor, Kind.ExistentialMetatype)
        return _demangle_protocol_list(cursor)
    if cursor.accept('f'):
        return _demangle_function_type(cursor, Kind.ThinFunctionType)

    storage = _REFERENCE_STORAGE_KINDS.get(cursor.peek())
    if storage is not None:
        cursor.next()
        return _demangle_wrapped_type(cursor, storage)

    # type ::= 'XF' impl-function-type
    if cursor.accept('F'):
        return _demangle_impl_function_type(cursor)
    return None


_FUNCTION_TYPE_KINDS = {
    'b': Kind.ObjCBlock,
    'c': Kind.CFunctionPointer,
    'F': Kind.FunctionType,
    'f': Kind.UncurriedFunctionType,
    'K': Kind.AutoClosureType,
}

@_nested
def _demangle_type_impl(cursor):
    if cursor.at_end():
        return None
    c = cursor.next()

    if c == 'B':
        return _demangle_builtin_type(cursor)
    if c == 'a':
        return _demangle_declaration_name(cursor, Kind.TypeAlias)
    if c in _FUNCTION_TYPE_KINDS:
        return _demangle_function_type(cursor, _FUNCTION_TYPE_KINDS[c])
    if c == 'D':
        return _demangle_wrapped_type(cursor, Kind.DynamicSelf)
    if c == 'E':
        if not cursor.accept('RR'):
            return None
        return cursor.create(Kind.ErrorType, '')
    if c == 'G':
        return _demangle_bound_generic_type(cursor)
    if c == 'M':
        return _demangle_wrapped_type(cursor, Kind.Metatype)
    if c == 'P':
        if cursor.accept('M'):
            return _demangle_wrapped_type(cursor, Kind.ExistentialMetatype)
        return _demangle_protocol_list(cursor)
    if c == 'Q':
        return _demangle_archetype_type(cursor)
    if c == 'q':
        return _demangle_dependent_type(cursor)
    if c == 'x':
        # first generic param
        return _get_dependent_generic_param_type(cursor, 0, 0)
    if c == 'w':
        return _demangle_associated_type_simple(cursor)
    if c == 'W':
        return _demangle_associated_type_compound(cursor)
    if c == 'R':
        type_ = _demangle_type_impl(cursor)
        if type_ is None:
            return None
        inout = cursor.create(Kind.InOut)
        cursor.add_child(inout, type_)
        return inout
    if c == 'S':
        return _demangle_substitution_index(cursor)
    if c == 'T':
        return _demangle_tuple(cursor, False)
    if c == 't':
        return _demangle_tuple(cursor, True)
    if c == 'u':
        sig = _demangle_generic_signature(cursor)
        if sig is None:
            return None
        sub = _demangle_type(cursor)
        if sub is None:
            return None
        dependent_generic_type = cursor.create(Kind.DependentGenericType)
        cursor.add_child(dependent_generic_type, sig)
        cursor.add_child(dependent_generic_type, sub)
        return dependent_generic_type
    if c == 'X':
        return _demangle_extended_type(cursor)
    if c in _NOMINAL_TYPE_KINDS:
        return _demangle_declaration_name(cursor, _NOMINAL_TYPE_KINDS[c])
    return None


# SIL function types

_CALLEE, _PARAMETER, _RESULT = 0, 1, 2

_IMPL_CONVENTIONS = {
    #      callee                 parameter         result
    'a': (None,                   None,             '@autoreleased'),
    'd': ('@callee_unowned',      '@unowned',       '@unowned'),
    'D': (None,                   None,             '@unowned_inner_pointer'),
    'g': ('@callee_guaranteed',   '@guaranteed',    None),
    'e': (None,                   '@deallocating',  None),
    'i': (None,                   '@in',            '@out'),
    'l': (None,                   '@inout',         None),
    'o': ('@callee_owned',        '@owned',         '@owned'),
}

_IMPL_FUNCTION_ATTRIBUTES = {
    'b': '@convention(block)',
    'c': '@convention(c)',
    'm': '@convention(method)',
    'O': '@convention(objc_method)',
    'w': '@convention(witness_method)',
}

def _demangle_impl_convention(cursor, context):
    conventions = _IMPL_CONVENTIONS.get(cursor.peek())
    if conventions is None:
        return None
    cursor.next()
    return conventions[context]

def _demangle_impl_callee_convention(cursor, type_):
    # impl-callee-convention ::= 't' | impl-convention
    if cursor.accept('t'):
        attr = '@convention(thin)'
    else:
        attr = _demangle_impl_convention(cursor, _CALLEE)
    if not attr:
        return False
    cursor.add_child(type_, cursor.create(Kind.ImplConvention, attr))
    return True

def _demangle_impl_parameter_or_result(cursor, kind):
    if cursor.accept('z'):
        # only valid for a result
        if kind != Kind.ImplResult:
            return None
        kind = Kind.ImplErrorResult

    if kind == Kind.ImplParameter:
        convention = _demangle_impl_convention(cursor, _PARAMETER)
    else:
        convention = _demangle_impl_convention(cursor, _RESULT)
    if not convention:
        return None
    type_ = _demangle_type(cursor)
    if type_ is None:
        return None

    node = cursor.create(kind)
    cursor.add_child(node, cursor.create(Kind.ImplConvention, convention))
    cursor.add_child(node, type_)
    return node

def _demangle_impl_parameters(cursor, parent):
    # impl-parameter ::= impl-convention type
    while not cursor.accept('_'):
        param = _demangle_impl_parameter_or_result(cursor, Kind.ImplParameter)
        if param is None:
            return False
        cursor.add_child(parent, param)
    return True

def _demangle_impl_results(cursor, parent):
    # impl-result ::= 'z'? impl-convention type
    has_error_result = False
    while not cursor.accept('_'):
        result = _demangle_impl_parameter_or_result(cursor, Kind.ImplResult)
        if result is None:
            return False
        if result.kind == Kind.ImplErrorResult:
            if has_error_result:
                return False
            has_error_result = True
        cursor.add_child(parent, result)
    return True

@_nested
def _demangle_impl_function_type(cursor):
    # impl-function-type ::= impl-callee-convention impl-function-attribute*
    #                        generics? '_' impl-parameter* '_' impl-result* '_'
    type_ = cursor.create(Kind.ImplFunctionType)

    if not _demangle_impl_callee_convention(cursor, type_):
        return None

    if cursor.accept('C'):
        attr = _IMPL_FUNCTION_ATTRIBUTES.get(cursor.next())
        if attr is None:
            return None
        cursor.add_child(type_, cursor.create(Kind.ImplFunctionAttribute, attr))

    generics = None
    if cursor.accept('G'):
        generics = _demangle_generic_signature(cursor, False)
        if generics is None:
            return None
    elif cursor.accept('g'):
        generics = _demangle_generic_signature(cursor, True)
        if generics is None:
            return None
    if generics is not None:
        cursor.add_child(type_, generics)

    if not cursor.accept('_'):
        return None
    if not _demangle_impl_parameters(cursor, type_):
        return None
    if not _demangle_impl_results(cursor, type_):
        return None
    return type_


# specializations

def _create_param_kind(cursor, kind):
    return cursor.create(Kind.FunctionSignatureSpecializationParamKind, index=kind)

def _create_param_payload(cursor, payload):
    return cursor.create(Kind.FunctionSignatureSpecializationParamPayload, payload)

def _demangle_specialization_pass_id(cursor):
    c = cursor.peek()
    if not _is_digit(c):
        return None
    cursor.next()
    return cursor.create(Kind.SpecializationPassID, index=ord(c) - ord('0'))

def _demangle_generic_specialization(cursor, specialization):
    while not cursor.accept('_'):
        param = cursor.create(Kind.GenericSpecializationParam)
        type_ = _demangle_type(cursor)
        if type_ is None:
            return None
        cursor.add_child(param, type_)

        # conformances up to the '_' that closes this parameter
        while not cursor.accept('_'):
            conformance = _demangle_protocol_conformance(cursor)
            if conformance is None:
                return None
            cursor.add_child(param, conformance)

        cursor.add_child(specialization, param)
    return specialization

def _demangle_constant_prop_literal(cursor, parent, kind):
    literal, found = cursor.read_until('_')
    if not found or not cursor.accept('_'):
        return False
    cursor.add_child(parent, _create_param_kind(cursor, kind))
    cursor.add_child(parent, _create_param_payload(cursor, to_text(literal)))
    return True

def _demangle_constant_prop_name(cursor, parent, kind):
    name = _demangle_identifier(cursor)
    if name is None or not cursor.accept('_'):
        return False
    cursor.add_child(parent, _create_param_kind(cursor, kind))
    cursor.add_child(parent, _create_param_payload(cursor, name.text))
    return True

def _demangle_func_sig_specialization_constant_prop(cursor, parent):
    if cursor.accept('fr'):
        return _demangle_constant_prop_name(
            cursor, parent, FunctionSigSpecializationParamKind.ConstantPropFunction)
    if cursor.accept('g'):
        return _demangle_constant_prop_name(
            cursor, parent, FunctionSigSpecializationParamKind.ConstantPropGlobal)
    if cursor.accept('i'):
        return _demangle_constant_prop_literal(
            cursor, parent, FunctionSigSpecializationParamKind.ConstantPropInteger)
    if cursor.accept('fl'):
        return _demangle_constant_prop_literal(
            cursor, parent, FunctionSigSpecializationParamKind.ConstantPropFloat)

    if cursor.accept('s'):
        # 'se' encoding 'v' identifier, encoding is 0 (utf8) or 1 (utf16)
        if not cursor.accept('e'):
            return False
        if cursor.accept('0'):
            encoding = 'u8'
        elif cursor.accept('1'):
            encoding = 'u16'
        else:
            return False
        if not cursor.accept('v'):
            return False
        literal = _demangle_identifier(cursor)
        if literal is None or not cursor.accept('_'):
            return False
        cursor.add_child(parent, _create_param_kind(
            cursor, FunctionSigSpecializationParamKind.ConstantPropString))
        cursor.add_child(parent, _create_param_payload(cursor, encoding))
        cursor.add_child(parent, _create_param_payload(cursor, literal.text))
        return True

    return False

def _demangle_func_sig_specialization_closure_prop(cursor, parent):
    # the closure is only named, its types are kept as far as they parse.
    name = _demangle_identifier(cursor)
    if name is None:
        return False
    cursor.add_child(parent, _create_param_kind(
        cursor, FunctionSigSpecializationParamKind.ClosureProp))
    cursor.add_child(parent, _create_param_payload(cursor, name.text))

    while cursor.peek() != '_':
        type_ = _demangle_type(cursor)
        if type_ is None:
            break
        cursor.add_child(parent, type_)

    return cursor.accept('_')


_FUNC_SIG_OPTIONS = (
    ('d', FunctionSigSpecializationParamKind.Dead),
    ('g', FunctionSigSpecializationParamKind.OwnedToGuaranteed),
    ('o', FunctionSigSpecializationParamKind.GuaranteedToOwned),
    ('s', FunctionSigSpecializationParamKind.SROA),
)

def _demangle_function_signature_specialization(cursor, specialization):
    param_count = 0
    while not cursor.accept('_'):
        param = cursor.create(Kind.FunctionSignatureSpecializationParam, index=param_count)

        if cursor.accept('n_'):
            # unchanged parameter
            pass
        elif cursor.accept('cp'):
            if not _demangle_func_sig_specialization_constant_prop(cursor, param):
                return None
        elif cursor.accept('cl'):
            if not _demangle_func_sig_specialization_closure_prop(cursor, param):
                return None
        elif cursor.accept('i_'):
            cursor.add_child(param, _create_param_kind(
                cursor, FunctionSigSpecializationParamKind.BoxToValue))
        elif cursor.accept('k_'):
            cursor.add_child(param, _create_param_kind(
                cursor, FunctionSigSpecializationParamKind.BoxToStack))
        else:
            value = 0
            for code, flag in _FUNC_SIG_OPTIONS:
                if cursor.accept(code):
                    value |= flag
            if not cursor.accept('_') or not value:
                return None
            cursor.add_child(param, _create_param_kind(cursor, value))

        cursor.add_child(specialization, param)
        param_count += 1
    return specialization

def _demangle_specialized_attribute(cursor):
    c = cursor.peek()
    if c in ('g', 'r'):
        cursor.next()
        if c == 'g':
            specialization = cursor.create(Kind.GenericSpecialization)
        else:
            specialization = cursor.create(Kind.GenericSpecializationNotReAbstracted)
        if cursor.accept('q'):
            cursor.add_child(specialization, cursor.create(Kind.IsSerialized))
        pass_id = _demangle_specialization_pass_id(cursor)
        if pass_id is None:
            return None
        cursor.add_child(specialization, pass_id)
        return _demangle_generic_specialization(cursor, specialization)

    if cursor.accept('f'):
        specialization = cursor.create(Kind.FunctionSignatureSpecialization)
        if cursor.accept('q'):
            cursor.add_child(specialization, cursor.create(Kind.IsSerialized))
        pass_id = _demangle_specialization_pass_id(cursor)
        if pass_id is None:
            return None
        cursor.add_child(specialization, pass_id)
        return _demangle_function_signature_specialization(cursor, specialization)

    return None


# globals

def _demangle_directness(cursor):
    if cursor.accept('d'):
        return Directness.Direct
    if cursor.accept('i'):
        return Directness.Indirect
    return None

def _demangle_value_witness_kind(cursor):
    code = cursor.advance(2)
    if code is None or code not in VALUE_WITNESS_CODES:
        return None
    return VALUE_WITNESS_CODES.index(code)

def _demangle_reabstract_signature(cursor, signature):
    if cursor.accept('G'):
        generics = _demangle_generic_signature(cursor)
        if generics is None:
            return False
        cursor.add_child(signature, generics)

    src_type = _demangle_type(cursor)
    if src_type is None:
        return False
    cursor.add_child(signature, src_type)

    dest_type = _demangle_type(cursor)
    if dest_type is None:
        return False
    cursor.add_child(signature, dest_type)
    return True

def _demangle_children(cursor, kind, productions):
    node = cursor.create(kind)
    for production in productions:
        child = production(cursor)
        if child is None:
            return None
        cursor.add_child(node, child)
    return node


_METADATA_GLOBALS = {
    'P': Kind.GenericTypeMetadataPattern,
    'a': Kind.TypeMetadataAccessFunction,
    'L': Kind.TypeMetadataLazyCache,
    'm': Kind.Metaclass,
    'n': Kind.NominalTypeDescriptor,
    'f': Kind.FullTypeMetadata,
}

_WITNESS_GLOBALS = {
    'V': (Kind.ValueWitnessTable, (_demangle_type,)),
    'P': (Kind.ProtocolWitnessTable, (_demangle_protocol_conformance,)),
    'G': (Kind.GenericProtocolWitnessTable, (_demangle_protocol_conformance,)),
    'I': (Kind.GenericProtocolWitnessTableInstantiationFunction,
          (_demangle_protocol_conformance,)),
    'l': (Kind.LazyProtocolWitnessTableAccessor,
          (_demangle_type, _demangle_protocol_conformance)),
    'L': (Kind.LazyProtocolWitnessTableCacheVariable,
          (_demangle_type, _demangle_protocol_conformance)),
    'a': (Kind.ProtocolWitnessTableAccessor, (_demangle_protocol_conformance,)),
    't': (Kind.AssociatedTypeMetadataAccessor,
          (_demangle_protocol_conformance, _demangle_decl_name)),
    'T': (Kind.AssociatedTypeWitnessTableAccessor,
          (_demangle_protocol_conformance, _demangle_decl_name, _demangle_protocol_name)),
}

def _demangle_metadata_global(cursor):
    """ the 'M' has already been consumed """
    kind = _METADATA_GLOBALS.get(cursor.peek())
    if kind is not None:
        cursor.next()
        return _demangle_children(cursor, kind, (_demangle_type,))
    if cursor.accept('p'):
        return _demangle_children(cursor, Kind.ProtocolDescriptor, (_demangle_protocol_name,))
    return _demangle_children(cursor, Kind.TypeMetadata, (_demangle_type,))

def _demangle_witness_global(cursor):
    """ the 'W' has already been consumed """
    if cursor.accept('v'):
        directness = _demangle_directness(cursor)
        if directness is None:
            return None
        field_offset = cursor.create(Kind.FieldOffset)
        cursor.add_child(field_offset, cursor.create(Kind.Directness, index=directness))
        entity = _demangle_entity(cursor)
        if entity is None:
            return None
        cursor.add_child(field_offset, entity)
        return field_offset

    witness = _WITNESS_GLOBALS.get(cursor.peek())
    if witness is None:
        return None
    cursor.next()
    return _demangle_children(cursor, *witness)

def _demangle_thunk_global(cursor):
    """ the 'T' has already been consumed """
    if cursor.accept('R'):
        thunk = cursor.create(Kind.ReabstractionThunkHelper)
        if not _demangle_reabstract_signature(cursor, thunk):
            return None
        return thunk
    if cursor.accept('r'):
        thunk = cursor.create(Kind.ReabstractionThunk)
        if not _demangle_reabstract_signature(cursor, thunk):
            return None
        return thunk
    if cursor.accept('W'):
        # the entity is mangled in its own generic context
        return _demangle_children(
            cursor, Kind.ProtocolWitness, (_demangle_protocol_conformance, _demangle_entity))
    return None

@_nested
def _demangle_global(cursor):
    if cursor.at_end():
        return None

    # type metadata
    if cursor.accept('M'):
        return _demangle_metadata_global(cursor)

    # partial application thunks
    if cursor.accept('PA'):
        if cursor.accept('o'):
            forwarder = cursor.create(Kind.PartialApplyObjCForwarder)
        else:
            forwarder = cursor.create(Kind.PartialApplyForwarder)
        if cursor.accept('__T'):
            global_ = _demangle_global(cursor)
            if global_ is None:
                return None
            cursor.add_child(forwarder, global_)
        return forwarder

    # top-level types, for various consumers
    if cursor.accept('t'):
        return _demangle_children(cursor, Kind.TypeMangling, (_demangle_type,))

    # value witnesses
    if cursor.accept('w'):
        witness_kind = _demangle_value_witness_kind(cursor)
        if witness_kind is None:
            return None
        witness = cursor.create(Kind.ValueWitness, index=witness_kind)
        type_ = _demangle_type(cursor)
        if type_ is None:
            return None
        cursor.add_child(witness, type_)
        return witness

    # offsets, value witness tables, and protocol witnesses
    if cursor.accept('W'):
        return _demangle_witness_global(cursor)

    # other thunks
    if cursor.accept('T'):
        return _demangle_thunk_global(cursor)

    # everything else is just an entity
    return _demangle_entity(cursor)


_THUNK_ATTRIBUTES = (
    ('To', Kind.ObjCAttribute),
    ('TO', Kind.NonObjCAttribute),
    ('TD', Kind.DynamicAttribute),
    ('Td', Kind.DirectMethodReferenceAttribute),
    ('TV', Kind.VTableAttribute),
)

def _demangle_top_level(cursor):
    if not cursor.accept('_T'):
        return None

    top_level = cursor.create(Kind.Global)

    # specialization prefixes, each with its own substitutions
    if cursor.accept('TS'):
        while True:
            attr = _demangle_specialized_attribute(cursor)
            if attr is None:
                return None
            cursor.add_child(top_level, attr)
            cursor.reset_substs()
            if not cursor.accept('_TTS'):
                break

        if not cursor.accept('_T'):
            return None
    else:
        for prefix, kind in _THUNK_ATTRIBUTES:
            if cursor.accept(prefix):
                cursor.add_child(top_level, cursor.create(kind))
                break

    global_ = _demangle_global(cursor)
    if global_ is None:
        return None
    cursor.add_child(top_level, global_)

    # tolerate trailing garbage as a suffix
    if not cursor.at_end():
        cursor.add_child(top_level, cursor.create(Kind.Suffix, to_text(cursor.rest())))

    return top_level


def _run(mangled, production):
    cursor = _Cursor(mangled)
    try:
        ast = production(cursor)
    except DepthExceeded:
        return None
    if ast is None:
        log.debug('cannot demangle %s' % TextShort(mangled))
    return ast

def demangle_symbol(mangled):
    """ demangle a complete `_T` symbol, returns the Global node or None """
    return _run(mangled, _demangle_top_level)

def demangle_type_name(mangled):
    """ demangle a bare type mangling (no `_T` prefix), returns a Type node or None """
    return _run(mangled, _demangle_type)
