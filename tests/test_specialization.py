# -*- coding: UTF-8 -*-

"""Tests for specialization attribute blocks."""

import pytest

from swdemangle import Kind, demangle_symbol
from swdemangle.fmt.demangler import FunctionSigSpecializationParamKind as ParamKind


FOO = '_TF4main3fooFT_T_'


def kinds(node):
    return [c.kind for c in node]


class TestGenericSpecialization:
    def test_single_param(self):
        tree = demangle_symbol('_TTSg5Si__' + FOO)
        assert kinds(tree) == [Kind.GenericSpecialization, Kind.Function]
        specialization = tree[0]
        assert kinds(specialization) == [Kind.SpecializationPassID, Kind.GenericSpecializationParam]
        assert specialization[0].index == 5
        assert kinds(specialization[1]) == [Kind.Type]

    def test_serialized(self):
        specialization = demangle_symbol('_TTSgq5Si__' + FOO)[0]
        assert kinds(specialization)[:2] == [Kind.IsSerialized, Kind.SpecializationPassID]

    def test_not_reabstracted(self):
        specialization = demangle_symbol('_TTSr5Si__' + FOO)[0]
        assert specialization.kind == Kind.GenericSpecializationNotReAbstracted

    def test_param_with_conformance(self):
        specialization = demangle_symbol('_TTSg5SiSis8Hashables__' + FOO)[0]
        param = specialization[1]
        assert kinds(param) == [Kind.Type, Kind.ProtocolConformance]

    def test_chained_blocks(self):
        tree = demangle_symbol('_TTSg5Si___TTSg5Sb__' + FOO)
        assert kinds(tree) == [Kind.GenericSpecialization,
                               Kind.GenericSpecialization, Kind.Function]

    def test_pass_id_must_be_digit(self):
        assert demangle_symbol('_TTSgxSi__' + FOO) is None

    def test_missing_global_marker(self):
        assert demangle_symbol('_TTSg5Si__F4main3fooFT_T_') is None

    def test_substitutions_reset_per_block(self):
        # the block registers 'main' and 'Foo', the global only 'main'
        assert demangle_symbol('_TTSg5V4main3Foo___TF4main3barFT_S_') is not None
        assert demangle_symbol('_TTSg5V4main3Foo___TF4main3barFT_S1_') is None


class TestFunctionSignatureSpecialization:
    def params(self, mangled):
        tree = demangle_symbol('_TTSf4' + mangled + '_' + FOO)
        assert tree is not None
        specialization = tree[0]
        assert specialization.kind == Kind.FunctionSignatureSpecialization
        assert specialization[0].kind == Kind.SpecializationPassID
        return specialization.children[1:]

    def test_unchanged_and_dead(self):
        unchanged, dead = self.params('n_d_')
        assert unchanged.index == 0
        assert len(unchanged) == 0
        assert dead.index == 1
        assert dead[0].kind == Kind.FunctionSignatureSpecializationParamKind
        assert dead[0].index == ParamKind.Dead

    def test_flag_set(self):
        param, = self.params('dgs_')
        assert param[0].index == ParamKind.Dead | ParamKind.OwnedToGuaranteed | ParamKind.SROA

    def test_guaranteed_to_owned(self):
        param, = self.params('o_')
        assert param[0].index == ParamKind.GuaranteedToOwned

    def test_box_params(self):
        to_value, to_stack = self.params('i_k_')
        assert to_value[0].index == ParamKind.BoxToValue
        assert to_stack[0].index == ParamKind.BoxToStack

    def test_constant_integer(self):
        param, = self.params('cpi42_')
        assert param[0].index == ParamKind.ConstantPropInteger
        assert param[1].kind == Kind.FunctionSignatureSpecializationParamPayload
        assert param[1].text == '42'

    def test_constant_float(self):
        param, = self.params('cpfl1.5_')
        assert param[0].index == ParamKind.ConstantPropFloat
        assert param[1].text == '1.5'

    def test_constant_function(self):
        param, = self.params('cpfr3bar_')
        assert param[0].index == ParamKind.ConstantPropFunction
        assert param[1].text == 'bar'

    def test_constant_global(self):
        param, = self.params('cpg3baz_')
        assert param[0].index == ParamKind.ConstantPropGlobal
        assert param[1].text == 'baz'

    @pytest.mark.parametrize('tag, encoding', [('0', 'u8'), ('1', 'u16')])
    def test_constant_string(self, tag, encoding):
        param, = self.params('cpse%sv5hello_' % tag)
        assert param[0].index == ParamKind.ConstantPropString
        assert [param[1].text, param[2].text] == [encoding, 'hello']

    def test_closure(self):
        param, = self.params('cl7closureSiSb_')
        assert param[0].index == ParamKind.ClosureProp
        assert param[1].text == 'closure'
        assert kinds(param)[2:] == [Kind.Type, Kind.Type]

    def test_unknown_string_encoding(self):
        assert demangle_symbol('_TTSf4cpse2v5hello__' + FOO) is None

    def test_empty_flag_set(self):
        assert demangle_symbol('_TTSf4x__' + FOO) is None
