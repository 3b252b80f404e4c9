"""
Tests for expression rendering, encoding, equality and cloning.
"""

import pytest

from settings import simple_names
from model.ast_types import BOOLEAN, OBJECT, STRING, OperatorType, Precedence
from model.errors import NonInstantiableSignatureError
from model.expressions import Func, Literal, Op, Var
from model.function_data import ComponentRecord, FunctionData, Kind


def _int(name):
    return Var(name, "int")


class TestLiteral:
    """Test literal text and type inference."""

    def test_inferred_types(self):
        assert Literal(None).type == OBJECT
        assert Literal(True).type == BOOLEAN
        assert Literal(3).type == "int"
        assert Literal(1.5).type == "double"
        assert Literal("s").type == STRING

    def test_text(self):
        assert Literal(None).to_java() == "null"
        assert Literal(False).to_java() == "false"
        assert Literal(42).to_java() == "42"
        assert Literal(3, "long").to_java() == "3L"
        assert Literal(2, "float").to_java() == "2.0f"
        assert Literal(1.5).to_java() == "1.5"
        assert Literal("x", "char").to_java() == "'x'"
        assert Literal('a"b\n').to_java() == '"a\\"b\\n"'

    def test_encoding_is_length_prefixed(self):
        assert Literal(5).encode() == "c1:5"
        assert Literal("ab").encode() == 'c4:"ab"'
        assert Literal(-12).encode() == "c3:-12"

    def test_negative_literal_precedence(self):
        assert Literal(-1).precedence == Precedence.UNARY
        assert Literal(1).precedence == Precedence.ATOM

    def test_uninferable(self):
        with pytest.raises(ValueError):
            Literal(object())


class TestOp:
    """Test operator typing and minimal parentheses."""

    def test_binary_rendering(self):
        a, b, c = _int("a"), _int("b"), _int("c")
        assert Op(OperatorType.MULT, Op(OperatorType.ADD, a, b), c).to_java() == "(a + b) * c"
        assert Op(OperatorType.ADD, a, Op(OperatorType.MULT, b, c)).to_java() == "a + b * c"
        assert Op(OperatorType.SUB, Op(OperatorType.SUB, a, b), c).to_java() == "a - b - c"
        assert Op(OperatorType.SUB, a, Op(OperatorType.SUB, b, c)).to_java() == "a - (b - c)"

    def test_unary_rendering(self):
        a, b = _int("a"), _int("b")
        assert Op(OperatorType.NOT, None, Op(OperatorType.LT, a, b)).to_java() == "!(a < b)"
        assert Op(OperatorType.NEG, None, a).to_java() == "-a"
        assert Op(OperatorType.NEG, None, Op(OperatorType.NEG, None, a)).to_java() == "-(-a)"
        assert Op(OperatorType.NEG, None, Literal(-3)).to_java() == "-(-3)"

    def test_encoding(self):
        assert Op(OperatorType.ADD, _int("a"), Literal(1)).encode() == "o+va;c1:1"
        assert Op(OperatorType.NEG, None, _int("a")).encode() == "onva;"
        assert Op(OperatorType.LTE, _int("a"), _int("b")).encode() == "olva;vb;"

    def test_result_types(self):
        assert Op(OperatorType.ADD, _int("a"), Var("d", "double")).type == "double"
        assert Op(OperatorType.ADD, Var("s", STRING), _int("a")).type == STRING
        assert Op(OperatorType.LT, _int("a"), _int("b")).type == BOOLEAN
        assert Op(OperatorType.NEG, None, Var("x", "long")).type == "long"

    def test_arity(self):
        with pytest.raises(ValueError):
            Op(OperatorType.NOT, _int("a"), _int("b"))
        with pytest.raises(ValueError):
            Op(OperatorType.ADD, None, _int("b"))


class TestFunc:
    """Test component uses."""

    def test_static_method(self, components):
        call = Func([_int("a"), _int("b")], None, components["max"])
        assert call.to_java() == "java.lang.Math.max(a, b)"
        with simple_names():
            assert call.to_java() == "Math.max(a, b)"
        assert call.type == "int"

    def test_instance_method(self, components):
        s = Var("s", STRING)
        assert Func([], s, components["length"]).to_java() == "s.length()"
        concat = Op(OperatorType.ADD, s, Var("t", STRING))
        assert Func([], concat, components["length"]).to_java() == "(s + t).length()"

    def test_constructor(self, components):
        new_sb = Func([], None, components["new_sb"])
        assert new_sb.to_java() == "new java.lang.StringBuilder()"
        assert new_sb.precedence == Precedence.NEW
        chained = Func([Literal(1)], new_sb, components["append"])
        with simple_names():
            assert chained.to_java() == "new StringBuilder().append(1)"

    def test_static_field(self, components):
        field = Func([], None, components["max_value"])
        assert field.to_java() == "java.lang.Integer.MAX_VALUE"
        with simple_names():
            assert field.to_java() == "Integer.MAX_VALUE"

    def test_array_operations(self, components):
        arr, i, x = Var("arr", "int[]"), _int("i"), _int("x")
        assert Func([arr, i], None, components["arr_get"]).to_java() == "arr[i]"
        assert Func([arr], None, components["arr_len"]).to_java() == "arr.length"
        assert Func([arr, i, x], None, components["arr_set"]).to_java() == "arr[i] = x"

    def test_array_target_binds_tighter_than_index(self, components):
        joined = Op(OperatorType.ADD, Var("a", "int[]"), Var("b", "int[]"))
        i, x = _int("i"), _int("x")
        assert Func([joined, i, x], None, components["arr_set"]).to_java() == "(a + b)[i] = x"
        assert Func([joined, i], None, components["arr_get"]).to_java() == "(a + b)[i]"

    def test_encoding(self, components):
        arr, i = Var("arr", "int[]"), _int("i")
        call = Func([_int("a"), _int("b")], None, components["max"])
        assert call.encode() == f"f{components['max'].encoding}:va;vb;"
        receiver = Func([i], Var("s", STRING), components["charAt"])
        assert receiver.encode() == f"f{components['charAt'].encoding}:vs;vi;"
        assert Func([arr, i], None, components["arr_get"]).encode() == "gvarr;vi;"
        assert Func([arr, i, _int("x")], None, components["arr_set"]).encode() == "svarr;vi;vx;"
        assert Func([arr], None, components["arr_len"]).encode() == "lvarr;"

    def test_argument_count(self, components):
        with pytest.raises(ValueError):
            Func([_int("a")], None, components["max"])

    def test_non_instantiable(self, table):
        record = ComponentRecord(
            kind=Kind.METHOD, declaring_type="java.util.ArrayList", name="subList",
            return_type="java.util.List<E>", arg_types=["int", "int"], type_params=["E"],
        )
        data = FunctionData.from_record(record, table, "java.lang.Integer")
        with pytest.raises(NonInstantiableSignatureError):
            Func([_int("a"), _int("b")], Var("list", "java.util.ArrayList"), data)

    def test_callee_setter(self, components):
        call = Func([], Var("s", STRING), components["length"])
        call.callee = Var("t", STRING)
        assert call.to_java() == "t.length()"


class TestEqualityAndClone:
    """Test structural equality and deep copies."""

    def test_equality_follows_encoding(self):
        assert _int("x") == _int("x")
        assert _int("x") != _int("y")
        assert Literal("x") != Var("x")
        assert Op(OperatorType.ADD, _int("a"), Literal(1)) == Op(OperatorType.ADD, _int("a"), Literal(1))
        assert len({_int("x"), _int("x"), Literal(1)}) == 2

    def test_clone_is_deep(self, components):
        original = Func([Op(OperatorType.ADD, _int("a"), Literal(1)), _int("b")], None, components["max"])
        copy = original.clone()
        assert copy == original
        assert copy is not original
        assert copy.data is original.data
        copy.args[1].name = "z"
        assert original.to_java() == "java.lang.Math.max(a + 1, b)"
        assert copy.to_java() == "java.lang.Math.max(a + 1, z)"
