import pytest

from settings import simple_names
from model.ast_types import OperatorType
from model.expressions import Func, Literal, Op, Var
from model.statements import (
    AngelicCondition,
    ConcreteCondition,
    ForEachLoop,
    ForLoop,
    FuncStatement,
    IfStatement,
    VarAssignment,
)


def _assign(name, value, indent=1):
    stmt = VarAssignment(Var(name, "int"), value)
    stmt.indent = indent
    return stmt


def _less(a, b):
    return Op(OperatorType.LT, Var(a, "int"), Var(b, "int"))


def test_var_assignment():
    stmt = _assign("x", Literal(1))
    assert stmt.to_java() == "    x = 1;\n"
    assert stmt.encode() == "avx;c1:1"


def test_func_statement(components):
    call = Func([Var("arr", "int[]"), Var("i", "int"), Literal(0)], None, components["arr_set"])
    stmt = FuncStatement(call)
    assert stmt.to_java() == "    arr[i] = 0;\n"
    assert stmt.encode() == "xsvarr;vi;c1:0"


def test_if_statement():
    stmt = IfStatement(ConcreteCondition(_less("a", "b")), [_assign("a", Var("b", "int"), indent=2)])
    assert stmt.to_java() == "    if (a < b) {\n        a = b;\n    }\n"
    assert stmt.encode() == "io<va;vb;{ava;vb;}"


def test_angelic_if():
    stmt = IfStatement(AngelicCondition())
    assert stmt.to_java() == "    if (?) {\n    }\n"
    assert stmt.encode() == "i?{}"
    assert stmt.condition.is_angelic


def test_remembered_condition_renders_but_does_not_encode():
    remembered = IfStatement(AngelicCondition(remembered=_less("a", "b")))
    assert remembered.to_java() == "    if (/* angelic */ a < b) {\n    }\n"
    assert remembered == IfStatement(AngelicCondition())


def test_for_loop():
    body = [_assign("s", Op(OperatorType.ADD, Var("s", "int"), Var("i", "int")), indent=2)]
    loop = ForLoop("i", ConcreteCondition(_less("i", "n")), body)
    assert loop.to_java() == "    for (int i = 0; i < n; i++) {\n        s = s + i;\n    }\n"
    assert loop.encode() == "ri;o<vi;vn;{avs;o+vs;vi;}"


def test_for_loop_counter_declared_outside():
    loop = ForLoop("i", AngelicCondition(), declared_in_loop=False)
    assert loop.to_java() == "    for (i = 0; ?; i++) {\n    }\n"


def test_while_loop():
    loop = ForLoop(None, AngelicCondition(), is_while_loop=True)
    assert loop.to_java() == "    while (?) {\n    }\n"
    assert loop.encode() == "w?{}"
    with pytest.raises(ValueError):
        ForLoop(None, AngelicCondition())


def test_foreach_loop():
    loop = ForEachLoop("x", "java.lang.Integer", Var("list", "java.util.List"))
    assert loop.to_java() == "    for (java.lang.Integer x : list) {\n    }\n"
    with simple_names():
        assert loop.to_java() == "    for (Integer x : list) {\n    }\n"
    assert loop.encode() == "ex;java.lang.Integer;vlist;{}"


def test_clone_keeps_indent_and_is_deep():
    inner = _assign("x", Literal(1), indent=3)
    outer = IfStatement(AngelicCondition(remembered=_less("a", "b")), [inner])
    outer.indent = 2
    copy = outer.clone()
    assert copy == outer
    assert copy.indent == 2
    assert copy.body[0].indent == 3
    copy.body[0].var.name = "y"
    copy.condition.remembered.left.name = "c"
    assert inner.var.name == "x"
    assert outer.condition.remembered.left.name == "a"


def test_statement_equality():
    assert _assign("x", Literal(1)) == _assign("x", Literal(1), indent=4)
    assert _assign("x", Literal(1)) != _assign("x", Literal(2))
    assert len({_assign("x", Literal(1)), _assign("x", Literal(1))}) == 1


def test_counter_declaration_site_is_not_encoded():
    inside = ForLoop("i", AngelicCondition())
    outside = ForLoop("i", AngelicCondition(), declared_in_loop=False)
    assert inside.to_java() != outside.to_java()
    # programs tell them apart through their declared loop counters
    assert inside == outside
    assert inside.encode() == outside.encode() == "ri;?{}"
