# Structural algorithms over programs, statements and expressions.

import logging
import random
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

import numpy as np

from settings import SETTINGS
from model.errors import UnknownNodeError
from model.expressions import Expression, Func, Literal, Op, Var
from model.program import Program
from model.statements import (
    AngelicCondition,
    Condition,
    ConcreteCondition,
    ForEachLoop,
    ForLoop,
    FuncStatement,
    IfStatement,
    Statement,
    VarAssignment,
)
from utils.time_logger import TIME_LOGGER

log = logging.getLogger(__name__)

Node = Union[Expression, Statement]


def _concrete(cond: Condition) -> Optional[Expression]:
    """The test expression, or None while the condition is angelic"""
    if isinstance(cond, ConcreteCondition):
        return cond.expr
    if isinstance(cond, AngelicCondition):
        return None
    raise UnknownNodeError(cond, "_concrete")


def _remembered(cond: Condition) -> Optional[Expression]:
    if isinstance(cond, AngelicCondition):
        return cond.remembered
    return None


def _body(s: Statement) -> List[Statement]:
    if isinstance(s, (IfStatement, ForLoop, ForEachLoop)):
        return s.body
    if isinstance(s, (VarAssignment, FuncStatement)):
        return []
    raise UnknownNodeError(s, "_body")


# -----------------------------
# Traversal
# -----------------------------


def sub_expressions(expr: Expression) -> List[Expression]:
    """All strict descendants of ``expr`` in pre-order (callee before arguments)."""
    result: List[Expression] = []
    _collect_expressions(expr, result)
    return result[1:]


def _collect_expressions(expr: Expression, result: List[Expression]) -> None:
    result.append(expr)
    if isinstance(expr, Func):
        if expr.callee is not None:
            _collect_expressions(expr.callee, result)
        for arg in expr.args:
            _collect_expressions(arg, result)
    elif isinstance(expr, Op):
        if expr.left is not None:
            _collect_expressions(expr.left, result)
        _collect_expressions(expr.right, result)
    elif isinstance(expr, (Var, Literal)):
        pass
    else:
        raise UnknownNodeError(expr, "sub_expressions")


def sub_statements(stmt: Statement) -> List[Statement]:
    """All statements nested in ``stmt``'s bodies, in pre-order."""
    result: List[Statement] = []
    _collect_statements(stmt, result)
    return result[1:]


def _collect_statements(stmt: Statement, result: List[Statement]) -> None:
    result.append(stmt)
    for inner in _body(stmt):
        _collect_statements(inner, result)


def fragments(program: Program) -> Tuple[List[Statement], List[Expression]]:
    """Every statement and every harvestable expression of ``program``.

    Expressions come from assignment values, call statements and the return
    value. Foreach containers are not harvested: on their own they can be
    ill-typed (e.g. ``map.keySet()``).
    """
    statements: List[Statement] = []
    expressions: List[Expression] = []
    for s in program.statements:
        _statement_fragments(s, statements, expressions)
    if program.returns:
        _collect_expressions(program.return_val, expressions)
    return statements, expressions


def _statement_fragments(s: Statement, statements: List[Statement], expressions: List[Expression]) -> None:
    statements.append(s)
    if isinstance(s, VarAssignment):
        _collect_expressions(s.value, expressions)
    elif isinstance(s, FuncStatement):
        _collect_expressions(s.func, expressions)
    elif isinstance(s, (IfStatement, ForLoop, ForEachLoop)):
        for inner in s.body:
            _statement_fragments(inner, statements, expressions)
    else:
        raise UnknownNodeError(s, "fragments")


# -----------------------------
# Variables
# -----------------------------


def used_vars(program: Program, include_loop_counters: bool = True) -> Set[str]:
    """Names of the variables referenced by ``program``.

    With ``include_loop_counters`` a for loop's counter counts as used even if
    nothing reads it. Angelic tests reference nothing.
    """
    result: Set[str] = set()
    for s in program.statements:
        used_vars_in_statement(s, result, include_loop_counters)
    if program.returns:
        used_vars_in_expression(program.return_val, result)
    return result


def used_vars_in_statement(s: Statement, result: Set[str], include_loop_counters: bool = True) -> None:
    if isinstance(s, VarAssignment):
        used_vars_in_expression(s.var, result)
        used_vars_in_expression(s.value, result)
    elif isinstance(s, FuncStatement):
        used_vars_in_expression(s.func, result)
    elif isinstance(s, IfStatement):
        cond = _concrete(s.condition)
        if cond is not None:
            used_vars_in_expression(cond, result)
        for inner in s.body:
            used_vars_in_statement(inner, result, include_loop_counters)
    elif isinstance(s, ForLoop):
        cond = _concrete(s.condition)
        if cond is not None:
            used_vars_in_expression(cond, result)
        for inner in s.body:
            used_vars_in_statement(inner, result, include_loop_counters)
        if include_loop_counters and not s.is_while_loop:
            result.add(s.var_name)
    elif isinstance(s, ForEachLoop):
        used_vars_in_expression(s.container, result)
        for inner in s.body:
            used_vars_in_statement(inner, result, include_loop_counters)
        result.add(s.var_name)
    else:
        raise UnknownNodeError(s, "used_vars")


def used_vars_in_expression(e: Expression, result: Set[str]) -> None:
    if isinstance(e, Literal):
        pass
    elif isinstance(e, Var):
        result.add(e.name)
    elif isinstance(e, Func):
        if e.callee is not None:
            used_vars_in_expression(e.callee, result)
        for arg in e.args:
            used_vars_in_expression(arg, result)
    elif isinstance(e, Op):
        if e.left is not None:
            used_vars_in_expression(e.left, result)
        used_vars_in_expression(e.right, result)
    else:
        raise UnknownNodeError(e, "used_vars")


def contains_var(e: Expression) -> bool:
    """False for expressions computed from literals only"""
    if isinstance(e, Literal):
        return False
    if isinstance(e, Var):
        return True
    if isinstance(e, Func):
        if e.callee is not None and contains_var(e.callee):
            return True
        return any(contains_var(arg) for arg in e.args)
    if isinstance(e, Op):
        if e.left is not None and contains_var(e.left):
            return True
        return contains_var(e.right)
    raise UnknownNodeError(e, "contains_var")


# -----------------------------
# Size
# -----------------------------


def size(node: Union[Program, Statement, Expression]) -> int:
    """Structural weight used to normalize usefulness and bound the search."""
    if isinstance(node, Program):
        # Locals start at their default value; only the declaration counts
        total = len(node.local_vars)
        for s in node.statements:
            total += size(s)
        if node.returns:
            total += size(node.return_val)
        return total
    if isinstance(node, Statement):
        return _statement_size(node)
    if isinstance(node, Expression):
        return _expression_size(node)
    raise UnknownNodeError(node, "size")


def _statement_size(s: Statement) -> int:
    if isinstance(s, VarAssignment):
        return 2 + _expression_size(s.value)  # variable name and '='
    if isinstance(s, FuncStatement):
        return _expression_size(s.func)
    if isinstance(s, (IfStatement, ForLoop)):
        total = 1
        cond = _concrete(s.condition)
        if cond is not None:
            total += _expression_size(cond)
        return total + sum(_statement_size(b) for b in s.body)
    if isinstance(s, ForEachLoop):
        return 1 + _expression_size(s.container) + sum(_statement_size(b) for b in s.body)
    raise UnknownNodeError(s, "size")


def _expression_size(e: Expression) -> int:
    if isinstance(e, (Literal, Var)):
        return 1
    if isinstance(e, Op):
        return 1 + (_expression_size(e.left) if e.left is not None else 0) + _expression_size(e.right)
    if isinstance(e, Func):
        total = 1
        if e.callee is not None:
            total += _expression_size(e.callee)
        return total + sum(_expression_size(a) for a in e.args)
    raise UnknownNodeError(e, "size")


# -----------------------------
# Usefulness
# -----------------------------


def compute_usefulness(fragment: Node, program: Program) -> float:
    """Largest fraction of ``fragment``'s weight reproduced positionally inside ``program``."""
    best = 0
    if isinstance(fragment, Statement):
        for s in program.statements:
            best = max(best, _search_statement(fragment, s))
    elif isinstance(fragment, Expression):
        for s in program.statements:
            best = max(best, _search_expression_in_statement(fragment, s))
        if program.returns:
            best = max(best, _search_expression(fragment, program.return_val))
    else:
        raise UnknownNodeError(fragment, "compute_usefulness")
    return best / float(size(fragment))


def mean_usefulness(fragments: Sequence[Node], program: Program) -> float:
    """Average usefulness of a fragment corpus against a newly found program."""
    if not fragments:
        return 0.0
    with TIME_LOGGER.timer("Fragment usefulness"):
        if SETTINGS.verbose > 2:
            log.info(f"Computing usefulness to program:\n{program.to_java()}")
        scores = []
        for fragment in fragments:
            usefulness = compute_usefulness(fragment, program)
            if SETTINGS.verbose > 2:
                kind = "Statement" if isinstance(fragment, Statement) else "Expression"
                log.info(f"Fragment {kind}: {fragment.to_java().strip()}, usefulness: {usefulness}")
            scores.append(usefulness)
    return float(np.mean(scores))


def _search_statement(fragment: Statement, s: Statement) -> int:
    best = _count_statement(fragment, s)
    for inner in _body(s):
        best = max(best, _search_statement(fragment, inner))
    return best


def _search_expression_in_statement(fragment: Expression, s: Statement) -> int:
    if isinstance(s, VarAssignment):
        return max(_search_expression(fragment, s.var), _search_expression(fragment, s.value))
    if isinstance(s, FuncStatement):
        return _search_expression(fragment, s.func)
    if isinstance(s, (IfStatement, ForLoop)):
        best = 0
        cond = _concrete(s.condition)
        if cond is not None:
            best = _search_expression(fragment, cond)
    elif isinstance(s, ForEachLoop):
        best = _search_expression(fragment, s.container)
    else:
        raise UnknownNodeError(s, "search_match")
    for inner in s.body:
        best = max(best, _search_expression_in_statement(fragment, inner))
    return best


def _search_expression(fragment: Expression, e: Expression) -> int:
    best = _count_expression(fragment, e)
    if isinstance(e, (Literal, Var)):
        pass
    elif isinstance(e, Func):
        if e.callee is not None:
            best = max(best, _search_expression(fragment, e.callee))
        for arg in e.args:
            best = max(best, _search_expression(fragment, arg))
    elif isinstance(e, Op):
        if e.left is not None:
            best = max(best, _search_expression(fragment, e.left))
        best = max(best, _search_expression(fragment, e.right))
    else:
        raise UnknownNodeError(e, "search_match")
    return best


def _count_bodies(fragment_body: List[Statement], body: List[Statement]) -> int:
    return sum(_count_statement(fp, fs) for fp, fs in zip(fragment_body, body))


def _count_conditions(fragment: Condition, cond: Condition) -> int:
    fp = _concrete(fragment)
    fs = _concrete(cond)
    if fp is None or fs is None:
        return 0
    return _count_expression(fp, fs)


def _count_statement(fragment: Statement, s: Statement) -> int:
    if type(fragment) is not type(s):
        return 0
    if isinstance(s, VarAssignment):
        return 1 + _count_expression(fragment.var, s.var) + _count_expression(fragment.value, s.value)
    if isinstance(s, FuncStatement):
        return _count_expression(fragment.func, s.func)
    if isinstance(s, (IfStatement, ForLoop)):
        return 1 + _count_conditions(fragment.condition, s.condition) + _count_bodies(fragment.body, s.body)
    if isinstance(s, ForEachLoop):
        return 1 + _count_expression(fragment.container, s.container) + _count_bodies(fragment.body, s.body)
    raise UnknownNodeError(s, "count_match")


def _count_expression(fragment: Expression, e: Expression) -> int:
    if type(fragment) is not type(e):
        return 0
    if isinstance(e, (Literal, Var)):
        return 1 if fragment.to_java() == e.to_java() else 0
    if isinstance(e, Func):
        if fragment.data != e.data:
            return 0
        total = 1
        if e.callee is not None and fragment.callee is not None:
            total += _count_expression(fragment.callee, e.callee)
        for fa, ea in zip(fragment.args, e.args):
            total += _count_expression(fa, ea)
        return total
    if isinstance(e, Op):
        if fragment.operator != e.operator:
            return 0
        total = 1
        if e.left is not None and fragment.left is not None:
            total += _count_expression(fragment.left, e.left)
        return total + _count_expression(fragment.right, e.right)
    raise UnknownNodeError(e, "count_match")


# -----------------------------
# Renaming
# -----------------------------


def _rename_keys(mapping: Dict[str, str], rename_map: Dict[str, str]) -> Dict[str, str]:
    return {rename_map.get(name, name): value for name, value in mapping.items()}


def _rename_set(names: Set[str], rename_map: Dict[str, str]) -> Set[str]:
    return {rename_map.get(name, name) for name in names}


def substitute(node: Union[Program, Statement, Expression], rename_map: Dict[str, str]) -> None:
    """Apply ``rename_map`` to every variable occurrence and binder under ``node``.

    For a program the scope maps are renamed too; ``type_to_vars`` is left
    alone and must be rebuilt by whoever needs it.
    """
    if isinstance(node, Program):
        node.variables = _rename_keys(node.variables, rename_map)
        node.local_vars = _rename_keys(node.local_vars, rename_map)
        node.loop_vars = _rename_set(node.loop_vars, rename_map)
        node.loop_vars_declared_in_loop = _rename_set(node.loop_vars_declared_in_loop, rename_map)
        node.elem_vars = _rename_keys(node.elem_vars, rename_map)
        node.in_scope = _rename_set(node.in_scope, rename_map)
        for s in node.statements:
            _substitute_statement(s, rename_map)
        if node.returns:
            _substitute_expression(node.return_val, rename_map)
    elif isinstance(node, Statement):
        _substitute_statement(node, rename_map)
    elif isinstance(node, Expression):
        _substitute_expression(node, rename_map)
    else:
        raise UnknownNodeError(node, "substitute")


def _substitute_condition(cond: Condition, rename_map: Dict[str, str]) -> None:
    expr = _concrete(cond)
    if expr is None:
        expr = _remembered(cond)
    if expr is not None:
        _substitute_expression(expr, rename_map)


def _substitute_statement(s: Statement, rename_map: Dict[str, str]) -> None:
    if isinstance(s, VarAssignment):
        _substitute_expression(s.var, rename_map)
        _substitute_expression(s.value, rename_map)
    elif isinstance(s, FuncStatement):
        _substitute_expression(s.func, rename_map)
    elif isinstance(s, ForLoop):
        if s.var_name in rename_map:
            s.var_name = rename_map[s.var_name]
        _substitute_condition(s.condition, rename_map)
        for inner in s.body:
            _substitute_statement(inner, rename_map)
    elif isinstance(s, IfStatement):
        _substitute_condition(s.condition, rename_map)
        for inner in s.body:
            _substitute_statement(inner, rename_map)
    elif isinstance(s, ForEachLoop):
        if s.var_name in rename_map:
            s.var_name = rename_map[s.var_name]
        for inner in s.body:
            _substitute_statement(inner, rename_map)
        _substitute_expression(s.container, rename_map)
    else:
        raise UnknownNodeError(s, "substitute")


def _substitute_expression(e: Expression, rename_map: Dict[str, str]) -> None:
    if isinstance(e, Literal):
        pass
    elif isinstance(e, Var):
        if e.name in rename_map:
            e.name = rename_map[e.name]
    elif isinstance(e, Func):
        if e.callee is not None:
            _substitute_expression(e.callee, rename_map)
        for arg in e.args:
            _substitute_expression(arg, rename_map)
    elif isinstance(e, Op):
        if e.left is not None:
            _substitute_expression(e.left, rename_map)
        _substitute_expression(e.right, rename_map)
    else:
        raise UnknownNodeError(e, "substitute")


def merge_compatible(
    fragment: Node, rename_map: Dict[str, str], program: Program, rng: Optional[random.Random] = None
) -> None:
    """Rebind ``fragment``'s variables into ``program``'s scope before splicing it in.

    ``fragment`` must already be a clone owned by the caller; it is renamed in
    place. ``rename_map`` is filled as original names are resolved so every
    occurrence of one name ends up with the same replacement.

    Free variables are only ever bound to the program's parameters and
    fields, or to a freshly declared local; loop counters and element
    variables of the target are out of scope at the splice point. A binder
    of the fragment itself maps to its (possibly fresh) name.
    """
    chooser = rng if rng is not None else random
    if isinstance(fragment, Statement):
        _merge_statement(fragment, rename_map, program, chooser)
    elif isinstance(fragment, Expression):
        _merge_expression(fragment, rename_map, program, chooser)
    else:
        raise UnknownNodeError(fragment, "merge_compatible")


def _merge_condition(cond: Condition, rename_map: Dict[str, str], program: Program, chooser) -> None:
    expr = _concrete(cond)
    if expr is None:
        expr = _remembered(cond)
    if expr is not None:
        _merge_expression(expr, rename_map, program, chooser)


def _merge_statement(s: Statement, rename_map: Dict[str, str], program: Program, chooser) -> None:
    if isinstance(s, VarAssignment):
        _merge_expression(s.var, rename_map, program, chooser)
        _merge_expression(s.value, rename_map, program, chooser)
    elif isinstance(s, FuncStatement):
        _merge_expression(s.func, rename_map, program, chooser)
    elif isinstance(s, ForLoop):
        if not s.is_while_loop:
            name = s.var_name
            if program.is_declared(name):
                replacement = program.fresh_loop_var()
                s.var_name = replacement
                program.add_loop_var(replacement, s.declared_in_loop)
                rename_map[name] = replacement
            else:
                program.add_loop_var(name, s.declared_in_loop)
                rename_map[name] = name
        _merge_condition(s.condition, rename_map, program, chooser)
        for inner in s.body:
            _merge_statement(inner, rename_map, program, chooser)
    elif isinstance(s, IfStatement):
        _merge_condition(s.condition, rename_map, program, chooser)
        for inner in s.body:
            _merge_statement(inner, rename_map, program, chooser)
    elif isinstance(s, ForEachLoop):
        name = s.var_name
        if program.is_declared(name):
            replacement = program.fresh_elem_var()
            s.var_name = replacement
            program.add_elem_var(replacement, s.var_type)
            rename_map[name] = replacement
        else:
            program.add_elem_var(name, s.var_type)
            rename_map[name] = name
        _merge_expression(s.container, rename_map, program, chooser)
        for inner in s.body:
            _merge_statement(inner, rename_map, program, chooser)
    else:
        raise UnknownNodeError(s, "merge_compatible")


def _merge_expression(e: Expression, rename_map: Dict[str, str], program: Program, chooser) -> None:
    if isinstance(e, Literal):
        pass
    elif isinstance(e, Var):
        _merge_var(e, rename_map, program, chooser)
    elif isinstance(e, Func):
        if e.callee is not None:
            _merge_expression(e.callee, rename_map, program, chooser)
        for arg in e.args:
            _merge_expression(arg, rename_map, program, chooser)
    elif isinstance(e, Op):
        if e.left is not None:
            _merge_expression(e.left, rename_map, program, chooser)
        _merge_expression(e.right, rename_map, program, chooser)
    else:
        raise UnknownNodeError(e, "merge_compatible")


def _merge_var(v: Var, rename_map: Dict[str, str], program: Program, chooser) -> None:
    name = v.name
    replacement = rename_map.get(name)
    if replacement is not None:
        v.name = replacement
        return
    # Only parameters and fields are visible everywhere in the body
    visible = program.variables
    if visible.get(name) == v.type:
        return
    same_type = [other for other, type_name in visible.items() if type_name == v.type]
    if same_type:
        replacement = chooser.choice(same_type)
    else:
        replacement = program.fresh_local_var()
        program.add_local_var(replacement, v.type)
    v.name = replacement
    rename_map[name] = replacement


# -----------------------------
# Angelic conditions and display
# -----------------------------


def angelic_count(program: Program) -> int:
    """Number of if statements and loops whose condition is still angelic."""
    return sum(_angelic_count(s) for s in program.statements)


def _angelic_count(s: Statement) -> int:
    if isinstance(s, (IfStatement, ForLoop)):
        own = 1 if s.condition.is_angelic else 0
        return own + sum(_angelic_count(b) for b in s.body)
    if isinstance(s, ForEachLoop):
        return sum(_angelic_count(b) for b in s.body)
    if isinstance(s, (VarAssignment, FuncStatement)):
        return 0
    raise UnknownNodeError(s, "angelic_count")


def reset_indents(program: Program) -> None:
    """Recompute display depth: top-level statements at 1, each body one deeper."""
    _reset_indents(program.statements, 1)


def _reset_indents(block: List[Statement], indent: int) -> None:
    for s in block:
        s.indent = indent
        _reset_indents(_body(s), indent + 1)
