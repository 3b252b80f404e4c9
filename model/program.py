"""
Candidate program: statements, optional return expression and scope bookkeeping.

Every variable belongs to exactly one scope map:

- ``variables``: parameters and fields, fixed at creation
- ``local_vars``: locals declared at the top of the method body
- ``loop_vars``: loop counters declared outside any loop header
- ``loop_vars_declared_in_loop``: counters declared in their loop's header
- ``elem_vars``: foreach element variables

and is also listed in ``in_scope``, the set fresh names are checked against.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Set

from settings import SETTINGS

from .ast_types import INT, VOID, default_value, simple_type_name
from .errors import ScopeError
from .expressions import Expression
from .statements import Statement

LOOP_VAR_NAMES = ["i", "j", "k", "m", "n"]


class Program:
    def __init__(self, name: str, return_type: str = VOID, variables: Optional[Dict[str, str]] = None) -> None:
        self.name = name
        self.return_type = return_type
        self.variables: Dict[str, str] = dict(variables or {})
        self.statements: List[Statement] = []
        self.return_val: Optional[Expression] = None

        self.local_vars: Dict[str, str] = {}
        self.loop_vars: Set[str] = set()
        self.loop_vars_declared_in_loop: Set[str] = set()
        self.elem_vars: Dict[str, str] = {}
        self.in_scope: Set[str] = set(self.variables)
        self.type_to_vars: Dict[str, List[str]] = defaultdict(list)
        self.rebuild_type_index()

    @property
    def returns(self) -> bool:
        return self.return_val is not None

    # -----------------------------
    # Scope bookkeeping
    # -----------------------------

    def all_variables(self) -> Dict[str, str]:
        """Every declared variable with its type"""
        result = dict(self.variables)
        result.update(self.local_vars)
        for name in self.loop_vars | self.loop_vars_declared_in_loop:
            result[name] = INT
        result.update(self.elem_vars)
        return result

    def is_declared(self, name: str) -> bool:
        return (
            name in self.variables
            or name in self.local_vars
            or name in self.loop_vars
            or name in self.loop_vars_declared_in_loop
            or name in self.elem_vars
            or name in self.in_scope
        )

    def variable_type(self, name: str) -> Optional[str]:
        return self.all_variables().get(name)

    def _declare(self, name: str, type_name: str) -> None:
        if self.is_declared(name):
            raise ScopeError(f"Variable {name} is already declared in {self.name}")
        self.in_scope.add(name)
        self.type_to_vars[type_name].append(name)

    def add_local_var(self, name: str, type_name: str) -> None:
        self._declare(name, type_name)
        self.local_vars[name] = type_name

    def add_loop_var(self, name: str, declared_in_loop: bool = True) -> None:
        self._declare(name, INT)
        if declared_in_loop:
            self.loop_vars_declared_in_loop.add(name)
        else:
            self.loop_vars.add(name)

    def add_elem_var(self, name: str, type_name: str) -> None:
        self._declare(name, type_name)
        self.elem_vars[name] = type_name

    def add_to_scope(self, name: str) -> None:
        self.in_scope.add(name)

    def remove_from_scope(self, name: str) -> None:
        self.in_scope.discard(name)

    def vars_of_type(self, type_name: str) -> List[str]:
        return list(self.type_to_vars.get(type_name, []))

    def rebuild_type_index(self) -> None:
        """Recompute ``type_to_vars`` from the scope maps."""
        self.type_to_vars = defaultdict(list)
        for name, type_name in self.all_variables().items():
            self.type_to_vars[type_name].append(name)

    def _fresh(self, candidates: List[str]) -> str:
        for name in candidates:
            if not self.is_declared(name):
                return name
        suffix = 1
        while True:
            for base in candidates:
                name = f"{base}{suffix}"
                if not self.is_declared(name):
                    return name
            suffix += 1

    def fresh_local_var(self) -> str:
        n = len(self.local_vars)
        while self.is_declared(f"var{n}"):
            n += 1
        return f"var{n}"

    def fresh_loop_var(self) -> str:
        return self._fresh(LOOP_VAR_NAMES)

    def fresh_elem_var(self) -> str:
        return self._fresh(["elem"])

    # -----------------------------
    # Structure
    # -----------------------------

    def add_statement(self, statement: Statement) -> None:
        self.statements.append(statement)

    def set_return_val(self, expr: Optional[Expression]) -> None:
        self.return_val = expr

    def clone(self) -> "Program":
        copy = Program(self.name, self.return_type, self.variables)
        copy.statements = [s.clone() for s in self.statements]
        copy.return_val = self.return_val.clone() if self.return_val is not None else None
        copy.local_vars = dict(self.local_vars)
        copy.loop_vars = set(self.loop_vars)
        copy.loop_vars_declared_in_loop = set(self.loop_vars_declared_in_loop)
        copy.elem_vars = dict(self.elem_vars)
        copy.in_scope = set(self.in_scope)
        copy.rebuild_type_index()
        return copy

    def _type_name(self, type_name: str) -> str:
        return simple_type_name(type_name) if SETTINGS.use_simple_name else type_name

    def to_java(self) -> str:
        params = ", ".join(f"{self._type_name(t)} {n}" for n, t in self.variables.items())
        lines = [f"public static {self._type_name(self.return_type)} {self.name}({params}) {{\n"]
        for name, type_name in self.local_vars.items():
            lines.append(f"    {self._type_name(type_name)} {name} = {default_value(type_name)};\n")
        for name in sorted(self.loop_vars):
            lines.append(f"    int {name} = 0;\n")
        for s in self.statements:
            lines.append(s.to_java())
        if self.return_val is not None:
            lines.append(f"    return {self.return_val.to_java()};\n")
        lines.append("}\n")
        return "".join(lines)

    def encode(self) -> str:
        out: List[str] = ["P"]
        for name in sorted(self.local_vars):
            out.append(f"{name}:{self.local_vars[name]};")
        for name in sorted(self.loop_vars):
            out.append(f"{name};")
        out.append("{")
        for s in self.statements:
            s.write_encoding(out)
        out.append("}")
        if self.return_val is not None:
            out.append("R")
            self.return_val.write_encoding(out)
        return "".join(out)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Program):
            return NotImplemented
        return self.encode() == other.encode()

    def __hash__(self) -> int:
        return hash(self.encode())

    def __repr__(self) -> str:
        return f"Program({self.name}, {len(self.statements)} statements)"
