from abc import ABC, abstractmethod
from typing import List, Optional

from settings import SETTINGS

from .ast_types import simple_type_name
from .expressions import Expression, Func, Var

INDENT = "    "
ANGELIC_PLACEHOLDER = "?"


class Condition(ABC):
    """Test of an if statement or loop: either a concrete expression or angelic."""

    @property
    @abstractmethod
    def is_angelic(self) -> bool:
        ...

    @abstractmethod
    def write_java(self, out: List[str]) -> None:
        ...

    @abstractmethod
    def write_encoding(self, out: List[str]) -> None:
        ...

    @abstractmethod
    def clone(self) -> "Condition":
        ...


class ConcreteCondition(Condition):
    def __init__(self, expr: Expression) -> None:
        self.expr = expr

    @property
    def is_angelic(self) -> bool:
        return False

    def write_java(self, out: List[str]) -> None:
        self.expr.write_java(out)

    def write_encoding(self, out: List[str]) -> None:
        self.expr.write_encoding(out)

    def clone(self) -> "ConcreteCondition":
        return ConcreteCondition(self.expr.clone())

    def __repr__(self) -> str:
        return f"ConcreteCondition({self.expr.to_java()})"


class AngelicCondition(Condition):
    """Unresolved test, later bound by trial execution.

    ``remembered`` holds the expression the test was resolved to, if any.
    """

    def __init__(self, remembered: Optional[Expression] = None) -> None:
        self.remembered = remembered

    @property
    def is_angelic(self) -> bool:
        return True

    def write_java(self, out: List[str]) -> None:
        if self.remembered is None:
            out.append(ANGELIC_PLACEHOLDER)
        else:
            out.append("/* angelic */ ")
            self.remembered.write_java(out)

    def write_encoding(self, out: List[str]) -> None:
        out.append("?")

    def clone(self) -> "AngelicCondition":
        return AngelicCondition(self.remembered.clone() if self.remembered is not None else None)

    def __repr__(self) -> str:
        return "AngelicCondition()" if self.remembered is None else f"AngelicCondition({self.remembered.to_java()})"


class Statement(ABC):
    """Base class for statements.

    ``indent`` is display-only nesting depth; it is recomputed by
    ``program_utils.reset_indents`` after structural edits.
    """

    def __init__(self) -> None:
        self.indent = 1

    @abstractmethod
    def write_java(self, out: List[str]) -> None:
        ...

    @abstractmethod
    def write_encoding(self, out: List[str]) -> None:
        ...

    @abstractmethod
    def _copy(self) -> "Statement":
        ...

    def clone(self) -> "Statement":
        copy = self._copy()
        copy.indent = self.indent
        return copy

    @property
    def prefix(self) -> str:
        return INDENT * self.indent

    def to_java(self) -> str:
        out: List[str] = []
        self.write_java(out)
        return "".join(out)

    def encode(self) -> str:
        out: List[str] = []
        self.write_encoding(out)
        return "".join(out)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Statement):
            return NotImplemented
        return type(self) is type(other) and self.encode() == other.encode()

    def __hash__(self) -> int:
        return hash(self.encode())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_java().strip()!r})"


def _write_block(out: List[str], stmt: Statement, header: str, body: List[Statement]) -> None:
    out.append(f"{stmt.prefix}{header} {{\n")
    for inner in body:
        inner.write_java(out)
    out.append(f"{stmt.prefix}}}\n")


def _encode_block(out: List[str], body: List[Statement]) -> None:
    out.append("{")
    for inner in body:
        inner.write_encoding(out)
    out.append("}")


class VarAssignment(Statement):
    def __init__(self, var: Var, value: Expression) -> None:
        super().__init__()
        self.var = var
        self.value = value

    def write_java(self, out: List[str]) -> None:
        out.append(f"{self.prefix}{self.var.name} = ")
        self.value.write_java(out)
        out.append(";\n")

    def write_encoding(self, out: List[str]) -> None:
        out.append("a")
        self.var.write_encoding(out)
        self.value.write_encoding(out)

    def _copy(self) -> "VarAssignment":
        return VarAssignment(self.var.clone(), self.value.clone())


class FuncStatement(Statement):
    """A component call evaluated for its effect"""

    def __init__(self, func: Func) -> None:
        super().__init__()
        self.func = func

    def write_java(self, out: List[str]) -> None:
        out.append(self.prefix)
        self.func.write_java(out)
        out.append(";\n")

    def write_encoding(self, out: List[str]) -> None:
        out.append("x")
        self.func.write_encoding(out)

    def _copy(self) -> "FuncStatement":
        return FuncStatement(self.func.clone())


class IfStatement(Statement):
    def __init__(self, condition: Condition, body: Optional[List[Statement]] = None) -> None:
        super().__init__()
        self.condition = condition
        self.body: List[Statement] = body if body is not None else []

    def write_java(self, out: List[str]) -> None:
        cond: List[str] = []
        self.condition.write_java(cond)
        _write_block(out, self, f"if ({''.join(cond)})", self.body)

    def write_encoding(self, out: List[str]) -> None:
        out.append("i")
        self.condition.write_encoding(out)
        _encode_block(out, self.body)

    def _copy(self) -> "IfStatement":
        return IfStatement(self.condition.clone(), [s.clone() for s in self.body])


class ForLoop(Statement):
    """Counting ``for`` loop, or a ``while`` loop when ``is_while_loop`` is set.

    The counter starts at 0 and is incremented each iteration. It is declared
    in the loop header unless ``declared_in_loop`` is False, in which case the
    program declares it with its other counters.
    """

    def __init__(
        self,
        var_name: Optional[str],
        condition: Condition,
        body: Optional[List[Statement]] = None,
        is_while_loop: bool = False,
        declared_in_loop: bool = True,
    ) -> None:
        super().__init__()
        if not is_while_loop and var_name is None:
            raise ValueError("A for loop needs a counter variable")
        self.var_name = var_name
        self.condition = condition
        self.body: List[Statement] = body if body is not None else []
        self.is_while_loop = is_while_loop
        self.declared_in_loop = declared_in_loop

    def write_java(self, out: List[str]) -> None:
        cond: List[str] = []
        self.condition.write_java(cond)
        if self.is_while_loop:
            header = f"while ({''.join(cond)})"
        else:
            init = f"int {self.var_name} = 0" if self.declared_in_loop else f"{self.var_name} = 0"
            header = f"for ({init}; {''.join(cond)}; {self.var_name}++)"
        _write_block(out, self, header, self.body)

    def write_encoding(self, out: List[str]) -> None:
        if self.is_while_loop:
            out.append("w")
        else:
            out.append(f"r{self.var_name};")
        self.condition.write_encoding(out)
        _encode_block(out, self.body)

    def _copy(self) -> "ForLoop":
        return ForLoop(
            self.var_name,
            self.condition.clone(),
            [s.clone() for s in self.body],
            is_while_loop=self.is_while_loop,
            declared_in_loop=self.declared_in_loop,
        )


class ForEachLoop(Statement):
    def __init__(self, var_name: str, var_type: str, container: Expression, body: Optional[List[Statement]] = None) -> None:
        super().__init__()
        self.var_name = var_name
        self.var_type = var_type
        self.container = container
        self.body: List[Statement] = body if body is not None else []

    def write_java(self, out: List[str]) -> None:
        var_type = simple_type_name(self.var_type) if SETTINGS.use_simple_name else self.var_type
        header = f"for ({var_type} {self.var_name} : {self.container.to_java()})"
        _write_block(out, self, header, self.body)

    def write_encoding(self, out: List[str]) -> None:
        out.append(f"e{self.var_name};{self.var_type};")
        self.container.write_encoding(out)
        _encode_block(out, self.body)

    def _copy(self) -> "ForEachLoop":
        return ForEachLoop(self.var_name, self.var_type, self.container.clone(), [s.clone() for s in self.body])
