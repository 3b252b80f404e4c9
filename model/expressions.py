from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from settings import SETTINGS

from .ast_types import BOOLEAN, OBJECT, STRING, OperatorType, Precedence
from .errors import NonInstantiableSignatureError
from .function_data import FunctionData, Kind

_NUMERIC_ORDER = ["byte", "short", "char", "int", "long", "float", "double"]

_JAVA_ESCAPES = {
    "\\": "\\\\",
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\b": "\\b",
    "\f": "\\f",
}


def _escape(text: str, quote: str) -> str:
    out = []
    for ch in text:
        if ch == quote:
            out.append("\\" + ch)
        else:
            out.append(_JAVA_ESCAPES.get(ch, ch))
    return "".join(out)


def _write_wrapped(out: List[str], expr: "Expression", parens: bool) -> None:
    if parens:
        out.append("(")
        expr.write_java(out)
        out.append(")")
    else:
        expr.write_java(out)


class Expression(ABC):
    """Base class for expression nodes.

    Structural equality and hashing follow the canonical encoding, so two
    expressions compare equal exactly when ``encode()`` agrees.
    """

    type: str

    @property
    @abstractmethod
    def precedence(self) -> Precedence:
        ...

    @abstractmethod
    def write_java(self, out: List[str]) -> None:
        ...

    @abstractmethod
    def write_encoding(self, out: List[str]) -> None:
        ...

    @abstractmethod
    def clone(self) -> "Expression":
        ...

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
        if not isinstance(other, Expression):
            return NotImplemented
        return type(self) is type(other) and self.encode() == other.encode()

    def __hash__(self) -> int:
        return hash(self.encode())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_java()})"


class Literal(Expression):
    """Constant value; ``type`` defaults from the Python value"""

    def __init__(self, value, type: Optional[str] = None) -> None:
        self.value = value
        self.type = type if type is not None else self._infer_type(value)

    @staticmethod
    def _infer_type(value) -> str:
        if value is None:
            return OBJECT
        if isinstance(value, bool):
            return BOOLEAN
        if isinstance(value, int):
            return "int"
        if isinstance(value, float):
            return "double"
        if isinstance(value, str):
            return STRING
        raise ValueError(f"Cannot infer literal type of {value!r}")

    @property
    def text(self) -> str:
        value = self.value
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if self.type == "char":
            return "'" + _escape(str(value), "'") + "'"
        if isinstance(value, str):
            return '"' + _escape(value, '"') + '"'
        if self.type == "long":
            return f"{value}L"
        if self.type == "float":
            return f"{float(value)}f"
        if self.type == "double":
            return repr(float(value))
        return str(value)

    @property
    def precedence(self) -> Precedence:
        # A negative number reads like a unary minus
        if self.text.startswith("-"):
            return Precedence.UNARY
        return Precedence.ATOM

    def write_java(self, out: List[str]) -> None:
        out.append(self.text)

    def write_encoding(self, out: List[str]) -> None:
        text = self.text
        out.append(f"c{len(text)}:{text}")

    def clone(self) -> "Literal":
        return Literal(self.value, self.type)


class Var(Expression):
    """Variable reference. ``name`` and ``type`` are rebound during merging."""

    def __init__(self, name: str, type: str = OBJECT) -> None:
        self.name = name
        self.type = type

    @property
    def precedence(self) -> Precedence:
        return Precedence.ATOM

    def write_java(self, out: List[str]) -> None:
        out.append(self.name)

    def write_encoding(self, out: List[str]) -> None:
        out.append(f"v{self.name};")

    def clone(self) -> "Var":
        return Var(self.name, self.type)


def _promote(left: str, right: str) -> str:
    if STRING in (left, right):
        return STRING
    if left in _NUMERIC_ORDER and right in _NUMERIC_ORDER:
        return max(left, right, key=_NUMERIC_ORDER.index)
    return right


class Op(Expression):
    """Unary (``left`` is None) or binary operator application"""

    def __init__(self, operator: OperatorType, left: Optional[Expression], right: Expression) -> None:
        if operator.unary and left is not None:
            raise ValueError(f"Unary operator {operator.name} takes no left operand")
        if not operator.unary and left is None:
            raise ValueError(f"Binary operator {operator.name} needs a left operand")
        self.operator = operator
        self.left = left
        self.right = right
        if operator.boolean_result:
            self.type = BOOLEAN
        elif left is None:
            self.type = right.type
        else:
            self.type = _promote(left.type, right.type)

    @property
    def precedence(self) -> Precedence:
        return self.operator.precedence

    def write_java(self, out: List[str]) -> None:
        prec = self.precedence
        if self.left is None:
            out.append(self.operator.symbol)
            operand = self.right.to_java()
            # "- -x" must not collapse into a decrement
            parens = prec.paren_right(self.right.precedence) or operand.startswith(self.operator.symbol)
            _write_wrapped(out, self.right, parens)
            return
        _write_wrapped(out, self.left, prec.paren_left(self.left.precedence))
        out.append(f" {self.operator.symbol} ")
        _write_wrapped(out, self.right, prec.paren_right(self.right.precedence))

    def write_encoding(self, out: List[str]) -> None:
        out.append("o")
        out.append(self.operator.code)
        if self.left is not None:
            self.left.write_encoding(out)
        self.right.write_encoding(out)

    def clone(self) -> "Op":
        return Op(self.operator, self.left.clone() if self.left is not None else None, self.right.clone())


class Func(Expression):
    """Use of a catalog component: call, construction, field access or array operation.

    ``callee`` is the receiver for instance members and None otherwise; array
    operations keep the array itself as their first argument.
    """

    def __init__(self, args: Sequence[Expression], callee: Optional[Expression], data: FunctionData) -> None:
        if not data.valid:
            raise NonInstantiableSignatureError(f"Cannot instantiate {data!r}")
        if len(args) != len(data.arg_types):
            raise ValueError(f"{data!r} expects {len(data.arg_types)} arguments, got {len(args)}")
        self.args: Tuple[Expression, ...] = tuple(args)
        self._callee = callee
        self.data = data
        self.type = data.return_type

    @property
    def callee(self) -> Optional[Expression]:
        return self._callee

    @callee.setter
    def callee(self, callee: Optional[Expression]) -> None:
        self._callee = callee

    @property
    def name(self) -> str:
        return self.data.display_name(SETTINGS.use_simple_name)

    @property
    def precedence(self) -> Precedence:
        kind = self.data.kind
        if kind == Kind.CONSTRUCTOR:
            return Precedence.NEW
        if kind == Kind.ARR_SET:
            return Precedence.ASSIGNMENT
        return Precedence.DOT

    def _write_receiver(self, out: List[str]) -> None:
        if self._callee is None:
            out.append(self.data.declaring_type_name(SETTINGS.use_simple_name))
        else:
            _write_wrapped(out, self._callee, self.precedence.paren_left(self._callee.precedence))

    def _write_args(self, out: List[str]) -> None:
        out.append("(")
        for i, arg in enumerate(self.args):
            if i:
                out.append(", ")
            arg.write_java(out)
        out.append(")")

    def write_java(self, out: List[str]) -> None:
        kind = self.data.kind
        prec = self.precedence
        if kind == Kind.METHOD:
            self._write_receiver(out)
            out.append(f".{self.name}")
            self._write_args(out)
        elif kind == Kind.CONSTRUCTOR:
            out.append(f"new {self.name}")
            self._write_args(out)
        elif kind == Kind.FIELD:
            if self.data.is_static:
                out.append(self.data.declaring_type_name(SETTINGS.use_simple_name))
            else:
                self._write_receiver(out)
            out.append(f".{self.name}")
        elif kind == Kind.ARR_GET:
            _write_wrapped(out, self.args[0], prec.paren_left(self.args[0].precedence))
            out.append("[")
            self.args[1].write_java(out)
            out.append("]")
        elif kind == Kind.ARR_SET:
            _write_wrapped(out, self.args[0], Precedence.DOT.paren_left(self.args[0].precedence))
            out.append("[")
            self.args[1].write_java(out)
            out.append("] = ")  # only valid as a statement
            self.args[2].write_java(out)
        elif kind == Kind.ARR_LEN:
            _write_wrapped(out, self.args[0], prec.paren_left(self.args[0].precedence))
            out.append(".length")
        else:
            raise ValueError(f"Unknown component kind: {kind}")

    def write_encoding(self, out: List[str]) -> None:
        kind = self.data.kind
        if kind in (Kind.METHOD, Kind.CONSTRUCTOR, Kind.FIELD):
            out.append("f")
            self.data.encode(out)
            out.append(":")
            if self._callee is not None:
                self._callee.write_encoding(out)
            for arg in self.args:
                arg.write_encoding(out)
        elif kind == Kind.ARR_GET:
            out.append("g")
            self.args[0].write_encoding(out)
            self.args[1].write_encoding(out)
        elif kind == Kind.ARR_SET:
            out.append("s")
            self.args[0].write_encoding(out)
            self.args[1].write_encoding(out)
            self.args[2].write_encoding(out)
        elif kind == Kind.ARR_LEN:
            out.append("l")
            self.args[0].write_encoding(out)
        else:
            raise ValueError(f"Unknown component kind: {kind}")

    def clone(self) -> "Func":
        return Func(
            [a.clone() for a in self.args],
            self._callee.clone() if self._callee is not None else None,
            self.data,
        )
