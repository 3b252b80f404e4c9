"""
Operator, precedence and type-name vocabulary for the program model.

Types are carried around as Java-style type names (``"int"``,
``"java.util.List"``, ``"int[]"``). Components come from a static catalog, so
no live class objects are ever needed; a type name is enough to render,
compare and declare variables.
"""

import re
from enum import Enum
from typing import Dict, Optional


VOID = "void"
OBJECT = "java.lang.Object"
STRING = "java.lang.String"
BOOLEAN = "boolean"
INT = "int"

NUMERIC_TYPES = {"byte", "short", "int", "long", "float", "double", "char"}

# Initial values used when a program declares its local variables
DEFAULT_VALUES: Dict[str, str] = {
    "byte": "0",
    "short": "0",
    "int": "0",
    "long": "0L",
    "float": "0.0f",
    "double": "0.0",
    "char": "'\\0'",
    "boolean": "false",
}

_QUALIFIER = re.compile(r"(?:[A-Za-z_$][\w$]*\.)+")
_GENERIC_ARGS = re.compile(r"<.*>")


class Precedence(Enum):
    """
    Java binding strength of an expression, used for minimal parenthesization.

    Higher levels bind tighter. The third tuple element only keeps members with
    equal levels (DOT and NEW) from becoming enum aliases.
    """

    ATOM = (17, False, "atom")              # literal, variable
    DOT = (16, False, "dot")                # a.b(), a.f, a[i], a.length
    NEW = (16, False, "new")                # new A()
    UNARY = (14, True, "unary")             # !a, -a
    MULTIPLICATIVE = (13, False, "mult")    # * / %
    ADDITIVE = (12, False, "add")           # + -
    RELATIONAL = (10, False, "rel")         # < <= > >=
    EQUALITY = (9, False, "eq")             # == !=
    BIT_AND = (8, False, "bitand")          # &
    BIT_XOR = (7, False, "bitxor")          # ^
    BIT_OR = (6, False, "bitor")            # |
    LOGICAL_AND = (5, False, "and")         # &&
    LOGICAL_OR = (4, False, "or")           # ||
    ASSIGNMENT = (2, True, "assign")        # a[i] = b

    def __init__(self, level: int, right_assoc: bool, label: str) -> None:
        self.level = level
        self.right_assoc = right_assoc

    def paren_left(self, child: Optional["Precedence"]) -> bool:
        """Whether ``child`` needs parentheses in this node's leftmost slot."""
        if child is None:
            return False
        if self.right_assoc:
            return child.level <= self.level
        return child.level < self.level

    def paren_right(self, child: Optional["Precedence"]) -> bool:
        """Whether ``child`` needs parentheses in this node's rightmost slot."""
        if child is None:
            return False
        if self.right_assoc:
            return child.level < self.level
        return child.level <= self.level


class OperatorType(Enum):
    """Java operators available to ``Op`` expressions.

    Each member carries its printed symbol, precedence, whether it is unary,
    the one-character code used in canonical encodings, and whether the
    result is a boolean regardless of operand types.
    """

    # Unary operators
    NOT = ("!", Precedence.UNARY, True, "!", True)
    NEG = ("-", Precedence.UNARY, True, "n", False)

    # Arithmetic operators
    MULT = ("*", Precedence.MULTIPLICATIVE, False, "*", False)
    DIV = ("/", Precedence.MULTIPLICATIVE, False, "/", False)
    MOD = ("%", Precedence.MULTIPLICATIVE, False, "%", False)
    ADD = ("+", Precedence.ADDITIVE, False, "+", False)
    SUB = ("-", Precedence.ADDITIVE, False, "-", False)

    # Comparison operators
    LT = ("<", Precedence.RELATIONAL, False, "<", True)
    LTE = ("<=", Precedence.RELATIONAL, False, "l", True)
    GT = (">", Precedence.RELATIONAL, False, ">", True)
    GTE = (">=", Precedence.RELATIONAL, False, "g", True)
    EQ = ("==", Precedence.EQUALITY, False, "=", True)
    NOTEQ = ("!=", Precedence.EQUALITY, False, "#", True)

    # Bitwise operators
    BIT_AND = ("&", Precedence.BIT_AND, False, "&", False)
    BIT_XOR = ("^", Precedence.BIT_XOR, False, "^", False)
    BIT_OR = ("|", Precedence.BIT_OR, False, "|", False)

    # Boolean operators
    AND = ("&&", Precedence.LOGICAL_AND, False, "a", True)
    OR = ("||", Precedence.LOGICAL_OR, False, "o", True)

    def __init__(self, symbol: str, precedence: Precedence, unary: bool, code: str, boolean_result: bool) -> None:
        self.symbol = symbol
        self.precedence = precedence
        self.unary = unary
        self.code = code
        self.boolean_result = boolean_result


def simple_type_name(type_name: Optional[str]) -> str:
    """Strip package and outer-class qualifiers, including inside type arguments."""
    if type_name is None:
        return "null"
    return _QUALIFIER.sub("", type_name)


def erasure(type_name: str) -> str:
    """Drop generic arguments: ``java.util.List<E>[]`` -> ``java.util.List[]``."""
    return _GENERIC_ARGS.sub("", type_name)


def is_array_type(type_name: str) -> bool:
    return type_name.endswith("[]")


def element_type(array_type: str) -> str:
    if not is_array_type(array_type):
        raise ValueError(f"Not an array type: {array_type}")
    return array_type[:-2]


def default_value(type_name: str) -> str:
    """Java source text of a type's default value."""
    return DEFAULT_VALUES.get(type_name, "null")


def parameterized_name(type_name: str, parameter_type: Optional[str], simple: bool = False) -> str:
    """Name of ``type_name`` instantiated with ``parameter_type``, e.g. ``ArrayList<Integer>``."""
    base = simple_type_name(type_name) if simple else type_name
    if parameter_type is None:
        return base
    arg = simple_type_name(parameter_type) if simple else parameter_type
    return f"{base}<{arg}>"
