from __future__ import annotations

import re
import threading
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
from pydantic import BaseModel, Field, model_validator

from .ast_types import OBJECT, VOID, erasure, parameterized_name, simple_type_name

_TYPE_TOKEN = re.compile(r"[\w$.]+")


class Kind(str, Enum):
    """What a component does when placed in a ``Func`` expression"""
    METHOD = "METHOD"
    CONSTRUCTOR = "CONSTRUCTOR"
    FIELD = "FIELD"
    ARR_GET = "ARR_GET"
    ARR_SET = "ARR_SET"
    ARR_LEN = "ARR_LEN"


ARRAY_KINDS = (Kind.ARR_GET, Kind.ARR_SET, Kind.ARR_LEN)


class EncodingTable:
    """Structural-key to base-36 token table for one synthesis run.

    Tokens are assigned in insertion order:
    - 0: first distinct key seen
    - 1..: following keys
    They only need to be comparable within a run; call ``reset()`` before an
    independent run.
    """

    def __init__(self, keys: Optional[Iterable[str]] = None) -> None:
        self._key_to_id: Dict[str, int] = {}
        self._lock = threading.Lock()
        if keys:
            for key in keys:
                self.token(key)

    def __len__(self) -> int:
        return len(self._key_to_id)

    def __contains__(self, key: str) -> bool:
        return key in self._key_to_id

    def token(self, key: str) -> str:
        with self._lock:
            idx = self._key_to_id.get(key)
            if idx is None:
                idx = len(self._key_to_id)
                self._key_to_id[key] = idx
        return np.base_repr(idx, 36).lower()

    def reset(self) -> None:
        with self._lock:
            self._key_to_id = {}


class ComponentRecord(BaseModel):
    """One entry of the static component catalog.

    Type names may mention the record's ``type_params`` (``E``, ``E[]``,
    ``java.util.List<E>``); they are resolved when a ``FunctionData`` is built.
    """
    kind: Kind = Field(..., description="Kind of component")
    declaring_type: Optional[str] = Field(None, description="Declaring type, absent for array operations")
    name: Optional[str] = Field(None, description="Method or field name")
    return_type: str = Field(VOID, description="Return type (or field type)")
    arg_types: List[str] = Field(default_factory=list, description="Ordered argument types")
    is_static: bool = Field(False, description="Static member")
    type_params: List[str] = Field(default_factory=list, description="Type parameters of the declaring type")

    @model_validator(mode="after")
    def _check_kind(self) -> "ComponentRecord":
        if self.kind in ARRAY_KINDS:
            return self
        if self.declaring_type is None:
            raise ValueError(f"{self.kind.value} component needs a declaring_type")
        if self.kind != Kind.CONSTRUCTOR and not self.name:
            raise ValueError(f"{self.kind.value} component needs a name")
        return self


class _GenericResolver:
    """Substitutes a concrete parameter type into a record's type names."""

    def __init__(self, type_params: Sequence[str], parameter_type: Optional[str]) -> None:
        self.type_params = set(type_params)
        self.parameter_type = parameter_type
        self.valid = True

    def is_type_var(self, type_name: str) -> bool:
        return type_name in self.type_params

    def is_generic(self, type_name: str) -> bool:
        return any(tok in self.type_params for tok in _TYPE_TOKEN.findall(type_name))

    def erase(self, type_name: str) -> str:
        erased = erasure(type_name)
        base = erased.rstrip("[]")
        if base in self.type_params:
            return OBJECT + erased[len(base):]
        return erased

    def convert(self, type_name: str) -> str:
        if self.is_type_var(type_name):
            if self.parameter_type is not None:
                return self.parameter_type
            return OBJECT
        if self.parameter_type is not None and self.is_generic(type_name):
            # Mentions a type parameter without being one
            self.valid = False
        return self.erase(type_name)

    def convert_all(self, specs: Sequence[str]) -> Tuple[str, ...]:
        return tuple(self.convert(s) for s in specs)


class FunctionData:
    """Canonical descriptor of a component usable in a ``Func`` expression.

    Equality follows the underlying member (or, for array operations, the
    argument types). Sorting uses an independent key; encoding uses a token
    from the run's ``EncodingTable``.
    """

    def __init__(
        self,
        kind: Kind,
        return_type: str,
        arg_types: Sequence[str],
        table: EncodingTable,
        declaring_type: Optional[str] = None,
        name: Optional[str] = None,
        simple_name: Optional[str] = None,
        is_static: bool = True,
        member_key: Optional[Tuple] = None,
        valid: bool = True,
        returns_generic: bool = False,
    ) -> None:
        self.kind = kind
        self.declaring_type = declaring_type
        self.name = name
        self.simple_name = simple_name if simple_name is not None else name
        self.return_type = return_type
        self.arg_types: Tuple[str, ...] = tuple(arg_types)
        self.is_static = is_static
        self.returns = return_type != VOID
        self.member_key = member_key
        self.valid = valid
        self.returns_generic = returns_generic
        self._comparison_key: Optional[str] = None
        self.encoding = table.token(self.encoding_key)

    @classmethod
    def from_record(
        cls, record: ComponentRecord, table: EncodingTable, parameter_type: Optional[str] = None
    ) -> "FunctionData":
        """Instantiate a catalog record, substituting ``parameter_type`` for its type parameter."""
        if record.kind in ARRAY_KINDS:
            return cls(record.kind, record.return_type, record.arg_types, table)

        resolver = _GenericResolver(record.type_params, parameter_type)
        erased_args = tuple(resolver.erase(a) for a in record.arg_types)

        if record.kind == Kind.CONSTRUCTOR:
            args = resolver.convert_all(record.arg_types)
            return cls(
                Kind.CONSTRUCTOR,
                record.declaring_type,
                args,
                table,
                declaring_type=record.declaring_type,
                name=parameterized_name(record.declaring_type, parameter_type),
                simple_name=parameterized_name(record.declaring_type, parameter_type, simple=True),
                is_static=True,  # no receiver needed
                member_key=(record.declaring_type, "<init>", erased_args),
                valid=resolver.valid,
            )

        return_type = resolver.convert(record.return_type)
        returns_generic = return_type != VOID and (
            resolver.is_type_var(record.return_type) or resolver.is_generic(record.return_type)
        )

        if record.kind == Kind.FIELD:
            return cls(
                Kind.FIELD,
                return_type,
                (),
                table,
                declaring_type=record.declaring_type,
                name=record.name,
                is_static=record.is_static,
                member_key=(record.declaring_type, record.name),
                valid=resolver.valid,
                returns_generic=returns_generic,
            )

        if record.name == "equals" and len(record.arg_types) == 1:
            args: Tuple[str, ...] = (record.declaring_type,)
        else:
            args = resolver.convert_all(record.arg_types)
        return cls(
            Kind.METHOD,
            return_type,
            args,
            table,
            declaring_type=record.declaring_type,
            name=record.name,
            is_static=record.is_static,
            member_key=(record.declaring_type, record.name, erased_args, resolver.erase(record.return_type)),
            valid=resolver.valid,
            returns_generic=returns_generic,
        )

    @classmethod
    def array_op(cls, kind: Kind, array_type: str, table: EncodingTable) -> "FunctionData":
        """Element get, element set or length of ``array_type``"""
        elem = array_type[:-2]
        if kind == Kind.ARR_GET:
            return cls(kind, elem, (array_type, "int"), table)
        if kind == Kind.ARR_SET:
            return cls(kind, VOID, (array_type, "int", elem), table)
        if kind == Kind.ARR_LEN:
            return cls(kind, "int", (array_type,), table)
        raise ValueError(f"Not an array operation: {kind}")

    @property
    def encoding_key(self) -> str:
        callee = self.declaring_type if self.declaring_type is not None else "~"
        return f"{self.kind.value}{callee}-{self.name}-{len(self.arg_types)}-{str(self.is_static).lower()}"

    def encode(self, out: List[str]) -> None:
        out.append(self.encoding)

    def display_name(self, simple: bool) -> str:
        return self.simple_name if simple else self.name

    def declaring_type_name(self, simple: bool) -> str:
        return simple_type_name(self.declaring_type) if simple else self.declaring_type

    @property
    def comparison_key(self) -> str:
        if self._comparison_key is None:
            parts = [self.declaring_type if self.declaring_type is not None else "null", str(self.name), str(len(self.arg_types))]
            parts.extend(self.arg_types)
            self._comparison_key = " ".join(parts)
        return self._comparison_key

    def __lt__(self, other: "FunctionData") -> bool:
        if self is other:
            return False
        return self.comparison_key < other.comparison_key

    def __gt__(self, other: "FunctionData") -> bool:
        if self is other:
            return False
        return self.comparison_key > other.comparison_key

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, FunctionData):
            return NotImplemented
        if self.kind != other.kind:
            return False
        if self.kind in ARRAY_KINDS:
            return self.arg_types == other.arg_types
        return self.member_key == other.member_key

    def __hash__(self) -> int:
        if self.kind in ARRAY_KINDS:
            return hash((self.kind, self.arg_types))
        return hash((self.kind, self.member_key))

    def __repr__(self) -> str:
        args = ", ".join(self.arg_types)
        return f"FunctionData({self.kind.value}, {self.declaring_type}.{self.name}({args}) -> {self.return_type})"
