"""
Static component catalog.

Components are described by ``ComponentRecord`` entries built once at startup
(in code or from a YAML file) instead of being discovered by reflection.
Generic records are instantiated against the catalog's parameter type; any
descriptor whose signature cannot be resolved is dropped here so the search
never sees it.
"""

import logging
import os
from typing import Any, Dict, Iterable, Iterator, List, Optional

import yaml

from .ast_types import is_array_type
from .function_data import ARRAY_KINDS, ComponentRecord, EncodingTable, FunctionData

log = logging.getLogger(__name__)


class ComponentCatalog:
    """Valid ``FunctionData`` instances for one synthesis run, in sorted order."""

    def __init__(
        self,
        records: Iterable[ComponentRecord] = (),
        table: Optional[EncodingTable] = None,
        parameter_type: Optional[str] = None,
        array_types: Iterable[str] = (),
    ) -> None:
        self.table = table if table is not None else EncodingTable()
        self.parameter_type = parameter_type
        self._components: List[FunctionData] = []
        self._seen = set()
        self.num_invalid = 0

        for record in records:
            self.add_record(record)
        for array_type in array_types:
            self.add_array_ops(array_type)
        log.info(f"Component catalog: {len(self._components)} components, {self.num_invalid} skipped")

    @classmethod
    def from_yaml(cls, path: str, table: Optional[EncodingTable] = None) -> "ComponentCatalog":
        """Load a catalog file with ``parameter_type``, ``array_types`` and ``components`` keys."""
        if not os.path.exists(path):
            raise FileNotFoundError(f"Could not find component catalog at {path}")
        with open(path, "r") as f:
            spec: Dict[str, Any] = yaml.safe_load(f) or {}
        records = [ComponentRecord(**entry) for entry in spec.get("components", [])]
        return cls(
            records,
            table=table,
            parameter_type=spec.get("parameter_type"),
            array_types=spec.get("array_types", []),
        )

    def add_record(self, record: ComponentRecord) -> Optional[FunctionData]:
        parameter_type = self.parameter_type if record.type_params else None
        data = FunctionData.from_record(record, self.table, parameter_type)
        if not data.valid:
            self.num_invalid += 1
            log.debug(f"Skipping non-instantiable component {data!r}")
            return None
        return self._add(data)

    def add_array_ops(self, array_type: str) -> List[FunctionData]:
        if not is_array_type(array_type):
            raise ValueError(f"Not an array type: {array_type}")
        added = []
        for kind in ARRAY_KINDS:
            data = self._add(FunctionData.array_op(kind, array_type, self.table))
            if data is not None:
                added.append(data)
        return added

    def _add(self, data: FunctionData) -> Optional[FunctionData]:
        if data in self._seen:
            return None
        self._seen.add(data)
        self._components.append(data)
        self._components.sort()
        return data

    @property
    def components(self) -> List[FunctionData]:
        return list(self._components)

    def returning(self, type_name: str) -> List[FunctionData]:
        """Components whose result has the given type"""
        return [c for c in self._components if c.return_type == type_name]

    def find(self, declaring_type: Optional[str], name: Optional[str]) -> List[FunctionData]:
        return [c for c in self._components if c.declaring_type == declaring_type and c.name == name]

    def __len__(self) -> int:
        return len(self._components)

    def __iter__(self) -> Iterator[FunctionData]:
        return iter(self._components)
