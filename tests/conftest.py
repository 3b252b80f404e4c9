import os
import sys
import logging

import pytest

logging.basicConfig(level=logging.INFO)
log = logging.getLogger(__name__)


def _add_project_root_to_path() -> None:
    # tests/ -> project root
    project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)


_add_project_root_to_path()

from settings import SETTINGS  # noqa: E402
from model.function_data import ComponentRecord, EncodingTable, FunctionData, Kind  # noqa: E402
from utils.time_logger import TIME_LOGGER  # noqa: E402


@pytest.fixture
def config_dir():
    return os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, "config"))


@pytest.fixture(autouse=True)
def _restore_settings():
    """Tests may flip global settings; put the defaults back afterwards."""
    saved = SETTINGS.model_dump()
    yield
    for key, value in saved.items():
        setattr(SETTINGS, key, value)
    TIME_LOGGER.reset()


@pytest.fixture
def table():
    return EncodingTable()


@pytest.fixture
def components(table):
    """A handful of descriptors shared by the model and algorithm tests"""
    def method(declaring, name, ret, args, is_static=False):
        return FunctionData.from_record(
            ComponentRecord(kind=Kind.METHOD, declaring_type=declaring, name=name,
                            return_type=ret, arg_types=args, is_static=is_static),
            table,
        )

    return {
        "max": method("java.lang.Math", "max", "int", ["int", "int"], is_static=True),
        "abs": method("java.lang.Math", "abs", "int", ["int"], is_static=True),
        "length": method("java.lang.String", "length", "int", []),
        "charAt": method("java.lang.String", "charAt", "char", ["int"]),
        "new_sb": FunctionData.from_record(
            ComponentRecord(kind=Kind.CONSTRUCTOR, declaring_type="java.lang.StringBuilder", arg_types=[]),
            table,
        ),
        "append": method("java.lang.StringBuilder", "append", "java.lang.StringBuilder", ["int"]),
        "max_value": FunctionData.from_record(
            ComponentRecord(kind=Kind.FIELD, declaring_type="java.lang.Integer", name="MAX_VALUE",
                            return_type="int", is_static=True),
            table,
        ),
        "arr_get": FunctionData.array_op(Kind.ARR_GET, "int[]", table),
        "arr_set": FunctionData.array_op(Kind.ARR_SET, "int[]", table),
        "arr_len": FunctionData.array_op(Kind.ARR_LEN, "int[]", table),
    }
