"""
Native statement drivers.

Each driver module registers its statement class under a dialect name;
get_native_statement() picks the class matching a connection.
"""
from typing import Any

from stmtadapter.exceptions import UnsupportedDriverError
from stmtadapter.native.base import _DRIVER_REGISTRY
from stmtadapter.native.base import DbapiResult as DbapiResult
from stmtadapter.native.base import DbapiStatement as DbapiStatement
from stmtadapter.native.base import NativeResult as NativeResult
from stmtadapter.native.base import NativeStatement as NativeStatement
from stmtadapter.native.base import register_driver as register_driver
from stmtadapter.native.postgres import PostgresStatement as PostgresStatement
from stmtadapter.native.sqlite import SqliteStatement as SqliteStatement
from stmtadapter.utils import get_dialect_name, get_raw_connection


def get_available_dialects() -> list[str]:
    """Return list of registered dialect names."""
    return list(_DRIVER_REGISTRY.keys())


def get_driver_class(dialect: str) -> type[DbapiStatement]:
    """Get the native statement class for a dialect."""
    if dialect not in _DRIVER_REGISTRY:
        available = get_available_dialects()
        raise UnsupportedDriverError(f'Unsupported dialect: {dialect}. Available: {available}')
    return _DRIVER_REGISTRY[dialect]


def get_native_statement(connection: Any, sql: str) -> DbapiStatement:
    """Build the native statement for an open connection and SQL string."""
    try:
        dialect = get_dialect_name(connection)
    except AttributeError as err:
        raise UnsupportedDriverError(str(err)) from err
    cls = get_driver_class(dialect)
    return cls(get_raw_connection(connection), sql)
