"""Low-level helpers with no internal dependencies.

Dialect detection works with raw DBAPI connections and with wrappers that
expose one, so it is safe to import from any module in the package.
"""
import builtins
import importlib
from typing import Any

import numpy as np


def get_dialect_name(obj: Any) -> str:
    """Get dialect name for a database connection.
    """
    if hasattr(obj, 'dialect'):
        dialect = obj.dialect
        if isinstance(dialect, str):
            return dialect.lower()
        return str(dialect.name).lower()

    if hasattr(obj, 'dbapi_connection'):
        return get_dialect_name(obj.dbapi_connection)

    if hasattr(obj, 'driver_connection'):
        return get_dialect_name(obj.driver_connection)

    type_name = f'{type(obj).__module__}.{type(obj).__name__}'
    if 'psycopg' in type_name:
        return 'postgresql'
    if 'sqlite3' in type_name:
        return 'sqlite'

    raise AttributeError(f'Cannot determine dialect for {type(obj)}')


def get_raw_connection(connection: Any) -> Any:
    """Extract the raw DBAPI connection from a wrapper."""
    if hasattr(connection, 'dbapi_connection'):
        return connection.dbapi_connection
    if hasattr(connection, 'driver_connection'):
        return connection.driver_connection
    return connection


def to_python_scalar(value: Any) -> Any:
    """Convert NumPy scalars to the equivalent builtin Python value."""
    if isinstance(value, np.generic):
        return value.item()
    return value


def resolve_class(spec: type | str) -> type:
    """Return the class named by a type, a dotted import path or a builtin name.

    A name without a dot is looked up in builtins; other classes need
    their full module path.

    >>> resolve_class('collections.OrderedDict').__name__
    'OrderedDict'
    """
    if isinstance(spec, type):
        return spec
    if not isinstance(spec, str):
        raise ValueError(f'Expected a class or dotted class path, got {spec!r}')
    if '.' not in spec:
        cls = getattr(builtins, spec, None)
        if not isinstance(cls, type):
            raise ValueError(f'{spec!r} is not a builtin class; use a dotted path '
                             f"such as 'package.module.{spec}'")
        return cls
    module_name, _, attr = spec.rpartition('.')
    try:
        cls = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as err:
        raise ValueError(f'Cannot import class {spec!r}: {err}') from err
    if not isinstance(cls, type):
        raise ValueError(f'{spec!r} does not name a class')
    return cls
