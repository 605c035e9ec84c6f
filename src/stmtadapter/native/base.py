"""
Native prepared-statement protocol and its generic DB-API implementation.

The statement adapter only talks to objects satisfying NativeStatement and
NativeResult. DbapiStatement emulates that protocol on top of any PEP-249
connection: a bind signature of wire type codes, a boolean execute that
records error state instead of raising, and result handles that must be
freed explicitly.

Concrete drivers subclass DbapiStatement to translate their exception
classes into SQLSTATE / error number pairs and register themselves by
dialect name.
"""
import logging
from collections.abc import Callable, Mapping, MutableMapping, Sequence
from typing import Any, Protocol, runtime_checkable

from stmtadapter.constants import BindType, ResultShape
from stmtadapter.exceptions import NativeDriverError, ResultClosedError

from libb import attrdict

logger = logging.getLogger(__name__)

SQLSTATE_SUCCESS = '00000'
SQLSTATE_GENERAL_ERROR = 'HY000'
SQLSTATE_INVALID_PARAMETER_NUMBER = 'HY093'
SQLSTATE_INVALID_PARAMETER_TYPE = 'HY105'

# Registry of dialect name -> native statement class
_DRIVER_REGISTRY: dict[str, type['DbapiStatement']] = {}


def register_driver(dialect: str):
    """Decorator to register a native statement class for a dialect.

    Usage:
        @register_driver('sqlite')
        class SqliteStatement(DbapiStatement):
            ...
    """
    def decorator(cls: type['DbapiStatement']) -> type['DbapiStatement']:
        _DRIVER_REGISTRY[dialect] = cls
        return cls
    return decorator


@runtime_checkable
class NativeResult(Protocol):
    """Result cursor produced by a successful native execution."""

    @property
    def field_count(self) -> int:
        ...

    def fetch_array(self, shape: ResultShape = ResultShape.BOTH) -> list | dict | None:
        """Fetch the next row in the given shape, None when exhausted."""
        ...

    def fetch_object(self, cls: type | None = None,
                     args: Sequence | Mapping | None = None) -> Any:
        """Fetch the next row as an instance of cls, None when exhausted."""
        ...

    def fetch_all(self, shape: ResultShape = ResultShape.NUM) -> list:
        """Fetch all remaining rows in the given shape."""
        ...

    def free(self) -> None:
        """Release the cursor. Safe to call more than once."""
        ...


@runtime_checkable
class NativeStatement(Protocol):
    """Prepared statement bound by type signature."""

    affected_rows: int
    sqlstate: str
    errno: int
    error: str

    def bind_param(self, types: str, *values: Any) -> bool:
        ...

    def bind_param_map(self, types: str, values: Mapping[str, Any]) -> bool:
        """Bind values by placeholder name, codes in the mapping's order."""
        ...

    def execute(self) -> bool:
        ...

    def get_result(self) -> NativeResult | None:
        ...

    def close(self) -> None:
        ...


def _coerce_integer(value: Any) -> int:
    return int(value)


def _coerce_double(value: Any) -> float:
    return float(value)


def _coerce_string(value: Any) -> str | bytes:
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value)
    if isinstance(value, bool):
        return str(int(value))
    return str(value)


def _coerce_blob(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode()
    return bytes(value)


_COERCERS: dict[str, Callable[[Any], Any]] = {
    BindType.INTEGER: _coerce_integer,
    BindType.DOUBLE: _coerce_double,
    BindType.STRING: _coerce_string,
    BindType.BLOB: _coerce_blob,
}


def coerce_bind_value(code: str, value: Any) -> Any:
    """Convert a value to the Python type the wire code stands for.

    None is kept as SQL NULL for every code.
    """
    if value is None:
        return None
    return _COERCERS[code](value)


def _as_sequence(row: Any) -> tuple:
    """Normalize a driver row (tuple, sqlite3.Row, dict row) to a tuple."""
    if isinstance(row, Mapping):
        return tuple(row.values())
    return tuple(row)


def shape_row(columns: list[str], row: tuple, shape: ResultShape) -> list | dict:
    """Arrange one row of values in the requested native shape.
    """
    if shape == ResultShape.NUM:
        return list(row)
    if shape == ResultShape.ASSOC:
        return dict(zip(columns, row))
    if shape == ResultShape.BOTH:
        both = {}
        for index, (name, value) in enumerate(zip(columns, row)):
            both[index] = value
            both[name] = value
        return both
    raise ValueError(f'Unknown result shape: {shape!r}')


class DbapiResult:
    """Result handle over an open DB-API cursor.

    Rows are pulled from the cursor one at a time; nothing is buffered
    beyond what the driver itself holds.
    """

    def __init__(self, cursor: Any, statement: 'DbapiStatement | None' = None) -> None:
        self._cursor = cursor
        self._statement = statement
        self.columns: list[str] = [desc[0] for desc in cursor.description]
        self.freed = False

    @property
    def field_count(self) -> int:
        return len(self.columns)

    def _fetch_raw(self) -> tuple | None:
        if self.freed:
            raise ResultClosedError('Result has already been freed')
        row = self._cursor.fetchone()
        if row is None:
            return None
        return _as_sequence(row)

    def fetch_array(self, shape: ResultShape = ResultShape.BOTH) -> list | dict | None:
        row = self._fetch_raw()
        if row is None:
            return None
        return shape_row(self.columns, row, shape)

    def fetch_object(self, cls: type | None = None,
                     args: Sequence | Mapping | None = None) -> Any:
        """Fetch the next row into a new instance of cls.

        The instance is constructed first (with args when given) and then
        populated: items for mapping types, attributes otherwise.
        """
        row = self._fetch_raw()
        if row is None:
            return None
        cls = cls or attrdict
        if isinstance(args, Mapping):
            instance = cls(**args)
        elif args:
            instance = cls(*args)
        else:
            instance = cls()
        values = dict(zip(self.columns, row))
        if isinstance(instance, MutableMapping):
            instance.update(values)
        else:
            for name, value in values.items():
                setattr(instance, name, value)
        return instance

    def fetch_all(self, shape: ResultShape = ResultShape.NUM) -> list:
        if self.freed:
            raise ResultClosedError('Result has already been freed')
        return [shape_row(self.columns, _as_sequence(row), shape)
                for row in self._cursor.fetchall()]

    def free(self) -> None:
        if self.freed:
            return
        self.freed = True
        self._cursor.close()
        if self._statement is not None:
            self._statement._release(self)


class DbapiStatement:
    """Native statement emulation over a PEP-249 connection.

    The SQL must already use the connection's placeholder style.
    """

    dialect: str = ''
    result_class: type[DbapiResult] = DbapiResult
    driver_errors: type[BaseException] | tuple[type[BaseException], ...] = NativeDriverError

    def __init__(self, connection: Any, sql: str) -> None:
        self._connection = connection
        self.sql = sql
        self._params: tuple | dict = ()
        self._pending: Any = None
        self.open_results = 0
        self.affected_rows = -1
        self.sqlstate = SQLSTATE_SUCCESS
        self.errno = 0
        self.error = ''

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.sql!r})'

    def bind_param(self, types: str, *values: Any) -> bool:
        """Bind values for the next execution according to a type signature.
        """
        coerced = self._coerce_values(types, values)
        if coerced is None:
            return False
        self._params = tuple(coerced)
        return True

    def bind_param_map(self, types: str, values: Mapping[str, Any]) -> bool:
        """Bind values by placeholder name for named-style SQL.

        The type codes apply to the values in the mapping's order; the
        driver matches each value to its placeholder by key.
        """
        coerced = self._coerce_values(types, list(values.values()))
        if coerced is None:
            return False
        self._params = dict(zip(values.keys(), coerced))
        return True

    def _coerce_values(self, types: str, values: Sequence) -> list | None:
        if len(types) != len(values):
            self._set_error(SQLSTATE_INVALID_PARAMETER_NUMBER, 0,
                            f'Number of elements in type signature ({len(types)}) '
                            f'does not match number of bind values ({len(values)})')
            return None
        unknown = set(types) - BindType.ALL
        if unknown:
            self._set_error(SQLSTATE_INVALID_PARAMETER_TYPE, 0,
                            f'Unknown bind type codes: {sorted(unknown)}')
            return None
        try:
            return [coerce_bind_value(code, value)
                    for code, value in zip(types, values)]
        except (TypeError, ValueError) as err:
            self._set_error(SQLSTATE_INVALID_PARAMETER_TYPE, 0, str(err))
            return None

    def execute(self) -> bool:
        """Run the statement with the bound values.

        Driver errors are recorded as error state and reported as False.
        """
        self._discard_pending()
        cursor = self._connection.cursor()
        try:
            if self._params:
                cursor.execute(self.sql, self._params)
            else:
                cursor.execute(self.sql)
        except self.driver_errors as err:
            cursor.close()
            self._record_error(err)
            return False
        self._set_error(SQLSTATE_SUCCESS, 0, '')
        self.affected_rows = cursor.rowcount
        if cursor.description is None:
            cursor.close()
        else:
            self._pending = cursor
        return True

    def get_result(self) -> DbapiResult | None:
        """Hand the cursor of the last execution to a result handle.

        Returns None when the statement produced no result set or the
        result was already taken.
        """
        if self._pending is None:
            return None
        result = self.result_class(self._pending, self)
        self._pending = None
        self.open_results += 1
        return result

    def close(self) -> None:
        self._discard_pending()

    def sqlstate_for(self, err: BaseException) -> str:
        return getattr(err, 'sqlstate', None) or SQLSTATE_GENERAL_ERROR

    def errno_for(self, err: BaseException) -> int:
        return 1

    def message_for(self, err: BaseException) -> str:
        return str(err)

    def _record_error(self, err: BaseException) -> None:
        self._set_error(self.sqlstate_for(err), self.errno_for(err), self.message_for(err))
        logger.debug(f'{self!r} failed: [{self.sqlstate}] {self.error}')

    def _set_error(self, sqlstate: str, errno: int, message: str) -> None:
        self.sqlstate = sqlstate
        self.errno = errno
        self.error = message

    def _discard_pending(self) -> None:
        if self._pending is not None:
            self._pending.close()
            self._pending = None

    def _release(self, result: DbapiResult) -> None:
        self.open_results -= 1
