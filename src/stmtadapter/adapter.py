"""
Statement adapter over a native prepared-statement driver.

StatementAdapter makes a native statement (bind by type signature, boolean
execute, explicit result handles) behave like StatementInterface:

- bind_value() translates declared parameter types to native wire codes,
- execute() binds, runs and takes ownership of the result handle,
- fetch()/fetch_all()/fetch_column() emulate the fetch modes on top of
  the native row shapes.

The adapter owns at most one result handle at a time and frees it exactly
once, either when a later execute() replaces it or on close().
"""
import dataclasses
import logging
import time
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from functools import wraps
from typing import Any

from stmtadapter.constants import SUPPORTED_FETCH_MODES, BindType, FetchMode
from stmtadapter.constants import ParamType, ResultShape
from stmtadapter.exceptions import InvalidColumnIndexError
from stmtadapter.exceptions import InvalidFetchArgumentError
from stmtadapter.exceptions import UnsupportedFetchModeError
from stmtadapter.interface import ErrorInfo, StatementInterface
from stmtadapter.native import NativeResult, NativeStatement
from stmtadapter.native import get_native_statement
from stmtadapter.options import AdapterOptions
from stmtadapter.utils import resolve_class, to_python_scalar

logger = logging.getLogger(__name__)

__all__ = ['BoundParameter', 'StatementAdapter', 'prepare']

# End of data marker used internally so a column value of False is not
# mistaken for exhaustion.
_END = object()

_RESULT_SHAPES = {
    FetchMode.BOTH: ResultShape.BOTH,
    FetchMode.ASSOC: ResultShape.ASSOC,
    FetchMode.NUM: ResultShape.NUM,
}


@dataclass(frozen=True)
class BoundParameter:
    """Value bound to one placeholder, already translated to a wire code."""
    parameter: int | str
    value: Any
    data_type: int
    bind_type: str


def translate_parameter(value: Any, data_type: ParamType | int) -> tuple[str, Any]:
    """Map a declared parameter type onto the native wire type codes.

    BOOL, NULL and INT bind as integers. Any other declared type binds as
    a double when the value is a float and as a string otherwise.
    """
    value = to_python_scalar(value)
    if data_type == ParamType.BOOL:
        return BindType.INTEGER, 1 if value else 0
    if data_type == ParamType.NULL:
        return BindType.INTEGER, None
    if data_type == ParamType.INT:
        return BindType.INTEGER, value
    if isinstance(value, float):
        return BindType.DOUBLE, value
    return BindType.STRING, value


def dumpsql(func):
    """Decorator for logging statement execution."""
    @wraps(func)
    def wrapper(self: 'StatementAdapter', *args: Any, **kwargs: Any) -> bool:
        log_sql = self.options.log_sql
        start = time.time()
        if log_sql:
            logger.debug(f'SQL:\n{self.sql}\ntypes: {self.bind_types!r} '
                         f'values: {self.bind_values} input: {args or kwargs}')
        try:
            result = func(self, *args, **kwargs)
            if not result:
                logger.warning(f'Statement failed: {self.error_info()}\nSQL:\n{self.sql}')
            return result
        finally:
            if log_sql:
                logger.debug(f'Query time: {time.time() - start:.4f}s')
    return wrapper


class StatementAdapter(StatementInterface):
    """StatementInterface implementation wrapping one native statement.

    Not safe for concurrent use; use one adapter per statement and thread.
    """

    def __init__(self, statement: NativeStatement,
                 options: AdapterOptions | None = None) -> None:
        """Initialize adapter.

        Args:
            statement: Native prepared statement to wrap
            options: Initial fetch configuration and logging options
        """
        self._result: NativeResult | None = None
        self._statement = statement
        self.options = options or AdapterOptions()
        self._fetch_mode: Any = self.options.fetch_mode
        self._fetch_argument: Any = self.options.fetch_argument
        self._ctor_args: Any = self.options.ctor_args
        self._parameters: list[BoundParameter] = []

    def __del__(self) -> None:
        self.close()

    def __enter__(self) -> 'StatementAdapter':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self._statement!r})'

    @property
    def statement(self) -> NativeStatement:
        """The wrapped native statement."""
        return self._statement

    @property
    def sql(self) -> str | None:
        return getattr(self._statement, 'sql', None)

    @property
    def parameters(self) -> tuple[BoundParameter, ...]:
        """Bound parameters in binding order."""
        return tuple(self._parameters)

    @property
    def bind_types(self) -> str:
        """Native type signature of the bound parameters."""
        return ''.join(p.bind_type for p in self._parameters)

    @property
    def bind_values(self) -> list[Any]:
        return [p.value for p in self._parameters]

    @property
    def fetch_configuration(self) -> tuple[Any, Any, Any]:
        """Current (mode, argument, constructor arguments) defaults."""
        return self._fetch_mode, self._fetch_argument, self._ctor_args

    def close(self) -> None:
        """Free the active result, if any."""
        result, self._result = self._result, None
        if result is not None:
            result.free()

    def bind_value(self, parameter: int | str, value: Any,
                   data_type: ParamType | int = ParamType.STR) -> bool:
        """Bind a value for the next execution.

        Binding the same parameter again replaces its value and keeps its
        position; new parameters are appended in binding order.
        """
        bind_type, bind_value = translate_parameter(value, data_type)
        bound = BoundParameter(parameter, bind_value, data_type, bind_type)
        logger.debug(f'Bind {parameter!r} as {bind_type!r}: {bind_value!r}')
        for i, existing in enumerate(self._parameters):
            if existing.parameter == parameter:
                self._parameters[i] = bound
                break
        else:
            self._parameters.append(bound)
        return True

    bind = bind_value

    @dumpsql
    def execute(self, input_parameters: Sequence | Mapping | None = None) -> bool:
        """Bind and execute the native statement.

        Input parameters bind as strings after the values from bind_value().
        A mapping of input parameters with nothing bound by bind_value() is
        bound by name, for SQL with named placeholders. Binding is skipped
        when there is nothing to bind. On success the new result replaces
        (and frees) the previous one; on failure the previous result is kept.
        """
        if isinstance(input_parameters, Mapping) and not self._parameters:
            if not self._bind_named(input_parameters):
                return False
        elif not self._bind_positional(input_parameters):
            return False

        if not self._statement.execute():
            return False

        self._replace_result(self._statement.get_result())
        return True

    def _bind_named(self, input_parameters: Mapping) -> bool:
        if not input_parameters:
            return True
        named = {key: to_python_scalar(value) for key, value in input_parameters.items()}
        return self._statement.bind_param_map(BindType.STRING * len(named), named)

    def _bind_positional(self, input_parameters: Sequence | Mapping | None) -> bool:
        types = self.bind_types
        values = self.bind_values

        if input_parameters is not None:
            if isinstance(input_parameters, Mapping):
                inputs = list(input_parameters.values())
            else:
                inputs = list(input_parameters)
            types += BindType.STRING * len(inputs)
            # Inputs follow the bound values so each value lines up with its type code
            values.extend(to_python_scalar(v) for v in inputs)

        if not types:
            return True
        return self._statement.bind_param(types, *values)

    def fetch(self, mode: FetchMode | int | None = None,
              arg1: Any = None, arg2: Any = None) -> Any:
        """Fetch the next row.

        Args:
            mode: Fetch mode, defaults to the configured mode
            arg1: Class, dotted class path or builtin class name for CLASS,
                column index for COLUMN
            arg2: Constructor arguments for CLASS

        Returns
            The row in the requested shape, or False at end of data. A
            COLUMN index outside the row also reads as end of data.
        """
        row = self._fetch_one(mode, arg1, arg2)
        if row is _END:
            return False
        return row

    def fetch_all(self, mode: FetchMode | int | None = None,
                  arg1: Any = None, arg2: Any = None) -> list:
        """Fetch all remaining rows.

        Unlike fetch(), a COLUMN index missing from any row raises
        InvalidColumnIndexError.
        """
        if self._result is None:
            return []

        mode = self._resolve_mode(mode)

        if mode in _RESULT_SHAPES:
            return self._result.fetch_all(_RESULT_SHAPES[mode])

        if mode == FetchMode.CLASS:
            cls, ctor_args = self._class_arguments(arg1, arg2)
            rows = []
            while True:
                row = self._result.fetch_object(cls, ctor_args)
                if row is None:
                    break
                rows.append(row)
            return rows

        index = self._column_index(arg1)
        columns = []
        for row in self._result.fetch_all(ResultShape.NUM):
            if not 0 <= index < len(row):
                raise InvalidColumnIndexError(f'Invalid column index {index} '
                                              f'for row with {len(row)} columns')
            columns.append(row[index])
        return columns

    def fetch_column(self, index: int = 0) -> Any:
        """Fetch a single column of the next row, or False at end of data."""
        if self._result is None:
            return False
        value = self._fetch_column_value(to_python_scalar(index))
        if value is _END:
            return False
        return value

    def set_fetch_mode(self, mode: FetchMode | int,
                       arg1: Any = None, arg2: Any = None) -> bool:
        """Replace the default fetch mode and its arguments.

        The mode is checked when a fetch uses it, not here. For CLASS, arg1
        is a class, a dotted path ('package.module.Point') or a builtin
        class name, and arg2 the constructor arguments.
        """
        self._fetch_mode = mode
        self._fetch_argument = arg1
        self._ctor_args = arg2
        return True

    def row_count(self) -> int:
        return self._statement.affected_rows

    def error_code(self) -> str:
        return self._statement.sqlstate

    def error_info(self) -> ErrorInfo:
        return ErrorInfo(self._statement.sqlstate,
                         self._statement.errno,
                         self._statement.error)

    def __iter__(self) -> Iterator[Any]:
        """Yield the remaining rows with the configured fetch mode.

        Single pass: once exhausted, iterating again yields nothing until
        the statement is executed again.
        """
        while True:
            row = self._fetch_one()
            if row is _END:
                return
            yield row

    def _replace_result(self, result: NativeResult | None) -> None:
        previous, self._result = self._result, result
        if previous is not None and previous is not result:
            previous.free()

    def _fetch_one(self, mode: FetchMode | int | None = None,
                   arg1: Any = None, arg2: Any = None) -> Any:
        if self._result is None:
            return _END

        mode = self._resolve_mode(mode)

        if mode in _RESULT_SHAPES:
            row = self._result.fetch_array(_RESULT_SHAPES[mode])
        elif mode == FetchMode.CLASS:
            cls, ctor_args = self._class_arguments(arg1, arg2)
            row = self._result.fetch_object(cls, ctor_args)
        else:
            return self._fetch_column_value(self._column_index(arg1))

        if row is None:
            return _END
        return row

    def _fetch_column_value(self, index: int) -> Any:
        row = self._result.fetch_array(ResultShape.NUM)
        if row is None:
            return _END
        if not 0 <= index < len(row):
            return _END
        return row[index]

    def _resolve_mode(self, mode: FetchMode | int | None) -> FetchMode:
        if mode is None:
            mode = self._fetch_mode
        try:
            mode = FetchMode(mode)
        except ValueError:
            raise UnsupportedFetchModeError(f'Unsupported fetch mode, got {mode!r}') from None
        if mode not in SUPPORTED_FETCH_MODES:
            raise UnsupportedFetchModeError(f'Unsupported fetch mode, got {mode.name}')
        return mode

    def _class_arguments(self, arg1: Any, arg2: Any) -> tuple[type | None, Any]:
        cls = arg1 if arg1 is not None else self._fetch_argument
        ctor_args = arg2 if arg2 is not None else self._ctor_args
        if cls is None:
            return None, ctor_args
        try:
            return resolve_class(cls), ctor_args
        except ValueError as err:
            raise InvalidFetchArgumentError(str(err)) from err

    def _column_index(self, arg1: Any) -> int:
        index = arg1 if arg1 is not None else self._fetch_argument
        if index is None:
            return 0
        index = to_python_scalar(index)
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidFetchArgumentError(f'Column index must be an integer, got {index!r}')
        return index


def prepare(connection: Any, sql: str,
            options: AdapterOptions | Mapping[str, Any] | None = None,
            **kw: Any) -> StatementAdapter:
    """Prepare a statement on an open connection.

    Args:
        connection: DBAPI connection (or a wrapper exposing one)
        sql: Statement text in the connection's own placeholder style
        options: AdapterOptions object or dictionary of options
        **kw: Additional keyword arguments to override options

    Returns
        StatementAdapter wrapping the native statement for the connection's dialect
    """
    if options is None:
        options = AdapterOptions(**kw)
    elif isinstance(options, Mapping):
        options = AdapterOptions(**{**options, **kw})
    elif kw:
        options = dataclasses.replace(options, **kw)

    statement = get_native_statement(connection, sql)
    logger.debug(f'Prepared {statement!r}')
    return StatementAdapter(statement, options)
