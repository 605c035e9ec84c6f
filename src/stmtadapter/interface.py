"""
The statement interface client code is written against.

StatementInterface fixes the method contracts; StatementAdapter satisfies
them on top of a native driver. Two failure channels are part of the
contract and are kept apart:

- "no data" is reported with the False sentinel (or an empty list),
- caller misuse (an unsupported fetch mode, a bad fetch argument) raises.
"""
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping, Sequence
from typing import Any, NamedTuple

from stmtadapter.constants import FetchMode, ParamType


class ErrorInfo(NamedTuple):
    """Last error of the native statement."""
    sqlstate: str
    code: int
    message: str


class StatementInterface(ABC):
    """Prepared statement with typed binding and configurable fetch modes.
    """

    @abstractmethod
    def bind_value(self, parameter: int | str, value: Any,
                   data_type: ParamType | int = ParamType.STR) -> bool:
        """Bind a value to a placeholder for the next execution."""

    @abstractmethod
    def execute(self, input_parameters: Sequence | Mapping | None = None) -> bool:
        """Execute the statement. Returns False on failure; see error_info()."""

    @abstractmethod
    def fetch(self, mode: FetchMode | int | None = None,
              arg1: Any = None, arg2: Any = None) -> Any:
        """Fetch the next row, or False when there is none."""

    @abstractmethod
    def fetch_all(self, mode: FetchMode | int | None = None,
                  arg1: Any = None, arg2: Any = None) -> list:
        """Fetch all remaining rows."""

    @abstractmethod
    def fetch_column(self, index: int = 0) -> Any:
        """Fetch one column of the next row, or False when there is none."""

    @abstractmethod
    def set_fetch_mode(self, mode: FetchMode | int,
                       arg1: Any = None, arg2: Any = None) -> bool:
        """Set the default fetch mode for subsequent fetches."""

    @abstractmethod
    def row_count(self) -> int:
        """Number of rows affected by the last execution."""

    @abstractmethod
    def error_code(self) -> str:
        """SQLSTATE of the last operation."""

    @abstractmethod
    def error_info(self) -> ErrorInfo:
        """SQLSTATE, driver error code and message of the last operation."""

    @abstractmethod
    def __iter__(self) -> Iterator[Any]:
        """Iterate the remaining rows under the current fetch mode."""
