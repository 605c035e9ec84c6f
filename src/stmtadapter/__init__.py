"""
Statement adapter giving native prepared statements a richer interface.

Client code written against StatementInterface (typed bind_value(),
fetch modes, fetch_all(), fetch_column(), error_info()) runs unmodified
on top of a native driver statement:

    stmt = stmtadapter.prepare(cn, 'select id, name from users where id = ?')
    stmt.bind_value(1, 42, ParamType.INT)
    stmt.execute()
    row = stmt.fetch(FetchMode.ASSOC)
"""
__version__ = '0.1.0'

from stmtadapter.adapter import BoundParameter, StatementAdapter, prepare
from stmtadapter.constants import BindType, FetchMode, ParamType, ResultShape
from stmtadapter.exceptions import DatabaseError, InvalidColumnIndexError
from stmtadapter.exceptions import InvalidFetchArgumentError, ResultClosedError
from stmtadapter.exceptions import UnsupportedDriverError
from stmtadapter.exceptions import UnsupportedFetchModeError
from stmtadapter.interface import ErrorInfo, StatementInterface
from stmtadapter.native import DbapiResult, DbapiStatement, NativeResult
from stmtadapter.native import NativeStatement, PostgresStatement
from stmtadapter.native import SqliteStatement, get_native_statement
from stmtadapter.native import register_driver
from stmtadapter.options import AdapterOptions

__all__ = [
    'prepare',
    'StatementAdapter',
    'StatementInterface',
    'BoundParameter',
    'ErrorInfo',
    'AdapterOptions',
    'FetchMode',
    'ParamType',
    'BindType',
    'ResultShape',
    'NativeStatement',
    'NativeResult',
    'DbapiStatement',
    'DbapiResult',
    'SqliteStatement',
    'PostgresStatement',
    'get_native_statement',
    'register_driver',
    'DatabaseError',
    'InvalidFetchArgumentError',
    'UnsupportedFetchModeError',
    'InvalidColumnIndexError',
    'ResultClosedError',
    'UnsupportedDriverError',
]
